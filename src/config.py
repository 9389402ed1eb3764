"""
Configuration loader for the cockroach complaints workflow.
Loads YAML config and provides typed access to settings.
"""
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from src.common.paths import find_repo_root


DEFAULT_MCMC = {
    'n_warmup': 1000,
    'n_samples': 1000,
    'n_chains': 4,
    'adapt_delta': 0.8,
    'seed': 1234,
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.
    
    Args:
        config_path: Path to config file. Defaults to config/config_default.yaml
        
    Returns:
        Dictionary containing all configuration settings
    """
    if config_path is None:
        config_path = get_project_root() / "config" / "config_default.yaml"
    else:
        config_path = Path(config_path)
    
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    
    return config or {}


def get_project_root() -> Path:
    """Get the project root directory (the one containing `stan_models/`)."""
    return find_repo_root(Path(__file__).parent.parent)


def get_data_path(relative_path: str) -> Path:
    """
    Get absolute path for a data file.
    
    Args:
        relative_path: Path relative to project root (e.g., "data/raw/file.csv")
        
    Returns:
        Absolute Path object
    """
    path = Path(relative_path)
    if path.is_absolute():
        return path
    return get_project_root() / path


def get_mcmc_config(cfg: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    """
    Merge MCMC settings: defaults < config file < explicit overrides.
    
    Overrides set to None are ignored so argparse defaults can be passed
    straight through.
    """
    mcmc = dict(DEFAULT_MCMC)
    mcmc.update(cfg.get('mcmc') or {})
    mcmc.update({k: v for k, v in overrides.items() if v is not None})
    return mcmc
