"""
Model registry

Each entry names a Stan program under `stan_models/`, the likelihood family,
the data fields the program reads, and the parameters worth watching in
diagnostics. The order of MODEL_SPECS is the order the workflow refines them.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from src.config import get_project_root


@dataclass(frozen=True)
class ModelSpec:
    """Static description of one Stan model in the workflow."""
    name: str
    stan_file: str
    family: str
    description: str
    data_fields: Tuple[str, ...]
    key_params: Tuple[str, ...]
    dgp_file: Optional[str] = None
    dgp_params: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def hierarchical(self) -> bool:
        return 'building_data' in self.data_fields

    @property
    def overdispersed(self) -> bool:
        return self.family == 'neg_binomial'


_HIER_FIELDS = ('traps', 'log_sq_foot', 'building_idx', 'building_data')
# Centered and non-centered fits share one simulator
_HIER_DGP_PARAMS = ('alpha', 'beta', 'sigma_mu', 'phi', 'zeta', 'mu')

MODEL_SPECS: Dict[str, ModelSpec] = {
    'simple_poisson': ModelSpec(
        name='simple_poisson',
        stan_file='simple_poisson_regression.stan',
        family='poisson',
        description='Poisson regression of complaints on traps',
        data_fields=('traps',),
        key_params=('alpha', 'beta'),
        dgp_file='simple_poisson_regression_dgp.stan',
        dgp_params=('alpha', 'beta'),
    ),
    'multiple_poisson': ModelSpec(
        name='multiple_poisson',
        stan_file='multiple_poisson_regression.stan',
        family='poisson',
        description='Poisson regression with live-in super and log square footage offset',
        data_fields=('traps', 'live_in_super', 'log_sq_foot'),
        key_params=('alpha', 'beta', 'beta_super'),
        dgp_file='multiple_poisson_regression_dgp.stan',
        dgp_params=('alpha', 'beta', 'beta_super'),
    ),
    'multiple_nb': ModelSpec(
        name='multiple_nb',
        stan_file='multiple_NB_regression.stan',
        family='neg_binomial',
        description='Negative binomial regression with live-in super and offset',
        data_fields=('traps', 'live_in_super', 'log_sq_foot'),
        key_params=('alpha', 'beta', 'beta_super', 'phi'),
        dgp_file='multiple_NB_regression_dgp.stan',
        dgp_params=('alpha', 'beta', 'beta_super', 'phi'),
    ),
    'hier_nb': ModelSpec(
        name='hier_nb',
        stan_file='hier_NB_regression.stan',
        family='neg_binomial',
        description='Hierarchical NB, varying building intercepts (centered)',
        data_fields=_HIER_FIELDS,
        key_params=('alpha', 'beta', 'sigma_mu', 'phi', 'zeta', 'mu'),
        dgp_file='hier_NB_regression_ncp_dgp.stan',
        dgp_params=_HIER_DGP_PARAMS,
    ),
    'hier_nb_ncp': ModelSpec(
        name='hier_nb_ncp',
        stan_file='hier_NB_regression_ncp.stan',
        family='neg_binomial',
        description='Hierarchical NB, varying building intercepts (non-centered)',
        data_fields=_HIER_FIELDS,
        key_params=('alpha', 'beta', 'sigma_mu', 'phi', 'zeta', 'mu'),
        dgp_file='hier_NB_regression_ncp_dgp.stan',
        dgp_params=_HIER_DGP_PARAMS,
    ),
    'hier_nb_ncp_slopes': ModelSpec(
        name='hier_nb_ncp_slopes',
        stan_file='hier_NB_regression_ncp_slopes.stan',
        family='neg_binomial',
        description='Hierarchical NB, varying intercepts and trap slopes (non-centered)',
        data_fields=_HIER_FIELDS,
        key_params=('alpha', 'beta', 'sigma_mu', 'sigma_kappa', 'phi', 'zeta', 'gamma', 'mu', 'kappa'),
        dgp_file='hier_NB_regression_ncp_slopes_dgp.stan',
        dgp_params=('alpha', 'beta', 'sigma_mu', 'sigma_kappa', 'phi', 'zeta', 'gamma', 'mu', 'kappa'),
    ),
}


def list_models() -> List[str]:
    """Model names in workflow order."""
    return list(MODEL_SPECS.keys())


def get_model_spec(name: str) -> ModelSpec:
    """Look up a model by name."""
    if name not in MODEL_SPECS:
        raise KeyError(f"Unknown model '{name}'. Choose from: {', '.join(list_models())}")
    return MODEL_SPECS[name]


def resolve_stan_file(filename: str, stan_dir: Optional[str] = None) -> Path:
    """
    Locate a Stan program.

    Args:
        filename: Stan file name from a ModelSpec
        stan_dir: Directory override (defaults to <project root>/stan_models)

    Returns:
        Absolute path to an existing file
    """
    base = Path(stan_dir) if stan_dir else get_project_root() / "stan_models"
    path = base / filename
    if not path.exists():
        raise FileNotFoundError(f"Stan model not found at {path}")
    return path
