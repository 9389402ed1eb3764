"""
Bayesian count regressions for cockroach complaints

Poisson and negative binomial regressions of monthly complaints on bait
traps, from the single-predictor Poisson model up to hierarchical NB models
with building-level intercepts and slopes.

Uses Stan for MCMC inference via CmdStanPy. Each model emits a `y_rep`
posterior predictive vector used by the PPCs.
"""
import warnings
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence

from cmdstanpy import CmdStanModel

from src.data.loader import building_design_matrix
from src.evaluation.recovery import flatten_draws
from src.models.bayesian.specs import get_model_spec, resolve_stan_file
from ..base import BaseModel


DEFAULT_BUILDING_COVARIATES = [
    'live_in_super',
    'age_of_building',
    'average_tenant_age',
    'monthly_average_rent',
]


def _first_column(summary: pd.DataFrame, candidates: Sequence[str]) -> Optional[str]:
    """CmdStan renamed summary columns across releases (N_Eff -> ESS_bulk)."""
    for col in candidates:
        if col in summary.columns:
            return col
    return None


def _param_rows(index: pd.Index, param: str) -> List[str]:
    """Summary rows for a scalar `param` or the elements `param[i]`."""
    return [row for row in index if row == param or row.startswith(param + '[')]


class StanCountRegression(BaseModel):
    """
    Poisson / negative binomial regression of complaints on traps.

    The Stan program and its data requirements come from the model registry
    (see specs.py), so one class covers every model in the workflow.
    """

    def __init__(self, model_name: str, config: Optional[Dict] = None):
        super().__init__(name=model_name, config=config)
        self.spec = get_model_spec(model_name)

        config = config or {}
        # MCMC configuration
        self.n_warmup = config.get('n_warmup', 1000)
        self.n_samples = config.get('n_samples', 1000)
        self.n_chains = config.get('n_chains', 4)
        self.adapt_delta = config.get('adapt_delta', 0.8)
        self.seed = config.get('seed', 1234)
        self.show_progress = config.get('show_progress', False)

        # Building-level design for hierarchical models
        self.building_covariates = list(
            config.get('building_covariates', DEFAULT_BUILDING_COVARIATES)
        )
        self.covariate_scales = dict(config.get('covariate_scales', {}))

        self.stan_file = config.get('stan_file')
        self.stan_dir = config.get('stan_dir')

        # Fitted objects
        self.model_ = None
        self.fit_ = None
        self.data_ = None
        self.building_data_ = None

    def get_stan_file(self):
        """Path to this model's Stan program."""
        if self.stan_file:
            return resolve_stan_file(self.stan_file, self.stan_dir)
        return resolve_stan_file(self.spec.stan_file, self.stan_dir)

    def prepare_stan_data(self, df: pd.DataFrame) -> Dict[str, Any]:
        """
        Prepare data dictionary for the Stan program.

        Args:
            df: Prepared building-month table (see prepare_pest_data)

        Returns:
            Dictionary formatted for Stan
        """
        if 'complaints' not in df.columns:
            raise ValueError("DataFrame must contain 'complaints'")
        if len(df) == 0:
            raise ValueError("Cannot fit a model to an empty table")

        stan_data: Dict[str, Any] = {
            'N': int(len(df)),
            'complaints': df['complaints'].astype(int).to_numpy(),
        }

        for field_name in self.spec.data_fields:
            if field_name == 'building_data':
                building_df = building_design_matrix(
                    df, self.building_covariates, self.covariate_scales
                )
                self.building_data_ = building_df
                stan_data['J'] = int(len(building_df))
                stan_data['K'] = int(building_df.shape[1])
                stan_data['building_data'] = building_df.to_numpy()
            elif field_name == 'building_idx':
                if 'building_idx' not in df.columns:
                    raise ValueError("Missing 'building_idx'; call prepare_pest_data() first")
                idx = df['building_idx'].astype(int).to_numpy()
                n_buildings = len(np.unique(idx))
                if idx.min() != 1 or idx.max() != n_buildings:
                    raise ValueError("building_idx must be a dense 1..J index")
                stan_data['building_idx'] = idx
            else:
                if field_name not in df.columns:
                    raise ValueError(
                        f"Model '{self.name}' needs column '{field_name}', not found in data"
                    )
                stan_data[field_name] = df[field_name].astype(float).to_numpy()

        self.data_ = stan_data
        return stan_data

    def fit(self, df: pd.DataFrame) -> 'StanCountRegression':
        """
        Fit the model via MCMC.

        Args:
            df: Prepared building-month table

        Returns:
            self
        """
        stan_file = self.get_stan_file()
        print(f"Compiling Stan model from {stan_file}...")
        self.model_ = CmdStanModel(stan_file=str(stan_file))

        print("Preparing data for Stan...")
        stan_data = self.prepare_stan_data(df)
        if self.spec.hierarchical:
            print(f"Data summary: N={stan_data['N']}, J={stan_data['J']}, K={stan_data['K']}")
        else:
            print(f"Data summary: N={stan_data['N']}")

        print(f"Running MCMC: {self.n_chains} chains, {self.n_warmup} warmup, {self.n_samples} samples...")
        self.fit_ = self.model_.sample(
            data=stan_data,
            chains=self.n_chains,
            parallel_chains=self.n_chains,
            iter_warmup=self.n_warmup,
            iter_sampling=self.n_samples,
            adapt_delta=self.adapt_delta,
            seed=self.seed,
            show_progress=self.show_progress,
        )

        self.is_fitted = True
        return self

    def get_posterior_predictive(self) -> np.ndarray:
        """
        Get posterior predictive samples.

        Returns:
            Array of shape (n_draws, N)
        """
        self._check_fitted()
        return np.asarray(self.fit_.stan_variable('y_rep'))

    def get_observed(self) -> np.ndarray:
        """Observed complaints in the order passed to Stan."""
        self._check_fitted()
        return np.asarray(self.data_['complaints'])

    def get_parameter_draws(self, names: Optional[Sequence[str]] = None) -> Dict[str, np.ndarray]:
        """
        Posterior draws per parameter.

        Args:
            names: Parameters to extract (default: the model's key parameters)

        Returns:
            Dict of arrays, (n_draws,) for scalars and (n_draws, K) for vectors
        """
        self._check_fitted()
        names = list(names) if names is not None else list(self.spec.key_params)
        return {name: np.asarray(self.fit_.stan_variable(name)) for name in names}

    def summarize_parameters(self, prob: float = 0.9) -> pd.DataFrame:
        """
        Posterior mean, sd and central interval for the key parameters.

        Vector parameters are expanded to one row per element (mu[1], ...).
        """
        draws = flatten_draws(self.get_parameter_draws())
        lower_q = (1 - prob) / 2
        rows = []
        for name, values in draws.items():
            rows.append({
                'parameter': name,
                'mean': float(np.mean(values)),
                'sd': float(np.std(values, ddof=1)),
                'lower': float(np.quantile(values, lower_q)),
                'median': float(np.median(values)),
                'upper': float(np.quantile(values, 1 - lower_q)),
            })
        return pd.DataFrame(rows).set_index('parameter')

    def get_diagnostics(self) -> Dict[str, Any]:
        """
        Get MCMC diagnostics.

        Returns:
            Dictionary with R-hat, ESS, divergences, etc.
        """
        self._check_fitted()

        summary = self.fit_.summary()
        # y_rep is discrete; its R-hat/ESS are not meaningful
        summary = summary[~summary.index.str.startswith('y_rep')]
        summary = summary.drop(index='lp__', errors='ignore')

        rhat_col = _first_column(summary, ['R_hat'])
        ess_bulk_col = _first_column(summary, ['ESS_bulk', 'N_Eff'])
        ess_tail_col = _first_column(summary, ['ESS_tail', 'ESS_bulk', 'N_Eff'])

        divergences = self.fit_.divergences
        n_divergences = int(np.sum(divergences)) if divergences is not None else 0
        treedepth_hits = self.fit_.max_treedepths
        n_max_treedepth = int(np.sum(treedepth_hits)) if treedepth_hits is not None else 0

        diagnostics = {
            'n_divergences': n_divergences,
            'n_max_treedepth': n_max_treedepth,
            'max_rhat': float(summary[rhat_col].max()),
            'min_ess_bulk': float(summary[ess_bulk_col].min()),
            'min_ess_tail': float(summary[ess_tail_col].min()),
            'parameter_summary': {}
        }

        for param in self.spec.key_params:
            for row_name in _param_rows(summary.index, param):
                row = summary.loc[row_name]
                diagnostics['parameter_summary'][row_name] = {
                    'mean': float(row['Mean']),
                    'std': float(row['StdDev']),
                    'rhat': float(row[rhat_col]),
                    'ess_bulk': float(row[ess_bulk_col]),
                }

        return diagnostics

    def check_diagnostics(
        self,
        max_rhat: float = 1.05,
        min_ess: float = 100,
        diagnostics: Optional[Dict[str, Any]] = None
    ) -> List[str]:
        """
        Flag sampler problems. Problems are warned about, never raised.

        Returns:
            List of problem descriptions (empty if all checks pass)
        """
        diag = diagnostics or self.get_diagnostics()
        problems = []
        if diag['n_divergences'] > 0:
            problems.append(f"{diag['n_divergences']} divergent transitions")
        if diag['n_max_treedepth'] > 0:
            problems.append(f"{diag['n_max_treedepth']} transitions hit max treedepth")
        if diag['max_rhat'] > max_rhat:
            problems.append(f"R-hat {diag['max_rhat']:.3f} > {max_rhat}")
        if diag['min_ess_bulk'] < min_ess:
            problems.append(f"bulk ESS {diag['min_ess_bulk']:.0f} < {min_ess}")

        for problem in problems:
            warnings.warn(f"[{self.name}] {problem}")
        return problems

    def print_diagnostics(self, max_rhat: float = 1.05, min_ess: float = 100) -> None:
        """Print formatted diagnostics summary."""
        diag = self.get_diagnostics()

        print("\n" + "=" * 50)
        print(f"MCMC DIAGNOSTICS ({self.name})")
        print("=" * 50)

        print(f"\nDivergences: {diag['n_divergences']}")
        print(f"Max treedepth hits: {diag['n_max_treedepth']}")
        print(f"Max R-hat: {diag['max_rhat']:.4f}")
        print(f"Min ESS (bulk): {diag['min_ess_bulk']:.0f}")
        print(f"Min ESS (tail): {diag['min_ess_tail']:.0f}")

        print("\nParameter Estimates:")
        print("-" * 50)
        print(f"{'Parameter':<15} {'Mean':>10} {'Std':>10} {'R-hat':>8} {'ESS':>8}")
        print("-" * 50)

        for param, vals in diag['parameter_summary'].items():
            print(f"{param:<15} {vals['mean']:>10.3f} {vals['std']:>10.3f} "
                  f"{vals['rhat']:>8.3f} {vals['ess_bulk']:>8.0f}")

        print("\n" + "-" * 50)
        problems = self.check_diagnostics(max_rhat=max_rhat, min_ess=min_ess, diagnostics=diag)
        for problem in problems:
            print(f"⚠️  WARNING: {problem}")
        if not problems:
            print("✓ All diagnostics passed")
