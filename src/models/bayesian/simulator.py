"""
Fake-data simulation from the Stan data-generating programs

Runs a model's `_dgp.stan` program once with `fixed_param=True` to draw
parameters from their priors and complaints from the likelihood. Fitting the
regression to this fake data and checking that the drawn parameters are
recovered is the first step before touching the real data.
"""
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Dict, Optional

from cmdstanpy import CmdStanModel

from src.data.loader import building_design_matrix
from src.models.bayesian.count_regression import DEFAULT_BUILDING_COVARIATES
from src.models.bayesian.specs import get_model_spec, resolve_stan_file


@dataclass
class SimulatedDataset:
    """One fake dataset and the parameter values that generated it."""
    data: pd.DataFrame
    true_params: Dict[str, float]
    seed: Optional[int] = None


class FakeDataSimulator:
    """Draw fake complaints data from a model's DGP program."""

    def __init__(self, model_name: str, config: Optional[Dict] = None):
        self.spec = get_model_spec(model_name)
        if self.spec.dgp_file is None:
            raise ValueError(f"Model '{model_name}' has no data-generating program")
        self.name = model_name
        self.config = config or {}
        self.stan_dir = self.config.get('stan_dir')
        self.building_covariates = list(
            self.config.get('building_covariates', DEFAULT_BUILDING_COVARIATES)
        )
        self.covariate_scales = dict(self.config.get('covariate_scales', {}))
        self.model_ = None

    def _compile(self) -> CmdStanModel:
        if self.model_ is None:
            stan_file = resolve_stan_file(self.spec.dgp_file, self.stan_dir)
            print(f"Compiling DGP model from {stan_file}...")
            self.model_ = CmdStanModel(stan_file=str(stan_file))
        return self.model_

    def build_dgp_data(
        self,
        df: Optional[pd.DataFrame] = None,
        n: Optional[int] = None,
        mean_traps: Optional[float] = None
    ) -> Dict:
        """
        Data block for the DGP program.

        Covariates other than traps are taken from `df` so the fake data has
        the same design as the real data. Hierarchical programs also get the
        building index and the building design matrix (`J`, `K`,
        `building_idx`, `building_data`). `mean_traps` defaults to the mean in
        `df`.
        """
        if df is None and n is None:
            raise ValueError("Provide either a template DataFrame or n")
        if df is None and mean_traps is None:
            raise ValueError("mean_traps is required when no template DataFrame is given")

        N = int(len(df)) if df is not None else int(n)
        if N < 1:
            raise ValueError("Need at least one observation to simulate")
        if mean_traps is None:
            mean_traps = float(df['traps'].mean())

        dgp_data = {'N': N, 'mean_traps': float(mean_traps)}
        for field_name in self.spec.data_fields:
            if field_name == 'traps':
                continue
            if df is None:
                raise ValueError(f"DGP for '{self.name}' needs a template DataFrame for '{field_name}'")
            if field_name == 'building_data':
                building_df = building_design_matrix(
                    df, self.building_covariates, self.covariate_scales
                )
                dgp_data['J'] = int(len(building_df))
                dgp_data['K'] = int(building_df.shape[1])
                dgp_data['building_data'] = building_df.to_numpy()
            elif field_name == 'building_idx':
                if 'building_idx' not in df.columns:
                    raise ValueError("Missing 'building_idx'; call prepare_pest_data() first")
                dgp_data['building_idx'] = df['building_idx'].astype(int).to_numpy()
            else:
                if field_name not in df.columns:
                    raise ValueError(f"DGP for '{self.name}' needs column '{field_name}'")
                dgp_data[field_name] = df[field_name].astype(float).to_numpy()
        return dgp_data

    def simulate(
        self,
        df: Optional[pd.DataFrame] = None,
        n: Optional[int] = None,
        mean_traps: Optional[float] = None,
        seed: Optional[int] = None
    ) -> SimulatedDataset:
        """
        Draw one fake dataset.

        Returns:
            SimulatedDataset whose `data` holds traps, complaints and the
            template covariates, and whose `true_params` holds the drawn
            parameter values.
            Vector parameters are flattened to `name[k]` entries.
        """
        dgp_data = self.build_dgp_data(df, n=n, mean_traps=mean_traps)
        model = self._compile()

        fit = model.sample(
            data=dgp_data,
            fixed_param=True,
            chains=1,
            iter_sampling=1,
            seed=seed,
            show_progress=False,
        )

        traps = np.asarray(fit.stan_variable('traps')).reshape(-1)
        complaints = np.asarray(fit.stan_variable('complaints')).reshape(-1)

        if df is not None:
            fake = df.copy().reset_index(drop=True)
        else:
            fake = pd.DataFrame(index=range(dgp_data['N']))
        fake['traps'] = traps.astype(int)
        fake['complaints'] = complaints.astype(int)

        true_params = {}
        for name in self.spec.dgp_params:
            value = np.asarray(fit.stan_variable(name))
            if value.ndim <= 1:
                true_params[name] = float(value.reshape(-1)[0])
            else:
                # Vector parameters, one draw: shape (1, K)
                for k, element in enumerate(value[0]):
                    true_params[f"{name}[{k + 1}]"] = float(element)
        return SimulatedDataset(data=fake, true_params=true_params, seed=seed)
