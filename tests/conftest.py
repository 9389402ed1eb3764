import numpy as np
import pandas as pd
import pytest

from src.data.loader import prepare_pest_data
from src.data.simulate import simulate_pest_data


@pytest.fixture
def raw_pest_df() -> pd.DataFrame:
    return simulate_pest_data(n_buildings=5, n_months=6, seed=11)


@pytest.fixture
def pest_df(raw_pest_df) -> pd.DataFrame:
    return prepare_pest_data(raw_pest_df)


class FakeFit:
    """Stands in for cmdstanpy.CmdStanMCMC."""

    def __init__(self, variables, summary=None, divergences=None, max_treedepths=None):
        self._variables = variables
        self._summary = summary
        self.divergences = divergences
        self.max_treedepths = max_treedepths

    def stan_variable(self, name):
        if name not in self._variables:
            raise ValueError(f"Unknown variable: {name}")
        return self._variables[name]

    def summary(self):
        return self._summary


class FakeModelFactory:
    """Builds a fake CmdStanModel class whose sample() returns `make_fit(data)`."""

    def __init__(self, make_fit):
        self.make_fit = make_fit
        self.instances = []

    def __call__(self, stan_file=None, **kwargs):
        factory = self

        class _FakeModel:
            def __init__(self):
                self.stan_file = stan_file
                self.sample_kwargs = None

            def sample(self, **sample_kwargs):
                self.sample_kwargs = sample_kwargs
                return factory.make_fit(sample_kwargs['data'])

        model = _FakeModel()
        self.instances.append(model)
        return model


@pytest.fixture
def rng():
    return np.random.default_rng(2024)
