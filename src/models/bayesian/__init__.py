"""Stan models fit through CmdStanPy."""

from src.models.bayesian.specs import MODEL_SPECS, ModelSpec, get_model_spec, list_models
from src.models.bayesian.count_regression import StanCountRegression
from src.models.bayesian.simulator import FakeDataSimulator, SimulatedDataset

__all__ = [
    'MODEL_SPECS',
    'ModelSpec',
    'get_model_spec',
    'list_models',
    'StanCountRegression',
    'FakeDataSimulator',
    'SimulatedDataset',
]
