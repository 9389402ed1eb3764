"""Data loading, validation and synthetic data."""

from src.data.loader import (
    load_pest_data,
    prepare_pest_data,
    validate_pest_data,
    building_design_matrix,
    summarize_pest_data,
    load_and_prepare,
)
from src.data.simulate import simulate_pest_data

__all__ = [
    'load_pest_data',
    'prepare_pest_data',
    'validate_pest_data',
    'building_design_matrix',
    'summarize_pest_data',
    'load_and_prepare',
    'simulate_pest_data',
]
