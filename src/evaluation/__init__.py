"""Evaluation module - posterior predictive checks, rootograms, residuals, recovery."""

from src.evaluation.ppc import (
    TEST_STATISTICS,
    valid_draws,
    ppc_test_statistics,
    ppc_statistic_draws,
    ppc_intervals,
    ppc_interval_coverage,
    ppc_grouped_statistic,
)

from src.evaluation.rootogram import compute_rootogram, rootogram_misfit

from src.evaluation.residuals import standardized_residuals, summarize_residuals

from src.evaluation.recovery import (
    flatten_draws,
    check_parameter_recovery,
    recovery_passed,
)

from src.evaluation.compare import (
    build_model_summary,
    save_model_summary,
    load_model_summaries,
    compare_models,
)

__all__ = [
    # PPC module
    'TEST_STATISTICS',
    'valid_draws',
    'ppc_test_statistics',
    'ppc_statistic_draws',
    'ppc_intervals',
    'ppc_interval_coverage',
    'ppc_grouped_statistic',
    # Rootogram module
    'compute_rootogram',
    'rootogram_misfit',
    # Residuals module
    'standardized_residuals',
    'summarize_residuals',
    # Recovery module
    'flatten_draws',
    'check_parameter_recovery',
    'recovery_passed',
    # Comparison module
    'build_model_summary',
    'save_model_summary',
    'load_model_summaries',
    'compare_models',
]
