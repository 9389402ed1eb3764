# Cockroach Complaints Workflow
"""
Bayesian workflow for monthly cockroach complaints per building.
Poisson and negative binomial regressions of complaints on bait traps, fit in Stan.

Project Structure:
    src/
    ├── common/        - Shared path utilities
    ├── data/          - Data loading, validation and synthetic data
    ├── models/        - Stan model registry, fitting and fake-data simulation
    ├── evaluation/    - PPCs, rootograms, residuals, parameter recovery
    └── visualization/ - Plotting utilities
"""

__version__ = "0.1.0"
__author__ = "Roach Complaints Workflow Team"
