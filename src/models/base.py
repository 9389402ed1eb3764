"""
Base Model Interface for the cockroach complaints workflow

Abstract base class that all fitted models implement.
Ensures a consistent API across the Poisson and negative binomial regressions.
"""
from abc import ABC, abstractmethod
import numpy as np
import pandas as pd
from typing import Dict, Optional


class BaseModel(ABC):
    """Abstract base class for all complaint models."""
    
    def __init__(self, name: str, config: Optional[Dict] = None):
        """
        Initialize model.
        
        Args:
            name: Model identifier
            config: Model-specific configuration
        """
        self.name = name
        self.config = config or {}
        self.is_fitted = False
    
    @abstractmethod
    def fit(self, df: pd.DataFrame) -> 'BaseModel':
        """
        Fit model to a prepared building-month table.
        
        Args:
            df: Output of prepare_pest_data()
            
        Returns:
            self
        """
        pass
    
    @abstractmethod
    def get_posterior_predictive(self) -> np.ndarray:
        """
        Posterior predictive replicates of the complaints.
        
        Returns:
            Array of shape (n_draws, N)
        """
        pass
    
    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise ValueError("Model not fitted. Call fit() first.")
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', fitted={self.is_fitted})"
