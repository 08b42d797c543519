"""
IPreprocessor Interface
=======================

Contract for one stage of the PPG cleaning chain.

A step receives a 1D float array and returns a NEW array of the same
length; it never writes into its input. Steps are configured once via
initialize() and afterwards behave as pure functions of their input, so
a single instance may be reused across requests.

Implementations: Detrend, OutlierSuppression, BandpassFilter,
Normalization (pulsedsp.preprocessing.steps).

Author: PulseDSP
Date: 2024
"""

from abc import ABC, abstractmethod
from typing import Dict, Any

import numpy as np


class IPreprocessor(ABC):
    """Abstract base for preprocessing steps."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry / default stage name, e.g. 'detrend'."""

    @abstractmethod
    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Apply settings. Keys a step does not know are ignored, since the
        pipeline hands every step the same shared settings.

        Raises:
            ValueError: If a setting the step needs is missing or invalid
        """

    @abstractmethod
    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """
        Transform a 1D sample array.

        Returns:
            New array, same length as data
        """

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        """Current settings as a plain dict."""

    @abstractmethod
    def set_params(self, **params) -> 'IPreprocessor':
        """
        Update settings by keyword.

        Raises:
            ValueError: If a keyword is not a known parameter
        """

    def validate_input(self, data: np.ndarray) -> None:
        """
        Raises:
            ValueError: Unless data is a 1D numpy array
        """
        if not isinstance(data, np.ndarray) or data.ndim != 1:
            shape = getattr(data, 'shape', type(data).__name__)
            raise ValueError(f"Expected 1D array of samples, got {shape}")

    def __call__(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """Shorthand for process()."""
        return self.process(data, **kwargs)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.get_params().items())
        return f"{self.__class__.__name__}({params})"
