"""
Linear Detrend Preprocessor
===========================

Removes slow baseline drift (ambient light changes, sensor warm-up) by
subtracting the least-squares line fitted over the sample index.

The line is solved in closed form from the normal equations:

    slope     = (n * sum(i*y) - sum(i) * sum(y)) / (n * sum(i^2) - sum(i)^2)
    intercept = (sum(y) - slope * sum(i)) / n

The returned residual has (numerically) zero slope and zero mean.

Usage Example:
    ```python
    from pulsedsp.preprocessing.steps import Detrend, detrend

    residual = detrend([1.0, 2.0, 3.0, 4.0])   # ~[0, 0, 0, 0]

    step = Detrend()
    step.initialize({})
    residual = step.process(samples)
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, Any, Tuple
import numpy as np
import logging

from pulsedsp.core.exceptions import DegenerateFit
from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor
from pulsedsp.core.registry import registered


# Configure module logger
logger = logging.getLogger(__name__)


def fit_line(signal: np.ndarray) -> Tuple[float, float]:
    """
    Fit y = slope * i + intercept by least squares over i = 0..n-1.

    Args:
        signal: 1D samples with at least two entries

    Returns:
        Tuple of (slope, intercept)

    Raises:
        DegenerateFit: If the normal-equation denominator is zero
    """
    y = np.asarray(signal, dtype=np.float64)
    n = len(y)
    i = np.arange(n, dtype=np.float64)

    sum_i = i.sum()
    sum_y = y.sum()
    sum_iy = np.dot(i, y)
    sum_ii = np.dot(i, i)

    denominator = n * sum_ii - sum_i * sum_i
    if denominator == 0:
        raise DegenerateFit(f"normal equations singular for n={n}")

    slope = (n * sum_iy - sum_i * sum_y) / denominator
    intercept = (sum_y - slope * sum_i) / n
    return float(slope), float(intercept)


def detrend(signal: np.ndarray) -> np.ndarray:
    """
    Subtract the least-squares line from a signal.

    Sequences shorter than two samples have no defined line and are
    returned unchanged (as a copy).

    Args:
        signal: 1D samples

    Returns:
        New array of residuals, same length as the input
    """
    y = np.array(signal, dtype=np.float64)
    if len(y) < 2:
        return y

    slope, intercept = fit_line(y)
    return y - (slope * np.arange(len(y)) + intercept)


@registered('preprocessor', 'detrend', {
    'description': 'Least-squares linear baseline removal'
})
class Detrend(IPreprocessor):
    """
    Pipeline step wrapping detrend().

    The step has no parameters; initialize() only marks it ready.
    """

    def __init__(self):
        self._is_initialized: bool = False
        logger.debug("Detrend preprocessor instantiated")

    @property
    def name(self) -> str:
        return "detrend"

    def initialize(self, config: Dict[str, Any]) -> None:
        self._is_initialized = True
        logger.debug("Detrend initialized")

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """Return the residual of data after removing its linear trend."""
        if not self._is_initialized:
            raise RuntimeError("Detrend not initialized. Call initialize() first.")
        self.validate_input(data)
        return detrend(data)

    def get_params(self) -> Dict[str, Any]:
        return {}

    def set_params(self, **params) -> 'Detrend':
        if params:
            raise ValueError(f"Detrend has no parameters, got {sorted(params)}")
        return self
