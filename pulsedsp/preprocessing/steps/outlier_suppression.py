"""
Outlier Suppression Preprocessor
================================

Replaces isolated spikes with the signal mean.

A sample is an outlier when its z-score exceeds the threshold:

    |x - mean| / std > threshold

using the population standard deviation. Outliers are replaced by the
mean computed before any replacement, so the output length always
equals the input length.

Note that for n samples the largest attainable |z| is sqrt(n - 1); a
five-sample window can never exceed a threshold of 3.

Usage Example:
    ```python
    from pulsedsp.preprocessing.steps import suppress_outliers

    cleaned = suppress_outliers([0.0] * 19 + [100.0])
    cleaned[-1]   # 5.0, the pre-suppression mean
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, Any
import numpy as np
import logging

from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor
from pulsedsp.core.registry import registered


# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 3.0


def suppress_outliers(signal: np.ndarray, threshold: float = DEFAULT_THRESHOLD) -> np.ndarray:
    """
    Replace samples with |z| > threshold by the mean.

    Args:
        signal: 1D samples
        threshold: z-score limit (> 0)

    Returns:
        New array with the same length as the input. A zero or
        non-finite standard deviation means there are no outliers.
    """
    x = np.array(signal, dtype=np.float64)
    if len(x) == 0:
        return x

    mean = x.mean()
    std = x.std()
    if std == 0 or not np.isfinite(std):
        return x

    outliers = np.abs(x - mean) / std > threshold
    count = int(np.count_nonzero(outliers))
    if count:
        x[outliers] = mean
        logger.debug(f"Replaced {count}/{len(x)} outlier samples (threshold={threshold})")

    return x


@registered('preprocessor', 'outlier_suppression', {
    'description': 'Replace samples beyond a z-score threshold with the mean'
})
class OutlierSuppression(IPreprocessor):
    """
    Pipeline step wrapping suppress_outliers().

    Attributes:
        _threshold (float): z-score limit
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self._threshold: float = float(threshold)
        self._is_initialized: bool = False
        logger.debug("OutlierSuppression preprocessor instantiated")

    @property
    def name(self) -> str:
        return "outlier_suppression"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize with configuration.

        Args:
            config: Optional 'threshold' key (default 3.0)

        Raises:
            ValueError: If threshold is not positive
        """
        self._threshold = float(config.get('threshold', self._threshold))
        self._validate_parameters()
        self._is_initialized = True
        logger.debug(f"OutlierSuppression initialized: threshold={self._threshold}")

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        if not self._is_initialized:
            raise RuntimeError(
                "OutlierSuppression not initialized. Call initialize() first."
            )
        self.validate_input(data)
        return suppress_outliers(data, self._threshold)

    def get_params(self) -> Dict[str, Any]:
        return {'threshold': self._threshold}

    def set_params(self, **params) -> 'OutlierSuppression':
        unknown = set(params) - {'threshold'}
        if unknown:
            raise ValueError(f"Unknown parameters: {sorted(unknown)}")
        if 'threshold' in params:
            self._threshold = float(params['threshold'])
            self._validate_parameters()
        return self

    def _validate_parameters(self) -> None:
        if not np.isfinite(self._threshold) or self._threshold <= 0:
            raise ValueError(f"threshold must be positive, got {self._threshold}")
