"""
Display-Range Scaling
=====================

Maps a cleaned trace linearly onto a display interval (0-255 by default):

    scaled = (x - min) / span * (high - low) + low

A flat trace has zero span; the span is then taken as 1, so every sample
lands on ``low`` instead of becoming NaN.

Author: PulseDSP
Date: 2024
"""

from typing import Dict, Any, Sequence, Tuple
import numpy as np
import logging

from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor
from pulsedsp.core.registry import registered

logger = logging.getLogger(__name__)


def min_max_scale(signal: np.ndarray,
                  feature_range: Sequence[float] = (0.0, 255.0)) -> np.ndarray:
    """
    Scale signal so its minimum maps to feature_range[0] and its maximum
    to feature_range[1]. Returns a new array.
    """
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()

    low, high = float(feature_range[0]), float(feature_range[1])
    floor = x.min()
    span = (x.max() - floor) or 1.0
    return (x - floor) / span * (high - low) + low


def _as_range(value: Sequence[float]) -> Tuple[float, float]:
    bounds = tuple(float(v) for v in value)
    if len(bounds) != 2:
        raise ValueError(f"feature_range must have two values, got {len(bounds)}")
    if bounds[0] >= bounds[1]:
        raise ValueError(f"feature_range must be increasing, got {bounds}")
    return bounds


@registered('preprocessor', 'normalization', {
    'description': 'Min-max scaling into a display range'
})
class Normalization(IPreprocessor):
    """Min-max scaling step; setting: feature_range=(low, high)."""

    def __init__(self):
        self._feature_range: Tuple[float, float] = (0.0, 255.0)
        self._ready = False

    @property
    def name(self) -> str:
        return "normalization"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Raises:
            ValueError: If feature_range is not an increasing pair
        """
        self._feature_range = _as_range(config.get('feature_range', self._feature_range))
        self._ready = True
        logger.debug(f"Normalization initialized: feature_range={self._feature_range}")

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        if not self._ready:
            raise RuntimeError("Normalization not initialized. Call initialize() first.")
        self.validate_input(data)
        return min_max_scale(data, self._feature_range)

    def get_params(self) -> Dict[str, Any]:
        return {'feature_range': self._feature_range}

    def set_params(self, **params) -> 'Normalization':
        unknown = sorted(set(params) - {'feature_range'})
        if unknown:
            raise ValueError(f"Unknown parameters: {unknown}")
        if 'feature_range' in params:
            self._feature_range = _as_range(params['feature_range'])
        return self
