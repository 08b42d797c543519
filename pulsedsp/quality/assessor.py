"""
Quality Assessor
================

Scores a processed segment with one configured strategy per metric and
decides whether the segment is usable.

A segment is valid when all three hold (thresholds configurable):

    clipping_percentage   < max_clipping_pct   (5.0)
    motion_artifact_score < max_motion_score   (20.0)
    snr                   > min_snr_db         (5.0)

The verdict is computed on unrounded values; only the public
QualityMetrics.to_dict() form is rounded to one decimal.

Usage Example:
    ```python
    from pulsedsp.quality import QualityAssessor

    assessor = QualityAssessor({'clipping_method': 'range_band'})
    metrics = assessor.assess(cleaned, detrended, clipping_source=raw)
    metrics.valid_segment
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, Any, Optional, Callable
import logging

import numpy as np

from pulsedsp.core.config import get_config
from pulsedsp.core.registry import get_registry
from pulsedsp.core.types import QualityMetrics
from pulsedsp.utils.validation import check_range

# Importing the strategies registers them
from pulsedsp.quality import metrics as _metrics  # noqa: F401


logger = logging.getLogger(__name__)

# Config key holding the threshold for each built-in clipping strategy
_CLIPPING_THRESHOLD_KEYS = {
    'peak_fraction': 'peak_fraction_threshold',
    'range_band': 'range_band_threshold',
}


class QualityAssessor:
    """
    Configurable quality scorer.

    Attributes:
        snr_method (str): Registered snr_estimator name
        clipping_method (str): Registered clipping_detector name
        motion_method (str): Registered motion_detector name
        max_clipping_pct (float): Clipping limit for a valid segment
        max_motion_score (float): Motion limit for a valid segment
        min_snr_db (float): SNR floor for a valid segment
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.initialize(config or {})

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Resolve strategies and thresholds.

        Missing keys fall back to the global 'quality' configuration
        section.

        Args:
            config: Dict shaped like the 'quality' configuration section

        Raises:
            ComponentNotFoundError: If a method name is not registered
            ValueError: If a threshold is out of range
        """
        settings = get_config().get_section('quality')
        settings.update({k: v for k, v in config.items() if k != 'thresholds'})
        thresholds = {**settings.get('thresholds', {}), **config.get('thresholds', {})}

        self.snr_method = settings.get('snr_method', 'residual')
        self.clipping_method = settings.get('clipping_method', 'peak_fraction')
        self.motion_method = settings.get('motion_method', 'difference_std')
        self.epsilon = float(settings.get('epsilon', 1e-10))

        self.max_clipping_pct = float(thresholds.get('max_clipping_pct', 5.0))
        self.max_motion_score = float(thresholds.get('max_motion_score', 20.0))
        self.min_snr_db = float(thresholds.get('min_snr_db', 5.0))

        check_range(self.max_clipping_pct, 0.0, 100.0, name='max_clipping_pct')
        check_range(self.max_motion_score, min_val=0.0, name='max_motion_score')

        registry = get_registry()
        self._snr: Callable = registry.create('snr_estimator', self.snr_method)
        self._clipping: Callable = registry.create('clipping_detector', self.clipping_method)
        self._motion: Callable = registry.create('motion_detector', self.motion_method)

        self._clipping_kwargs: Dict[str, float] = {}
        threshold_key = _CLIPPING_THRESHOLD_KEYS.get(self.clipping_method)
        if threshold_key and threshold_key in settings:
            self._clipping_kwargs['threshold'] = float(settings[threshold_key])

        logger.debug(
            f"QualityAssessor initialized: snr={self.snr_method}, "
            f"clipping={self.clipping_method}, motion={self.motion_method}"
        )

    # =========================================================================
    # INDIVIDUAL METRICS
    # =========================================================================

    def snr(self, clean: np.ndarray, reference: np.ndarray) -> float:
        return float(self._snr(clean, reference, epsilon=self.epsilon))

    def clipping_percentage(self, signal: np.ndarray) -> float:
        return float(self._clipping(signal, **self._clipping_kwargs))

    def motion_artifact_score(self, signal: np.ndarray) -> float:
        return float(self._motion(signal))

    def valid_segment(self, clipping: float, motion: float, snr: float) -> bool:
        """Apply the usability thresholds to unrounded metric values."""
        return bool(
            clipping < self.max_clipping_pct
            and motion < self.max_motion_score
            and snr > self.min_snr_db
        )

    # =========================================================================
    # FULL ASSESSMENT
    # =========================================================================

    def assess(self,
               clean: np.ndarray,
               reference: np.ndarray,
               clipping_source: Optional[np.ndarray] = None,
               motion_source: Optional[np.ndarray] = None) -> QualityMetrics:
        """
        Compute all metrics for one segment.

        Args:
            clean: Cleaned signal (SNR numerator)
            reference: Reference for the SNR strategy
            clipping_source: Signal checked for clipping (default: clean)
            motion_source: Signal checked for motion (default: clean)

        Returns:
            Unrounded QualityMetrics
        """
        snr = self.snr(clean, reference)
        clipping = self.clipping_percentage(
            clean if clipping_source is None else clipping_source
        )
        motion = self.motion_artifact_score(
            clean if motion_source is None else motion_source
        )

        metrics = QualityMetrics(
            snr=snr,
            clipping_percentage=clipping,
            motion_artifact_score=motion,
            valid_segment=self.valid_segment(clipping, motion, snr)
        )

        logger.debug(
            f"Quality: snr={snr:.2f} dB, clipping={clipping:.2f}%, "
            f"motion={motion:.3f}, valid={metrics.valid_segment}"
        )
        return metrics

    def __repr__(self) -> str:
        return (
            f"QualityAssessor(snr={self.snr_method}, clipping={self.clipping_method}, "
            f"motion={self.motion_method})"
        )
