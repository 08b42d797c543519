"""
Processing Pipeline
===================

Orchestrates the two public operations of the engine:

1. process(): full PPG cleaning and quality assessment
2. analyze_spectrum(): magnitude spectrum of a supplied sequence

Processing Stages:
-----------------
    validation -> filter_design -> detrend -> outlier_suppression
    -> bandpass -> bandpass_second_pass -> post_filter_outliers
    -> quality -> normalization

Every call builds a fresh step chain (and so fresh IIR filters); nothing
is carried over between calls. Any failure is raised as
SignalProcessingFailed with the stage name attached.

Signals Used For Quality:
------------------------
- SNR:      post-filter signal against the detrended signal
- Clipping: raw input (saturation happens at the sensor)
- Motion:   second bandpass output, before the post-filter clamp

Example Usage:
    ```python
    from pulsedsp.engine import ProcessingPipeline

    engine = ProcessingPipeline()
    result = engine.process(raw, 30.0, 0.5, 4.0, 4)
    result.quality_metrics.valid_segment
    engine.estimate_heart_rate(result, 30.0)
    ```

Author: PulseDSP
Date: 2024
"""

from contextlib import contextmanager
from typing import Dict, Any, Optional, Sequence, Union
import logging

import numpy as np

from pulsedsp.core.config import resolve_settings
from pulsedsp.core.exceptions import (
    SignalProcessingFailed,
    SignalValidationError,
    ConfigValidationError,
)
from pulsedsp.core.registry import get_registry
from pulsedsp.core.types import ProcessedResult
from pulsedsp.features.heart_rate import estimate_heart_rate
from pulsedsp.preprocessing.pipeline import create_standard_pipeline
from pulsedsp.preprocessing.steps.normalization import min_max_scale
from pulsedsp.quality.assessor import QualityAssessor
from pulsedsp.utils.validation import validate_signal, check_positive

# Importing the transforms registers them
from pulsedsp.spectral import transform as _transform  # noqa: F401


logger = logging.getLogger(__name__)

ArrayLike = Union[Sequence[float], np.ndarray]


@contextmanager
def _stage(name: str):
    """Re-raise any failure inside the block as SignalProcessingFailed(name)."""
    try:
        yield
    except SignalProcessingFailed:
        raise
    except Exception as e:
        logger.error(f"Stage '{name}' failed: {e}")
        raise SignalProcessingFailed(name, e) from e


class ProcessingPipeline:
    """
    Signal processing orchestrator.

    Settings are snapshotted from the global configuration at
    construction, with optional overrides in the same nested shape.

    Example:
        >>> engine = ProcessingPipeline({'quality': {'motion_method': 'abrupt_change_rate'}})
        >>> result = engine.process(raw, 30.0, 0.5, 4.0, 4)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._settings = resolve_settings(config)

        processing = self._settings['processing']
        self.second_pass: str = processing.get('second_pass', 'reverse')
        self.outlier_threshold: float = float(processing.get('outlier_threshold', 3.0))
        self.display_range = tuple(float(v) for v in processing.get('display_range', (0, 255)))
        self.strict_order: bool = processing.get('bandpass', {}).get('strict_order', True)
        self.result_shape: str = processing.get('result_shape', 'compact')

        if self.second_pass not in ('reverse', 'forward'):
            raise ConfigValidationError(
                'processing.second_pass', "'reverse' or 'forward'", str(self.second_pass)
            )
        if not isinstance(self.strict_order, bool):
            raise ConfigValidationError(
                'processing.bandpass.strict_order', 'true or false', repr(self.strict_order)
            )
        if len(self.display_range) != 2 or self.display_range[0] >= self.display_range[1]:
            raise ConfigValidationError(
                'processing.display_range', '[low, high] with low < high', str(self.display_range)
            )

        self.spectral_method: str = self._settings['spectral'].get('method', 'radix2')
        self._heart_rate_settings: Dict[str, Any] = self._settings.get('heart_rate', {})

        self._assessor = QualityAssessor(self._settings['quality'])

        logger.debug(f"ProcessingPipeline created (second_pass={self.second_pass})")

    @property
    def settings(self) -> Dict[str, Any]:
        return self._settings

    # =========================================================================
    # SIGNAL PROCESSING
    # =========================================================================

    def process(self,
                raw_signal: ArrayLike,
                sampling_rate: float,
                bandpass_low: float,
                bandpass_high: float,
                filter_order: int) -> ProcessedResult:
        """
        Clean a raw segment and assess its quality.

        Args:
            raw_signal: Raw samples (non-empty, finite)
            sampling_rate: Sampling rate in Hz
            bandpass_low: Lower bandpass cutoff in Hz
            bandpass_high: Upper bandpass cutoff in Hz
            filter_order: Bandpass order (2, 4 or 6)

        Returns:
            ProcessedResult with the raw echo, the first bandpass pass,
            the display-scaled cleaned signal and unrounded metrics

        Raises:
            SignalProcessingFailed: If any stage fails
        """
        with _stage('validation'):
            raw = validate_signal(raw_signal, name='rawSignal')
            check_positive(sampling_rate, name='samplingRate')
            order = self._validate_order(filter_order)

        with _stage('filter_design'):
            chain = create_standard_pipeline(
                sampling_rate=float(sampling_rate),
                bandpass_low=bandpass_low,
                bandpass_high=bandpass_high,
                filter_order=order,
                strict_order=self.strict_order,
                second_pass=self.second_pass,
                outlier_threshold=self.outlier_threshold
            )

        outputs = chain.process_with_intermediates(raw)

        with _stage('quality'):
            metrics = self._assessor.assess(
                outputs['post_filter_outliers'],
                outputs['detrend'],
                clipping_source=raw,
                motion_source=outputs['bandpass_second_pass']
            )

        with _stage('normalization'):
            cleaned = min_max_scale(outputs['post_filter_outliers'], self.display_range)

        logger.debug(
            f"Processed {len(raw)} samples at {sampling_rate} Hz "
            f"(valid={metrics.valid_segment})"
        )

        return ProcessedResult(
            raw_signal=raw,
            bandpass_signal=outputs['bandpass'],
            cleaned_signal=cleaned,
            quality_metrics=metrics
        )

    @staticmethod
    def _validate_order(filter_order: Any) -> int:
        if isinstance(filter_order, bool) or not isinstance(filter_order, (int, float, np.number)):
            raise SignalValidationError('filterOrder', 'integer', type(filter_order).__name__)
        if not float(filter_order).is_integer():
            raise SignalValidationError('filterOrder', 'integer', str(filter_order))
        return int(filter_order)

    # =========================================================================
    # SPECTRAL ANALYSIS
    # =========================================================================

    def analyze_spectrum(self,
                         signal: ArrayLike,
                         sampling_rate: Optional[float] = None,
                         method: Optional[str] = None) -> np.ndarray:
        """
        Magnitude spectrum of a sequence.

        Args:
            signal: Samples (non-empty, finite)
            sampling_rate: Accepted for the message contract; the
                transform itself does not use it
            method: 'radix2' or 'direct' (default: spectral.method)

        Returns:
            Non-negative magnitudes

        Raises:
            SignalProcessingFailed: If validation or the transform fails
        """
        with _stage('validation'):
            samples = validate_signal(signal, name='signal')
            transform = get_registry().create('spectral_transform', method or self.spectral_method)

        with _stage('spectral'):
            return transform(samples)

    # =========================================================================
    # HEART RATE
    # =========================================================================

    def estimate_heart_rate(self,
                            result: Union[ProcessedResult, ArrayLike],
                            sampling_rate: float) -> Optional[int]:
        """
        Estimate BPM from a processed result (or a cleaned sequence).

        Returns:
            Rounded BPM or None when the segment is too short or the
            estimate is implausible
        """
        signal = result.cleaned_signal if isinstance(result, ProcessedResult) else result
        return estimate_heart_rate(
            signal,
            sampling_rate,
            min_duration_sec=float(self._heart_rate_settings.get('min_duration_sec', 5.0)),
            min_bpm=self._heart_rate_settings.get('min_bpm', 40),
            max_bpm=self._heart_rate_settings.get('max_bpm', 200)
        )

    def __repr__(self) -> str:
        return (
            f"ProcessingPipeline(second_pass={self.second_pass}, "
            f"quality={self._assessor!r})"
        )
