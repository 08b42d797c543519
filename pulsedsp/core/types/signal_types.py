"""
Signal Data Types
=================

This module defines the core data types exchanged between the components
of the PulseDSP engine.

Data Types:
----------
1. FilterSpecification: Bandpass cutoffs, sampling rate and order
2. FilterCoefficients: Feedforward (b) and feedback (a) vectors
3. QualityMetrics: SNR, clipping, motion score and validity verdict
4. ProcessedResult: Snapshot returned once per processing call

Design Principles:
-----------------
- Immutable after creation (frozen dataclasses, read-only arrays)
- Numpy-backed for performance
- Serializable to the camelCase message contract

Example Usage:
    ```python
    from pulsedsp.core.types import FilterSpecification, QualityMetrics

    spec = FilterSpecification(0.5, 4.0, sampling_rate=30.0, order=4)
    print(spec.nyquist)  # 15.0

    metrics = QualityMetrics(12.34, 1.66, 0.05, True)
    metrics.to_dict()
    # {'snr': 12.3, 'clippingPercentage': 1.7, ...}
    ```

Author: PulseDSP
Date: 2024
"""

from dataclasses import dataclass
from typing import Dict, Any, Tuple

import numpy as np


# Result shapes understood by ProcessedResult.to_message()
RESULT_SHAPES: Tuple[str, ...] = ('compact', 'full')


def _readonly(values: Any) -> np.ndarray:
    """Return a float64 copy of values with writes disabled."""
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class FilterSpecification:
    """
    Bandpass filter request.

    Attributes:
        low_cutoff: Lower cutoff frequency in Hz
        high_cutoff: Upper cutoff frequency in Hz
        sampling_rate: Sampling rate in Hz
        order: Nominal filter order (number of feedback taps)
    """
    low_cutoff: float
    high_cutoff: float
    sampling_rate: float
    order: int

    @property
    def nyquist(self) -> float:
        """Half the sampling rate."""
        return self.sampling_rate / 2.0

    @property
    def center_frequency(self) -> float:
        """Geometric center of the passband in Hz."""
        return float(np.sqrt(self.low_cutoff * self.high_cutoff))


@dataclass(frozen=True)
class FilterCoefficients:
    """
    IIR filter coefficients.

    Attributes:
        b: Feedforward coefficients, length order + 1
        a: Feedback coefficients, length order + 1, a[0] normalizes
        degraded: True when produced by the first-order fallback
    """
    b: Tuple[float, ...]
    a: Tuple[float, ...]
    degraded: bool = False

    @property
    def order(self) -> int:
        """Number of delay taps."""
        return max(len(self.b), len(self.a)) - 1

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (b, a) as float64 arrays."""
        return np.asarray(self.b, dtype=np.float64), np.asarray(self.a, dtype=np.float64)


@dataclass(frozen=True)
class QualityMetrics:
    """
    Signal quality metrics for one segment.

    Always derived from a signal set by QualityAssessor; never edited.

    Attributes:
        snr: Signal-to-noise ratio in dB (>= 0)
        clipping_percentage: Percentage of saturated samples (0-100)
        motion_artifact_score: Motion heuristic score (>= 0)
        valid_segment: Whether the segment is usable
    """
    snr: float
    clipping_percentage: float
    motion_artifact_score: float
    valid_segment: bool

    def rounded(self, decimals: int = 1) -> 'QualityMetrics':
        """Return the public form with every number rounded."""
        return QualityMetrics(
            snr=round(float(self.snr), decimals),
            clipping_percentage=round(float(self.clipping_percentage), decimals),
            motion_artifact_score=round(float(self.motion_artifact_score), decimals),
            valid_segment=bool(self.valid_segment)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the rounded metrics with message contract keys."""
        public = self.rounded()
        return {
            'snr': public.snr,
            'clippingPercentage': public.clipping_percentage,
            'motionArtifactScore': public.motion_artifact_score,
            'validSegment': public.valid_segment,
        }


@dataclass(frozen=True)
class ProcessedResult:
    """
    Immutable snapshot returned by one processing call.

    Attributes:
        raw_signal: Echo of the input samples
        bandpass_signal: Output of the first bandpass pass
        cleaned_signal: Final signal scaled into the display range
        quality_metrics: Unrounded quality metrics
    """
    raw_signal: np.ndarray
    bandpass_signal: np.ndarray
    cleaned_signal: np.ndarray
    quality_metrics: QualityMetrics

    def __post_init__(self):
        # frozen dataclass: bypass __setattr__ to store read-only copies
        for name in ('raw_signal', 'bandpass_signal', 'cleaned_signal'):
            object.__setattr__(self, name, _readonly(getattr(self, name)))

    def __len__(self) -> int:
        return len(self.cleaned_signal)

    def to_message(self, shape: str = 'compact') -> Dict[str, Any]:
        """
        Serialize to a processSignal result payload.

        Args:
            shape: 'compact' for {cleanedSignal, qualityMetrics} or
                'full' to also echo the raw and bandpass sequences

        Returns:
            Dict of plain Python lists and numbers

        Raises:
            ValueError: If shape is unknown
        """
        if shape not in RESULT_SHAPES:
            raise ValueError(
                f"Unknown result shape '{shape}'. Valid shapes: {list(RESULT_SHAPES)}"
            )

        if shape == 'compact':
            return {
                'cleanedSignal': self.cleaned_signal.tolist(),
                'qualityMetrics': self.quality_metrics.to_dict(),
            }

        return {
            'rawSignal': self.raw_signal.tolist(),
            'bandpassSignal': self.bandpass_signal.tolist(),
            'cleanedSignal': self.cleaned_signal.tolist(),
            'qualityMetrics': self.quality_metrics.to_dict(),
        }
