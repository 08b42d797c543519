"""
Quality Metric Strategies
=========================

Pure functions scoring one aspect of PPG signal quality. Each heuristic
exists in more than one definition; every definition is registered under
its own name so configuration selects exactly one per metric.

Signal-to-Noise Ratio (snr_estimator):
-------------------------------------
- residual: noise is the difference raw - clean
      snr = 10 * log10(P(clean) / (P(raw - clean) + epsilon))
- direct: the second argument already is the noise
      snr = 10 * log10(P(signal) / P(noise)), 0 when P(noise) == 0

P(x) is the mean square. Both are floored at 0 dB.

Clipping (clipping_detector):
----------------------------
- peak_fraction: share of samples >= 0.95 * max
- range_band: share of samples within range * (1 - 0.98) of either
  extreme; a flat signal counts as fully clipped

Motion Artifacts (motion_detector):
----------------------------------
- difference_std: population std of |first differences|
- abrupt_change_rate: share of |first differences| above
  2 * peak_to_peak / n (0 for fewer than three samples)

Percentages are in 0-100.

Author: PulseDSP
Date: 2024
"""

import math
import logging

import numpy as np

from pulsedsp.core.registry import registered
from pulsedsp.utils.validation import validate_same_length


logger = logging.getLogger(__name__)

SNR_EPSILON = 1e-10
PEAK_FRACTION_THRESHOLD = 0.95
RANGE_BAND_THRESHOLD = 0.98


def _power(x: np.ndarray) -> float:
    return float(np.mean(np.square(x))) if len(x) else 0.0


# =============================================================================
# SIGNAL-TO-NOISE RATIO
# =============================================================================

@registered('snr_estimator', 'residual', {
    'description': 'Noise taken as raw minus clean, epsilon-guarded'
})
def residual_snr(clean: np.ndarray,
                 raw: np.ndarray,
                 epsilon: float = SNR_EPSILON) -> float:
    """
    SNR in dB of a cleaned signal against the raw signal it came from.

    Args:
        clean: Cleaned samples
        raw: Reference samples, same length
        epsilon: Added to the noise power

    Returns:
        SNR in dB, never negative
    """
    clean = np.asarray(clean, dtype=np.float64)
    raw = np.asarray(raw, dtype=np.float64)
    validate_same_length(clean, raw, names=['clean', 'raw'])

    signal_power = _power(clean)
    if signal_power <= 0:
        return 0.0

    noise_power = _power(raw - clean)
    snr = 10.0 * math.log10(signal_power / (noise_power + epsilon))
    return max(0.0, snr)


@registered('snr_estimator', 'direct', {
    'description': 'Second argument is the noise sequence itself'
})
def direct_snr(signal: np.ndarray,
               noise: np.ndarray,
               epsilon: float = SNR_EPSILON) -> float:
    """
    SNR in dB from a signal and an explicit noise sequence.

    The noise sequence may differ in length from the signal. Zero noise
    power returns 0 instead of infinity.
    """
    signal_power = _power(np.asarray(signal, dtype=np.float64))
    noise_power = _power(np.asarray(noise, dtype=np.float64))

    if noise_power <= 0 or signal_power <= 0:
        return 0.0

    return max(0.0, 10.0 * math.log10(signal_power / noise_power))


# =============================================================================
# CLIPPING
# =============================================================================

@registered('clipping_detector', 'peak_fraction', {
    'description': 'Samples at or above 95% of the maximum'
})
def peak_fraction_clipping(signal: np.ndarray,
                           threshold: float = PEAK_FRACTION_THRESHOLD) -> float:
    """Percentage of samples >= threshold * max(signal)."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return 0.0

    clipped = np.count_nonzero(x >= threshold * x.max())
    return 100.0 * clipped / len(x)


@registered('clipping_detector', 'range_band', {
    'description': 'Samples within 2% of the range from either extreme'
})
def range_band_clipping(signal: np.ndarray,
                        threshold: float = RANGE_BAND_THRESHOLD) -> float:
    """Percentage of samples near the minimum or maximum."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return 0.0

    low, high = x.min(), x.max()
    band = (high - low) * (1.0 - threshold)

    clipped = np.count_nonzero((x >= high - band) | (x <= low + band))
    return 100.0 * clipped / len(x)


# =============================================================================
# MOTION ARTIFACTS
# =============================================================================

@registered('motion_detector', 'difference_std', {
    'description': 'Spread of absolute sample-to-sample changes'
})
def difference_std_motion(signal: np.ndarray) -> float:
    """Population standard deviation of |x[i] - x[i-1]|."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) < 2:
        return 0.0
    return float(np.std(np.abs(np.diff(x))))


@registered('motion_detector', 'abrupt_change_rate', {
    'description': 'Percentage of jumps above twice the mean excursion per sample'
})
def abrupt_change_motion(signal: np.ndarray) -> float:
    """Percentage of |first differences| above 2 * peak_to_peak / n."""
    x = np.asarray(signal, dtype=np.float64)
    n = len(x)
    if n < 3:
        return 0.0

    threshold = 2.0 * np.ptp(x) / n
    abrupt = np.count_nonzero(np.abs(np.diff(x)) > threshold)
    return 100.0 * abrupt / n
