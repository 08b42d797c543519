"""
Spectral Transform
==================

Magnitude spectra for diagnostic frequency inspection of PPG segments.

Two entry points are provided:

1. magnitude_spectrum (registered as 'radix2')
   Zero-pads to the next power of two N, runs a recursive radix-2
   decimation-in-time Cooley-Tukey FFT and returns |X[k]| / N for the
   first N/2 bins (Nyquist-folded). O(N log N).

2. direct_magnitude_spectrum (registered as 'direct')
   Direct O(n^2) DFT over the unpadded signal, returning |X[k]| / n for
   all n bins (or the first half when onesided). Large inputs are slow
   and logged as a warning.

Both return non-negative float64 arrays. Empty input raises SpectralError.

Example Usage:
    ```python
    from pulsedsp.spectral import magnitude_spectrum, dominant_frequency

    spectrum = magnitude_spectrum(cleaned)
    hz = dominant_frequency(cleaned, sampling_rate=30.0, band=(0.5, 4.0))
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Optional, Sequence, Tuple, Union
import logging

import numpy as np

from pulsedsp.core.config import get_config
from pulsedsp.core.exceptions import SpectralError
from pulsedsp.core.registry import registered
from pulsedsp.utils.logging import log_execution_time


logger = logging.getLogger(__name__)

ArrayLike = Union[Sequence[float], np.ndarray]


# =============================================================================
# HELPERS
# =============================================================================

def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    size = 1
    while size < n:
        size *= 2
    return size


def _as_samples(signal: ArrayLike) -> np.ndarray:
    x = np.asarray(signal)
    if x.ndim != 1:
        raise SpectralError(f"expected a 1D sequence, got shape {x.shape}")
    if len(x) == 0:
        raise SpectralError("cannot transform an empty sequence")
    return x


# =============================================================================
# TRANSFORMS
# =============================================================================

def _radix2(x: np.ndarray) -> np.ndarray:
    n = len(x)
    if n == 1:
        return x.astype(np.complex128)

    even = _radix2(x[0::2])
    odd = _radix2(x[1::2])

    twiddled = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate([even + twiddled, even - twiddled])


@log_execution_time()
def fft_radix2(signal: ArrayLike) -> np.ndarray:
    """
    Recursive radix-2 Cooley-Tukey FFT.

    Args:
        signal: Real or complex samples, power-of-two length

    Returns:
        Full-length complex spectrum

    Raises:
        SpectralError: If the length is zero or not a power of two
    """
    x = _as_samples(signal)
    if not is_power_of_two(len(x)):
        raise SpectralError(
            f"radix-2 FFT needs a power-of-two length, got {len(x)}"
        )
    return _radix2(x.astype(np.complex128))


@log_execution_time()
def dft_direct(signal: ArrayLike) -> np.ndarray:
    """
    Direct DFT by explicit summation, any length.

    Each bin is summed separately so memory stays O(n).

    Returns:
        Full-length complex spectrum
    """
    x = _as_samples(signal).astype(np.complex128)
    n = len(x)
    t = np.arange(n)

    spectrum = np.empty(n, dtype=np.complex128)
    for k in range(n):
        spectrum[k] = np.sum(x * np.exp(-2j * np.pi * k * t / n))
    return spectrum


@registered('spectral_transform', 'radix2', {
    'description': 'Zero-padded radix-2 FFT, first N/2 magnitudes'
})
def magnitude_spectrum(signal: ArrayLike) -> np.ndarray:
    """
    Nyquist-folded magnitude spectrum via the radix-2 FFT.

    Args:
        signal: Real samples of any length

    Returns:
        |X[k]| / N for k < N/2, where N is the padded length. A single
        sample yields its DC bin only.
    """
    x = _as_samples(signal).astype(np.float64)
    n_fft = next_power_of_two(len(x))

    padded = np.zeros(n_fft, dtype=np.float64)
    padded[:len(x)] = x

    spectrum = fft_radix2(padded)
    n_bins = max(n_fft // 2, 1)
    return np.abs(spectrum[:n_bins]) / n_fft


@registered('spectral_transform', 'direct', {
    'description': 'Unpadded direct DFT, |X[k]| / n for every bin'
})
def direct_magnitude_spectrum(signal: ArrayLike,
                              onesided: bool = False,
                              warn_above: Optional[int] = None) -> np.ndarray:
    """
    Magnitude spectrum via the direct DFT.

    Args:
        signal: Real samples of any length
        onesided: Return only the first n // 2 bins (at least one)
        warn_above: Length above which a slowness warning is logged
            (default: spectral.direct_warning_length)

    Returns:
        |X[k]| / n
    """
    x = _as_samples(signal).astype(np.float64)
    n = len(x)

    if warn_above is None:
        warn_above = get_config().get_int('spectral.direct_warning_length', 4096)
    if n > warn_above:
        logger.warning(
            f"Direct DFT on {n} samples is O(n^2); "
            f"consider the radix-2 path for inputs above {warn_above}"
        )

    magnitudes = np.abs(dft_direct(x)) / n
    if onesided:
        return magnitudes[:max(n // 2, 1)]
    return magnitudes


# =============================================================================
# FREQUENCY HELPERS
# =============================================================================

def frequency_axis(n_bins: int, n_fft: int, sampling_rate: float) -> np.ndarray:
    """
    Frequency in Hz of each spectrum bin.

    Args:
        n_bins: Number of bins to label
        n_fft: Transform length the bins came from
        sampling_rate: Sampling rate in Hz
    """
    if n_fft <= 0 or sampling_rate <= 0:
        raise SpectralError(
            f"n_fft and sampling_rate must be positive, got {n_fft}, {sampling_rate}"
        )
    return np.arange(n_bins) * sampling_rate / n_fft


def dominant_frequency(signal: ArrayLike,
                       sampling_rate: float,
                       band: Optional[Tuple[float, float]] = None) -> float:
    """
    Frequency of the largest non-DC magnitude.

    Args:
        signal: Real samples
        sampling_rate: Sampling rate in Hz
        band: Optional inclusive (low, high) search range in Hz

    Returns:
        Peak frequency in Hz

    Raises:
        SpectralError: If no bin lies in the search range
    """
    spectrum = magnitude_spectrum(signal)
    n_fft = next_power_of_two(len(np.asarray(signal)))
    freqs = frequency_axis(len(spectrum), n_fft, sampling_rate)

    mask = freqs > 0
    if band is not None:
        mask &= (freqs >= band[0]) & (freqs <= band[1])

    if not np.any(mask):
        raise SpectralError(f"no spectral bins inside {band or 'the non-DC range'}")

    candidates = np.flatnonzero(mask)
    return float(freqs[candidates[np.argmax(spectrum[candidates])]])
