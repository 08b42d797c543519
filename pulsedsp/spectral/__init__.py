"""
Spectral Module
===============

Radix-2 and direct magnitude spectra plus frequency helpers.
"""

from pulsedsp.spectral.transform import (
    fft_radix2,
    dft_direct,
    magnitude_spectrum,
    direct_magnitude_spectrum,
    frequency_axis,
    dominant_frequency,
    is_power_of_two,
    next_power_of_two,
)

__all__ = [
    'fft_radix2',
    'dft_direct',
    'magnitude_spectrum',
    'direct_magnitude_spectrum',
    'frequency_axis',
    'dominant_frequency',
    'is_power_of_two',
    'next_power_of_two',
]
