"""
Quality Module
==============

Signal quality metrics and the assessor that combines them into a
validity verdict.

Available Strategies:
--------------------
- snr_estimator: residual, direct
- clipping_detector: peak_fraction, range_band
- motion_detector: difference_std, abrupt_change_rate
"""

from pulsedsp.quality.metrics import (
    residual_snr,
    direct_snr,
    peak_fraction_clipping,
    range_band_clipping,
    difference_std_motion,
    abrupt_change_motion,
)
from pulsedsp.quality.assessor import QualityAssessor

__all__ = [
    'residual_snr',
    'direct_snr',
    'peak_fraction_clipping',
    'range_band_clipping',
    'difference_std_motion',
    'abrupt_change_motion',
    'QualityAssessor',
]
