"""
Preprocessing Steps Module
==========================

This module provides individual preprocessing steps for PPG signals.
Each step implements the IPreprocessor interface and can be used
standalone or composed into pipelines. Importing this module registers
every step under the 'preprocessor' registry category.

Available Steps:
---------------
- Detrend: Least-squares linear baseline removal
- OutlierSuppression: Replace z-score outliers with the mean
- BandpassFilter: Butterworth bandpass (0.5-4.0 Hz by default)
- Normalization: Min-max scaling into a display range

Standard Processing Order:
-------------------------
1. Detrend
2. Outlier suppression (threshold 3)
3. Bandpass filter, forward then reverse
4. Outlier suppression again on the filtered signal
5. Normalization to 0-255

Usage Examples:
    ```python
    from pulsedsp.preprocessing.steps import Detrend, BandpassFilter

    bandpass = BandpassFilter()
    bandpass.initialize({
        'sampling_rate': 30,
        'low_freq': 0.5,
        'high_freq': 4.0
    })
    filtered = bandpass.process(detrend(raw))
    ```

Author: PulseDSP
Date: 2024
"""

from pulsedsp.preprocessing.steps.detrend import Detrend, detrend, fit_line
from pulsedsp.preprocessing.steps.outlier_suppression import (
    OutlierSuppression,
    suppress_outliers,
)
from pulsedsp.preprocessing.steps.bandpass_filter import BandpassFilter
from pulsedsp.preprocessing.steps.normalization import Normalization, min_max_scale

__all__ = [
    'Detrend',
    'detrend',
    'fit_line',
    'OutlierSuppression',
    'suppress_outliers',
    'BandpassFilter',
    'Normalization',
    'min_max_scale',
]
