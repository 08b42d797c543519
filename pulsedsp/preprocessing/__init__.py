"""
Preprocessing Module
====================

Signal conditioning for PPG traces: detrending, outlier suppression,
bandpass filtering and display scaling, composable into pipelines.

Usage Examples:
    ```python
    # Method 1: Standard chain
    from pulsedsp.preprocessing import create_standard_pipeline

    pipeline = create_standard_pipeline(sampling_rate=30)
    cleaned = pipeline.process(raw)

    # Method 2: From a config dict (steps resolved through the registry)
    from pulsedsp.preprocessing import create_pipeline_from_config

    pipeline = create_pipeline_from_config({
        'common': {'sampling_rate': 30},
        'steps': [{'type': 'detrend'}, {'type': 'bandpass'}]
    })

    # Method 3: Use individual steps
    from pulsedsp.preprocessing.steps import BandpassFilter

    bandpass = BandpassFilter()
    bandpass.initialize({'sampling_rate': 30, 'low_freq': 0.5, 'high_freq': 4.0})
    filtered = bandpass.process(raw)
    ```

Author: PulseDSP
Date: 2024
"""

from pulsedsp.preprocessing.steps import (
    Detrend,
    OutlierSuppression,
    BandpassFilter,
    Normalization,
    detrend,
    suppress_outliers,
    min_max_scale,
)

from pulsedsp.preprocessing.pipeline import (
    PreprocessingPipeline,
    create_standard_pipeline,
    create_pipeline_from_config,
)

__all__ = [
    # Steps
    'Detrend',
    'OutlierSuppression',
    'BandpassFilter',
    'Normalization',
    'detrend',
    'suppress_outliers',
    'min_max_scale',

    # Pipeline
    'PreprocessingPipeline',
    'create_standard_pipeline',
    'create_pipeline_from_config',
]
