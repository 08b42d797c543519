"""
PulseDSP
========

Signal processing engine for photoplethysmographic (PPG) waveforms.

It ingests a raw intensity trace sampled at tens of Hz and produces a
cleaned signal for display and downstream estimation, together with
quality metrics that decide whether the segment is usable. A magnitude
spectrum is available for frequency inspection.

Quick Start:
-----------
```python
import pulsedsp

pulsedsp.setup_logging(level='INFO')

engine = pulsedsp.ProcessingPipeline()
result = engine.process(raw, sampling_rate=30.0, bandpass_low=0.5,
                        bandpass_high=4.0, filter_order=4)
result.to_message('compact')

worker = pulsedsp.SignalWorker()
worker.handle({'id': 7, 'type': 'computeFFT', 'payload': {'signal': raw}})
```

Project Structure:
-----------------
pulsedsp/
├── core/               # Interfaces, types, config, registry, exceptions
├── filters/            # Bandpass design and IIR recurrence
├── preprocessing/      # Detrend, outliers, bandpass, normalization steps
├── quality/            # SNR, clipping and motion strategies
├── spectral/           # Radix-2 and direct magnitude spectra
├── features/           # Heart rate estimate
├── engine/             # Orchestrator and message worker
└── utils/              # Logging and validation

Author: PulseDSP
Date: 2024
"""

# Version
__version__ = '1.0.0'

from pulsedsp import core
from pulsedsp import utils

from pulsedsp.core import (
    get_config,
    load_config,
    ConfigManager,
    get_registry,
    ComponentRegistry,
    ProcessedResult,
    QualityMetrics,
)

from pulsedsp.engine import ProcessingPipeline, SignalWorker, start_worker

from pulsedsp.utils import (
    setup_logging,
    get_logger,
)

__all__ = [
    # Modules
    'core',
    'utils',

    # Configuration
    'get_config',
    'load_config',
    'ConfigManager',

    # Registry
    'get_registry',
    'ComponentRegistry',

    # Types
    'ProcessedResult',
    'QualityMetrics',

    # Engine
    'ProcessingPipeline',
    'SignalWorker',
    'start_worker',

    # Logging
    'setup_logging',
    'get_logger',

    # Version
    '__version__',
]
