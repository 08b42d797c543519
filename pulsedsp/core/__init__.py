"""
Core Module
===========

This is the core module of the PulseDSP engine, containing:
- Abstract interfaces for pipeline steps
- Data types for filters, metrics and results
- Configuration management
- Component registry for heuristic strategies
- Custom exceptions

Quick Start:
-----------
```python
from pulsedsp.core import get_config, get_registry

config = get_config()
print(config.get('quality.thresholds.min_snr_db'))  # 5.0

registry = get_registry()
clipping = registry.create('clipping_detector', 'range_band')
```

Author: PulseDSP
Date: 2024
"""

# =============================================================================
# Interfaces
# =============================================================================
from pulsedsp.core.interfaces import IPreprocessor

# =============================================================================
# Data Types
# =============================================================================
from pulsedsp.core.types import (
    FilterSpecification,
    FilterCoefficients,
    QualityMetrics,
    ProcessedResult,
    RESULT_SHAPES,
)

# =============================================================================
# Configuration & Registry
# =============================================================================
from pulsedsp.core.config import (
    ConfigManager,
    get_config,
    load_config,
    resolve_settings,
)

from pulsedsp.core.registry import (
    ComponentRegistry,
    get_registry,
    create,
    registered,
)

# =============================================================================
# Exceptions
# =============================================================================
from pulsedsp.core.exceptions import (
    SignalEngineError,
    SignalValidationError,
    ProcessingError,
    FilterError,
    InvalidFilterSpecification,
    UnsupportedFilterOrder,
    DegenerateFit,
    SpectralError,
    SignalProcessingFailed,
    MessageError,
    UnknownRequestType,
    InvalidRequestError,
    ConfigurationError,
    ConfigNotFoundError,
    ConfigValidationError,
    ComponentError,
    ComponentNotFoundError,
    RegistrationError,
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Interfaces
    'IPreprocessor',

    # Data Types
    'FilterSpecification',
    'FilterCoefficients',
    'QualityMetrics',
    'ProcessedResult',
    'RESULT_SHAPES',

    # Configuration
    'ConfigManager',
    'get_config',
    'load_config',
    'resolve_settings',

    # Registry
    'ComponentRegistry',
    'get_registry',
    'create',
    'registered',

    # Exceptions
    'SignalEngineError',
    'SignalValidationError',
    'ProcessingError',
    'FilterError',
    'InvalidFilterSpecification',
    'UnsupportedFilterOrder',
    'DegenerateFit',
    'SpectralError',
    'SignalProcessingFailed',
    'MessageError',
    'UnknownRequestType',
    'InvalidRequestError',
    'ConfigurationError',
    'ConfigNotFoundError',
    'ConfigValidationError',
    'ComponentError',
    'ComponentNotFoundError',
    'RegistrationError',
]
