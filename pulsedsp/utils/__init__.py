"""
Utilities Module
================

Common utility functions for the PulseDSP engine.

Available Modules:
-----------------
- logging: Centralized logging configuration
- validation: Input validation functions

Example Usage:
    ```python
    from pulsedsp.utils import setup_logging, get_logger, validate_signal

    setup_logging(level='INFO', log_file='logs/pulsedsp.log')
    logger = get_logger(__name__)

    samples = validate_signal(raw, name='rawSignal')
    ```

Author: PulseDSP
Date: 2024
"""

# =============================================================================
# Logging Utilities
# =============================================================================
from pulsedsp.utils.logging import (
    setup_logging,
    setup_logging_from_config,
    get_logger,
    set_level,
    log_execution_time,
    LogLevel,
    log_exception,
    ColoredFormatter
)

# =============================================================================
# Validation Utilities
# =============================================================================
from pulsedsp.utils.validation import (
    check_type,
    check_range,
    check_positive,
    validate_signal,
    validate_same_length
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Logging
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',
    'set_level',
    'log_execution_time',
    'LogLevel',
    'log_exception',
    'ColoredFormatter',

    # Validation
    'check_type',
    'check_range',
    'check_positive',
    'validate_signal',
    'validate_same_length'
]
