"""
Custom Exceptions
=================

Errors raised by the PulseDSP engine.

    SignalEngineError
    ├── SignalValidationError           malformed sample sequence
    ├── ProcessingError
    │   ├── FilterError
    │   │   ├── InvalidFilterSpecification
    │   │   └── UnsupportedFilterOrder
    │   ├── DegenerateFit               singular detrend fit
    │   ├── SpectralError
    │   └── SignalProcessingFailed      any stage failure, with stage name
    ├── MessageError                    worker request problems
    │   ├── UnknownRequestType
    │   └── InvalidRequestError
    ├── ConfigurationError
    │   ├── ConfigNotFoundError
    │   └── ConfigValidationError
    └── ComponentError                  registry problems
        ├── ComponentNotFoundError
        └── RegistrationError

Every error renders as its message, followed by optional "Details:" and
"Suggestion:" lines. A class may define ``hint`` as its default
suggestion.

Example Usage:
    ```python
    try:
        result = engine.process(raw, 30.0, 0.5, 4.0, 4)
    except SignalProcessingFailed as e:
        logger.error(f"Stage {e.stage} failed: {e.cause}")
    ```

Author: PulseDSP
Date: 2024
"""

from typing import List, Optional, Sequence


class SignalEngineError(Exception):
    """
    Root of the PulseDSP error hierarchy.

    Attributes:
        message: One-line summary
        details: What exactly was wrong (may be empty)
        suggestion: How to fix it (may be empty)
    """

    hint = ''

    def __init__(self, message: str, details: str = '', suggestion: str = ''):
        self.message = message
        self.details = details
        self.suggestion = suggestion or self.hint

        parts = [message]
        if details:
            parts.append(f"Details: {details}")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        super().__init__("\n".join(parts))


# =============================================================================
# INPUT
# =============================================================================

class SignalValidationError(SignalEngineError):
    """A sample sequence is missing, non-numeric, not 1D, too short or non-finite."""

    hint = "Pass a non-empty, finite, one-dimensional sample sequence."

    def __init__(self, field: str, expected: str, actual: str):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Signal validation failed for '{field}'",
            f"Expected: {expected}, Got: {actual}",
        )


# =============================================================================
# PROCESSING
# =============================================================================

class ProcessingError(SignalEngineError):
    """A numerical stage could not produce a result."""


class FilterError(ProcessingError):
    """Filter design or application failed."""


class InvalidFilterSpecification(FilterError):
    """Cutoffs or sampling rate are non-positive, misordered or above Nyquist."""

    hint = "Use 0 < low_cutoff < high_cutoff < sampling_rate / 2."

    def __init__(self,
                 reason: str,
                 low_cutoff: Optional[float] = None,
                 high_cutoff: Optional[float] = None,
                 sampling_rate: Optional[float] = None):
        self.reason = reason
        self.low_cutoff = low_cutoff
        self.high_cutoff = high_cutoff
        self.sampling_rate = sampling_rate

        context = ''
        if sampling_rate is not None:
            context = f"low={low_cutoff} Hz, high={high_cutoff} Hz, fs={sampling_rate} Hz"
        super().__init__(f"Invalid filter specification: {reason}", context)


class UnsupportedFilterOrder(FilterError):
    """Strict mode rejected a bandpass order outside the supported set."""

    hint = "Pick a supported order or disable strict_order."

    def __init__(self, order: int, supported: Sequence[int] = (2, 4, 6)):
        self.order = order
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported filter order: {order}",
            f"Supported orders: {list(self.supported)}",
        )


class DegenerateFit(ProcessingError):
    """The straight-line fit used by detrending has a singular design."""

    hint = "Provide at least two samples with distinct indices."

    def __init__(self, reason: str = ''):
        super().__init__("Degenerate linear fit", reason)


class SpectralError(ProcessingError):
    """A magnitude spectrum or frequency lookup cannot be computed."""

    def __init__(self, reason: str = ''):
        super().__init__("Spectral transform failed", reason)


class SignalProcessingFailed(ProcessingError):
    """
    Any failure inside process(), tagged with the stage that raised it.

    Attributes:
        stage: Stage name, e.g. 'detrend' or 'bandpass_second_pass'
        cause: The exception raised by that stage
    """

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        reason = getattr(cause, 'message', None) or str(cause)
        super().__init__(
            f"Signal processing failed at stage '{stage}'",
            f"{type(cause).__name__}: {reason}",
        )


# =============================================================================
# WORKER MESSAGES
# =============================================================================

class MessageError(SignalEngineError):
    """A worker request could not be dispatched."""


class UnknownRequestType(MessageError):
    """The request 'type' is neither processSignal nor computeFFT."""

    def __init__(self, request_type: str):
        self.request_type = request_type
        super().__init__(f"Unknown message type: {request_type}")


class InvalidRequestError(MessageError):
    """The request or its payload is missing required fields."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid request: {reason}")


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(SignalEngineError):
    """Configuration could not be read, written or applied."""


class ConfigNotFoundError(ConfigurationError):
    hint = "Check the file path or create the configuration file."

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Configuration file not found: '{path}'")


class ConfigValidationError(ConfigurationError):
    """A configuration value has the wrong form."""

    hint = "Update the configuration with a valid value."

    def __init__(self, key: str, expected: str, actual: str = ''):
        self.key = key
        detail = f"Expected: {expected}" + (f", Got: {actual}" if actual else '')
        super().__init__(f"Invalid configuration value for '{key}'", detail)


# =============================================================================
# REGISTRY
# =============================================================================

class ComponentError(SignalEngineError):
    """Component registry lookup or registration failed."""


class ComponentNotFoundError(ComponentError):
    hint = "Register the component or use an existing one."

    def __init__(self, category: str, name: str, available: Optional[List[str]] = None):
        self.category = category
        self.name = name
        self.available = list(available or [])
        detail = f"Available in '{category}': {self.available}" if self.available else ''
        super().__init__(f"Component '{name}' not found in category '{category}'", detail)


class RegistrationError(ComponentError):
    def __init__(self, category: str, name: str, reason: str = ''):
        self.category = category
        self.name = name
        super().__init__(f"Cannot register '{category}/{name}'", reason)


__all__ = [
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
