"""
Validation Utilities
====================

Argument checks used at the engine's boundaries.

Scalar checks raise the builtin TypeError / ValueError; sample sequences
are converted once by validate_signal(), which raises
SignalValidationError so the orchestrator can report the offending field.

Example Usage:
    ```python
    from pulsedsp.utils.validation import validate_signal, check_positive

    samples = validate_signal(raw, name='rawSignal')
    check_positive(sampling_rate, name='samplingRate')
    ```

Author: PulseDSP
Date: 2024
"""

from typing import List, Optional, Any, Union, Tuple, Type, Sequence
import numpy as np
import logging

from pulsedsp.core.exceptions import SignalValidationError

logger = logging.getLogger(__name__)

Number = Union[int, float]


# =============================================================================
# SCALAR CHECKS
# =============================================================================

def check_type(value: Any,
               expected_type: Union[Type, Tuple[Type, ...]],
               name: str = 'value') -> None:
    """
    Raise TypeError unless value is an instance of expected_type.

    Args:
        value: Object to check
        expected_type: Type or tuple of types
        name: Argument name for the message
    """
    if isinstance(value, expected_type):
        return

    types = expected_type if isinstance(expected_type, tuple) else (expected_type,)
    allowed = ' or '.join(t.__name__ for t in types)
    raise TypeError(f"'{name}' must be {allowed}, got {type(value).__name__}")


def check_range(value: Number,
                min_val: Optional[Number] = None,
                max_val: Optional[Number] = None,
                name: str = 'value',
                inclusive: bool = True) -> None:
    """
    Raise ValueError when value lies outside [min_val, max_val].

    Either bound may be None. With inclusive=False the bounds themselves
    are rejected too.
    """
    below = min_val is not None and (value < min_val if inclusive else value <= min_val)
    above = max_val is not None and (value > max_val if inclusive else value >= max_val)

    if below or above:
        low = '-inf' if min_val is None else min_val
        high = 'inf' if max_val is None else max_val
        brackets = '[]' if inclusive else '()'
        raise ValueError(
            f"'{name}' must lie in {brackets[0]}{low}, {high}{brackets[1]}, got {value}"
        )


def check_positive(value: Number,
                   name: str = 'value',
                   allow_zero: bool = False) -> None:
    """
    Raise ValueError unless value is finite and > 0 (>= 0 with allow_zero).
    """
    if not np.isfinite(value):
        raise ValueError(f"'{name}' must be finite, got {value}")

    if value < 0 or (value == 0 and not allow_zero):
        qualifier = 'non-negative' if allow_zero else 'positive'
        raise ValueError(f"'{name}' must be {qualifier}, got {value}")


# =============================================================================
# SAMPLE SEQUENCES
# =============================================================================

def validate_signal(signal: Union[Sequence[float], np.ndarray],
                    name: str = 'signal',
                    min_samples: int = 1,
                    allow_nonfinite: bool = False) -> np.ndarray:
    """
    Convert a sample sequence to a fresh 1D float64 array.

    Args:
        signal: List, tuple or array of numbers
        name: Field name reported on failure
        min_samples: Minimum accepted length
        allow_nonfinite: Accept NaN/Inf samples

    Returns:
        New float64 array (never a view of the input)

    Raises:
        SignalValidationError: If the sequence is not numeric, not 1D,
            too short or contains non-finite values
    """
    if signal is None or isinstance(signal, (str, bytes, dict)):
        raise SignalValidationError(name, 'sequence of numbers', type(signal).__name__)

    try:
        samples = np.array(signal, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise SignalValidationError(name, 'sequence of numbers', str(e)) from e

    if samples.ndim != 1:
        raise SignalValidationError(name, '1D sequence', f"shape {samples.shape}")

    if samples.size < min_samples:
        raise SignalValidationError(
            name, f"at least {min_samples} samples", f"{samples.size} samples"
        )

    if not allow_nonfinite:
        bad = samples.size - int(np.count_nonzero(np.isfinite(samples)))
        if bad:
            raise SignalValidationError(name, 'finite values', f"{bad} NaN/Inf samples")

    return samples


def validate_same_length(*arrays: np.ndarray,
                         names: Optional[List[str]] = None) -> None:
    """
    Raise ValueError if the given sequences differ in length.

    Args:
        *arrays: Sequences to compare
        names: Labels used in the message (default: array_0, array_1, ...)
    """
    lengths = [len(a) for a in arrays]
    if len(set(lengths)) <= 1:
        return

    labels = names or [f"array_{i}" for i in range(len(arrays))]
    summary = ', '.join(f"{label}={length}" for label, length in zip(labels, lengths))
    raise ValueError(f"Arrays must have same length: {summary}")
