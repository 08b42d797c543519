"""
Bandpass Filter Design
======================

This module turns a bandpass request (cutoffs, sampling rate, order) into
IIR coefficients.

Filter Design:
-------------
Butterworth bandpass filters are designed with the bilinear transform
(scipy.signal.butter). A bandpass prototype of order N has 2N poles, so
``butter(order // 2, ...)`` yields exactly ``order + 1`` feedforward and
feedback coefficients for the supported orders 2, 4 and 6.

Degraded Fallback:
-----------------
When strict_order is disabled, unsupported orders fall back to a crude
first-order approximation:

    wn1, wn2 = 2 * low / fs, 2 * high / fs
    alpha    = wn2 - wn1
    b        = [alpha, alpha]
    a        = [1, -(1 - alpha)]

The fallback has no real band rejection and is flagged with
``FilterCoefficients.degraded``.

Usage Example:
    ```python
    from pulsedsp.filters import design_bandpass

    coeffs = design_bandpass(0.5, 4.0, sampling_rate=30.0, order=4)
    len(coeffs.b), len(coeffs.a)   # (5, 5)
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Tuple
import math
import numbers
import logging

import numpy as np
from scipy import signal as scipy_signal

from pulsedsp.core.exceptions import (
    FilterError,
    InvalidFilterSpecification,
    UnsupportedFilterOrder,
)
from pulsedsp.core.types import FilterSpecification, FilterCoefficients


# Configure module logger
logger = logging.getLogger(__name__)

# Orders for which a full Butterworth design is produced
SUPPORTED_ORDERS: Tuple[int, ...] = (2, 4, 6)


class FilterDesigner:
    """
    Designer for bandpass IIR coefficients.

    Attributes:
        strict_order (bool): Reject unsupported orders instead of
            falling back to the first-order approximation

    Example:
        >>> designer = FilterDesigner()
        >>> spec = FilterSpecification(0.5, 4.0, sampling_rate=30.0, order=4)
        >>> coeffs = designer.design(spec)
    """

    def __init__(self, strict_order: bool = True):
        self.strict_order = strict_order

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def design(self, spec: FilterSpecification) -> FilterCoefficients:
        """
        Design bandpass coefficients for a FilterSpecification.

        Args:
            spec: Cutoffs, sampling rate and order

        Returns:
            FilterCoefficients with finite values and a[0] != 0

        Raises:
            InvalidFilterSpecification: If cutoffs or sampling rate are invalid
            UnsupportedFilterOrder: If the order is < 1, or unsupported
                while strict_order is enabled
        """
        self.validate(spec)

        if spec.order in SUPPORTED_ORDERS:
            coeffs = self._butterworth(spec)
        elif self.strict_order:
            raise UnsupportedFilterOrder(spec.order, SUPPORTED_ORDERS)
        else:
            logger.warning(
                f"Filter order {spec.order} not in {list(SUPPORTED_ORDERS)}; "
                "using degraded first-order bandpass approximation"
            )
            coeffs = self._first_order_fallback(spec)

        self._check_coefficients(coeffs)

        logger.debug(
            f"Designed bandpass {spec.low_cutoff}-{spec.high_cutoff} Hz, "
            f"order={spec.order}, fs={spec.sampling_rate} Hz "
            f"(degraded={coeffs.degraded})"
        )
        return coeffs

    def validate(self, spec: FilterSpecification) -> None:
        """
        Validate a filter specification.

        Raises:
            InvalidFilterSpecification: If any frequency is non-finite or
                0 < low < high < fs / 2 does not hold
            UnsupportedFilterOrder: If order is not an integer >= 1
        """
        low, high, fs = spec.low_cutoff, spec.high_cutoff, spec.sampling_rate

        def invalid(reason: str) -> InvalidFilterSpecification:
            return InvalidFilterSpecification(reason, low, high, fs)

        for label, value in (('low_cutoff', low), ('high_cutoff', high), ('sampling_rate', fs)):
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise invalid(f"{label} must be a number, got {type(value).__name__}")
            if not math.isfinite(value):
                raise invalid(f"{label} must be finite, got {value}")

        if fs <= 0:
            raise invalid(f"sampling_rate must be positive, got {fs}")
        if low <= 0:
            raise invalid(f"low_cutoff must be positive, got {low}")
        if low >= high:
            raise invalid(f"low_cutoff ({low}) must be below high_cutoff ({high})")
        if high >= spec.nyquist:
            raise invalid(
                f"high_cutoff ({high}) must be below the Nyquist frequency ({spec.nyquist})"
            )

        if isinstance(spec.order, bool) or not isinstance(spec.order, (int, np.integer)) \
                or spec.order < 1:
            raise UnsupportedFilterOrder(spec.order, SUPPORTED_ORDERS)

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _butterworth(self, spec: FilterSpecification) -> FilterCoefficients:
        """Bilinear-transform Butterworth bandpass with order + 1 taps."""
        b, a = scipy_signal.butter(
            spec.order // 2,
            [spec.low_cutoff, spec.high_cutoff],
            btype='bandpass',
            output='ba',
            fs=spec.sampling_rate
        )
        return FilterCoefficients(
            b=tuple(float(v) for v in b),
            a=tuple(float(v) for v in a)
        )

    def _first_order_fallback(self, spec: FilterSpecification) -> FilterCoefficients:
        wn1 = 2.0 * spec.low_cutoff / spec.sampling_rate
        wn2 = 2.0 * spec.high_cutoff / spec.sampling_rate
        alpha = wn2 - wn1
        return FilterCoefficients(
            b=(alpha, alpha),
            a=(1.0, -(1.0 - alpha)),
            degraded=True
        )

    def _check_coefficients(self, coeffs: FilterCoefficients) -> None:
        b, a = coeffs.as_arrays()
        if not (np.all(np.isfinite(b)) and np.all(np.isfinite(a))):
            raise FilterError("Filter design produced non-finite coefficients")
        if a[0] == 0:
            raise FilterError("Filter design produced a[0] == 0")

    def __repr__(self) -> str:
        return f"FilterDesigner(strict_order={self.strict_order})"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def design_bandpass(low_cutoff: float,
                    high_cutoff: float,
                    sampling_rate: float,
                    order: int,
                    strict_order: bool = True) -> FilterCoefficients:
    """
    Design bandpass coefficients from plain arguments.

    Args:
        low_cutoff: Lower cutoff in Hz
        high_cutoff: Upper cutoff in Hz
        sampling_rate: Sampling rate in Hz
        order: Filter order (2, 4 or 6)
        strict_order: Reject other orders instead of falling back

    Returns:
        FilterCoefficients
    """
    spec = FilterSpecification(
        low_cutoff=low_cutoff,
        high_cutoff=high_cutoff,
        sampling_rate=sampling_rate,
        order=order
    )
    return FilterDesigner(strict_order=strict_order).design(spec)
