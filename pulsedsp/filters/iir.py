"""
IIR Filter
==========

Direct-form I recurrence over a fixed set of coefficients:

    y[i] = (sum_j b[j] * x[i-j] - sum_{j>=1} a[j] * y[i-j]) / a[0]

Missing history before the first sample is treated as zero. Each
instance owns its delay lines; there is no reset, so a new instance is
created for every independent pass over a signal.

Usage Example:
    ```python
    from pulsedsp.filters import IIRFilter, design_bandpass

    coeffs = design_bandpass(0.5, 4.0, 30.0, 4)
    filtered = IIRFilter(coeffs).filter_all(samples)
    ```

Author: PulseDSP
Date: 2024
"""

from collections import deque
from typing import Iterable, List, Sequence, Union
import logging

import numpy as np

from pulsedsp.core.exceptions import FilterError
from pulsedsp.core.types import FilterCoefficients


logger = logging.getLogger(__name__)


class IIRFilter:
    """
    Stateful sample-by-sample IIR filter.

    Attributes:
        b (tuple): Feedforward coefficients
        a (tuple): Feedback coefficients, a[0] normalizes the output
    """

    def __init__(self, coefficients: FilterCoefficients):
        b, a = tuple(coefficients.b), tuple(coefficients.a)

        if not b or not a:
            raise FilterError("Filter coefficients must not be empty")
        if a[0] == 0:
            raise FilterError("Leading feedback coefficient a[0] must be non-zero")

        self.b = b
        self.a = a

        # Most recent sample first
        self._x_history = deque([0.0] * (len(b) - 1), maxlen=len(b) - 1)
        self._y_history = deque([0.0] * (len(a) - 1), maxlen=len(a) - 1)

    def step(self, x: float) -> float:
        """
        Filter one sample and advance the delay lines.

        Args:
            x: Input sample

        Returns:
            Output sample
        """
        x = float(x)

        acc = self.b[0] * x
        for coeff, past in zip(self.b[1:], self._x_history):
            acc += coeff * past
        for coeff, past in zip(self.a[1:], self._y_history):
            acc -= coeff * past
        y = acc / self.a[0]

        self._x_history.appendleft(x)
        self._y_history.appendleft(y)

        return y

    def filter_all(self, samples: Union[Sequence[float], np.ndarray, Iterable[float]]) -> np.ndarray:
        """
        Apply step() to every sample in order.

        Args:
            samples: Input sequence

        Returns:
            Output array with the same length as the input
        """
        outputs: List[float] = [self.step(x) for x in samples]
        return np.asarray(outputs, dtype=np.float64)

    @property
    def order(self) -> int:
        return max(len(self.b), len(self.a)) - 1

    def __repr__(self) -> str:
        return f"IIRFilter(order={self.order})"
