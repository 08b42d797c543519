"""
Bandpass Filter Preprocessor
============================

Keeps the cardiac band of a PPG trace (0.5-4.0 Hz, i.e. 30-240 BPM by
default) and rejects baseline wander below it and sensor noise above it.

Coefficients come from FilterDesigner. Every process() call runs a NEW
IIRFilter, so filter memory never carries over between signals or
between the two passes of the standard chain.

With ``reverse=True`` the pass runs over the time-reversed samples and
the result is flipped back; a forward pass followed by a reverse pass
has zero net phase.

Usage Example:
    ```python
    from pulsedsp.preprocessing.steps import BandpassFilter

    bandpass = BandpassFilter()
    bandpass.initialize({'sampling_rate': 30, 'low_freq': 0.5, 'high_freq': 4.0})
    filtered = bandpass.process(detrended)
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Callable, Dict, Any, Optional, Tuple
import numbers
import numpy as np
from scipy import signal as scipy_signal
import logging

from pulsedsp.core.exceptions import UnsupportedFilterOrder
from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor
from pulsedsp.core.registry import registered
from pulsedsp.core.types import FilterSpecification, FilterCoefficients
from pulsedsp.filters.design import FilterDesigner, SUPPORTED_ORDERS
from pulsedsp.filters.iir import IIRFilter

logger = logging.getLogger(__name__)


def _as_order(value: Any) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real) \
            or not float(value).is_integer():
        raise UnsupportedFilterOrder(value, SUPPORTED_ORDERS)
    return int(value)


def _as_flag(value: Any) -> bool:
    if not isinstance(value, (bool, np.bool_)):
        raise ValueError(f"Expected True or False, got {value!r}")
    return bool(value)


# Parameter name -> converter; insertion order is the get_params() order
PARAMETERS: Dict[str, Callable[[Any], Any]] = {
    'low_freq': float,
    'high_freq': float,
    'filter_order': _as_order,
    'sampling_rate': float,
    'strict_order': _as_flag,
    'reverse': _as_flag,
}


@registered('preprocessor', 'bandpass', {
    'description': 'Butterworth bandpass applied with a fresh IIR filter per call'
})
class BandpassFilter(IPreprocessor):
    """
    Butterworth bandpass step.

    Settings (initialize() / set_params()):
        sampling_rate: Hz, required by initialize()
        low_freq, high_freq: cutoffs in Hz (default 0.5, 4.0)
        filter_order: 2, 4 or 6 (default 4)
        strict_order: reject other orders instead of degrading (default True)
        reverse: filter the time-reversed signal (default False)
    """

    def __init__(self):
        self._params: Dict[str, Any] = {
            'low_freq': 0.5,
            'high_freq': 4.0,
            'filter_order': 4,
            'sampling_rate': 30.0,
            'strict_order': True,
            'reverse': False,
        }
        self._coefficients: Optional[FilterCoefficients] = None

    @property
    def name(self) -> str:
        return "bandpass"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Read settings and design the coefficients.

        Raises:
            ValueError: If sampling_rate is missing or a flag is not a bool
            InvalidFilterSpecification: If the cutoffs are unusable
            UnsupportedFilterOrder: If strict and the order is unsupported
        """
        if 'sampling_rate' not in config:
            raise ValueError("sampling_rate is required for bandpass filter")

        self._update({key: config[key] for key in PARAMETERS if key in config})
        self._coefficients = self._design()
        logger.debug(f"Initialized {self!r}, reverse={self._params['reverse']}")

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """
        Filter one signal.

        Returns:
            Filtered samples, same length as data

        Raises:
            RuntimeError: If initialize() has not been called
        """
        iir = IIRFilter(self.get_coefficients())
        self.validate_input(data)

        if self._params['reverse']:
            return iir.filter_all(data[::-1])[::-1].copy()
        return iir.filter_all(data)

    def get_params(self) -> Dict[str, Any]:
        return dict(self._params)

    def set_params(self, **params) -> 'BandpassFilter':
        """
        Change settings; an initialized filter is redesigned immediately.
        A rejected value leaves every setting unchanged.

        Example:
            >>> bp.set_params(low_freq=0.7, high_freq=3.5)
        """
        unknown = sorted(set(params) - set(PARAMETERS))
        if unknown:
            raise ValueError(f"Unknown parameters: {unknown}")

        self._update(params)
        if self._coefficients is not None:
            self._coefficients = self._design()
            logger.debug(f"Redesigned {self!r}")
        return self

    def _update(self, values: Dict[str, Any]) -> None:
        self._params.update({key: PARAMETERS[key](value) for key, value in values.items()})

    def _design(self) -> FilterCoefficients:
        spec = FilterSpecification(
            low_cutoff=self._params['low_freq'],
            high_cutoff=self._params['high_freq'],
            sampling_rate=self._params['sampling_rate'],
            order=self._params['filter_order'],
        )
        return FilterDesigner(strict_order=self._params['strict_order']).design(spec)

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def get_coefficients(self) -> FilterCoefficients:
        if self._coefficients is None:
            raise RuntimeError("BandpassFilter not initialized. Call initialize() first.")
        return self._coefficients

    def get_passband(self) -> Tuple[float, float]:
        """(low_freq, high_freq) in Hz."""
        return self._params['low_freq'], self._params['high_freq']

    def get_frequency_response(self, n_points: int = 512) -> Tuple[np.ndarray, np.ndarray]:
        """
        Magnitude response of the designed coefficients.

        Args:
            n_points: Number of frequencies between 0 and Nyquist

        Returns:
            (frequencies in Hz, magnitude in dB floored at -200 dB)
        """
        b, a = self.get_coefficients().as_arrays()
        freqs, response = scipy_signal.freqz(
            b, a, worN=n_points, fs=self._params['sampling_rate']
        )
        return freqs, 20.0 * np.log10(np.maximum(np.abs(response), 1e-10))

    def __repr__(self) -> str:
        if self._coefficients is None:
            return "BandpassFilter(not initialized)"
        p = self._params
        return (
            f"BandpassFilter({p['low_freq']}-{p['high_freq']} Hz, "
            f"order={p['filter_order']}, fs={p['sampling_rate']})"
        )
