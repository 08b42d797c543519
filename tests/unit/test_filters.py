"""
Unit Tests for Filter Design and IIR Filtering
==============================================

This module contains unit tests for bandpass coefficient design and the
sample-by-sample IIR recurrence.

Test Coverage:
- FilterDesigner (Butterworth orders, validation, degraded fallback)
- design_bandpass
- IIRFilter (recurrence, normalization, determinism, attenuation)

Author: PulseDSP
Date: 2024
"""

import logging

import pytest
import numpy as np
from scipy import signal as scipy_signal

# Import modules to test
from pulsedsp.core.types import FilterSpecification, FilterCoefficients
from pulsedsp.core.exceptions import (
    FilterError,
    InvalidFilterSpecification,
    UnsupportedFilterOrder,
)
from pulsedsp.filters import FilterDesigner, IIRFilter, design_bandpass, SUPPORTED_ORDERS


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def camera_coefficients():
    """Order-4 bandpass for 30 fps camera PPG."""
    return design_bandpass(0.5, 4.0, 30.0, 4)


def _rms(x: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.square(x))))


# =============================================================================
# FILTER DESIGN TESTS
# =============================================================================

class TestFilterDesigner:
    """Test cases for FilterDesigner."""

    @pytest.mark.parametrize('order', SUPPORTED_ORDERS)
    def test_supported_orders_have_order_plus_one_taps(self, order):
        """Test that each supported order yields order + 1 coefficients."""
        coeffs = design_bandpass(0.5, 4.0, 30.0, order)

        assert len(coeffs.b) == order + 1
        assert len(coeffs.a) == order + 1
        assert coeffs.a[0] != 0
        assert np.all(np.isfinite(coeffs.b))
        assert np.all(np.isfinite(coeffs.a))
        assert coeffs.degraded is False

    def test_matches_scipy_butterworth(self, camera_coefficients):
        """Test that coefficients equal a 2nd-order prototype bandpass."""
        b, a = scipy_signal.butter(2, [0.5, 4.0], btype='bandpass', fs=30.0)

        np.testing.assert_allclose(camera_coefficients.b, b)
        np.testing.assert_allclose(camera_coefficients.a, a)

    def test_design_is_deterministic(self):
        """Test that identical specifications produce identical coefficients."""
        first = design_bandpass(0.7, 3.5, 25.0, 6)
        second = design_bandpass(0.7, 3.5, 25.0, 6)

        assert first == second

    def test_high_cutoff_at_nyquist_rejected(self):
        """Test that a high cutoff at the Nyquist frequency is rejected."""
        with pytest.raises(InvalidFilterSpecification):
            design_bandpass(0.5, 15.0, 30.0, 4)

    @pytest.mark.parametrize('low, high, fs', [
        (4.0, 0.5, 30.0),
        (2.0, 2.0, 30.0),
        (0.0, 4.0, 30.0),
        (-1.0, 4.0, 30.0),
        (0.5, 4.0, 0.0),
        (float('nan'), 4.0, 30.0),
        (0.5, float('inf'), 30.0),
    ])
    def test_invalid_cutoffs_rejected(self, low, high, fs):
        """Test that cutoffs outside 0 < low < high < fs/2 are rejected."""
        with pytest.raises(InvalidFilterSpecification):
            design_bandpass(low, high, fs, 4)

    def test_unsupported_order_strict(self):
        """Test that order 3 is rejected in strict mode."""
        with pytest.raises(UnsupportedFilterOrder) as exc_info:
            design_bandpass(0.5, 4.0, 30.0, 3)

        assert exc_info.value.order == 3
        assert exc_info.value.supported == SUPPORTED_ORDERS

    def test_order_below_one_always_rejected(self):
        """Test that order 0 is rejected even without strict mode."""
        with pytest.raises(UnsupportedFilterOrder):
            design_bandpass(0.5, 4.0, 30.0, 0, strict_order=False)

    def test_degraded_fallback(self):
        """Test the first-order approximation used for other orders."""
        coeffs = design_bandpass(0.5, 4.0, 30.0, 3, strict_order=False)
        alpha = 2 * 4.0 / 30.0 - 2 * 0.5 / 30.0

        assert coeffs.degraded is True
        assert coeffs.b == pytest.approx((alpha, alpha))
        assert coeffs.a == pytest.approx((1.0, -(1.0 - alpha)))

    def test_degraded_fallback_logs_warning(self, caplog):
        """Test that falling back to the approximation is logged."""
        caplog.set_level(logging.WARNING, logger='pulsedsp.filters.design')

        FilterDesigner(strict_order=False).design(
            FilterSpecification(0.5, 4.0, sampling_rate=30.0, order=5)
        )

        assert 'degraded' in caplog.text

    def test_validate_only(self):
        """Test validation without designing."""
        designer = FilterDesigner()

        designer.validate(FilterSpecification(0.5, 4.0, 30.0, 4))

        with pytest.raises(InvalidFilterSpecification):
            designer.validate(FilterSpecification(0.5, 20.0, 30.0, 4))

    def test_numpy_scalar_settings_accepted(self):
        """Test that numpy integer and float scalars design like Python numbers."""
        expected = design_bandpass(0.5, 4.0, 30.0, 4)

        from_int_rate = design_bandpass(0.5, 4.0, np.int64(30), 4)
        from_float32 = design_bandpass(np.float32(0.5), np.float32(4.0), np.float64(30.0), np.int32(4))

        np.testing.assert_allclose(from_int_rate.b, expected.b)
        np.testing.assert_allclose(from_int_rate.a, expected.a)
        np.testing.assert_allclose(from_float32.b, expected.b, rtol=1e-6)
        np.testing.assert_allclose(from_float32.a, expected.a, rtol=1e-6)

    def test_non_numeric_rate_rejected(self):
        """Test that a string sampling rate is still rejected."""
        with pytest.raises(InvalidFilterSpecification):
            design_bandpass(0.5, 4.0, '30', 4)


# =============================================================================
# IIR FILTER TESTS
# =============================================================================

class TestIIRFilter:
    """Test cases for IIRFilter."""

    def test_matches_scipy_lfilter(self, camera_coefficients):
        """Test that the recurrence matches scipy's direct-form filter."""
        rng = np.random.default_rng(42)
        x = rng.standard_normal(500)
        b, a = camera_coefficients.as_arrays()

        output = IIRFilter(camera_coefficients).filter_all(x)

        np.testing.assert_allclose(output, scipy_signal.lfilter(b, a, x), rtol=1e-8, atol=1e-10)

    def test_output_normalized_by_leading_feedback(self):
        """Test that a[0] != 1 scales the output."""
        iir = IIRFilter(FilterCoefficients(b=(1.0, 1.0), a=(2.0,)))

        assert iir.step(2.0) == pytest.approx(1.0)
        assert iir.step(4.0) == pytest.approx(3.0)

    def test_impulse_response_first_sample(self, camera_coefficients):
        """Test that the first impulse response sample is b[0] / a[0]."""
        impulse = np.zeros(10)
        impulse[0] = 1.0

        response = IIRFilter(camera_coefficients).filter_all(impulse)

        assert response[0] == pytest.approx(camera_coefficients.b[0] / camera_coefficients.a[0])

    def test_zero_leading_feedback_rejected(self):
        """Test that a[0] == 0 cannot build a filter."""
        with pytest.raises(FilterError):
            IIRFilter(FilterCoefficients(b=(1.0,), a=(0.0, 1.0)))

    def test_empty_coefficients_rejected(self):
        """Test that empty coefficient vectors are rejected."""
        with pytest.raises(FilterError):
            IIRFilter(FilterCoefficients(b=(), a=(1.0,)))

    def test_fresh_filters_are_deterministic(self, camera_coefficients):
        """Test that fresh filters give identical output for identical input."""
        x = np.sin(np.linspace(0, 20, 300))

        first = IIRFilter(camera_coefficients).filter_all(x)
        second = IIRFilter(camera_coefficients).filter_all(x)

        assert np.array_equal(first, second)

    def test_state_carries_between_calls(self, camera_coefficients):
        """Test that one filter keeps its history across filter_all calls."""
        x = np.sin(np.linspace(0, 20, 300))

        iir = IIRFilter(camera_coefficients)
        split = np.concatenate([iir.filter_all(x[:100]), iir.filter_all(x[100:])])

        np.testing.assert_allclose(split, IIRFilter(camera_coefficients).filter_all(x))

    def test_length_preserved(self, camera_coefficients):
        """Test output length, including empty input."""
        iir = IIRFilter(camera_coefficients)

        assert len(iir.filter_all(np.ones(37))) == 37
        assert len(IIRFilter(camera_coefficients).filter_all([])) == 0

    def test_order_property(self, camera_coefficients):
        """Test the order reported by the filter."""
        assert IIRFilter(camera_coefficients).order == 4

    def test_passband_versus_stopband(self):
        """Test that the passband center passes and a far tone is attenuated."""
        fs = 100.0
        coeffs = design_bandpass(0.5, 4.0, fs, 4)
        t = np.arange(3000) / fs
        settle = 1000

        center = np.sin(2 * np.pi * np.sqrt(0.5 * 4.0) * t)
        stop = np.sin(2 * np.pi * 20.0 * t)

        passed = IIRFilter(coeffs).filter_all(center)[settle:]
        rejected = IIRFilter(coeffs).filter_all(stop)[settle:]

        assert _rms(passed) > 5 * _rms(rejected)
        assert _rms(passed) > 0.5 * _rms(center[settle:])


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
