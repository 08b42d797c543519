"""
Unit Tests for Quality Assessment
=================================

Test Coverage:
- SNR strategies (residual, direct)
- Clipping strategies (peak_fraction, range_band)
- Motion strategies (difference_std, abrupt_change_rate)
- QualityAssessor
- QualityMetrics serialization

Author: PulseDSP
Date: 2024
"""

import pytest
import numpy as np

# Import modules to test
from pulsedsp.quality import QualityAssessor
from pulsedsp.quality.metrics import (
    residual_snr,
    direct_snr,
    peak_fraction_clipping,
    range_band_clipping,
    difference_std_motion,
    abrupt_change_motion,
)
from pulsedsp.core.types import QualityMetrics
from pulsedsp.core.registry import get_registry
from pulsedsp.core.exceptions import ComponentNotFoundError


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def clean_sine():
    """Ten cycles of a unit sine, 300 samples."""
    t = np.arange(300) / 30.0
    return np.sin(2 * np.pi * t)


@pytest.fixture
def clipped_ramp():
    """Ramp whose last two samples sit at the ceiling."""
    return np.array([10, 20, 30, 40, 50, 60, 70, 80, 100, 100], dtype=float)


# =============================================================================
# SNR TESTS
# =============================================================================

class TestSNR:
    """Test cases for SNR estimators."""

    def test_small_noise_gives_high_snr(self, clean_sine):
        """Test that 1% noise gives a high SNR."""
        np.random.seed(0)
        raw = clean_sine + 0.01 * np.random.randn(len(clean_sine))

        assert residual_snr(clean_sine, raw) > 30.0

    def test_large_noise_floors_at_zero(self, clean_sine):
        """Test that the SNR is never negative."""
        np.random.seed(0)
        raw = clean_sine + 100.0 * np.random.randn(len(clean_sine))

        assert residual_snr(clean_sine, raw) == 0.0

    def test_identical_signals_bounded_by_epsilon(self, clean_sine):
        """Test that zero noise power stays finite."""
        snr = residual_snr(clean_sine, clean_sine)

        assert np.isfinite(snr)
        assert snr == pytest.approx(10 * np.log10(0.5 / 1e-10), rel=1e-3)

    def test_zero_clean_signal(self):
        """Test that a silent clean signal has zero SNR."""
        assert residual_snr(np.zeros(10), np.ones(10)) == 0.0

    def test_length_mismatch(self):
        """Test that residual SNR needs aligned sequences."""
        with pytest.raises(ValueError):
            residual_snr(np.ones(10), np.ones(9))

    def test_direct_snr(self):
        """Test SNR from an explicit noise sequence."""
        assert direct_snr(np.ones(10), 0.1 * np.ones(5)) == pytest.approx(20.0)

    def test_direct_snr_zero_noise(self):
        """Test that zero noise power returns zero instead of infinity."""
        assert direct_snr(np.ones(10), np.zeros(10)) == 0.0

    def test_direct_snr_not_negative(self):
        """Test that noise louder than signal floors at zero."""
        assert direct_snr(0.1 * np.ones(10), np.ones(10)) == 0.0


# =============================================================================
# CLIPPING TESTS
# =============================================================================

class TestClipping:
    """Test cases for clipping detectors."""

    def test_peak_fraction(self, clipped_ramp):
        """Test samples at or above 95% of the maximum."""
        assert peak_fraction_clipping(clipped_ramp) == pytest.approx(20.0)

    def test_range_band(self, clipped_ramp):
        """Test samples within 2% of the range from either extreme."""
        assert range_band_clipping(clipped_ramp) == pytest.approx(30.0)

    def test_constant_signal_fully_clipped(self):
        """Test that a flat positive trace counts as saturated."""
        flat = np.full(8, 200.0)

        assert peak_fraction_clipping(flat) == 100.0
        assert range_band_clipping(flat) == 100.0

    def test_empty_signal(self):
        """Test that empty input yields zero."""
        assert peak_fraction_clipping(np.array([])) == 0.0
        assert range_band_clipping(np.array([])) == 0.0

    def test_percentage_bounds(self, clean_sine):
        """Test that the percentage stays within 0-100."""
        value = peak_fraction_clipping(clean_sine)

        assert 0.0 <= value <= 100.0


# =============================================================================
# MOTION TESTS
# =============================================================================

class TestMotion:
    """Test cases for motion artifact heuristics."""

    def test_constant_signal_no_motion(self):
        """Test that a flat trace scores zero."""
        flat = np.full(20, 4.0)

        assert difference_std_motion(flat) == 0.0
        assert abrupt_change_motion(flat) == 0.0

    def test_difference_std(self):
        """Test the spread of absolute first differences."""
        assert difference_std_motion(np.array([0.0, 1.0, 0.0, 1.0])) == pytest.approx(0.0)
        assert difference_std_motion(np.array([0.0, 1.0, 3.0])) == pytest.approx(0.5)

    def test_abrupt_change_rate(self):
        """Test the percentage of jumps above 2 * range / n."""
        assert abrupt_change_motion(np.array([0.0, 0.0, 0.0, 0.0, 10.0])) == pytest.approx(20.0)

    def test_short_inputs(self):
        """Test degenerate lengths."""
        assert difference_std_motion(np.array([1.0])) == 0.0
        assert abrupt_change_motion(np.array([1.0, 5.0])) == 0.0

    def test_jumpy_signal_scores_higher(self, clean_sine):
        """Test that injected jumps raise the difference score."""
        jumpy = clean_sine.copy()
        jumpy[::25] += 5.0

        assert difference_std_motion(jumpy) > difference_std_motion(clean_sine)


# =============================================================================
# ASSESSOR TESTS
# =============================================================================

class TestQualityAssessor:
    """Test cases for QualityAssessor."""

    def test_default_strategies(self):
        """Test the default strategy selection."""
        assessor = QualityAssessor()

        assert assessor.snr_method == 'residual'
        assert assessor.clipping_method == 'peak_fraction'
        assert assessor.motion_method == 'difference_std'

    @pytest.mark.parametrize('clipping, motion, snr, expected', [
        (2.0, 5.0, 10.0, True),
        (10.0, 5.0, 10.0, False),
        (2.0, 25.0, 10.0, False),
        (2.0, 5.0, 3.0, False),
        (5.0, 5.0, 10.0, False),
        (2.0, 20.0, 10.0, False),
        (2.0, 5.0, 5.0, False),
    ])
    def test_valid_segment_thresholds(self, clipping, motion, snr, expected):
        """Test strict comparison against each threshold."""
        assert QualityAssessor().valid_segment(clipping, motion, snr) is expected

    def test_threshold_override(self):
        """Test that thresholds can be overridden per instance."""
        assessor = QualityAssessor({'thresholds': {'max_clipping_pct': 15.0}})

        assert assessor.valid_segment(10.0, 5.0, 10.0) is True
        assert assessor.min_snr_db == 5.0

    def test_clipping_method_selection(self, clipped_ramp):
        """Test switching the clipping strategy."""
        assessor = QualityAssessor({'clipping_method': 'range_band'})

        assert assessor.clipping_percentage(clipped_ramp) == pytest.approx(30.0)

    def test_unknown_method(self):
        """Test that unregistered strategies are reported."""
        with pytest.raises(ComponentNotFoundError):
            QualityAssessor({'motion_method': 'accelerometer'})

    def test_assess_uses_sources(self, clean_sine, clipped_ramp):
        """Test that clipping and motion use their own sources."""
        assessor = QualityAssessor()
        flat = np.zeros(10)

        metrics = assessor.assess(
            clean_sine, clean_sine, clipping_source=clipped_ramp, motion_source=flat
        )

        assert isinstance(metrics, QualityMetrics)
        assert metrics.clipping_percentage == pytest.approx(20.0)
        assert metrics.motion_artifact_score == 0.0
        assert metrics.valid_segment is False

    def test_assess_valid_segment(self, clean_sine):
        """Test a clean segment with a little noise is usable."""
        np.random.seed(1)
        reference = clean_sine + 0.05 * np.random.randn(len(clean_sine))

        metrics = QualityAssessor().assess(
            clean_sine, reference, clipping_source=np.append(np.zeros(299), 1.0)
        )

        assert metrics.snr > 5.0
        assert metrics.valid_segment is True

    def test_strategies_registered(self):
        """Test that every strategy is discoverable by name."""
        registry = get_registry()

        assert set(registry.list('snr_estimator')) >= {'residual', 'direct'}
        assert set(registry.list('clipping_detector')) >= {'peak_fraction', 'range_band'}
        assert set(registry.list('motion_detector')) >= {'difference_std', 'abrupt_change_rate'}


# =============================================================================
# METRICS TYPE TESTS
# =============================================================================

class TestQualityMetrics:
    """Test cases for QualityMetrics."""

    def test_to_dict_rounds_and_renames(self):
        """Test the public message form."""
        metrics = QualityMetrics(12.345, 1.66, 0.04, True)

        assert metrics.to_dict() == {
            'snr': 12.3,
            'clippingPercentage': 1.7,
            'motionArtifactScore': 0.0,
            'validSegment': True,
        }

    def test_rounded_keeps_verdict(self):
        """Test that rounding never changes the validity flag."""
        metrics = QualityMetrics(5.04, 4.96, 19.97, False)

        rounded = metrics.rounded()

        assert rounded.snr == 5.0
        assert rounded.clipping_percentage == 5.0
        assert rounded.valid_segment is False

    def test_frozen(self):
        """Test that metrics cannot be edited."""
        metrics = QualityMetrics(10.0, 1.0, 1.0, True)

        with pytest.raises(AttributeError):
            metrics.snr = 0.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
