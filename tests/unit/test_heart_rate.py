"""
Unit Tests for Heart Rate Estimation
====================================

Test Coverage:
- count_upward_crossings
- estimate_heart_rate

Author: PulseDSP
Date: 2024
"""

import pytest
import numpy as np

# Import modules to test
from pulsedsp.features import estimate_heart_rate, count_upward_crossings


def _tone(freq_hz: float, seconds: float, fs: float = 30.0) -> np.ndarray:
    t = np.arange(int(seconds * fs)) / fs
    return np.sin(2 * np.pi * freq_hz * t)


class TestUpwardCrossings:
    """Test cases for mean-crossing counting."""

    def test_alternating(self):
        """Test one crossing per rise."""
        assert count_upward_crossings(np.array([0.0, 1.0, 0.0, 1.0, 0.0]), 0.5) == 2

    def test_start_above_level_counted_once(self):
        """Test a segment that never dips below the level."""
        assert count_upward_crossings(np.array([1.0, 1.0, 1.0]), 0.5) == 1

    def test_no_crossings(self):
        """Test a flat trace at the level."""
        assert count_upward_crossings(np.zeros(10), 0.0) == 0


class TestEstimateHeartRate:
    """Test cases for estimate_heart_rate."""

    def test_seventy_two_bpm(self):
        """Test a 1.2 Hz pulse over ten seconds."""
        bpm = estimate_heart_rate(_tone(1.2, 10.0), 30.0)

        assert bpm is not None
        assert abs(bpm - 72) <= 6

    def test_returns_integer(self):
        """Test that the estimate is a rounded integer."""
        assert isinstance(estimate_heart_rate(_tone(1.5, 10.0), 30.0), int)

    def test_short_segment(self):
        """Test that under five seconds gives no estimate."""
        assert estimate_heart_rate(_tone(1.2, 4.0), 30.0) is None

    def test_too_slow(self):
        """Test that 30 BPM is rejected as implausible."""
        assert estimate_heart_rate(_tone(0.5, 10.0), 30.0) is None

    def test_too_fast(self):
        """Test that 240 BPM is rejected as implausible."""
        assert estimate_heart_rate(_tone(4.0, 10.0), 30.0) is None

    def test_flat_signal(self):
        """Test that a flat trace has no estimate."""
        assert estimate_heart_rate(np.full(300, 128.0), 30.0) is None

    def test_custom_bounds(self):
        """Test overriding the duration and plausibility bounds."""
        bpm = estimate_heart_rate(_tone(0.5, 10.0), 30.0, min_bpm=20, max_bpm=60)

        assert bpm == 30

    def test_invalid_sampling_rate(self):
        """Test that the sampling rate must be positive."""
        with pytest.raises(ValueError):
            estimate_heart_rate(_tone(1.2, 10.0), 0.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
