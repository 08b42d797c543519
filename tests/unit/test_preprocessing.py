"""
Unit Tests for Preprocessing Module
===================================

This module contains unit tests for the PPG preprocessing steps and the
pipeline that chains them.

Test Coverage:
- Detrend / fit_line
- OutlierSuppression / suppress_outliers
- BandpassFilter
- Normalization / min_max_scale
- PreprocessingPipeline
- create_standard_pipeline / create_pipeline_from_config

Author: PulseDSP
Date: 2024
"""

import pytest
import numpy as np
from scipy import signal as scipy_signal

# Import modules to test
from pulsedsp.preprocessing import (
    Detrend,
    OutlierSuppression,
    BandpassFilter,
    Normalization,
    detrend,
    suppress_outliers,
    min_max_scale,
    PreprocessingPipeline,
    create_standard_pipeline,
    create_pipeline_from_config,
)
from pulsedsp.preprocessing.steps import fit_line
from pulsedsp.core.exceptions import (
    DegenerateFit,
    InvalidFilterSpecification,
    UnsupportedFilterOrder,
    SignalProcessingFailed,
    ComponentNotFoundError,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def ppg_like_signal():
    """10 seconds of a 1.2 Hz pulse with drift and noise at 30 Hz."""
    np.random.seed(42)
    t = np.arange(300) / 30.0
    return np.sin(2 * np.pi * 1.2 * t) + 0.3 * t + 0.05 * np.random.randn(300)


# =============================================================================
# DETREND TESTS
# =============================================================================

class TestDetrend:
    """Test cases for linear detrending."""

    def test_linear_signal_becomes_zero(self):
        """Test that a pure line leaves a zero residual."""
        result = detrend(np.array([1.0, 2.0, 3.0, 4.0]))

        np.testing.assert_allclose(result, 0.0, atol=1e-12)

    def test_residual_has_no_trend(self, ppg_like_signal):
        """Test that the residual fits a zero line."""
        slope, intercept = fit_line(detrend(ppg_like_signal))

        assert slope == pytest.approx(0.0, abs=1e-9)
        assert intercept == pytest.approx(0.0, abs=1e-9)

    def test_fit_line_recovers_coefficients(self):
        """Test least-squares slope and intercept on an exact line."""
        slope, intercept = fit_line(2.5 * np.arange(20) - 7.0)

        assert slope == pytest.approx(2.5)
        assert intercept == pytest.approx(-7.0)

    def test_fit_line_single_sample_is_degenerate(self):
        """Test that one sample cannot define a line."""
        with pytest.raises(DegenerateFit):
            fit_line(np.array([3.0]))

    def test_short_inputs_returned_unchanged(self):
        """Test that fewer than two samples pass through."""
        assert detrend(np.array([5.0])).tolist() == [5.0]
        assert len(detrend(np.array([]))) == 0

    def test_input_not_modified(self, ppg_like_signal):
        """Test that detrend returns a new array."""
        original = ppg_like_signal.copy()

        detrend(ppg_like_signal)

        assert np.array_equal(ppg_like_signal, original)

    def test_step_requires_initialization(self, ppg_like_signal):
        """Test that processing before initialize() fails."""
        with pytest.raises(RuntimeError):
            Detrend().process(ppg_like_signal)

    def test_step_rejects_2d_input(self):
        """Test that the step only accepts 1D arrays."""
        step = Detrend()
        step.initialize({})

        with pytest.raises(ValueError):
            step.process(np.zeros((2, 10)))

    def test_step_has_no_parameters(self):
        """Test that set_params rejects any parameter."""
        step = Detrend()

        assert step.name == 'detrend'
        assert step.get_params() == {}
        with pytest.raises(ValueError):
            step.set_params(order=2)


# =============================================================================
# OUTLIER SUPPRESSION TESTS
# =============================================================================

class TestOutlierSuppression:
    """Test cases for z-score outlier suppression."""

    def test_spike_replaced_by_mean(self):
        """Test that a single spike beyond 3 sigma becomes the mean."""
        x = np.array([0.0] * 19 + [100.0])

        result = suppress_outliers(x)

        assert len(result) == 20
        assert result[-1] == pytest.approx(5.0)
        assert np.all(result[:-1] == 0.0)

    def test_short_sequence_with_lower_threshold(self):
        """Test a five-sample spike, whose z-score is exactly 2."""
        x = np.array([0.0, 0.0, 0.0, 0.0, 100.0])

        result = suppress_outliers(x, threshold=1.5)

        np.testing.assert_allclose(result, [0.0, 0.0, 0.0, 0.0, 20.0])

    def test_short_sequence_cannot_exceed_three_sigma(self):
        """Test that z-scores of n samples are bounded by sqrt(n - 1)."""
        x = np.array([0.0, 0.0, 0.0, 0.0, 100.0])

        assert np.array_equal(suppress_outliers(x), x)

    def test_constant_signal_unchanged(self):
        """Test that zero spread means no outliers."""
        x = np.full(10, 3.0)

        result = suppress_outliers(x)

        assert np.array_equal(result, x)
        assert result is not x

    def test_step_threshold_from_config(self):
        """Test that the step reads its threshold."""
        step = OutlierSuppression()
        step.initialize({'threshold': 2.0})

        assert step.name == 'outlier_suppression'
        assert step.get_params() == {'threshold': 2.0}

    @pytest.mark.parametrize('threshold', [0.0, -1.0, float('nan')])
    def test_invalid_threshold(self, threshold):
        """Test that non-positive thresholds are rejected."""
        with pytest.raises(ValueError):
            OutlierSuppression().initialize({'threshold': threshold})


# =============================================================================
# BANDPASS FILTER TESTS
# =============================================================================

class TestBandpassFilter:
    """Test cases for BandpassFilter."""

    def test_initialization(self):
        """Test filter initialization with valid parameters."""
        bp = BandpassFilter()
        bp.initialize({
            'sampling_rate': 30,
            'low_freq': 0.7,
            'high_freq': 3.5,
            'filter_order': 2
        })

        assert bp.name == 'bandpass'
        assert bp.get_passband() == (0.7, 3.5)
        assert bp.get_params()['filter_order'] == 2
        assert bp.get_params()['reverse'] is False

    def test_missing_sampling_rate(self):
        """Test that sampling_rate is required."""
        with pytest.raises(ValueError):
            BandpassFilter().initialize({'low_freq': 0.5})

    def test_invalid_frequencies(self):
        """Test that a cutoff above Nyquist is rejected."""
        with pytest.raises(InvalidFilterSpecification):
            BandpassFilter().initialize({'sampling_rate': 30, 'high_freq': 20.0})

    def test_unsupported_order(self):
        """Test strict and lenient handling of order 3."""
        with pytest.raises(UnsupportedFilterOrder):
            BandpassFilter().initialize({'sampling_rate': 30, 'filter_order': 3})

        lenient = BandpassFilter()
        lenient.initialize({'sampling_rate': 30, 'filter_order': 3, 'strict_order': False})

        assert lenient.get_coefficients().degraded is True

    def test_fractional_order_rejected(self):
        """Test that a fractional order is rejected instead of truncated."""
        with pytest.raises(UnsupportedFilterOrder):
            BandpassFilter().initialize({'sampling_rate': 30.0, 'filter_order': 4.9})

        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30.0})
        with pytest.raises(UnsupportedFilterOrder):
            bp.set_params(filter_order=2.5)

        assert bp.get_params()['filter_order'] == 4

    def test_integral_float_order_accepted(self):
        """Test that 4.0 is read as order 4."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30.0, 'filter_order': 4.0})

        assert bp.get_params()['filter_order'] == 4
        assert isinstance(bp.get_params()['filter_order'], int)

    @pytest.mark.parametrize('key, value', [
        ('strict_order', 'false'),
        ('reverse', 'yes'),
        ('reverse', 1),
    ])
    def test_non_bool_flags_rejected(self, key, value):
        """Test that flags only accept real booleans."""
        with pytest.raises(ValueError):
            BandpassFilter().initialize({'sampling_rate': 30.0, key: value})

    def test_rejected_set_params_leaves_settings_unchanged(self):
        """Test that a bad value in set_params() changes nothing."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30.0})
        before = bp.get_params()

        with pytest.raises(ValueError):
            bp.set_params(low_freq=0.7, reverse='true')

        assert bp.get_params() == before

    def test_forward_pass_matches_lfilter(self, ppg_like_signal):
        """Test the forward pass against scipy's lfilter."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30})
        b, a = bp.get_coefficients().as_arrays()

        result = bp.process(ppg_like_signal)

        np.testing.assert_allclose(
            result, scipy_signal.lfilter(b, a, ppg_like_signal), rtol=1e-8, atol=1e-10
        )

    def test_reverse_pass_filters_time_reversed_signal(self, ppg_like_signal):
        """Test that reverse mode filters backwards and restores order."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30, 'reverse': True})
        b, a = bp.get_coefficients().as_arrays()

        result = bp.process(ppg_like_signal)
        expected = scipy_signal.lfilter(b, a, ppg_like_signal[::-1])[::-1]

        np.testing.assert_allclose(result, expected, rtol=1e-8, atol=1e-10)

    def test_fresh_state_per_call(self, ppg_like_signal):
        """Test that no filter state leaks between calls."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30})

        assert np.array_equal(bp.process(ppg_like_signal), bp.process(ppg_like_signal))

    def test_output_length(self, ppg_like_signal):
        """Test that filtering preserves length."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30})

        assert len(bp.process(ppg_like_signal)) == len(ppg_like_signal)

    def test_frequency_response(self):
        """Test that the passband center is within 3 dB."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30, 'low_freq': 0.5, 'high_freq': 4.0})

        freqs, magnitude_db = bp.get_frequency_response()
        center = np.argmin(np.abs(freqs - np.sqrt(0.5 * 4.0)))

        assert len(freqs) == len(magnitude_db) == 512
        assert magnitude_db[center] > -3.0
        assert magnitude_db[-1] < -20.0

    def test_set_params_redesigns(self):
        """Test that changing cutoffs changes the coefficients."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': 30})
        before = bp.get_coefficients()

        bp.set_params(low_freq=0.7, high_freq=3.5)

        assert bp.get_coefficients() != before

    def test_set_params_unknown_key(self):
        """Test that unknown parameters are rejected."""
        with pytest.raises(ValueError):
            BandpassFilter().set_params(notch=50)


# =============================================================================
# NORMALIZATION TESTS
# =============================================================================

class TestNormalization:
    """Test cases for min-max normalization."""

    def test_maps_extremes_to_display_range(self):
        """Test that min maps to 0 and max to 255."""
        result = min_max_scale(np.array([-2.0, 0.0, 2.0]))

        np.testing.assert_allclose(result, [0.0, 127.5, 255.0])

    def test_constant_signal_maps_to_low(self):
        """Test that a zero span is treated as one."""
        result = min_max_scale(np.full(5, 7.0))

        assert np.all(result == 0.0)

    def test_custom_range(self):
        """Test a custom feature range through the step."""
        step = Normalization()
        step.initialize({'feature_range': (-1, 1)})

        result = step.process(np.array([0.0, 5.0, 10.0]))

        np.testing.assert_allclose(result, [-1.0, 0.0, 1.0])

    def test_invalid_range(self):
        """Test that an inverted range is rejected."""
        with pytest.raises(ValueError):
            Normalization().initialize({'feature_range': (255, 0)})


# =============================================================================
# PIPELINE TESTS
# =============================================================================

class TestPreprocessingPipeline:
    """Test cases for PreprocessingPipeline."""

    def test_add_steps(self):
        """Test adding steps to pipeline."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(Detrend())
        pipeline.add_step(BandpassFilter(), {'low_freq': 0.5})

        assert len(pipeline) == 2
        assert pipeline.get_steps() == ['detrend', 'bandpass']

    def test_duplicate_names(self):
        """Test automatic suffixes and explicit duplicates."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(OutlierSuppression())
        pipeline.add_step(OutlierSuppression())

        assert pipeline.get_steps() == ['outlier_suppression', 'outlier_suppression_2']

        with pytest.raises(ValueError):
            pipeline.add_step(Detrend(), name='outlier_suppression')

    def test_rejects_non_preprocessor(self):
        """Test that only IPreprocessor steps are accepted."""
        with pytest.raises(TypeError):
            PreprocessingPipeline().add_step(lambda x: x)

    def test_process_requires_initialization(self, ppg_like_signal):
        """Test that an uninitialized pipeline refuses to run."""
        pipeline = PreprocessingPipeline().add_step(Detrend())

        with pytest.raises(RuntimeError):
            pipeline.process(ppg_like_signal)

    def test_process(self, ppg_like_signal):
        """Test processing through pipeline."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(Detrend())
        pipeline.add_step(BandpassFilter())
        pipeline.initialize({'sampling_rate': 30})

        result = pipeline.process(ppg_like_signal)

        assert result.shape == ppg_like_signal.shape
        assert set(pipeline.get_execution_times()) == {'detrend', 'bandpass'}

    def test_intermediates_in_order(self, ppg_like_signal):
        """Test that every step output is kept in execution order."""
        pipeline = create_standard_pipeline(sampling_rate=30)

        outputs = pipeline.process_with_intermediates(ppg_like_signal)

        assert list(outputs) == pipeline.get_steps()
        np.testing.assert_allclose(outputs['detrend'], detrend(ppg_like_signal))

    def test_process_up_to(self, ppg_like_signal):
        """Test stopping after a named step."""
        pipeline = create_standard_pipeline(sampling_rate=30)

        result = pipeline.process_up_to(ppg_like_signal, 'detrend')

        np.testing.assert_allclose(result, detrend(ppg_like_signal))
        with pytest.raises(ValueError):
            pipeline.process_up_to(ppg_like_signal, 'missing')

    def test_step_failure_names_stage(self):
        """Test that a failing step is reported with its name."""
        pipeline = PreprocessingPipeline().add_step(Detrend())
        pipeline.initialize({})

        with pytest.raises(SignalProcessingFailed) as exc_info:
            pipeline.process(np.zeros((3, 3)))

        assert exc_info.value.stage == 'detrend'
        assert isinstance(exc_info.value.cause, ValueError)

    def test_remove_and_clear(self):
        """Test removing steps by name and index, then clearing."""
        pipeline = create_standard_pipeline(sampling_rate=30)

        pipeline.remove_step('bandpass_second_pass')
        pipeline.remove_step(0)

        assert 'bandpass_second_pass' not in pipeline.get_steps()
        assert pipeline.get_steps()[0] == 'outlier_suppression'

        pipeline.clear()
        assert len(pipeline) == 0

    def test_insert_step(self, ppg_like_signal):
        """Test inserting a step ahead of existing ones."""
        pipeline = PreprocessingPipeline().add_step(BandpassFilter())
        pipeline.insert_step(0, Detrend())
        pipeline.initialize({'sampling_rate': 30})

        step, _ = pipeline.get_step('detrend')

        assert pipeline.get_steps() == ['detrend', 'bandpass']
        np.testing.assert_allclose(step(ppg_like_signal), detrend(ppg_like_signal))

    def test_standard_pipeline_steps(self):
        """Test the standard step order."""
        pipeline = create_standard_pipeline(sampling_rate=30)

        assert pipeline.get_steps() == [
            'detrend',
            'outlier_suppression',
            'bandpass',
            'bandpass_second_pass',
            'post_filter_outliers',
        ]

    def test_standard_pipeline_second_pass(self):
        """Test that the second pass runs backwards unless asked not to."""
        reverse, _ = create_standard_pipeline(sampling_rate=30).get_step('bandpass_second_pass')
        forward, _ = create_standard_pipeline(
            sampling_rate=30, second_pass='forward'
        ).get_step('bandpass_second_pass')

        assert reverse.get_params()['reverse'] is True
        assert forward.get_params()['reverse'] is False

        with pytest.raises(ValueError):
            create_standard_pipeline(second_pass='sideways')

    def test_standard_pipeline_with_normalization(self, ppg_like_signal):
        """Test that a feature range appends a normalization step."""
        pipeline = create_standard_pipeline(sampling_rate=30, feature_range=(0, 255))

        result = pipeline.process(ppg_like_signal)

        assert pipeline.get_steps()[-1] == 'normalization'
        assert result.min() == pytest.approx(0.0)
        assert result.max() == pytest.approx(255.0)

    def test_from_config(self):
        """Test building a pipeline from registry type names."""
        pipeline = create_pipeline_from_config({
            'common': {'sampling_rate': 30},
            'steps': [
                {'type': 'detrend'},
                {'type': 'bandpass', 'name': 'bp', 'config': {'low_freq': 0.7}},
            ]
        })

        step, _ = pipeline.get_step('bp')

        assert pipeline.get_steps() == ['detrend', 'bp']
        assert step.get_passband() == (0.7, 4.0)

    def test_from_config_unknown_type(self):
        """Test that unregistered step types are reported."""
        with pytest.raises(ComponentNotFoundError):
            create_pipeline_from_config({'steps': [{'type': 'wavelet'}]})

    def test_summary(self):
        """Test the human-readable summary."""
        summary = create_standard_pipeline(sampling_rate=30).summary()

        assert 'Preprocessing Pipeline' in summary
        assert 'bandpass_second_pass' in summary


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
