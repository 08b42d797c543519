"""
Preprocessing Pipeline
======================

Ordered chain of IPreprocessor steps; each step's output feeds the next.

Standard PPG cleaning chain (create_standard_pipeline):

    raw -> detrend -> outlier_suppression -> bandpass -> bandpass_second_pass
        -> post_filter_outliers [-> normalization]

The two bandpass steps are separate filter instances, so the second pass
starts from zero state. By default it runs over the reversed sequence,
which cancels the first pass's phase delay.

A step that raises is reported as SignalProcessingFailed with the step
name as ``stage``; the orchestrator relies on this to say which stage
broke.

Usage Example:
    ```python
    from pulsedsp.preprocessing import PreprocessingPipeline
    from pulsedsp.preprocessing.steps import Detrend, BandpassFilter

    pipeline = PreprocessingPipeline()
    pipeline.add_step(Detrend())
    pipeline.add_step(BandpassFilter(), {'low_freq': 0.7})
    pipeline.initialize({'sampling_rate': 30})

    cleaned = pipeline.process(raw)
    ```

Author: PulseDSP
Date: 2024
"""

from collections import OrderedDict
from typing import Dict, Iterator, List, NamedTuple, Optional, Any, Union, Tuple, Sequence
import numpy as np
import logging
import time

from pulsedsp.core.exceptions import SignalProcessingFailed
from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor
from pulsedsp.core.registry import get_registry

logger = logging.getLogger(__name__)


class PipelineStep(NamedTuple):
    """One named stage of a pipeline and its step-specific settings."""
    name: str
    preprocessor: IPreprocessor
    config: Dict[str, Any]


class PreprocessingPipeline:
    """
    Sequential composition of preprocessing steps.

    Steps are configured in two layers: settings shared by every step
    (passed to initialize(), e.g. sampling_rate) and per-step settings
    given to add_step(). Per-step values win.

    Adding or removing a step marks the pipeline uninitialized again.
    """

    def __init__(self, timing: bool = False):
        """
        Args:
            timing: Log each step's duration at INFO instead of DEBUG
        """
        self._steps: List[PipelineStep] = []
        self._common: Dict[str, Any] = {}
        self._ready = False
        self._timing = timing
        self._durations: Dict[str, float] = {}

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def add_step(self,
                 preprocessor: IPreprocessor,
                 config: Optional[Dict[str, Any]] = None,
                 name: Optional[str] = None) -> 'PreprocessingPipeline':
        """
        Append a step.

        Args:
            preprocessor: Step implementing IPreprocessor
            config: Settings for this step only
            name: Stage name; defaults to ``preprocessor.name``, suffixed
                with _2, _3, ... when that name is already taken

        Returns:
            Self for chaining

        Raises:
            TypeError: If preprocessor is not an IPreprocessor
            ValueError: If an explicit name is already taken
        """
        return self.insert_step(len(self._steps), preprocessor, config, name)

    def insert_step(self,
                    index: int,
                    preprocessor: IPreprocessor,
                    config: Optional[Dict[str, Any]] = None,
                    name: Optional[str] = None) -> 'PreprocessingPipeline':
        """
        Insert a step before position index (0 = first); naming rules
        and errors as for add_step().
        """
        if not isinstance(preprocessor, IPreprocessor):
            raise TypeError(f"Expected IPreprocessor, got {type(preprocessor).__name__}")

        taken = set(self.get_steps())
        if name is None:
            name = base = preprocessor.name
            suffix = 2
            while name in taken:
                name = f"{base}_{suffix}"
                suffix += 1
        elif name in taken:
            raise ValueError(f"Step name already used: {name}")

        self._steps.insert(index, PipelineStep(name, preprocessor, dict(config or {})))
        self._ready = False
        logger.debug(f"Inserted step '{name}' at position {index}")
        return self

    def remove_step(self, name_or_index: Union[str, int]) -> 'PreprocessingPipeline':
        """
        Remove a step by stage name or position.

        Raises:
            ValueError: If no such step exists
        """
        if isinstance(name_or_index, int):
            if not 0 <= name_or_index < len(self._steps):
                raise ValueError(f"Invalid index: {name_or_index}")
            index = name_or_index
        else:
            index = self._index_of(name_or_index)

        removed = self._steps.pop(index)
        self._ready = False
        logger.debug(f"Removed step '{removed.name}'")
        return self

    def clear(self) -> 'PreprocessingPipeline':
        self._steps.clear()
        self._ready = False
        return self

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> 'PreprocessingPipeline':
        """
        Initialize every step with the shared settings plus its own.

        Errors raised by a step (for example an impossible filter design)
        propagate unchanged.
        """
        self._common = dict(config or {})

        for step in self._steps:
            try:
                step.preprocessor.initialize({**self._common, **step.config})
            except Exception as e:
                logger.error(f"Failed to initialize step '{step.name}': {e}")
                raise

        self._ready = True
        logger.debug(f"Pipeline initialized: {' -> '.join(self.get_steps()) or 'empty'}")
        return self

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """
        Run every step and return the last output.

        Raises:
            RuntimeError: If initialize() has not been called
            SignalProcessingFailed: If a step fails
        """
        result = data
        for _, result in self._run(data, **kwargs):
            pass
        return result

    def process_with_intermediates(self,
                                   data: np.ndarray,
                                   **kwargs) -> 'OrderedDict[str, np.ndarray]':
        """
        Run every step and keep each output, keyed by stage name in order.

        Raises:
            RuntimeError: If initialize() has not been called
            SignalProcessingFailed: If a step fails
        """
        return OrderedDict(self._run(data, **kwargs))

    def process_up_to(self, data: np.ndarray, step_name: str, **kwargs) -> np.ndarray:
        """
        Run steps until step_name has produced its output.

        Raises:
            ValueError: If step_name is not in the pipeline
        """
        self._index_of(step_name)

        result = data
        for name, result in self._run(data, **kwargs):
            if name == step_name:
                break
        return result

    def _run(self, data: np.ndarray, **kwargs) -> Iterator[Tuple[str, np.ndarray]]:
        if not self._ready:
            raise RuntimeError("Pipeline not initialized. Call initialize() first.")

        self._durations.clear()
        current = data

        for step in self._steps:
            started = time.perf_counter()
            try:
                current = step.preprocessor.process(current, **kwargs)
            except SignalProcessingFailed:
                raise
            except Exception as e:
                logger.error(f"Step '{step.name}' failed: {e}")
                raise SignalProcessingFailed(step.name, e) from e

            elapsed = time.perf_counter() - started
            self._durations[step.name] = elapsed
            logger.log(
                logging.INFO if self._timing else logging.DEBUG,
                f"Step '{step.name}' completed in {elapsed:.3f}s"
            )
            yield step.name, current

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def _index_of(self, name: str) -> int:
        for index, step in enumerate(self._steps):
            if step.name == name:
                return index
        raise ValueError(f"Step not found: {name}")

    def get_steps(self) -> List[str]:
        """Stage names in execution order."""
        return [step.name for step in self._steps]

    def get_step(self, name: str) -> Tuple[IPreprocessor, Dict[str, Any]]:
        """
        Return (preprocessor, step config) for a stage name.

        Raises:
            ValueError: If name is not in the pipeline
        """
        step = self._steps[self._index_of(name)]
        return step.preprocessor, step.config

    def get_execution_times(self) -> Dict[str, float]:
        """Seconds spent per stage during the most recent run."""
        return dict(self._durations)

    def summary(self) -> str:
        lines = [
            "Preprocessing Pipeline",
            "=" * 40,
            f"Steps: {len(self._steps)}",
            f"Initialized: {self._ready}",
            "",
        ]
        for position, step in enumerate(self._steps, start=1):
            lines.append(f"  {position}. {step.name} ({step.preprocessor.name})")
            lines.extend(f"      {key}: {value}" for key, value in step.config.items())

        if self._durations:
            lines.append("")
            lines.append("Last Execution:")
            lines.extend(f"  {name}: {secs:.3f}s" for name, secs in self._durations.items())
            lines.append(f"  Total: {sum(self._durations.values()):.3f}s")

        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[PipelineStep]:
        return iter(self._steps)

    def __repr__(self) -> str:
        chain = ' -> '.join(self.get_steps()) or 'empty'
        return f"PreprocessingPipeline({chain}) [{'initialized' if self._ready else 'not initialized'}]"


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_standard_pipeline(sampling_rate: float = 30.0,
                             bandpass_low: float = 0.5,
                             bandpass_high: float = 4.0,
                             filter_order: int = 4,
                             strict_order: bool = True,
                             second_pass: str = 'reverse',
                             outlier_threshold: float = 3.0,
                             feature_range: Optional[Sequence[float]] = None
                             ) -> PreprocessingPipeline:
    """
    Build and initialize the standard PPG cleaning chain.

    Args:
        sampling_rate: Sampling rate in Hz
        bandpass_low: Lower cutoff in Hz
        bandpass_high: Upper cutoff in Hz
        filter_order: Bandpass order (2, 4 or 6)
        strict_order: Reject other orders instead of degrading
        second_pass: 'reverse' (zero phase) or 'forward'
        outlier_threshold: z-score limit used by both outlier passes
        feature_range: Optional (low, high); appends a normalization step

    Returns:
        Initialized PreprocessingPipeline

    Raises:
        ValueError: If second_pass is unknown
        FilterError: If the bandpass cannot be designed
    """
    from pulsedsp.preprocessing.steps import (
        Detrend, OutlierSuppression, BandpassFilter, Normalization
    )

    if second_pass not in ('reverse', 'forward'):
        raise ValueError(f"second_pass must be 'reverse' or 'forward', got {second_pass!r}")

    outliers = {'threshold': outlier_threshold}

    pipeline = (
        PreprocessingPipeline()
        .add_step(Detrend(), name='detrend')
        .add_step(OutlierSuppression(), outliers, name='outlier_suppression')
        .add_step(BandpassFilter(), {'reverse': False}, name='bandpass')
        .add_step(BandpassFilter(), {'reverse': second_pass == 'reverse'},
                  name='bandpass_second_pass')
        .add_step(OutlierSuppression(), outliers, name='post_filter_outliers')
    )
    if feature_range is not None:
        pipeline.add_step(Normalization(), {'feature_range': tuple(feature_range)},
                          name='normalization')

    return pipeline.initialize({
        'sampling_rate': sampling_rate,
        'low_freq': bandpass_low,
        'high_freq': bandpass_high,
        'filter_order': filter_order,
        'strict_order': strict_order,
    })


def create_pipeline_from_config(config: Dict[str, Any]) -> PreprocessingPipeline:
    """
    Build a pipeline from registry type names.

    Args:
        config: {'common': {...shared settings...},
                 'steps': [{'type': 'detrend'},
                           {'type': 'bandpass', 'name': 'bp', 'config': {...}}]}

    Returns:
        Initialized PreprocessingPipeline

    Raises:
        ComponentNotFoundError: If a step type is not registered
    """
    # Importing the steps registers them
    import pulsedsp.preprocessing.steps  # noqa: F401

    registry = get_registry()
    pipeline = PreprocessingPipeline()

    for entry in config.get('steps', []):
        step_class = registry.get('preprocessor', entry.get('type', ''))
        pipeline.add_step(step_class(), entry.get('config'), name=entry.get('name'))

    return pipeline.initialize(config.get('common'))
