"""
Core Types Module
=================

Data types shared by all PulseDSP components.
"""

from pulsedsp.core.types.signal_types import (
    FilterSpecification,
    FilterCoefficients,
    QualityMetrics,
    ProcessedResult,
    RESULT_SHAPES,
)

__all__ = [
    'FilterSpecification',
    'FilterCoefficients',
    'QualityMetrics',
    'ProcessedResult',
    'RESULT_SHAPES',
]
