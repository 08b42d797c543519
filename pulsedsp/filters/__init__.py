"""
Filters Module
==============

Bandpass coefficient design and the stateful IIR recurrence that
applies it.

Example Usage:
    ```python
    from pulsedsp.filters import FilterDesigner, IIRFilter
    from pulsedsp.core.types import FilterSpecification

    coeffs = FilterDesigner().design(FilterSpecification(0.5, 4.0, 30.0, 4))
    output = IIRFilter(coeffs).filter_all(samples)
    ```
"""

from pulsedsp.filters.design import FilterDesigner, design_bandpass, SUPPORTED_ORDERS
from pulsedsp.filters.iir import IIRFilter

__all__ = [
    'FilterDesigner',
    'design_bandpass',
    'SUPPORTED_ORDERS',
    'IIRFilter',
]
