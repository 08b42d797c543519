"""
Core Interfaces Module
======================

Abstract interfaces for the PulseDSP engine.

- IPreprocessor: one stage of the cleaning chain

Example Usage:
    ```python
    from pulsedsp.core.interfaces import IPreprocessor
    from pulsedsp.core.registry import registered

    @registered('preprocessor', 'smoothing')
    class Smoothing(IPreprocessor):
        ...
    ```
"""

from pulsedsp.core.interfaces.i_preprocessor import IPreprocessor

__all__ = ['IPreprocessor']
