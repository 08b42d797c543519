"""
Features Module
===============

Physiological estimates derived from cleaned signals.
"""

from pulsedsp.features.heart_rate import estimate_heart_rate, count_upward_crossings

__all__ = ['estimate_heart_rate', 'count_upward_crossings']
