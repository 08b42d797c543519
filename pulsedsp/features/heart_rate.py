"""
Heart Rate Estimation
=====================

Rough beats-per-minute estimate from a cleaned PPG segment by counting
upward crossings of the segment mean:

    bpm = crossings / duration_sec * 60   (rounded half up)

Estimates outside (min_bpm, max_bpm) are treated as implausible and
reported as None, as are segments shorter than min_duration_sec.

Author: PulseDSP
Date: 2024
"""

from typing import Optional, Sequence, Union
import logging

import numpy as np

from pulsedsp.utils.validation import check_positive, check_type


logger = logging.getLogger(__name__)


def count_upward_crossings(signal: np.ndarray, level: float) -> int:
    """
    Count transitions from <= level to > level.

    The first sample only seeds the state; a segment that starts above
    the level is counted once it is seen at index 1.
    """
    crossings = 0
    was_below = True
    for value in signal[1:]:
        if value > level and was_below:
            crossings += 1
            was_below = False
        elif value <= level:
            was_below = True
    return crossings


def estimate_heart_rate(signal: Union[Sequence[float], np.ndarray],
                        sampling_rate: float,
                        min_duration_sec: float = 5.0,
                        min_bpm: float = 40,
                        max_bpm: float = 200) -> Optional[int]:
    """
    Estimate heart rate in beats per minute.

    Args:
        signal: Cleaned PPG samples
        sampling_rate: Sampling rate in Hz
        min_duration_sec: Shortest segment that is analysed
        min_bpm: Exclusive lower plausibility bound
        max_bpm: Exclusive upper plausibility bound

    Returns:
        Rounded BPM, or None when the segment is too short or the
        estimate is implausible
    """
    check_positive(sampling_rate, name='sampling_rate')
    check_type(min_duration_sec, (int, float), name='min_duration_sec')

    x = np.asarray(signal, dtype=np.float64)
    if len(x) < sampling_rate * min_duration_sec:
        logger.debug(
            f"Segment of {len(x)} samples shorter than {min_duration_sec}s; no estimate"
        )
        return None

    crossings = count_upward_crossings(x, float(x.mean()))
    duration_sec = len(x) / sampling_rate
    # Half-up rounding
    bpm = int(np.floor(crossings / duration_sec * 60 + 0.5))

    if not min_bpm < bpm < max_bpm:
        logger.debug(f"Heart rate estimate {bpm} BPM outside ({min_bpm}, {max_bpm})")
        return None

    return bpm
