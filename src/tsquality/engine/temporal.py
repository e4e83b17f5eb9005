"""
Temporal irregularity classification.

Slides a bounded window over the timestamps and classifies each sampling
interval against a robust baseline interval:

- ratio <= redundancy_ratio: the second sample arrived too soon (redundant)
- ratio >= gap_ratio: a gap; samples arriving compressed right after the gap
  are late, the rest of the implied samples are missing
- otherwise: normal spacing

Classification is local to the window, so one large gap does not skew the
rest of the series, and the whole pass is a single forward scan.
"""

import math
from collections import deque
from itertools import islice
from typing import Deque, Iterator, Optional

import numpy as np

from tsquality.engine.derivatives import first_difference
from tsquality.engine.statistics import median
from tsquality.logger import get_logger
from tsquality.series import QualityCounters
from tsquality.thresholds import DetectionSettings


logger = get_logger(__name__)


def round_half_away(x: float) -> int:
    """Round to nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def baseline_interval(time: np.ndarray) -> float:
    """
    Typical spacing between consecutive timestamps.

    The intervals are sorted before taking the (positional) median, so this
    is the rank median of the sampling intervals.
    """
    intervals = np.sort(first_difference(time))
    return median(intervals)


class TemporalClassifier:
    """
    Sliding-window classifier for missing, late and redundant samples.
    """

    def __init__(self, settings: Optional[DetectionSettings] = None):
        self.settings = settings or DetectionSettings()

    def detect(self, time: np.ndarray, counters: QualityCounters) -> QualityCounters:
        """
        Run the temporal pass and add its findings to ``counters``.

        Args:
            time: Ascending timestamps
            counters: Counter struct updated in place

        Returns:
            The same ``counters`` instance
        """
        base = baseline_interval(time)

        if not np.isfinite(base) or base <= 0.0:
            if len(time) > 1:
                logger.warning(
                    f"Baseline interval is {base}; skipping temporal classification "
                    f"for {len(time)} samples"
                )
            return counters

        window_size = self.settings.window_size
        source: Iterator[float] = iter(time.tolist())
        window: Deque[float] = deque(islice(source, window_size))

        while len(window) > 1:
            ratio = (window[1] - window[0]) / base

            if ratio <= self.settings.redundancy_ratio:
                head = window.popleft()
                window.popleft()
                window.appendleft(head)
                counters.redundancy_count += 1
            elif ratio >= self.settings.gap_ratio:
                expected = round_half_away(ratio - 1)
                late = self._absorb_late_samples(window, base, expected)
                counters.late_count += late
                counters.miss_count += expected - late

            window.popleft()
            window.extend(islice(source, window_size - len(window)))

        logger.debug(
            f"Temporal pass over {len(time)} samples (base interval {base:.6g}): "
            f"missing={counters.miss_count}, late={counters.late_count}, "
            f"redundant={counters.redundancy_count}"
        )
        return counters

    def _absorb_late_samples(self, window: Deque[float], base: float, expected: int) -> int:
        """
        Remove samples that catch up on the gap between ``window[0]`` and ``window[1]``.

        Scans forward from ``window[2]`` until the next gap, dropping every
        sample that follows its predecessor too closely, and stops once
        ``expected`` samples have been accounted for. The window is rebuilt
        in one pass.

        Returns:
            Number of late samples removed
        """
        items = list(window)
        kept = items[:2]
        late = 0
        idx = 2

        while idx < len(items):
            step = (items[idx] - kept[-1]) / base

            if step >= self.settings.gap_ratio:
                break

            if step <= self.settings.redundancy_ratio:
                late += 1
                idx += 1
                if late == expected:
                    break
                continue

            kept.append(items[idx])
            idx += 1

        kept.extend(items[idx:])
        window.clear()
        window.extend(kept)
        return late
