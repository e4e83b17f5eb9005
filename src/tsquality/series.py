"""
Data model for time series quality assessment.

Defines the sample and series containers consumed by the engine, the
mutable counter struct written by the detection passes, and the quality
report produced from it.
"""

from dataclasses import dataclass, asdict, fields
from typing import Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class Sample:
    """A single (timestamp, value) observation. ``value`` may be NaN."""
    timestamp: float
    value: float


class Series:
    """
    Time-sorted series held as two index-aligned channels.

    The caller guarantees ascending timestamps; the series does not re-sort.
    Both channels are float64 copies of the input, so mutating them never
    affects the caller's data.
    """

    def __init__(self, time: Sequence[float], values: Sequence[float]):
        """
        Initialize series from two equal-length numeric channels.

        Args:
            time: Timestamps in ascending order
            values: Values aligned with ``time`` (NaN marks a missing value)

        Raises:
            ValueError: If the channels differ in length
        """
        self.time = np.array(time, dtype=np.float64).reshape(-1)
        self.values = np.array(values, dtype=np.float64).reshape(-1)

        if len(self.time) != len(self.values):
            raise ValueError(
                f"Time and value channels must have equal length "
                f"({len(self.time)} != {len(self.values)})"
            )

    @classmethod
    def from_samples(cls, samples: Iterable[Sample]) -> "Series":
        """Build a series from an iterable of samples."""
        samples = list(samples)
        return cls(
            [s.timestamp for s in samples],
            [s.value for s in samples],
        )

    def copy(self) -> "Series":
        return Series(self.time, self.values)

    def to_samples(self) -> List[Sample]:
        return [Sample(float(t), float(v)) for t, v in zip(self.time, self.values)]

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame with ``timestamp`` and ``value`` columns."""
        return pd.DataFrame({"timestamp": self.time, "value": self.values})

    def missing_count(self) -> int:
        return int(np.count_nonzero(np.isnan(self.values)))

    def __len__(self) -> int:
        return len(self.time)

    def __repr__(self) -> str:
        return f"Series(n={len(self)}, missing={self.missing_count()})"


@dataclass
class QualityCounters:
    """
    Defect counters accumulated by the detection passes.

    ``total`` is the sample count, fixed when the engine is built. Temporal
    counters are written by the temporal classifier, anomaly counters by the
    value anomaly detector; the two sets are disjoint.

    ``special_count`` is reserved for flagged/sentinel values and is never
    populated by the current passes.
    """
    total: int = 0

    # Temporal
    miss_count: int = 0
    late_count: int = 0
    redundancy_count: int = 0
    special_count: int = 0

    # Value anomalies
    value_count: int = 0
    variation_count: int = 0
    speed_count: int = 0
    speed_change_count: int = 0

    @property
    def anomaly_count(self) -> int:
        return self.value_count + self.variation_count + self.speed_count + self.speed_change_count

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class QualityReport:
    """Normalized quality scores; each lies in [0, 1] for well-formed input."""
    completeness: float
    consistency: float
    timeliness: float
    validity: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def score_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]
