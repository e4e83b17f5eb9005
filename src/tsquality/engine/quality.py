"""
Quality engine for a single time series.

Owns one series, repairs missing values on construction, runs the temporal
and value detection passes on demand, and derives the four normalized
quality scores from the accumulated counters.
"""

from typing import List, Optional, Sequence

from tsquality.engine.anomalies import ValueAnomalyDetector
from tsquality.engine.interpolation import interpolate_missing
from tsquality.engine.temporal import TemporalClassifier
from tsquality.logger import get_logger
from tsquality.series import QualityCounters, QualityReport, Sample, Series
from tsquality.thresholds import DetectionSettings


logger = get_logger(__name__)

# Scores reported for an empty series
EMPTY_SERIES_SCORE = 1.0


class QualityEngine:
    """
    Single-use quality assessment of one time series.

    Detection passes accumulate into the same counters, so running a pass
    twice doubles its counts. Build a fresh engine per assessment.

    Example:
        >>> engine = QualityEngine([0, 1, 2, 3], [1.0, float("nan"), 3.0, 4.0])
        >>> report = engine.assess()
        >>> report.completeness
        1.0
    """

    WINDOW_SIZE = 10

    def __init__(
        self,
        time: Sequence[float],
        values: Sequence[float],
        settings: Optional[DetectionSettings] = None,
    ):
        """
        Initialize engine and interpolate missing values.

        Args:
            time: Ascending timestamps (not re-sorted)
            values: Values aligned with ``time``; NaN marks a missing value
            settings: Detection parameters (defaults if None)
        """
        self.settings = settings or DetectionSettings(window_size=self.WINDOW_SIZE)
        self.original = Series(time, values)
        self.series = self.original.copy()
        self.counters = QualityCounters(total=len(self.series))

        # Reserved maintenance-window suppression flag; not consulted by any pass
        self.downtime = True

        self.interpolated_count = interpolate_missing(self.series.time, self.series.values)

    @classmethod
    def from_series(
        cls,
        series: Series,
        settings: Optional[DetectionSettings] = None,
    ) -> "QualityEngine":
        return cls(series.time, series.values, settings=settings)

    def time_detect(self) -> QualityCounters:
        """Classify sampling intervals as missing, late or redundant."""
        return TemporalClassifier(self.settings).detect(self.series.time, self.counters)

    def value_detect(self) -> QualityCounters:
        """Count value, variation, speed and speed-change outliers."""
        return ValueAnomalyDetector(self.settings).detect(
            self.series.time, self.series.values, self.counters
        )

    def assess(self) -> QualityReport:
        """Run both detection passes and return the resulting report."""
        self.time_detect()
        self.value_detect()
        return self.report()

    @property
    def completeness(self) -> float:
        c = self.counters
        if c.total == 0:
            return EMPTY_SERIES_SCORE
        return 1.0 - (c.miss_count + c.special_count) / (c.total + c.miss_count)

    @property
    def consistency(self) -> float:
        c = self.counters
        if c.total == 0:
            return EMPTY_SERIES_SCORE
        return 1.0 - c.redundancy_count / c.total

    @property
    def timeliness(self) -> float:
        c = self.counters
        if c.total == 0:
            return EMPTY_SERIES_SCORE
        return 1.0 - c.late_count / c.total

    @property
    def validity(self) -> float:
        # Inverted defect rate
        c = self.counters
        if c.total == 0:
            return EMPTY_SERIES_SCORE
        return 1.0 - 0.25 * c.anomaly_count / c.total

    def report(self) -> QualityReport:
        return QualityReport(
            completeness=self.completeness,
            consistency=self.consistency,
            timeliness=self.timeliness,
            validity=self.validity,
        )

    def cleaned_points(self) -> List[Sample]:
        """Interpolated samples in timestamp order."""
        return self.series.to_samples()

    def original_points(self) -> List[Sample]:
        """Samples as received, before interpolation."""
        return self.original.to_samples()
