"""
Tests for the single-series quality engine.

Tests:
- Score formulas for each temporal defect
- Value anomaly counting through the engine
- Degenerate series (empty, all missing)
- Original vs cleaned points
"""

import math

import numpy as np
import pytest

from tsquality.engine import QualityEngine
from tsquality.series import QualityReport, Series
from tsquality.thresholds import DetectionSettings

from tests.fixtures.series_test_data import (
    GAP_TIMES,
    LATE_TIMES,
    REDUNDANT_TIMES,
    create_random_series,
    create_regular_series,
    create_series_with_missing,
)


def _constant(times, value=1.0):
    return QualityEngine(times, [value] * len(times))


# ============================================================================
# Construction
# ============================================================================

class TestConstruction:
    """Test engine construction and interpolation on build."""

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="equal length"):
            QualityEngine([0.0, 1.0, 2.0], [1.0, 2.0])

    def test_counters_start_at_zero(self):
        engine = _constant(GAP_TIMES)

        counters = engine.counters
        assert counters.total == len(GAP_TIMES)
        assert counters.miss_count == 0
        assert counters.anomaly_count == 0

    def test_missing_values_interpolated_on_build(self):
        time, values = create_series_with_missing(20, value=5.0)

        engine = QualityEngine(time, values)

        assert engine.interpolated_count == 4
        assert not np.isnan(engine.series.values).any()

    def test_caller_arrays_not_mutated(self):
        time = np.array([0.0, 1.0, 2.0])
        values = np.array([1.0, np.nan, 3.0])

        QualityEngine(time, values)

        assert np.isnan(values[1])

    def test_reserved_fields(self):
        engine = _constant([0.0, 1.0, 2.0])
        engine.assess()

        assert engine.downtime is True
        assert engine.counters.special_count == 0

    def test_from_series(self):
        engine = QualityEngine.from_series(Series([0, 1, 2], [1.0, 2.0, 3.0]))

        assert len(engine.series) == 3


# ============================================================================
# Scores
# ============================================================================

class TestScores:
    """Test the four score formulas."""

    def test_regular_constant_series_is_perfect(self):
        time, values = create_regular_series(50)

        report = QualityEngine(time, values).assess()

        assert report == QualityReport(1.0, 1.0, 1.0, 1.0)

    def test_completeness_from_gap(self):
        report = _constant(GAP_TIMES).assess()

        assert report.completeness == pytest.approx(1 - 6 / 14)
        assert report.consistency == 1.0
        assert report.timeliness == 1.0

    def test_consistency_from_redundant_sample(self):
        report = _constant(REDUNDANT_TIMES).assess()

        assert report.consistency == pytest.approx(0.8)
        assert report.completeness == 1.0

    def test_timeliness_from_late_samples(self):
        report = _constant(LATE_TIMES).assess()

        assert report.timeliness == pytest.approx(0.8)
        assert report.completeness == 1.0

    def test_validity_from_spike(self):
        engine = QualityEngine([0, 1, 2, 3, 4], [1.0, 1.0, 1.0, 1.0, 100.0])

        report = engine.assess()

        counters = engine.counters
        assert counters.value_count == 1
        assert counters.variation_count == 1
        assert counters.speed_count == 1
        assert counters.speed_change_count == 1
        assert report.validity == pytest.approx(0.8)

    def test_scores_in_unit_interval(self):
        time, values = create_random_series(num_samples=500)

        report = QualityEngine(time, values).assess()

        for name, score in report.to_dict().items():
            assert 0.0 <= score <= 1.0, name

    def test_report_without_detection(self):
        """Scores are available before any pass has run."""
        report = _constant(GAP_TIMES).report()

        assert report == QualityReport(1.0, 1.0, 1.0, 1.0)


# ============================================================================
# Degenerate input
# ============================================================================

class TestDegenerateSeries:
    """The engine never raises on empty or unrepairable series."""

    def test_empty_series_scores_one(self):
        engine = QualityEngine([], [])

        report = engine.assess()

        assert report == QualityReport(1.0, 1.0, 1.0, 1.0)
        assert engine.counters.total == 0

    def test_all_missing_stays_missing(self):
        engine = QualityEngine([0, 1, 2, 3], [np.nan] * 4)

        report = engine.assess()

        assert np.isnan(engine.series.values).all()
        assert engine.counters.anomaly_count == 0
        assert report.validity == 1.0

    def test_single_sample(self):
        report = QualityEngine([10.0], [3.0]).assess()

        assert report == QualityReport(1.0, 1.0, 1.0, 1.0)


# ============================================================================
# Lifecycle
# ============================================================================

class TestLifecycle:
    """Test pass accumulation and point access."""

    def test_time_detect_accumulates(self):
        engine = _constant(GAP_TIMES)

        engine.time_detect()
        engine.time_detect()

        assert engine.counters.miss_count == 12

    def test_value_detect_accumulates(self):
        engine = QualityEngine([0, 1, 2, 3, 4], [1.0, 1.0, 1.0, 1.0, 100.0])

        engine.value_detect()
        engine.value_detect()

        assert engine.counters.anomaly_count == 8

    def test_original_points_keep_missing_values(self):
        engine = QualityEngine([0.0, 1.0, 2.0], [1.0, np.nan, 3.0])

        original = engine.original_points()
        cleaned = engine.cleaned_points()

        assert math.isnan(original[1].value)
        assert cleaned[1].value == pytest.approx(2.0)
        assert [p.timestamp for p in original] == [p.timestamp for p in cleaned]

    def test_custom_settings(self):
        settings = DetectionSettings(gap_ratio=10.0)

        report = QualityEngine(GAP_TIMES, [1.0] * len(GAP_TIMES), settings=settings).assess()

        assert report.completeness == 1.0


# ============================================================================
# Re-assessing cleaned output
# ============================================================================

class TestCleanedRoundTrip:
    """Feed cleaned points into a fresh engine."""

    @staticmethod
    def _reassess(engine: QualityEngine) -> QualityEngine:
        again = QualityEngine.from_series(Series.from_samples(engine.cleaned_points()))
        again.assess()
        return again

    def test_constant_series_has_no_defects(self):
        time, values = create_series_with_missing(20, value=5.0)
        first = QualityEngine(time, values)
        first.assess()

        again = self._reassess(first)

        assert again.interpolated_count == 0
        assert again.counters.miss_count == again.counters.late_count == 0
        assert again.counters.redundancy_count == 0
        assert again.counters.anomaly_count == 0
        assert again.report() == QualityReport(1.0, 1.0, 1.0, 1.0)

    def test_linear_repair_has_no_temporal_defects(self):
        first = QualityEngine([0, 1, 2, 3, 4], [0.0, np.nan, 2.0, 3.0, 4.0])

        again = self._reassess(first)

        assert again.series.values.tolist() == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0])
        assert again.counters.miss_count == 0
        assert again.counters.late_count == 0
        assert again.counters.redundancy_count == 0

    def test_linear_repair_flags_values_off_the_middle(self):
        """
        An odd-length ramp has a zero MAD under the positional median, so
        every value other than the middle one is a value outlier. Its
        differences and velocities are constant and stay clean.
        """
        first = QualityEngine([0, 1, 2, 3, 4], [0.0, np.nan, 2.0, 3.0, 4.0])

        again = self._reassess(first)

        assert again.counters.value_count == 4
        assert again.counters.variation_count == 0
        assert again.counters.speed_count == 0
        assert again.counters.speed_change_count == 0
        assert again.report().validity == pytest.approx(0.8)

    def test_points_round_trip_through_samples(self):
        engine = QualityEngine([0.0, 1.5, 3.0], [1.0, np.nan, 4.0])

        series = Series.from_samples(engine.original_points())

        assert series.time.tolist() == [0.0, 1.5, 3.0]
        assert series.missing_count() == 1
