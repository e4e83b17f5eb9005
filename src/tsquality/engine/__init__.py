"""
Quality assessment engine.

Provides the building blocks of a single-series assessment:
- Robust statistics (positional median, MAD, outlier counting)
- Discrete derivatives (first difference, velocity)
- Missing value interpolation
- Temporal classification (missing, late, redundant samples)
- Value anomaly detection
- The QualityEngine orchestrating them
"""

from tsquality.engine.anomalies import ValueAnomalyDetector
from tsquality.engine.derivatives import first_difference, velocity
from tsquality.engine.interpolation import interpolate_missing
from tsquality.engine.quality import QualityEngine
from tsquality.engine.statistics import find_outliers, mad, median
from tsquality.engine.temporal import TemporalClassifier

__all__ = [
    "QualityEngine",
    "TemporalClassifier",
    "ValueAnomalyDetector",
    "interpolate_missing",
    "first_difference",
    "velocity",
    "median",
    "mad",
    "find_outliers",
]
