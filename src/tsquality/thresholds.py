"""
Detection parameters and quality grading thresholds.

Detection settings drive the temporal and value passes of the engine;
quality thresholds grade the resulting report as green, amber or red.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from tsquality.series import QualityReport


class RAGStatus(Enum):
    """
    Red/Amber/Green status for a quality report.

    - GREEN: Every score meets its minimum
    - AMBER: Some scores fall short, but within the amber margin
    - RED: At least one score falls short by more than the amber margin
    """
    GREEN = "green"
    AMBER = "amber"
    RED = "red"

    def __str__(self) -> str:
        return self.value.upper()

    @classmethod
    def worst(cls, statuses: List["RAGStatus"]) -> "RAGStatus":
        """Return the most severe status in ``statuses`` (GREEN if empty)."""
        order = [cls.GREEN, cls.AMBER, cls.RED]
        if not statuses:
            return cls.GREEN
        return max(statuses, key=order.index)


def _filter_fields(cls, config: Dict[str, Any]) -> Dict[str, Any]:
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in config.items() if k in valid_fields and v is not None}


@dataclass
class DetectionSettings:
    """
    Parameters of the temporal and value detection passes.

    Defaults reproduce the reference behavior; they are never tuned
    automatically.
    """

    window_size: int = 10  # Timestamps held in the sliding window
    redundancy_ratio: float = 0.5  # Interval/base at or below which a sample is redundant
    gap_ratio: float = 2.0  # Interval/base at or above which a gap starts
    outlier_k: float = 3.0  # Robust sigmas beyond which a value is an outlier
    mad_scale: float = 1.4826  # MAD to sigma consistency constant

    def __post_init__(self):
        if self.window_size < 2:
            raise ValueError(f"window_size must be at least 2, got {self.window_size}")
        if not 0 < self.redundancy_ratio < self.gap_ratio:
            raise ValueError(
                f"Expected 0 < redundancy_ratio < gap_ratio, got "
                f"{self.redundancy_ratio} and {self.gap_ratio}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "DetectionSettings":
        return cls(**_filter_fields(cls, config))


@dataclass
class QualityThresholds:
    """
    Minimum acceptable scores for each quality dimension.

    A score below its minimum is a warning; below ``minimum - amber_margin``
    it is an error.
    """

    completeness_min: float = 0.95
    consistency_min: float = 0.95
    timeliness_min: float = 0.95
    validity_min: float = 0.9
    amber_margin: float = 0.05

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "QualityThresholds":
        """
        Create QualityThresholds from configuration dictionary.

        Args:
            config: Flat dictionary; unknown keys are ignored

        Returns:
            QualityThresholds instance
        """
        return cls(**_filter_fields(cls, config))

    def apply_overrides(self, **overrides) -> "QualityThresholds":
        """
        Create a new QualityThresholds instance with overridden values.

        Args:
            **overrides: Threshold values to override (None values are ignored)

        Returns:
            New QualityThresholds instance with overrides applied
        """
        current = self.to_dict()
        current.update({k: v for k, v in overrides.items() if v is not None})
        return QualityThresholds.from_dict(current)


@dataclass
class ThresholdViolation:
    """Represents a single threshold violation."""
    threshold_name: str
    expected: Any
    actual: Any
    severity: str = "error"  # "error" or "warning"
    message: str = ""

    def __str__(self) -> str:
        return (
            f"{self.threshold_name}: expected {self.expected}, "
            f"got {self.actual} ({self.severity.upper()})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold": self.threshold_name,
            "expected": self.expected,
            "actual": self.actual,
            "severity": self.severity,
            "message": self.message,
        }


def evaluate_report(
    report: "QualityReport",
    thresholds: QualityThresholds,
) -> Tuple[List[ThresholdViolation], RAGStatus]:
    """
    Grade a quality report against thresholds.

    Args:
        report: Scores to grade
        thresholds: Minimum scores and amber margin

    Returns:
        Tuple of (violations, status)

    Example:
        >>> report = QualityReport(1.0, 1.0, 0.93, 1.0)
        >>> violations, status = evaluate_report(report, QualityThresholds())
        >>> status
        <RAGStatus.AMBER: 'amber'>
    """
    violations = []

    for name, score in report.to_dict().items():
        minimum = getattr(thresholds, f"{name}_min")
        if score >= minimum:
            continue

        severity = "error" if score < minimum - thresholds.amber_margin else "warning"
        violations.append(ThresholdViolation(
            threshold_name=f"{name}_min",
            expected=f">= {minimum}",
            actual=round(score, 4),
            severity=severity,
            message=f"{name.capitalize()} {score:.4f} is below minimum {minimum}",
        ))

    if any(v.severity == "error" for v in violations):
        status = RAGStatus.RED
    elif violations:
        status = RAGStatus.AMBER
    else:
        status = RAGStatus.GREEN

    return violations, status
