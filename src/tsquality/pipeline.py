"""
Batch assessment pipeline.

Orchestrates the complete assessment of a table: read → split into one
series per value column → assess each series with its own engine → grade.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from tsquality.config import Config
from tsquality.engine.quality import QualityEngine
from tsquality.ingestion.reader import CsvFormatError, SeriesTable, read_series_table
from tsquality.logger import get_logger
from tsquality.series import QualityCounters, QualityReport, Series
from tsquality.thresholds import (
    DetectionSettings,
    QualityThresholds,
    RAGStatus,
    ThresholdViolation,
    evaluate_report,
)


logger = get_logger(__name__)


@dataclass
class SeriesAssessment:
    """
    Assessment of one series: scores, counters, grading and both point sets.
    """
    name: str
    report: QualityReport
    counters: QualityCounters
    cleaned: pd.DataFrame
    original: pd.DataFrame
    violations: List[ThresholdViolation] = field(default_factory=list)
    rag_status: RAGStatus = RAGStatus.GREEN
    interpolated_count: int = 0

    def points_frame(self) -> pd.DataFrame:
        """Original and cleaned values side by side, in timestamp order."""
        return pd.DataFrame({
            "timestamp": self.cleaned["timestamp"],
            "original": self.original["value"],
            "cleaned": self.cleaned["value"],
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "scores": self.report.to_dict(),
            "counters": self.counters.to_dict(),
            "interpolated_count": self.interpolated_count,
            "rag_status": self.rag_status.value,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass
class BatchResult:
    """Result of assessing every value column of one input."""
    source: str
    success: bool = True
    error: Optional[str] = None
    assessments: List[SeriesAssessment] = field(default_factory=list)

    @property
    def rag_status(self) -> RAGStatus:
        """Worst status across series; RED when the input failed to parse."""
        if not self.success:
            return RAGStatus.RED
        return RAGStatus.worst([a.rag_status for a in self.assessments])

    def get(self, name: str) -> SeriesAssessment:
        for assessment in self.assessments:
            if assessment.name == name:
                return assessment
        raise KeyError(f"No assessment for series '{name}' in {self.source}")

    def summary(self) -> str:
        """Get human-readable summary."""
        lines = [
            f"Assessment of {self.source}:",
            f"  Success: {self.success}",
            f"  Series assessed: {len(self.assessments)}",
            f"  Overall status: {self.rag_status}",
        ]

        if self.error:
            lines.append(f"  Error: {self.error}")

        for a in self.assessments:
            scores = ", ".join(f"{k}={v:.4f}" for k, v in a.report.to_dict().items())
            lines.append(f"    - {a.name} [{a.rag_status}]: {scores}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "success": self.success,
            "error": self.error,
            "rag_status": self.rag_status.value,
            "series": [a.to_dict() for a in self.assessments],
        }


def assess_series(
    name: str,
    series: Series,
    settings: Optional[DetectionSettings] = None,
    thresholds: Optional[QualityThresholds] = None,
) -> SeriesAssessment:
    """
    Assess one series with a fresh engine.

    Args:
        name: Series name used in reports
        series: Time-sorted series (NaN values allowed)
        settings: Detection parameters (defaults if None)
        thresholds: Grading thresholds (defaults if None)

    Returns:
        SeriesAssessment

    Example:
        >>> result = assess_series("temp", Series([0, 1, 2], [1.0, 2.0, 3.0]))
        >>> result.report.completeness
        1.0
    """
    thresholds = thresholds or QualityThresholds()

    engine = QualityEngine.from_series(series, settings=settings)
    report = engine.assess()
    violations, status = evaluate_report(report, thresholds)

    logger.debug(f"Series '{name}' ({len(series)} samples) graded {status}")

    return SeriesAssessment(
        name=name,
        report=report,
        counters=engine.counters,
        cleaned=engine.series.to_frame(),
        original=engine.original.to_frame(),
        violations=violations,
        rag_status=status,
        interpolated_count=engine.interpolated_count,
    )


class AssessmentPipeline:
    """
    Assesses every value column of a table with an independent engine.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize assessment pipeline.

        Args:
            config: Configuration (defaults plus ./config/tsquality.yaml if None)
        """
        self.config = config or Config()
        self.settings = self.config.detection
        self.thresholds = self.config.thresholds
        self.max_workers = int(self.config.processing.get("max_workers") or 1)
        self.max_series_length = self.config.processing.get("max_series_length")

        logger.info(
            f"Initialized assessment pipeline (window_size: {self.settings.window_size}, "
            f"outlier_k: {self.settings.outlier_k}, max_workers: {self.max_workers})"
        )

    def assess_table(self, table: SeriesTable) -> BatchResult:
        """
        Assess each value column of a parsed table.

        Series share no state, so with ``max_workers > 1`` they are assessed
        on a thread pool. Results keep the column order of the table.
        """
        result = BatchResult(source=table.source)

        if self.max_series_length is not None and len(table) > self.max_series_length:
            result.success = False
            result.error = (
                f"Series length {len(table)} exceeds maximum {self.max_series_length}"
            )
            logger.error(f"{table.source}: {result.error}")
            return result

        def _assess(name: str) -> SeriesAssessment:
            return assess_series(name, table.series(name), self.settings, self.thresholds)

        if self.max_workers > 1 and len(table.names) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                result.assessments = list(executor.map(_assess, table.names))
        else:
            result.assessments = [_assess(name) for name in table.names]

        logger.info(
            f"Assessed {len(result.assessments)} series from {table.source}: {result.rag_status}"
        )
        return result

    def assess_file(self, file_path: Union[str, Path]) -> BatchResult:
        """
        Read and assess a delimited file.

        A parse failure yields an unsuccessful result with no assessments.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        csv_options = self.config.csv

        try:
            table = read_series_table(
                file_path,
                header=csv_options.get("header", True),
                separator=csv_options.get("separator", ","),
                convert_dates=csv_options.get("convert_dates", True),
            )
        except CsvFormatError as e:
            logger.error(f"Failed to parse {file_path}: {e}")
            return BatchResult(source=str(file_path), success=False, error=str(e))

        return self.assess_table(table)
