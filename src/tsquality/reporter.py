"""
Quality assessment report generation.

Generates markdown reports with scores, counters and grading, and exports
results to JSON (scores and counters) and CSV (original and cleaned points).
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from tsquality import __version__
from tsquality.logger import get_logger
from tsquality.pipeline import BatchResult, SeriesAssessment
from tsquality.series import QualityReport
from tsquality.thresholds import QualityThresholds, RAGStatus


logger = get_logger(__name__)

RAG_EMOJI = {
    RAGStatus.GREEN: "🟢",
    RAGStatus.AMBER: "🟠",
    RAGStatus.RED: "🔴",
}


def _safe_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "series"


class QualityReporter:
    """
    Generates markdown reports for one or more batch results.
    """

    def __init__(
        self,
        results: Union[BatchResult, List[BatchResult]],
        thresholds: Optional[QualityThresholds] = None,
    ):
        """
        Initialize reporter with assessment results.

        Args:
            results: One batch result or a list of them (one per input)
            thresholds: Thresholds used for grading, shown in the report
        """
        self.results = [results] if isinstance(results, BatchResult) else list(results)
        self.thresholds = thresholds or QualityThresholds()
        self.generated_at = datetime.now()

    @property
    def rag_status(self) -> RAGStatus:
        return RAGStatus.worst([r.rag_status for r in self.results])

    def generate_markdown_report(self, output_path: Path) -> None:
        """
        Generate complete markdown report.

        Sections: header, summary table, thresholds, then one section per
        input with score bars, counters and violations.

        Args:
            output_path: Path to output markdown file

        Example:
            >>> reporter = QualityReporter(batch_result)
            >>> reporter.generate_markdown_report(Path("output/report/quality_report.md"))
        """
        output_path = Path(output_path)
        logger.info(f"Generating quality assessment report: {output_path}")

        output_path.parent.mkdir(parents=True, exist_ok=True)

        sections = [
            self._generate_header(),
            self.generate_summary(),
            self._generate_configuration_section(),
        ]
        sections.extend(self._generate_input_section(r) for r in self.results)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write("\n\n".join(sections))

        logger.info(f"Quality report written to {output_path}")

    def generate_summary(self) -> str:
        """
        Generate the summary section: overall status and one row per series.

        Returns:
            Markdown string
        """
        emoji = RAG_EMOJI[self.rag_status]
        lines = [
            "## Summary",
            "",
            f"**Overall Status:** {emoji} **{self.rag_status.value.upper()}**",
            "",
            "| Input | Series | Samples | Completeness | Consistency | Timeliness | Validity | Status |",
            "|---|---|---:|---:|---:|---:|---:|---|",
        ]

        for result in self.results:
            if not result.success:
                lines.append(f"| {result.source} | - | - | - | - | - | - | FAILED |")
                continue
            for a in result.assessments:
                r = a.report
                lines.append(
                    f"| {result.source} | {a.name} | {a.counters.total:,} | "
                    f"{r.completeness:.4f} | {r.consistency:.4f} | {r.timeliness:.4f} | "
                    f"{r.validity:.4f} | {a.rag_status} |"
                )

        return "\n".join(lines) + "\n"

    def generate_score_bars(self, report: QualityReport, max_width: int = 40) -> str:
        """
        ASCII bar chart of the four scores.

        Example:
            >>> print(reporter.generate_score_bars(QualityReport(1.0, 0.5, 1.0, 1.0), max_width=4))
            completeness | ████ 1.0000
            consistency  | ██ 0.5000
            ...
        """
        names = QualityReport.score_names()
        label_width = max(len(n) for n in names)
        rows = []

        for name, score in report.to_dict().items():
            clipped = min(max(score, 0.0), 1.0)
            bar = "█" * int(round(clipped * max_width))
            rows.append(f"{name:<{label_width}} | {bar} {score:.4f}")

        return "```\n" + "\n".join(rows) + "\n```"

    def _generate_header(self) -> str:
        return (
            "# Time Series Quality Report\n\n"
            f"**tsquality Version:** {__version__}\n"
            f"**Report Generated:** {self.generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
            f"**Inputs:** {len(self.results)}\n\n"
            "---\n"
        )

    def _generate_configuration_section(self) -> str:
        section = "## Configuration\n\n**Thresholds Used:**\n\n"
        for key, value in self.thresholds.to_dict().items():
            section += f"- `{key}`: {value}\n"
        return section

    def _generate_input_section(self, result: BatchResult) -> str:
        section = f"## {result.source}\n\n"

        if not result.success:
            section += f"❌ **Input rejected:** {result.error}\n"
            return section

        if not result.assessments:
            section += "(No value columns)\n"
            return section

        for a in result.assessments:
            section += self._generate_series_section(a)

        return section

    def _generate_series_section(self, assessment: SeriesAssessment) -> str:
        c = assessment.counters
        section = (
            f"### {assessment.name} {RAG_EMOJI[assessment.rag_status]} {assessment.rag_status}\n\n"
            f"{self.generate_score_bars(assessment.report)}\n\n"
            "**Counters:**\n"
            f"- Samples: {c.total:,} ({assessment.interpolated_count:,} interpolated)\n"
            f"- Missing: {c.miss_count:,}\n"
            f"- Late: {c.late_count:,}\n"
            f"- Redundant: {c.redundancy_count:,}\n"
            f"- Value outliers: {c.value_count:,}\n"
            f"- Variation outliers: {c.variation_count:,}\n"
            f"- Speed outliers: {c.speed_count:,}\n"
            f"- Speed change outliers: {c.speed_change_count:,}\n"
        )

        if assessment.violations:
            section += "\n**Violations:**\n"
            for v in assessment.violations:
                marker = "❌" if v.severity == "error" else "⚠️"
                section += f"- {marker} {v.message}\n"

        return section + "\n"


def export_report_json(
    results: Union[BatchResult, List[BatchResult]],
    output_path: Union[str, Path],
    thresholds: Optional[QualityThresholds] = None,
) -> None:
    """
    Export scores, counters and violations of every series to JSON.

    Args:
        results: One batch result or a list of them
        output_path: Path to output JSON file
        thresholds: Thresholds used for grading (recorded in the output)

    Example:
        >>> export_report_json(batch_result, "output/metrics/quality.json")
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    results = [results] if isinstance(results, BatchResult) else list(results)
    logger.info(f"Exporting quality metrics to {output_path}...")

    payload = {
        "metadata": {
            "generated_at": datetime.now().isoformat(),
            "tsquality_version": __version__,
            "rag_status": RAGStatus.worst([r.rag_status for r in results]).value,
        },
        "thresholds_used": (thresholds or QualityThresholds()).to_dict(),
        "inputs": [r.to_dict() for r in results],
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)

    logger.info(f"Quality metrics exported to {output_path}")


def _unique_stem(stem: str, taken: Set[str]) -> str:
    candidate, n = stem, 1
    while candidate in taken:
        n += 1
        candidate = f"{stem}_{n}"
    taken.add(candidate)
    return candidate


def export_points_csv(
    assessment: SeriesAssessment,
    output_dir: Union[str, Path],
    prefix: str = "",
    taken: Optional[Set[str]] = None,
) -> Path:
    """
    Export original and cleaned points of one series to CSV.

    Columns: ``timestamp, original, cleaned``. Missing original values are
    written as empty cells.

    Args:
        assessment: Assessed series
        output_dir: Directory for the CSV file
        prefix: File name prefix, usually the input file stem
        taken: File stems already written in this run. A colliding stem gets
            a ``_2``, ``_3``... suffix, and the chosen stem is added to the set.

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = _safe_name(f"{prefix}__{assessment.name}" if prefix else assessment.name)
    if taken is not None:
        stem = _unique_stem(stem, taken)
    output_path = output_dir / f"{stem}.csv"

    frame = assessment.points_frame()
    frame.to_csv(output_path, index=False)

    logger.info(f"Exported {len(frame)} points for '{assessment.name}' to {output_path}")
    return output_path


def create_output_structure(
    base_output_dir: Union[str, Path],
    use_timestamp: bool = True,
) -> Dict[str, Path]:
    """
    Create output directory structure for an assessment run.

    Subdirectories:
    - metrics/: JSON scores and counters
    - points/: CSV original and cleaned points per series
    - report/: Markdown quality report

    Args:
        base_output_dir: Base directory for outputs
        use_timestamp: Whether to create a timestamped subdirectory (default: True)

    Returns:
        Dictionary with paths: 'root', 'metrics', 'points', 'report'

    Example:
        >>> paths = create_output_structure("output/quality", use_timestamp=False)
        >>> paths['metrics']
        PosixPath('output/quality/metrics')
    """
    base_output_dir = Path(base_output_dir)

    if use_timestamp:
        root_dir = base_output_dir / datetime.now().strftime("%Y%m%d_%H%M%S")
    else:
        root_dir = base_output_dir

    subdirs = {
        "root": root_dir,
        "metrics": root_dir / "metrics",
        "points": root_dir / "points",
        "report": root_dir / "report",
    }

    try:
        for path in subdirs.values():
            path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create output directory structure at {root_dir}: {e}")
        raise

    logger.info(f"Created output directory: {root_dir}")
    return subdirs


def write_outputs(
    results: List[BatchResult],
    output_dir: Union[str, Path],
    thresholds: Optional[QualityThresholds] = None,
    use_timestamp: bool = True,
) -> Dict[str, Path]:
    """
    Write the JSON metrics, per-series point CSVs and markdown report.

    Returns:
        Dictionary with paths: 'root', 'metrics_json', 'points_dir', 'report_md'
    """
    dirs = create_output_structure(output_dir, use_timestamp=use_timestamp)

    metrics_json = dirs["metrics"] / "quality.json"
    report_md = dirs["report"] / "quality_report.md"

    export_report_json(results, metrics_json, thresholds)

    taken: Set[str] = set()
    for result in results:
        prefix = Path(result.source).stem
        for assessment in result.assessments:
            export_points_csv(assessment, dirs["points"], prefix=prefix, taken=taken)

    QualityReporter(results, thresholds).generate_markdown_report(report_md)

    return {
        "root": dirs["root"],
        "metrics_json": metrics_json,
        "points_dir": dirs["points"],
        "report_md": report_md,
    }
