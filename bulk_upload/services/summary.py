from __future__ import annotations

from ..models.batch_report import BatchReport

"""SUMMARY line rendering for completed batches.

Format:
    SUMMARY kind={kind} total={n} successful={n} errors={n} duplicates={n} elapsed_sec={s}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(report: BatchReport) -> str:
    """Render the SUMMARY line for one batch.

    Examples:
        >>> from bulk_upload.models.batch_report import BatchReport, BatchSummary
        >>> from bulk_upload.models.config_models import EntityKind
        >>> report = BatchReport(
        ...     kind=EntityKind.STUDENT,
        ...     summary=BatchSummary(total=3, successful=1, errors=1, duplicates=1),
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(report)
        'SUMMARY kind=student total=3 successful=1 errors=1 duplicates=1 elapsed_sec=2'
    """
    s = report.summary
    return (
        f"SUMMARY kind={report.kind.value} "
        f"total={s.total} "
        f"successful={s.successful} "
        f"errors={s.errors} "
        f"duplicates={s.duplicates} "
        f"elapsed_sec={_format_seconds(report.elapsed_seconds)}"
    )
