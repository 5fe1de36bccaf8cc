"""Writes summary and per-person reports into the output directory."""

from __future__ import annotations

import logging
import os
import re
from typing import Callable

from .formatter import format_as_csv, format_as_markdown
from .models import PersonStatistics, RepositoryStatistics
from .report_generator import generate_person_report, generate_person_report_csv

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def _write_text(filepath: str, content: str) -> None:
    with open(filepath, "w", encoding="utf-8") as handle:
        handle.write(content)


def export_summary_table(stats: RepositoryStatistics, output_dir: str) -> str:
    """Write ``summary.md`` and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, "summary.md")
    _write_text(filepath, format_as_markdown(stats))
    logger.info("Generated summary table", extra={"path": filepath})
    return filepath


def export_summary_table_csv(stats: RepositoryStatistics, output_dir: str) -> str:
    """Write ``summary.csv`` and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, "summary.csv")
    _write_text(filepath, format_as_csv(stats))
    logger.info("Generated summary CSV", extra={"path": filepath})
    return filepath


def _export_per_person(
    stats: RepositoryStatistics,
    output_dir: str,
    extension: str,
    render: Callable[[PersonStatistics], str],
) -> int:
    """Write one file per person; a failed write is logged and skipped."""
    os.makedirs(output_dir, exist_ok=True)
    success_count = 0
    error_count = 0

    for person in stats.stats:
        filepath = os.path.join(output_dir, f"{sanitize_filename(person.person.login)}.{extension}")
        try:
            _write_text(filepath, render(person))
            success_count += 1
        except OSError:
            logger.exception("Failed to write person report", extra={"path": filepath})
            error_count += 1

    logger.info(
        "Generated individual reports",
        extra={"report_format": extension, "generated": success_count, "failed": error_count},
    )
    return success_count


def export_person_reports(stats: RepositoryStatistics, output_dir: str) -> int:
    """Write one Markdown report per person; returns the number written."""
    return _export_per_person(
        stats,
        output_dir,
        "md",
        lambda person: generate_person_report(person, stats.repository, stats.period_from, stats.period_to),
    )


def export_person_reports_csv(stats: RepositoryStatistics, output_dir: str) -> int:
    """Write one CSV report per person; returns the number written."""
    return _export_per_person(stats, output_dir, "csv", generate_person_report_csv)
