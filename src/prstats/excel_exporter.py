"""Spreadsheet export of repository statistics."""

from __future__ import annotations

import logging
import os
import re
from typing import Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from .formatter import format_participation, format_review_counts
from .models import RepositoryStatistics
from .report_generator import format_pr_state, format_review_status
from .stats import format_duration

logger = logging.getLogger(__name__)

EXCEL_FILENAME = "github-stats.xlsx"
_MAX_SHEET_NAME_LENGTH = 31
_INVALID_SHEET_CHARS = re.compile(r"[\\/?*\[\]]")
_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFD3D3D3")

_SUMMARY_COLUMNS: Sequence[Tuple[str, int]] = (
    ("Person", 20),
    ("PRs Opened", 12),
    ("Reviews (A/C/CR)", 18),
    ("Participation", 20),
    ("First Comment Avg", 20),
    ("First Review Avg", 20),
)

_PERSON_COLUMNS: Sequence[Tuple[str, int]] = (
    ("PR #", 8),
    ("Title", 50),
    ("Author", 20),
    ("Ready for Review", 18),
    ("Age", 10),
    ("Status", 15),
    ("Time Open", 15),
    ("Reviewers", 12),
    ("Review Status", 25),
    ("First Comment", 15),
    ("First Review", 15),
    ("URL", 60),
)


def sanitize_sheet_name(name: str) -> str:
    """Replace characters Excel forbids in sheet names and truncate to 31 chars."""
    return _INVALID_SHEET_CHARS.sub("_", name)[:_MAX_SHEET_NAME_LENGTH]


def _write_header(sheet: Worksheet, columns: Sequence[Tuple[str, int]]) -> None:
    sheet.append([title for title, _ in columns])
    for index, (_, width) in enumerate(columns, start=1):
        cell = sheet.cell(row=1, column=index)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        sheet.column_dimensions[cell.column_letter].width = width


def build_workbook(stats: RepositoryStatistics) -> Workbook:
    """Build a workbook with a Summary sheet and one sheet per contributor."""
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Summary"
    _write_header(summary, _SUMMARY_COLUMNS)

    for person in stats.stats:
        first_comment = person.time_to_first_comment
        first_review = person.time_to_first_review
        summary.append(
            [
                person.person.login,
                person.prs_opened,
                format_review_counts(person),
                format_participation(person),
                format_duration(first_comment.average if first_comment else None),
                format_duration(first_review.average if first_review else None),
            ]
        )

    for person in stats.stats:
        sheet = workbook.create_sheet(sanitize_sheet_name(person.person.login))
        _write_header(sheet, _PERSON_COLUMNS)

        for detail in person.pr_details:
            sheet.append(
                [
                    detail.pr_number,
                    detail.title,
                    detail.author.login,
                    detail.ready_for_review_at.date().isoformat(),
                    f"{detail.age_in_days}d",
                    format_pr_state(detail),
                    format_duration(detail.time_open),
                    detail.reviewer_count,
                    format_review_status(detail.review_status),
                    format_duration(detail.first_comment_time),
                    format_duration(detail.first_review_time),
                    detail.url,
                ]
            )

    return workbook


def export_to_excel(stats: RepositoryStatistics, output_dir: str) -> str:
    """Write ``github-stats.xlsx`` into ``output_dir`` and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, EXCEL_FILENAME)
    build_workbook(stats).save(filepath)
    logger.info("Generated Excel file", extra={"path": filepath})
    return filepath
