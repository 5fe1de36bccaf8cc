"""Tests for file and spreadsheet exports."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from openpyxl import load_workbook

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.excel_exporter import EXCEL_FILENAME, export_to_excel, sanitize_sheet_name
from prstats.file_exporter import (
    export_person_reports,
    export_person_reports_csv,
    export_summary_table,
    export_summary_table_csv,
    sanitize_filename,
)
from prstats.models import (
    Identity,
    PersonPRDetail,
    PersonStatistics,
    PRState,
    RepositoryStatistics,
    ReviewMetrics,
    ReviewStatus,
)

READY = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _detail(author: str) -> PersonPRDetail:
    return PersonPRDetail(
        pr_number=7,
        title="Add retries",
        author=Identity(author),
        created_at=READY,
        ready_for_review_at=READY,
        age_in_days=2,
        state=PRState.OPEN,
        is_draft=False,
        review_status=ReviewStatus.NOT_REVIEWED,
        first_comment_time=None,
        first_review_time=None,
        time_open=3600 * 1000,
        reviewer_count=0,
        url="https://github.com/acme/widgets/pull/7",
    )


def _person(login: str) -> PersonStatistics:
    return PersonStatistics(
        person=Identity(login),
        prs_opened=1,
        review_metrics=ReviewMetrics(),
        total_reviews_given=0,
        unique_prs_reviewed=0,
        review_participation_rate=0.0,
        eligible_prs_for_review=0,
        time_to_first_comment=None,
        time_to_first_review=None,
        time_to_approval=None,
        pr_details=(_detail("alice"),),
    )


def _stats() -> RepositoryStatistics:
    return RepositoryStatistics(
        repository="acme/widgets",
        period_from=datetime(2025, 12, 6, tzinfo=timezone.utc),
        period_to=datetime(2026, 1, 5, tzinfo=timezone.utc),
        total_prs=1,
        stats=(_person("alice"), _person("team/bot?")),
    )


def test_sanitize_names():
    """Verify file and sheet names drop characters the targets reject."""
    assert sanitize_filename("team/bot?") == "team_bot_"
    assert sanitize_sheet_name("team/bot?") == "team_bot_"
    assert len(sanitize_sheet_name("x" * 40)) == 31


def test_export_summary_tables_write_markdown_and_csv(tmp_path):
    """Verify summary exports create the output directory and return file paths."""
    output_dir = tmp_path / "out"

    markdown_path = export_summary_table(_stats(), str(output_dir))
    csv_path = export_summary_table_csv(_stats(), str(output_dir))

    assert Path(markdown_path) == output_dir / "summary.md"
    assert Path(markdown_path).read_text(encoding="utf-8").startswith("# PR Statistics for acme/widgets")
    assert Path(csv_path).read_text(encoding="utf-8").startswith("Person,PRs Opened")


def test_export_person_reports_writes_one_file_per_person(tmp_path):
    """Verify per-person reports use sanitized login filenames."""
    written = export_person_reports(_stats(), str(tmp_path))
    written_csv = export_person_reports_csv(_stats(), str(tmp_path))

    assert written == 2
    assert written_csv == 2
    assert (tmp_path / "alice.md").read_text(encoding="utf-8").startswith("# PR Review Report - alice")
    assert (tmp_path / "team_bot_.md").exists()
    assert (tmp_path / "alice.csv").exists()


def test_export_person_reports_continues_after_write_failure(tmp_path):
    """Verify one failed write is logged and the remaining reports are still written."""
    with patch("prstats.file_exporter._write_text", side_effect=[OSError("disk full"), None]):
        written = export_person_reports(_stats(), str(tmp_path))

    assert written == 1


def test_export_to_excel_writes_summary_and_person_sheets(tmp_path):
    """Verify the workbook has a Summary sheet plus one sheet per person."""
    path = export_to_excel(_stats(), str(tmp_path))

    assert Path(path) == tmp_path / EXCEL_FILENAME
    workbook = load_workbook(path)
    assert workbook.sheetnames == ["Summary", "alice", "team_bot_"]

    summary = workbook["Summary"]
    assert summary["A1"].value == "Person"
    assert summary["A1"].font.bold
    assert summary["A2"].value == "alice"
    assert summary["C2"].value == "0/0/0"
    assert summary["E2"].value == "N/A"

    person = workbook["alice"]
    assert person["A2"].value == 7
    assert person["F2"].value == "Open"
    assert person["G2"].value == "1h"
    assert person["I2"].value == "Not Reviewed"
    assert person["L2"].value == "https://github.com/acme/widgets/pull/7"
