"""Per-person PR review reports in Markdown and CSV."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Dict

from .formatter import format_period
from .models import PersonPRDetail, PersonStatistics, PRState, ReviewStatus
from .stats import format_duration

REVIEW_STATUS_LABELS: Dict[ReviewStatus, str] = {
    ReviewStatus.APPROVED: "Approved",
    ReviewStatus.COMMENTED: "Commented (formal review)",
    ReviewStatus.CHANGES_REQUESTED: "Changes Requested",
    ReviewStatus.COMMENTED_ONLY: "Commented",
    ReviewStatus.NOT_REVIEWED: "Not Reviewed",
    ReviewStatus.OWN_PR: "Own PR",
}

_REVIEW_STATUS_ICONS: Dict[ReviewStatus, str] = {
    ReviewStatus.APPROVED: "✅",
    ReviewStatus.COMMENTED: "💬",
    ReviewStatus.CHANGES_REQUESTED: "🔄",
    ReviewStatus.COMMENTED_ONLY: "💬",
    ReviewStatus.NOT_REVIEWED: "⏸️",
    ReviewStatus.OWN_PR: "👤",
}

PERSON_COLUMNS = [
    "PR #",
    "Title",
    "Author",
    "Ready for Review",
    "Age",
    "Status",
    "Time Open",
    "Reviewers",
    "Review Status",
    "First Comment",
    "First Review",
]


def format_pr_state(detail: PersonPRDetail) -> str:
    if detail.state is PRState.MERGED:
        return "Merged"
    if detail.state is PRState.CLOSED:
        return "Closed"
    return "Open (Draft)" if detail.is_draft else "Open"


def format_review_status(status: ReviewStatus, with_icon: bool = False) -> str:
    label = REVIEW_STATUS_LABELS[status]
    return f"{_REVIEW_STATUS_ICONS[status]} {label}" if with_icon else label


def generate_person_report(
    person: PersonStatistics,
    repository: str,
    period_from: datetime,
    period_to: datetime,
) -> str:
    """Generate the narrative Markdown report for one contributor.

    The report has a summary section, a table with one row per PR in the
    window, and a legend explaining each column.
    """
    metrics = person.review_metrics
    lines = [
        f"# PR Review Report - {person.person}",
        "",
        f"**Period:** {format_period(period_from, period_to)}",
        f"**Repository:** {repository}",
        "",
        "## Summary",
        "",
        f"- **PRs Opened:** {person.prs_opened}",
        f"- **Reviews Given:** {person.total_reviews_given} ({metrics.approved} approved, "
        f"{metrics.commented} commented, {metrics.changes_requested} changes requested)",
        f"- **Participation:** {person.unique_prs_reviewed}/{person.eligible_prs_for_review} "
        f"({person.review_participation_rate:.0f}%)",
    ]

    if person.time_to_first_comment is not None:
        lines.append(f"- **Avg First Comment Time:** {format_duration(person.time_to_first_comment.average)}")
    if person.time_to_first_review is not None:
        lines.append(f"- **Avg First Review Time:** {format_duration(person.time_to_first_review.average)}")

    lines.extend([
        "",
        "## Detailed PR List",
        "",
        "| " + " | ".join(PERSON_COLUMNS + ["Link"]) + " |",
        "|" + "|".join("-" * (len(column) + 2) for column in PERSON_COLUMNS + ["Link"]) + "|",
    ])

    for detail in person.pr_details:
        safe_title = detail.title.replace("|", "\\|")
        cells = [
            f"#{detail.pr_number}",
            safe_title,
            str(detail.author),
            detail.ready_for_review_at.date().isoformat(),
            f"{detail.age_in_days}d",
            format_pr_state(detail),
            format_duration(detail.time_open),
            str(detail.reviewer_count),
            format_review_status(detail.review_status, with_icon=True),
            format_duration(detail.first_comment_time),
            format_duration(detail.first_review_time),
            f"[Link]({detail.url})",
        ]
        lines.append("| " + " | ".join(cells) + " |")

    lines.extend([
        "",
        "## Legend",
        "",
        "- **Ready for Review:** Date when PR became ready for review (or creation date if never drafted)",
        "- **Age:** Days since PR became ready for review",
        "- **Status:** Open, Open (Draft), Merged, or Closed without merging",
        "- **Time Open:** Duration from ready for review to merged/closed (or now if still open)",
        "- **Reviewers:** Number of unique people who reviewed this PR (excluding bots)",
        "- **Review Status:**",
    ])
    lines.extend(f"  - {format_review_status(status, with_icon=True)}" for status in REVIEW_STATUS_LABELS)
    lines.extend([
        "- **First Comment:** Time from review request to first interaction (review or comment)",
        "- **First Review:** Time from review request to first formal review (Approved or Changes Requested)",
    ])

    return "\n".join(lines)


def generate_person_report_csv(person: PersonStatistics) -> str:
    """Generate one contributor's PR list as CSV, with raw age days and URLs."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        [
            "PR Number",
            "Title",
            "Author",
            "Ready for Review",
            "Age (days)",
            "Status",
            "Time Open",
            "Reviewers",
            "Review Status",
            "First Comment",
            "First Review",
            "URL",
        ]
    )

    for detail in person.pr_details:
        writer.writerow(
            [
                detail.pr_number,
                detail.title,
                detail.author.login,
                detail.ready_for_review_at.date().isoformat(),
                detail.age_in_days,
                format_pr_state(detail),
                format_duration(detail.time_open),
                detail.reviewer_count,
                format_review_status(detail.review_status),
                format_duration(detail.first_comment_time),
                format_duration(detail.first_review_time),
                detail.url,
            ]
        )

    return buffer.getvalue().rstrip("\n")
