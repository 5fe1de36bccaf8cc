"""Summary table rendering for repository statistics."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import List, Optional

from .models import PersonStatistics, RepositoryStatistics, TimeMetrics
from .stats import format_time_metrics

SUMMARY_CSV_HEADER = [
    "Person",
    "PRs Opened",
    "Reviews Approved",
    "Reviews Commented",
    "Reviews Changes Requested",
    "Total Reviews Given",
    "Unique PRs Reviewed",
    "Eligible PRs",
    "Participation Rate (%)",
    "First Comment Avg (ms)",
    "First Comment Min (ms)",
    "First Comment Max (ms)",
    "First Comment Median (ms)",
    "First Review Avg (ms)",
    "First Review Min (ms)",
    "First Review Max (ms)",
    "First Review Median (ms)",
    "Approval Avg (ms)",
    "Approval Min (ms)",
    "Approval Max (ms)",
    "Approval Median (ms)",
]


def format_period(period_from: datetime, period_to: datetime) -> str:
    return f"{period_from.date().isoformat()} to {period_to.date().isoformat()}"


def format_review_counts(person: PersonStatistics) -> str:
    metrics = person.review_metrics
    return f"{metrics.approved}/{metrics.commented}/{metrics.changes_requested}"


def format_participation(person: PersonStatistics) -> str:
    """Format participation as ``reviewed/eligible (rate%)``."""
    return (
        f"{person.unique_prs_reviewed}/{person.eligible_prs_for_review} "
        f"({person.review_participation_rate:.0f}%)"
    )


def format_as_markdown(stats: RepositoryStatistics) -> str:
    """Render the per-person summary as a Markdown table with a legend."""
    lines = [
        f"# PR Statistics for {stats.repository}",
        "",
        f"**Period:** {format_period(stats.period_from, stats.period_to)}",
        f"**Total PRs:** {stats.total_prs}",
        "",
        "| Person | PRs Opened | Reviews (A/C/CR) | Participation "
        "| First Comment Time (avg/min/max/median) "
        "| First Review Time (avg/min/max/median) "
        "| Approval Time (avg/min/max/median) |",
        "|--------|------------|------------------|---------------"
        "|------------------------------------------"
        "|----------------------------------------"
        "|-------------------------------------|",
    ]

    for person in stats.stats:
        lines.append(
            f"| {person.person} | {person.prs_opened} | {format_review_counts(person)} "
            f"| {format_participation(person)} "
            f"| {format_time_metrics(person.time_to_first_comment)} "
            f"| {format_time_metrics(person.time_to_first_review)} "
            f"| {format_time_metrics(person.time_to_approval)} |"
        )

    lines.extend([
        "",
        "**Legend:**",
        "- A/C/CR = Approved / Commented / Changes Requested",
        "- Participation = Unique PRs reviewed / Eligible PRs (excluding own PRs and bots)",
        "- First Comment = Time to any interaction (review or comment)",
        "- First Review = Time to formal review (Approved or Changes Requested only)",
        "- Times shown as: average / min / max / median",
    ])

    return "\n".join(lines)


def _metric_cells(metrics: Optional[TimeMetrics]) -> List[str]:
    if metrics is None:
        return ["", "", "", ""]
    return [f"{value:.0f}" for value in (metrics.average, metrics.min, metrics.max, metrics.median)]


def format_as_csv(stats: RepositoryStatistics) -> str:
    """Render the per-person summary as CSV with raw millisecond timings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(SUMMARY_CSV_HEADER)

    for person in stats.stats:
        metrics = person.review_metrics
        writer.writerow(
            [
                person.person.login,
                person.prs_opened,
                metrics.approved,
                metrics.commented,
                metrics.changes_requested,
                person.total_reviews_given,
                person.unique_prs_reviewed,
                person.eligible_prs_for_review,
                f"{person.review_participation_rate:.2f}",
                *_metric_cells(person.time_to_first_comment),
                *_metric_cells(person.time_to_first_review),
                *_metric_cells(person.time_to_approval),
            ]
        )

    return buffer.getvalue().rstrip("\n")
