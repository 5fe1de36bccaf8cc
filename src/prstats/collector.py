"""Fetch orchestration for one repository window.

Collects the pull requests in the window and, for each PR that survives the
bot and draft filters, its reviews, review requests and discussion comments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List

from .errors import ApiError
from .github_client import GitHubClient
from .models import Comment, PullRequest, Review, ReviewRequest

logger = logging.getLogger(__name__)


@dataclass
class CollectedData:
    """Fully materialized aggregation input for one window."""

    pull_requests: List[PullRequest] = field(default_factory=list)
    reviews_by_pr: Dict[int, List[Review]] = field(default_factory=dict)
    review_requests_by_pr: Dict[int, List[ReviewRequest]] = field(default_factory=dict)
    comments_by_pr: Dict[int, List[Comment]] = field(default_factory=dict)
    fetched_count: int = 0
    drafts_filtered: int = 0


def filter_pull_requests(pull_requests: List[PullRequest]) -> List[PullRequest]:
    """Drop bot-authored and draft pull requests."""
    return [pr for pr in pull_requests if not pr.author.is_bot and not pr.is_draft]


def _fetch_timeline(client: GitHubClient, pr_number: int) -> List[Dict[str, Any]]:
    try:
        return client.list_timeline_events(pr_number)
    except ApiError as exc:
        logger.warning(
            "Failed to fetch timeline; review requests treated as missing",
            extra={"pr_number": pr_number, "error": str(exc)},
        )
        return []


def _fetch_comments(client: GitHubClient, pr_number: int) -> List[Comment]:
    try:
        return client.list_issue_comments(pr_number)
    except ApiError as exc:
        logger.warning(
            "Failed to fetch comments; treated as none",
            extra={"pr_number": pr_number, "error": str(exc)},
        )
        return []


def collect_repository_data(client: GitHubClient, since: datetime, until: datetime) -> CollectedData:
    """Fetch everything the aggregator needs for PRs created in ``[since, until]``.

    Review listing failures propagate as ``ApiError``; timeline and comment
    failures for a single PR are logged and treated as no data.
    """
    fetched = client.list_pull_requests(since=since, until=until)
    without_bots = [pr for pr in fetched if not pr.author.is_bot]
    candidates = filter_pull_requests(fetched)

    data = CollectedData(
        fetched_count=len(fetched),
        drafts_filtered=len(without_bots) - len(candidates),
    )

    logger.info(
        "Fetched pull requests",
        extra={
            "prs_fetched": data.fetched_count,
            "prs_kept": len(candidates),
            "drafts_filtered": data.drafts_filtered,
        },
    )

    for index, pr in enumerate(candidates, start=1):
        logger.info("Fetching PR details (%d/%d)", index, len(candidates), extra={"pr_number": pr.number})

        events = _fetch_timeline(client, pr.number)
        ready_at = client.get_ready_for_review_date(pr.number, events=events)
        if ready_at is not None:
            pr = replace(pr, ready_for_review_at=ready_at)

        data.pull_requests.append(pr)
        data.reviews_by_pr[pr.number] = client.list_reviews(pr.number)
        data.review_requests_by_pr[pr.number] = client.list_review_requests(pr.number, events=events)
        data.comments_by_pr[pr.number] = _fetch_comments(client, pr.number)

    return data
