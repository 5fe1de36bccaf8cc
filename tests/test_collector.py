"""Tests for per-window fetch orchestration."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.collector import collect_repository_data, filter_pull_requests
from prstats.errors import ApiError
from prstats.models import Comment, Identity, PRState, PullRequest, Review, ReviewOutcome, ReviewRequest

CREATED = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
SINCE = CREATED - timedelta(days=30)
UNTIL = CREATED + timedelta(days=1)


def _pr(number: int, author: str = "alice", is_draft: bool = False) -> PullRequest:
    return PullRequest(
        number=number,
        title=f"PR {number}",
        author=Identity(author),
        created_at=CREATED,
        ready_for_review_at=CREATED,
        closed_at=None,
        merged_at=None,
        state=PRState.OPEN,
        is_draft=is_draft,
    )


def _client(pull_requests) -> Mock:
    client = Mock()
    client.list_pull_requests.return_value = pull_requests
    client.list_timeline_events.return_value = []
    client.get_ready_for_review_date.return_value = None
    client.list_reviews.return_value = []
    client.list_review_requests.return_value = []
    client.list_issue_comments.return_value = []
    return client


def test_filter_pull_requests_drops_bots_and_drafts():
    """Verify bot-authored and draft PRs are removed before aggregation."""
    prs = [_pr(1), _pr(2, author="dependabot[bot]"), _pr(3, is_draft=True)]

    assert [pr.number for pr in filter_pull_requests(prs)] == [1]


def test_collect_repository_data_fetches_details_for_kept_pull_requests():
    """Verify reviews, requests and comments are keyed by PR number for kept PRs only."""
    client = _client([_pr(1), _pr(2, author="renovate[bot]"), _pr(3, is_draft=True)])
    review = Review(pr_number=1, reviewer=Identity("bob"), outcome=ReviewOutcome.APPROVED, submitted_at=CREATED)
    request = ReviewRequest(pr_number=1, reviewer=Identity("bob"), requested_at=CREATED)
    comment = Comment(pr_number=1, commenter=Identity("carol"), created_at=CREATED)
    client.list_reviews.return_value = [review]
    client.list_review_requests.return_value = [request]
    client.list_issue_comments.return_value = [comment]

    data = collect_repository_data(client, since=SINCE, until=UNTIL)

    client.list_pull_requests.assert_called_once_with(since=SINCE, until=UNTIL)
    assert [pr.number for pr in data.pull_requests] == [1]
    assert data.reviews_by_pr == {1: [review]}
    assert data.review_requests_by_pr == {1: [request]}
    assert data.comments_by_pr == {1: [comment]}
    assert data.fetched_count == 3
    assert data.drafts_filtered == 1
    client.list_reviews.assert_called_once_with(1)


def test_collect_repository_data_applies_ready_for_review_date():
    """Verify a ready-for-review event replaces the creation time as the readiness time."""
    client = _client([_pr(1)])
    ready_at = CREATED + timedelta(hours=5)
    client.get_ready_for_review_date.return_value = ready_at

    data = collect_repository_data(client, since=SINCE, until=UNTIL)

    assert data.pull_requests[0].ready_for_review_at == ready_at
    assert data.pull_requests[0].created_at == CREATED


def test_collect_repository_data_tolerates_timeline_and_comment_failures():
    """Verify timeline and comment failures are treated as missing data."""
    client = _client([_pr(1)])
    client.list_timeline_events.side_effect = ApiError("timeline unavailable")
    client.list_issue_comments.side_effect = ApiError("comments unavailable")

    data = collect_repository_data(client, since=SINCE, until=UNTIL)

    assert data.comments_by_pr == {1: []}
    client.list_review_requests.assert_called_once_with(1, events=[])


def test_collect_repository_data_propagates_review_failures():
    """Verify failing to list reviews aborts collection."""
    client = _client([_pr(1)])
    client.list_reviews.side_effect = ApiError("reviews unavailable")

    with pytest.raises(ApiError):
        collect_repository_data(client, since=SINCE, until=UNTIL)
