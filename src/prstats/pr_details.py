"""Per-person, per-PR detail rows.

Every contributor gets one row for every pull request in the window. The row
carries a single review classification plus the PR's lifecycle timing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .models import (
    Identity,
    PersonPRDetail,
    PullRequest,
    ReportContext,
    Review,
    ReviewStatus,
)

_ONE_MILLISECOND = timedelta(milliseconds=1)
_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ReviewStub:
    """Outcome and response timings recorded while folding reviews and comments."""

    status: ReviewStatus
    first_comment_time: Optional[int] = None
    first_review_time: Optional[int] = None


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from ``start`` to ``end``; negative if ``end`` is earlier."""
    return (end - start) // _ONE_MILLISECOND


def time_open_ms(pr: PullRequest, now: datetime) -> int:
    """Milliseconds from ready-for-review until merge, close or ``now``."""
    end = pr.merged_at or pr.closed_at or now
    return elapsed_ms(pr.ready_for_review_at, end)


def age_in_days(pr: PullRequest, now: datetime) -> int:
    return (now - pr.ready_for_review_at) // _ONE_DAY


def count_reviewers(reviews: Iterable[Review]) -> int:
    """Count distinct non-bot identities that submitted any review."""
    return len({review.reviewer for review in reviews if not review.reviewer.is_bot})


def build_pr_detail(
    pr: PullRequest,
    person: Identity,
    stub: Optional[ReviewStub],
    reviewer_count: int,
    context: ReportContext,
) -> PersonPRDetail:
    """Materialize one person's detail row for one pull request.

    Authorship overrides any recorded review outcome; without a stub the
    person did not interact with the PR.
    """
    if pr.author == person:
        status = ReviewStatus.OWN_PR
    elif stub is not None:
        status = stub.status
    else:
        status = ReviewStatus.NOT_REVIEWED

    return PersonPRDetail(
        pr_number=pr.number,
        title=pr.title,
        author=pr.author,
        created_at=pr.created_at,
        ready_for_review_at=pr.ready_for_review_at,
        age_in_days=age_in_days(pr, context.now),
        state=pr.state,
        is_draft=pr.is_draft,
        review_status=status,
        first_comment_time=stub.first_comment_time if stub else None,
        first_review_time=stub.first_review_time if stub else None,
        time_open=time_open_ms(pr, context.now),
        reviewer_count=reviewer_count,
        url=context.pull_request_url(pr.number),
    )
