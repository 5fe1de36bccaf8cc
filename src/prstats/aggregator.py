"""Per-person aggregation of pull request activity.

This module folds the fetched records for one repository and window into one
``PersonStatistics`` per contributor:
- PR authorship seeds a contributor and their own-PR set.
- Reviews are grouped per reviewer and PR; only the last submitted review
  counts towards the outcome tally.
- Response times are measured from the first review request for that reviewer
  on that PR. Negative durations are dropped from the samples.
- Discussion comments without a formal review are classified as comment-only.

Bots are excluded at every stage.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, TypeVar

from .errors import DataValidationError
from .models import (
    Comment,
    Identity,
    PersonStatistics,
    PullRequest,
    ReportContext,
    RepositoryStatistics,
    Review,
    ReviewMetrics,
    ReviewOutcome,
    ReviewRequest,
    ReviewStatus,
)
from .pr_details import ReviewStub, build_pr_detail, count_reviewers, elapsed_ms
from .stats import compute_time_metrics

logger = logging.getLogger(__name__)

FORMAL_OUTCOMES = frozenset({ReviewOutcome.APPROVED, ReviewOutcome.CHANGES_REQUESTED})

T = TypeVar("T")


@dataclass
class _PersonAccumulator:
    """Mutable per-identity state, finalized once aggregation is complete."""

    person: Identity
    prs_opened: int = 0
    approved: int = 0
    commented: int = 0
    changes_requested: int = 0
    own_prs: Set[int] = field(default_factory=set)
    reviewed_prs: Set[int] = field(default_factory=set)
    first_comment_times: List[int] = field(default_factory=list)
    first_review_times: List[int] = field(default_factory=list)
    approval_times: List[int] = field(default_factory=list)
    stubs: Dict[int, ReviewStub] = field(default_factory=dict)

    def tally(self, review: Review) -> None:
        if review.outcome is ReviewOutcome.APPROVED:
            self.approved += 1
        elif review.outcome is ReviewOutcome.COMMENTED:
            self.commented += 1
        elif review.outcome is ReviewOutcome.CHANGES_REQUESTED:
            self.changes_requested += 1
        else:
            raise DataValidationError(
                f"Unsupported review outcome {review.outcome!r} on PR #{review.pr_number} "
                f"by {review.reviewer}"
            )

    def finalize(
        self,
        pull_requests: Sequence[PullRequest],
        reviewer_counts: Mapping[int, int],
        context: ReportContext,
    ) -> PersonStatistics:
        eligible = len(pull_requests) - len(self.own_prs)
        unique_reviewed = len(self.reviewed_prs - self.own_prs)
        participation = unique_reviewed / eligible * 100 if eligible > 0 else 0.0

        details = tuple(
            build_pr_detail(
                pr,
                self.person,
                self.stubs.get(pr.number),
                reviewer_counts[pr.number],
                context,
            )
            for pr in pull_requests
        )
        metrics = ReviewMetrics(
            approved=self.approved,
            commented=self.commented,
            changes_requested=self.changes_requested,
        )

        return PersonStatistics(
            person=self.person,
            prs_opened=self.prs_opened,
            review_metrics=metrics,
            total_reviews_given=metrics.total,
            unique_prs_reviewed=unique_reviewed,
            review_participation_rate=participation,
            eligible_prs_for_review=eligible,
            time_to_first_comment=compute_time_metrics(self.first_comment_times),
            time_to_first_review=compute_time_metrics(self.first_review_times),
            time_to_approval=compute_time_metrics(self.approval_times),
            pr_details=details,
        )


def _group_by(items: Iterable[T], key: Callable[[T], Identity]) -> Dict[Identity, List[T]]:
    grouped: Dict[Identity, List[T]] = defaultdict(list)
    for item in items:
        grouped[key(item)].append(item)
    return grouped


def _first_request_times(requests: Iterable[ReviewRequest]) -> Dict[Identity, datetime]:
    """Earliest request timestamp per requested reviewer; re-requests are ignored."""
    first: Dict[Identity, datetime] = {}
    for request in requests:
        current = first.get(request.reviewer)
        if current is None or request.requested_at < current:
            first[request.reviewer] = request.requested_at
    return first


def _response_time(
    requested_at: datetime,
    responded_at: datetime,
    pr_number: int,
    person: Identity,
) -> Optional[int]:
    duration = elapsed_ms(requested_at, responded_at)
    if duration < 0:
        logger.debug(
            "Skipping response time due to negative duration",
            extra={"pr_number": pr_number, "person": person.login, "duration_ms": duration},
        )
        return None
    return duration


class _Aggregation:
    """Single pass over one window's records."""

    def __init__(
        self,
        pull_requests: Sequence[PullRequest],
        reviews_by_pr: Mapping[int, Sequence[Review]],
        review_requests_by_pr: Mapping[int, Sequence[ReviewRequest]],
        comments_by_pr: Mapping[int, Sequence[Comment]],
    ) -> None:
        self._pull_requests = pull_requests
        self._reviews_by_pr = reviews_by_pr
        self._review_requests_by_pr = review_requests_by_pr
        self._comments_by_pr = comments_by_pr
        self._people: Dict[Identity, _PersonAccumulator] = {}

    def _accumulator(self, person: Identity) -> _PersonAccumulator:
        accumulator = self._people.get(person)
        if accumulator is None:
            accumulator = _PersonAccumulator(person=person)
            self._people[person] = accumulator
        return accumulator

    def _reviews(self, pr_number: int) -> List[Review]:
        return [r for r in self._reviews_by_pr.get(pr_number, ()) if not r.reviewer.is_bot]

    def _comments(self, pr_number: int) -> List[Comment]:
        return [c for c in self._comments_by_pr.get(pr_number, ()) if not c.commenter.is_bot]

    def seed_authors(self) -> None:
        for pr in self._pull_requests:
            if pr.author.is_bot:
                continue
            accumulator = self._accumulator(pr.author)
            accumulator.prs_opened += 1
            accumulator.own_prs.add(pr.number)

    def fold_reviews(self) -> None:
        for pr in self._pull_requests:
            comments = self._comments(pr.number)
            requested = _first_request_times(self._review_requests_by_pr.get(pr.number, ()))

            for reviewer, person_reviews in _group_by(self._reviews(pr.number), lambda r: r.reviewer).items():
                accumulator = self._accumulator(reviewer)
                accumulator.reviewed_prs.add(pr.number)

                ordered = sorted(person_reviews, key=lambda r: r.submitted_at)
                latest = ordered[-1]
                accumulator.tally(latest)

                first_comment_time: Optional[int] = None
                first_review_time: Optional[int] = None
                requested_at = requested.get(reviewer)

                if requested_at is None:
                    logger.debug(
                        "No review request recorded for reviewer",
                        extra={"pr_number": pr.number, "person": reviewer.login},
                    )
                else:
                    interactions = [r.submitted_at for r in ordered]
                    interactions.extend(c.created_at for c in comments if c.commenter == reviewer)
                    first_comment_time = _response_time(requested_at, min(interactions), pr.number, reviewer)
                    if first_comment_time is not None:
                        accumulator.first_comment_times.append(first_comment_time)

                    formal = next((r for r in ordered if r.outcome in FORMAL_OUTCOMES), None)
                    if formal is not None:
                        first_review_time = _response_time(requested_at, formal.submitted_at, pr.number, reviewer)
                    if first_review_time is not None:
                        # Time to approval is measured from the same review.
                        accumulator.first_review_times.append(first_review_time)
                        accumulator.approval_times.append(first_review_time)

                accumulator.stubs[pr.number] = ReviewStub(
                    status=ReviewStatus(latest.outcome.value),
                    first_comment_time=first_comment_time,
                    first_review_time=first_review_time,
                )

    def fold_comments(self) -> None:
        for pr in self._pull_requests:
            requested = _first_request_times(self._review_requests_by_pr.get(pr.number, ()))

            for commenter, person_comments in _group_by(self._comments(pr.number), lambda c: c.commenter).items():
                accumulator = self._accumulator(commenter)
                if pr.number in accumulator.stubs:
                    continue

                first_comment_time: Optional[int] = None
                requested_at = requested.get(commenter)
                if requested_at is not None:
                    earliest = min(c.created_at for c in person_comments)
                    first_comment_time = _response_time(requested_at, earliest, pr.number, commenter)
                    if first_comment_time is not None:
                        accumulator.first_comment_times.append(first_comment_time)

                accumulator.stubs[pr.number] = ReviewStub(
                    status=ReviewStatus.COMMENTED_ONLY,
                    first_comment_time=first_comment_time,
                )

    def finalize(self, context: ReportContext) -> List[PersonStatistics]:
        reviewer_counts = {
            pr.number: count_reviewers(self._reviews_by_pr.get(pr.number, ()))
            for pr in self._pull_requests
        }
        return [
            accumulator.finalize(self._pull_requests, reviewer_counts, context)
            for accumulator in self._people.values()
        ]


def rank_person_stats(stats: Iterable[PersonStatistics]) -> List[PersonStatistics]:
    """Order by PRs opened descending, then login ascending ignoring case."""
    return sorted(stats, key=lambda s: (-s.prs_opened, s.person.login.casefold(), s.person.login))


def calculate_person_stats(
    pull_requests: Sequence[PullRequest],
    reviews_by_pr: Mapping[int, Sequence[Review]],
    review_requests_by_pr: Mapping[int, Sequence[ReviewRequest]],
    comments_by_pr: Mapping[int, Sequence[Comment]],
    context: ReportContext,
) -> List[PersonStatistics]:
    """Compute ranked per-contributor statistics for one repository window.

    The result is a pure function of the arguments: input order within each
    collection does not matter and no I/O is performed.

    Args:
        pull_requests: PRs in the window, bots and drafts already removed.
        reviews_by_pr: Submitted reviews keyed by PR number.
        review_requests_by_pr: Review request events keyed by PR number.
        comments_by_pr: Discussion comments keyed by PR number.
        context: Repository and reference time for URLs and open durations.

    Returns:
        One ``PersonStatistics`` per non-bot identity seen as author, reviewer
        or commenter, ranked by :func:`rank_person_stats`.

    Raises:
        DataValidationError: If a review carries an unsupported outcome.
    """
    aggregation = _Aggregation(pull_requests, reviews_by_pr, review_requests_by_pr, comments_by_pr)
    aggregation.seed_authors()
    aggregation.fold_reviews()
    aggregation.fold_comments()
    stats = rank_person_stats(aggregation.finalize(context))

    logger.info(
        "Aggregated person statistics",
        extra={
            "repository": context.repository,
            "prs_total": len(pull_requests),
            "people": len(stats),
        },
    )
    return stats


def build_repository_statistics(
    pull_requests: Sequence[PullRequest],
    reviews_by_pr: Mapping[int, Sequence[Review]],
    review_requests_by_pr: Mapping[int, Sequence[ReviewRequest]],
    comments_by_pr: Mapping[int, Sequence[Comment]],
    context: ReportContext,
    period_from: datetime,
    period_to: datetime,
) -> RepositoryStatistics:
    """Bundle ranked person statistics with the repository and window."""
    stats = calculate_person_stats(
        pull_requests, reviews_by_pr, review_requests_by_pr, comments_by_pr, context
    )
    return RepositoryStatistics(
        repository=context.repository,
        period_from=period_from,
        period_to=period_to,
        total_prs=len(pull_requests),
        stats=tuple(stats),
    )
