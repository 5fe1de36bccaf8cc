"""Domain models for GitHub pull request statistics.

These dataclasses intentionally model only the subset of API payload fields that
are required for aggregation and reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

BOT_PATTERNS: Tuple[str, ...] = ("renovate", "copilot", "dependabot")


def is_bot(login: str) -> bool:
    """Return ``True`` when a login belongs to a known automation account."""
    lowered = login.lower()
    return any(pattern in lowered for pattern in BOT_PATTERNS)


@dataclass(frozen=True, order=True, slots=True)
class Identity:
    """A GitHub account login."""

    login: str

    @property
    def is_bot(self) -> bool:
        return is_bot(self.login)

    def __str__(self) -> str:
        return self.login


class PRState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class ReviewOutcome(str, Enum):
    APPROVED = "APPROVED"
    COMMENTED = "COMMENTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"


class ReviewStatus(str, Enum):
    """One person's classification of their involvement in one pull request."""

    OWN_PR = "OWN_PR"
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    COMMENTED_ONLY = "COMMENTED_ONLY"
    NOT_REVIEWED = "NOT_REVIEWED"


@dataclass(frozen=True, slots=True)
class PullRequest:
    """Represents the pull request fields needed for aggregation and display."""

    number: int
    title: str
    author: Identity
    created_at: datetime
    ready_for_review_at: datetime
    closed_at: Optional[datetime]
    merged_at: Optional[datetime]
    state: PRState
    is_draft: bool = False


@dataclass(frozen=True, slots=True)
class Review:
    pr_number: int
    reviewer: Identity
    outcome: ReviewOutcome
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class ReviewRequest:
    pr_number: int
    reviewer: Identity
    requested_at: datetime


@dataclass(frozen=True, slots=True)
class Comment:
    """A discussion comment on a pull request (not a review)."""

    pr_number: int
    commenter: Identity
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ReportContext:
    """Explicit inputs the aggregator needs beyond the fetched records."""

    repository: str
    now: datetime

    def pull_request_url(self, number: int) -> str:
        return f"https://github.com/{self.repository}/pull/{number}"


@dataclass(frozen=True, slots=True)
class TimeMetrics:
    """Summary of a non-empty collection of millisecond durations."""

    average: float
    min: int
    max: int
    median: float


@dataclass(frozen=True, slots=True)
class ReviewMetrics:
    approved: int = 0
    commented: int = 0
    changes_requested: int = 0

    @property
    def total(self) -> int:
        return self.approved + self.commented + self.changes_requested


@dataclass(frozen=True, slots=True)
class PersonPRDetail:
    """One person's view of one pull request in the window."""

    pr_number: int
    title: str
    author: Identity
    created_at: datetime
    ready_for_review_at: datetime
    age_in_days: int
    state: PRState
    is_draft: bool
    review_status: ReviewStatus
    first_comment_time: Optional[int]
    first_review_time: Optional[int]
    time_open: int
    reviewer_count: int
    url: str


@dataclass(frozen=True, slots=True)
class PersonStatistics:
    person: Identity
    prs_opened: int
    review_metrics: ReviewMetrics
    total_reviews_given: int
    unique_prs_reviewed: int
    review_participation_rate: float
    eligible_prs_for_review: int
    time_to_first_comment: Optional[TimeMetrics]
    time_to_first_review: Optional[TimeMetrics]
    time_to_approval: Optional[TimeMetrics]
    pr_details: Tuple[PersonPRDetail, ...]


@dataclass(frozen=True, slots=True)
class RepositoryStatistics:
    repository: str
    period_from: datetime
    period_to: datetime
    total_prs: int
    stats: Tuple[PersonStatistics, ...]


@dataclass(slots=True)
class ReviewComment:
    """A review comment left on a diff line of a pull request."""

    id: int
    pr_number: int
    pr_title: str
    pr_author: str
    body: str
    created_at: datetime
    html_url: str
    path: str
    line: Optional[int]
    commit_id: str
    in_reply_to_id: Optional[int] = None


@dataclass(slots=True)
class IssueComment:
    """A general discussion comment on a pull request."""

    id: int
    pr_number: int
    pr_title: str
    pr_author: str
    body: str
    created_at: datetime
    html_url: str


@dataclass(slots=True)
class ConversationComment:
    """A comment by any participant in a pull request conversation."""

    id: int
    author: str
    is_target_user: bool
    type: str
    body: str
    created_at: datetime
    html_url: str
    path: Optional[str] = None
    line: Optional[int] = None


@dataclass(slots=True)
class PRConversation:
    pr_number: int
    pr_title: str
    pr_author: str
    user_comment_count: int
    all_comments: List[ConversationComment] = field(default_factory=list)


@dataclass(slots=True)
class CommentExtractionResult:
    username: str
    repository: str
    period_from: datetime
    period_to: datetime
    review_comments: List[ReviewComment]
    issue_comments: List[IssueComment]
    total_count: int
    conversations: List[PRConversation]
