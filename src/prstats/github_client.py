"""GitHub REST API client for pull request statistics retrieval."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests

from .config import Config
from .errors import ApiError
from .models import (
    Comment,
    ConversationComment,
    Identity,
    IssueComment,
    PRState,
    PullRequest,
    Review,
    ReviewComment,
    ReviewOutcome,
    ReviewRequest,
)

logger = logging.getLogger(__name__)

_PULL_NUMBER_RE = re.compile(r"/pulls/(\d+)$")
_ISSUE_NUMBER_RE = re.compile(r"/issues/(\d+)$")


class GitHubClient:
    """Small, typed client for the GitHub pull request REST APIs."""

    _API_URL = "https://api.github.com"
    _API_VERSION = "2022-11-28"
    _PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including owner/repo/token.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._repo_path = f"/repos/{config.owner}/{config.repo}"
        self._pr_summaries: Dict[int, Tuple[str, str]] = {}

        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {config.token}",
            "X-GitHub-Api-Version": self._API_VERSION,
        })

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the repository."""
        return f"{self._API_URL}{self._repo_path}/{path.lstrip('/')}"

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _is_rate_limited(self, response: requests.Response) -> bool:
        if response.status_code == 429:
            return True
        return response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0"

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute backoff seconds, honoring Retry-After and X-RateLimit-Reset."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        reset_header = response.headers.get("X-RateLimit-Reset")
        if reset_header:
            try:
                wait_seconds = int(reset_header) - int(time.time())
                return min(self._MAX_BACKOFF_SECONDS, max(1, wait_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Execute a GET request with retry logic for rate limits and 5xx responses.

        Raises:
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                or does not return valid JSON.
        """
        url = self._build_url(path)
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"GitHub request failed after retries: GET {url}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = self._is_rate_limited(response) or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                time.sleep(self._extract_backoff_seconds(response, attempt))
                continue

            if status_code >= 400:
                raise ApiError(
                    "GitHub API request failed: "
                    f"GET {url} returned {status_code} - {response.text[:1000]}",
                    status_code=status_code,
                )

            try:
                return response.json()
            except ValueError as exc:
                raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

        raise ApiError(f"GitHub request failed after retries: GET {url}") from last_error

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Yield items from a list endpoint using ``page``/``per_page`` pagination."""
        page = 1

        while True:
            query = dict(params or {})
            query.update({"per_page": self._PAGE_SIZE, "page": page})
            payload = self._get_json(path, params=query)

            if not isinstance(payload, list):
                raise ApiError(f"GitHub API returned unexpected payload shape: GET {path}")

            yield from payload

            if len(payload) < self._PAGE_SIZE:
                break
            page += 1

    def list_pull_requests(self, since: datetime, until: datetime) -> List[PullRequest]:
        """List pull requests created within ``[since, until]``.

        PRs are requested newest first, so listing stops at the first PR
        created before ``since``.
        """
        pull_requests: List[PullRequest] = []
        params = {"state": "all", "sort": "created", "direction": "desc"}

        for item in self._paginate("pulls", params=params):
            created_at = self._parse_datetime(item.get("created_at"))
            if item.get("number") is None or created_at is None:
                raise ApiError(f"GitHub pull request payload is missing required fields: {item}")

            if created_at < since:
                break
            if created_at > until:
                continue

            closed_at = self._parse_datetime(item.get("closed_at"))
            merged_at = self._parse_datetime(item.get("merged_at"))
            if merged_at is not None:
                state = PRState.MERGED
            elif closed_at is not None:
                state = PRState.CLOSED
            else:
                state = PRState.OPEN

            pull_requests.append(
                PullRequest(
                    number=int(item["number"]),
                    title=str(item.get("title") or ""),
                    author=Identity((item.get("user") or {}).get("login") or "unknown"),
                    created_at=created_at,
                    ready_for_review_at=created_at,
                    closed_at=closed_at,
                    merged_at=merged_at,
                    state=state,
                    is_draft=bool(item.get("draft")),
                )
            )

        return pull_requests

    def list_reviews(self, pr_number: int) -> List[Review]:
        """List submitted reviews; pending and dismissed reviews are dropped."""
        reviews: List[Review] = []
        valid_states = {outcome.value for outcome in ReviewOutcome}

        for item in self._paginate(f"pulls/{pr_number}/reviews"):
            login = (item.get("user") or {}).get("login")
            submitted_at = self._parse_datetime(item.get("submitted_at"))
            state = item.get("state")

            if not login or submitted_at is None or state not in valid_states:
                continue

            reviews.append(
                Review(
                    pr_number=pr_number,
                    reviewer=Identity(login),
                    outcome=ReviewOutcome(state),
                    submitted_at=submitted_at,
                )
            )

        return reviews

    def list_timeline_events(self, pr_number: int) -> List[Dict[str, Any]]:
        return list(self._paginate(f"issues/{pr_number}/timeline"))

    def list_review_requests(
        self,
        pr_number: int,
        events: Optional[List[Dict[str, Any]]] = None,
    ) -> List[ReviewRequest]:
        """Extract user review requests from the PR timeline; team requests are skipped."""
        if events is None:
            events = self.list_timeline_events(pr_number)

        review_requests: List[ReviewRequest] = []
        for event in events:
            if event.get("event") != "review_requested":
                continue
            login = (event.get("requested_reviewer") or {}).get("login")
            requested_at = self._parse_datetime(event.get("created_at"))
            if login and requested_at is not None:
                review_requests.append(
                    ReviewRequest(pr_number=pr_number, reviewer=Identity(login), requested_at=requested_at)
                )

        return review_requests

    def get_ready_for_review_date(
        self,
        pr_number: int,
        events: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[datetime]:
        """Return when a draft PR was marked ready for review, if it ever was."""
        if events is None:
            events = self.list_timeline_events(pr_number)

        for event in events:
            if event.get("event") == "ready_for_review":
                ready_at = self._parse_datetime(event.get("created_at"))
                if ready_at is not None:
                    return ready_at

        return None

    def list_issue_comments(self, pr_number: int) -> List[Comment]:
        """List general discussion comments on a pull request."""
        comments: List[Comment] = []

        for item in self._paginate(f"issues/{pr_number}/comments"):
            login = (item.get("user") or {}).get("login")
            created_at = self._parse_datetime(item.get("created_at"))
            if not login or created_at is None:
                continue
            comments.append(Comment(pr_number=pr_number, commenter=Identity(login), created_at=created_at))

        return comments

    def get_pull_request_summary(self, pr_number: int) -> Tuple[str, str]:
        """Return ``(title, author)`` for a PR, cached per client."""
        if pr_number in self._pr_summaries:
            return self._pr_summaries[pr_number]

        try:
            payload = self._get_json(f"pulls/{pr_number}")
            summary = (
                str(payload.get("title") or f"PR #{pr_number}"),
                (payload.get("user") or {}).get("login") or "unknown",
            )
        except ApiError:
            summary = (f"PR #{pr_number}", "unknown")

        self._pr_summaries[pr_number] = summary
        return summary

    def list_review_comments_by_user(self, since: datetime, login: str) -> List[ReviewComment]:
        """List diff comments by ``login`` since ``since``, excluding their own PRs."""
        comments: List[ReviewComment] = []
        params = {"sort": "created", "direction": "desc"}

        for item in self._paginate("pulls/comments", params=params):
            created_at = self._parse_datetime(item.get("created_at"))
            if created_at is None:
                continue
            if created_at < since:
                break
            if (item.get("user") or {}).get("login") != login:
                continue

            match = _PULL_NUMBER_RE.search(item.get("pull_request_url") or "")
            pr_number = int(match.group(1)) if match else 0
            title, author = self.get_pull_request_summary(pr_number)
            if author == login:
                continue

            comments.append(
                ReviewComment(
                    id=int(item["id"]),
                    pr_number=pr_number,
                    pr_title=title,
                    pr_author=author,
                    body=item.get("body") or "",
                    created_at=created_at,
                    html_url=item.get("html_url") or "",
                    path=item.get("path") or "",
                    line=item.get("line"),
                    commit_id=item.get("commit_id") or "",
                    in_reply_to_id=item.get("in_reply_to_id"),
                )
            )

        return comments

    def list_issue_comments_by_user(self, since: datetime, login: str) -> List[IssueComment]:
        """List PR discussion comments by ``login`` since ``since``, excluding their own PRs."""
        comments: List[IssueComment] = []
        params = {"sort": "created", "direction": "desc", "since": since.isoformat()}

        for item in self._paginate("issues/comments", params=params):
            created_at = self._parse_datetime(item.get("created_at"))
            if created_at is None or created_at < since:
                continue
            if (item.get("user") or {}).get("login") != login:
                continue
            html_url = item.get("html_url") or ""
            if "/pull/" not in html_url:
                continue

            match = _ISSUE_NUMBER_RE.search(item.get("issue_url") or "")
            pr_number = int(match.group(1)) if match else 0
            title, author = self.get_pull_request_summary(pr_number)
            if author == login:
                continue

            comments.append(
                IssueComment(
                    id=int(item["id"]),
                    pr_number=pr_number,
                    pr_title=title,
                    pr_author=author,
                    body=item.get("body") or "",
                    created_at=created_at,
                    html_url=html_url,
                )
            )

        return comments

    def _conversation_source(self, path: str, pr_number: int) -> List[Dict[str, Any]]:
        """Fetch one conversation source; a failing source yields no items."""
        try:
            return list(self._paginate(path))
        except ApiError as exc:
            logger.warning(
                "Failed to fetch conversation source; skipped",
                extra={"pr_number": pr_number, "source": path, "error": str(exc)},
            )
            return []

    def list_conversation(self, pr_number: int, login: str) -> List[ConversationComment]:
        """Return every comment on a PR, from all participants, oldest first.

        Includes diff comments, discussion comments and review bodies that
        carry text. Each source is fetched independently, so one failing
        endpoint does not drop the comments from the others.
        """
        comments: List[ConversationComment] = []

        for item in self._conversation_source(f"pulls/{pr_number}/comments", pr_number):
            created_at = self._parse_datetime(item.get("created_at"))
            if created_at is None:
                continue
            author = (item.get("user") or {}).get("login") or "unknown"
            comments.append(
                ConversationComment(
                    id=int(item["id"]),
                    author=author,
                    is_target_user=author == login,
                    type="review",
                    body=item.get("body") or "",
                    created_at=created_at,
                    html_url=item.get("html_url") or "",
                    path=item.get("path"),
                    line=item.get("line"),
                )
            )

        for item in self._conversation_source(f"issues/{pr_number}/comments", pr_number):
            created_at = self._parse_datetime(item.get("created_at"))
            if created_at is None:
                continue
            author = (item.get("user") or {}).get("login") or "unknown"
            comments.append(
                ConversationComment(
                    id=int(item["id"]),
                    author=author,
                    is_target_user=author == login,
                    type="issue",
                    body=item.get("body") or "",
                    created_at=created_at,
                    html_url=item.get("html_url") or "",
                )
            )

        for item in self._conversation_source(f"pulls/{pr_number}/reviews", pr_number):
            body = (item.get("body") or "").strip()
            submitted_at = self._parse_datetime(item.get("submitted_at"))
            if not body or submitted_at is None:
                continue
            author = (item.get("user") or {}).get("login") or "unknown"
            comments.append(
                ConversationComment(
                    id=int(item["id"]),
                    author=author,
                    is_target_user=author == login,
                    type="review",
                    body=item.get("body") or "",
                    created_at=submitted_at,
                    html_url=item.get("html_url") or "",
                )
            )

        comments.sort(key=lambda comment: comment.created_at)
        return comments
