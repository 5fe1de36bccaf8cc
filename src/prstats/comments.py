"""Collection of one user's pull request conversations."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Tuple

from .github_client import GitHubClient
from .models import CommentExtractionResult, PRConversation

logger = logging.getLogger(__name__)


def collect_comment_extraction(
    client: GitHubClient,
    repository: str,
    username: str,
    since: datetime,
    until: datetime,
) -> CommentExtractionResult:
    """Collect a user's comments on other people's PRs and the surrounding threads.

    Conversations are ordered by how many comments the user left, most first.
    """
    review_comments = client.list_review_comments_by_user(since, username)
    logger.info("Fetched review comments", extra={"username": username, "count": len(review_comments)})

    issue_comments = client.list_issue_comments_by_user(since, username)
    logger.info("Fetched issue comments", extra={"username": username, "count": len(issue_comments)})

    pr_info: Dict[int, Tuple[str, str]] = {}
    for comment in [*review_comments, *issue_comments]:
        pr_info.setdefault(comment.pr_number, (comment.pr_title, comment.pr_author))

    conversations: List[PRConversation] = []
    for pr_number, (title, author) in pr_info.items():
        all_comments = client.list_conversation(pr_number, username)
        conversations.append(
            PRConversation(
                pr_number=pr_number,
                pr_title=title,
                pr_author=author,
                user_comment_count=sum(1 for comment in all_comments if comment.is_target_user),
                all_comments=all_comments,
            )
        )

    conversations.sort(key=lambda conversation: conversation.user_comment_count, reverse=True)
    logger.info(
        "Fetched conversations",
        extra={
            "conversations": len(conversations),
            "comments": sum(len(c.all_comments) for c in conversations),
        },
    )

    return CommentExtractionResult(
        username=username,
        repository=repository,
        period_from=since,
        period_to=until,
        review_comments=review_comments,
        issue_comments=issue_comments,
        total_count=len(review_comments) + len(issue_comments),
        conversations=conversations,
    )
