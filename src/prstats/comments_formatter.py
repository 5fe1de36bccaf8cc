"""Markdown and JSON output for the comment extraction report."""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .models import CommentExtractionResult, PRConversation


def _format_date(value: datetime) -> str:
    return value.date().isoformat()


def _format_datetime(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def group_conversations_by_pr_author(
    result: CommentExtractionResult,
) -> List[Tuple[str, int, List[PRConversation]]]:
    """Group conversations by PR author, most comments from the user first.

    Returns:
        ``(author, user_comment_count, conversations)`` tuples.
    """
    groups: Dict[str, Tuple[int, List[PRConversation]]] = {}
    for conversation in result.conversations:
        count, conversations = groups.get(conversation.pr_author, (0, []))
        conversations.append(conversation)
        groups[conversation.pr_author] = (count + conversation.user_comment_count, conversations)

    ordered = sorted(groups.items(), key=lambda item: item[1][0], reverse=True)
    return [(author, count, conversations) for author, (count, conversations) in ordered]


def format_comments_as_markdown(result: CommentExtractionResult) -> str:
    lines = [
        f"# Comments by {result.username}",
        "",
        f"**Repository:** {result.repository}",
        f"**Period:** {_format_date(result.period_from)} to {_format_date(result.period_to)}",
        f"**Total Comments:** {result.total_count}",
        "",
        "## Summary",
        "",
        f"- Review comments (on code): {len(result.review_comments)}",
        f"- General comments (on PRs): {len(result.issue_comments)}",
        f"- PRs with conversations: {len(result.conversations)}",
        "",
        "## Conversations by PR Author",
        "",
    ]

    for author, count, conversations in group_conversations_by_pr_author(result):
        lines.append(f"### @{author} ({count} comments from {result.username})")
        lines.append("")

        for conversation in conversations:
            lines.append(f"#### PR #{conversation.pr_number}: {conversation.pr_title}")
            lines.append("")

            for comment in conversation.all_comments:
                if comment.is_target_user:
                    author_label = f"**@{comment.author}** ⭐"
                else:
                    author_label = f"@{comment.author}"
                if comment.type == "review" and comment.path:
                    type_label = f"[Code: `{comment.path}`]"
                else:
                    type_label = "[General]"

                lines.extend([
                    f"##### {author_label} ({_format_datetime(comment.created_at)}) {type_label}",
                    "",
                    comment.body,
                    "",
                    f"[View on GitHub]({comment.html_url})",
                    "",
                    "---",
                    "",
                ])

    return "\n".join(lines)


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def export_comments_as_json(
    result: CommentExtractionResult,
    output_dir: str,
    generated_at: Optional[datetime] = None,
) -> str:
    """Write ``comments-{username}.json`` into ``output_dir`` and return its path."""
    generated_at = generated_at or datetime.now(timezone.utc)
    payload = {
        "metadata": {
            "username": result.username,
            "repository": result.repository,
            "period": {"from": result.period_from, "to": result.period_to},
            "generatedAt": generated_at,
            "totalCount": result.total_count,
            "reviewCommentsCount": len(result.review_comments),
            "issueCommentsCount": len(result.issue_comments),
            "conversationsCount": len(result.conversations),
        },
        "reviewComments": [asdict(comment) for comment in result.review_comments],
        "issueComments": [asdict(comment) for comment in result.issue_comments],
        "conversations": [asdict(conversation) for conversation in result.conversations],
    }

    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, f"comments-{result.username}.json")
    with open(filepath, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, default=_serialize, ensure_ascii=False)
    return filepath


def export_comments_as_markdown(result: CommentExtractionResult, output_dir: str) -> str:
    """Write ``comments-{username}.md`` into ``output_dir`` and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, f"comments-{result.username}.md")
    with open(filepath, "w", encoding="utf-8") as handle:
        handle.write(format_comments_as_markdown(result))
    return filepath
