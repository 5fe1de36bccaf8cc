"""GitHub pull request comment extractor."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from .cli import parse_comments_args
from .comments import collect_comment_extraction
from .comments_formatter import export_comments_as_json, export_comments_as_markdown
from .config import load_comments_config
from .errors import ApiError, AuthenticationError, ConfigurationError
from .github_client import GitHubClient
from .main import (
    EXIT_API_ERROR,
    EXIT_AUTHENTICATION_ERROR,
    EXIT_CONFIGURATION_ERROR,
    EXIT_SUCCESS,
    EXIT_UNEXPECTED_ERROR,
    configure_logging,
)

logger = logging.getLogger(__name__)


def orchestrate_comment_extraction(argv: Optional[Sequence[str]] = None) -> int:
    """Collect one user's PR conversations and write Markdown and JSON reports."""
    try:
        args = parse_comments_args(argv)
        configure_logging(args.verbose)
        config = load_comments_config(
            username=args.user,
            repository=args.repo,
            days=args.days,
            output_dir=args.output_dir,
        )

        period_to = datetime.now(timezone.utc)
        period_from = period_to - timedelta(days=config.days)
        print(f"Repository: {config.repository}")
        print(f"Username: {config.username}")
        print(f"Period: {period_from.date().isoformat()} to {period_to.date().isoformat()}")

        with GitHubClient(config=config) as client:
            result = collect_comment_extraction(
                client,
                repository=config.repository,
                username=config.username,
                since=period_from,
                until=period_to,
            )

        markdown_path = export_comments_as_markdown(result, config.output_dir)
        json_path = export_comments_as_json(result, config.output_dir)
        print(f"Generated Markdown: {markdown_path}")
        print(f"Generated JSON: {json_path}")
        print(f"Total: {result.total_count} comments extracted")
        return EXIT_SUCCESS
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION_ERROR
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION_ERROR
    except ApiError as exc:
        logger.error("GitHub API error: %s", exc)
        return EXIT_API_ERROR
    except Exception:
        logger.exception("Unexpected error while extracting comments")
        return EXIT_UNEXPECTED_ERROR


def main() -> int:
    return orchestrate_comment_extraction()


if __name__ == "__main__":
    raise SystemExit(main())
