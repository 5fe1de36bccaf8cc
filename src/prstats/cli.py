"""Command-line argument parsing for the GitHub PR statistics tools."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .config import OUTPUT_FORMATS


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        default=None,
        help="Repository to analyze as owner/repo (default: $GITHUB_REPO).",
    )
    parser.add_argument(
        "--days",
        type=_positive_int,
        default=None,
        help="Number of days of PR history to analyze (default: $GITHUB_DAYS or 30).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exported reports (default: output/<owner>-<repo>).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for statistics generation.

    Returns:
        Parsed CLI arguments containing repository, days of history, console
        output format, output directory and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="github-pr-stats",
        description=(
            "Generate per-contributor pull request statistics for a GitHub "
            "repository (PRs opened, reviews, participation and response times)."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="markdown",
        help="Console summary format (default: markdown).",
    )

    return parser.parse_args(argv)


def parse_comments_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the comment extraction report."""
    parser = argparse.ArgumentParser(
        prog="github-pr-comments",
        description="Extract a user's pull request comments and the surrounding conversations.",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="GitHub login whose comments to extract (default: $GITHUB_USER).",
    )
    _add_common_arguments(parser)

    return parser.parse_args(argv)
