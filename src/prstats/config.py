"""Configuration parsing and validation for the GitHub PR statistics tool."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .errors import AuthenticationError, ConfigurationError

DEFAULT_DAYS = 30
OUTPUT_FORMATS = ("markdown", "csv")


@dataclass(frozen=True)
class Config:
    """Validated runtime settings shared by the statistics and comment commands."""

    owner: str
    repo: str
    days: int
    token: str
    output_format: str = "markdown"
    output_dir: str = ""
    username: Optional[str] = None

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repository(value: str) -> Tuple[str, str]:
    """Split an ``owner/repo`` string.

    Raises:
        ConfigurationError: If the value is not exactly two non-empty segments.
    """
    parts = value.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(
            f"Invalid repository format: '{value}'. Expected format: 'owner/repo'."
        )
    return parts[0], parts[1]


def _resolve_days(days: Optional[int]) -> int:
    if days is None:
        raw = os.getenv("GITHUB_DAYS", "").strip()
        if not raw:
            return DEFAULT_DAYS
        try:
            days = int(raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid GITHUB_DAYS value: '{raw}'. Expected a positive number."
            ) from exc

    if days <= 0:
        raise ConfigurationError("Invalid value for 'days': expected an integer greater than 0.")
    return days


def load_config(
    repository: Optional[str] = None,
    days: Optional[int] = None,
    output_format: str = "markdown",
    output_dir: Optional[str] = None,
    username: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    CLI values take precedence; ``GITHUB_REPO`` and ``GITHUB_DAYS`` fill in
    what was not given on the command line.

    Args:
        repository: Repository in ``owner/repo`` form.
        days: Positive number of days of history to query.
        output_format: ``markdown`` or ``csv`` for the console summary.
        output_dir: Directory for exported reports.
        username: Target user for the comment extraction report.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the repository, days or output format is invalid.
        AuthenticationError: If neither ``GITHUB_TOKEN`` nor ``TOKEN`` is set.
    """
    repository = repository or os.getenv("GITHUB_REPO", "").strip()
    if not repository:
        raise ConfigurationError(
            "Missing repository. Pass --repo owner/repo or set the 'GITHUB_REPO' environment variable."
        )
    owner, repo = parse_repository(repository)

    resolved_days = _resolve_days(days)

    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"Invalid output format '{output_format}': expected one of {', '.join(OUTPUT_FORMATS)}."
        )

    token: str = (os.getenv("GITHUB_TOKEN") or os.getenv("TOKEN") or "").strip()
    if not token:
        raise AuthenticationError(
            "Missing required GitHub personal access token. "
            "Set the 'GITHUB_TOKEN' environment variable before running. "
            "Tokens can be created at https://github.com/settings/tokens"
        )

    return Config(
        owner=owner,
        repo=repo,
        days=resolved_days,
        token=token,
        output_format=output_format,
        output_dir=output_dir or os.path.join("output", f"{owner}-{repo}"),
        username=username,
    )


def load_comments_config(
    username: Optional[str],
    repository: Optional[str] = None,
    days: Optional[int] = None,
    output_dir: Optional[str] = None,
) -> Config:
    """Build configuration for the comment extraction report.

    Raises:
        ConfigurationError: If no username is given and ``GITHUB_USER`` is unset.
    """
    username = (username or os.getenv("GITHUB_USER", "")).strip()
    if not username:
        raise ConfigurationError(
            "Missing username. Pass --user or set the 'GITHUB_USER' environment variable."
        )

    config = load_config(repository=repository, days=days, username=username)
    if output_dir is None:
        output_dir = os.path.join(config.output_dir, "comments")

    return replace(config, output_dir=output_dir)
