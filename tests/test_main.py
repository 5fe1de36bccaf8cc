"""Tests for application orchestration in the main modules."""

import sys
from argparse import Namespace
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prstats.collector import CollectedData
from prstats.config import Config
from prstats.errors import ApiError, AuthenticationError, ConfigurationError, DataValidationError
from prstats.extract_comments import orchestrate_comment_extraction
from prstats.main import orchestrate_stats_generation
from prstats.models import (
    CommentExtractionResult,
    Identity,
    PRState,
    PullRequest,
    RepositoryStatistics,
)


def _args(**kwargs) -> Namespace:
    values = {"repo": "acme/widgets", "days": 30, "output_format": "markdown", "output_dir": None, "verbose": False}
    values.update(kwargs)
    return Namespace(**values)


def _config(**kwargs) -> Config:
    values = {"owner": "acme", "repo": "widgets", "days": 30, "token": "secret", "output_dir": "out"}
    values.update(kwargs)
    return Config(**values)


def _client_ctor(client: Mock) -> MagicMock:
    ctor = MagicMock()
    ctor.return_value.__enter__.return_value = client
    return ctor


def _collected() -> CollectedData:
    created = datetime(2026, 1, 5, tzinfo=timezone.utc)
    pr = PullRequest(
        number=1,
        title="Add retries",
        author=Identity("alice"),
        created_at=created,
        ready_for_review_at=created,
        closed_at=None,
        merged_at=None,
        state=PRState.OPEN,
    )
    return CollectedData(pull_requests=[pr], reviews_by_pr={1: []}, review_requests_by_pr={1: []},
                         comments_by_pr={1: []}, fetched_count=1)


def test_orchestrate_stats_generation_success(capsys):
    """Verify orchestration returns 0 and wires fetch, aggregation and exports."""
    config = _config()
    client = Mock()
    data = _collected()
    stats = Mock(spec=RepositoryStatistics)

    with patch("prstats.main.parse_args", return_value=_args()) as parse_args_mock, patch(
        "prstats.main.load_config", return_value=config
    ) as load_config_mock, patch(
        "prstats.main.GitHubClient", _client_ctor(client)
    ) as client_ctor_mock, patch(
        "prstats.main.collect_repository_data", return_value=data
    ) as collect_mock, patch(
        "prstats.main.build_repository_statistics", return_value=stats
    ) as build_mock, patch(
        "prstats.main.format_as_markdown", return_value="REPORT"
    ), patch("prstats.main.export_summary_table") as summary_mock, patch(
        "prstats.main.export_summary_table_csv"
    ) as summary_csv_mock, patch(
        "prstats.main.export_person_reports"
    ) as person_mock, patch(
        "prstats.main.export_person_reports_csv"
    ) as person_csv_mock, patch(
        "prstats.main.export_to_excel"
    ) as excel_mock:
        exit_code = orchestrate_stats_generation()

    assert exit_code == 0
    parse_args_mock.assert_called_once_with(None)
    load_config_mock.assert_called_once_with(
        repository="acme/widgets",
        days=30,
        output_format="markdown",
        output_dir=None,
    )
    client_ctor_mock.assert_called_once_with(config=config)
    collect_mock.assert_called_once()
    assert collect_mock.call_args.args[0] is client
    build_kwargs = build_mock.call_args.kwargs
    assert build_kwargs["context"].repository == "acme/widgets"
    assert build_kwargs["context"].now == build_kwargs["period_to"]
    for export_mock in (summary_mock, summary_csv_mock, person_mock, person_csv_mock, excel_mock):
        export_mock.assert_called_once_with(stats, "out")
    output = capsys.readouterr().out
    assert "Repository: acme/widgets" in output
    assert "REPORT" in output


def test_orchestrate_stats_generation_prints_csv_when_requested(capsys):
    """Verify the csv console format prints the CSV summary."""
    with patch("prstats.main.parse_args", return_value=_args(output_format="csv")), patch(
        "prstats.main.load_config", return_value=_config(output_format="csv")
    ), patch("prstats.main.GitHubClient", _client_ctor(Mock())), patch(
        "prstats.main.collect_repository_data", return_value=_collected()
    ), patch("prstats.main.build_repository_statistics"), patch(
        "prstats.main.format_as_csv", return_value="CSV-REPORT"
    ), patch("prstats.main.export_summary_table"), patch(
        "prstats.main.export_summary_table_csv"
    ), patch("prstats.main.export_person_reports"), patch(
        "prstats.main.export_person_reports_csv"
    ), patch("prstats.main.export_to_excel"):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 0
    assert "CSV-REPORT" in capsys.readouterr().out


def test_orchestrate_stats_generation_without_pull_requests_skips_exports(capsys):
    """Verify an empty window exits successfully without writing reports."""
    with patch("prstats.main.parse_args", return_value=_args()), patch(
        "prstats.main.load_config", return_value=_config()
    ), patch("prstats.main.GitHubClient", _client_ctor(Mock())), patch(
        "prstats.main.collect_repository_data", return_value=CollectedData()
    ), patch("prstats.main.build_repository_statistics") as build_mock, patch(
        "prstats.main.export_to_excel"
    ) as excel_mock:
        exit_code = orchestrate_stats_generation()

    assert exit_code == 0
    build_mock.assert_not_called()
    excel_mock.assert_not_called()
    assert "No pull requests found" in capsys.readouterr().out


def test_orchestrate_stats_generation_configuration_error_returns_config_exit_code():
    """Verify configuration failures return the configuration exit code."""
    with patch("prstats.main.parse_args", return_value=_args()), patch(
        "prstats.main.load_config", side_effect=ConfigurationError("bad repo")
    ):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 2


def test_orchestrate_stats_generation_missing_token_returns_auth_error():
    """Verify missing token failures return the authentication exit code."""
    with patch("prstats.main.parse_args", return_value=_args()), patch(
        "prstats.main.load_config", side_effect=AuthenticationError("Missing token")
    ):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 3


def test_orchestrate_stats_generation_api_error_returns_api_exit_code():
    """Verify GitHub API failures return the API error exit code."""
    with patch("prstats.main.parse_args", return_value=_args()), patch(
        "prstats.main.load_config", return_value=_config()
    ), patch("prstats.main.GitHubClient", _client_ctor(Mock())), patch(
        "prstats.main.collect_repository_data", side_effect=ApiError("rate limited")
    ):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 4


def test_orchestrate_stats_generation_invalid_data_returns_validation_exit_code():
    """Verify invalid fetched data returns the data validation exit code."""
    with patch("prstats.main.parse_args", return_value=_args()), patch(
        "prstats.main.load_config", return_value=_config()
    ), patch("prstats.main.GitHubClient", _client_ctor(Mock())), patch(
        "prstats.main.collect_repository_data", return_value=_collected()
    ), patch(
        "prstats.main.build_repository_statistics", side_effect=DataValidationError("bad outcome")
    ):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 5


def test_orchestrate_stats_generation_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("prstats.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate_stats_generation()

    assert exit_code == 1


def test_orchestrate_comment_extraction_success(capsys):
    """Verify comment extraction writes both reports and returns 0."""
    config = _config(username="bob", output_dir="out/comments")
    client = Mock()
    result = Mock(spec=CommentExtractionResult)
    result.total_count = 3
    args = Namespace(user="bob", repo="acme/widgets", days=7, output_dir=None, verbose=False)

    with patch("prstats.extract_comments.parse_comments_args", return_value=args), patch(
        "prstats.extract_comments.load_comments_config", return_value=config
    ) as load_mock, patch(
        "prstats.extract_comments.GitHubClient", _client_ctor(client)
    ), patch(
        "prstats.extract_comments.collect_comment_extraction", return_value=result
    ) as collect_mock, patch(
        "prstats.extract_comments.export_comments_as_markdown", return_value="out/comments/comments-bob.md"
    ) as markdown_mock, patch(
        "prstats.extract_comments.export_comments_as_json", return_value="out/comments/comments-bob.json"
    ) as json_mock:
        exit_code = orchestrate_comment_extraction()

    assert exit_code == 0
    load_mock.assert_called_once_with(username="bob", repository="acme/widgets", days=7, output_dir=None)
    assert collect_mock.call_args.kwargs["username"] == "bob"
    markdown_mock.assert_called_once_with(result, "out/comments")
    json_mock.assert_called_once_with(result, "out/comments")
    assert "Total: 3 comments extracted" in capsys.readouterr().out


def test_orchestrate_comment_extraction_missing_user_returns_config_exit_code():
    """Verify a missing target user returns the configuration exit code."""
    args = Namespace(user=None, repo="acme/widgets", days=None, output_dir=None, verbose=False)

    with patch("prstats.extract_comments.parse_comments_args", return_value=args), patch(
        "prstats.extract_comments.load_comments_config", side_effect=ConfigurationError("Missing username")
    ):
        exit_code = orchestrate_comment_extraction()

    assert exit_code == 2
