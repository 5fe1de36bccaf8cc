"""GitHub pull request statistics generator."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from .aggregator import build_repository_statistics
from .cli import parse_args
from .collector import collect_repository_data
from .config import load_config
from .errors import ApiError, AuthenticationError, ConfigurationError, DataValidationError
from .excel_exporter import export_to_excel
from .file_exporter import (
    export_person_reports,
    export_person_reports_csv,
    export_summary_table,
    export_summary_table_csv,
)
from .formatter import format_as_csv, format_as_markdown
from .github_client import GitHubClient
from .models import ReportContext

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_API_ERROR = 4
EXIT_DATA_VALIDATION_ERROR = 5


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def orchestrate_stats_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run the full fetch, aggregate and export flow.

    Returns:
        Process exit code: 0 on success, 2 for configuration errors, 3 for
        missing credentials, 4 for GitHub API failures, 5 for invalid fetched
        data and 1 for anything unexpected.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)
        config = load_config(
            repository=args.repo,
            days=args.days,
            output_format=args.output_format,
            output_dir=args.output_dir,
        )

        period_to = datetime.now(timezone.utc)
        period_from = period_to - timedelta(days=config.days)
        print(f"Repository: {config.repository}")
        print(f"Period: {period_from.date().isoformat()} to {period_to.date().isoformat()}")
        print(f"Days: {config.days}")

        with GitHubClient(config=config) as client:
            data = collect_repository_data(client, since=period_from, until=period_to)

        print(
            f"Found {data.fetched_count} pull requests ({len(data.pull_requests)} after "
            f"filtering bots and {data.drafts_filtered} drafts)"
        )
        if not data.pull_requests:
            print("No pull requests found in the specified period.")
            return EXIT_SUCCESS

        stats = build_repository_statistics(
            data.pull_requests,
            data.reviews_by_pr,
            data.review_requests_by_pr,
            data.comments_by_pr,
            context=ReportContext(repository=config.repository, now=period_to),
            period_from=period_from,
            period_to=period_to,
        )

        if config.output_format == "csv":
            print(format_as_csv(stats))
        else:
            print(format_as_markdown(stats))

        export_summary_table(stats, config.output_dir)
        export_summary_table_csv(stats, config.output_dir)
        export_person_reports(stats, config.output_dir)
        export_person_reports_csv(stats, config.output_dir)
        export_to_excel(stats, config.output_dir)
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
    except DataValidationError as exc:
        logger.error("Invalid data: %s", exc)
        return EXIT_DATA_VALIDATION_ERROR
    except Exception:
        logger.exception("Unexpected error while generating PR statistics")
        return EXIT_UNEXPECTED_ERROR


def main() -> int:
    return orchestrate_stats_generation()


if __name__ == "__main__":
    raise SystemExit(main())
