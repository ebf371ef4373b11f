from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from propsync.adapters.sources import ALL
from propsync.app import SyncRequest, sync_properties
from propsync.config import ConfigurationError, configure_logging
from propsync.domain.errors import RemoteUnavailable

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="propsync",
        description="Sync repository custom properties with external sources of truth",
    )
    parser.add_argument(
        "--source",
        default=ALL,
        help=(
            "Source adapter id: billing, managed-platform-teams, ldap, cmdb "
            "or %(default)s (default: %(default)s)"
        ),
    )
    parser.add_argument(
        "--property",
        dest="property_name",
        default=ALL,
        help="Property to reconcile, or %(default)s (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and report changes without writing them",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every entity error and unchanged value as it happens",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum concurrent remote calls (defaults to config)",
    )
    parser.add_argument(
        "--timeout",
        dest="call_timeout_seconds",
        type=float,
        default=None,
        help="Timeout in seconds for each remote call (defaults to config)",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Directory for the JSON report (defaults to the current directory)",
    )
    parser.add_argument(
        "--no-audit",
        dest="audit",
        action="store_false",
        help="Do not record the run in the audit database",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    request = SyncRequest(
        source=parsed_args.source,
        property_name=parsed_args.property_name,
        dry_run=parsed_args.dry_run,
        verbose=parsed_args.verbose,
        max_concurrency=parsed_args.max_concurrency,
        call_timeout_seconds=parsed_args.call_timeout_seconds,
        report_dir=parsed_args.report_dir,
        audit=parsed_args.audit,
    )

    try:
        outcome = sync_properties(request)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except RemoteUnavailable as exc:
        log.error("Fatal error: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        log.info("Closed by user (Ctrl+C)")
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(EXIT_FAILURE)

    if outcome.result.exit_code != EXIT_OK:
        sys.exit(outcome.result.exit_code)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    main()


if __name__ == "__main__":
    run()
