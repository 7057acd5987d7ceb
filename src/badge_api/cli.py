"""Command-line entry point: run the badge server or resolve one badge."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .badges import package_badge
from .common.logging_utils import configure_logging
from .constants import Constants, ExitCodes
from .errors import QueryValidationError, UpstreamError
from .sources import GitHubSource, NuGetSource
from .versioning.models import NotFound, Source
from .versioning.parser import parse_package_request
from .versioning.resolver import VersionResolver

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="badge-api",
        description="shields.io endpoint badges for package versions and CI test results",
        add_help=True,
    )
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP badge server")
    serve.add_argument("--host", dest="HOST", type=str,
                       help=f"Bind address (default: {Constants.DEFAULT_HOST})")
    serve.add_argument("--port", dest="PORT", type=int,
                       help=f"Bind port (default: {Constants.DEFAULT_PORT})")
    serve.add_argument("--config", dest="CONFIG", type=str,
                       help="YAML config file; flags take precedence")
    serve.add_argument("--github-org", dest="GITHUB_ORG", type=str,
                       help="Organization queried for source=github")
    serve.add_argument("--test-results-ttl", dest="TEST_RESULTS_TTL", type=int,
                       help="Seconds a fetched test result stays fresh")

    resolve = subparsers.add_parser("resolve", help="Resolve one package badge and print it")
    resolve.add_argument("package", help="Package name")
    resolve.add_argument("-s", "--source", dest="SOURCE", type=str,
                         choices=Constants.SUPPORTED_SOURCES, default=Constants.DEFAULT_SOURCE)
    resolve.add_argument("-t", "--track", dest="TRACK", type=str,
                         help="Major version track, e.g. 1 or v2")
    for name, symbol in (("gt", ">"), ("gte", ">="), ("lt", "<"), ("lte", "<="), ("eq", "=")):
        resolve.add_argument(f"--{name}", dest=name.upper(), type=str,
                             help=f"Only versions {symbol} this bound")
    resolve.add_argument("--include-prerelease", dest="INCLUDE_PRERELEASE", action="store_true")
    resolve.add_argument("--prefer-clean", dest="PREFER_CLEAN", action="store_true",
                         help="Prefer clean tags over timestamped builds (github only)")
    resolve.add_argument("--label", dest="LABEL", type=str)
    resolve.add_argument("--color", dest="COLOR", type=str)
    resolve.add_argument("--github-org", dest="GITHUB_ORG", type=str)

    return parser.parse_args(argv)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _resolve_params(args: argparse.Namespace) -> Dict[str, str]:
    """Express the resolve flags as the query parameters the server accepts."""
    params = {"source": args.SOURCE}
    optional = {
        "track": args.TRACK,
        "gt": args.GT,
        "gte": args.GTE,
        "lt": args.LT,
        "lte": args.LTE,
        "eq": args.EQ,
        "label": args.LABEL,
        "color": args.COLOR,
    }
    params.update({k: v for k, v in optional.items() if v})
    if args.INCLUDE_PRERELEASE:
        params["include-prerelease"] = "true"
    if args.PREFER_CLEAN:
        params["prefer-clean"] = "true"
    return params


def run_resolve(args: argparse.Namespace) -> int:
    """Resolve a single badge synchronously and print its JSON body."""
    try:
        badge_request = parse_package_request(_resolve_params(args), args.package)
    except QueryValidationError as exc:
        logger.error("%s", exc)
        return ExitCodes.INVALID_ARGUMENTS.value

    resolver = VersionResolver(sources={
        Source.NUGET: NuGetSource(),
        Source.GITHUB: GitHubSource(org=args.GITHUB_ORG),
    })
    query = badge_request.query
    try:
        outcome = resolver.resolve_package(query, verbose=True)
    except UpstreamError as exc:
        logger.error("%s fetch error: %s", query.source.value, exc)
        return ExitCodes.CONNECTION_ERROR.value

    badge = package_badge(outcome, query.package, query.source,
                          label=badge_request.label, color=badge_request.color)
    print(json.dumps(badge.body, indent=2))
    if isinstance(outcome, NotFound):
        logger.warning("No version selected: %s", outcome.reason)
        return ExitCodes.NOT_FOUND.value
    return ExitCodes.SUCCESS.value


def run_serve(args: argparse.Namespace) -> int:
    """Start the server and block until it is stopped."""
    from .server import ServerConfig, run_server_sync

    config = ServerConfig.from_args(args)
    print(
        f"\n"
        f"  Package Badge API\n"
        f"  =================\n"
        f"  Listening: http://{config.host}:{config.port}\n"
        f"  Package badge: /badge/packages/<name>?source=nuget&track=2\n"
        f"  Test badge:    /badge/tests/<linux|windows|macos>\n"
        f"\n"
        f"  Press Ctrl+C to stop\n"
    )
    run_server_sync(config)
    return ExitCodes.SUCCESS.value


def main(argv: Optional[List[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    if args.COMMAND == "serve":
        sys.exit(run_serve(args))
    sys.exit(run_resolve(args))


if __name__ == "__main__":
    main()
