"""
Command line entry point.

    jmxroundtrip run harness.yaml [--only round-trip] [--save-out] [--workers 4]
    jmxroundtrip versions harness.yaml

Exit status is 0 when every case passes, 1 when any case fails and 2 when the
configuration or save service cannot be loaded.
"""
import argparse
import sys
from typing import List, Optional

from jmxroundtrip import LoggingConfigError, __version__, initialize_logging, logger
from jmxroundtrip.config import HarnessConfig, RunConfig, load_config
from jmxroundtrip.exceptions import ConfigError, ServiceResolutionError
from jmxroundtrip.results import SuiteResult, format_report
from jmxroundtrip.service import DocumentService, load_service
from jmxroundtrip.suite import RegressionSuite

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

SUITES = ("round-trip", "load-only", "consistency")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jmxroundtrip",
        description="Round-trip regression checks for test-plan save services",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    parser.add_argument("--log-file", type=str, help="Also write DEBUG logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the regression suite")
    run.add_argument("config", help="Path to the harness YAML configuration")
    run.add_argument(
        "--only",
        choices=SUITES,
        action="append",
        help="Run only the named suite (repeatable)",
    )
    run.add_argument(
        "--save-out",
        action="store_true",
        default=None,
        help="Write the output of mismatching fixtures to <fixture>.out",
    )
    run.add_argument("--workers", type=int, help="Number of fixtures processed in parallel")
    run.add_argument("--encoding", type=str, help="Encoding of fixtures and serialized output")

    versions = subparsers.add_parser(
        "versions", help="Print the property version and fingerprint reported by the save service"
    )
    versions.add_argument("config", help="Path to the harness YAML configuration")

    return parser


def _apply_overrides(config: HarnessConfig, args: argparse.Namespace) -> HarnessConfig:
    overrides = {}
    if getattr(args, "save_out", None):
        overrides["dump_mismatch_output"] = True
    if getattr(args, "workers", None) is not None:
        overrides["workers"] = args.workers
    if getattr(args, "encoding", None):
        overrides["encoding"] = args.encoding
    if not overrides:
        return config
    run = RunConfig.model_validate({**config.run.model_dump(), **overrides})
    return config.model_copy(update={"run": run})


def _load(args: argparse.Namespace):
    config = _apply_overrides(load_config(args.config), args)
    service = load_service(config.run.service, config.run.service_options)
    return config, service


def _run_suites(config: HarnessConfig, service: DocumentService, only: Optional[List[str]]) -> SuiteResult:
    suite = RegressionSuite(service, config.cases, config.run)
    selected = set(only or SUITES)
    result = SuiteResult()
    if "round-trip" in selected:
        result = result.merge(suite.run_round_trip_suite())
    if "load-only" in selected:
        result = result.merge(suite.run_load_only_suite())
    if "consistency" in selected:
        result = result.merge(suite.run_consistency_checks())
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        initialize_logging(console_level=args.log_level, log_file=args.log_file)
    except LoggingConfigError as e:
        parser.error(str(e))
    logger.debug("Debug logging enabled")

    try:
        config, service = _load(args)
    except (ConfigError, ServiceResolutionError, ValueError) as e:
        logger.error(f"{e}")
        print(f"error: {getattr(e, 'message', e)}", file=sys.stderr)
        return EXIT_CONFIG

    if args.command == "versions":
        print(f"property version: {service.current_builtin_version()}")
        print(f"properties fingerprint: {service.current_properties_fingerprint()}")
        return EXIT_OK

    result = _run_suites(config, service, args.only)
    print(format_report(result))
    return EXIT_FAILED if result.failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
