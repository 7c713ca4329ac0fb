"""
Command line entry point:

    python -m dynget ensure 0.18.0 --install-dir ~/.tsc
    python -m dynget version --install-dir ~/.tsc
"""

import argparse
import logging
import sys
from typing import List, Optional

from dynget.dynget_config import AcquisitionSource, DyngetConfig
from dynget.dynget_exceptions import DyngetException
from dynget.dynget_logger import DyngetLogger
from dynget.orchestrator import AcquisitionOrchestrator
from dynget.version_store import VersionStore


def _build_config(args: argparse.Namespace) -> DyngetConfig:
    overrides = {}
    if args.install_dir:
        overrides["install_dir"] = args.install_dir
    if getattr(args, "source", None):
        overrides["sources"] = args.source
    if getattr(args, "source_dir", None):
        overrides["source_dir"] = args.source_dir

    if args.config:
        config = DyngetConfig.from_toml(args.config)
        return DyngetConfig.from_dict({**config.to_dict(), **overrides})
    return DyngetConfig.from_dict(overrides)


def _common_options(parser: argparse.ArgumentParser, default) -> None:
    parser.add_argument("--config", default=default, help="TOML file with a [dynget] table")
    parser.add_argument("--install-dir", default=default, help="Directory holding the artifact")
    parser.add_argument("-v", "--verbose", action="store_true", default=default)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dynget")
    _common_options(parser, None)
    # Also accepted after the subcommand; options left out there keep the value given before it
    common = argparse.ArgumentParser(add_help=False)
    _common_options(common, argparse.SUPPRESS)
    commands = parser.add_subparsers(dest="command", required=True)

    ensure_cmd = commands.add_parser("ensure", parents=[common], help="Acquire and load a version")
    ensure_cmd.add_argument("version")
    ensure_cmd.add_argument(
        "--source",
        action="append",
        choices=[source.value for source in AcquisitionSource],
        help="Acquisition source, in order of preference (repeatable)",
    )
    ensure_cmd.add_argument("--source-dir", help="Source checkout used for compilation")

    commands.add_parser("version", parents=[common], help="Print the recorded version")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logger = DyngetLogger(level=logging.DEBUG if args.verbose else logging.INFO)
    if not logger.logger.handlers:
        logger.logger.addHandler(logging.StreamHandler())

    try:
        config = _build_config(args)
        if args.command == "version":
            print(VersionStore(config.install_dir, logger).read() or "")
            return 0
        result = AcquisitionOrchestrator(config, logger).ensure(args.version)
    except DyngetException as e:
        logger.log(str(e), logging.ERROR)
        return 1

    print(f"{result.state.value}: {result.loaded_version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
