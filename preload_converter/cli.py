"""Command line entry point.

Usage examples
# Preload file -> text
preload-converter pld2text save.pld save.txt

# Every file under scripts/ -> text files under out/, re-run on every save
preload-converter --watch pld2text scripts/ out/ .txt

# Text -> preload file wrapped in function "PreloadFiles"
preload-converter text2pld notes.txt notes.pld PreloadFiles

# Only react to changes, skip the initial conversion
preload-converter --watch-skip text2pld src/ build/ PreloadFiles .pld
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from . import __app_name__, __description__, __version__
from .config import get_settings
from .exceptions import ConfigurationError
from .log import configure_logging, get_logger
from .models import Operation, RunOptions
from .services.orchestration.conversion_service import ConversionOrchestrator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=__app_name__, description=__description__)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Command will trigger now and automatically on file change event.",
    )
    parser.add_argument(
        "-s",
        "--watch-skip",
        action="store_true",
        help="Command will automatically trigger only on file change event.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ...). Defaults to LOG_LEVEL or DEBUG.",
    )
    parser.add_argument(
        "--no-escape",
        action="store_true",
        help="Embed/extract payloads verbatim instead of escaping quotes and backslashes.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_text = sub.add_parser(
        "pld2text",
        help="Convert a preload file into plain text.",
        description="Convert preload file (.pld or .txt) into a text readable file without the Preload calls.",
    )
    p_text.add_argument("input", type=str, help="input file or folder")
    p_text.add_argument("output", type=str, help="output file or folder")
    p_text.add_argument(
        "output_extension",
        nargs="?",
        default=None,
        metavar="outputFileExtension",
        help="output file extension required if input and output are folders",
    )

    p_pld = sub.add_parser(
        "text2pld",
        help="Compile a text file into a preload file.",
        description=(
            "Compile any given file into a preload (.pld) file by wrapping each line in a "
            "'Preload' call and the entire file into a standard preload procedure."
        ),
    )
    p_pld.add_argument("input", type=str, help="input file or folder")
    p_pld.add_argument("output", type=str, help="output file or folder")
    p_pld.add_argument("function_name", type=str, metavar="functionName", help="preload file's main function name.")
    p_pld.add_argument(
        "output_extension",
        nargs="?",
        default=None,
        metavar="outputFileExtension",
        help="output file extension required if input and output are folders",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> RunOptions:
    """Map parsed arguments onto the immutable options passed to the orchestrator."""
    settings = get_settings()
    operation = Operation.EXTRACT if args.command == "pld2text" else Operation.COMPILE
    return RunOptions(
        operation=operation,
        input_path=Path(args.input),
        output_path=Path(args.output),
        output_extension=args.output_extension,
        function_name=getattr(args, "function_name", None),
        # --watch-skip implies watching
        watch=bool(args.watch or args.watch_skip),
        skip_initial_run=bool(args.watch_skip),
        escape=settings.ESCAPE_PAYLOAD and not args.no_escape,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as exc:
        configure_logging(args.log_level or "DEBUG")
        logger.error("Invalid setting in environment: %s", exc)
        return EXIT_CONFIG_ERROR

    configure_logging(args.log_level or settings.LOG_LEVEL)
    logger.debug("command: %s", args.command)
    logger.debug("options: %s", vars(args))

    try:
        options = options_from_args(args)
        orchestrator = ConversionOrchestrator(options, logger=get_logger("preload_converter.converter"))
        asyncio.run(orchestrator.run())
    except (ConfigurationError, ValidationError) as exc:
        logger.error("Invalid invocation: %s", exc)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
