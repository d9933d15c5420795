from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from bootstrap_email.constants import StyleVariables
from bootstrap_email.controllers.compile_controller import CompileController
from bootstrap_email.core.managers.config_manager import config_manager
from bootstrap_email.core.utils.configure_logging import DEFAULT_FORMAT, configure_logger
from bootstrap_email.exceptions import BootstrapEmailError
from bootstrap_email.model import CompileOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bootstrap-email",
        description="Compile Bootstrap-styled HTML into email-client-safe table markup.",
    )
    parser.add_argument("inputs", nargs="+", metavar="INPUT", help="HTML file(s) to compile")
    parser.add_argument("-o", "--output", type=Path, help="Output file, or directory when compiling several inputs")
    parser.add_argument("--style", type=Path, help="Stylesheet (.css/.scss/.sass) to inline")
    parser.add_argument("--head", type=Path, help="Stylesheet injected into <head>")
    parser.add_argument("--columns", type=int, help="Number of grid columns")
    parser.add_argument("--container-width", type=int, help="Container max width in px")
    parser.add_argument(
        "--no-container-fallback",
        action="store_true",
        help="Omit the fixed-width Outlook table around containers",
    )
    parser.add_argument("--workers", type=int, help="Compile documents on N processes")
    parser.add_argument("--keep-provenance", action="store_true", help="Keep the data-bte-* debug attributes")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument(
        "--set",
        dest="settings",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a settings.json entry, e.g. compiler.preview_length=80 (repeatable)",
    )
    return parser


def _build_options(args: argparse.Namespace) -> CompileOptions:
    """Only explicitly given flags override the configured defaults."""
    overrides = {}
    if args.style:
        overrides["style"] = args.style
    if args.head:
        overrides["head"] = args.head
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.no_container_fallback:
        overrides["container_width_fallback"] = False
    if args.keep_provenance:
        overrides["keep_provenance"] = True

    variables = {}
    if args.columns is not None:
        variables[StyleVariables.COLUMNS] = args.columns
    if args.container_width is not None:
        variables[StyleVariables.CONTAINER_WIDTH] = args.container_width
    if variables:
        overrides["variables"] = variables

    return CompileOptions(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point. Returns 0 when every input compiled, 1 otherwise."""
    args = build_parser().parse_args(argv)

    try:
        config_manager.apply_overrides(args.settings)
    except ValueError as e:
        configure_logger(args.log_level or "INFO")
        logger.error("Invalid --set: %s", e)
        return 1

    configure_logger(
        args.log_level or config_manager.get_nested("debug.level", "INFO"),
        silenced_loggers=config_manager.get_nested("logging.silenced", {}),
        fmt=config_manager.get_nested("logging.format", DEFAULT_FORMAT),
    )

    if len(args.inputs) > 1 and args.output is None:
        logger.error("Several inputs need an output directory (-o DIR).")
        return 1

    try:
        options = _build_options(args)
        controller = CompileController(args.inputs, options)

        if args.output is None:
            results = controller.compile()
            for result in results:
                if result.ok:
                    sys.stdout.write(result.document)
                    sys.stdout.write("\n")
        else:
            if len(args.inputs) > 1:
                args.output.mkdir(parents=True, exist_ok=True)
            results = controller.compile_and_save(args.output)

    except ValidationError as e:
        logger.error("Invalid options: %s", e)
        return 1
    except BootstrapEmailError as e:
        logger.error("Compilation aborted: %s", e)
        return 1

    for result in results:
        if result.error:
            logger.error("%s failed: %s", result.name or "<html>", result.error)

    all_ok = len(results) == len(args.inputs) and all(r.ok for r in results)
    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
