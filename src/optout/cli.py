"""Command-line interface for optout."""

import sys
import logging
import argparse
from dataclasses import dataclass
from pathlib import Path
import importlib.metadata as im

from .errors import OptionError, SchemaError
from .loader import load_schema, load_values
from .option import Quoting
from .output import output
from .schema import Form

# Exit codes
EXIT_SUCCESS = 0
EXIT_OPTION_ERROR = 1
EXIT_USAGE_ERROR = 2  # Command-line argument and schema errors
EXIT_KEYBOARD_INTERRUPT = 130

# Logging verbosity level constants
VERBOSITY_QUIET = 0  # Default verbosity level (WARNING)
VERBOSITY_VERBOSE = 1  # Single -v flag (INFO)
VERBOSITY_DEBUG = 2  # Double -vv flag (DEBUG)

# Package version constants
PACKAGE_NAME = "optout"
FALLBACK_VERSION = "0.0.0+local"


LOG = logging.getLogger("optout.cli")


class RichArgumentParser(argparse.ArgumentParser):
    """Custom ArgumentParser that uses rich formatting for error messages."""

    def __init__(self, *args, output_manager, **kwargs):
        """Initialize with explicit output manager dependency injection."""
        super().__init__(*args, **kwargs)
        self._output_manager = output_manager

    def error(self, message: str) -> None:
        """Override error method to use rich formatting."""
        if "required:" in message:
            if "schema" in message:
                friendly_message = "Missing required argument 'schema'"
            else:
                friendly_message = message.replace(
                    "the following arguments are required: ",
                    "Missing required argument: ",
                )
        elif "unrecognized arguments:" in message:
            args = message.replace("unrecognized arguments: ", "")
            friendly_message = f"Unrecognized argument: {args}"
        else:
            friendly_message = message.capitalize()

        self._output_manager.print_usage_error(self.prog, friendly_message)
        self.exit(EXIT_USAGE_ERROR)


@dataclass(frozen=True)
class RenderContext:
    """Everything a single render run needs."""

    schema_path: Path
    values_path: Path | None = None
    form: Form = Form.ARGV
    quoting: Quoting | None = None


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and return command-line arguments."""
    parser = RichArgumentParser(
        prog="optout",
        description=(
            "Render a mapping of option values into a validated argument "
            "vector or shell-quoted string, using a YAML option schema"
        ),
        output_manager=output,
    )
    parser.add_argument(
        "schema",
        type=Path,
        help="Path to the YAML option schema",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Path to a YAML mapping of option values (default: no values)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[f.value for f in Form],
        default=Form.ARGV.value,
        help="Render as a JSON argv array or a shell string (default: argv)",
    )
    parser.add_argument(
        "-q",
        "--quoting",
        choices=[q.value for q in Quoting],
        help="Quoting style for shell output (default: taken from the schema)",
    )
    try:
        pkg_version = im.version(PACKAGE_NAME)
    except im.PackageNotFoundError:
        pkg_version = FALLBACK_VERSION
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {pkg_version}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)",
    )
    return parser.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    """Configure logging without clobbering existing handlers (e.g., pytest caplog)."""
    level = (
        logging.WARNING
        if verbosity == VERBOSITY_QUIET
        else (logging.INFO if verbosity == VERBOSITY_VERBOSE else logging.DEBUG)
    )

    pkg_logger = logging.getLogger("optout")
    pkg_logger.setLevel(level)

    # If running as a standalone CLI (no handlers configured), attach a simple handler
    root = logging.getLogger()
    if not root.handlers and not pkg_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        pkg_logger.addHandler(handler)
        # Prevent duplicate emission if a root handler is configured later.
        pkg_logger.propagate = False


def run(context: RenderContext) -> int:
    """Core runner: load the schema and values, render, print."""
    try:
        schema = load_schema(context.schema_path)
        values = load_values(context.values_path)
    except SchemaError as exc:
        output.print_error(f"Invalid schema or values: {exc}")
        return EXIT_USAGE_ERROR

    LOG.info("Loaded schema %s with %d options", context.schema_path, len(schema))
    output.print_using_schema(context.schema_path.name, len(schema))

    try:
        rendered = schema.render(values, context.form, context.quoting)
    except OptionError as exc:
        LOG.info("Rejected option %s: %s", exc.key, exc)
        output.print_option_error(exc.key, str(exc))
        return EXIT_OPTION_ERROR
    except SchemaError as exc:
        output.print_error(f"Invalid schema: {exc}")
        return EXIT_USAGE_ERROR

    if context.form is Form.SHELL:
        output.print_shell(rendered)
    else:
        output.print_argv(rendered)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry point for the optout command."""
    args = parse_arguments(argv)
    _configure_logging(args.verbose)
    context = RenderContext(
        schema_path=args.schema,
        values_path=args.input,
        form=Form(args.format),
        quoting=Quoting(args.quoting) if args.quoting else None,
    )
    try:
        return run(context)
    except KeyboardInterrupt:
        output.print_error("Operation interrupted by user")
        return EXIT_KEYBOARD_INTERRUPT


if __name__ == "__main__":
    sys.exit(main())
