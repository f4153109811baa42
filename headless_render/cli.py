"""
Command-line entry point for headless_render.

Commands are declared in the `COMMANDS` registration table: each entry names
its positional arguments, its flags (with the configuration key that supplies
each default), the prefix used when reporting a failure, and the coroutine that
handles it. `dispatch()` builds an argparse parser from the table, fills unset
flags from the loaded configuration, runs the handler, and turns any failure
into a logged error and exit status 1.

Usage:
    headless-render print page.html out.pdf --format A4
    headless-render screenshot https://example.com shot.png --viewport 1280x720
    headless-render bulk-print manifest.json
"""
import argparse
import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from headless_render.core.batch import BatchController
from headless_render.core.config import ConfigError, ConfigurationManager, config_manager
from headless_render.core.logger import get_logger, setup_logging
from headless_render.core.manager import RenderManager
from headless_render.core.models import BatchSettings, Margins, RenderMode, RenderRequest, ScreenshotOptions
from headless_render.core.options import (
    build_launch_options,
    build_navigation_options,
    build_pdf_options,
    parse_viewport,
)

logger = get_logger(__name__)

Handler = Callable[[argparse.Namespace, ConfigurationManager], Awaitable[Any]]


class Flag(NamedTuple):
    """
    One command-line flag.

    `kind` is one of 'bool' (--x/--no-x), 'int', 'str' or 'append' (repeatable string).
    The default comes from `commands.<command>.<dest>`, then `commands.common.<dest>`,
    then `default`.
    """
    name: str
    kind: str
    default: Any = None
    help: str = ""

    @property
    def dest(self) -> str:
        return self.name.lstrip("-").replace("-", "_")


class Positional(NamedTuple):
    dest: str
    metavar: str
    optional: bool = False
    help: str = ""


class CommandSpec(NamedTuple):
    name: str
    help: str
    positionals: Tuple[Positional, ...]
    flags: Tuple[Flag, ...]
    handler: Handler
    error_prefix: str

    @property
    def config_section(self) -> str:
        return self.name.replace("-", "_")


# --- Flag schemas ---

COMMON_FLAGS = (
    Flag("--sandbox", "bool", False, "Run Chromium with its sandbox enabled."),
    Flag("--timeout", "int", 30000, "Navigation timeout in milliseconds."),
    Flag("--wait-until", "str", "load",
         "Navigation readiness condition: load, domcontentloaded, networkidle0 or networkidle2."),
    Flag("--cookie", "append", None, 'Set a cookie in the form "key:value". May be repeated for multiple cookies.'),
)

MARGIN_FLAGS = (
    Flag("--background", "bool", True, "Print background graphics."),
    Flag("--margin-top", "str", "6.25mm"),
    Flag("--margin-right", "str", "6.25mm"),
    Flag("--margin-bottom", "str", "14.11mm"),
    Flag("--margin-left", "str", "6.25mm"),
)

PRINT_FLAGS = COMMON_FLAGS + MARGIN_FLAGS + (
    Flag("--format", "str", "Letter", "Paper format, e.g. Letter, A4."),
    Flag("--landscape", "bool", False),
    Flag("--display-header-footer", "bool", False),
    Flag("--header-template", "str", ""),
    Flag("--footer-template", "str", "", "Footer HTML; a non-empty footer always displays header/footer."),
    Flag("--footer-height", "str", None, "Bottom margin to use when a footer template is set."),
)

SCREENSHOT_FLAGS = COMMON_FLAGS + (
    Flag("--full-page", "bool", True, "Capture the full scrollable page."),
    Flag("--omit-background", "bool", False, "Make the default white background transparent."),
    Flag("--viewport", "str", None, "Set viewport to a given size, e.g. 800x600."),
)

BULK_PRINT_FLAGS = COMMON_FLAGS + MARGIN_FLAGS + (
    Flag("--format", "str", "A4", "Paper format, e.g. Letter, A4."),
    Flag("--settle-delay", "int", None, "Pause after each PDF in milliseconds (default: batch.settle_delay_ms)."),
)


# --- Handlers ---

async def print_command(args: argparse.Namespace, config: ConfigurationManager) -> bytes:
    request = RenderRequest(target=args.url, output_path=args.output, mode=RenderMode.PDF)
    pdf_options = build_pdf_options(
        format=args.format,
        landscape=args.landscape,
        print_background=args.background,
        margin_top=args.margin_top,
        margin_right=args.margin_right,
        margin_bottom=args.margin_bottom,
        margin_left=args.margin_left,
        display_header_footer=args.display_header_footer,
        header_template=args.header_template,
        footer_template=args.footer_template,
        footer_height=args.footer_height,
    )
    return await RenderManager(config=config).render_pdf(
        request,
        pdf_options,
        build_navigation_options(args.timeout, args.wait_until),
        build_launch_options(args.sandbox),
        args.cookie,
    )


async def screenshot_command(args: argparse.Namespace, config: ConfigurationManager) -> bytes:
    # Parsed before any browser is launched; a bad viewport fails like every other error.
    viewport = parse_viewport(args.viewport) if args.viewport else None
    request = RenderRequest(target=args.url, output_path=args.output, mode=RenderMode.SCREENSHOT)
    screenshot_options = ScreenshotOptions(
        full_page=args.full_page,
        omit_background=args.omit_background,
        viewport=viewport,
    )
    return await RenderManager(config=config).render_screenshot(
        request,
        screenshot_options,
        build_navigation_options(args.timeout, args.wait_until),
        build_launch_options(args.sandbox),
        args.cookie,
    )


async def bulk_print_command(args: argparse.Namespace, config: ConfigurationManager) -> List[str]:
    settings = BatchSettings(
        format=args.format,
        print_background=args.background,
        margin=Margins(top=args.margin_top, right=args.margin_right,
                       bottom=args.margin_bottom, left=args.margin_left),
    )
    controller = BatchController(config=config, settle_delay_ms=args.settle_delay)
    return await controller.run_batch(
        args.batch_file,
        settings,
        build_navigation_options(args.timeout, args.wait_until),
        build_launch_options(args.sandbox),
    )


COMMANDS: Dict[str, CommandSpec] = {
    "print": CommandSpec(
        name="print",
        help="Print an HTML file or URL to PDF",
        positionals=(
            Positional("url", "url", help="URL or path of a local HTML file."),
            Positional("output", "output", optional=True, help="PDF path; omit to write to stdout."),
        ),
        flags=PRINT_FLAGS,
        handler=print_command,
        error_prefix="Failed to generate pdf",
    ),
    "screenshot": CommandSpec(
        name="screenshot",
        help="Take screenshot of an HTML file or URL to PNG",
        positionals=(
            Positional("url", "url", help="URL or path of a local HTML file."),
            Positional("output", "output", optional=True, help="PNG path; omit to write to stdout."),
        ),
        flags=SCREENSHOT_FLAGS,
        handler=screenshot_command,
        error_prefix="Failed to take screenshot",
    ),
    "bulk-print": CommandSpec(
        name="bulk-print",
        help="Print every HTML file listed in a JSON batch manifest to PDF",
        positionals=(
            Positional("batch_file", "batchFile", help="JSON manifest: {\"data\": [{htmlFile, tmpPDFFile, pdfObject}]}."),
        ),
        flags=BULK_PRINT_FLAGS,
        handler=bulk_print_command,
        error_prefix="Failed to generate pdf",
    ),
}


def _add_flag(parser: argparse.ArgumentParser, flag: Flag) -> None:
    # Defaults stay None here; they are filled from configuration after parsing.
    if flag.kind == "bool":
        parser.add_argument(flag.name, dest=flag.dest, action=argparse.BooleanOptionalAction,
                            default=None, help=flag.help)
    elif flag.kind == "int":
        parser.add_argument(flag.name, dest=flag.dest, type=int, default=None, help=flag.help)
    elif flag.kind == "append":
        parser.add_argument(flag.name, dest=flag.dest, action="append", default=None, help=flag.help)
    else:
        parser.add_argument(flag.name, dest=flag.dest, default=None, help=flag.help)


def build_parser(commands: Dict[str, CommandSpec]) -> argparse.ArgumentParser:
    """Builds the argparse parser for every command in the registration table."""
    parser = argparse.ArgumentParser(
        prog="headless-render",
        description="Render HTML files or URLs to PDF or PNG with a headless browser.",
    )
    parser.add_argument("--config", default=None, help="Path of an alternate YAML configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging (on stderr).")
    subparsers = parser.add_subparsers(dest="command", metavar="command", required=True)

    for spec in commands.values():
        sub = subparsers.add_parser(spec.name, help=spec.help, description=spec.help)
        for positional in spec.positionals:
            sub.add_argument(positional.dest, metavar=positional.metavar,
                             nargs="?" if positional.optional else None, help=positional.help)
        for flag in spec.flags:
            _add_flag(sub, flag)
    return parser


def apply_defaults(args: argparse.Namespace, spec: CommandSpec, config: ConfigurationManager) -> argparse.Namespace:
    """Fills every flag the user did not pass from configuration, then from the flag's own default."""
    for flag in spec.flags:
        if getattr(args, flag.dest, None) is not None:
            continue
        value = config.get(f"commands.{spec.config_section}.{flag.dest}")
        if value is None:
            value = config.get(f"commands.common.{flag.dest}", flag.default)
        setattr(args, flag.dest, value)
    return args


def dispatch(argv: Optional[Sequence[str]] = None,
             commands: Optional[Dict[str, CommandSpec]] = None,
             config: Optional[ConfigurationManager] = None) -> int:
    """
    Parses `argv`, runs the selected command and returns the process exit status.

    Usage errors (unknown flag, missing command) exit through argparse with status 2.

    Returns:
        int: 0 on success, 1 if configuration loading or the command handler failed.
    """
    commands = commands if commands is not None else COMMANDS
    config = config if config is not None else config_manager
    args = build_parser(commands).parse_args(argv)

    if args.config:
        try:
            config.load_config(args.config)
        except ConfigError as e:
            setup_logging(config, verbose=args.verbose, force=True)
            logger.error(f"Failed to load configuration: {e}")
            return 1
    setup_logging(config, verbose=args.verbose, force=True)

    spec = commands[args.command]
    apply_defaults(args, spec, config)
    logger.debug(f"Running '{spec.name}' with {vars(args)}")

    try:
        asyncio.run(spec.handler(args, config))
    except Exception as e:
        logger.error(f"{spec.error_prefix}: {e}", exc_info=args.verbose)
        return 1
    return 0


def main() -> None:
    sys.exit(dispatch())


if __name__ == "__main__":
    main()
