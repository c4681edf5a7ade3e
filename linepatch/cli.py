"""
Command line interface for linepatch.

This module handles:
- Command line argument parsing
- Logging configuration
- Loading settings
- Running the formatter and applying its output to a file in place
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List

from linepatch.buffers.memory import InMemoryCaret, InMemoryTextBuffer
from linepatch.core.diff.diff_model import build_diff_model
from linepatch.core.diff.line_diff import DiffAlgorithm, LineDiffOptions
from linepatch.core.errors import LinePatchError
from linepatch.core.patch.caret import CaretMode
from linepatch.core.reformat import Reformatter
from linepatch.services.file_io import FileIOService
from linepatch.services.formatter import CommandFormatter
from linepatch.services.settings import ApplicationSettings, SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "linepatch"
APP_VERSION = "1.0.0"

EXIT_OK = 0
EXIT_CHANGES = 1
EXIT_ERROR = 2


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    path: str = ""
    command: List[str] = field(default_factory=list)
    formatted_path: Optional[str] = None
    check: bool = False
    show_diff: bool = False
    caret: Optional[int] = None
    caret_mode: Optional[CaretMode] = None
    algorithm: Optional[DiffAlgorithm] = None
    timeout: Optional[float] = None
    backup: bool = False
    config_file: Optional[str] = None
    save_config: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Console output goes to stderr; stdout is reserved for --diff output.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('chardet').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Reformat a file in place, rewriting only the lines that changed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s main.c --command clang-format          Format through a command
  %(prog)s main.c --formatted main.formatted.c    Apply a pre-formatted version
  %(prog)s main.c --command clang-format --check  Report whether formatting is needed
  %(prog)s main.c --command clang-format --diff   Show the changed lines
        """
    )

    parser.add_argument(
        'path',
        help='File to reformat'
    )

    # Source of formatted text
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        '--command',
        nargs=argparse.REMAINDER,
        help='Formatter command (reads stdin, writes stdout); "{path}" is replaced '
             'with the file path. Must be the last option.'
    )
    source_group.add_argument(
        '--formatted',
        help='File holding the already formatted text'
    )

    # Modes
    parser.add_argument(
        '--check',
        action='store_true',
        help='Do not write; exit with 1 if the file would change'
    )
    parser.add_argument(
        '--diff',
        action='store_true',
        help='Print the changed lines instead of writing'
    )

    # Patch options
    parser.add_argument(
        '--caret',
        type=int,
        default=None,
        help='Caret offset to carry across the edit; the result is logged'
    )
    parser.add_argument(
        '--caret-mode',
        choices=['clamp', 'track'],
        default=None,
        help='How the caret offset is carried across the edit'
    )
    parser.add_argument(
        '--algorithm',
        choices=['myers', 'sequence_matcher'],
        default=None,
        help='Line diff algorithm'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Formatter timeout in seconds'
    )
    parser.add_argument(
        '--backup',
        action='store_true',
        help='Keep a .bak copy of the original file'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '--save-config',
        action='store_true',
        help='Store the effective formatter and patch options in the configuration file'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Also write the log to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.path = parsed.path
    result.command = list(parsed.command or [])
    result.formatted_path = parsed.formatted
    result.check = parsed.check
    result.show_diff = parsed.diff
    result.caret = parsed.caret
    result.timeout = parsed.timeout
    result.backup = parsed.backup
    result.config_file = parsed.config
    result.save_config = parsed.save_config
    result.log_file = parsed.log_file

    if parsed.caret_mode:
        result.caret_mode = CaretMode[parsed.caret_mode.upper()]
    if parsed.algorithm:
        result.algorithm = DiffAlgorithm[parsed.algorithm.upper()]

    if parsed.verbose:
        result.log_level = 'DEBUG'
    else:
        result.log_level = parsed.log_level

    return result


# =============================================================================
# Setup
# =============================================================================

def setup_settings(args: CommandLineArgs) -> ApplicationSettings:
    """Load settings and apply command line overrides."""
    manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = manager.settings

    if args.command:
        settings.formatter.command = args.command
    if args.timeout is not None:
        settings.formatter.timeout = args.timeout
    if args.caret_mode is not None:
        settings.patch.caret_mode = args.caret_mode
    if args.algorithm is not None:
        settings.patch.algorithm = args.algorithm

    if args.save_config and manager.save(settings):
        logging.info(f"Settings saved to {manager.settings_path}")

    return settings


def obtain_formatted_text(
    args: CommandLineArgs,
    settings: ApplicationSettings,
    text: str,
    file_io: FileIOService
) -> str:
    """
    Get the formatted version of `text`.

    Raises:
        LinePatchError: If no formatted text can be produced
    """
    if args.formatted_path:
        result = file_io.read_file(args.formatted_path)
        if not result.success:
            raise LinePatchError(result.error)
        return result.content.content

    if not settings.formatter.command:
        raise LinePatchError("No formatter command configured (use --command or --formatted)")

    formatter = CommandFormatter.from_settings(settings.formatter, path=args.path)
    return formatter.format(text)


def print_diff(old_text: str, new_text: str, settings: ApplicationSettings) -> None:
    """Print changed lines with their old and new line numbers."""
    model = build_diff_model(
        old_text, new_text, LineDiffOptions(algorithm=settings.patch.algorithm)
    )
    for piece in model.iter_changes():
        old_number = piece.old_line_number or ''
        new_number = piece.new_line_number or ''
        print(f"{old_number:>6} {new_number:>6} {piece}")
    logging.info(f"Changes: {model.statistics}")


# =============================================================================
# Main
# =============================================================================

def run(args: CommandLineArgs) -> int:
    """Reformat one file; returns the process exit code."""
    settings = setup_settings(args)
    file_io = FileIOService()

    read = file_io.read_file(args.path)
    if not read.success:
        logging.error(f"Cannot read {args.path}: {read.error}")
        return EXIT_ERROR
    content = read.content
    old_text = content.content

    try:
        new_text = obtain_formatted_text(args, settings, old_text, file_io)
    except LinePatchError as e:
        logging.error(f"Formatting failed: {e}")
        return EXIT_ERROR

    if args.show_diff:
        print_diff(old_text, new_text, settings)

    if args.check or args.show_diff:
        changed = bool(new_text) and new_text != old_text
        if args.check:
            logging.info(f"{args.path}: {'would be reformatted' if changed else 'unchanged'}")
            return EXIT_CHANGES if changed else EXIT_OK
        return EXIT_OK

    buffer = InMemoryTextBuffer(old_text)
    caret = InMemoryCaret(buffer, max(0, min(args.caret or 0, buffer.length)))

    try:
        changed = Reformatter(settings=settings.patch).apply(buffer, caret, old_text, new_text)
    except (LinePatchError, ValueError) as e:
        logging.error(f"Applying formatted text failed: {e}")
        return EXIT_ERROR

    if not changed:
        logging.info(f"{args.path}: unchanged")
        return EXIT_OK

    written = file_io.write_file(
        args.path,
        buffer.get_text(),
        encoding=content.encoding,
        create_backup=args.backup,
        bom=content.bom
    )
    if not written.success:
        logging.error(f"Cannot write {args.path}: {written.error}")
        return EXIT_ERROR

    logging.info(
        f"{args.path}: reformatted with {len(buffer.applied_operations)} edits "
        f"({written.bytes_written} bytes), caret at {caret.get_offset()}"
    )
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 unchanged or applied, 1 changes found by --check, 2 error)
    """
    args = parse_arguments(argv)

    log_file = Path(args.log_file) if args.log_file else None
    logger = setup_logging(args.log_level, log_file)
    logger.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        return run(args)
    except Exception as e:
        logger.critical(f"Unexpected error: {e}", exc_info=True)
        return EXIT_ERROR

