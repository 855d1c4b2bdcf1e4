"""
Main entry point for the treesync command line.

This module handles:
- Command line argument parsing
- Logging configuration
- Context and settings loading
- Rendering change lists and asking for confirmation
- Error reporting
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, List, Optional

from treesync import __version__
from treesync.core.errors import SyncError
from treesync.core.folder import ApplyEngine, DiffEngine, FolderSync
from treesync.core.models import (
    ApplyProgress,
    ChangeKind,
    ChangeRecord,
    SyncDirection,
    SyncPlan,
    SyncSettings,
)
from treesync.services.context import Context
from treesync.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "treesync"
APP_VERSION = __version__

EXIT_OK = 0
EXIT_NOT_SYNCED = 1
EXIT_ERROR = 2


# =============================================================================
# Enums
# =============================================================================

class Command(Enum):
    """Sub-command selected on the command line."""
    SYNC = auto()
    ADD = auto()
    EXCLUDE = auto()
    UPDATE = auto()
    INSTALL = auto()


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    command: Command
    src_path: Optional[str] = None
    dst_path: Optional[str] = None
    paths: list[str] = field(default_factory=list)
    patterns: list[str] = field(default_factory=list)
    max_depth: int = 1
    recursive: bool = False
    exclude: list[str] = field(default_factory=list)
    assume_yes: bool = False
    dry_run: bool = False
    config_file: Optional[str] = None
    log_level: str = "WARNING"


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
            fmt='%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Configure application logging.

    Log records go to stderr so change listings on stdout stay clean.

    Args:
        level: Log level string

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def _add_apply_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '-y', '--yes',
        action='store_true',
        help='Apply without asking for confirmation'
    )
    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        help='Only print the change list'
    )


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
        description="One-way directory tree synchronization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s sync -r src/ backup/          Mirror src into backup
  %(prog)s sync -e '*.pyc' -n a/ b/      Preview changes, skipping *.pyc
  %(prog)s add -r ~/.config/nvim         Track a directory
  %(prog)s exclude '~/.config/nvim/plugged'
  %(prog)s update                        Copy tracked files into the dot directory
        """
    )

    parser.add_argument(
        '-c', '--config',
        help='Settings file path ($DOT_PATH/config.json by default)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    sync_parser = subparsers.add_parser('sync', help='Synchronize DST with SRC')
    sync_parser.add_argument('src', help='Source file or directory')
    sync_parser.add_argument('dst', help='Destination file or directory')
    sync_parser.add_argument(
        '-d', '--depth',
        type=int,
        metavar='N',
        help='Only descend N directory levels (default: whole tree)'
    )
    sync_parser.add_argument(
        '-r', '--recursive',
        action='store_true',
        help='Descend without depth limit, overriding --depth'
    )
    sync_parser.add_argument(
        '-e', '--exclude',
        action='append',
        default=[],
        metavar='PATTERN',
        help='Glob of relative paths to leave out (repeatable)'
    )
    _add_apply_options(sync_parser)

    add_parser = subparsers.add_parser('add', help='Track file(s)')
    add_parser.add_argument('paths', nargs='+', metavar='PATH')
    add_parser.add_argument(
        '-r', '--recursive',
        action='store_true',
        help='Track directories recursively'
    )

    exclude_parser = subparsers.add_parser(
        'exclude', help='Exclude files (glob style: e.g ~/.config/nvim/**/*.log)'
    )
    exclude_parser.add_argument('patterns', nargs='+', metavar='PATTERN')

    update_parser = subparsers.add_parser('update', help='Update the dot directory')
    _add_apply_options(update_parser)

    install_parser = subparsers.add_parser(
        'install', help='Install tracked files (warning: can delete files on system)'
    )
    _add_apply_options(install_parser)

    parsed = parser.parse_args(args)

    result = CommandLineArgs(command=Command[parsed.command.upper()])
    result.config_file = parsed.config
    result.log_level = "DEBUG" if parsed.verbose else parsed.log_level

    if result.command == Command.SYNC:
        if parsed.depth is not None and parsed.depth < 0:
            parser.error("--depth must not be negative")
        result.src_path = parsed.src
        result.dst_path = parsed.dst
        # Full tree unless a depth cap is asked for
        if parsed.depth is not None:
            result.max_depth = parsed.depth
        result.recursive = parsed.recursive or parsed.depth is None
        result.exclude = parsed.exclude
    elif result.command == Command.ADD:
        result.paths = parsed.paths
        result.recursive = parsed.recursive
    elif result.command == Command.EXCLUDE:
        result.patterns = parsed.patterns

    if result.command in (Command.SYNC, Command.UPDATE, Command.INSTALL):
        result.assume_yes = parsed.yes
        result.dry_run = parsed.dry_run

    return result


# =============================================================================
# Output Helpers
# =============================================================================

def print_changes(records: list[ChangeRecord], indent: str = "") -> None:
    for record in records:
        print(f"{indent}{record}")


def print_plan(plan: SyncPlan) -> None:
    """Print each target's changes under its system-side path."""
    for target in plan.targets:
        if plan.direction == SyncDirection.UPDATE:
            system_root = target.src_root
        else:
            system_root = target.dst_root
        print(f"  - in {system_root}:")
        print_changes(target.records, indent="    - ")


def print_plan_summary(plan: SyncPlan) -> None:
    print(
        f"==> {plan.count(ChangeKind.ADDED)} to add, "
        f"{plan.count(ChangeKind.MODIFIED)} to modify, "
        f"{plan.count(ChangeKind.DELETED)} to delete"
    )


def log_progress(progress: ApplyProgress) -> None:
    logging.debug(
        f"Applying {progress.items_completed + 1}/{progress.total_items}: "
        f"{progress.current_item}"
    )


def confirm(
    prompt: str,
    assume_yes: bool = False,
    input_func: Callable[[str], str] = input
) -> bool:
    """Ask a yes/no question. Anything but 'y' is a no."""
    if assume_yes:
        return True
    try:
        answer = input_func(prompt)
    except EOFError:
        return False
    return answer.strip().lower().startswith('y')


# =============================================================================
# Commands
# =============================================================================

def run_sync(args: CommandLineArgs, input_func: Callable[[str], str] = input) -> int:
    """Diff SRC against DST, confirm, apply, then verify."""
    settings = SyncSettings(
        max_depth=args.max_depth,
        recursive=args.recursive,
        exclude=tuple(args.exclude),
    )
    engine = DiffEngine()
    records = engine.diff(args.src_path, args.dst_path, settings)

    if not records:
        print("==> everything is synced")
        return EXIT_OK

    print("change list:")
    print_changes(records)

    if args.dry_run:
        return EXIT_OK

    if not confirm("confirm changes [y/N]: ", args.assume_yes, input_func):
        print("==> cancelled")
        return EXIT_OK

    result = ApplyEngine(engine.storage).apply(args.src_path, args.dst_path, records)
    logging.info(f"Sync finished - {result.summary}")

    print("==> checking diff")
    remaining = engine.diff(args.src_path, args.dst_path, settings)
    if not remaining:
        print("==> everything is synced")
        return EXIT_OK

    print("==> error: here is the list of not synced item")
    print_changes(remaining)
    return EXIT_NOT_SYNCED


def run_add(args: CommandLineArgs, context: Context, manager: SettingsManager) -> int:
    for path in args.paths:
        print(f"==> adding {path}")
        manager.add_entry(context, path, args.recursive)
    manager.save()
    return EXIT_OK


def run_exclude(args: CommandLineArgs, context: Context, manager: SettingsManager) -> int:
    exit_code = EXIT_OK
    for pattern in args.patterns:
        print(f"==> adding exclusion {pattern}")
        try:
            manager.add_exclude(context, pattern)
        except SyncError as e:
            print(f"!=> {e}")
            exit_code = EXIT_ERROR
    manager.save()
    return exit_code


def run_plan(
    args: CommandLineArgs,
    context: Context,
    manager: SettingsManager,
    direction: SyncDirection,
    input_func: Callable[[str], str] = input
) -> int:
    """Plan all tracked entries in one direction, confirm, apply, verify."""
    folder_sync = FolderSync(context)
    plan = folder_sync.create_plan(manager.settings, direction)

    if plan.is_empty:
        print("==> everything is up to date")
        return EXIT_OK

    print("==> these changes will be applied:")
    print_plan(plan)
    print_plan_summary(plan)

    if args.dry_run:
        return EXIT_OK

    if not confirm("==> confirm? [y/N]: ", args.assume_yes, input_func):
        print("==> cancelled")
        return EXIT_OK

    for target in plan.targets:
        print(f"==> updating {target.dst_root}")
    folder_sync.execute(plan, progress_callback=log_progress)

    remaining = folder_sync.create_plan(manager.settings, direction)
    if remaining.is_empty:
        print("==> everything is synced")
        return EXIT_OK

    print("==> error: here is the list of not synced item")
    print_plan(remaining)
    return EXIT_NOT_SYNCED


def dispatch(args: CommandLineArgs, input_func: Callable[[str], str] = input) -> int:
    """Run the selected command."""
    if args.command == Command.SYNC:
        return run_sync(args, input_func)

    context = Context.from_environ()
    if args.config_file:
        context = context.with_settings_path(args.config_file)
    manager = SettingsManager.for_context(context)

    if args.command == Command.ADD:
        return run_add(args, context, manager)
    if args.command == Command.EXCLUDE:
        return run_exclude(args, context, manager)

    direction = SyncDirection.UPDATE if args.command == Command.UPDATE else SyncDirection.INSTALL
    return run_plan(args, context, manager, direction, input_func)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    args = parse_arguments(argv)
    setup_logging(args.log_level)
    logging.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        return dispatch(args)
    except (SyncError, OSError) as e:
        logging.debug(f"{type(e).__name__} while running {args.command.name}", exc_info=True)
        print(f"!=> {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
