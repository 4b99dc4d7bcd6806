"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
import click
from functools import wraps
from typing import Any, Dict, Iterable, Optional

from .config import load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import format_output, get_format_from_env

logger = logging.getLogger("repoget")


def configure_logging(config: Dict[str, Any], verbose: bool = False) -> None:
    """Apply ``logging.level`` from the config; ``verbose`` forces DEBUG."""
    if verbose:
        logger.setLevel(logging.DEBUG)
        return
    level = str(config.get("logging", {}).get("level") or "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))


def handle_errors(func):
    """
    Decorator that provides standard CLI behavior:
    - Logging level from config (``--verbose`` for debug output)
    - Errors reported on stderr, never on stdout
    - Exit status taken from CommandError.exit_code
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', False)
        try:
            configure_logging(load_config(), verbose)
            func(*args, **kwargs)
            sys.exit(SUCCESS)
        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.error(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            logger.debug("Traceback", exc_info=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def emit(items: Iterable[Dict[str, Any]], output_format: Optional[str] = None,
         fields: Optional[str] = None) -> None:
    """Print dicts on stdout in ``output_format`` (REPOGET_FORMAT or jsonl by default)."""
    if output_format is None:
        output_format = get_format_from_env('jsonl')
    field_list = fields.split(',') if fields else None
    for line in format_output(iter(items), output_format, field_list):
        click.echo(line)


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Show debug logging on stderr'),
    'dry_run': click.option('--dry-run', is_flag=True,
                            help='Preview changes without making them'),
    'format': click.option('-f', '--format', 'output_format',
                           type=click.Choice(['json', 'jsonl', 'csv', 'tsv', 'yaml']),
                           help='Structured output format (default: plain lines)'),
    'fields': click.option('--fields',
                           help='Comma-separated list of fields to include (for CSV/TSV)'),
    'vcs': click.option('--vcs', metavar='VCS',
                        help='Version control system (git, subversion, git-svn, mercurial, '
                             'darcs, bazaar, fossil)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'dry_run')
        def my_command(verbose, dry_run):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
