"""
Handles the 'rm' command: delete a local repository.
"""

import logging
import shutil

import click

from ..config import load_config
from ..exit_codes import CommandError, NoReposFoundError
from ..services import LocalRepositoryIndex
from ..url import new_url
from ..cli_utils import handle_errors, add_common_options
from .create import is_missing_or_empty

logger = logging.getLogger(__name__)


@click.command("rm")
@click.argument("name")
@add_common_options('dry_run')
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@add_common_options('verbose')
@handle_errors
def rm_handler(name, dry_run, yes):
    """
    Remove a local repository.

    Examples:

    \b
        repoget rm motemen/ghq
        repoget rm --dry-run github.com/motemen/ghq
    """
    config = load_config()
    url = new_url(name, force_me=True, config=config)
    path = LocalRepositoryIndex(config).from_url(url).full_path

    if is_missing_or_empty(path):
        raise NoReposFoundError(f"directory {path!r} does not exist")

    if dry_run:
        click.echo(f"Would remove {path}")
        return

    if not yes and not click.confirm(f"Remove {path}?", default=False, err=True):
        raise CommandError("aborted")

    shutil.rmtree(path)
    logger.debug(f"removed tree {path}")
    click.echo(f"Removed {path}")
