"""
Handles the 'migrate' command: move an existing checkout to where get
would have cloned it.
"""

import logging
import os
import shutil
from typing import Tuple

import click

from ..config import load_config
from ..exit_codes import (
    CommandError,
    DestinationConflictError,
    NoReposFoundError,
    UnsupportedOperationError,
)
from ..infra.vcs import find_vcs_backend
from ..services import LocalRepositoryIndex
from ..url import new_url
from ..cli_utils import handle_errors, add_common_options

logger = logging.getLogger(__name__)


def migration_paths(repo_dir: str, config=None) -> Tuple[str, str]:
    """
    Source and destination for moving the checkout at ``repo_dir``.

    The destination is derived from the checkout's remote URL, exactly as
    ``repoget get <remote URL>`` would place it.

    Raises:
        NoReposFoundError: repo_dir is not a directory
        UnsupportedOperationError: no VCS detected, or the VCS cannot
            report a remote URL
        DestinationConflictError: already in place, or destination taken
    """
    if config is None:
        config = load_config()
    source = os.path.abspath(repo_dir)
    if not os.path.isdir(source):
        raise NoReposFoundError(f"directory {source!r} does not exist")

    backend = find_vcs_backend(source)
    if backend is None:
        raise UnsupportedOperationError(f"failed to detect VCS backend in {source}")
    if backend.remote_url is None:
        raise UnsupportedOperationError(f"migrate is not supported for {backend.name}")

    remote = backend.remote_url(source)
    if not remote:
        raise UnsupportedOperationError(f"{source} has no remote URL")

    url = new_url(remote, config=config)
    dest = LocalRepositoryIndex(config).from_url(url).full_path

    if os.path.realpath(source) == os.path.realpath(dest):
        raise DestinationConflictError(dest, "repository is already at the correct location")
    if os.path.lexists(dest):
        raise DestinationConflictError(dest, "destination directory already exists")

    return source, dest


@click.command("migrate")
@click.argument("repo_dir")
@add_common_options('dry_run')
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@add_common_options('verbose')
@handle_errors
def migrate_handler(repo_dir, dry_run, yes):
    """
    Move an existing checkout under the root and print its new path.

    Examples:

    \b
        repoget migrate ~/src/old-checkout
        repoget migrate --dry-run .
    """
    source, dest = migration_paths(repo_dir)

    if dry_run:
        click.echo(f"Would migrate {source} to {dest}")
        return

    if not yes and not click.confirm(f"Migrate {source} to {dest}?", default=False, err=True):
        raise CommandError("aborted")

    os.makedirs(os.path.dirname(dest), exist_ok=True)
    logger.info(f"migrate {source} -> {dest}")
    # Falls back to copy and delete across filesystems
    shutil.move(source, dest)
    click.echo(dest)
