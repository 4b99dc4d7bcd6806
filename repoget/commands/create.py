"""
Handles the 'create' command: initialize a new local repository.
"""

import logging
import os

import click

from ..config import load_config
from ..domain.remote_repository import new_remote_repository
from ..exit_codes import DestinationConflictError, UnsupportedOperationError
from ..infra.vcs import get_backend
from ..services import LocalRepositoryIndex
from ..url import new_url
from ..cli_utils import handle_errors, add_common_options

logger = logging.getLogger(__name__)


def is_missing_or_empty(path: str) -> bool:
    if not os.path.exists(path):
        return True
    return os.path.isdir(path) and not os.listdir(path)


def create_repository(name: str, vcs=None, config=None) -> str:
    """
    Initialize an empty repository where ``repoget get NAME`` would clone it.

    Bare project names always take the current user as owner.

    Returns:
        Path of the new repository
    """
    if config is None:
        config = load_config()
    url = new_url(name, force_me=True, config=config)
    local = LocalRepositoryIndex(config).from_url(url)
    path = local.full_path

    if not is_missing_or_empty(path):
        raise DestinationConflictError(path, "directory already exists and is not empty")

    if vcs:
        backend = get_backend(vcs)
        if backend is None:
            raise UnsupportedOperationError(f"failed to init: unknown vcs {vcs}")
    else:
        backend, _ = new_remote_repository(url, config=config).resolve_backend()

    if backend.init is None:
        raise UnsupportedOperationError(f"failed to init: {backend.name} cannot create repositories")

    os.makedirs(path, exist_ok=True)
    logger.info(f"create {path}")
    backend.init(path)
    return path


@click.command("create")
@click.argument("name")
@add_common_options('vcs', 'verbose')
@handle_errors
def create_handler(name, vcs):
    """
    Create a new repository under the root and print its path.

    Examples:

    \b
        repoget create my-tool
        repoget create --vcs hg example.org/me/notes
    """
    click.echo(create_repository(name, vcs=vcs))
