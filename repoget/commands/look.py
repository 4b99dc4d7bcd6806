"""
Handles the 'look' command: open a shell inside a local repository.
"""

import logging
import os
import subprocess
from typing import List

import click

from ..config import load_config
from ..domain.local_repository import LocalRepository
from ..exit_codes import CommandError, NoReposFoundError, SubprocessFailureError
from ..services import LocalRepositoryIndex
from ..cli_utils import handle_errors, add_common_options

logger = logging.getLogger(__name__)

LOOK_ENV = "REPOGET_LOOK"


def detect_shell() -> str:
    shell = os.environ.get("SHELL")
    if shell:
        return shell
    if os.name == "nt":
        return os.environ.get("COMSPEC", "cmd.exe")
    return "/bin/sh"


def look_path(path: str, roots: List[str]) -> None:
    """
    Run an interactive shell in ``path``.

    REPOGET_LOOK is set to the path relative to the root containing it.
    """
    rel_path = path
    for root in roots:
        if path.startswith(root.rstrip(os.sep) + os.sep):
            rel_path = os.path.relpath(path, root).replace(os.sep, '/')
            break

    shell = detect_shell()
    env = dict(os.environ, **{LOOK_ENV: rel_path})
    logger.info(f"cd {path}")
    try:
        returncode = subprocess.call([shell], cwd=path, env=env)
    except OSError as e:
        raise SubprocessFailureError([shell], not_found=isinstance(e, FileNotFoundError),
                                     cause=e.strerror) from e
    if returncode != 0:
        raise SubprocessFailureError([shell], returncode)


def look_repository(repo: LocalRepository) -> None:
    look_path(repo.full_path, [repo.root_path])


@click.command("look")
@click.argument("name")
@add_common_options('verbose')
@handle_errors
def look_handler(name):
    """
    Look into a local repository.

    NAME is matched exactly against project, owner/project and
    host/owner/project of every local repository.

    Examples:

    \b
        repoget look ghq
        repoget look motemen/ghq
    """
    index = LocalRepositoryIndex(load_config())
    repos = index.find(name)

    if not repos:
        raise NoReposFoundError()
    if len(repos) > 1:
        lines = "".join(f"\n       - {repo.rel_path}" for repo in repos)
        raise CommandError(f"More than one repositories are found; Try more precise name{lines}")

    look_repository(repos[0])
