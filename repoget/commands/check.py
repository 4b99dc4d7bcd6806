"""
Handles the 'check' command: report local work that has not been pushed
anywhere, i.e. uncommitted changes and stashes in git checkouts.
"""

from typing import Any, Dict, List, Optional

import click

from ..config import load_config
from ..domain.local_repository import LocalRepository
from ..infra.vcs import get_backend
from ..services import LocalRepositoryIndex
from ..utils import run_command
from ..cli_utils import handle_errors, add_common_options, emit


def _git_lines(repo: LocalRepository, *args: str) -> Optional[List[str]]:
    """Non-blank output lines of a git command, or None if it failed."""
    output, returncode = run_command(["git", "-C", repo.full_path, *args],
                                     silent=True, capture_output=True, check=False)
    if returncode != 0:
        return None
    return [line for line in (output or "").splitlines() if line.strip()]


def pending_work(repo: LocalRepository) -> Optional[Dict[str, Any]]:
    """
    Uncommitted changes and stashes of ``repo``.

    Returns None when the checkout is clean or is not a git working tree.
    """
    changes = _git_lines(repo, "status", "--porcelain")
    if changes is None:
        return None
    stashes = _git_lines(repo, "stash", "list") or []
    if not changes and not stashes:
        return None
    return {
        'rel_path': repo.rel_path,
        'path': repo.full_path,
        'changes': changes,
        'stashes': stashes,
    }


@click.command("check")
@add_common_options('vcs', 'format', 'fields', 'verbose')
@handle_errors
def check_handler(vcs, output_format, fields):
    """
    List repositories with uncommitted changes or stashes.

    Examples:

    \b
        repoget check
        repoget check -f jsonl
    """
    if vcs and get_backend(vcs) is None:
        raise click.BadParameter(f"unknown vcs: {vcs}", param_hint="--vcs")

    index = LocalRepositoryIndex(load_config())
    reports = [report for report in map(pending_work, index.repositories(vcs=vcs)) if report]

    if output_format:
        emit(reports, output_format, fields)
        return

    for report in reports:
        click.echo(report['rel_path'])
        if report['changes']:
            click.echo("  Uncommitted changes:")
            for line in report['changes']:
                click.echo(f"    {line}")
        if report['stashes']:
            click.echo("  Stashes:")
            for line in report['stashes']:
                click.echo(f"    {line}")
