"""
Handles the 'get' command: clone or update repositories by reference.

References are read from the arguments, or from stdin when there are no
arguments and stdin is not a terminal. Progress goes to stderr through
logging; stdout stays empty unless --table is given.
"""

import logging
import sys

import click

from ..config import load_config
from ..render import render_get_table
from ..services import GetOptions, Getter, LocalRepositoryIndex
from ..cli_utils import handle_errors, add_common_options
from .look import look_path

logger = logging.getLogger(__name__)


def clone_options(func):
    """Options shared by get and import."""
    options = [
        click.option("-u", "--update", is_flag=True,
                     help="Update local repository if cloned already"),
        click.option("-p", "ssh", is_flag=True, help="Clone with SSH"),
        click.option("--shallow", is_flag=True, help="Do a shallow clone"),
        add_common_options('vcs'),
        click.option("--silent", is_flag=True, help="Clone or update silently"),
        click.option("--no-recursive", is_flag=True,
                     help="Prevent recursive fetching of submodules"),
        click.option("-P", "--parallel", is_flag=True, help="Import in parallel"),
        click.option("--table", is_flag=True, help="Show results as a table"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def read_references(stream) -> list:
    return [line.strip() for line in stream if line.strip()]


def report_summary(summary) -> None:
    """Log how many references failed; a finished batch is never an error."""
    if not summary.success:
        logger.warning(f"{summary.failed} of {summary.total} references failed")


@click.command("get")
@click.argument("references", nargs=-1)
@clone_options
@click.option("--bare", is_flag=True, help="Do a bare clone")
@click.option("-b", "--branch", help="Specify branch name; implies --single-branch on git")
@click.option("-l", "--look", is_flag=True, help="Look after get")
@add_common_options('verbose')
@handle_errors
def get_handler(references, update, ssh, shallow, vcs, silent, no_recursive, parallel,
                table, bare, branch, look):
    """
    Clone or update repositories.

    REFERENCES can be a project name, owner/project, host/owner/project,
    a URL or an SCP-style remote such as git@github.com:owner/project.git.
    Append @BRANCH to pick a branch.

    Examples:

    \b
        repoget get motemen/ghq
        repoget get -u https://github.com/motemen/ghq
        repoget get -b develop git@github.com:motemen/ghq.git
        cat refs.txt | repoget get -P
    """
    refs = list(references)
    if not refs:
        if not sys.stdin.isatty():
            refs = read_references(sys.stdin)
    if not refs:
        raise click.UsageError("no references given")
    if look and (parallel or len(refs) > 1):
        raise click.UsageError("--look works with a single reference and without --parallel")

    config = load_config()
    getter = Getter(
        GetOptions(
            update=update,
            shallow=shallow,
            silent=silent,
            ssh=ssh,
            recursive=not no_recursive,
            bare=bare,
            vcs=vcs,
            branch=branch,
        ),
        config=config,
    )

    summary = getter.get_all(refs, parallel=parallel, fail_fast=not parallel)

    if table:
        render_get_table([result.to_dict() for result in summary.results])
    report_summary(summary)

    if look:
        result = summary.results[0]
        if result.path:
            look_path(result.path, LocalRepositoryIndex(config).roots())
