"""
Handles the 'import' command: get every reference listed on stdin.
"""

import sys

import click

from ..config import load_config
from ..render import render_get_table
from ..services import GetOptions, Getter
from ..cli_utils import handle_errors, add_common_options
from .get import clone_options, report_summary


@click.command("import")
@clone_options
@add_common_options('verbose')
@handle_errors
def import_handler(update, ssh, shallow, vcs, silent, no_recursive, parallel, table):
    """
    Bulk get repositories from stdin, one reference per line.

    A failing reference is logged and the import carries on; the exit
    status stays zero once every line has been read.

    Examples:

    \b
        cat refs.txt | repoget import
        repoget list | repoget import -u -P
    """
    getter = Getter(
        GetOptions(
            update=update,
            shallow=shallow,
            silent=silent,
            ssh=ssh,
            recursive=not no_recursive,
            vcs=vcs,
        ),
        config=load_config(),
    )

    summary = getter.import_references(sys.stdin, parallel=parallel)

    if table:
        render_get_table([result.to_dict() for result in summary.results])
    report_summary(summary)
