"""
Handles the 'list' command: show local repositories.

Default output is one relative path per line. -f switches to structured
records and --table to a rich table.
"""

import click

from ..config import load_config
from ..infra.vcs import get_backend
from ..render import render_list_table
from ..services import LocalRepositoryIndex, RepositoryQuery, unique_subpaths
from ..cli_utils import handle_errors, add_common_options, emit


@click.command("list")
@click.argument("query", required=False)
@click.option("-e", "--exact", is_flag=True, help="Perform an exact match")
@click.option("-i", "--ignore-case", is_flag=True,
              help="Ignore case (the default is smart case)")
@add_common_options('vcs')
@click.option("-p", "--full-path", is_flag=True, help="Print full paths")
@click.option("--unique", is_flag=True, help="Print unique subpaths")
@add_common_options('format', 'fields')
@click.option("--table", is_flag=True, help="Display as formatted table")
@add_common_options('verbose')
@handle_errors
def list_handler(query, exact, ignore_case, vcs, full_path, unique, output_format, fields, table):
    """
    List local repositories.

    QUERY filters repositories: by default any repository whose
    owner/project contains it, with --exact only those with a project,
    owner/project or host/owner/project equal to it. A leading host
    (github.com/motemen) restricts the match to that host.

    Examples:

    \b
        repoget list
        repoget list -p ghq
        repoget list -e motemen/ghq
        repoget list --vcs git --unique
    """
    if vcs and get_backend(vcs) is None:
        raise click.BadParameter(f"unknown vcs: {vcs}", param_hint="--vcs")

    config = load_config()
    index = LocalRepositoryIndex(config)
    # without -i the query decides (smart case)
    repo_query = RepositoryQuery(query or "", exact=exact,
                                 ignore_case=True if ignore_case else None, config=config)
    repos = [repo for repo in index.repositories(vcs=vcs) if repo_query.matches(repo)]

    if unique:
        for subpath in unique_subpaths(repos, index):
            click.echo(subpath)
    elif table:
        render_list_table([repo.to_dict() for repo in repos])
    elif output_format:
        emit((repo.to_dict() for repo in repos), output_format, fields)
    else:
        for repo in repos:
            click.echo(repo.full_path if full_path else repo.rel_path)
