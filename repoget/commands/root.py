"""
Handles the 'root' command.
"""

import click

from ..config import load_config
from ..services import LocalRepositoryIndex
from ..cli_utils import handle_errors, add_common_options


@click.command("root")
@click.option("--all", "all_roots", is_flag=True, help="Show all roots")
@add_common_options('verbose')
@handle_errors
def root_handler(all_roots):
    """Show the primary root, or every root with --all."""
    index = LocalRepositoryIndex(load_config())
    roots = index.roots() if all_roots else [index.primary_root()]
    for root in roots:
        click.echo(root)
