#!/usr/bin/env python3

import click

from repoget import __version__
from repoget.commands.get import get_handler
from repoget.commands.import_ import import_handler
from repoget.commands.list import list_handler
from repoget.commands.look import look_handler
from repoget.commands.root import root_handler
from repoget.commands.create import create_handler
from repoget.commands.rm import rm_handler
from repoget.commands.migrate import migrate_handler
from repoget.commands.check import check_handler


@click.group()
@click.version_option(__version__, prog_name="repoget")
def cli():
    """repoget - Clone and organize remote repositories under local roots.

    Every repository lives at <root>/<host>/<owner>/<project>, whatever
    VCS serves it.
    """
    pass


cli.add_command(get_handler, name='get')
cli.add_command(import_handler, name='import')
cli.add_command(list_handler, name='list')
cli.add_command(look_handler, name='look')
cli.add_command(root_handler, name='root')
cli.add_command(create_handler, name='create')
cli.add_command(rm_handler, name='rm')
cli.add_command(migrate_handler, name='migrate')
cli.add_command(check_handler, name='check')


def main():
    cli()

if __name__ == "__main__":
    main()
