"""Root CLI group and version flag."""

import click

from switchboard import __version__
from switchboard.commands.ask import ask
from switchboard.commands.backends import backends


@click.group()
@click.version_option(version=__version__, prog_name="switchboard")
def cli() -> None:
    """Switchboard — run command-line AI agents and stream their replies."""


cli.add_command(ask)
cli.add_command(backends)
