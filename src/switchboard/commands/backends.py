"""switchboard backends — list supported agent CLIs."""

from __future__ import annotations

import click

from switchboard.agent.backends import BACKENDS


@click.command()
def backends() -> None:
    """List the supported agent backends."""
    for name, backend_cls in BACKENDS.items():
        click.echo(f"{name:<12} {backend_cls.display_name} ({backend_cls.executable})")
