"""Subcommand modules for iterctl.

Provides register_commands() which uses deferred imports to keep
``iterctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all commands on the root CLI group."""
    from iterctl.commands.plan import plan
    from iterctl.commands.sync import sync

    cli.add_command(sync)
    cli.add_command(plan)
