"""Entry point: the ``iterctl`` command group."""

from __future__ import annotations

import click

from iterctl import __version__
from iterctl.commands import register_commands
from iterctl.commands._context import AppContext
from iterctl.config.settings import IterSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="iterctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only iteration names.")
@click.option("-v", "--verbose", is_flag=True, help="Show skipped names, meta and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    help="Read this iterctl.toml instead of searching for one.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """iterctl: keep Azure DevOps iteration calendars populated.

    Reads iterctl.toml (or ITERCTL_* variables), finds each project's
    current sprint and creates the ones that should follow it.
    """
    # Flags left off the command line must not mask env or TOML values.
    given = {name: True for name, value in flags.items() if value}
    app = AppContext(IterSettings.from_cli(config_path=config_path, **given))
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
