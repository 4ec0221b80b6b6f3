"""Click plumbing shared by the iterctl commands.

``IterCommand`` takes an ``examples`` block and exposes it through an eager
``--examples`` flag, so ``--help`` stays short. ``run_scope_options`` adds the
options that choose which projects a run touches and what day it is.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


class IterCommand(click.Command):
    """A command that can print usage examples."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples or "").strip()
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(self.examples, "  "))
        ctx.exit(0)


def run_scope_options(func: F) -> F:
    """``--project`` and ``--today``, shared by sync and plan."""
    func = click.option(
        "--today",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Pretend today is this date (YYYY-MM-DD).",
    )(func)
    func = click.option(
        "-p",
        "--project",
        "projects",
        multiple=True,
        help="Only process this project (repeatable). Defaults to the configured list.",
    )(func)
    return func
