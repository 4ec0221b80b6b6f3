"""Command: show which iterations sync would create, without creating them."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from iterctl.commands._base import IterCommand, run_scope_options
from iterctl.domain.errors import ConfigurationError
from iterctl.services.result import ServiceResult

if TYPE_CHECKING:
    from iterctl.commands._context import AppContext


@click.command(
    cls=IterCommand,
    examples="""\
  iterctl plan
  iterctl plan -p Web --today 2024-04-10
  iterctl plan --keep-going
  iterctl -q plan""",
)
@run_scope_options
@click.option(
    "--keep-going",
    is_flag=True,
    help="Keep planning the next project after a fatal error.",
)
@click.pass_obj
def plan(
    app: AppContext,
    projects: tuple[str, ...],
    today: datetime | None,
    keep_going: bool,
) -> None:
    """Dry run: list the iterations that sync would backfill and create."""
    from iterctl.services.sync import SyncService

    try:
        client = app.client
    except ConfigurationError as exc:
        app.emit(ServiceResult.failure("plan", exc))
        return

    svc = SyncService(
        client,
        app.settings.calendar,
        keep_going=keep_going or app.settings.keep_going,
    )
    app.emit(svc.plan(app.projects(projects), today=today.date() if today else None))
