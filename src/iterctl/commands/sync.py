"""Command: create missing iterations and assign them to teams."""

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
  iterctl sync
  iterctl sync -p Web -p Mobile
  iterctl sync --keep-going
  iterctl --json sync --today 2024-04-10""",
)
@run_scope_options
@click.option(
    "--keep-going",
    is_flag=True,
    help="Continue with the next project after a fatal error.",
)
@click.pass_obj
def sync(
    app: AppContext,
    projects: tuple[str, ...],
    today: datetime | None,
    keep_going: bool,
) -> None:
    """Backfill and extend iteration calendars of the configured projects."""
    from iterctl.services.sync import SyncService

    try:
        client = app.client
    except ConfigurationError as exc:
        app.emit(ServiceResult.failure("sync", exc))
        return

    svc = SyncService(
        client,
        app.settings.calendar,
        keep_going=keep_going or app.settings.keep_going,
    )
    app.emit(svc.run(app.projects(projects), today=today.date() if today else None))
