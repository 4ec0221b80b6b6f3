"""AppContext: the object every iterctl command receives via ``@click.pass_obj``.

It owns the run's settings, the lazily created Azure DevOps client and the
rules for printing a ServiceResult (stdout for results, stderr for warnings
and errors, exit code 1 on failure).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import click

from iterctl.config.logging import configure_logging
from iterctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from iterctl.config.settings import IterSettings
    from iterctl.services.base import WorkTrackingClient
    from iterctl.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by the sync and plan commands.

    No network client exists until a command asks for one, so ``--help``,
    ``--version`` and ``--examples`` work without credentials.
    """

    def __init__(self, settings: IterSettings) -> None:
        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )
        self._client: WorkTrackingClient | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def client(self) -> WorkTrackingClient:
        """Azure DevOps client built from ``[azure_devops]`` on first access.

        Raises:
            ConfigurationError: uri or token is missing.
        """
        if self._client is None:
            from iterctl.infrastructure.azure_devops import AzureDevOpsClient

            self._client = AzureDevOpsClient.from_config(self.settings.azure_devops)
        return self._client

    def close(self) -> None:
        """Release the HTTP session, if one was opened."""
        client, self._client = self._client, None
        close = getattr(client, "close", None)
        if close is not None:
            close()

    def projects(self, requested: Sequence[str]) -> list[str]:
        """Projects for this run: ``--project`` values, else the configured list."""
        return list(requested) if requested else list(self.settings.projects)

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and set the exit status.

        A failed result goes to stderr and ends the process with code 1.
        Warnings on a successful result are echoed to stderr unless the
        output is JSON, where they are already part of the document.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if self.output.json_output:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
