"""BaseService and the work-tracking client contract.

Every service receives a client implementing :class:`WorkTrackingClient`
at construction time. The production implementation is
:class:`~iterctl.infrastructure.azure_devops.AzureDevOpsClient`; tests use
an in-memory fake.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from iterctl.domain.iterations import IterationNode, Team


class WorkTrackingClient(Protocol):
    """Remote operations the services need from the work-tracking system."""

    def get_teams(self, project: str) -> list[Team]: ...

    def get_root_iteration_node(self, project: str, depth: int = 1) -> dict[str, Any]: ...

    def create_iteration_node(
        self,
        project: str,
        name: str,
        start_date: date,
        finish_date: date,
    ) -> IterationNode | None: ...

    def assign_iteration_to_team(self, project: str, team: Team, identifier: str) -> bool: ...


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class SyncService(BaseService):
            def run(self, ...) -> ServiceResult:
                teams = self._client.get_teams(project)
                ...
    """

    def __init__(self, client: WorkTrackingClient) -> None:
        self._client = client
