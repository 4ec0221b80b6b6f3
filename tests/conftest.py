"""Shared pytest fixtures and test helpers for iterctl tests."""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from iterctl.config.models import CalendarConfig
from iterctl.domain.iterations import IterationDates, IterationNode, Team
from iterctl.infrastructure.reader import format_remote_date, node_from_payload


class FakeWorkTrackingClient:
    """In-memory stand-in for the Azure DevOps client.

    Iterations are stored as raw classification-node payloads so the real
    reader parses them exactly as it would parse server responses.
    """

    def __init__(
        self,
        teams: list[Team] | None = None,
        *,
        fail_create: bool = False,
        rejecting_teams: tuple[str, ...] = (),
    ) -> None:
        if teams is None:
            teams = [Team(id="t1", name="Alpha"), Team(id="t2", name="Beta")]
        self.teams = teams
        self.fail_create = fail_create
        self.rejecting_teams = rejecting_teams
        self.iterations: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.created: list[str] = []
        self.assignments: list[tuple[str, str, str]] = []
        self.tree_reads = 0
        self.closed = False

    def add_iteration(
        self,
        project: str,
        name: str,
        start: date | None = None,
        finish: date | None = None,
    ) -> dict[str, Any]:
        index = sum(len(v) for v in self.iterations.values()) + 1
        attributes: dict[str, str] = {}
        if start is not None:
            attributes["startDate"] = format_remote_date(start)
        if finish is not None:
            attributes["finishDate"] = format_remote_date(finish)
        payload = {
            "id": 100 + index,
            "identifier": f"00000000-0000-0000-0000-{index:012d}",
            "name": name,
            "path": f"\\{project}\\Iteration\\{name}",
            "attributes": attributes or None,
        }
        self.iterations[project].append(payload)
        return payload

    # -- WorkTrackingClient ------------------------------------------------

    def get_teams(self, project: str) -> list[Team]:
        return list(self.teams)

    def get_root_iteration_node(self, project: str, depth: int = 1) -> dict[str, Any]:
        self.tree_reads += 1
        children = [dict(c) for c in self.iterations[project]]
        root: dict[str, Any] = {
            "id": 1,
            "identifier": "root",
            "name": project,
            "hasChildren": bool(children),
        }
        if children:
            root["children"] = children
        return root

    def create_iteration_node(
        self, project: str, name: str, start_date: date, finish_date: date
    ) -> IterationNode | None:
        if self.fail_create:
            return None
        self.created.append(name)
        return node_from_payload(self.add_iteration(project, name, start_date, finish_date))

    def assign_iteration_to_team(self, project: str, team: Team, identifier: str) -> bool:
        if team.name in self.rejecting_teams:
            return False
        self.assignments.append((project, team.name, identifier))
        return True

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's ITERCTL_* variables and iterctl.toml out of tests."""
    for key in list(os.environ):
        if key.startswith("ITERCTL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Restore root and iterctl logger state; the CLI reconfigures logging."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    iterctl = logging.getLogger("iterctl")
    iterctl_level = iterctl.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    iterctl.setLevel(iterctl_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_client() -> FakeWorkTrackingClient:
    return FakeWorkTrackingClient()


@pytest.fixture
def calendar() -> CalendarConfig:
    """Two-week sprints, one guaranteed future sprint, bootstrapped on 2024-01-01."""
    return CalendarConfig(
        iterations_to_create=1,
        iteration_name_prefix="Sprint",
        iteration_length=14,
        bootstrap_start_date=date(2024, 1, 1),
    )


@pytest.fixture
def make_node() -> Callable[..., IterationNode]:
    """Factory for dated (or undated) IterationNodes."""

    def _make(name: str, start: date | None = None, finish: date | None = None) -> IterationNode:
        dates = None
        if start is not None and finish is not None:
            dates = IterationDates(start_date=start, finish_date=finish)
        return IterationNode(name=name, identifier=f"id-{name}", dates=dates)

    return _make
