"""Tests for the iteration tree reader."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from iterctl.domain.errors import UnsupportedCalendarStateError
from iterctl.domain.iterations import IterationDates
from iterctl.infrastructure.reader import (
    format_remote_date,
    node_from_payload,
    parse_remote_date,
    read_iteration_tree,
)


class TestParseRemoteDate:
    @pytest.mark.parametrize(
        "value",
        ["2024-03-01T00:00:00Z", "2024-03-01T00:00:00", "2024-03-01", datetime(2024, 3, 1, 9, 30)],
    )
    def test_accepted_forms(self, value: object) -> None:
        assert parse_remote_date(value, node="Sprint 1") == date(2024, 3, 1)

    def test_unreadable(self) -> None:
        with pytest.raises(UnsupportedCalendarStateError, match="Sprint 1"):
            parse_remote_date("first of march", node="Sprint 1")

    def test_format(self) -> None:
        assert format_remote_date(date(2024, 3, 1)) == "2024-03-01T00:00:00Z"


class TestNodeFromPayload:
    def test_dated_node(self) -> None:
        node = node_from_payload(
            {
                "id": 42,
                "identifier": "a1b2",
                "name": "Sprint 5",
                "path": "\\Web\\Iteration\\Sprint 5",
                "attributes": {
                    "startDate": "2024-03-01T00:00:00Z",
                    "finishDate": "2024-03-14T00:00:00Z",
                },
            }
        )
        assert node.name == "Sprint 5"
        assert node.identifier == "a1b2"
        assert node.node_id == 42
        assert node.dates == IterationDates(
            start_date=date(2024, 3, 1), finish_date=date(2024, 3, 14)
        )

    def test_no_attributes(self) -> None:
        node = node_from_payload({"name": "Iteration 1", "identifier": "x"})
        assert node.dates is None

    def test_only_start_date_counts_as_undated(self) -> None:
        node = node_from_payload(
            {"name": "Sprint 1", "attributes": {"startDate": "2024-03-01T00:00:00Z"}}
        )
        assert node.is_dated is False

    def test_reversed_dates_rejected(self) -> None:
        with pytest.raises(UnsupportedCalendarStateError, match="Sprint 1"):
            node_from_payload(
                {
                    "name": "Sprint 1",
                    "attributes": {
                        "startDate": "2024-03-14T00:00:00Z",
                        "finishDate": "2024-03-01T00:00:00Z",
                    },
                }
            )


class TestReadIterationTree:
    def test_empty_project(self, fake_client) -> None:
        tree = read_iteration_tree(fake_client, "Web")
        assert tree.project == "Web"
        assert tree.root_name == "Web"
        assert tree.has_children is False
        assert tree.children == ()

    def test_children_parsed(self, fake_client) -> None:
        fake_client.add_iteration("Web", "Sprint 1", date(2024, 1, 1), date(2024, 1, 14))
        fake_client.add_iteration("Web", "Sprint 2")

        tree = read_iteration_tree(fake_client, "Web")

        assert tree.has_children is True
        assert [c.name for c in tree.children] == ["Sprint 1", "Sprint 2"]
        assert tree.children[0].is_dated
        assert not tree.children[1].is_dated
        assert tree.fully_dated is False
