"""Tests for Rich renderers and output mode dispatch."""

from __future__ import annotations

import json

from iterctl.output.formatters import OutputSettings, format_result
from iterctl.output.renderers import render_quiet, render_result
from iterctl.services.result import ServiceError, ServiceResult

SYNC = ServiceResult(
    ok=True,
    op="sync",
    data={
        "created_count": 2,
        "failures": [],
        "projects": [
            {
                "project": "Web",
                "mode": "extend",
                "anchor": "Sprint 7",
                "backfilled": [
                    {
                        "name": "Sprint 7",
                        "identifier": "g7",
                        "start_date": "2024-03-29",
                        "finish_date": "2024-04-11",
                        "assigned_teams": ["Alpha", "Beta"],
                        "failed_teams": [],
                    }
                ],
                "created": [
                    {
                        "name": "Sprint 8",
                        "identifier": "g8",
                        "start_date": "2024-04-12",
                        "finish_date": "2024-04-25",
                        "assigned_teams": ["Alpha"],
                        "failed_teams": ["Beta"],
                    }
                ],
                "skipped": ["Sprint 9"],
            }
        ],
    },
    meta={"today": "2024-04-10"},
)

PLAN = ServiceResult(
    ok=True,
    op="plan",
    data={
        "projects": [
            {
                "project": "Mobile",
                "mode": "bootstrap",
                "anchor": None,
                "backfill": [],
                "plan": [
                    {
                        "name": "Sprint 1",
                        "sequence_number": 1,
                        "start_date": "2024-01-01",
                        "finish_date": "2024-01-14",
                    }
                ],
                "skipped": [],
            },
            {
                "project": "Web",
                "mode": "extend",
                "anchor": "Sprint 8",
                "backfill": [],
                "plan": [],
                "skipped": ["Sprint 9"],
            },
        ]
    },
)

FAILED = ServiceResult(
    ok=False,
    op="sync",
    error=ServiceError(
        code="UNSUPPORTED_CALENDAR_STATE",
        message="Some iterations have no start/finish dates",
        detail={"project": "Web"},
    ),
)


class TestRenderSync:
    def test_lists_backfilled_and_new(self) -> None:
        output = render_result(SYNC)
        assert "OK" in output
        assert "Web" in output
        assert "after Sprint 7" in output
        assert "Sprint 7" in output and "Sprint 8" in output
        assert "backfill" in output
        assert "1 ok, 1 failed" in output

    def test_field_has_single_space_after_colon(self) -> None:
        lines = render_result(SYNC).splitlines()
        assert "  created_count: 2" in [line.rstrip() for line in lines]

    def test_verbose_shows_skipped_and_meta(self) -> None:
        output = render_result(SYNC, verbose=True)
        assert "already present: Sprint 9" in output
        assert "today: 2024-04-10" in output


class TestRenderPlan:
    def test_bootstrap_and_up_to_date(self) -> None:
        output = render_result(PLAN)
        assert "Mobile" in output and "[bootstrap]" in output
        assert "2024-01-14" in output
        assert "calendar is up to date" in output

    def test_partial_plan_lists_failed_projects(self) -> None:
        partial = PLAN.model_copy(
            update={
                "ok": False,
                "data": {
                    **PLAN.data,
                    "failures": [
                        {"project": "Api", "code": "OVERLAPPING_ITERATIONS", "message": "overlap"}
                    ],
                },
                "error": ServiceError(
                    code="OVERLAPPING_ITERATIONS", message="1 of 3 projects failed"
                ),
            }
        )
        output = render_result(partial)
        assert output.startswith("PARTIAL")
        assert "Api  OVERLAPPING_ITERATIONS  overlap" in output
        assert "1 of 3 projects failed" in output


class TestRenderError:
    def test_error_line(self) -> None:
        output = render_result(FAILED)
        assert output.startswith("ERROR")
        assert "Some iterations have no start/finish dates" in output
        assert "[UNSUPPORTED_CALENDAR_STATE]" in output
        assert "project: Web" not in output

    def test_verbose_error_detail(self) -> None:
        assert "project: Web" in render_result(FAILED, verbose=True)


class TestQuiet:
    def test_names_only(self) -> None:
        assert render_quiet(SYNC).splitlines() == ["Web: Sprint 7", "Web: Sprint 8"]

    def test_nothing_created(self) -> None:
        empty = ServiceResult(ok=True, op="sync", data={"projects": []})
        assert render_quiet(empty) == "OK: sync"

    def test_error(self) -> None:
        assert render_quiet(FAILED).startswith("ERROR: sync")


class TestFormatResult:
    def test_json(self) -> None:
        parsed = json.loads(format_result(SYNC, settings=OutputSettings(json_output=True)))
        assert parsed["data"]["created_count"] == 2

    def test_quiet(self) -> None:
        assert format_result(PLAN, settings=OutputSettings(quiet=True)) == "Mobile: Sprint 1"

    def test_default_is_rich(self) -> None:
        assert format_result(SYNC).startswith("OK")
