"""Error taxonomy for iteration calendar maintenance.

Every error carries a stable ``code`` that services copy into
:class:`~iterctl.services.result.ServiceError` so the CLI and JSON
consumers can branch on it.

INVARIANT: Only TeamAssignmentFailedError is non-fatal. Everything else
stops the current run and needs an operator.
"""

from __future__ import annotations

from typing import Any


class IterctlError(Exception):
    """Base class for all iterctl errors."""

    code = "ITERCTL_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail or {}


class ConfigurationError(IterctlError):
    """A required setting is missing or invalid."""

    code = "INVALID_CONFIG"


class MalformedNameError(IterctlError):
    """An iteration name does not follow ``<prefix> <number>``."""

    code = "MALFORMED_NAME"


class OverlappingIterationsError(IterctlError):
    """More than one iteration strictly contains today."""

    code = "OVERLAPPING_ITERATIONS"


class UnsupportedCalendarStateError(IterctlError):
    """The calendar mixes dated and undated iterations, or has invalid dates."""

    code = "UNSUPPORTED_CALENDAR_STATE"


class IterationCreationFailedError(IterctlError):
    """The remote system did not return a created iteration."""

    code = "ITERATION_CREATION_FAILED"


class TeamAssignmentFailedError(IterctlError):
    """An iteration could not be attached to one team. Reported, never raised."""

    code = "TEAM_ASSIGNMENT_FAILED"


class AzureDevOpsError(IterctlError):
    """Transport or HTTP failure talking to Azure DevOps."""

    code = "AZURE_DEVOPS_ERROR"
