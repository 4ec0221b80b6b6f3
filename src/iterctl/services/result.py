"""ServiceResult and ServiceError: what every service call hands back.

Services never raise to the CLI. Domain failures are caught at the service
boundary and turned into a failed ServiceResult; the commands print it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from iterctl.domain.errors import IterctlError


class ServiceError(BaseModel):
    """Machine-readable error: a stable ``code`` plus a human message."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: IterctlError, **extra: Any) -> ServiceError:
        """Copy *exc* into an error payload, merging *extra* into ``detail``.

        >>> from iterctl.domain.errors import MalformedNameError
        >>> ServiceError.from_exception(MalformedNameError("bad"), project="Web").detail
        {'project': 'Web'}
        """
        return cls(code=exc.code, message=exc.message, detail={**exc.detail, **extra})


class ServiceResult(BaseModel):
    """Outcome of a ``sync`` or ``plan`` call.

    Attributes:
        ok: False when any project hit a fatal error.
        op: ``"sync"`` or ``"plan"``.
        data: Per-project reports; present on failure too, for the
            projects that finished before (or despite) the error.
        warnings: Team assignments that did not go through.
        error: Set whenever ``ok`` is False.
        meta: The ``today`` the run was evaluated against.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, exc: IterctlError, **fields: Any) -> ServiceResult:
        """Failed result carrying *exc*; *fields* fill data/warnings/meta."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc), **fields)
