"""Date and sequence arithmetic for fixed-length iterations.

Inclusive-day convention: the start day counts as day 1, so a 14-day
iteration starting on a Monday finishes 13 days later, and the next
iteration starts the day after that.
"""

from __future__ import annotations

from datetime import date, timedelta

from iterctl.domain.errors import MalformedNameError


def _require_length(length: int) -> None:
    if length <= 0:
        msg = f"Iteration length must be positive, got {length}"
        raise ValueError(msg)


def finish_date_of(start_date: date, length: int) -> date:
    """Last day of an iteration of *length* days starting on *start_date*."""
    _require_length(length)
    return start_date + timedelta(days=length - 1)


def next_start_date(prior_finish_date: date) -> date:
    """First day of the iteration following one that ends on *prior_finish_date*."""
    return prior_finish_date + timedelta(days=1)


def iteration_name(prefix: str, sequence_number: int) -> str:
    """Render the ``<prefix> <n>`` naming convention."""
    return f"{prefix} {sequence_number}"


def parse_sequence_number(name: str, prefix: str) -> int:
    """Extract the sequence number from *name*.

    Raises:
        MalformedNameError: the remainder after ``prefix + " "`` is not an integer.
    """
    suffix = name.replace(f"{prefix} ", "")
    try:
        return int(suffix)
    except ValueError:
        msg = f"Iteration name {name!r} does not match '{prefix} <number>'"
        raise MalformedNameError(msg, detail={"name": name, "prefix": prefix}) from None


def next_sequence_number(prior_name: str, prefix: str) -> int:
    """Sequence number of the iteration following *prior_name*."""
    return parse_sequence_number(prior_name, prefix) + 1
