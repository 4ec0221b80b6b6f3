"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import date, datetime


def today() -> date:
    """Today's local calendar date. Sampled once per run by callers."""
    return datetime.now().date()
