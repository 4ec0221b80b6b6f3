"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, iterctl.toml only contains
overrides. A working setup needs [azure_devops] uri and token plus the
``projects`` list.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, SecretStr


class AzureDevOpsConfig(BaseModel):
    """[azure_devops] section."""

    model_config = {"frozen": True}

    uri: str = ""
    personal_access_token: SecretStr = SecretStr("")
    api_version: str = "7.1"
    timeout: float = Field(default=30.0, gt=0)


class CalendarConfig(BaseModel):
    """[calendar] section."""

    model_config = {"frozen": True}

    iterations_to_create: int = Field(default=4, gt=0)
    iteration_name_prefix: str = "Sprint"
    iteration_length: int = Field(default=14, gt=0)
    bootstrap_start_date: date | None = None
