"""IterSettings: everything one run needs, resolved from four layers.

Highest priority first: CLI flags, ``ITERCTL_*`` environment variables
(``__`` separates nested sections), the TOML file, and the section
defaults in :mod:`iterctl.config.models`.

Examples::

    ITERCTL_AZURE_DEVOPS__PERSONAL_ACCESS_TOKEN=... iterctl sync
    ITERCTL_PROJECTS='["Web", "Mobile"]' iterctl plan
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
)

from iterctl.config.discovery import resolve_config
from iterctl.config.models import AzureDevOpsConfig, CalendarConfig
from iterctl.domain.errors import ConfigurationError


class IterSettings(BaseSettings):
    """Settings for one iterctl run.

    Frozen after construction and passed explicitly to whatever needs it;
    there is no module-level settings instance.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        projects: Azure DevOps projects to keep populated, in order.
        keep_going: Continue with the next project after a fatal error.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ITERCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # output / logging flags
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    projects: list[str] = Field(default_factory=list)
    keep_going: bool = False

    azure_devops: AzureDevOpsConfig = Field(default_factory=AzureDevOpsConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # The TOML file to read is the one the caller passed as config_path.
        init_kwargs: dict[str, Any] = getattr(init_settings, "init_kwargs", {})
        toml_file = init_kwargs.get("config_path")
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> IterSettings:
        """Build settings for a CLI invocation.

        Pass only the flags the user actually gave; anything passed here
        outranks the environment and the TOML file. Every configuration
        problem is reported as a :class:`click.ClickException`.
        """
        try:
            toml_file = resolve_config(config_path, start)
        except ConfigurationError as exc:
            raise click.ClickException(exc.message) from exc
        try:
            return cls(config_path=toml_file, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_file}: {exc}") from exc
        except ValidationError as exc:
            source = toml_file or "environment"
            raise click.ClickException(f"Invalid configuration ({source}): {exc}") from exc
