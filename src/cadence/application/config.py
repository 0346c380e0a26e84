import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cadence.domain.constants import (
    DEFAULT_DAILY_CAP,
    DEFAULT_HOST,
    DEFAULT_NEW_CARD_CAP,
    DEFAULT_PORT,
)


def config_file_candidates() -> list[Path]:
    """Config file locations, highest priority first."""
    return [
        Path.home() / ".config/cadence/config.toml",
        Path.home() / ".cadence.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for cadence.
    Supports loading from:
    1. Config file (~/.config/cadence/config.toml or ~/.cadence.toml)
    2. Environment variables (CADENCE_*)
    3. Manual overrides (CLI / HTTP)
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        extra="ignore",
    )

    # Sessions
    daily_cap: int = Field(default=DEFAULT_DAILY_CAP, ge=0)
    new_card_cap: int = Field(default=DEFAULT_NEW_CARD_CAP, ge=0)

    # Server
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = None
        for f in config_file_candidates():
            if f.exists():
                toml_file = f
                break

        # Earlier sources take priority
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @property
    def effective_log_level(self) -> int:
        """Level for the cadence loggers; verbose >= 2 (-vv) forces DEBUG."""
        if self.verbose >= 2:
            return logging.DEBUG
        return logging.getLevelNamesMapping()[self.log_level]

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cadence/config.toml (if exists)
    3. Environment variables (CADENCE_*)
    4. cli_overrides (None values are dropped so they do not mask lower layers)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
