from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
)
from pydantic.types import PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import TomlConfigSettingsSource

from .config import ConfigError
from .constants import (
    DEFAULT_USER_AGENT,
    HOME_CONFIG_PATH,
    STICKER_MAX_ATTEMPTS,
    STICKER_MAX_BYTES,
)
from .encoding import StickerOptions

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class HttpSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    timeout_s: PositiveFloat = 30.0
    upload_timeout_s: PositiveFloat = 60.0
    user_agent: NonEmptyStr = DEFAULT_USER_AGENT


class StickerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    pack_name: str = "mediafetch"
    author_name: str = ""
    max_bytes: PositiveInt = STICKER_MAX_BYTES
    quality: int = Field(default=90, ge=1, le=100)
    frame_rate: PositiveInt = 30
    max_duration_s: PositiveInt = 10
    max_attempts: PositiveInt = STICKER_MAX_ATTEMPTS

    def options(self) -> StickerOptions:
        return StickerOptions(
            quality=self.quality,
            frame_rate=self.frame_rate,
            max_duration_s=self.max_duration_s,
            pack_name=self.pack_name,
            author_name=self.author_name,
        )


class ProvidersSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    disabled: list[NonEmptyStr] = Field(default_factory=list)

    @field_validator("disabled")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class MediafetchSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="forbid",
        env_prefix="MEDIAFETCH__",
        env_nested_delimiter="__",
        str_strip_whitespace=True,
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    sticker: StickerSettings = Field(default_factory=StickerSettings)
    providers: ProvidersSettings = Field(default_factory=ProvidersSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(
    path: str | Path | None = None,
) -> tuple[MediafetchSettings, Path]:
    cfg_path = _resolve_config_path(path)
    if cfg_path.exists() and not cfg_path.is_file():
        raise ConfigError(f"Config path {cfg_path} exists but is not a file.") from None
    if not cfg_path.exists():
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    return _load_settings_from_path(cfg_path), cfg_path


def load_settings_if_exists(
    path: str | Path | None = None,
) -> tuple[MediafetchSettings, Path] | None:
    cfg_path = _resolve_config_path(path)
    if not cfg_path.exists():
        return None
    return load_settings(cfg_path)


def validate_settings_data(
    data: dict[str, Any], *, config_path: Path
) -> MediafetchSettings:
    try:
        return MediafetchSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc


def _resolve_config_path(path: str | Path | None) -> Path:
    return Path(path).expanduser() if path else HOME_CONFIG_PATH


def _load_settings_from_path(cfg_path: Path) -> MediafetchSettings:
    cfg = dict(MediafetchSettings.model_config)
    cfg["toml_file"] = cfg_path
    Bound = type(
        "MediafetchSettingsBound",
        (MediafetchSettings,),
        {"model_config": SettingsConfigDict(**cfg)},
    )
    try:
        return Bound()
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {cfg_path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {exc}") from None
