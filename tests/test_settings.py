from __future__ import annotations

from pathlib import Path

import pytest

from mediafetch.config import ConfigError
from mediafetch.encoding import StickerOptions
from mediafetch.settings import (
    MediafetchSettings,
    load_settings,
    load_settings_if_exists,
    validate_settings_data,
)


def test_load_settings_from_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "mediafetch.toml"
    config_path.write_text(
        "[http]\n"
        "timeout_s = 12.5\n\n"
        "[sticker]\n"
        'pack_name = "pack"\n'
        "quality = 80\n\n"
        "[providers]\n"
        'disabled = ["tikwm", "catbox", "tikwm"]\n',
        encoding="utf-8",
    )

    settings, loaded_path = load_settings(config_path)

    assert loaded_path == config_path
    assert settings.http.timeout_s == 12.5
    assert settings.http.upload_timeout_s == 60.0
    assert settings.sticker.pack_name == "pack"
    assert settings.providers.disabled == ["tikwm", "catbox"]
    assert settings.sticker.options() == StickerOptions(
        quality=80, frame_rate=30, max_duration_s=10, pack_name="pack"
    )


def test_env_overrides_toml(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "mediafetch.toml"
    config_path.write_text("[http]\ntimeout_s = 12\n", encoding="utf-8")
    monkeypatch.setenv("MEDIAFETCH__HTTP__TIMEOUT_S", "5")

    settings, _ = load_settings(config_path)

    assert settings.http.timeout_s == 5


def test_defaults_without_config() -> None:
    settings = MediafetchSettings()

    assert settings.sticker.max_bytes == 1024 * 1024
    assert settings.sticker.max_attempts == 4
    assert settings.providers.disabled == []


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "mediafetch.toml"
    config_path.write_text("[http]\nretries = 3\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="retries"):
        load_settings(config_path)


def test_malformed_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "mediafetch.toml"
    config_path.write_text("[http\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Malformed TOML"):
        load_settings(config_path)


def test_missing_config(tmp_path: Path) -> None:
    config_path = tmp_path / "missing.toml"

    assert load_settings_if_exists(config_path) is None
    with pytest.raises(ConfigError, match="Missing config file"):
        load_settings(config_path)


def test_config_path_must_be_a_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not a file"):
        load_settings(tmp_path)


@pytest.mark.parametrize(
    "data",
    [
        {"sticker": {"quality": 0}},
        {"http": {"timeout_s": -1}},
        {"http": {"user_agent": "  "}},
        {"providers": {"disabled": [""]}},
    ],
)
def test_validate_settings_data_rejects_bad_values(tmp_path: Path, data: dict) -> None:
    config_path = tmp_path / "mediafetch.toml"

    with pytest.raises(ConfigError, match="Invalid config"):
        validate_settings_data(data, config_path=config_path)
