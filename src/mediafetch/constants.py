from __future__ import annotations

from pathlib import Path

HOME_CONFIG_PATH = Path.home() / ".mediafetch" / "mediafetch.toml"

STICKER_MAX_BYTES = 1024 * 1024
STICKER_MAX_ATTEMPTS = 4

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)
