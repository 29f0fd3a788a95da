from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from postrefresh.core.config import Settings


class WhitelistError(Exception):
    """Raised when the configured whitelist file cannot be used."""


def load_media_id_whitelist(path: str | Path) -> tuple[int, ...]:
    """Read a JSON list of outlet ids, e.g. ``[10, 20, "30"]``."""

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise WhitelistError(f"cannot read whitelist file {path}") from exc
    except json.JSONDecodeError as exc:
        raise WhitelistError(f"whitelist file {path} is not valid JSON") from exc

    if not isinstance(raw, list):
        raise WhitelistError(f"whitelist file {path} must contain a JSON list")
    return tuple(dict.fromkeys(_as_media_id(item, path=path) for item in raw))


def configured_media_id_whitelist(settings: Settings) -> tuple[int, ...]:
    ids = list(settings.media_id_whitelist)
    if settings.media_id_whitelist_path:
        ids.extend(load_media_id_whitelist(settings.media_id_whitelist_path))
    return tuple(dict.fromkeys(ids))


def _as_media_id(value: Any, *, path: str | Path) -> int:
    if isinstance(value, bool):
        raise WhitelistError(f"whitelist file {path} contains a non-integer id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise WhitelistError(f"whitelist file {path} contains a non-integer id: {value!r}") from exc
