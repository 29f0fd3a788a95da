from __future__ import annotations

import re
from datetime import datetime, timezone

LEANINGS = ("blanco", "derecha", "izquierda")
DEFAULT_LEANING = "blanco"

_ACCENT_MAP = str.maketrans(
    {
        **dict.fromkeys("ÀÁÂÃÄÅ", "A"),
        **dict.fromkeys("àáâãäå", "a"),
        **dict.fromkeys("ÈÉÊË", "E"),
        "é": "e",
        "Í": "I",
        "í": "i",
        "Ó": "O",
        "ó": "o",
        "Ú": "U",
        "ú": "u",
        "Ñ": "N",
        "ñ": "n",
    }
)
_SLUG_FOLD_MAP = str.maketrans("áéíóúüñ", "aeiouun")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def date_to_nice_text(value: datetime | float | int) -> str:
    """Format a datetime (or epoch milliseconds) as ``YYYY-MM-DD hh:mm:ss`` in UTC."""

    dt = _as_utc_datetime(value)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def to_pg_timestamp(value: datetime | float | int) -> str:
    """Format as a Postgres timestamptz literal: ``YYYY-MM-DD hh:mm:ss.fff+00``."""

    dt = _as_utc_datetime(value)
    return f"{dt.strftime('%Y-%m-%d %H:%M:%S')}.{dt.microsecond // 1000:03d}+00"


def normalize_leaning(value: object) -> str:
    lowered = str(value).lower()
    if lowered not in LEANINGS:
        return DEFAULT_LEANING
    return lowered


def normalize_category(value: str | None) -> str | None:
    return _underscore_slug(value or "") or None


def string_to_table_name(value: str | None) -> str:
    return _underscore_slug(value or "")


def clean_string(value: object) -> str:
    """Replace punctuation with underscores, fold Spanish accents and drop quotes."""

    cleaned = re.sub(r"[,.\-& ]", "_", str(value))
    cleaned = cleaned.replace('"', "")
    cleaned = cleaned.translate(_ACCENT_MAP)
    cleaned = re.sub(r"(__)+", "_", cleaned)
    return cleaned.replace("'", "")


def _underscore_slug(value: str) -> str:
    folded = value.lower().translate(_SLUG_FOLD_MAP)
    return _SLUG_RE.sub("_", folded).strip("_")


def _as_utc_datetime(value: datetime | float | int) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
