from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# outlets that never reported an update are treated as very old
MISSING_UPDATED_TIME_EPOCH = 1_100_000_000


@dataclass(frozen=True, slots=True)
class MediaOptions:
    local_percentage: Any = None
    country: str | None = None


@dataclass(frozen=True, slots=True)
class MediaOutlet:
    """Read-only view of an outlet record as handed to the eligibility filters."""

    id: int | str
    name: str | None = None
    category: str | None = None
    country: str | None = None
    is_active: bool = False
    updated_time: int | None = None
    local_percentage: Any = None
    options: MediaOptions | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> MediaOutlet:
        raw_options = record.get("mediumOptions", record.get("options"))
        options: MediaOptions | None = None
        if isinstance(raw_options, MediaOptions):
            options = raw_options
        elif isinstance(raw_options, Mapping):
            options = MediaOptions(
                local_percentage=raw_options.get("local_percentage"),
                country=_as_text(raw_options.get("country")),
            )

        return cls(
            id=_first_present(record, "id_medio", "id"),
            name=_as_text(record.get("name")),
            category=_as_text(_first_present(record, "schema", "category")),
            country=_as_text(record.get("country")),
            is_active=record.get("is_active") is True,
            updated_time=_as_epoch(record.get("updated_time")),
            local_percentage=record.get("local_percentage"),
            options=options,
        )


def resolve_local_percentage(outlet: MediaOutlet) -> float:
    """Direct value, then the options value; unbounded when neither is a finite number."""

    if _is_finite_number(outlet.local_percentage):
        return float(outlet.local_percentage)
    if outlet.options is not None and _is_finite_number(outlet.options.local_percentage):
        return float(outlet.options.local_percentage)
    return math.inf


def resolve_country(outlet: MediaOutlet) -> str | None:
    if outlet.country:
        return outlet.country
    if outlet.options is not None:
        return outlet.options.country
    return outlet.country


def resolve_updated_time(outlet: MediaOutlet) -> int:
    if not outlet.updated_time:
        return MISSING_UPDATED_TIME_EPOCH
    return outlet.updated_time


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _as_epoch(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)
