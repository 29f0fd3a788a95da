from __future__ import annotations

import math
import re
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from postrefresh.planner.windows import HOURS_PER_DAY

SINGLE_POST_RE = re.compile(r"(\d+)_(\d+)", re.ASCII)
WINDOW_FIELDS = ("created_since", "created_until", "updated_until", "diagnosis_until")

MediaId = Annotated[int, Field(gt=0, strict=True)]
PageLimit = Annotated[int, Field(ge=1, strict=True)]
DayCount = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class InvalidRequestError(ValueError):
    """Raised when a selection request cannot be turned into a query."""


def is_single_post_id(post_id: Any) -> bool:
    return isinstance(post_id, str) and SINGLE_POST_RE.fullmatch(post_id) is not None


class SelectionRequest(BaseModel):
    """One refresh batch: which outlets, which page and which time windows (in days).

    A ``post_id`` of the form ``<media_id>_<post_id>`` targets one post and every
    other field is dropped unvalidated. Batch requests need ``limit`` and all windows.
    """

    media_ids: tuple[MediaId, ...] = ()
    limit: PageLimit | None = None
    offset: int = Field(default=0, ge=0, strict=True)
    created_since: DayCount | None = None
    created_until: DayCount | None = None
    updated_until: DayCount | None = None
    diagnosis_until: DayCount | None = None
    without_interactions: bool = False
    post_id: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _drop_fields_for_single_post(cls, data: Any) -> Any:
        if isinstance(data, dict) and is_single_post_id(data.get("post_id")):
            return {"post_id": data["post_id"]}
        return data

    @field_validator("media_ids")
    @classmethod
    def _dedupe_media_ids(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(dict.fromkeys(value))

    @field_validator(*WINDOW_FIELDS)
    @classmethod
    def _fits_in_hours(cls, value: float | None) -> float | None:
        if value is not None and not math.isfinite(value * HOURS_PER_DAY):
            raise ValueError("day count is too large to convert to hours")
        return value

    @model_validator(mode="after")
    def _require_batch_fields(self) -> SelectionRequest:
        if is_single_post_id(self.post_id):
            return self
        missing = [name for name in ("limit", *WINDOW_FIELDS) if getattr(self, name) is None]
        if missing:
            raise ValueError(f"batch selection requires {', '.join(missing)}")
        return self


def build_selection_request(**values: Any) -> SelectionRequest:
    try:
        return SelectionRequest(**values)
    except ValidationError as exc:
        raise InvalidRequestError(_describe_errors(exc)) from exc


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "request"
        parts.append(f"{location}: {error.get('msg')}")
    return "invalid selection request: " + "; ".join(parts)
