from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from postrefresh.filters.outlets import MediaOutlet


class OutletRecordError(Exception):
    """Raised when an outlet records file cannot be turned into outlets."""


def load_outlet_records(path: str | Path) -> list[MediaOutlet]:
    """Read a JSON list of outlet objects as exported from the media table."""

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise OutletRecordError(f"cannot read outlet records file {path}") from exc
    except json.JSONDecodeError as exc:
        raise OutletRecordError(f"outlet records file {path} is not valid JSON") from exc

    if not isinstance(raw, list):
        raise OutletRecordError(f"outlet records file {path} must contain a JSON list")

    outlets: list[MediaOutlet] = []
    for index, record in enumerate(raw):
        if not isinstance(record, Mapping):
            raise OutletRecordError(f"outlet records file {path} item {index} is not an object: {record!r}")
        outlets.append(MediaOutlet.from_record(record))
    return outlets
