from __future__ import annotations

import math
from dataclasses import dataclass

HOURS_PER_DAY = 24


@dataclass(frozen=True, slots=True)
class HourWindows:
    created_since: int
    created_until: float
    updated_until: float
    diagnosis_until: float

    def as_dict(self) -> dict[str, float]:
        return {
            "created_since": self.created_since,
            "created_until": self.created_until,
            "updated_until": self.updated_until,
            "diagnosis_until": self.diagnosis_until,
        }


def to_hour_windows(
    *,
    created_since: float,
    created_until: float,
    updated_until: float,
    diagnosis_until: float,
) -> HourWindows:
    # only the "since" boundary is rounded up; the others keep fractional hours
    return HourWindows(
        created_since=math.ceil(created_since * HOURS_PER_DAY),
        created_until=created_until * HOURS_PER_DAY,
        updated_until=updated_until * HOURS_PER_DAY,
        diagnosis_until=diagnosis_until * HOURS_PER_DAY,
    )
