from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True, slots=True)
class ReferenceClock:
    """A single "now" captured at batch start and passed to time-relative filters."""

    captured_at: datetime

    @classmethod
    def capture(cls, now: datetime | None = None) -> ReferenceClock:
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return cls(captured_at=current)

    @classmethod
    def from_epoch(cls, epoch_seconds: float) -> ReferenceClock:
        return cls(captured_at=datetime.fromtimestamp(epoch_seconds, tz=timezone.utc))

    @property
    def epoch_seconds(self) -> int:
        # whole seconds; sub-second precision is dropped
        return int(self.captured_at.timestamp())
