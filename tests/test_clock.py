from datetime import datetime, timezone

from postrefresh.core.clock import ReferenceClock


def test_epoch_seconds_drop_fractional_part() -> None:
    clock = ReferenceClock.capture(datetime(2024, 1, 1, 0, 0, 0, 900_000, tzinfo=timezone.utc))

    assert clock.epoch_seconds == 1_704_067_200


def test_naive_datetimes_are_treated_as_utc() -> None:
    clock = ReferenceClock.capture(datetime(2024, 1, 1))

    assert clock.captured_at.tzinfo is timezone.utc
    assert clock.epoch_seconds == 1_704_067_200


def test_from_epoch_round_trips_whole_seconds() -> None:
    assert ReferenceClock.from_epoch(1_700_000_000).epoch_seconds == 1_700_000_000
