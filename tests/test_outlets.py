import math

from postrefresh.filters.outlets import (
    MISSING_UPDATED_TIME_EPOCH,
    MediaOptions,
    MediaOutlet,
    resolve_country,
    resolve_local_percentage,
    resolve_updated_time,
)


def test_from_record_reads_loosely_typed_outlet() -> None:
    outlet = MediaOutlet.from_record(
        {
            "id_medio": "123",
            "id": "ignored",
            "name": " El Diario ",
            "schema": "noticias",
            "country": "",
            "is_active": True,
            "updated_time": 1_650_000_000.7,
            "local_percentage": None,
            "mediumOptions": {"local_percentage": 72.5, "country": "CL"},
        }
    )

    assert outlet.id == "123"
    assert outlet.name == "El Diario"
    assert outlet.category == "noticias"
    assert outlet.country is None
    assert outlet.is_active is True
    assert outlet.updated_time == 1_650_000_000
    assert outlet.options == MediaOptions(local_percentage=72.5, country="CL")
    assert resolve_local_percentage(outlet) == 72.5
    assert resolve_country(outlet) == "CL"


def test_from_record_only_trusts_boolean_active_flag() -> None:
    outlet = MediaOutlet.from_record({"id": 9, "is_active": "true", "category": "radio"})

    assert outlet.id == 9
    assert outlet.is_active is False
    assert outlet.category == "radio"
    assert outlet.options is None


def test_local_percentage_precedence() -> None:
    assert resolve_local_percentage(MediaOutlet(id=1, local_percentage=40)) == 40.0
    assert resolve_local_percentage(
        MediaOutlet(id=1, local_percentage=40, options=MediaOptions(local_percentage=90))
    ) == 40.0
    assert resolve_local_percentage(
        MediaOutlet(id=1, local_percentage=math.inf, options=MediaOptions(local_percentage=90))
    ) == 90.0
    assert resolve_local_percentage(MediaOutlet(id=1, local_percentage="40")) == math.inf
    assert resolve_local_percentage(MediaOutlet(id=1)) == math.inf


def test_country_precedence() -> None:
    assert resolve_country(MediaOutlet(id=1, country="AR", options=MediaOptions(country="CL"))) == "AR"
    assert resolve_country(MediaOutlet(id=1, country=None, options=MediaOptions(country="CL"))) == "CL"
    assert resolve_country(MediaOutlet(id=1)) is None


def test_missing_updated_time_uses_sentinel_epoch() -> None:
    assert resolve_updated_time(MediaOutlet(id=1)) == MISSING_UPDATED_TIME_EPOCH
    assert resolve_updated_time(MediaOutlet(id=1, updated_time=0)) == MISSING_UPDATED_TIME_EPOCH
    assert resolve_updated_time(MediaOutlet(id=1, updated_time=1_600_000_000)) == 1_600_000_000
