import json
from pathlib import Path

import pytest

from postrefresh.services.outlet_records import OutletRecordError, load_outlet_records


def test_load_outlet_records_builds_outlets(tmp_path: Path) -> None:
    path = tmp_path / "outlets.json"
    path.write_text(
        json.dumps([{"id_medio": "5", "is_active": True}, {"id": 6, "mediumOptions": {"country": "CL"}}]),
        encoding="utf-8",
    )

    outlets = load_outlet_records(path)

    assert [outlet.id for outlet in outlets] == ["5", 6]
    assert outlets[0].is_active is True
    assert outlets[1].options is not None
    assert outlets[1].options.country == "CL"


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("not json", "not valid JSON"),
        ('{"id_medio": 5}', "must contain a JSON list"),
        ("[1, 2]", "item 0 is not an object"),
        ('[{"id_medio": 5}, "6"]', "item 1 is not an object"),
    ],
)
def test_load_outlet_records_rejects_bad_content(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "outlets.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(OutletRecordError, match=message):
        load_outlet_records(path)


def test_load_outlet_records_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OutletRecordError, match="cannot read"):
        load_outlet_records(tmp_path / "missing.json")
