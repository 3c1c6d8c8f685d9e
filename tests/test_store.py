import json

import pytest
from openpyxl import load_workbook

from dogwatcher.models import Listing, SiteConfig
from dogwatcher.store import SnapshotStore, resolve_data_dir


def make_site(site_id: str) -> SiteConfig:
    return SiteConfig(
        id=site_id,
        name=f"Rescue {site_id}",
        url=f"https://example.org/{site_id}",
        list_item_selector=".dog",
        name_selector=".name",
        url_selector="a",
    )


def test_resolve_data_dir_handles_relative(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert resolve_data_dir("./data") == tmp_path / "data"


def test_resolve_data_dir_rejects_empty():
    with pytest.raises(ValueError):
        resolve_data_dir("")


def test_load_returns_empty_on_first_run(tmp_path, caplog):
    store = SnapshotStore(directory=tmp_path / "missing")

    with caplog.at_level("INFO"):
        assert store.load("site-a") == []
    assert "first run" in caplog.text


def test_save_then_load_preserves_order(tmp_path):
    store = SnapshotStore(directory=tmp_path / "data")
    listings = [
        Listing(name="Rex – RESERVED", url="https://example.org/rex"),
        Listing(name="Bella", url="URL not found"),
    ]

    store.save("site-a", listings)

    path = tmp_path / "data" / "last_seen_dogs_site-a.json"
    assert path.exists()
    raw = path.read_text(encoding="utf-8")
    assert json.loads(raw) == [
        {"name": "Rex – RESERVED", "url": "https://example.org/rex"},
        {"name": "Bella", "url": "URL not found"},
    ]
    assert "– RESERVED" in raw
    assert raw.startswith("[\n  {")
    assert store.load("site-a") == listings


def test_load_rejects_malformed_file(tmp_path):
    store = SnapshotStore(directory=tmp_path)
    store.path_for("bad").write_text(json.dumps({"name": "Rex"}), encoding="utf-8")

    with pytest.raises(ValueError):
        store.load("bad")

    store.path_for("bad").write_text(json.dumps([{"url": "/rex"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        store.load("bad")


def test_export_to_xlsx(tmp_path):
    store = SnapshotStore(directory=tmp_path / "data")
    store.save("site-a", [
        Listing(name="Rex", url="/rex"),
        Listing(name="Fido – RESERVED", url="/fido"),
    ])

    export_path = tmp_path / "exports" / "dogs.xlsx"
    store.export_to_xlsx(export_path, [make_site("site-a"), make_site("site-b")])

    workbook = load_workbook(export_path)
    assert workbook.sheetnames == ["site-a", "site-b"]
    rows = [[cell.value for cell in row] for row in workbook["site-a"].iter_rows()]
    assert rows == [
        ["name", "url", "reserved"],
        ["Rex", "/rex", False],
        ["Fido – RESERVED", "/fido", True],
    ]
    assert workbook["site-b"].max_row == 1


def test_load_rejects_non_string_name(tmp_path):
    store = SnapshotStore(directory=tmp_path)
    store.path_for("nulls").write_text(json.dumps([{"name": None, "url": "/rex"}]), encoding="utf-8")

    with pytest.raises(ValueError, match="malformed entry at index 0"):
        store.load("nulls")


def test_export_to_xlsx_sanitizes_and_dedupes_sheet_titles(tmp_path):
    store = SnapshotStore(directory=tmp_path / "data")
    long_prefix = "county-animal-shelter-downtown-"
    sites = [
        make_site("rescue:north"),
        make_site("a/b[1]*?"),
        make_site(long_prefix + "east"),
        make_site(long_prefix + "west"),
    ]
    store.save("rescue:north", [Listing(name="Rex", url="/rex")])

    export_path = tmp_path / "dogs.xlsx"
    store.export_to_xlsx(export_path, sites)

    workbook = load_workbook(export_path)
    assert workbook.sheetnames == [
        "rescue_north",
        "a_b_1___",
        (long_prefix + "e")[:31],
        long_prefix[:29] + "~2",
    ]
    assert [cell.value for cell in workbook["rescue_north"][2]] == ["Rex", "/rex", False]
