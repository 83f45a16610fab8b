import importlib.util
import json
from pathlib import Path

from walkreach.catalog.loader import load_facilities

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "catalog_import.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("catalog_import", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_catalog_import_from_csv_skips_bad_rows(tmp_path):
    src = tmp_path / "schools.csv"
    src.write_text(
        "name,lat,lng,address,website\n"
        "Oak School,37.70,-122.40,1 Oak St,\n"
        "No Coords,,,2 Elm St,\n"
        "Bad Lat,95,-122.40,,\n"
        "Pine School,37.71,-122.41,,https://pine.test\n",
        encoding="utf-8",
    )
    catalog = tmp_path / "facilities.json"

    code = _load_script().main(["--catalog", str(catalog), "--in-csv", str(src)])

    assert code == 0
    facilities = load_facilities(catalog)
    assert [f.id for f in facilities] == ["oak-school", "pine-school"]
    assert facilities[0].address == "1 Oak St"
    assert facilities[1].website == "https://pine.test"


def test_catalog_import_keeps_existing_entries_by_default(tmp_path):
    catalog = tmp_path / "facilities.json"
    catalog.write_text(json.dumps([{"id": "oak", "name": "Oak (original)", "lat": 1, "lng": 1}]), encoding="utf-8")
    src = tmp_path / "update.json"
    src.write_text(json.dumps([{"id": "oak", "name": "Oak (new)", "lat": 2, "lng": 2}]), encoding="utf-8")
    module = _load_script()

    module.main(["--catalog", str(catalog), "--in-json", str(src)])
    assert load_facilities(catalog)[0].name == "Oak (original)"

    module.main(["--catalog", str(catalog), "--in-json", str(src), "--merge", "overwrite"])
    assert load_facilities(catalog)[0].name == "Oak (new)"
