from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Any

from walkreach.catalog.loader import load_facilities, parse_facilities, slugify
from walkreach.core.env import resolve_project_path


DETAIL_FIELDS = ["address", "website"]


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def import_rows_from_csv(path: Path) -> list[dict[str, Any]]:
    out = []
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            if isinstance(row, dict):
                out.append(row)
    return out


def import_rows_from_json(path: Path) -> list[dict[str, Any]]:
    payload = _read_json(path)
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    raise ValueError("Unsupported JSON shape: expected an array of objects.")


def _as_float(v: Any) -> float | None:
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def row_to_entry(r: dict[str, Any], args: argparse.Namespace) -> dict[str, Any] | None:
    """Map one input row to a catalogue entry; None if it lacks a name or valid coordinates."""
    name = str(r.get(args.name_field) or "").strip()
    lat = _as_float(r.get(args.lat_field))
    lng = _as_float(r.get(args.lng_field))
    if not name or lat is None or lng is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None

    entry: dict[str, Any] = {"name": name, "lat": lat, "lng": lng}
    fac_id = str(r.get(args.id_field) or "").strip()
    if fac_id:
        entry["id"] = fac_id
    for k in DETAIL_FIELDS:
        v = r.get(k)
        if isinstance(v, str) and v.strip():
            entry[k] = v.strip()
    return entry


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Import facilities from a local CSV/JSON export into a catalogue file.")
    p.add_argument("--catalog", type=str, default="data/facilities.json")
    p.add_argument("--in-csv", type=str, default=None)
    p.add_argument("--in-json", type=str, default=None)
    p.add_argument("--merge", choices=["keep-existing", "overwrite", "replace"], default="keep-existing")
    p.add_argument("--id-field", type=str, default="id")
    p.add_argument("--name-field", type=str, default="name")
    p.add_argument("--lat-field", type=str, default="lat")
    p.add_argument("--lng-field", type=str, default="lng")
    args = p.parse_args(argv)

    if bool(args.in_csv) == bool(args.in_json):
        raise SystemExit("Provide exactly one of --in-csv or --in-json.")

    catalog_path = resolve_project_path(args.catalog)
    existing: dict[str, dict[str, Any]] = {}
    if catalog_path.exists() and args.merge != "replace":
        for f in load_facilities(catalog_path):
            existing[f.id] = f.model_dump(mode="json", exclude_none=True)

    rows = (
        import_rows_from_csv(resolve_project_path(args.in_csv))
        if args.in_csv
        else import_rows_from_json(resolve_project_path(args.in_json))
    )

    added = 0
    updated = 0
    skipped = 0
    bad = 0

    for r in rows:
        entry = row_to_entry(r, args)
        if entry is None:
            bad += 1
            continue
        fac_id = entry.setdefault("id", slugify(entry["name"]))
        if fac_id in existing:
            if args.merge == "keep-existing":
                skipped += 1
                continue
            updated += 1
        else:
            added += 1
        existing[fac_id] = entry

    payload = list(existing.values())
    # Validate before writing so a bad merge never replaces a good catalogue.
    parse_facilities(payload)
    _write_json(catalog_path, payload)

    print(
        f"catalog={catalog_path} total={len(payload)} added={added} updated={updated} skipped={skipped} bad={bad}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
