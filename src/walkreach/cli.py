"""
WalkReach CLI entrypoint.

This CLI is intended for quick local demos and debugging without a map UI.
It delegates all search logic to `walkreach.session.SearchSession`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from walkreach.catalog.loader import CandidateStore
from walkreach.config.settings import Settings, get_settings
from walkreach.core.logging import configure_logging
from walkreach.domain.models import TravelMode
from walkreach.search.orchestrator import SearchPhase
from walkreach.session import SearchSession


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _build_session(settings: Settings, args: argparse.Namespace) -> SearchSession:
    return SearchSession(
        settings,
        mode=TravelMode(args.mode) if getattr(args, "mode", None) else None,
        minutes=getattr(args, "minutes", None),
    )


async def _run_search(settings: Settings, args: argparse.Namespace) -> int:
    async with _build_session(settings, args) as session:
        state = await session.submit(args.address)

    if state is None or state.phase is not SearchPhase.DONE or state.result is None:
        message = state.message if state is not None else None
        print(message or "Search did not complete.", file=sys.stderr)
        return 1

    result = state.result
    if args.geojson:
        print(json.dumps(result.to_feature_collection(), ensure_ascii=False, indent=2))
        return 0
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    print(f"Address: {result.resolved_address.label}")
    print(f"Within {result.minutes} min ({result.mode.value}): {len(result.ranked)} found")
    if result.is_empty:
        print("  No facilities found within reach of this address.")
    for i, item in enumerate(result.ranked, start=1):
        print(f"{i:>2}. {item.name}  ~{item.formatted_distance} away  [{item.id}]")
        if item.facility.address:
            print(f"    {item.facility.address}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    return asyncio.run(_run_search(get_settings(), args))


async def _run_suggest(settings: Settings, args: argparse.Namespace) -> int:
    async with _build_session(settings, args) as session:
        suggestions = await session.geocoder.suggest(args.text, args.limit)
    if not suggestions:
        print("No suggestions.", file=sys.stderr)
        return 1
    for s in suggestions:
        print(f"{s.primary_text}  |  {s.secondary_text}" if s.secondary_text else s.primary_text)
    return 0


def _cmd_suggest(args: argparse.Namespace) -> int:
    """Handle the `suggest` subcommand."""
    return asyncio.run(_run_suggest(get_settings(), args))


def _cmd_catalog(_: argparse.Namespace) -> int:
    """Handle the `catalog` subcommand."""
    store = CandidateStore.from_settings(get_settings())
    for f in store.all_facilities():
        c = f.coordinate
        print(f"{f.id}: {f.name} ({c.latitude:.5f}, {c.longitude:.5f})")
    print(f"{len(store)} facilities")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the WalkReach CLI."""
    parser = argparse.ArgumentParser(prog="walkreach")
    parser.add_argument("--log-level", default=None, help="Override the configured log level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="List facilities reachable from an address, nearest first.")
    s.add_argument("address")
    s.add_argument("--minutes", type=_positive_int, default=None, help="Travel-time budget (default from config)")
    s.add_argument("--mode", choices=[m.value for m in TravelMode], default=None)
    out = s.add_mutually_exclusive_group()
    out.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    out.add_argument("--geojson", action="store_true", help="Output a GeoJSON FeatureCollection")
    s.set_defaults(func=_cmd_search)

    sg = sub.add_parser("suggest", help="Autocomplete suggestions for partial address input.")
    sg.add_argument("text")
    sg.add_argument("--limit", type=_positive_int, default=None)
    sg.set_defaults(func=_cmd_suggest)

    c = sub.add_parser("catalog", help="List the facilities in the configured catalogue.")
    c.set_defaults(func=_cmd_catalog)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m walkreach.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
