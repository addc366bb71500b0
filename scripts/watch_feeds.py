"""Watch live SBS-1 feeds, or replay captures, and report the aggregated aircraft.

Usage examples:
    python scripts/watch_feeds.py -a localhost:30003,radar2.local:30003
    python scripts/watch_feeds.py --replay north.sbs --replay south.sbs --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from waxmoth.config import settings
from waxmoth.ingestors import FeedConnector
from waxmoth.services import AggregationEngine, AircraftRegistry, FeedService

logger = logging.getLogger("waxmoth.watch")


def _replay_source(path: Path):
    async def source():
        with path.open("rb") as handle:
            for line in handle:
                yield line

    return source


async def _report_loop(registry: AircraftRegistry, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        logger.info("Tracking %s aircraft", len(registry))


def _print_summary(registry: AircraftRegistry, as_json: bool) -> None:
    snapshots = registry.snapshot()
    if as_json:
        print(json.dumps([item.model_dump(mode="json") for item in snapshots], indent=2))
        return

    if not snapshots:
        print("No aircraft seen.")
        return

    for item in snapshots:
        position = (
            f"{item.position.latitude:.5f},{item.position.longitude:.5f}"
            if item.position
            else "n/a"
        )
        print(
            f"{item.icao}: callsign={item.call_sign or 'n/a'} alt={item.altitude}"
            f" gs={item.ground_speed} trk={item.track} squawk={item.squawk or 'n/a'}"
            f" pos={position} stations={','.join(item.stations)}"
            f" msgs={item.message_count} dups={item.duplicate_count}"
        )


async def run(args) -> int:
    registry = AircraftRegistry(
        dedup_window=settings.dedup_window,
        location_history_limit=settings.location_history_limit,
    )
    engine = AggregationEngine(registry)

    if args.replay:
        service = FeedService(engine)
        for replay in args.replay:
            path = Path(replay)
            if not path.is_file():
                sys.stderr.write(f"Replay file not found: {path}\n")
                return 1
            service.add_connector(
                FeedConnector(
                    address=f"replay:{path.name}",
                    sink=service.submit,
                    line_source=_replay_source(path),
                    stop_on_source=True,
                )
            )
        service.start()
        await service.join()
        await service.stop()
    else:
        addresses = [item.strip() for item in args.addresses.split(",") if item.strip()]
        service = FeedService(
            engine, stations=addresses, reconnect=not args.no_reconnect
        )
        service.start()
        reporter = asyncio.create_task(_report_loop(registry, args.interval))
        try:
            await service.join()
        finally:
            reporter.cancel()
            await service.stop()

    _print_summary(registry, args.json)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate SBS-1 feeds from one or more stations")
    parser.add_argument(
        "-a",
        "--addresses",
        default=",".join(settings.stations) or "localhost:30003",
        help="Comma separated list of host:port stations to connect to",
    )
    parser.add_argument(
        "--interval", type=float, default=30.0, help="Seconds between status log lines"
    )
    parser.add_argument(
        "--replay",
        action="append",
        help="Replay a captured SBS file instead of connecting (repeat for several stations)",
    )
    parser.add_argument(
        "--no-reconnect", action="store_true", help="Stop a feed after its first error"
    )
    parser.add_argument("--json", action="store_true", help="Print the final state as JSON")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        code = 0
    if code:
        raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
