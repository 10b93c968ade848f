import argparse
import asyncio
import json
import random
import sys
from pathlib import Path

from dotenv import load_dotenv

from zambezi_expedition.clock import PeriodicTicker, advance
from zambezi_expedition.config import load_settings, setup_file_logging
from zambezi_expedition.data.export import export_telemetry, non_negative_int
from zambezi_expedition.engine import ExpeditionEngine, ExpeditionSession
from zambezi_expedition.logbook import open_file_store
from zambezi_expedition.models import LOG_ICONS, ExpeditionLogEntry, ProgressState
from zambezi_expedition.simulator import default_route_data, default_route_path, load_route_data


def _entry_payload(entry: ExpeditionLogEntry) -> dict:
    return entry.model_dump(mode="json", by_alias=True)


def _build_engine(args: argparse.Namespace) -> ExpeditionEngine:
    route_path = Path(args.route)
    route_data = load_route_data(route_path) if route_path.exists() else default_route_data()
    settings = load_settings()
    return ExpeditionEngine(route_data=route_data, rng=random.Random(args.seed), settings=settings)


def _cmd_run(args: argparse.Namespace) -> int:
    session = ExpeditionSession(_build_engine(args))

    def emit() -> None:
        payload = session.snapshot().to_dict()
        if not args.with_history:
            payload.pop("history")
        print(json.dumps(payload), flush=True)

    def on_tick() -> None:
        session.tick()
        emit()

    emit()
    if args.follow:
        ticker = PeriodicTicker(
            on_tick,
            interval_ms=session.engine.settings.tick_interval_ms,
            max_ticks=args.ticks,
        )
        try:
            asyncio.run(ticker.run())
        except KeyboardInterrupt:
            pass
        return 0

    for _ in range(args.ticks):
        on_tick()
    return 0


def _cmd_logs_add(args: argparse.Namespace) -> int:
    engine = _build_engine(args)
    progress = ProgressState()
    for _ in range(args.tick):
        progress = advance(progress, engine.settings.progress_step)
    position, _distance_km = engine.position_at(progress.progress_fraction)

    store = open_file_store(Path(args.store) if args.store else load_settings().log_store_path)
    entry = store.create(args.title, args.body, args.icon, position)
    if entry is None:
        print("Log title must not be empty.", file=sys.stderr)
        return 1
    print(json.dumps(_entry_payload(entry)))
    return 0


def _cmd_logs_list(args: argparse.Namespace) -> int:
    store = open_file_store(Path(args.store) if args.store else load_settings().log_store_path)
    print(json.dumps([_entry_payload(entry) for entry in store.entries], indent=2))
    return 0


def _cmd_logs_show(args: argparse.Namespace) -> int:
    store = open_file_store(Path(args.store) if args.store else load_settings().log_store_path)
    entry = store.find_by_id(args.id)
    if entry is None:
        print(f"No log entry with id {args.id}", file=sys.stderr)
        return 1
    print(json.dumps(_entry_payload(entry), indent=2))
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    print(export_telemetry(Path(args.out), ticks=args.ticks, engine=_build_engine(args)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Zambezi source expedition telemetry simulator.")
    parser.add_argument("--route", default=str(default_route_path()), help="Path to a route JSON file.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the signal jitter.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Print one JSON snapshot per tick.")
    run.add_argument("--ticks", type=non_negative_int, default=10, help="Ticks to simulate after the initial snapshot.")
    run.add_argument("--follow", action="store_true", help="Tick on the real clock interval.")
    run.add_argument("--with-history", action="store_true", help="Include the rolling history in output.")
    run.set_defaults(func=_cmd_run)

    logs = sub.add_parser("logs", help="Manage expedition log entries.")
    logs.add_argument("--store", default=None, help="Path to the key-value store file.")
    logs_sub = logs.add_subparsers(dest="logs_command", required=True)

    add = logs_sub.add_parser("add", help="Create a log entry at the position reached after --tick ticks.")
    add.add_argument("--title", required=True)
    add.add_argument("--body", default="")
    add.add_argument("--icon", choices=LOG_ICONS, default="note")
    add.add_argument("--tick", type=non_negative_int, default=0)
    add.set_defaults(func=_cmd_logs_add)

    ls = logs_sub.add_parser("list", help="List entries, newest first.")
    ls.set_defaults(func=_cmd_logs_list)

    show = logs_sub.add_parser("show", help="Show one entry by id.")
    show.add_argument("id")
    show.set_defaults(func=_cmd_logs_show)

    export = sub.add_parser("export", help="Write a telemetry trace to CSV.")
    export.add_argument("--ticks", type=non_negative_int, default=60)
    export.add_argument("--out", default="outputs/telemetry.csv")
    export.set_defaults(func=_cmd_export)
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        parser.error(str(exc))
    setup_file_logging(settings.log_dir)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
