"""
AirScope command line.

Subcommands:
- compute:  AQI for concentrations given on the command line
- collect:  record a snapshot for a location every interval into SQLite
- trend:    summary of stored history
- train:    fit the forecast/anomaly models on stored history
- forecast: print the AQI forecast from stored history
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

from aqi import PollutantReading, compute_aqi
from breakpoints import POLLUTANT_INFO, POLLUTANTS
from database import Database
from forecast import forecast_aqi, summarize_trend, train_models
from settings import get_settings
from snapshot import resolve_snapshot
from synthetic import PollutantSynthesizer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()

    p = argparse.ArgumentParser(description="AirScope air quality index tools")
    p.add_argument("--db", default=settings.DB_PATH, help="SQLite DB path")
    p.add_argument("--model-dir", default=settings.MODEL_DIR, help="Directory for trained models")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    p.add_argument("--trace", action="store_true", default=settings.TRACE, help="Log per-pollutant calculations")
    sub = p.add_subparsers(dest="command", required=True)

    compute = sub.add_parser("compute", help="Compute AQI from concentrations")
    for name in POLLUTANTS:
        info = POLLUTANT_INFO[name]
        compute.add_argument(f"--{name}", type=float, default=0.0, help=f"{info.description} ({info.unit})")

    collect = sub.add_parser("collect", help="Record synthetic snapshots for a location")
    collect.add_argument("--lat", type=float, required=True)
    collect.add_argument("--lng", type=float, required=True)
    collect.add_argument("--name", default="Unknown Location", help="Location name")
    collect.add_argument("--interval", type=float, default=900.0, help="Sampling interval (seconds)")
    collect.add_argument("--count", type=int, default=0, help="Stop after N snapshots (0 = run forever)")

    sub.add_parser("trend", help="Summarize stored history")
    sub.add_parser("train", help="Train forecast and anomaly models")

    fc = sub.add_parser("forecast", help="Forecast AQI from stored history")
    fc.add_argument("--hours", type=int, default=24, help="Forecast horizon (hours)")
    fc.add_argument("--step", type=int, default=60, help="Forecast step (minutes)")

    return p.parse_args(argv)


def _compute(args: argparse.Namespace) -> int:
    reading = PollutantReading(**{name: getattr(args, name) for name in POLLUTANTS})
    result = compute_aqi(reading, trace=args.trace)
    for name, value in result.sub_indices.items():
        print(f"{POLLUTANT_INFO[name].name:>6}: {getattr(reading, name):g} {POLLUTANT_INFO[name].unit} -> {value}")
    print(f"AQI {result.aqi} ({result.category.label}, dominant: {POLLUTANT_INFO[result.dominant].name})")
    return 0


def _collect(args: argparse.Namespace, db: Database) -> int:
    synthesizer = PollutantSynthesizer()
    logging.info("Collecting snapshots for %s every %.1fs -> %s", args.name, args.interval, args.db)
    collected = 0
    try:
        while True:
            snapshot = resolve_snapshot(args.lat, args.lng, args.name, None, synthesizer=synthesizer)
            db.insert_snapshot(snapshot)
            collected += 1

            r = snapshot.reading
            logging.info(
                "PM2.5=%.0f PM10=%.0f NO2=%.0f SO2=%.0f CO=%.1f O3=%.0f | AQI=%d (%s) [%s]",
                r.pm25, r.pm10, r.no2, r.so2, r.co, r.o3,
                snapshot.aqi,
                snapshot.result.category.label,
                snapshot.source,
            )
            if args.count and collected >= args.count:
                break
            time.sleep(max(0.1, float(args.interval)))
    except KeyboardInterrupt:
        logging.info("Stopped.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    if args.trace:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "compute":
        return _compute(args)

    db = Database(args.db)
    db.initialize()

    try:
        if args.command == "collect":
            return _collect(args, db)

        rows = db.fetch_latest(limit=10_000)
        if args.command == "trend":
            summary = summarize_trend(rows)
            print(
                f"{summary.count} snapshots | avg AQI {summary.average} ({summary.category}) "
                f"| max {summary.maximum} | min {summary.minimum}"
            )
        elif args.command == "train":
            report = train_models(rows, model_dir=args.model_dir)
            print(f"Trained on {report.rows_used} rows | MAE={report.mae:.2f}")
        elif args.command == "forecast":
            pred = forecast_aqi(rows, horizon_hours=args.hours, step_minutes=args.step, model_dir=args.model_dir)
            for row in pred.itertuples(index=False):
                print(f"{row.ts.isoformat()}  AQI {row.pred_aqi:5.0f}  {row.category:<30} {row.confidence}% confidence")
    except (ValueError, FileNotFoundError) as e:
        logging.error("%s failed: %s", args.command, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
