"""Download FR data for every FR in the input file and save it as JSON.

Run it once, or keep it running with ``--every HOURS`` so saved data older
than MAXIMUM_AGE days gets refreshed.
"""

import argparse
import dataclasses
import time
from pathlib import Path

import pandas as pd
import requests
import schedule

from frdownloader.batch import Outcome, run_batch
from frdownloader.cache_store import CacheStore
from frdownloader.config import Settings
from frdownloader.fetcher import Fetcher
from frdownloader.identifiers import read_identifiers
from frdownloader.rate_limit import RateLimiter
from frdownloader.utils_env import load_dotenv

SUMMARY_COLUMNS = ["fr", "normalized", "status", "path", "size"]


def summarize(outcomes: list[Outcome]) -> pd.DataFrame:
    """One row per FR of the run."""
    rows = [
        {
            "fr": o.fr,
            "normalized": o.normalized,
            "status": o.status.value,
            "path": str(o.path) if o.path is not None else "",
            "size": o.size,
        }
        for o in outcomes
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def run_update_once(
    settings: Settings,
    session: requests.Session | None = None,
    progress: bool = True,
    report_path: Path | None = None,
) -> pd.DataFrame:
    """Fetch every FR from the input file that is missing or too old."""
    store = CacheStore(settings.output_folder, settings.maximum_age, settings.cache_match)
    store.ensure_root()

    frs = read_identifiers(settings.input_file)
    print(f"[INFO] {len(frs)} FRs in {settings.input_file}, saving to {settings.output_folder}")
    print(f"[INFO] Interval between requests: {settings.interval:.2f} seconds.")

    limiter = RateLimiter(settings.interval)
    fetcher = Fetcher(limiter, session=session, timeout=settings.request_timeout)
    try:
        outcomes = run_batch(
            frs,
            settings.api_url,
            store,
            fetcher,
            workers=settings.workers,
            progress=progress,
        )
    finally:
        if session is None:
            fetcher.close()

    df = summarize(outcomes)
    print(f"[INFO] Done. {limiter.requests} requests made.")
    if not df.empty:
        print(df["status"].value_counts().to_string())
    if report_path is not None:
        report_path = Path(report_path)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(report_path, index=False)
        print(f"[INFO] Wrote run report to {report_path}")
    return df


def _guarded_run(settings: Settings, progress: bool, report_path: Path | None) -> None:
    try:
        run_update_once(settings, progress=progress, report_path=report_path)
    except OSError as e:
        print(f"[ERROR] Update failed: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Download FR data from the public API.")
    parser.add_argument("--env-file", type=str, default=".env", help="Path to the .env file")
    parser.add_argument("--input", type=str, help="File with one FR per line (overrides INPUT_FILE)")
    parser.add_argument("--output", type=str, help="Folder to save the data (overrides OUTPUT_FOLDER)")
    parser.add_argument("--workers", type=int, help="Parallel workers (overrides WORKERS)")
    parser.add_argument("--every", type=float, help="Keep running, updating every N hours")
    parser.add_argument("--report", type=str, help="Write a CSV with the outcome of each FR")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    loaded = load_dotenv(args.env_file)
    if loaded:
        print(f"[INFO] Loaded {', '.join(loaded)} from {args.env_file}")
    try:
        settings = Settings.from_env()
        overrides = {}
        if args.input:
            overrides["input_file"] = Path(args.input)
        if args.output:
            overrides["output_folder"] = Path(args.output)
        if args.workers is not None:
            overrides["workers"] = args.workers
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
    except (RuntimeError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 2

    progress = not args.no_progress
    report_path = Path(args.report) if args.report else None

    if args.every is None:
        try:
            run_update_once(settings, progress=progress, report_path=report_path)
        except FileNotFoundError as e:
            print(f"[ERROR] Input file not found: {e.filename}")
            return 1
        except OSError as e:
            print(f"[ERROR] {e}")
            return 1
        return 0

    if args.every <= 0:
        print("[ERROR] --every must be greater than 0.")
        return 2

    print(f"Starting FR update service: will update every {args.every:g} hours.")
    schedule.every(args.every).hours.do(_guarded_run, settings, progress, report_path)
    # Run once at startup
    _guarded_run(settings, progress, report_path)
    try:
        while True:
            schedule.run_pending()
            time.sleep(60)
    except KeyboardInterrupt:
        print("[INFO] Stopped by user.")
    finally:
        schedule.clear()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
