"""Fetch every FR of a batch, skipping the ones that are already saved and fresh."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from tqdm import tqdm

from frdownloader.cache_store import CacheStore
from frdownloader.fetcher import Fetcher
from frdownloader.identifiers import normalize


class Status(str, Enum):
    SKIPPED = "skipped"
    SAVED = "saved"
    FETCH_FAILED = "fetch_failed"
    WRITE_FAILED = "write_failed"
    EMPTY = "empty"


@dataclass
class Outcome:
    fr: str
    normalized: str
    status: Status
    path: Optional[Path] = None
    size: int = 0


def process_fr(fr: str, api_url: str, store: CacheStore, fetcher: Fetcher) -> Outcome:
    normalized = normalize(fr)
    if not normalized:
        tqdm.write(f"[WARN] Skipping {fr!r}: no digits to request.")
        return Outcome(fr, normalized, Status.EMPTY)

    path = store.path_for(normalized)
    if store.is_fresh(normalized):
        tqdm.write(f"[INFO] Skipping {normalized}. Already saved in {path}.")
        return Outcome(fr, normalized, Status.SKIPPED, path)

    tqdm.write(f"[INFO] Requesting {normalized} data...")
    body = fetcher.fetch(f"{api_url}{normalized}")
    if not body:
        tqdm.write(f"[WARN] Got nothing for {normalized}.")
        return Outcome(fr, normalized, Status.FETCH_FAILED)

    try:
        store.write(normalized, body)
    except OSError as e:
        tqdm.write(f"[ERROR] Could not save {path}: {e}")
        return Outcome(fr, normalized, Status.WRITE_FAILED, path)
    return Outcome(fr, normalized, Status.SAVED, path, len(body))


def run_batch(
    frs: Iterable[str],
    api_url: str,
    store: CacheStore,
    fetcher: Fetcher,
    workers: int = 1,
    progress: bool = True,
) -> list[Outcome]:
    """Process every FR and return the outcomes in input order."""
    frs = list(frs)
    total = len(frs)

    if workers <= 1:
        return [
            process_fr(fr, api_url, store, fetcher)
            for fr in tqdm(frs, total=total, desc="Fetching FRs", disable=not progress)
        ]

    results: list[Optional[Outcome]] = [None] * total
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_idx = {
            executor.submit(process_fr, fr, api_url, store, fetcher): idx
            for idx, fr in enumerate(frs)
        }
        for future in tqdm(
            as_completed(future_to_idx),
            total=total,
            desc="Fetching FRs",
            disable=not progress,
        ):
            results[future_to_idx[future]] = future.result()
    return results
