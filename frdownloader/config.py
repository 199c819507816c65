# Shared configuration for the FR downloader

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# Attempts per FR before giving up
MAX_ATTEMPTS = 3

# Fixed wait (seconds) before retrying a failed attempt
RETRY_BACKOFF_SECONDS = 2

SECONDS_PER_DAY = 86400

DEFAULT_MARGIN_OF_ERROR = "0"
DEFAULT_LIMIT_PER_MINUTE = "3"
DEFAULT_INPUT_FILE = "./input.txt"
DEFAULT_OUTPUT_FOLDER = "./downloads/"
# FR data doesn't change often and FRs are shared between customers,
# so a month old copy is still good enough
DEFAULT_MAXIMUM_AGE = "30"
DEFAULT_REQUEST_TIMEOUT = "30"
DEFAULT_CACHE_MATCH = "substring"
DEFAULT_WORKERS = "1"

CACHE_MATCH_MODES = ("substring", "exact")


def _parse(env: Mapping[str, str], name: str, default: str, cast):
    raw = env.get(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a valid {cast.__name__}, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Runtime settings, built once at startup and passed to every component."""

    api_url: str
    margin_of_error: float = float(DEFAULT_MARGIN_OF_ERROR)
    limit_per_minute: float = float(DEFAULT_LIMIT_PER_MINUTE)
    input_file: Path = Path(DEFAULT_INPUT_FILE)
    output_folder: Path = Path(DEFAULT_OUTPUT_FOLDER)
    maximum_age: int = int(DEFAULT_MAXIMUM_AGE)
    request_timeout: float = float(DEFAULT_REQUEST_TIMEOUT)
    cache_match: str = DEFAULT_CACHE_MATCH
    workers: int = int(DEFAULT_WORKERS)

    def __post_init__(self) -> None:
        if not self.api_url:
            raise RuntimeError("API_URL must be set (e.g. in .env)")
        if self.limit_per_minute <= 0:
            raise ValueError("LIMIT_PER_MINUTE must be greater than 0")
        if self.margin_of_error < 0:
            raise ValueError("MARGIN_OF_ERROR must not be negative")
        if self.cache_match not in CACHE_MATCH_MODES:
            raise ValueError(
                f"CACHE_MATCH must be one of {', '.join(CACHE_MATCH_MODES)}, got {self.cache_match!r}"
            )
        if self.workers < 1:
            raise ValueError("WORKERS must be at least 1")

    @property
    def interval(self) -> float:
        """Seconds between the start of two requests."""
        return 60.0 / self.limit_per_minute + self.margin_of_error

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        if env is None:
            env = os.environ
        return cls(
            api_url=env.get("API_URL", ""),
            margin_of_error=_parse(env, "MARGIN_OF_ERROR", DEFAULT_MARGIN_OF_ERROR, float),
            limit_per_minute=_parse(env, "LIMIT_PER_MINUTE", DEFAULT_LIMIT_PER_MINUTE, float),
            input_file=Path(env.get("INPUT_FILE", DEFAULT_INPUT_FILE)),
            output_folder=Path(env.get("OUTPUT_FOLDER", DEFAULT_OUTPUT_FOLDER)),
            maximum_age=_parse(env, "MAXIMUM_AGE", DEFAULT_MAXIMUM_AGE, int),
            request_timeout=_parse(env, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            cache_match=env.get("CACHE_MATCH", DEFAULT_CACHE_MATCH).strip().lower(),
            workers=_parse(env, "WORKERS", DEFAULT_WORKERS, int),
        )
