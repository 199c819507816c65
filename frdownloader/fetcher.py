import time

import requests
from tqdm import tqdm

from frdownloader.config import MAX_ATTEMPTS, RETRY_BACKOFF_SECONDS
from frdownloader.rate_limit import RateLimiter


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class Fetcher:
    """GETs one URL at a time through the shared rate limiter, with retry."""

    def __init__(
        self,
        limiter: RateLimiter,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        max_attempts: int = MAX_ATTEMPTS,
        backoff: float = RETRY_BACKOFF_SECONDS,
    ):
        self.limiter = limiter
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff

    def fetch(self, url: str) -> bytes:
        """Return the body of the first 200 response, or b"" when all attempts fail."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.limiter:
                    resp = self.session.get(url, timeout=self.timeout)
                    self.limiter.pace()
            except requests.exceptions.Timeout as e:
                tqdm.write(f"[WARN] Timeout on attempt {attempt}/{self.max_attempts} for {url}: {e}")
            except requests.exceptions.RequestException as e:
                tqdm.write(f"[WARN] Request failed on attempt {attempt}/{self.max_attempts} for {url}: {e}")
            else:
                if resp.status_code == 200:
                    return resp.content
                if not _is_retryable(resp.status_code):
                    tqdm.write(f"[ERROR] Status {resp.status_code} for {url}, not retrying.")
                    return b""
                tqdm.write(f"[WARN] Status {resp.status_code} on attempt {attempt}/{self.max_attempts} for {url}")

            if attempt < self.max_attempts:
                tqdm.write(f"[INFO] Retrying in {self.backoff} seconds...")
                time.sleep(self.backoff)
        return b""

    def close(self) -> None:
        self.session.close()
