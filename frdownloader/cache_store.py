"""On-disk cache of downloaded FR data.

Every successful download lands in ``<root>/<fr>.json``. A file counts as
fresh while it is no more than ``maximum_age`` whole days old, measured from
its modification time (creation time is not available on every platform).
"""

import os
import tempfile
import time
from pathlib import Path

from frdownloader.config import CACHE_MATCH_MODES, SECONDS_PER_DAY

# In-progress writes, never counted as saved data
PARTIAL_PREFIX = ".partial-"


def age_in_days(seconds: int) -> int:
    """Convert an age in seconds to whole days, never rounding up."""
    return int(seconds) // SECONDS_PER_DAY


class CacheStore:
    def __init__(self, root: str | Path, maximum_age: int = 30, match: str = "substring"):
        if match not in CACHE_MATCH_MODES:
            raise ValueError(f"Unknown cache match mode: {match!r}")
        self.root = Path(root)
        self.maximum_age = maximum_age
        self.match = match

    def ensure_root(self) -> None:
        """Create the output folder if it does not exist yet."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, fr: str) -> Path:
        return self.root / f"{fr}.json"

    def exists(self, fr: str) -> bool:
        """Check if the FR already has a file somewhere under the output folder.

        In ``substring`` mode any file or folder whose path (relative to the
        root) contains the FR counts, so ``123`` also matches ``91234.json``.
        ``exact`` mode only accepts ``<root>/<fr>.json``.
        """
        if self.match == "exact":
            return self.path_for(fr).is_file()

        if not self.root.is_dir():
            return False
        for dirpath, dirnames, filenames in os.walk(self.root):
            for name in dirnames + filenames:
                if name.startswith(PARTIAL_PREFIX):
                    continue
                rel = os.path.relpath(os.path.join(dirpath, name), self.root)
                if fr in rel:
                    return True
        return False

    def age_days(self, path: str | Path) -> int:
        """Age of the file in whole days. Raises FileNotFoundError if missing."""
        mtime = Path(path).stat().st_mtime
        return age_in_days(int(time.time()) - int(mtime))

    def is_old(self, age: int) -> bool:
        return age > self.maximum_age

    def is_fresh(self, fr: str) -> bool:
        """True when a saved copy exists and is not older than ``maximum_age``."""
        if not self.exists(fr):
            return False
        try:
            age = self.age_days(self.path_for(fr))
        except FileNotFoundError:
            # matched some other path, the FR itself was never saved
            return False
        return not self.is_old(age)

    def write(self, fr: str, body: bytes) -> Path:
        """Save the response body verbatim, overwriting any previous copy.

        The body is written to a temporary file in the same folder and moved
        into place once complete. A failed write leaves no partial file behind.
        """
        path = self.path_for(fr)
        tmp = tempfile.NamedTemporaryFile(dir=self.root, prefix=PARTIAL_PREFIX, suffix=".tmp", delete=False)
        try:
            with tmp:
                tmp.write(body)
            os.chmod(tmp.name, 0o644)
            os.replace(tmp.name, path)
        finally:
            Path(tmp.name).unlink(missing_ok=True)
        return path
