import re
from pathlib import Path

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize(fr: str) -> str:
    """Remove every non-numeric character so the FR can be used in the API URL."""
    return _NON_DIGITS.sub("", fr)


def read_identifiers(input_file: str | Path) -> list[str]:
    """Read raw FRs from file, one per line.

    Bytes that are not valid UTF-8 become U+FFFD; only digits matter anyway.
    """
    path = Path(input_file)
    return path.read_text(encoding="utf-8", errors="replace").splitlines()
