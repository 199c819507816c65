from pathlib import Path
import os


def _parse_value(raw: str) -> str:
    value = raw.strip()
    if value[:1] in ('"', "'"):
        quote = value[0]
        end = value.find(quote, 1)
        return value[1:end] if end != -1 else value[1:]
    # unquoted values may carry a trailing comment: LIMIT_PER_MINUTE=3  # plan
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return value


def load_dotenv(dotenv_path: str | Path = ".env") -> list[str]:
    """Minimal .env loader: KEY=VALUE lines, ignores comments/blank lines.

    Does not override environment variables that are already set, so
    ``API_URL=... fr-downloader`` beats the file.

    Returns:
        Names of the variables taken from the file ([] if it does not exist)
    """

    path = Path(dotenv_path)
    if not path.exists():
        return []

    loaded = []
    text = path.read_text(encoding="utf-8")
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]

        key, value = line.split("=", 1)
        key = key.strip()
        if not key or key in os.environ:
            continue
        os.environ[key] = _parse_value(value)
        loaded.append(key)
    return loaded
