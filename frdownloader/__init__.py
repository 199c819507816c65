"""Download FR data from a public API, one JSON file per FR number."""

__version__ = "0.1.0"
