"""Shared fixtures: a fake HTTP session so no test touches the network, and a full disk."""

import errno
import tempfile
import time

import pytest

from frdownloader import cache_store


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"{}"):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Replays scripted results; an Exception instance is raised instead of returned."""

    def __init__(self, *results, default=None):
        self.results = list(results)
        self.default = default
        self.calls = []
        self.started = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        self.started.append(time.monotonic())
        if self.results:
            result = self.results.pop(0)
        elif self.default is not None:
            result = self.default(url)
        else:
            raise AssertionError(f"Unexpected request to {url}")
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        pass


@pytest.fixture
def echo_session():
    """Answers every URL with a small JSON body naming the FR."""
    return FakeSession(default=lambda url: FakeResponse(200, f'{{"fr": "{url.rsplit("/", 1)[-1]}"}}'.encode()))


@pytest.fixture
def no_sleep(monkeypatch):
    """Record sleeps instead of waiting."""
    sleeps = []
    monkeypatch.setattr(time, "sleep", lambda seconds: sleeps.append(seconds))
    return sleeps


class FullDiskFile:
    """Temporary file that takes three bytes and then runs out of space."""

    def __init__(self, real):
        self._real = real
        self.name = real.name

    def write(self, data):
        self._real.write(data[:3])
        raise OSError(errno.ENOSPC, "No space left on device")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._real.close()


@pytest.fixture
def full_disk(monkeypatch):
    """Every artifact write fails partway through."""
    real = tempfile.NamedTemporaryFile
    monkeypatch.setattr(cache_store.tempfile, "NamedTemporaryFile", lambda **kw: FullDiskFile(real(**kw)))
