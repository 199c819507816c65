"""Tests for frdownloader.update_data module."""

import pandas as pd
import pytest
import requests

from conftest import FakeSession
from frdownloader.config import Settings
from frdownloader.update_data import main, run_update_once

API_URL = "https://api.test/fr/"


@pytest.fixture
def settings(tmp_path):
    input_file = tmp_path / "input.txt"
    input_file.write_text("123-45\n678.90\n\n")
    return Settings(
        api_url=API_URL,
        limit_per_minute=6000,
        input_file=input_file,
        output_folder=tmp_path / "downloads",
    )


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("API_URL", "INPUT_FILE", "OUTPUT_FOLDER", "WORKERS", "LIMIT_PER_MINUTE", "CACHE_MATCH"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestRunUpdateOnce:
    """Tests for run_update_once()."""

    def test_downloads_and_summarizes(self, settings, echo_session, no_sleep):
        """Should create the folder, save each FR and return one row per line."""
        df = run_update_once(settings, session=echo_session, progress=False)
        out = settings.output_folder
        assert (out / "12345.json").read_bytes() == b'{"fr": "12345"}'
        assert (out / "67890.json").read_bytes() == b'{"fr": "67890"}'
        assert list(df["status"]) == ["saved", "saved", "empty"]
        assert len(echo_session.calls) == 2

    def test_rerun_makes_no_requests(self, settings, echo_session, no_sleep):
        """Everything is fresh on an immediate second run."""
        run_update_once(settings, session=echo_session, progress=False)
        session = FakeSession()
        df = run_update_once(settings, session=session, progress=False)
        assert session.calls == []
        assert list(df["status"]) == ["skipped", "skipped", "empty"]

    def test_writes_report(self, settings, echo_session, no_sleep, tmp_path):
        """--report writes the outcome of each FR as CSV."""
        report = tmp_path / "reports" / "run.csv"
        run_update_once(settings, session=echo_session, progress=False, report_path=report)
        df = pd.read_csv(report, dtype=str, keep_default_na=False)
        assert list(df["normalized"]) == ["12345", "67890", ""]
        assert list(df["status"]) == ["saved", "saved", "empty"]

    def test_missing_input(self, tmp_path):
        """A missing input file raises FileNotFoundError."""
        settings = Settings(api_url=API_URL, input_file=tmp_path / "nope.txt", output_folder=tmp_path)
        with pytest.raises(FileNotFoundError):
            run_update_once(settings, session=FakeSession(), progress=False)


class TestMain:
    """Tests for the command line entry point."""

    def test_missing_api_url(self, clean_env, tmp_path, capsys):
        """Without API_URL nothing runs and the exit code is 2."""
        assert main(["--env-file", str(tmp_path / ".env")]) == 2
        assert "API_URL" in capsys.readouterr().out

    def test_invalid_every(self, clean_env, tmp_path):
        """--every must be positive."""
        clean_env.setenv("API_URL", API_URL)
        assert main(["--env-file", str(tmp_path / ".env"), "--every", "0"]) == 2

    def test_missing_input(self, clean_env, tmp_path, capsys):
        """A missing input file is reported with exit code 1."""
        clean_env.setenv("API_URL", API_URL)
        code = main([
            "--env-file", str(tmp_path / ".env"),
            "--input", str(tmp_path / "nope.txt"),
            "--output", str(tmp_path / "out"),
            "--no-progress",
        ])
        assert code == 1
        assert "Input file not found" in capsys.readouterr().out

    def test_full_run_from_env_file(self, clean_env, tmp_path, echo_session, no_sleep):
        """Settings come from the .env file, paths from the command line."""
        env = tmp_path / ".env"
        env.write_text(f"API_URL={API_URL}\nLIMIT_PER_MINUTE=6000\n")
        (tmp_path / "frs.txt").write_text("00001\n")
        clean_env.setattr(requests, "Session", lambda: echo_session)
        code = main([
            "--env-file", str(env),
            "--input", str(tmp_path / "frs.txt"),
            "--output", str(tmp_path / "out"),
            "--no-progress",
        ])
        assert code == 0
        assert (tmp_path / "out" / "00001.json").read_bytes() == b'{"fr": "00001"}'

    def test_latin1_input(self, clean_env, tmp_path, echo_session, no_sleep):
        """A Latin-1 input file still runs to completion."""
        clean_env.setenv("API_URL", API_URL)
        clean_env.setenv("LIMIT_PER_MINUTE", "6000")
        (tmp_path / "frs.txt").write_bytes(b"FR n\xba 123-45\n")
        clean_env.setattr(requests, "Session", lambda: echo_session)
        code = main([
            "--env-file", str(tmp_path / ".env"),
            "--input", str(tmp_path / "frs.txt"),
            "--output", str(tmp_path / "out"),
            "--no-progress",
        ])
        assert code == 0
        assert (tmp_path / "out" / "12345.json").exists()
