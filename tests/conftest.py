"""Shared fixtures: loguru capture and fake TeX engines."""

import stat
import sys
import textwrap
from pathlib import Path

import pytest
from loguru import logger

# Prelude shared by every fake engine: parses the argument template used by
# the compiler and records each invocation in $FAKE_ENGINE_CALLS if set.
FAKE_ENGINE_PRELUDE = """\
import os
import sys
from pathlib import Path

args = sys.argv[1:]
out_dir = Path(args[args.index("-output-directory") + 1])
source = Path(args[-1])
calls = os.environ.get("FAKE_ENGINE_CALLS")
if calls:
    with open(calls, "a") as fh:
        fh.write(" ".join(args) + "\\n")
"""


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def warnings_logged(log_records):
    """Messages of captured WARNING records."""

    def _warnings():
        return [r["message"] for r in log_records if r["level"].name == "WARNING"]

    return _warnings


@pytest.fixture
def make_engine(tmp_path):
    """
    Factory writing an executable fake TeX engine.

    The body runs after FAKE_ENGINE_PRELUDE, with `out_dir`, `source` and
    `args` already defined.
    """
    if sys.platform == "win32":
        pytest.skip("fake engines rely on shebang scripts")

    def _make(body: str, name: str = "fake-tex") -> str:
        script = tmp_path / name
        script.write_text(
            f"#!{sys.executable}\n" + FAKE_ENGINE_PRELUDE + textwrap.dedent(body),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def engine_calls(tmp_path, monkeypatch) -> Path:
    """File where fake engines record one line per invocation."""
    calls = tmp_path / "calls.txt"
    monkeypatch.setenv("FAKE_ENGINE_CALLS", str(calls))
    return calls
