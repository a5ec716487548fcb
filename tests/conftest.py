# tests/conftest.py
"""Shared test fixtures and helpers.

External tool:
    Tests never need a real tshark. `fake_tool` writes a small Python
    script and returns settings fields that run it with the current
    interpreter: `<python> <script> -r <capture>`. The script prints a
    fixed stdout/stderr and exits with a fixed status; optionally it also
    records the arguments it was called with.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


_TOOL_TEMPLATE = """\
import json
import sys

if {argv_log!r}:
    with open({argv_log!r}, "w") as f:
        json.dump(sys.argv[1:], f)
sys.stdout.buffer.write({stdout!r})
sys.stderr.buffer.write({stderr!r})
sys.exit({returncode!r})
"""


@dataclass(frozen=True)
class FakeTool:
    """A scripted stand-in for tshark.

    Attributes:
        tshark_path: Value for the tshark_path setting
        tshark_args: Value for the tshark_args setting
        argv_log: File the script writes its arguments to (if requested)
    """

    tshark_path: str
    tshark_args: list[str]
    argv_log: Path | None = None

    def settings_fields(self) -> dict[str, Any]:
        return {"tshark_path": self.tshark_path, "tshark_args": list(self.tshark_args)}


@pytest.fixture
def fake_tool(tmp_path: Path) -> Callable[..., FakeTool]:
    """Factory for scripted tools.

    Usage:
        tool = fake_tool(stdout="a,1\\n")
        tool = fake_tool(stdout="partial", stderr="boom", returncode=2)
    """
    counter = iter(range(1_000_000))

    def make(
        stdout: str | bytes = b"",
        *,
        stderr: str | bytes = b"",
        returncode: int = 0,
        record_args: bool = False,
    ) -> FakeTool:
        n = next(counter)
        script = tmp_path / f"fake_tshark_{n}.py"
        argv_log = tmp_path / f"fake_tshark_{n}.argv.json" if record_args else None
        script.write_text(
            _TOOL_TEMPLATE.format(
                argv_log=str(argv_log) if argv_log else "",
                stdout=stdout.encode() if isinstance(stdout, str) else stdout,
                stderr=stderr.encode() if isinstance(stderr, str) else stderr,
                returncode=returncode,
            )
        )
        return FakeTool(tshark_path=sys.executable, tshark_args=[str(script)], argv_log=argv_log)

    return make


@pytest.fixture
def diagnostics() -> list[Exception]:
    """Collects diagnostics; pass `diagnostics.append` as a report callback."""
    return []


@pytest.fixture
def capture_dir(tmp_path: Path) -> Path:
    """Directory a producer writes captures to."""
    path = tmp_path / "captures"
    path.mkdir()
    return path


@pytest.fixture
def processing_dir(tmp_path: Path) -> Path:
    """Processing directory (not created yet)."""
    return tmp_path / "processing"
