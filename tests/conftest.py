"""
Shared test fixtures and configuration.
"""

import io
import textwrap
from pathlib import Path

import pytest

from forge_runner.adapters.mock import MockProcessRunner

# Realistic ``cargo install --list`` output with forge built from a git rev
CARGO_LIST_OUTPUT = textwrap.dedent("""\
    cargo-audit v0.17.0:
        cargo-audit
    foundry-cli v0.1.0 (https://github.com/gakonst/foundry?rev=ecdafc5#ecdafc55):
        cast
        forge
    ripgrep v13.0.0:
        rg
""")


@pytest.fixture
def cargo_list_output() -> str:
    return CARGO_LIST_OUTPUT


@pytest.fixture
def out_stream() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def err_stream() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def mock_runner(out_stream: io.BytesIO, err_stream: io.BytesIO) -> MockProcessRunner:
    """Mock runner whose streamed output lands in the stream fixtures."""
    return MockProcessRunner(stdout=out_stream, stderr=err_stream)


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a project.yml into tmp_path and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "project.yml"
        path.write_text(textwrap.dedent(content))
        return path

    return _write
