"""Pytest configuration and fixtures for MetaDB CLI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from metadb_cli.config import Settings
from metadb_cli.models import NameIndex


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_schema_path() -> Path:
    """Path to the sample meta class database."""
    return Path(__file__).parent / "fixtures" / "database.py"


@pytest.fixture
def sample_schema_text(sample_schema_path: Path) -> str:
    return sample_schema_path.read_text(encoding="utf-8")


@pytest.fixture
def simple_schema() -> str:
    """Two-class schema used across parser and pipeline tests."""
    return """#!python
class Bar():
    pass
class Foo(Bar):
    health: (I32, 0x0, 0x0, 0x0)
    pass
"""


@pytest.fixture
def name_index() -> NameIndex:
    return NameIndex({
        "Foo": "/classes/foo",
        "Bar": "/classes/bar",
        "SpellData": "/classes/spelldata",
        "I32": "/classes/i32",
    })


@pytest.fixture
def settings_for(temp_dir: Path):
    """Build Settings that write into the temporary directory."""

    def _make(input_path: Path, **overrides) -> Settings:
        return Settings(
            input=input_path,
            out_dir=temp_dir / "public" / "db",
            pages_dir=temp_dir / "docs" / "classes",
            **overrides,
        )

    return _make


@pytest.fixture(autouse=True)
def _isolated_config(temp_dir: Path, monkeypatch):
    """Never pick up a metadb.toml from the working directory."""
    monkeypatch.setattr("metadb_cli.config.CONFIG_FILE", temp_dir / "no-such-config.toml")
