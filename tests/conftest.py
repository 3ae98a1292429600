"""Pytest configuration and fixtures for depgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from depgraph_cli.models import FileRecord


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def write_file(temp_dir: Path) -> Callable[[str, str], Path]:
    """Write a file under temp_dir, creating parent directories."""

    def _write(rel_path: str, content: str = "") -> Path:
        path = temp_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_record(temp_dir: Path) -> Callable[..., FileRecord]:
    """Build a FileRecord for a path relative to temp_dir."""

    def _make(rel_path: str, **kwargs) -> FileRecord:
        return FileRecord(path=rel_path, absolute_path=str(temp_dir / rel_path), **kwargs)

    return _make


@pytest.fixture
def project(write_file, make_record) -> Callable[..., list]:
    """Write several files at once and return their FileRecords in order."""

    def _project(files: dict) -> list:
        records = []
        for rel_path, content in files.items():
            write_file(rel_path, content)
            records.append(make_record(rel_path))
        return records

    return _project


@pytest.fixture
def isolated_config(temp_dir: Path, monkeypatch) -> Path:
    """Point the default config file at a temporary location."""
    config_file = temp_dir / "home" / "config.toml"
    monkeypatch.setattr("depgraph_cli.config.BASE_DIR", config_file.parent)
    monkeypatch.setattr("depgraph_cli.config.CONFIG_FILE", config_file)
    return config_file
