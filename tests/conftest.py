"""Pytest configuration and shared fixtures."""
import json
import os
from pathlib import Path
from typing import Callable, List

import pytest

from tome.core.config import Config
from tome.models.skill import Source, SourceKind, Target, TargetMethod


def write_skill(directory: Path, name: str) -> Path:
    """Create ``directory/name/SKILL.md`` and return the skill directory."""
    skill_dir = directory / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(f"""---
name: {name}
description: A test skill
---
# {name}
""")
    return skill_dir


@pytest.fixture
def make_skill() -> Callable[[Path, str], Path]:
    """Return a helper that creates a skill directory with SKILL.md."""
    return write_skill


@pytest.fixture
def write_plugins_json() -> Callable[..., Path]:
    """Return a helper that writes installed_plugins.json."""
    def _write(directory: Path, data) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "installed_plugins.json"
        path.write_text(json.dumps(data))
        return path
    return _write


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A scratch tree with sources/, library/ and target/ directories."""
    (tmp_path / "sources").mkdir()
    (tmp_path / "library").mkdir()
    (tmp_path / "target").mkdir()
    return tmp_path


@pytest.fixture
def directory_source(workspace: Path) -> Source:
    return Source(name="local", path=workspace / "sources", kind=SourceKind.DIRECTORY)


@pytest.fixture
def symlink_target(workspace: Path) -> Target:
    return Target(
        name="claude",
        method=TargetMethod.SYMLINK,
        skills_dir=workspace / "target",
    )


@pytest.fixture
def sample_config(workspace: Path, directory_source: Source, symlink_target: Target) -> Config:
    """A config with one directory source and one symlink target."""
    return Config(
        library_dir=workspace / "library",
        sources=[directory_source],
        targets={symlink_target.name: symlink_target},
        config_file=workspace / "config.yaml",
    )


def _snapshot(root: Path) -> List[tuple]:
    """Every path under root with its type, link target and file content."""
    entries = []
    for path in sorted(root.rglob("*")):
        if path.is_symlink():
            entries.append((str(path), "link", os.readlink(path)))
        elif path.is_dir():
            entries.append((str(path), "dir", ""))
        else:
            entries.append((str(path), "file", path.read_bytes()))
    return entries


@pytest.fixture
def snapshot() -> Callable[[Path], List[tuple]]:
    """Return a helper that captures a directory tree for before/after comparison."""
    return _snapshot
