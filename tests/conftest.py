"""Shared fixtures for the scene repacker tests."""

import json
from pathlib import Path

import pytest

from scene_repacker.core.model import AssetsFile, Package
from scene_repacker.platforms.snapshot import BufferPool, SnapshotProvider, package_to_document
from scene_factory import build_level_file, build_level_package


@pytest.fixture
def level_file() -> AssetsFile:
    """Main file of the level scene."""
    return build_level_file()


@pytest.fixture
def level_package() -> Package:
    """Level scene with its shared assets file."""
    return build_level_package()


@pytest.fixture
def pool() -> BufferPool:
    return BufferPool()


@pytest.fixture
def provider(pool: BufferPool) -> SnapshotProvider:
    return SnapshotProvider(pool)


@pytest.fixture
def write_package(tmp_path: Path):
    """Write a package as a snapshot file and return its path."""

    def _write(package: Package, name: str = "package.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(package_to_document(package)), encoding="utf-8")
        return path

    return _write
