"""Tests for preload table builders and cab resolvers."""

import logging
from pathlib import Path
from unittest.mock import Mock

import pytest

from scene_repacker.core.errors import ResolutionFailure
from scene_repacker.core.model import Package
from scene_repacker.core.types import ObjectRef
from scene_repacker.platforms.snapshot import SnapshotProvider
from scene_repacker.preload import (
    ContainerAnchoredPreloads,
    ContainerBundleData,
    DirectoryCabResolver,
    DirectPreloads,
    MappingCabResolver,
    UnionCabResolver,
    UnionPreloads,
)
from scene_repacker.repacking.context import RepackingContext
from scene_factory import build_external_bundle

EXTERNAL_CONTAINER = [("assets/props/crate.prefab", 100), ("assets/shaders/standard.shader", 501)]


def make_context(package: Package, provider) -> RepackingContext:
    return RepackingContext(
        provider=provider,
        package=package,
        main_file=package.files[0],
        shared_file=package.files[1],
    )


@pytest.fixture
def external_path(write_package) -> Path:
    return write_package(build_external_bundle("CAB-AAAA1111", EXTERNAL_CONTAINER), "cab-aaaa1111.json")


# ============================================================================
# Cab resolvers
# ============================================================================

class TestCabResolvers:
    """Tests for cab name resolution."""

    def test_mapping_is_case_insensitive(self) -> None:
        resolver = MappingCabResolver({"CAB-1234": "bundles/a.json"})
        assert resolver.resolve("cab-1234") == Path("bundles/a.json")

    def test_mapping_none_means_excluded(self) -> None:
        assert MappingCabResolver({"cab-1234": None}).resolve("cab-1234") is None

    def test_unknown_cab_raises(self) -> None:
        with pytest.raises(ResolutionFailure, match="cab-9999"):
            MappingCabResolver({}).resolve("cab-9999")

    def test_directory_resolver(self, tmp_path: Path) -> None:
        (tmp_path / "CAB-ABCD.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("")
        resolver = DirectoryCabResolver(tmp_path, ".json")

        assert resolver.resolve("cab-abcd") == tmp_path / "CAB-ABCD.json"
        with pytest.raises(ResolutionFailure):
            resolver.resolve("notes")

    def test_directory_resolver_rescans_after_reset(self, tmp_path: Path) -> None:
        """Test that bundles added between runs are found after a reset."""
        resolver = DirectoryCabResolver(tmp_path, ".json")
        with pytest.raises(ResolutionFailure):
            resolver.resolve("cab-abcd")

        (tmp_path / "CAB-ABCD.json").write_text("{}")
        resolver.reset()

        assert resolver.resolve("cab-abcd") == tmp_path / "CAB-ABCD.json"

    def test_union_takes_first_known(self) -> None:
        resolver = UnionCabResolver([
            MappingCabResolver({"cab-1": "first.json"}),
            MappingCabResolver({"cab-1": "second.json", "cab-2": None}),
        ])

        assert resolver.resolve("cab-1") == Path("first.json")
        assert resolver.resolve("cab-2") is None
        with pytest.raises(ResolutionFailure):
            resolver.resolve("cab-3")


# ============================================================================
# Builders
# ============================================================================

class TestDirectPreloads:
    """Tests for the closure-based builder."""

    def test_adds_external_closure(self, level_package: Package, provider: SnapshotProvider) -> None:
        ctx = make_context(level_package, provider)
        table: set[ObjectRef] = set()

        DirectPreloads().build_preload_table(12, ctx, table)

        assert table == {ObjectRef(1, 500), ObjectRef(1, 501), ObjectRef(2, 42)}

    def test_keeps_existing_entries(self, level_package: Package, provider: SnapshotProvider) -> None:
        ctx = make_context(level_package, provider)
        table = {ObjectRef(2, 7)}

        DirectPreloads().build_preload_table(14, ctx, table)

        assert table == {ObjectRef(2, 7), ObjectRef(1, 600)}


class TestContainerBundleData:
    """Tests for external bundle container layouts."""

    def test_from_package(self, provider: SnapshotProvider) -> None:
        data = ContainerBundleData.from_package(provider, build_external_bundle("CAB-A", EXTERNAL_CONTAINER))

        assert data.container_paths == [100, 501]
        assert data.container_internal_deps[100] == {100, 101, 102, 500, 501}
        assert data.container_internal_deps[501] == frozenset()
        assert data.find_anchor(500) == 100
        assert data.find_anchor(1) is None

    def test_from_file_unloads(self, external_path: Path) -> None:
        provider = Mock(wraps=SnapshotProvider())

        ContainerBundleData.from_file(provider, external_path)

        provider.load.assert_called_once_with(external_path)
        provider.unload.assert_called_once()


class TestContainerAnchoredPreloads:
    """Tests for container-anchored preload augmentation."""

    def test_adds_anchor_for_non_container_entry(
        self, level_package: Package, external_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that 500 is anchored by 100 while 501 is already in the container."""
        ctx = make_context(level_package, SnapshotProvider())
        builder = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": external_path}))
        table = {ObjectRef(1, 500), ObjectRef(1, 501), ObjectRef(2, 42)}

        with caplog.at_level(logging.WARNING, logger="scene_repacker"):
            builder.build_preload_table(12, ctx, table)

        assert table == {ObjectRef(1, 500), ObjectRef(1, 501), ObjectRef(2, 42), ObjectRef(1, 100)}
        # File 2 has no known cab: skipped with a warning
        assert "failed to resolve cab name cab-bbbb2222" in caplog.text

    def test_missing_anchor_is_logged_and_skipped(
        self, level_package: Package, external_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        ctx = make_context(level_package, SnapshotProvider())
        builder = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": external_path}))
        table = {ObjectRef(1, 600)}

        with caplog.at_level(logging.WARNING, logger="scene_repacker"):
            builder.build_preload_table(14, ctx, table)

        assert table == {ObjectRef(1, 600)}
        assert "Failed to find container asset for cab cab-aaaa1111, path 600" in caplog.text

    def test_excluded_cab_is_not_loaded(self, level_package: Package) -> None:
        provider = Mock(wraps=SnapshotProvider())
        ctx = make_context(level_package, provider)
        builder = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": None, "cab-bbbb2222": None}))
        table = {ObjectRef(1, 500), ObjectRef(2, 42)}

        builder.build_preload_table(12, ctx, table)

        assert table == {ObjectRef(1, 500), ObjectRef(2, 42)}
        provider.load.assert_not_called()

    def test_bundle_is_cached_across_roots(self, level_package: Package, external_path: Path) -> None:
        provider = Mock(wraps=SnapshotProvider())
        ctx = make_context(level_package, provider)
        builder = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": external_path, "cab-bbbb2222": None}))

        builder.build_preload_table(12, ctx, {ObjectRef(1, 500)})
        builder.build_preload_table(14, ctx, {ObjectRef(1, 501)})

        assert provider.load.call_count == 1
        assert set(builder.cache) == {"cab-aaaa1111"}

        builder.reset()
        assert builder.cache == {}

    def test_reset_reaches_cab_resolver(self, tmp_path: Path) -> None:
        """Test that a directory listing does not outlive the run."""
        directory = DirectoryCabResolver(tmp_path, ".json")
        builder = ContainerAnchoredPreloads(UnionCabResolver([directory]))
        with pytest.raises(ResolutionFailure):
            directory.resolve("cab-abcd")

        (tmp_path / "CAB-ABCD.json").write_text("{}")
        builder.reset()

        assert builder.cab_resolver.resolve("cab-abcd") == tmp_path / "CAB-ABCD.json"

    def test_one_anchor_when_several_qualify(self, level_package: Package, write_package) -> None:
        """Test that only one of two qualifying container entries is added."""
        path = write_package(
            build_external_bundle("CAB-AAAA1111", [("assets/a.prefab", 100), ("assets/mat.mat", 102)]),
            "cab-aaaa1111.json",
        )
        ctx = make_context(level_package, SnapshotProvider())
        builder = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": path, "cab-bbbb2222": None}))
        table = {ObjectRef(1, 500)}

        builder.build_preload_table(12, ctx, table)

        added = table - {ObjectRef(1, 500)}
        assert len(added) == 1
        assert added <= {ObjectRef(1, 100), ObjectRef(1, 102)}


class TestUnionPreloads:
    """Tests for builder composition."""

    def test_later_builders_see_earlier_entries(self, level_package: Package, external_path: Path) -> None:
        ctx = make_context(level_package, SnapshotProvider())
        anchored = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": external_path, "cab-bbbb2222": None}))
        table: set[ObjectRef] = set()

        UnionPreloads([DirectPreloads(), anchored]).build_preload_table(12, ctx, table)

        assert table == {ObjectRef(1, 500), ObjectRef(1, 501), ObjectRef(2, 42), ObjectRef(1, 100)}

    def test_order_matters(self, level_package: Package, external_path: Path) -> None:
        """Test that an augmenting builder first in line has nothing to augment."""
        ctx = make_context(level_package, SnapshotProvider())
        anchored = ContainerAnchoredPreloads(MappingCabResolver({"cab-aaaa1111": external_path, "cab-bbbb2222": None}))
        table: set[ObjectRef] = set()

        UnionPreloads([anchored, DirectPreloads()]).build_preload_table(12, ctx, table)

        assert table == {ObjectRef(1, 500), ObjectRef(1, 501), ObjectRef(2, 42)}

    def test_reset_reaches_children(self) -> None:
        child = Mock()
        UnionPreloads([child]).reset()
        child.reset.assert_called_once()
