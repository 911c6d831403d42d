"""Preload augmentation through container entries of external bundles.

If ``(file_id, path_id)`` is in the preload table but ``path_id`` is not in
the container of its bundle, the host runtime may fail to preload it. If
some container entry ``c`` of that bundle has ``path_id`` among its internal
dependencies, preloading ``(file_id, c)`` loads ``path_id`` as well, so
``(file_id, c)`` is added to the table.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..bundle.dependencies import DependencyResolver
from ..core.errors import ResolutionFailure, StructuralInconsistency
from ..core.model import Package
from ..core.types import ObjectRef
from ..providers.base import AssetProvider
from .base import PreloadTableBuilder
from .cab import CabResolver

if TYPE_CHECKING:
    from ..repacking.context import RepackingContext

logger = logging.getLogger(__name__)


@dataclass
class ContainerBundleData:
    """Container layout of an external bundle.

    Attributes:
        container_paths: Path ids listed in the bundle's container
        container_internal_deps: Internal dependencies of each container path
    """

    container_paths: list[int]
    container_internal_deps: dict[int, frozenset[int]] = field(default_factory=dict)

    @classmethod
    def from_package(cls, provider: AssetProvider, package: Package) -> "ContainerBundleData":
        """Compute the container layout of a loaded bundle.

        Raises:
            StructuralInconsistency: If no file of the bundle has a descriptor
        """
        for assets_file in package.files:
            descriptor = provider.find_descriptor(assets_file)
            if descriptor is not None:
                break
        else:
            raise StructuralInconsistency(f"Bundle {package.name} has no descriptor object")

        container = descriptor.tree.get("m_Container", list)
        container_paths = [
            descriptor.tree.get_ref(f"m_Container.{index}.second.asset").path_id
            for index in range(len(container))
        ]

        result = cls(container_paths=container_paths)
        deps = DependencyResolver(assets_file)
        for c_path_id in container_paths:
            if c_path_id not in assets_file:
                logger.warning(f"Container of {package.name} lists missing object {c_path_id}")
                continue
            result.container_internal_deps[c_path_id] = deps.find_bundle_deps(c_path_id).internal_paths

        return result

    @classmethod
    def from_file(cls, provider: AssetProvider, bundle_path: Path) -> "ContainerBundleData":
        """Load a bundle, compute its container layout and unload it."""
        package = provider.load(bundle_path)
        try:
            return cls.from_package(provider, package)
        finally:
            provider.unload(package)

    def find_anchor(self, path_id: int) -> int | None:
        """Return a container path that has ``path_id`` as an internal dependency.

        When several container paths qualify, which one is returned is
        unspecified and may change; callers must not rely on the choice.
        """
        for c_path_id, c_deps in self.container_internal_deps.items():
            if path_id in c_deps:
                return c_path_id
        return None


class ContainerAnchoredPreloads(PreloadTableBuilder):
    """Add container entries of external bundles that anchor preloaded objects.

    Only augments entries already in the table, so it should run after a
    builder that fills the table (see UnionPreloads).

    Bundle data is cached per instance under the lower-case cab name and
    reused for every root of the run. Instances are not thread safe.
    """

    def __init__(self, cab_resolver: CabResolver):
        self.cab_resolver = cab_resolver
        self.cache: dict[str, ContainerBundleData] = {}

    def _bundle_data(self, cab_name: str, bundle_path: Path, provider: AssetProvider) -> ContainerBundleData:
        data = self.cache.get(cab_name)
        if data is None:
            logger.info(f"Building cache for {cab_name}")
            data = ContainerBundleData.from_file(provider, bundle_path)
            self.cache[cab_name] = data
        return data

    def build_preload_table(
        self,
        root_id: int,
        ctx: "RepackingContext",
        table: "set[ObjectRef]",
    ) -> None:
        grouped: dict[int, set[int]] = defaultdict(set)
        for ref in table:
            grouped[ref.file_id].add(ref.path_id)

        for file_id, path_ids in sorted(grouped.items()):
            if file_id == 0:
                continue
            cab_name = ctx.main_file.external_cab_name(file_id)

            try:
                bundle_path = self.cab_resolver.resolve(cab_name)
            except ResolutionFailure:
                logger.warning(
                    f"Unexpectedly failed to resolve cab name {cab_name} "
                    f"while running for {ctx.main_file.name}"
                )
                continue
            if bundle_path is None:
                continue

            data = self._bundle_data(cab_name, bundle_path, ctx.provider)

            for path_id in sorted(path_ids):
                if path_id in data.container_paths:
                    continue

                anchor = data.find_anchor(path_id)
                if anchor is None:
                    logger.warning(
                        f"Failed to find container asset for cab {cab_name}, path {path_id} "
                        f"while running for {ctx.main_file.name}"
                    )
                    continue

                anchor_ref = ObjectRef(file_id, anchor)
                if anchor_ref not in table:
                    table.add(anchor_ref)
                    logger.debug(
                        f"Added new {anchor} for {path_id} within {cab_name}, "
                        f"for {ctx.main_file.name} :: {root_id}"
                    )

    def reset(self) -> None:
        self.cache.clear()
        self.cab_resolver.reset()
