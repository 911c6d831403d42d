"""Repacking of a scene down to the objects a set of game objects needs.

The stages run in a fixed order:

1. Index the scene hierarchy.
2. Compute the closure of every requested game object.
3. Strip every object outside the closure.
4. Move the object holding the reserved path id 1 out of the way.
5. Deparent game objects whose parent was stripped.
6. Pick the container roots and verify every request sits under one.
7. Rebuild the container and preload table.
8. Install the updated descriptor in the main file.
9. Write the bundle.
"""

import enum
import logging

from ..bundle.hierarchy import DuplicatePolicy, GameObjectInfo, HierarchyIndex
from ..core.errors import StructuralInconsistency
from ..core.model import AssetsFile, ObjectEntry
from ..core.paths import find_ancestor, get_highest_nodes
from ..core.types import FILE_ID_FIELD, PATH_ID_FIELD, ObjectRef
from ..core.values import ValueTree
from ..preload.base import PreloadTableBuilder
from ..preload.direct import DirectPreloads
from ..providers.base import DESCRIPTOR_CLASS, AssetProvider
from .base import SceneRepacker
from .context import RepackingContext
from .params import RepackedBundleData, RepackingParams

logger = logging.getLogger(__name__)

# Path id the host runtime expects the descriptor at
DESCRIPTOR_PATH_ID = 1


class RepackStage(enum.IntEnum):
    """Pipeline stages, in execution order."""

    INIT = 0
    HIERARCHY_BUILT = 1
    CLOSURE_COMPUTED = 2
    STRIPPED = 3
    COLLISION_REMAPPED = 4
    DEPARENTED = 5
    METADATA_REBUILT = 6
    SERIALIZED = 7


class StrippedSceneRepacker(SceneRepacker):
    """Repack a scene keeping only what the requested game objects need.

    Game objects whose parents are not needed are deparented. Each
    remaining hierarchy root that contains a requested game object becomes
    a container entry.

    Example:
        >>> repacker = StrippedSceneRepacker(SnapshotProvider())
        >>> result = repacker.repack(RepackingParams(
        ...     scene_bundle_path=Path("level1.json"),
        ...     object_names=["Enemies/Boss"],
        ...     container_prefix="Assets/Level1",
        ...     out_bundle_path=Path("boss.json"),
        ... ))
        >>> result.game_object_assets
        {'Assets/Level1/Enemies.prefab': 'Enemies'}
    """

    def __init__(
        self,
        provider: AssetProvider,
        preload_resolver: PreloadTableBuilder | None = None,
        on_duplicate: DuplicatePolicy = "first",
    ):
        """Initialize the repacker.

        Args:
            provider: Provider used for all package I/O
            preload_resolver: Builds the preload table of each container
                entry; defaults to DirectPreloads
            on_duplicate: Policy for repeated hierarchical names
        """
        super().__init__(provider)
        self.preload_resolver = preload_resolver if preload_resolver is not None else DirectPreloads()
        self.on_duplicate = on_duplicate
        self.stage = RepackStage.INIT

    def _advance(self, stage: RepackStage) -> None:
        if stage <= self.stage:
            raise RuntimeError(f"Cannot move from {self.stage.name} back to {stage.name}")
        self.stage = stage
        logger.debug(f"Stage {stage.name}")

    def run(self, ctx: RepackingContext, params: RepackingParams, out_data: RepackedBundleData) -> None:
        self.stage = RepackStage.INIT
        self.preload_resolver.reset()
        requested = list(dict.fromkeys(params.object_names))

        # Read before stripping, which may remove it from the main file
        descriptor = self.provider.get_descriptor_object(ctx.shared_file).tree

        hierarchy = HierarchyIndex.from_file(ctx.main_file, self.on_duplicate)
        ctx.hierarchy = hierarchy
        self._advance(RepackStage.HIERARCHY_BUILT)

        closure = self._compute_closure(ctx, hierarchy, requested, out_data)
        self._advance(RepackStage.CLOSURE_COMPUTED)

        self._strip(ctx.main_file, closure)
        self._advance(RepackStage.STRIPPED)

        remap = self._remap_reserved_id(ctx, closure)
        self._advance(RepackStage.COLLISION_REMAPPED)

        self._deparent(ctx, hierarchy, closure, remap)
        self._advance(RepackStage.DEPARENTED)

        container_roots = self._select_container_roots(hierarchy, closure, requested, out_data)
        self._rebuild_metadata(ctx, params, descriptor, container_roots, remap, out_data)
        self._advance(RepackStage.METADATA_REBUILT)

        self._install_descriptor(ctx, descriptor, out_data)
        self.provider.serialize(ctx.package, params.out_bundle_path)
        self._advance(RepackStage.SERIALIZED)

        logger.info(
            f"Repacked {len(out_data.game_object_assets)} container entries into "
            f"{params.out_bundle_path}, {len(out_data.non_repacked_assets)} names not repacked"
        )

    def _compute_closure(
        self,
        ctx: RepackingContext,
        hierarchy: HierarchyIndex,
        requested: list[str],
        out_data: RepackedBundleData,
    ) -> set[int]:
        """Collect every path id needed by the requested game objects."""
        closure: set[int] = set()

        for name in requested:
            info = hierarchy.lookup_name(name)
            if info is None:
                logger.error(f"Couldn't find game object {name}")
                out_data.non_repacked_assets.append(name)
                continue
            closure.add(info.game_object_id)
            closure.update(ctx.deps.find_bundle_deps(info.game_object_id).internal_paths)

        logger.info(f"Closure holds {len(closure)} of {len(ctx.main_file)} objects")
        return closure

    @staticmethod
    def _strip(main_file: AssetsFile, closure: set[int]) -> None:
        """Remove every object outside the closure."""
        removed = 0
        for path_id in main_file.path_ids - closure:
            main_file.remove_object_entry(path_id)
            removed += 1
        logger.info(f"Stripped {removed} objects from {main_file.name}")

    def _remap_reserved_id(self, ctx: RepackingContext, closure: set[int]) -> dict[int, int]:
        """Move a retained object off the descriptor's path id.

        Returns:
            Mapping of old to new path id; empty if nothing moved
        """
        main_file = ctx.main_file
        if DESCRIPTOR_PATH_ID not in closure:
            return {}
        if main_file.get_object(DESCRIPTOR_PATH_ID).class_name == DESCRIPTOR_CLASS:
            # Replaced by the updated descriptor later on
            return {}

        new_path_id = -1
        while new_path_id in closure:
            new_path_id -= 1

        main_file.set_object_id(DESCRIPTOR_PATH_ID, new_path_id)

        redirect_count = 0
        for path_id in closure:
            if path_id == DESCRIPTOR_PATH_ID:
                continue
            redirect_count += self.provider.redirect_references(
                main_file, path_id, DESCRIPTOR_PATH_ID, new_path_id
            )
        self_redirects = self.provider.redirect_references(
            main_file, new_path_id, DESCRIPTOR_PATH_ID, new_path_id
        )

        # Cached closures still name the old path id
        ctx.deps.invalidate()
        logger.info(
            f"Moved object {DESCRIPTOR_PATH_ID} to {new_path_id}: redirected "
            f"{redirect_count} references plus {self_redirects} self-references"
        )
        return {DESCRIPTOR_PATH_ID: new_path_id}

    @staticmethod
    def _deparent(
        ctx: RepackingContext,
        hierarchy: HierarchyIndex,
        closure: set[int],
        remap: dict[int, int],
    ) -> None:
        """Turn retained game objects with a stripped parent into roots."""
        deparented = 0

        for info in hierarchy:
            if info.transform_id not in closure:
                continue
            if info.parent_transform_id == 0 or info.parent_transform_id in closure:
                continue

            transform = ctx.main_file.get_object(remap.get(info.transform_id, info.transform_id))
            transform.tree.set_ref("m_Father", ObjectRef(0, 0))
            deparented += 1
            logger.debug(f"Deparented {info.name}")

        logger.info(f"Deparented {deparented} game objects")

    @staticmethod
    def _select_container_roots(
        hierarchy: HierarchyIndex,
        closure: set[int],
        requested: list[str],
        out_data: RepackedBundleData,
    ) -> dict[str, tuple[GameObjectInfo, list[str]]]:
        """Find the hierarchy roots to expose and the requests each covers.

        Returns:
            Root name -> (root info, requested names under it)
        """
        included: dict[str, GameObjectInfo] = {}
        for path_id in sorted(closure):
            info = hierarchy.lookup_game_object(path_id)
            if info is not None and info.name not in included:
                included[info.name] = info

        rootmost = get_highest_nodes(included)
        roots: dict[str, tuple[GameObjectInfo, list[str]]] = {}

        for name in requested:
            if name in out_data.non_repacked_assets:
                continue
            match = find_ancestor(rootmost, name)
            if match is None:
                logger.warning(f"Did not find {name} in bundle")
                out_data.non_repacked_assets.append(name)
                continue
            roots.setdefault(match.ancestor, (included[match.ancestor], []))[1].append(name)

        return roots

    def _rebuild_metadata(
        self,
        ctx: RepackingContext,
        params: RepackingParams,
        descriptor: ValueTree,
        container_roots: dict[str, tuple[GameObjectInfo, list[str]]],
        remap: dict[int, int],
        out_data: RepackedBundleData,
    ) -> None:
        """Replace the container and preload table with the container roots."""
        # Both must exist before anything is rebuilt
        descriptor.get("m_PreloadTable", list)
        descriptor.get("m_Container", list)

        preload_table: list[dict[str, int]] = []
        container: list[dict] = []

        for root_name in sorted(container_roots):
            info, names = container_roots[root_name]
            root_id = remap.get(info.game_object_id, info.game_object_id)

            deps: set[ObjectRef] = set()
            self.preload_resolver.build_preload_table(root_id, ctx, deps)

            start = len(preload_table)
            for ref in sorted(deps):
                preload_table.append({FILE_ID_FIELD: ref.file_id, PATH_ID_FIELD: ref.path_id})
            count = len(preload_table) - start

            container_path = params.container_path(root_name)
            container.append(
                {
                    "first": container_path,
                    "second": {
                        "preloadIndex": start,
                        "preloadSize": count,
                        "asset": {FILE_ID_FIELD: 0, PATH_ID_FIELD: root_id},
                    },
                }
            )
            out_data.game_object_assets[container_path] = root_name
            for name in names:
                out_data.repacked[name] = container_path

        descriptor.set("m_PreloadTable", preload_table)
        descriptor.set("m_Container", container)

    def _install_descriptor(
        self,
        ctx: RepackingContext,
        descriptor: ValueTree,
        out_data: RepackedBundleData,
    ) -> None:
        """Move the updated descriptor into the main file and drop the rest."""
        main_file = ctx.main_file

        descriptor.set("m_Name", out_data.bundle_name)
        descriptor.set("m_AssetBundleName", out_data.bundle_name)
        descriptor.set("m_IsStreamedSceneAssetBundle", False)
        descriptor.set("m_SceneHashes", [])

        if DESCRIPTOR_CLASS not in main_file.types:
            if DESCRIPTOR_CLASS not in ctx.shared_file.types:
                raise StructuralInconsistency(
                    f"No {DESCRIPTOR_CLASS} type schema in {ctx.shared_file.name}"
                )
            main_file.types[DESCRIPTOR_CLASS] = ctx.shared_file.types[DESCRIPTOR_CLASS]

        if DESCRIPTOR_PATH_ID in main_file:
            logger.debug(f"Replacing placeholder at path id {DESCRIPTOR_PATH_ID}")
            main_file.remove_object_entry(DESCRIPTOR_PATH_ID)
        main_file.add_object_entry(ObjectEntry(DESCRIPTOR_PATH_ID, DESCRIPTOR_CLASS, descriptor.copy()))

        main_file.name = out_data.cab_name
        ctx.package.name = out_data.bundle_name
        ctx.package.files[:] = [main_file]
