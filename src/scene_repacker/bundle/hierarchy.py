"""Index between hierarchical game object names and object ids.

Every game object in a scene file is named by the path from its scene
root, e.g. ``"Level/Props/Door"``, built by walking its transform's parent
chain.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

from ..core.errors import StructuralInconsistency, TypeMismatch
from ..core.model import AssetsFile, ObjectEntry
from ..core.paths import SEPARATOR

logger = logging.getLogger(__name__)

GAME_OBJECT_CLASS = "GameObject"
TRANSFORM_CLASSES = frozenset({"Transform", "RectTransform"})

DuplicatePolicy = Literal["first", "error"]


@dataclass(frozen=True)
class GameObjectInfo:
    """A game object and its transform.

    Attributes:
        name: Hierarchical path name
        game_object_id: Path id of the GameObject
        transform_id: Path id of its Transform
        parent_transform_id: Path id of the parent Transform, 0 for roots
    """

    name: str
    game_object_id: int
    transform_id: int
    parent_transform_id: int = 0


class HierarchyIndex:
    """Bidirectional map between hierarchical names and game objects.

    Sibling names are not required to be unique in a scene. With the
    default ``on_duplicate="first"`` policy the game object with the lowest
    path id owns a repeated name and a warning is logged; ``"error"``
    raises instead. Id lookups always work, duplicates included.
    """

    def __init__(self, infos: list[GameObjectInfo], on_duplicate: DuplicatePolicy = "first"):
        self._by_name: dict[str, GameObjectInfo] = {}
        self._by_id: dict[int, GameObjectInfo] = {}

        for info in sorted(infos, key=lambda i: i.game_object_id):
            self._by_id[info.game_object_id] = info
            if info.name in self._by_name:
                if on_duplicate == "error":
                    raise StructuralInconsistency(f"Duplicate game object name {info.name}")
                logger.warning(
                    f"Duplicate game object name {info.name}: keeping "
                    f"{self._by_name[info.name].game_object_id}, ignoring {info.game_object_id}"
                )
                continue
            self._by_name[info.name] = info

    @classmethod
    def from_file(cls, assets_file: AssetsFile, on_duplicate: DuplicatePolicy = "first") -> "HierarchyIndex":
        """Index every game object in ``assets_file``.

        Raises:
            StructuralInconsistency: If a parent chain is broken or cyclic,
                or on a duplicate name with ``on_duplicate="error"``
        """
        names_by_transform: dict[int, str] = {}
        infos: list[GameObjectInfo] = []

        for go_entry in assets_file.objects_of_class(GAME_OBJECT_CLASS):
            transform_id = _find_transform(assets_file, go_entry)
            if transform_id is None:
                logger.debug(f"Game object {go_entry.path_id} has no transform, not indexed")
                continue

            transform = assets_file.get_object(transform_id)
            infos.append(
                GameObjectInfo(
                    name=_hierarchy_name(assets_file, transform_id, names_by_transform),
                    game_object_id=go_entry.path_id,
                    transform_id=transform_id,
                    parent_transform_id=transform.tree.get_ref("m_Father").path_id,
                )
            )

        logger.debug(f"Indexed {len(infos)} game objects in {assets_file.name}")
        return cls(infos, on_duplicate)

    def lookup_name(self, name: str) -> GameObjectInfo | None:
        return self._by_name.get(name)

    def lookup_game_object(self, path_id: int) -> GameObjectInfo | None:
        return self._by_id.get(path_id)

    def __iter__(self) -> Iterator[GameObjectInfo]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def _find_transform(assets_file: AssetsFile, go_entry: ObjectEntry) -> int | None:
    """Return the path id of the transform component of a game object."""
    for index, _ in enumerate(go_entry.tree.get("m_Component", list)):
        ref = go_entry.tree.get_ref(f"m_Component.{index}.component")
        if not ref.is_local or ref.path_id not in assets_file:
            continue
        if assets_file.get_object(ref.path_id).class_name in TRANSFORM_CLASSES:
            return ref.path_id
    return None


def _hierarchy_name(assets_file: AssetsFile, transform_id: int, cache: dict[int, str]) -> str:
    """Build the hierarchical name of a transform by walking its parents."""
    chain: list[int] = []
    current = transform_id

    # Walk up until a root or an already named ancestor
    while current != 0 and current not in cache:
        if current in chain:
            raise StructuralInconsistency(f"Transform parent cycle through {current} in {assets_file.name}")
        if current not in assets_file:
            raise StructuralInconsistency(
                f"Transform {chain[-1]} has missing parent {current} in {assets_file.name}"
            )
        chain.append(current)
        current = assets_file.get_object(current).tree.get_ref("m_Father").path_id

    prefix = cache.get(current, "")
    for tid in reversed(chain):
        tree = assets_file.get_object(tid).tree
        go_ref = tree.get_ref("m_GameObject")
        try:
            go_name = assets_file.get_object(go_ref.path_id).tree.get("m_Name", str)
        except (KeyError, TypeMismatch) as e:
            raise StructuralInconsistency(f"Transform {tid} has no named game object: {e}") from e
        prefix = f"{prefix}{SEPARATOR}{go_name}" if prefix else go_name
        cache[tid] = prefix

    return cache[transform_id]
