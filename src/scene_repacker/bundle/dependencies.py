"""Direct and transitive dependencies of objects in one assets file.

A dependency is any reference field of an object except the transform
parent pointer. Following parent pointers would pull every ancestor, and
through them every sibling subtree, into a closure; the hierarchy is
instead repaired by deparenting after stripping.
"""

import logging

from ..core.errors import StructuralInconsistency
from ..core.model import AssetsFile
from ..core.types import FILE_ID_FIELD, PATH_ID_FIELD, DependencyClosure, ObjectRef

logger = logging.getLogger(__name__)

# Reference fields that point up the hierarchy rather than at a dependency
HIERARCHY_PARENT_FIELD = "m_Father"


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class DependencyResolver:
    """Computes and caches dependency sets for objects in one file.

    Results are cached for the lifetime of the instance. Create a new
    resolver for every repacking run, and call invalidate() after changing
    path ids in the file.

    Example:
        >>> deps = DependencyResolver(scene_file)
        >>> closure = deps.find_bundle_deps(game_object_path_id)
        >>> closure.internal_paths
        frozenset({12, 13, 20})
    """

    def __init__(self, assets_file: AssetsFile):
        self.assets_file = assets_file
        self._immediate: dict[int, frozenset[ObjectRef]] = {}
        self._closures: dict[int, DependencyClosure] = {}

    def invalidate(self) -> None:
        """Drop all cached results."""
        self._immediate.clear()
        self._closures.clear()

    def find_immediate_deps(self, path_id: int) -> frozenset[ObjectRef]:
        """Return every non-null reference held by the object at ``path_id``.

        Self references and references back to an owning object are
        included; the transform parent pointer is not.

        Raises:
            KeyError: If there is no object at ``path_id``
            StructuralInconsistency: If a reference field is malformed
        """
        cached = self._immediate.get(path_id)
        if cached is not None:
            return cached

        entry = self.assets_file.get_object(path_id)
        external_count = len(self.assets_file.externals)
        refs: set[ObjectRef] = set()

        for field_path, node in entry.tree.iter_references():
            file_id = node[FILE_ID_FIELD]
            target = node[PATH_ID_FIELD]
            if not _is_int(file_id) or not _is_int(target):
                raise StructuralInconsistency(
                    f"Malformed reference {field_path} in object {path_id} of {self.assets_file.name}"
                )
            if not 0 <= file_id <= external_count:
                raise StructuralInconsistency(
                    f"Reference {field_path} in object {path_id} of {self.assets_file.name} "
                    f"has file id {file_id} but the file has {external_count} externals"
                )

            if target == 0 or field_path.rsplit(".", 1)[-1] == HIERARCHY_PARENT_FIELD:
                continue
            refs.add(ObjectRef(file_id, target))

        result = frozenset(refs)
        self._immediate[path_id] = result
        return result

    def find_bundle_deps(self, path_id: int) -> DependencyClosure:
        """Return the dependency closure of the object at ``path_id``.

        Internal references are followed transitively; external references
        are recorded but never followed. References to objects missing from
        the table are dangling and left out.

        Raises:
            KeyError: If there is no object at ``path_id``
            StructuralInconsistency: If a reference field is malformed
        """
        cached = self._closures.get(path_id)
        if cached is not None:
            return cached

        if path_id not in self.assets_file:
            raise KeyError(f"No object with path id {path_id} in {self.assets_file.name}")

        internal: set[int] = set()
        external: set[ObjectRef] = set()
        expanded: set[int] = set()
        stack = [path_id]

        while stack:
            current = stack.pop()
            if current in expanded:
                continue
            expanded.add(current)

            for ref in self.find_immediate_deps(current):
                if not ref.is_local:
                    external.add(ref)
                elif ref.path_id not in self.assets_file:
                    logger.debug(f"Dangling reference from {current} to {ref.path_id} in {self.assets_file.name}")
                else:
                    internal.add(ref.path_id)
                    if ref.path_id not in expanded:
                        stack.append(ref.path_id)

        closure = DependencyClosure(frozenset(internal), frozenset(external))
        self._closures[path_id] = closure
        return closure
