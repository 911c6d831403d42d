"""Object-graph analysis for a single assets file."""

from .dependencies import HIERARCHY_PARENT_FIELD, DependencyResolver
from .hierarchy import GAME_OBJECT_CLASS, TRANSFORM_CLASSES, GameObjectInfo, HierarchyIndex

__all__ = [
    "DependencyResolver",
    "GameObjectInfo",
    "HierarchyIndex",
    "GAME_OBJECT_CLASS",
    "HIERARCHY_PARENT_FIELD",
    "TRANSFORM_CLASSES",
]
