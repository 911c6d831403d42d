"""Scene Repacker.

This package strips a scene bundle down to the objects a set of game
objects needs and rebuilds the bundle's container and preload table, so a
host runtime can load those game objects by name.
"""

# Core library interface
from .registry import ProviderRegistry
from .repacking import RepackedBundleData, RepackingParams, RepackStage, SceneRepacker, StrippedSceneRepacker
from .providers import AssetProvider

# Object-graph analysis
from .bundle import DependencyResolver, GameObjectInfo, HierarchyIndex

# Preload table builders
from .preload import (
    CabResolver,
    ContainerAnchoredPreloads,
    DirectoryCabResolver,
    DirectPreloads,
    MappingCabResolver,
    PreloadTableBuilder,
    UnionCabResolver,
    UnionPreloads,
)

# Core utilities
from .core import (
    DependencyClosure,
    ObjectRef,
    PackageIOError,
    RepackError,
    ResolutionFailure,
    StructuralInconsistency,
    TypeMismatch,
    ValueTree,
    find_ancestor,
    get_highest_nodes,
)
from .log import register_sink, unregister_sink

__version__ = "0.1.0"

# Auto-discover and register all platforms
ProviderRegistry.discover_platforms()

__all__ = [
    # Primary library interface
    "ProviderRegistry",
    "StrippedSceneRepacker",
    "SceneRepacker",
    "RepackingParams",
    "RepackedBundleData",
    "RepackStage",
    "AssetProvider",
    # Object-graph analysis
    "DependencyResolver",
    "HierarchyIndex",
    "GameObjectInfo",
    # Preload tables
    "PreloadTableBuilder",
    "DirectPreloads",
    "ContainerAnchoredPreloads",
    "UnionPreloads",
    "CabResolver",
    "MappingCabResolver",
    "DirectoryCabResolver",
    "UnionCabResolver",
    # Core utilities
    "DependencyClosure",
    "ObjectRef",
    "ValueTree",
    "find_ancestor",
    "get_highest_nodes",
    "RepackError",
    "StructuralInconsistency",
    "TypeMismatch",
    "ResolutionFailure",
    "PackageIOError",
    # Logging
    "register_sink",
    "unregister_sink",
]
