"""Core data model and utilities.

This package contains the error taxonomy, type definitions, the typed
value-tree accessor, in-memory object tables, hierarchical name helpers
and schema validation used across the library.
"""

from .errors import (
    PackageIOError,
    RepackError,
    ResolutionFailure,
    SchemaValidationError,
    StructuralInconsistency,
    TypeMismatch,
)
from .model import AssetsFile, ObjectEntry, Package
from .paths import AncestorMatch, find_ancestor, get_highest_nodes, parent_path
from .types import DependencyClosure, ObjectRef, PackageSnapshot, RepackSummary
from .validator import validate_package, validate_summary, validate_summary_with_error_details
from .values import ValueTree

__all__ = [
    "AncestorMatch",
    "AssetsFile",
    "DependencyClosure",
    "ObjectEntry",
    "ObjectRef",
    "Package",
    "PackageIOError",
    "PackageSnapshot",
    "RepackError",
    "RepackSummary",
    "ResolutionFailure",
    "SchemaValidationError",
    "StructuralInconsistency",
    "TypeMismatch",
    "ValueTree",
    "find_ancestor",
    "get_highest_nodes",
    "parent_path",
    "validate_package",
    "validate_summary",
    "validate_summary_with_error_details",
]
