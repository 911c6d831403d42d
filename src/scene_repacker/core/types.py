"""Type definitions for object graphs and package snapshots.

The TypedDict classes mirror the JSON Schemas in ``schemas/``; the
remaining types describe references and dependency closures inside a
single assets file.
"""

from dataclasses import dataclass, field
from typing import Any, NamedTuple, TypedDict

# Field names of a reference ("PPtr") inside a value tree
FILE_ID_FIELD = "m_FileID"
PATH_ID_FIELD = "m_PathID"


class ObjectRef(NamedTuple):
    """Typed pointer to an object.

    ``file_id`` 0 is the file holding the reference; any other value is a
    1-based index into that file's external dependency list.
    """

    file_id: int
    path_id: int

    @property
    def is_null(self) -> bool:
        return self.path_id == 0

    @property
    def is_local(self) -> bool:
        return self.file_id == 0


@dataclass(frozen=True)
class DependencyClosure:
    """Objects required to materialize a root object.

    Attributes:
        internal_paths: Path ids in the same file reachable through one or
            more dependency edges
        external_paths: References into external files reached by a single
            hop from the root or from an object in ``internal_paths``
    """

    internal_paths: frozenset[int] = field(default_factory=frozenset)
    external_paths: frozenset[ObjectRef] = field(default_factory=frozenset)


class PPtrSnapshot(TypedDict):
    """Serialized reference field."""

    m_FileID: int
    m_PathID: int


class ObjectSnapshot(TypedDict):
    """One entry of an assets file's object table."""

    path_id: int
    class_name: str
    value: dict[str, Any]


class FileSnapshot(TypedDict):
    """One assets file inside a package."""

    name: str
    externals: list[str]  # Original path names of external dependencies
    types: dict[str, Any]  # Type schemas keyed by class name
    objects: list[ObjectSnapshot]


class PackageSnapshot(TypedDict):
    """Complete package as stored by the snapshot provider."""

    format: str
    version: int
    name: str
    files: list[FileSnapshot]


class RepackSummary(TypedDict):
    """Result of a repacking run, as emitted by the CLI."""

    bundle_name: str
    cab_name: str
    game_object_assets: dict[str, str]  # Container path -> root name
    repacked: dict[str, str]  # Requested name -> container path
    non_repacked_assets: list[str]
