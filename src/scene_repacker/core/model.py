"""In-memory object tables for packages and their assets files.

A provider decodes a package into these structures; the repacker mutates
them in place and hands them back to the provider for serialization.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import StructuralInconsistency
from .values import ValueTree


@dataclass
class ObjectEntry:
    """One object in an assets file's object table."""

    path_id: int
    class_name: str
    tree: ValueTree


class AssetsFile:
    """An assets file: an object table plus its external dependency list.

    Path ids are unique within one file at all times; the table operations
    refuse to break that.
    """

    def __init__(
        self,
        name: str,
        externals: list[str] | None = None,
        types: dict[str, Any] | None = None,
    ):
        self.name = name
        self.externals = externals if externals is not None else []
        self.types = types if types is not None else {}
        self._objects: dict[int, ObjectEntry] = {}

    def __contains__(self, path_id: object) -> bool:
        return path_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[ObjectEntry]:
        for path_id in sorted(self._objects):
            yield self._objects[path_id]

    def __repr__(self) -> str:
        return f"AssetsFile({self.name!r}, objects={len(self._objects)})"

    @property
    def path_ids(self) -> set[int]:
        return set(self._objects)

    def get_object(self, path_id: int) -> ObjectEntry:
        """Return the object at ``path_id``.

        Raises:
            KeyError: If no object has that path id
        """
        try:
            return self._objects[path_id]
        except KeyError:
            raise KeyError(f"No object with path id {path_id} in {self.name}") from None

    def objects_of_class(self, class_name: str) -> list[ObjectEntry]:
        return [entry for entry in self if entry.class_name == class_name]

    def add_object_entry(self, entry: ObjectEntry) -> None:
        """Add an object to the table.

        Raises:
            ValueError: If the path id is already taken
        """
        if entry.path_id in self._objects:
            raise ValueError(f"Path id {entry.path_id} already exists in {self.name}")
        self._objects[entry.path_id] = entry

    def remove_object_entry(self, path_id: int) -> ObjectEntry:
        """Remove and return the object at ``path_id``."""
        entry = self.get_object(path_id)
        del self._objects[path_id]
        return entry

    def set_object_id(self, path_id: int, new_path_id: int) -> None:
        """Move the object at ``path_id`` to ``new_path_id``.

        Only the table key changes; references to the old id are untouched.

        Raises:
            KeyError: If there is no object at ``path_id``
            ValueError: If ``new_path_id`` is already taken
        """
        if new_path_id in self._objects:
            raise ValueError(f"Path id {new_path_id} already exists in {self.name}")
        entry = self.remove_object_entry(path_id)
        entry.path_id = new_path_id
        self._objects[new_path_id] = entry

    def external_cab_name(self, file_id: int) -> str:
        """Return the lower-case cab name of external dependency ``file_id``.

        Raises:
            StructuralInconsistency: If ``file_id`` is not a valid external index
        """
        if not 1 <= file_id <= len(self.externals):
            raise StructuralInconsistency(
                f"File id {file_id} out of range for {self.name} "
                f"({len(self.externals)} externals)"
            )
        return self.externals[file_id - 1].split("/")[-1].lower()


@dataclass
class Package:
    """A bundle: a named collection of assets files."""

    name: str
    files: list[AssetsFile] = field(default_factory=list)

    def get_file(self, name: str) -> AssetsFile:
        for assets_file in self.files:
            if assets_file.name == name:
                return assets_file
        raise KeyError(f"No file named {name} in package {self.name}")
