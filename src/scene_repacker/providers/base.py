"""Base abstractions for asset-object providers.

A provider turns a stored package into the in-memory object tables of
:mod:`scene_repacker.core.model` and writes them back out. Decoding and
encoding are platform specific; object lookups and reference rewriting are
shared by every provider and implemented here.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..core.errors import StructuralInconsistency
from ..core.model import AssetsFile, ObjectEntry, Package
from ..core.types import FILE_ID_FIELD, PATH_ID_FIELD
from ..core.values import ValueTree

# Class of the package-level descriptor object (container and preload table)
DESCRIPTOR_CLASS = "AssetBundle"


class AssetProvider(ABC):
    """Abstract base class for package codecs.

    Implementations provide platform-specific logic for reading and writing
    packages, while adhering to this common interface.
    """

    @abstractmethod
    def load(self, source: Path | bytes) -> Package:
        """Decode a package.

        Args:
            source: Path to the package file, or its raw bytes

        Returns:
            The decoded package

        Raises:
            PackageIOError: If the package cannot be read
            StructuralInconsistency: If the content cannot be decoded
        """
        pass

    @abstractmethod
    def unload(self, package: Package) -> None:
        """Release everything held for ``package``."""
        pass

    @abstractmethod
    def serialize(self, package: Package, output_path: Path) -> None:
        """Encode ``package`` to ``output_path``.

        Raises:
            PackageIOError: If the output cannot be written
        """
        pass

    def get_object(self, assets_file: AssetsFile, path_id: int) -> ValueTree:
        """Return the value tree of the object at ``path_id``."""
        return assets_file.get_object(path_id).tree

    def find_descriptor(self, assets_file: AssetsFile) -> ObjectEntry | None:
        """Return the descriptor object of ``assets_file`` if it has one."""
        descriptors = assets_file.objects_of_class(DESCRIPTOR_CLASS)
        return descriptors[0] if descriptors else None

    def get_descriptor_object(self, assets_file: AssetsFile) -> ObjectEntry:
        """Return the descriptor object of ``assets_file``.

        Raises:
            StructuralInconsistency: If the file has no descriptor
        """
        entry = self.find_descriptor(assets_file)
        if entry is None:
            raise StructuralInconsistency(f"No {DESCRIPTOR_CLASS} object in {assets_file.name}")
        return entry

    def redirect_references(
        self,
        assets_file: AssetsFile,
        path_id: int,
        from_id: int,
        to_id: int,
    ) -> int:
        """Rewrite local references to ``from_id`` inside one object.

        Args:
            assets_file: File holding the object
            path_id: Object whose fields are rewritten
            from_id: Path id to replace
            to_id: Replacement path id

        Returns:
            Number of reference fields rewritten
        """
        count = 0
        for _, node in assets_file.get_object(path_id).tree.iter_references():
            if node[FILE_ID_FIELD] == 0 and node[PATH_ID_FIELD] == from_id:
                node[PATH_ID_FIELD] = to_id
                count += 1
        return count
