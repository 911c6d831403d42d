"""Snapshot provider: packages stored as JSON documents.

A snapshot holds every assets file of a bundle with its external
dependency list, its type schemas and its object table. Documents are
validated against ``schemas/package.schema.json`` on load and before they
are written.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ...core.errors import PackageIOError, SchemaValidationError, StructuralInconsistency
from ...core.model import AssetsFile, ObjectEntry, Package
from ...core.types import FileSnapshot, PackageSnapshot
from ...core.validator import describe_error, validate_package
from ...core.values import ValueTree
from ...providers.base import AssetProvider
from .buffers import BufferPool, RentedFile

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "scene-package"
SNAPSHOT_VERSION = 1


def package_from_document(document: Any) -> Package:
    """Build a package from a decoded snapshot document.

    Raises:
        SchemaValidationError: If the document doesn't match the schema
        StructuralInconsistency: If a file repeats a path id
    """
    try:
        validate_package(document)
    except ValidationError as e:
        raise SchemaValidationError(describe_error(e)) from e

    package = Package(name=document["name"])
    for file_doc in document["files"]:
        assets_file = AssetsFile(
            name=file_doc["name"],
            externals=list(file_doc["externals"]),
            types=copy.deepcopy(file_doc["types"]),
        )
        for obj in file_doc["objects"]:
            entry = ObjectEntry(
                path_id=obj["path_id"],
                class_name=obj["class_name"],
                tree=ValueTree(copy.deepcopy(obj["value"])),
            )
            try:
                assets_file.add_object_entry(entry)
            except ValueError as e:
                raise StructuralInconsistency(str(e)) from e
        package.files.append(assets_file)

    return package


def package_to_document(package: Package) -> PackageSnapshot:
    """Encode a package as a snapshot document."""
    files: list[FileSnapshot] = []
    for assets_file in package.files:
        files.append(
            FileSnapshot(
                name=assets_file.name,
                externals=list(assets_file.externals),
                types=copy.deepcopy(assets_file.types),
                objects=[
                    {
                        "path_id": entry.path_id,
                        "class_name": entry.class_name,
                        "value": copy.deepcopy(entry.tree.data),
                    }
                    for entry in assets_file
                ],
            )
        )

    return PackageSnapshot(
        format=SNAPSHOT_FORMAT,
        version=SNAPSHOT_VERSION,
        name=package.name,
        files=files,
    )


class SnapshotProvider(AssetProvider):
    """Provider for JSON package snapshots.

    Example:
        >>> provider = SnapshotProvider()
        >>> package = provider.load(Path("scene.json"))
        >>> provider.serialize(package, Path("out.json"))
    """

    def __init__(self, pool: BufferPool | None = None):
        """Initialize the provider.

        Args:
            pool: Buffer pool used to read package files; defaults to the
                shared pool
        """
        self.pool = pool
        self._loaded: dict[int, Package] = {}

    def load(self, source: Path | bytes) -> Package:
        if isinstance(source, (bytes, bytearray)):
            package = package_from_document(self._decode(source, "<bytes>"))
        else:
            path = Path(source)
            try:
                with RentedFile(path, self.pool) as data:
                    document = self._decode(data, str(path))
            except OSError as e:
                raise PackageIOError(f"Unable to read package {path}: {e}") from e
            package = package_from_document(document)

        self._loaded[id(package)] = package
        logger.debug(f"Loaded package {package.name} with {len(package.files)} files")
        return package

    def unload(self, package: Package) -> None:
        self._loaded.pop(id(package), None)
        package.files.clear()

    def serialize(self, package: Package, output_path: Path) -> None:
        document = package_to_document(package)
        try:
            validate_package(document)
        except ValidationError as e:
            raise SchemaValidationError(describe_error(e)) from e

        try:
            with Path(output_path).open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise PackageIOError(f"Unable to write package {output_path}: {e}") from e

        logger.info(f"Wrote {package.name} to {output_path}")

    @staticmethod
    def _decode(data: bytes | bytearray | memoryview, origin: str) -> Any:
        try:
            return json.loads(bytes(data))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StructuralInconsistency(f"{origin} is not a package snapshot: {e}") from e
