"""Resolution of cab names to bundle paths.

A cab name is the lower-case file name of an external dependency, e.g.
``"cab-4f1e..."``. Resolvers answer with the path of the bundle holding
that cab, ``None`` if the cab is known but should be left alone, or raise
ResolutionFailure if they do not know it.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..core.errors import ResolutionFailure


class CabResolver(ABC):
    """Abstract base class for cab name resolvers."""

    @abstractmethod
    def resolve(self, cab_name: str) -> Path | None:
        """Return the bundle path for ``cab_name``.

        Args:
            cab_name: Lower-case cab name

        Returns:
            Path to the bundle, or None if the bundle is excluded

        Raises:
            ResolutionFailure: If the cab name is unknown
        """
        pass

    def reset(self) -> None:
        """Forget names cached from a previous repacking run."""


class MappingCabResolver(CabResolver):
    """Resolve cab names from an explicit table.

    Example:
        >>> resolver = MappingCabResolver({"cab-1234": Path("bundles/shared.json"), "cab-5678": None})
    """

    def __init__(self, mapping: Mapping[str, Path | str | None]):
        self.mapping: dict[str, Path | None] = {
            name.lower(): (Path(path) if path is not None else None)
            for name, path in mapping.items()
        }

    def resolve(self, cab_name: str) -> Path | None:
        try:
            return self.mapping[cab_name.lower()]
        except KeyError:
            raise ResolutionFailure(cab_name) from None


class DirectoryCabResolver(CabResolver):
    """Resolve cab names to files in a directory named after the cab.

    Args:
        directory: Directory holding one bundle per cab
        suffix: File suffix appended to the cab name (e.g. ".json")
    """

    def __init__(self, directory: Path, suffix: str = ""):
        self.directory = Path(directory)
        self.suffix = suffix
        self._index: dict[str, Path] | None = None

    def _build_index(self) -> dict[str, Path]:
        index: dict[str, Path] = {}
        if not self.directory.is_dir():
            return index
        for path in self.directory.iterdir():
            if not path.is_file():
                continue
            name = path.name
            if self.suffix:
                if not name.lower().endswith(self.suffix.lower()):
                    continue
                name = name[: -len(self.suffix)]
            index[name.lower()] = path
        return index

    def resolve(self, cab_name: str) -> Path | None:
        if self._index is None:
            self._index = self._build_index()
        try:
            return self._index[cab_name.lower()]
        except KeyError:
            raise ResolutionFailure(cab_name) from None

    def reset(self) -> None:
        self._index = None


class UnionCabResolver(CabResolver):
    """Ask several resolvers in order; the first that knows the cab wins."""

    def __init__(self, resolvers: Sequence[CabResolver]):
        self.resolvers = list(resolvers)

    def resolve(self, cab_name: str) -> Path | None:
        for resolver in self.resolvers:
            try:
                return resolver.resolve(cab_name)
            except ResolutionFailure:
                continue
        raise ResolutionFailure(cab_name)

    def reset(self) -> None:
        for resolver in self.resolvers:
            resolver.reset()
