"""State shared by the stages of one repacking run."""

from dataclasses import dataclass, field

from ..bundle.dependencies import DependencyResolver
from ..bundle.hierarchy import HierarchyIndex
from ..core.model import AssetsFile, Package
from ..providers.base import AssetProvider


@dataclass
class RepackingContext:
    """Context for the current scene repacking operation.

    A context belongs to exactly one run; nothing in it may be reused for
    another package.

    Attributes:
        provider: Provider that loaded the package; it also loads external
            bundles for preload augmentation
        package: The package being repacked
        main_file: The scene's main assets file, which gets stripped
        shared_file: The file holding the package descriptor
        hierarchy: Game object index of the main file, once built
    """

    provider: AssetProvider
    package: Package
    main_file: AssetsFile
    shared_file: AssetsFile
    hierarchy: HierarchyIndex | None = None
    _deps: DependencyResolver | None = field(default=None, init=False, repr=False)

    @property
    def deps(self) -> DependencyResolver:
        """Dependency resolver over the main file, created on first use."""
        if self._deps is None:
            self._deps = DependencyResolver(self.main_file)
        return self._deps
