"""Base class for scene repackers.

This module provides the load / run / unload frame shared by repackers;
subclasses implement the transformation itself.
"""

import logging
from abc import ABC, abstractmethod

from ..core.errors import StructuralInconsistency
from ..core.model import Package
from ..providers.base import AssetProvider
from .context import RepackingContext
from .params import RepackedBundleData, RepackingParams, cab_name_for

logger = logging.getLogger(__name__)

# Scene bundles keep the descriptor in a companion file with this suffix
SHARED_ASSETS_SUFFIX = ".sharedAssets"


class SceneRepacker(ABC):
    """Repacks a scene bundle into a bundle loadable by asset name.

    Every call to repack() builds a fresh RepackingContext, so no index or
    cache survives from one package to the next.
    """

    def __init__(self, provider: AssetProvider):
        """Initialize the repacker.

        Args:
            provider: Provider used to read the scene bundle, write the
                output and load any external bundles
        """
        self.provider = provider

    def repack(self, params: RepackingParams) -> RepackedBundleData:
        """Repack the scene bundle described by ``params``.

        Returns:
            Summary of what was repacked

        Raises:
            PackageIOError: If the bundle cannot be read or the output
                cannot be written
            StructuralInconsistency: If the bundle does not have the
                expected layout
        """
        package = self.provider.load(params.scene_bundle_path)
        try:
            ctx = self.create_context(package)
            bundle_name = params.bundle_name or params.out_bundle_path.stem
            out_data = RepackedBundleData(bundle_name=bundle_name, cab_name=cab_name_for(bundle_name))
            self.run(ctx, params, out_data)
        finally:
            self.provider.unload(package)

        return out_data

    def create_context(self, package: Package) -> RepackingContext:
        """Identify the main and shared files of a scene bundle.

        The main file is the first file without the shared assets suffix.
        The descriptor is taken from another file when one holds it, so a
        placeholder descriptor in the main file does not hide the real one.

        Raises:
            StructuralInconsistency: If either file is missing
        """
        main_file = None
        for assets_file in package.files:
            if not assets_file.name.endswith(SHARED_ASSETS_SUFFIX):
                main_file = assets_file
                break
        if main_file is None:
            raise StructuralInconsistency(f"Package {package.name} has no main scene file")

        shared_file = None
        for assets_file in package.files:
            if assets_file is not main_file and self.provider.find_descriptor(assets_file) is not None:
                shared_file = assets_file
                break
        if shared_file is None and self.provider.find_descriptor(main_file) is not None:
            shared_file = main_file
        if shared_file is None:
            raise StructuralInconsistency(f"Package {package.name} has no descriptor object")

        logger.debug(f"Main file {main_file.name}, descriptor in {shared_file.name}")
        return RepackingContext(
            provider=self.provider,
            package=package,
            main_file=main_file,
            shared_file=shared_file,
        )

    @abstractmethod
    def run(self, ctx: RepackingContext, params: RepackingParams, out_data: RepackedBundleData) -> None:
        """Transform the loaded package and write it out.

        Args:
            ctx: Context of this run
            params: Parameters of the operation
            out_data: Summary to fill in
        """
        pass
