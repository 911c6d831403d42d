"""Parameters and results of a repacking operation."""

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

from ..core.types import RepackSummary


def cab_name_for(bundle_name: str) -> str:
    """Return the CAB name Unity derives from a bundle name."""
    return "CAB-" + hashlib.md5(bundle_name.encode("utf-8")).hexdigest()


@dataclass
class RepackingParams:
    """Parameters used for a repacking operation.

    Attributes:
        scene_bundle_path: Path to the scene bundle
        object_names: Hierarchical names of the game objects to include.
            Each one that exists in the bundle gets an ancestor (or itself)
            exposed through the container.
        container_prefix: Prefix of the container paths, e.g. "Assets/Scenes/Level1"
        out_bundle_path: Where the repacked bundle is written
        bundle_name: Name of the new bundle; defaults to the output file stem
        container_suffix: Extension of the container paths
    """

    scene_bundle_path: Path
    object_names: list[str]
    container_prefix: str
    out_bundle_path: Path
    bundle_name: str | None = None
    container_suffix: str = "prefab"

    def __post_init__(self) -> None:
        self.scene_bundle_path = Path(self.scene_bundle_path)
        self.out_bundle_path = Path(self.out_bundle_path)
        self.container_prefix = self.container_prefix.rstrip("/")

        if not self.object_names:
            raise ValueError("At least one object name is required")
        if not self.container_prefix:
            raise ValueError("Container prefix must not be empty")
        if not self.bundle_name:
            self.bundle_name = self.out_bundle_path.stem

    def container_path(self, name: str) -> str:
        """Return the container path exposing the game object ``name``."""
        return f"{self.container_prefix}/{name}.{self.container_suffix}"


@dataclass
class RepackedBundleData:
    """Outcome of a repacking operation.

    Attributes:
        bundle_name: Name of the written bundle
        cab_name: CAB name of the bundle's assets file
        game_object_assets: Container path -> hierarchical name of the
            game object stored there
        repacked: Requested name -> container path of the entry that
            loads it
        non_repacked_assets: Requested names that could not be repacked
    """

    bundle_name: str
    cab_name: str
    game_object_assets: dict[str, str] = field(default_factory=dict)
    repacked: dict[str, str] = field(default_factory=dict)
    non_repacked_assets: list[str] = field(default_factory=list)

    def to_dict(self) -> RepackSummary:
        return RepackSummary(
            bundle_name=self.bundle_name,
            cab_name=self.cab_name,
            game_object_assets=dict(self.game_object_assets),
            repacked=dict(self.repacked),
            non_repacked_assets=list(self.non_repacked_assets),
        )
