"""Scene repacking pipeline."""

from .base import SceneRepacker
from .context import RepackingContext
from .params import RepackedBundleData, RepackingParams, cab_name_for
from .stripped import DESCRIPTOR_PATH_ID, RepackStage, StrippedSceneRepacker

__all__ = [
    "SceneRepacker",
    "StrippedSceneRepacker",
    "RepackStage",
    "RepackingContext",
    "RepackingParams",
    "RepackedBundleData",
    "DESCRIPTOR_PATH_ID",
    "cab_name_for",
]
