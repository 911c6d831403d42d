"""Preload table builders and cab name resolvers."""

from .base import PreloadTableBuilder
from .cab import CabResolver, DirectoryCabResolver, MappingCabResolver, UnionCabResolver
from .container_anchored import ContainerAnchoredPreloads, ContainerBundleData
from .direct import DirectPreloads
from .union import UnionPreloads

__all__ = [
    "PreloadTableBuilder",
    "DirectPreloads",
    "ContainerAnchoredPreloads",
    "ContainerBundleData",
    "UnionPreloads",
    "CabResolver",
    "MappingCabResolver",
    "DirectoryCabResolver",
    "UnionCabResolver",
]
