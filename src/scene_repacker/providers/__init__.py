"""Asset-object provider interface.

Concrete providers live in the platforms/ directory.
"""

from .base import DESCRIPTOR_CLASS, AssetProvider

__all__ = ["AssetProvider", "DESCRIPTOR_CLASS"]
