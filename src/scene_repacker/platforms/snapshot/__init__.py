"""Snapshot platform for the repacking engine.

This platform stores packages as JSON snapshots validated against the
package schema. It registers itself with ProviderRegistry as 'snapshot'.
"""

from .buffers import BufferPool, RentedFile, shared_pool
from .provider import SnapshotProvider, package_from_document, package_to_document

# Auto-register with the registry
from ...registry import ProviderRegistry


def _create_snapshot_provider(pool: BufferPool | None = None, **kwargs) -> SnapshotProvider:
    """Factory function for creating snapshot providers.

    Args:
        pool: Optional buffer pool for reading package files
        **kwargs: Additional parameters (unused for snapshots)
    """
    return SnapshotProvider(pool)


# Auto-register at module import
ProviderRegistry.register_factory('snapshot', _create_snapshot_provider)

__all__ = [
    "BufferPool",
    "RentedFile",
    "SnapshotProvider",
    "package_from_document",
    "package_to_document",
    "shared_pool",
]
