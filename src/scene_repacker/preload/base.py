"""Base class for preload table builders.

A preload table lists the references into other bundles that must be
loaded before a container entry can be instantiated.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.types import ObjectRef
    from ..repacking.context import RepackingContext


class PreloadTableBuilder(ABC):
    """Abstract base class for preload table builders.

    Builders extend a working set in place, so they can be chained: each
    one sees what the previous builders added.
    """

    @abstractmethod
    def build_preload_table(
        self,
        root_id: int,
        ctx: "RepackingContext",
        table: "set[ObjectRef]",
    ) -> None:
        """Add the preload entries needed by ``root_id`` to ``table``.

        Args:
            root_id: Path id of the container root in the main file
            ctx: Context of the current repacking run
            table: Working set of (file id, path id) references
        """
        pass

    def reset(self) -> None:
        """Forget state kept from a previous repacking run."""
