"""Composition of preload table builders."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from .base import PreloadTableBuilder

if TYPE_CHECKING:
    from ..core.types import ObjectRef
    from ..repacking.context import RepackingContext


class UnionPreloads(PreloadTableBuilder):
    """Run several builders in order over one working set.

    Later builders see the entries added by earlier ones, so augmenting
    builders such as ContainerAnchoredPreloads belong after DirectPreloads.

    Example:
        >>> builder = UnionPreloads([DirectPreloads(), ContainerAnchoredPreloads(resolver)])
    """

    def __init__(self, builders: Sequence[PreloadTableBuilder]):
        self.builders = list(builders)

    def build_preload_table(
        self,
        root_id: int,
        ctx: "RepackingContext",
        table: "set[ObjectRef]",
    ) -> None:
        for builder in self.builders:
            builder.build_preload_table(root_id, ctx, table)

    def reset(self) -> None:
        for builder in self.builders:
            builder.reset()
