"""Preload table from the external references of a closure."""

from typing import TYPE_CHECKING

from .base import PreloadTableBuilder

if TYPE_CHECKING:
    from ..core.types import ObjectRef
    from ..repacking.context import RepackingContext


class DirectPreloads(PreloadTableBuilder):
    """Follow all dependencies inside the bundle and add every external
    reference reached to the preload table."""

    def build_preload_table(
        self,
        root_id: int,
        ctx: "RepackingContext",
        table: "set[ObjectRef]",
    ) -> None:
        table.update(ctx.deps.find_bundle_deps(root_id).external_paths)
