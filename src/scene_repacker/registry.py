"""Provider registry for factory-based repacker creation.

This module provides a central registry for provider factories,
enabling format-agnostic repacker creation and automatic
platform discovery.
"""

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .preload.base import PreloadTableBuilder
    from .providers.base import AssetProvider
    from .repacking.stripped import StrippedSceneRepacker


class ProviderRegistry:
    """Central registry for provider factories.

    Platforms register a factory when imported, and the registry can
    automatically discover all available platforms. The repacking engine
    itself never names a concrete package format.
    """

    _factories: dict[str, Callable[..., "AssetProvider"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "AssetProvider"]) -> None:
        """Register a factory function for creating providers.

        Args:
            name: Name of the provider (e.g., 'snapshot')
            factory: Callable that creates an AssetProvider instance
        """
        cls._factories[name] = factory

    @classmethod
    def create_provider(cls, provider_name: str, **kwargs) -> "AssetProvider":
        """Create a provider by name.

        Args:
            provider_name: Name of the registered provider
            **kwargs: Arguments passed to the provider factory

        Raises:
            ValueError: If provider_name is not registered
        """
        if provider_name not in cls._factories:
            available = ', '.join(cls._factories.keys()) or 'none'
            raise ValueError(
                f"Unknown provider: '{provider_name}'. Available providers: {available}"
            )

        return cls._factories[provider_name](**kwargs)

    @classmethod
    def create_repacker(
        cls,
        provider_name: str,
        preload_resolver: "PreloadTableBuilder | None" = None,
        **kwargs,
    ) -> "StrippedSceneRepacker":
        """Create a stripped scene repacker backed by a registered provider.

        Args:
            provider_name: Name of the registered provider
            preload_resolver: Preload table builder; defaults to direct
                external dependencies
            **kwargs: Arguments passed to the provider factory

        Example:
            >>> repacker = ProviderRegistry.create_repacker('snapshot')
            >>> result = repacker.repack(params)
        """
        # Import here to avoid circular dependency
        from .repacking.stripped import StrippedSceneRepacker

        provider = cls.create_provider(provider_name, **kwargs)
        return StrippedSceneRepacker(provider, preload_resolver)

    @classmethod
    def list_providers(cls) -> list[str]:
        """List all registered provider names."""
        return list(cls._factories.keys())

    @classmethod
    def discover_platforms(cls) -> None:
        """Auto-discover and import all platforms.

        Each package under platforms/ is imported; importing it registers
        its factory. Platforms with missing dependencies are skipped.
        """
        platforms_dir = Path(__file__).parent / 'platforms'

        if not platforms_dir.exists():
            return

        for platform_path in platforms_dir.iterdir():
            if not platform_path.is_dir():
                continue

            if not (platform_path / '__init__.py').exists():
                continue

            try:
                importlib.import_module(
                    f'.platforms.{platform_path.name}',
                    package='scene_repacker'
                )
            except ImportError:
                # Platform dependencies not installed
                pass
