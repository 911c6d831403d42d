"""Platform implementations for the repacking engine.

This package contains self-contained platform modules that provide
asset-object providers for different package formats.

Each platform module auto-registers itself with the ProviderRegistry
when imported.
"""

# Platform modules are imported dynamically by ProviderRegistry.discover_platforms()
# to handle missing dependencies gracefully
