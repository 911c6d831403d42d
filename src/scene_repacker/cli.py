"""Command-line interface for the scene repacker.

This module provides the CLI entry point for stripping a scene bundle down
to a set of game objects and printing the repack summary as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .core.errors import RepackError
from .core.types import RepackSummary
from .core.validator import validate_summary_with_error_details
from .log import register_sink, unregister_sink
from .preload import (
    CabResolver,
    ContainerAnchoredPreloads,
    DirectoryCabResolver,
    DirectPreloads,
    MappingCabResolver,
    PreloadTableBuilder,
    UnionCabResolver,
    UnionPreloads,
)
from .registry import ProviderRegistry
from .repacking import RepackingParams

_SINK_PREFIXES = {"WARNING": "Warning: ", "ERROR": "Error: ", "DEBUG": "Debug: "}


def _stderr_sink(level: str, message: str) -> None:
    print(f"{_SINK_PREFIXES.get(level, '')}{message}", file=sys.stderr)


def build_preload_resolver(
    cab_map: Path | None = None,
    cab_dir: Path | None = None,
    cab_suffix: str = "",
) -> PreloadTableBuilder:
    """Build the preload table builder for the given cab sources.

    Without any cab source only direct external dependencies are preloaded.

    Args:
        cab_map: JSON file mapping cab names to bundle paths (or null to
            exclude a cab)
        cab_dir: Directory of bundles named after their cab
        cab_suffix: File suffix of the bundles in ``cab_dir``

    Raises:
        ValueError: If the cab map is not a JSON object
    """
    resolvers: list[CabResolver] = []

    if cab_map is not None:
        with cab_map.open("r", encoding="utf-8") as f:
            mapping = json.load(f)
        if not isinstance(mapping, dict):
            raise ValueError(f"Cab map {cab_map} must be a JSON object")
        resolvers.append(MappingCabResolver(mapping))

    if cab_dir is not None:
        resolvers.append(DirectoryCabResolver(cab_dir, cab_suffix))

    if not resolvers:
        return DirectPreloads()

    return UnionPreloads([DirectPreloads(), ContainerAnchoredPreloads(UnionCabResolver(resolvers))])


def repack_bundle(
    bundle_path: Path,
    object_names: list[str],
    container_prefix: str,
    out_path: Path,
    bundle_name: str | None = None,
    container_suffix: str = "prefab",
    preload_resolver: PreloadTableBuilder | None = None,
    provider_name: str = "snapshot",
) -> RepackSummary:
    """Repack a scene bundle and return the summary.

    Raises:
        ValueError: If the parameters are invalid or the provider is unknown
        RepackError: If repacking fails
    """
    params = RepackingParams(
        scene_bundle_path=bundle_path,
        object_names=object_names,
        container_prefix=container_prefix,
        out_bundle_path=out_path,
        bundle_name=bundle_name,
        container_suffix=container_suffix,
    )

    print(f"Repacking {bundle_path}", file=sys.stderr)
    repacker = ProviderRegistry.create_repacker(provider_name, preload_resolver=preload_resolver)
    result = repacker.repack(params)
    print(f"Wrote {len(result.game_object_assets)} container entries to {out_path}", file=sys.stderr)

    return result.to_dict()


def main() -> None:
    """Main entry point for the repack script."""
    parser = argparse.ArgumentParser(
        description="Strip a scene bundle down to the given game objects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  scene-repack --bundle level1.json --names Enemies/Boss Props/Door \\
      --prefix Assets/Level1 --out boss.json

  # Anchor preloads to container entries of the shared bundles
  scene-repack --bundle level1.json --names Enemies/Boss --prefix Assets/Level1 \\
      --out boss.json --cab-dir bundles/ --cab-suffix .json
        """,
    )

    parser.add_argument("--bundle", required=True, help="Scene bundle to repack")

    parser.add_argument(
        "--names",
        required=True,
        nargs="+",
        help="Hierarchical names of the game objects to keep (space-separated)",
    )

    parser.add_argument("--prefix", required=True, help="Prefix for container paths")

    parser.add_argument("--out", required=True, help="Output bundle path")

    parser.add_argument("--bundle-name", help="Name of the output bundle (default: output file stem)")

    parser.add_argument("--suffix", default="prefab", help="Extension of container paths")

    parser.add_argument("--cab-map", help="JSON file mapping cab names to bundle paths")

    parser.add_argument("--cab-dir", help="Directory of bundles named after their cab")

    parser.add_argument("--cab-suffix", default="", help="File suffix of bundles in --cab-dir")

    parser.add_argument(
        "--provider",
        default="snapshot",
        help=f"Package format (available: {', '.join(ProviderRegistry.list_providers())})",
    )

    parser.add_argument("--verbose", action="store_true", help="Log debug messages")

    args = parser.parse_args()

    # Validate path exists
    bundle_path = Path(args.bundle)
    if not bundle_path.is_file():
        print(f"Error: Bundle does not exist: {bundle_path}", file=sys.stderr)
        sys.exit(1)

    sink = register_sink(_stderr_sink, logging.DEBUG if args.verbose else logging.INFO)
    try:
        preload_resolver = build_preload_resolver(
            cab_map=Path(args.cab_map) if args.cab_map else None,
            cab_dir=Path(args.cab_dir) if args.cab_dir else None,
            cab_suffix=args.cab_suffix,
        )
        summary = repack_bundle(
            bundle_path=bundle_path,
            object_names=args.names,
            container_prefix=args.prefix,
            out_path=Path(args.out),
            bundle_name=args.bundle_name,
            container_suffix=args.suffix,
            preload_resolver=preload_resolver,
            provider_name=args.provider,
        )

        is_valid, error_msg = validate_summary_with_error_details(summary)
        if not is_valid:
            print("Error: Summary validation failed:", file=sys.stderr)
            print(error_msg, file=sys.stderr)
            sys.exit(1)

        # Output JSON to stdout
        json.dump(summary, sys.stdout, indent=2)
        print()  # Add newline at end

    except (RepackError, ValueError, OSError) as e:
        print(f"Error: Failed to repack bundle: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        unregister_sink(sink)


if __name__ == "__main__":
    main()
