"""Layer metadata CLI entry points.
This module exposes commands to inspect and edit per-layer metadata.
It maps argparse commands onto LayerMetadataStore calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import MetadataStoreConfig
from core.errors import MetadataEncodeError, MetadataLoadError, MetadataStoreError
from store.layer_metadata_store import LayerMetadataStore
from store.value_encoding import decode_value


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="layer-metadata", description="Inspect and edit layer metadata"
    )
    parser.add_argument("--data-root", help="Override LAYER_METADATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_get_command(subparsers)
    _add_put_command(subparsers)
    _add_path_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the layer metadata CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.data_root)
        with LayerMetadataStore(config, start_flusher=False) as store:
            if args.command == "get":
                return _run_get_command(store, args)
            if args.command == "put":
                return _run_put_command(store, args)
            if args.command == "path":
                return _run_path_command(store, args)
    except MetadataLoadError as error:
        print(f"load_error={error}")
        return 1
    except MetadataEncodeError as error:
        print(f"encode_error={error}")
        return 1
    except MetadataStoreError as error:
        print(f"store_error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> MetadataStoreConfig:
    """Build store config with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Store configuration.
    """
    config = MetadataStoreConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _add_get_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("get", help="Print one entry or all entries of a layer")
    parser.add_argument("layer", help="Layer name")
    parser.add_argument("key", nargs="?", help="Entry key; all entries when omitted")


def _add_put_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("put", help="Store one entry for a layer")
    parser.add_argument("layer", help="Layer name")
    parser.add_argument("key", help="Entry key")
    parser.add_argument("value", help="Entry value")


def _add_path_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("path", help="Print the metadata file a layer loads from")
    parser.add_argument("layer", help="Layer name")


def _run_get_command(store: LayerMetadataStore, args: argparse.Namespace) -> int:
    """Handle get command.

    Args:
        store: Metadata store.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when the requested key is absent.
    """
    if args.key is not None:
        value = store.get_entry(args.layer, args.key)
        if value is None:
            return 1
        print(value)
        return 0
    metadata = store.get_layer_metadata(args.layer)
    for key in sorted(metadata):
        print(f"{key}={decode_value(metadata[key])}")
    return 0


def _run_put_command(store: LayerMetadataStore, args: argparse.Namespace) -> int:
    """Handle put command; the store flushes when the command exits."""
    store.put_entry(args.layer, args.key, args.value)
    return 0


def _run_path_command(store: LayerMetadataStore, args: argparse.Namespace) -> int:
    """Handle path command."""
    print(store.codec.resolve_metadata_file(args.layer))
    return 0
