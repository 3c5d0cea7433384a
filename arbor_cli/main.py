"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m arbor_cli root <element>... [--file PATH] [--append <element>...] [--json]
    python -m arbor_cli prove <element>... --index N [--out PATH] [--json]
    python -m arbor_cli verify <element> --proof PATH|- [--root HEX] [--json]
    python -m arbor_cli config [--init]

Environment Variables:
    ARBOR_HASH_ALGORITHM        Hash function name (default: sha256)
    ARBOR_INSERT_STRATEGY       rebuild or incremental (default: rebuild)
    ARBOR_LOG_LEVEL             Log level (default: INFO)
    ARBOR_LOG_FILE              Also log to this file
    ARBOR_OUTPUT_FORMAT         human or json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from arbor import __version__
from arbor.config import RuntimeConfig, get_default_config_template, load_config
from arbor.crypto.hashing import HASH_FUNCTIONS
from arbor.schemas.errors import ArborException
from arbor_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, tree, verify


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Configure logging for the CLI.

    A no-op once the root logger has handlers, so repeated main() calls in
    one process do not open a log file that basicConfig would then ignore.
    """
    if logging.getLogger().handlers:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_element_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "elements",
        nargs="*",
        help="Elements to commit, in order (UTF-8 strings)",
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        default=None,
        help="Read additional elements from a file, one per line",
    )
    parser.add_argument(
        "--append", "-a",
        nargs="+",
        default=None,
        metavar="ELEMENT",
        help="Insert these elements after building the tree",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="arbor",
        description="Arbor - build Merkle trees, generate and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./arbor.json or ~/.config/arbor/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--hash",
        type=str,
        default=None,
        choices=sorted(HASH_FUNCTIONS),
        help="Hash function (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the Merkle root of a list of elements",
    )
    _add_element_arguments(root_parser)
    root_parser.set_defaults(func=tree.root_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one element",
        description="Build the tree and print the proof document for the leaf at --index.",
    )
    _add_element_arguments(prove_parser)
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="0-based index of the leaf to prove",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof document to this path instead of stdout",
    )
    prove_parser.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite --out if it exists",
    )
    prove_parser.set_defaults(func=tree.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an element against a proof document",
        description="Recompute the root from an element and a proof; no tree is needed.",
    )
    verify_parser.add_argument(
        "element",
        type=str,
        help="The claimed element (UTF-8 string)",
    )
    verify_parser.add_argument(
        "--proof", "-p",
        type=str,
        required=True,
        help="Path to the proof document, or '-' for stdin",
    )
    verify_parser.add_argument(
        "--root", "-r",
        type=str,
        default=None,
        help="Trusted root (0x hex). Defaults to the root embedded in the proof",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Print a configuration file template",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Show the effective configuration, or a template with --init."""
    if args.init:
        print(get_default_config_template())
    else:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
    return EXIT_SUCCESS


def _report_error(args: argparse.Namespace, config: RuntimeConfig, exc: ArborException) -> None:
    if getattr(args, "json", False) or config.output_format == "json":
        print(exc.to_error_model().model_dump_json(indent=2))
    else:
        print(f"Error [{exc.code}]: {exc.message}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
        if args.hash:
            config = replace(config, hash_algorithm=args.hash)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    if config.output_format == "json" and hasattr(args, "json"):
        args.json = True

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ArborException as e:
        _report_error(args, config, e)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
