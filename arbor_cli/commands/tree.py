"""
CLI Tree Commands

Build a tree from elements, optionally grow it, and print its root or an
inclusion proof.

Usage:
    arbor root a b c [--append d e] [--json]
    arbor prove a b c --index 2 [--append d] [--out proof.json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from arbor.config import RuntimeConfig
from arbor.crypto.hashing import to_hex
from arbor.merkle import (
    MerkleTree,
    build,
    insert_many,
    proof_to_document,
    prove_inclusion,
)
from arbor_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS


logger = logging.getLogger(__name__)


def collect_elements(args: Namespace) -> list[str]:
    """Positional elements followed by one element per line of --file."""
    elements = list(args.elements or [])
    if getattr(args, "file", None):
        path = Path(args.file)
        with open(path, "r", encoding="utf-8") as f:
            elements.extend(line.rstrip("\r\n") for line in f)
    return elements


def build_tree(args: Namespace, config: RuntimeConfig) -> MerkleTree:
    """Build from the collected elements, then apply any --append inserts."""
    elements = collect_elements(args)
    logger.info(f"Building tree from {len(elements)} elements ({config.hash_algorithm})")
    tree = build(elements, hash_fn=config.hash_function())

    appended = getattr(args, "append", None) or []
    if appended:
        logger.info(f"Appending {len(appended)} elements ({config.insert_strategy})")
        insert_many(tree, appended, config.strategy())
    return tree


def root_cmd(args: Namespace) -> int:
    """Print the root of the tree built from the given elements."""
    config: RuntimeConfig = args.cli_config
    tree = build_tree(args, config)

    summary = {
        "root": to_hex(tree.root),
        "leaf_count": tree.leaf_count,
        "depth": tree.depth,
        "hash_algorithm": config.hash_algorithm,
    }
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Root:       {summary['root']}")
        print(f"Leaves:     {summary['leaf_count']}")
        print(f"Depth:      {summary['depth']}")
        print(f"Hash:       {summary['hash_algorithm']}")
    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Print (or write) an inclusion proof document for --index."""
    config: RuntimeConfig = args.cli_config
    tree = build_tree(args, config)

    proof = prove_inclusion(tree, args.index)
    document = proof_to_document(proof, root=tree.root, hash_algorithm=config.hash_algorithm)
    payload = document.model_dump_json(indent=2)

    if args.out:
        out_path = Path(args.out)
        if out_path.exists() and not args.force:
            print(f"Error: {out_path} exists (use --force to overwrite)", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        out_path.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"Proof written to {out_path}")
        if not args.json:
            print(f"Proof for leaf {args.index} ({len(proof)} steps) written to {out_path}")
    else:
        print(payload)
    return EXIT_SUCCESS
