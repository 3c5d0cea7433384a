"""
CLI Verify Command

Check that an element is included under a root, using only a proof
document. No tree is built.

Usage:
    arbor verify c --proof proof.json --root 0x... [--json]
    arbor prove a b c --index 2 | arbor verify c --proof -
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path

from arbor.crypto.hashing import from_hex, get_hash_function, to_hex
from arbor.merkle import compute_root, hash_leaf, proof_from_document
from arbor.schemas.errors import ProofFormatException
from arbor_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, EXIT_VERIFICATION_FAILED


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of a proof check for CLI output."""
    verified: bool = False
    leaf_index: int = 0
    steps: int = 0
    hash_algorithm: str = ""
    expected_root: str = ""
    computed_root: str = ""


def load_proof_payload(source: str) -> dict:
    """Read a proof document from a path, or from stdin when source is '-'."""
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProofFormatException(f"Proof is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ProofFormatException("Proof document must be a JSON object")
    return payload


def verify_cmd(args: Namespace) -> int:
    """Verify an element against a proof document and a root."""
    payload = load_proof_payload(args.proof)
    proof = proof_from_document(payload)

    algorithm = args.hash or payload.get("hash_algorithm") or args.cli_config.hash_algorithm
    hash_fn = get_hash_function(algorithm)

    root_hex = args.root or payload.get("root")
    if not root_hex:
        print("Error: no root given (--root) and none embedded in the proof", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    if not args.root:
        logger.warning("No --root given; checking against the root embedded in the proof")
    expected_root = from_hex(root_hex)

    logger.info(f"Verifying leaf {proof.leaf_index} with {len(proof)} steps ({algorithm})")
    computed = compute_root(hash_leaf(args.element, hash_fn), proof, hash_fn)

    summary = VerifySummary(
        verified=computed == expected_root,
        leaf_index=proof.leaf_index,
        steps=len(proof),
        hash_algorithm=algorithm,
        expected_root=to_hex(expected_root),
        computed_root=to_hex(computed),
    )

    if args.json:
        print(json.dumps(asdict(summary), indent=2))
    else:
        status = "VALID" if summary.verified else "INVALID"
        print(f"Proof:      {status}")
        print(f"Leaf index: {summary.leaf_index}")
        print(f"Steps:      {summary.steps}")
        print(f"Root:       {summary.expected_root}")
        if not summary.verified:
            print(f"Computed:   {summary.computed_root}")

    return EXIT_SUCCESS if summary.verified else EXIT_VERIFICATION_FAILED
