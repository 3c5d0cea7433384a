"""
Merkle Proofs
Inclusion proof generation and tree-independent verification.

This module provides:
- Side / ProofStep / MerkleProof: the proof value
- prove_inclusion: extract the sibling path for a leaf index
- verify / verify_leaf: recompute a root from a proof (no tree needed)
- verify_in_tree: check a proof against a live tree's current root
- proof_to_document / proof_from_document: serializable form

A proof step records the sibling digest and the side the sibling sits on:
- Side.RIGHT: current node is the left operand -> hash(current + sibling)
- Side.LEFT:  current node is the right operand -> hash(sibling + current)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from pydantic import ValidationError

from arbor.crypto.hashing import DEFAULT_HASH_ALGORITHM, HashFunction, from_hex, sha256, to_hex
from arbor.merkle.leaves import Element, element_bytes
from arbor.merkle.merkle_tree import MerkleTree, merkle_parent
from arbor.schemas.errors import IndexOutOfRangeException, ProofFormatException
from arbor.schemas.proof import ProofDocument, ProofStepModel


logger = logging.getLogger(__name__)


class Side(str, Enum):
    """Which operand of the next hash the sibling is."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ProofStep:
    """A sibling digest and the side it is hashed on."""

    sibling: bytes
    side: Side


@dataclass(frozen=True)
class MerkleProof:
    """
    An inclusion proof for a single leaf.

    Immutable and independent of the tree that produced it.

    Attributes:
        steps: Sibling steps ordered from the leaf layer up to below the root
        leaf_index: Index of the leaf the proof was generated for
    """

    steps: tuple[ProofStep, ...]
    leaf_index: int = 0

    def __post_init__(self) -> None:
        if self.leaf_index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.leaf_index}")
        # Accept any iterable of steps, store a tuple
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def siblings(self) -> list[bytes]:
        return [step.sibling for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)


def prove_inclusion(tree: MerkleTree, index: int) -> MerkleProof:
    """
    Generate an inclusion proof for the leaf at index.

    Algorithm, for every layer below the root:
    - even position: sibling is position + 1 (itself if past the end), Side.RIGHT
    - odd position: sibling is position - 1, Side.LEFT
    - move up: position = position // 2

    Args:
        tree: A built tree
        index: 0-based leaf index

    Returns:
        MerkleProof with tree.depth - 1 steps

    Raises:
        IndexOutOfRangeException: If index is not in [0, leaf_count)
    """
    if index < 0 or index >= tree.leaf_count:
        raise IndexOutOfRangeException(index, tree.leaf_count)

    steps: list[ProofStep] = []
    position = index
    for level in range(tree.depth - 1):
        if position % 2 == 0:
            sibling_position = position + 1
            if sibling_position >= tree.layer_size(level):
                sibling_position = position
            steps.append(ProofStep(sibling=tree.node(level, sibling_position), side=Side.RIGHT))
        else:
            steps.append(ProofStep(sibling=tree.node(level, position - 1), side=Side.LEFT))
        position //= 2

    logger.debug(f"Proof for leaf {index}: {len(steps)} steps")
    return MerkleProof(steps=tuple(steps), leaf_index=index)


def compute_root(leaf: bytes, proof: MerkleProof, hash_fn: HashFunction = sha256) -> bytes:
    """Recompute the root a proof commits to, starting from a leaf digest."""
    current = leaf
    for step in proof.steps:
        if step.side == Side.LEFT:
            current = merkle_parent(step.sibling, current, hash_fn)
        else:
            current = merkle_parent(current, step.sibling, hash_fn)
    return current


def verify_leaf(
    leaf: bytes,
    proof: MerkleProof,
    expected_root: bytes,
    hash_fn: HashFunction = sha256,
) -> bool:
    """Verify a proof starting from an already-hashed leaf."""
    return compute_root(leaf, proof, hash_fn) == expected_root


def verify(
    element: Element,
    proof: MerkleProof,
    expected_root: bytes,
    hash_fn: HashFunction = sha256,
) -> bool:
    """
    Verify that element is included under expected_root.

    Pure predicate: a mismatch returns False, it never raises. Proof
    length is not checked against any tree depth; compare len(proof)
    with expected_proof_length() when the tree size is known.

    Args:
        element: The claimed element (bytes or str)
        proof: Inclusion proof
        expected_root: Trusted root digest
        hash_fn: Hash function the tree was built with

    Returns:
        True if the recomputed root equals expected_root
    """
    return verify_leaf(hash_fn(element_bytes(element)), proof, expected_root, hash_fn)


def verify_in_tree(tree: MerkleTree, element: Element, proof: MerkleProof) -> bool:
    """
    Verify a proof against a tree's current root.

    Returns False when proof.leaf_index is not a current leaf index, or
    when the element hashed with the tree's function does not reach the
    tree's root.
    """
    if proof.leaf_index >= tree.leaf_count:
        return False
    return verify(element, proof, tree.root, tree.hash_fn)


def proof_to_document(
    proof: MerkleProof,
    root: bytes | None = None,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> ProofDocument:
    """Convert a proof into its serializable document form."""
    return ProofDocument(
        hash_algorithm=hash_algorithm,
        leaf_index=proof.leaf_index,
        root=to_hex(root) if root is not None else None,
        steps=[
            ProofStepModel(sibling=to_hex(step.sibling), side=step.side.value)
            for step in proof.steps
        ],
    )


def proof_from_document(document: ProofDocument | dict) -> MerkleProof:
    """
    Convert a proof document (model or plain dict) back into a MerkleProof.

    Raises:
        ProofFormatException: If the document fails validation
    """
    if not isinstance(document, ProofDocument):
        try:
            document = ProofDocument.model_validate(document)
        except ValidationError as e:
            raise ProofFormatException(
                f"Invalid proof document: {e.error_count()} validation error(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e

    steps = []
    for position, step in enumerate(document.steps):
        try:
            sibling = from_hex(step.sibling)
        except ValueError as e:
            raise ProofFormatException(
                f"Invalid sibling digest at step {position}: {e}",
                details={"step": position},
            ) from e
        steps.append(ProofStep(sibling=sibling, side=Side(step.side)))

    return MerkleProof(steps=tuple(steps), leaf_index=document.leaf_index)


__all__ = [
    "Side",
    "ProofStep",
    "MerkleProof",
    "prove_inclusion",
    "compute_root",
    "verify_leaf",
    "verify",
    "verify_in_tree",
    "proof_to_document",
    "proof_from_document",
]
