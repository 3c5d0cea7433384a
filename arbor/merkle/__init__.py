"""
Merkle Tree and Inclusion Proofs
Deterministic Merkle tree construction, proof generation/verification,
and append-only growth.

This package provides:
- build / build_from_leaves: construct a MerkleTree
- root: read the committed root
- prove_inclusion: sibling path for a leaf index
- verify: recompute and compare a root, no tree needed
- insert: append an element in place, returning the new root

Canonical Commitment Rules:
1. Leaf hashing: hash(element_bytes)
2. Parent hashing: hash(left + right)
3. Padding: an odd layer pairs its last node with itself
4. Empty input: EmptyInputException
5. Single leaf: root = leaf

Usage:
    from arbor.merkle import build, prove_inclusion, verify, insert

    tree = build([b"a", b"b", b"c"])
    proof = prove_inclusion(tree, 2)
    assert verify(b"c", proof, tree.root)

    new_root = insert(tree, b"d")
"""
from .leaves import (
    Element,
    element_bytes,
    hash_leaf,
    make_leaves,
    make_leaves_from_objects,
)
from .merkle_tree import (
    MerkleTree,
    merkle_parent,
    pair_at,
    next_layer,
    build_layers,
    build_from_leaves,
    build,
    root,
    expected_proof_length,
)
from .merkle_proofs import (
    Side,
    ProofStep,
    MerkleProof,
    prove_inclusion,
    compute_root,
    verify_leaf,
    verify,
    verify_in_tree,
    proof_to_document,
    proof_from_document,
)
from .insert import (
    InsertStrategy,
    insert,
    insert_many,
)


__all__ = [
    # Core types
    "Element",
    "MerkleTree",
    "Side",
    "ProofStep",
    "MerkleProof",
    "InsertStrategy",
    # Leaf layer
    "element_bytes",
    "hash_leaf",
    "make_leaves",
    "make_leaves_from_objects",
    # Builder
    "merkle_parent",
    "pair_at",
    "next_layer",
    "build_layers",
    "build_from_leaves",
    "build",
    "root",
    "expected_proof_length",
    # Proofs
    "prove_inclusion",
    "compute_root",
    "verify_leaf",
    "verify",
    "verify_in_tree",
    "proof_to_document",
    "proof_from_document",
    # Insertion
    "insert",
    "insert_many",
]
