"""
Arbor - Merkle tree commitments with inclusion proofs and append-only growth.
"""

from arbor.merkle import (
    MerkleTree,
    MerkleProof,
    ProofStep,
    Side,
    InsertStrategy,
    build,
    root,
    prove_inclusion,
    verify,
    insert,
)
from arbor.schemas.errors import (
    ArborException,
    EmptyInputException,
    IndexOutOfRangeException,
)

__version__ = "0.1.0"

__all__ = [
    "MerkleTree",
    "MerkleProof",
    "ProofStep",
    "Side",
    "InsertStrategy",
    "build",
    "root",
    "prove_inclusion",
    "verify",
    "insert",
    "ArborException",
    "EmptyInputException",
    "IndexOutOfRangeException",
]
