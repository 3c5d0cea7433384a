"""
Core cryptographic utilities.

Provides the hash functions a Merkle tree can be built with.
"""
from .hashing import (
    HashFunction,
    DEFAULT_HASH_ALGORITHM,
    sha256,
    sha3_256,
    blake2b_256,
    HASH_FUNCTIONS,
    get_hash_function,
    hash_concat,
    to_hex,
    from_hex,
)

__all__ = [
    "HashFunction",
    "DEFAULT_HASH_ALGORITHM",
    "sha256",
    "sha3_256",
    "blake2b_256",
    "HASH_FUNCTIONS",
    "get_hash_function",
    "hash_concat",
    "to_hex",
    "from_hex",
]
