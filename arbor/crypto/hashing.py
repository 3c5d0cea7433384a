"""
Hashing Utilities
Digest functions used as the pluggable hash of the Merkle tree.

This module provides:
- HashFunction: the callable contract every tree hash satisfies
- sha256 / sha3_256 / blake2b_256: hashlib-backed 32-byte digests
- A name -> function registry for configuration-driven selection
- Hex encoding/decoding with 0x prefix

Contract for any HashFunction:
- Deterministic: same input bytes, same digest
- Fixed width: every digest has the same length
- Stateless: safe to call from anywhere
"""
from __future__ import annotations

import hashlib
from typing import Callable

from arbor.schemas.errors import UnsupportedHashAlgorithmException


HashFunction = Callable[[bytes], bytes]

DEFAULT_HASH_ALGORITHM = "sha256"


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def sha3_256(data: bytes) -> bytes:
    """Compute SHA3-256 hash of raw bytes (32 bytes)."""
    return hashlib.sha3_256(data).digest()


def blake2b_256(data: bytes) -> bytes:
    """Compute BLAKE2b hash of raw bytes truncated to a 32-byte digest."""
    return hashlib.blake2b(data, digest_size=32).digest()


HASH_FUNCTIONS: dict[str, HashFunction] = {
    "sha256": sha256,
    "sha3_256": sha3_256,
    "blake2b_256": blake2b_256,
}


def get_hash_function(name: str) -> HashFunction:
    """
    Resolve a registered hash function by name.

    Args:
        name: Registry key (case-insensitive, "-" treated as "_")

    Returns:
        The hash callable

    Raises:
        UnsupportedHashAlgorithmException: If no function is registered under name
    """
    key = name.strip().lower().replace("-", "_")
    try:
        return HASH_FUNCTIONS[key]
    except KeyError:
        raise UnsupportedHashAlgorithmException(
            name, supported=sorted(HASH_FUNCTIONS)
        ) from None


def hash_concat(left: bytes, right: bytes, hash_fn: HashFunction = sha256) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    This is the Merkle parent rule: parent = hash(left + right)

    Args:
        left: Left child digest
        right: Right child digest
        hash_fn: Hash function to apply (default sha256)

    Returns:
        Digest of the concatenation
    """
    return hash_fn(left + right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


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
