"""
Merkle Leaf Layer
Converts raw input elements into leaf digests.

Leaf Rules:
1. Leaf hashing: leaf = hash(element_bytes), no salt or domain prefix
2. str elements are UTF-8 encoded; bytes-like elements are used as-is
3. Equal content yields equal leaves; position is tracked by index only
4. Order is preserved, never sorted
"""
from __future__ import annotations

from typing import Any, Sequence, Union

from arbor.crypto.hashing import HashFunction, sha256
from arbor.schemas.canonical import dumps_canonical
from arbor.schemas.errors import ElementTypeException


Element = Union[bytes, bytearray, memoryview, str]


def element_bytes(element: Element, position: int | None = None) -> bytes:
    """
    Return the byte encoding of an element.

    Args:
        element: bytes-like value or str
        position: Index of the element, reported on failure

    Raises:
        ElementTypeException: If element is neither bytes-like nor str
    """
    if isinstance(element, bytes):
        return element
    if isinstance(element, (bytearray, memoryview)):
        return bytes(element)
    if isinstance(element, str):
        return element.encode("utf-8")
    raise ElementTypeException(element, position)


def hash_leaf(element: Element, hash_fn: HashFunction = sha256) -> bytes:
    """Compute the leaf digest of a single element."""
    return hash_fn(element_bytes(element))


def make_leaves(
    elements: Sequence[Element],
    hash_fn: HashFunction = sha256,
) -> list[bytes]:
    """
    Hash each element independently into a leaf digest.

    An empty sequence yields an empty list; rejecting it is the
    builder's job.

    Args:
        elements: Ordered elements to commit
        hash_fn: Hash function applied to each element's bytes

    Returns:
        Leaf digests in input order
    """
    return [
        hash_fn(element_bytes(element, position))
        for position, element in enumerate(elements)
    ]


def make_leaves_from_objects(
    objects: Sequence[Any],
    hash_fn: HashFunction = sha256,
) -> list[bytes]:
    """
    Hash structured objects through canonical JSON.

    Rule: leaf = hash(dumps_canonical(obj).encode("utf-8"))

    Dict key order does not affect the leaf.
    """
    return [hash_fn(dumps_canonical(obj).encode("utf-8")) for obj in objects]


__all__ = [
    "Element",
    "element_bytes",
    "hash_leaf",
    "make_leaves",
    "make_leaves_from_objects",
]
