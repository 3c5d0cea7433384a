"""
Merkle Dynamic Insertion
Append elements to an existing tree in place.

Contract: after insert(tree, e) the tree is indistinguishable (root,
leaves, every proof) from build(original_elements + [e]). Every strategy
must produce bit-identical layers for every prior tree state.

Strategies:
- REBUILD: append the leaf, then recompute every layer above the leaves
- INCREMENTAL: compute only the ancestors on the path from the new leaf
  to the root, then write the leaf and that path into the layers. A
  sibling pair that used to be a self-duplicated last node sits on that
  same path, so no other node changes. When the old top layer grows to two nodes a new root layer
  is added.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from arbor.crypto.hashing import HashFunction
from arbor.merkle.leaves import Element, hash_leaf
from arbor.merkle.merkle_tree import MerkleTree, build_layers, merkle_parent


logger = logging.getLogger(__name__)


class InsertStrategy(str, Enum):
    """How the layers above the leaves are brought up to date."""

    REBUILD = "rebuild"
    INCREMENTAL = "incremental"


def _rebuild(tree: MerkleTree, leaf: bytes) -> None:
    leaves = tree._layers[0] + [leaf]
    tree._layers = build_layers(leaves, tree.hash_fn)


def _path_nodes(layers: list[list[bytes]], leaf: bytes, hash_fn: HashFunction) -> list[bytes]:
    """
    New digests from the appended leaf up to the root, one per level.

    The path node is always the last node of its level, so it either has
    an unchanged left sibling or is paired with itself. Nothing is written
    to layers here.
    """
    path = [leaf]
    level = 0
    position = len(layers[0])
    size = position + 1
    while size > 1:
        node = path[-1]
        left = layers[level][position - 1] if position % 2 else node
        path.append(merkle_parent(left, node, hash_fn=hash_fn))

        level += 1
        position //= 2
        size = (size + 1) // 2
    return path


def _update_path(tree: MerkleTree, leaf: bytes) -> None:
    path = _path_nodes(tree._layers, leaf, tree.hash_fn)

    layers = tree._layers
    position = len(layers[0])
    for level, digest in enumerate(path):
        if level == len(layers):
            layers.append([])
        if position < len(layers[level]):
            layers[level][position] = digest
        else:
            layers[level].append(digest)
        position //= 2


def insert(
    tree: MerkleTree,
    element: Element,
    strategy: InsertStrategy | str = InsertStrategy.REBUILD,
) -> bytes:
    """
    Append an element to the tree and return the new root.

    Requires exclusive access to tree; no reader may observe it while
    this runs.

    Args:
        tree: Tree to mutate in place
        element: Element to append (bytes or str)
        strategy: InsertStrategy or its string value

    Returns:
        The updated root digest

    Raises:
        ElementTypeException: If element is neither bytes nor str
        ValueError: If strategy is not a known InsertStrategy
    """
    strategy = InsertStrategy(strategy)
    leaf = hash_leaf(element, tree.hash_fn)

    if strategy is InsertStrategy.INCREMENTAL:
        _update_path(tree, leaf)
    else:
        _rebuild(tree, leaf)

    logger.debug(
        f"Inserted leaf {tree.leaf_count - 1} ({strategy.value}); "
        f"depth={tree.depth} root=0x{tree.root.hex()}"
    )
    return tree.root


def insert_many(
    tree: MerkleTree,
    elements: Iterable[Element],
    strategy: InsertStrategy | str = InsertStrategy.REBUILD,
) -> bytes:
    """Append elements one at a time and return the final root."""
    for element in elements:
        insert(tree, element, strategy)
    return tree.root


__all__ = [
    "InsertStrategy",
    "insert",
    "insert_many",
]
