"""
Merkle Tree Implementation
Deterministic layered Merkle tree construction.

This module provides:
- MerkleTree: owns every layer from the leaves up to the single root
- build / build_from_leaves: construct a tree from elements or leaf digests
- root: read the committed root
- expected_proof_length: proof length for a tree of a given size

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = hash(element_bytes)  (see leaves.py)
2. Parent hashing: parent = hash(left + right)
3. Padding rule: an odd layer pairs its last node with itself
4. Empty input: rejected with EmptyInputException, there is no empty tree
5. Single leaf: root = leaf (zero hashing rounds)

Storage:
- Layers are flat lists indexed by (level, position)
- The parent of (level, i) is (level + 1, i // 2); no node links are stored
"""
from __future__ import annotations

import logging
from typing import Sequence

from arbor.crypto.hashing import HashFunction, sha256
from arbor.merkle.leaves import Element, make_leaves
from arbor.schemas.errors import EmptyInputException, InvalidDigestException


logger = logging.getLogger(__name__)


def merkle_parent(left: bytes, right: bytes, hash_fn: HashFunction = sha256) -> bytes:
    """
    Compute the parent digest of two child nodes.

    Args:
        left: Left child digest
        right: Right child digest
        hash_fn: Hash function (default sha256)

    Returns:
        hash(left + right)
    """
    return hash_fn(left + right)


def pair_at(layer: Sequence[bytes], parent_index: int) -> tuple[bytes, bytes]:
    """
    Return the (left, right) children of a parent position.

    When the right child would fall past the end of an odd layer,
    the left child is paired with itself.
    """
    left = layer[2 * parent_index]
    right_index = 2 * parent_index + 1
    right = layer[right_index] if right_index < len(layer) else left
    return left, right


def next_layer(layer: Sequence[bytes], hash_fn: HashFunction = sha256) -> list[bytes]:
    """
    Build the layer above by hashing adjacent pairs.

    Example: [a, b, c] -> [parent(a, b), parent(c, c)]
    """
    parent_count = (len(layer) + 1) // 2
    return [
        merkle_parent(*pair_at(layer, i), hash_fn=hash_fn)
        for i in range(parent_count)
    ]


def build_layers(leaves: Sequence[bytes], hash_fn: HashFunction = sha256) -> list[list[bytes]]:
    """
    Build every layer from the leaves up to the root.

    Args:
        leaves: Leaf digests (layer 0). Order matters and is preserved.
        hash_fn: Hash function for parent nodes

    Returns:
        List of layers; layers[0] is a copy of leaves, layers[-1] has one entry

    Raises:
        EmptyInputException: If leaves is empty
    """
    if len(leaves) == 0:
        raise EmptyInputException()

    layers: list[list[bytes]] = [list(leaves)]
    while len(layers[-1]) > 1:
        layers.append(next_layer(layers[-1], hash_fn))
    return layers


def _check_digests(leaves: Sequence[bytes]) -> None:
    width: int | None = None
    for position, leaf in enumerate(leaves):
        if not isinstance(leaf, bytes):
            raise InvalidDigestException(
                f"Leaf at position {position} is {type(leaf).__name__}, expected bytes",
                details={"position": position},
            )
        if width is None:
            width = len(leaf)
        elif len(leaf) != width:
            raise InvalidDigestException(
                f"Leaf at position {position} is {len(leaf)} bytes, expected {width}",
                details={"position": position, "width": len(leaf), "expected": width},
            )


def _check_layers(layers: Sequence[Sequence[bytes]], hash_fn: HashFunction) -> None:
    """Every layer is the pairwise hash of the one below, ending in one root."""
    for level in range(len(layers) - 1):
        below, above = layers[level], layers[level + 1]
        expected = (len(below) + 1) // 2
        if len(above) != expected:
            raise InvalidDigestException(
                f"Layer {level + 1} has {len(above)} entries, expected {expected}",
                details={"level": level + 1, "size": len(above), "expected": expected},
            )
        for position, parent in enumerate(above):
            if parent != merkle_parent(*pair_at(below, position), hash_fn=hash_fn):
                raise InvalidDigestException(
                    f"Node ({level + 1}, {position}) does not match the hash of its children",
                    details={"level": level + 1, "position": position},
                )
    if len(layers[-1]) != 1:
        raise InvalidDigestException(
            f"Top layer must hold exactly one root, got {len(layers[-1])} entries"
        )


class MerkleTree:
    """
    A non-empty Merkle tree stored as a list of layers.

    Create with build() or build_from_leaves(). Layers passed to the
    constructor are checked node by node and copied, so the tree owns its
    storage. The only mutation is appending elements through
    arbor.merkle.insert, which needs exclusive access to the tree while
    it runs.

    Attributes:
        hash_fn: Hash function used for every node of this tree
    """

    def __init__(self, layers: Sequence[Sequence[bytes]], hash_fn: HashFunction = sha256) -> None:
        if not layers or not layers[0]:
            raise EmptyInputException()
        _check_digests(layers[0])
        _check_layers(layers, hash_fn)
        self._layers = [list(layer) for layer in layers]
        self.hash_fn = hash_fn

    @classmethod
    def _from_built_layers(cls, layers: list[list[bytes]], hash_fn: HashFunction) -> MerkleTree:
        # Layers fresh from build_layers(); already consistent and unshared.
        tree = cls.__new__(cls)
        tree._layers = layers
        tree.hash_fn = hash_fn
        return tree

    @property
    def root(self) -> bytes:
        """The single digest committing to all leaves and their order."""
        return self._layers[-1][0]

    @property
    def leaf_count(self) -> int:
        return len(self._layers[0])

    @property
    def depth(self) -> int:
        """Number of layers, leaves and root included."""
        return len(self._layers)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return tuple(self._layers[0])

    @property
    def layers(self) -> tuple[tuple[bytes, ...], ...]:
        """Read-only snapshot of all layers, leaves first."""
        return tuple(tuple(layer) for layer in self._layers)

    def layer(self, level: int) -> tuple[bytes, ...]:
        """Read-only snapshot of one layer (0 = leaves)."""
        return tuple(self._layers[level])

    def layer_size(self, level: int) -> int:
        return len(self._layers[level])

    def node(self, level: int, position: int) -> bytes:
        """Digest at (level, position)."""
        return self._layers[level][position]

    def is_root(self, digest: bytes) -> bool:
        """Check whether digest equals this tree's current root."""
        return digest == self.root

    def __len__(self) -> int:
        return self.leaf_count

    def __repr__(self) -> str:
        return (
            f"MerkleTree(leaves={self.leaf_count}, depth={self.depth}, "
            f"root=0x{self.root.hex()})"
        )


def build_from_leaves(
    leaves: Sequence[bytes],
    hash_fn: HashFunction = sha256,
) -> MerkleTree:
    """
    Build a tree from precomputed leaf digests.

    Raises:
        EmptyInputException: If leaves is empty
        InvalidDigestException: If leaves are not bytes of one width
    """
    _check_digests(leaves)
    layers = build_layers(leaves, hash_fn)
    logger.debug(f"Built Merkle tree: {len(leaves)} leaves, {len(layers)} layers")
    return MerkleTree._from_built_layers(layers, hash_fn)


def build(
    elements: Sequence[Element],
    hash_fn: HashFunction = sha256,
) -> MerkleTree:
    """
    Build a tree from raw elements.

    Example:
        >>> tree = build([b"a", b"b", b"c"])
        >>> [len(layer) for layer in tree.layers]
        [3, 2, 1]

    Raises:
        EmptyInputException: If elements is empty
        ElementTypeException: If an element is neither bytes nor str
    """
    if len(elements) == 0:
        raise EmptyInputException()
    return build_from_leaves(make_leaves(elements, hash_fn), hash_fn)


def root(tree: MerkleTree) -> bytes:
    """Return the root digest of a tree."""
    return tree.root


def expected_proof_length(num_leaves: int) -> int:
    """
    Number of proof steps for any leaf of a tree with num_leaves leaves.

    Equals the number of layers minus one. Callers use it to reject
    proofs of the wrong length, which verify() does not detect.

    Raises:
        EmptyInputException: If num_leaves is zero
    """
    if num_leaves <= 0:
        raise EmptyInputException("A tree has at least one leaf")

    steps = 0
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        steps += 1
    return steps


__all__ = [
    "MerkleTree",
    "merkle_parent",
    "pair_at",
    "next_layer",
    "build_layers",
    "build_from_leaves",
    "build",
    "root",
    "expected_proof_length",
]
