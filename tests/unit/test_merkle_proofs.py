"""
Merkle Proof Unit Tests
Tests for arbor/merkle/merkle_proofs.py

1. Proof shape - sibling/side pairs, one per layer below the root
2. Round trip - every index of every tree size verifies
3. Tamper detection - flipped leaf bytes or sibling bytes fail
4. Out of range - index == leaf_count raises IndexOutOfRangeException
"""
from dataclasses import FrozenInstanceError

import pytest

from arbor.crypto.hashing import sha3_256
from arbor.merkle.merkle_proofs import (
    MerkleProof,
    ProofStep,
    Side,
    compute_root,
    prove_inclusion,
    verify,
    verify_in_tree,
    verify_leaf,
)
from arbor.merkle.merkle_tree import build, expected_proof_length
from arbor.schemas.errors import ErrorCodes, IndexOutOfRangeException


def _flip(data: bytes, position: int) -> bytes:
    return data[:position] + bytes([data[position] ^ 0x01]) + data[position + 1:]


class TestProofShape:
    """Tests for the structure of generated proofs."""

    def test_four_leaf_scenario(self, h, abcd):
        """prove_inclusion(tree, 2) == [(h(d), right), (layer1[0], left)]."""
        tree = build(abcd)
        proof = prove_inclusion(tree, 2)

        assert list(proof.steps) == [
            ProofStep(sibling=h(b"d"), side=Side.RIGHT),
            ProofStep(sibling=tree.layer(1)[0], side=Side.LEFT),
        ]
        assert verify(b"c", proof, tree.root)

    def test_single_leaf_proof_is_empty(self):
        tree = build([b"only"])
        proof = prove_inclusion(tree, 0)

        assert len(proof) == 0
        assert verify(b"only", proof, tree.root)

    def test_odd_tail_sibling_is_itself(self, h):
        """The unpaired last leaf of an odd layer is its own sibling."""
        tree = build([b"a", b"b", b"c"])
        proof = prove_inclusion(tree, 2)

        assert proof.steps[0] == ProofStep(sibling=h(b"c"), side=Side.RIGHT)

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 8, 13])
    def test_length_is_depth_minus_one(self, n, make_elements):
        tree = build(make_elements(n))
        for i in range(n):
            assert len(prove_inclusion(tree, i)) == expected_proof_length(n)

    def test_proof_records_index(self, make_elements):
        tree = build(make_elements(6))
        assert prove_inclusion(tree, 4).leaf_index == 4

    def test_proof_is_immutable(self, abcd):
        proof = prove_inclusion(build(abcd), 0)
        with pytest.raises(FrozenInstanceError):
            proof.leaf_index = 1

    def test_steps_stored_as_tuple(self, h):
        proof = MerkleProof(steps=[ProofStep(h(b"x"), Side.LEFT)])
        assert isinstance(proof.steps, tuple)
        assert proof.siblings == [h(b"x")]

    def test_negative_leaf_index_rejected(self):
        with pytest.raises(ValueError):
            MerkleProof(steps=(), leaf_index=-1)


class TestOutOfRange:

    def test_index_equal_to_leaf_count(self, abcd):
        tree = build(abcd)
        with pytest.raises(IndexOutOfRangeException) as exc_info:
            prove_inclusion(tree, 4)

        assert exc_info.value.code == ErrorCodes.INDEX_OUT_OF_RANGE
        assert exc_info.value.details == {"index": 4, "leaf_count": 4}

    def test_negative_index(self, abcd):
        with pytest.raises(IndexError):
            prove_inclusion(build(abcd), -1)

    def test_no_side_effects(self, abcd):
        tree = build(abcd)
        before = tree.layers
        with pytest.raises(IndexOutOfRangeException):
            prove_inclusion(tree, 100)
        assert tree.layers == before


class TestRoundTrip:
    """Every leaf of every tree verifies against the tree root."""

    @pytest.mark.parametrize("n", range(1, 18))
    def test_every_index_verifies(self, n, make_elements):
        elements = make_elements(n)
        tree = build(elements)

        for i, element in enumerate(elements):
            proof = prove_inclusion(tree, i)
            assert verify(element, proof, tree.root), f"Proof failed for index {i} of {n}"

    def test_duplicate_elements(self):
        elements = [b"x", b"x", b"x"]
        tree = build(elements)
        for i in range(3):
            assert verify(b"x", prove_inclusion(tree, i), tree.root)

    def test_custom_hash_function(self, abcd):
        tree = build(abcd, hash_fn=sha3_256)
        proof = prove_inclusion(tree, 1)

        assert verify(b"b", proof, tree.root, hash_fn=sha3_256)
        assert not verify(b"b", proof, tree.root)

    def test_proof_outlives_tree(self, abcd):
        tree = build(abcd)
        proof = prove_inclusion(tree, 3)
        root = tree.root
        del tree

        assert verify(b"d", proof, root)

    def test_verify_leaf_and_compute_root(self, h, abcd):
        tree = build(abcd)
        proof = prove_inclusion(tree, 0)

        assert compute_root(h(b"a"), proof) == tree.root
        assert verify_leaf(h(b"a"), proof, tree.root)


class TestTamperDetection:
    """Tampered inputs fail verification."""

    def test_wrong_element_fails(self, abcd):
        tree = build(abcd)
        proof = prove_inclusion(tree, 2)
        assert not verify(b"d", proof, tree.root)

    def test_flipped_element_byte_fails(self, make_elements):
        elements = make_elements(9)
        tree = build(elements)
        proof = prove_inclusion(tree, 5)
        element = elements[5]

        for position in range(len(element)):
            assert not verify(_flip(element, position), proof, tree.root)

    def test_flipped_sibling_byte_fails(self, make_elements):
        elements = make_elements(9)
        tree = build(elements)
        proof = prove_inclusion(tree, 5)

        for step_index, step in enumerate(proof.steps):
            for position in (0, 15, len(step.sibling) - 1):
                steps = list(proof.steps)
                steps[step_index] = ProofStep(_flip(step.sibling, position), step.side)
                tampered = MerkleProof(steps=tuple(steps), leaf_index=5)
                assert not verify(elements[5], tampered, tree.root)

    def test_flipped_side_fails(self, abcd):
        tree = build(abcd)
        proof = prove_inclusion(tree, 1)
        flipped = MerkleProof(
            steps=tuple(
                ProofStep(s.sibling, Side.LEFT if s.side == Side.RIGHT else Side.RIGHT)
                for s in proof.steps
            ),
            leaf_index=1,
        )
        assert not verify(b"b", flipped, tree.root)

    def test_wrong_root_fails(self, h, abcd):
        tree = build(abcd)
        proof = prove_inclusion(tree, 0)
        assert not verify(b"a", proof, h(b"wrong root"))

    def test_truncated_proof_fails(self, make_elements):
        elements = make_elements(8)
        tree = build(elements)
        proof = prove_inclusion(tree, 3)
        truncated = MerkleProof(steps=proof.steps[:-1], leaf_index=3)

        assert not verify(elements[3], truncated, tree.root)


class TestVerifyInTree:
    """Tests for verify_in_tree()."""

    def test_valid(self, abcd):
        tree = build(abcd)
        assert verify_in_tree(tree, b"c", prove_inclusion(tree, 2))

    def test_index_beyond_tree(self, abcd):
        tree = build(abcd)
        proof = MerkleProof(steps=prove_inclusion(tree, 2).steps, leaf_index=9)
        assert not verify_in_tree(tree, b"c", proof)

    def test_stale_proof_after_growth(self, abcd):
        from arbor.merkle.insert import insert

        tree = build(abcd)
        proof = prove_inclusion(tree, 0)
        insert(tree, b"e")

        assert not verify_in_tree(tree, b"a", proof)
        assert verify_in_tree(tree, b"a", prove_inclusion(tree, 0))
