"""Unit tests for MerkleTreeService."""

import pytest

from certengine.application.services.fingerprint_service import keccak256
from certengine.application.services.merkle_tree_service import (
    MerkleTreeService,
    hash_pair,
)
from certengine.domain.errors import EmptyBatchError
from certengine.domain.models.fingerprint import Fingerprint


def _leaf(label: str) -> Fingerprint:
    return Fingerprint(keccak256(label.encode()))


@pytest.fixture
def service() -> MerkleTreeService:
    return MerkleTreeService()


class TestHashPair:
    """Tests for hash_pair ordering."""

    def test_concatenates_left_then_right(self) -> None:
        a, b = _leaf("a"), _leaf("b")

        assert hash_pair(a, b).digest == keccak256(a.digest + b.digest)

    def test_order_matters(self) -> None:
        a, b = _leaf("a"), _leaf("b")

        assert hash_pair(a, b) != hash_pair(b, a)


class TestMerkleRoot:
    """Tests for MerkleTreeService.merkle_root."""

    def test_single_leaf_is_its_own_root(self, service: MerkleTreeService) -> None:
        a = _leaf("a")

        assert service.merkle_root([a]) == a

    def test_two_leaves(self, service: MerkleTreeService) -> None:
        a, b = _leaf("a"), _leaf("b")

        assert service.merkle_root([a, b]) == hash_pair(a, b)

    def test_odd_leaf_is_promoted_not_duplicated(
        self, service: MerkleTreeService
    ) -> None:
        a, b, c = _leaf("a"), _leaf("b"), _leaf("c")

        root = service.merkle_root([a, b, c])

        assert root.digest == keccak256(keccak256(a.digest + b.digest) + c.digest)
        assert root != hash_pair(hash_pair(a, b), hash_pair(c, c))

    def test_five_leaves(self, service: MerkleTreeService) -> None:
        a, b, c, d, e = (_leaf(x) for x in "abcde")

        expected = hash_pair(hash_pair(hash_pair(a, b), hash_pair(c, d)), e)

        assert service.merkle_root([a, b, c, d, e]) == expected

    def test_leaf_order_matters(self, service: MerkleTreeService) -> None:
        a, b, c = _leaf("a"), _leaf("b"), _leaf("c")

        assert service.merkle_root([a, b, c]) != service.merkle_root([c, b, a])

    def test_empty_batch_raises(self, service: MerkleTreeService) -> None:
        with pytest.raises(EmptyBatchError):
            service.merkle_root([])

    def test_deterministic(self, service: MerkleTreeService) -> None:
        leaves = [_leaf(str(i)) for i in range(7)]

        assert service.merkle_root(leaves) == service.merkle_root(list(leaves))


class TestProofs:
    """Tests for inclusion proofs."""

    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 8, 11])
    def test_every_leaf_proves_inclusion(
        self, service: MerkleTreeService, size: int
    ) -> None:
        leaves = [_leaf(str(i)) for i in range(size)]
        root, levels = service.build_tree(leaves)

        for index, leaf in enumerate(leaves):
            proof = service.get_proof(index, levels)
            assert service.verify_proof(leaf, proof, root)

    def test_promoted_leaf_proof(self, service: MerkleTreeService) -> None:
        a, b, c = _leaf("a"), _leaf("b"), _leaf("c")

        proof = service.generate_proof([a, b, c], 2)

        assert len(proof) == 1
        assert proof[0].position == "left"
        assert proof[0].sibling == hash_pair(a, b)

    def test_foreign_leaf_fails(self, service: MerkleTreeService) -> None:
        leaves = [_leaf(str(i)) for i in range(4)]
        root, levels = service.build_tree(leaves)

        proof = service.get_proof(1, levels)

        assert service.verify_proof(_leaf("intruder"), proof, root) is False

    def test_index_out_of_range(self, service: MerkleTreeService) -> None:
        _, levels = service.build_tree([_leaf("a"), _leaf("b")])

        with pytest.raises(ValueError, match="out of range"):
            service.get_proof(2, levels)
