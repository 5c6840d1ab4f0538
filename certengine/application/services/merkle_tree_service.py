"""Merkle tree builder and verifier service.

Aggregates a batch of certificate fingerprints into one root that can be
anchored on the ledger, and produces inclusion proofs for single
certificates of the batch.

Usage:
    service = MerkleTreeService()
    root = service.merkle_root(fingerprints)
    root, levels = service.build_tree(fingerprints)
    proof = service.get_proof(index, levels)
    is_valid = service.verify_proof(fingerprints[index], proof, root)
"""

from __future__ import annotations

from collections.abc import Sequence

from certengine.application.services.fingerprint_service import keccak256
from certengine.domain.errors.encoding import EmptyBatchError
from certengine.domain.models.fingerprint import Fingerprint
from certengine.domain.models.merkle import MerkleProofEntry


def hash_pair(left: Fingerprint, right: Fingerprint) -> Fingerprint:
    """Compute parent node from two children.

    Concatenates the raw digests in the given order (left || right, 64
    bytes) and hashes with Keccak-256. Order matters:
    hash_pair(a, b) != hash_pair(b, a).

    Args:
        left: Left child.
        right: Right child.

    Returns:
        Parent node.
    """
    return Fingerprint(keccak256(left.digest + right.digest))


class MerkleTreeService:
    """Service for building and verifying Merkle trees over fingerprints.

    Tree Structure:
    - Leaves are fingerprints in caller-supplied order
    - Pairs are combined left to right
    - An odd trailing node is promoted unchanged to the next level
      (never paired with itself, never padded)

    Example:
        For 3 leaves [A, B, C]:

                 Root = H(H(A,B), C)
                 /              \\
             H(A,B)              C
             /    \\
            A      B

        Proof for C: [(H(A,B), left)]
    """

    def merkle_root(self, fingerprints: Sequence[Fingerprint]) -> Fingerprint:
        """Compute the Merkle root of a batch.

        A single fingerprint is its own root.

        Args:
            fingerprints: Non-empty, ordered batch.

        Returns:
            Root fingerprint.

        Raises:
            EmptyBatchError: If the batch is empty.
        """
        root, _ = self.build_tree(fingerprints)
        return root

    def build_tree(
        self, fingerprints: Sequence[Fingerprint]
    ) -> tuple[Fingerprint, list[list[Fingerprint]]]:
        """Build Merkle tree from leaf fingerprints.

        Args:
            fingerprints: Non-empty, ordered batch.

        Returns:
            Tuple of (root, tree_levels).
            tree_levels[0] = leaves, tree_levels[-1] = [root].

        Raises:
            EmptyBatchError: If the batch is empty.
        """
        if not fingerprints:
            raise EmptyBatchError("merkle_root")

        current = list(fingerprints)
        levels: list[list[Fingerprint]] = [current]

        while len(current) > 1:
            next_level = [
                hash_pair(current[i], current[i + 1])
                for i in range(0, len(current) - 1, 2)
            ]
            if len(current) % 2 == 1:
                next_level.append(current[-1])  # Promote unpaired node
            levels.append(next_level)
            current = next_level

        return current[0], levels

    def get_proof(
        self,
        leaf_index: int,
        tree_levels: list[list[Fingerprint]],
    ) -> list[MerkleProofEntry]:
        """Generate Merkle proof for a leaf at given index.

        Levels where the node was promoted contribute no entry.

        Args:
            leaf_index: Index of leaf in tree (0-based).
            tree_levels: Tree levels from build_tree().

        Returns:
            List of MerkleProofEntry from leaf to root.

        Raises:
            ValueError: If leaf_index is out of range.
        """
        if leaf_index < 0 or leaf_index >= len(tree_levels[0]):
            raise ValueError(
                f"Index {leaf_index} out of range for {len(tree_levels[0])} leaves"
            )

        path: list[MerkleProofEntry] = []
        idx = leaf_index

        for level in range(len(tree_levels) - 1):
            is_right = idx % 2 == 1
            sibling_idx = idx - 1 if is_right else idx + 1

            if sibling_idx < len(tree_levels[level]):
                path.append(
                    MerkleProofEntry(
                        level=level,
                        position="left" if is_right else "right",
                        sibling=tree_levels[level][sibling_idx],
                    )
                )

            idx //= 2

        return path

    def verify_proof(
        self,
        leaf: Fingerprint,
        proof: list[MerkleProofEntry],
        expected_root: Fingerprint,
    ) -> bool:
        """Verify a Merkle inclusion proof.

        Args:
            leaf: Fingerprint claimed to be in the batch.
            proof: Proof from get_proof().
            expected_root: Root the batch was anchored with.

        Returns:
            True if the proof leads to expected_root.
        """
        current = leaf

        for entry in proof:
            if entry.position == "left":
                current = hash_pair(entry.sibling, current)
            else:
                current = hash_pair(current, entry.sibling)

        return current == expected_root

    def generate_proof(
        self,
        leaves: Sequence[Fingerprint],
        index: int,
    ) -> list[MerkleProofEntry]:
        """Build the tree and return the proof for one leaf.

        Raises:
            EmptyBatchError: If leaves is empty.
            ValueError: If index is out of range.
        """
        _, tree_levels = self.build_tree(leaves)
        return self.get_proof(index, tree_levels)
