"""Merkle inclusion proof model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from certengine.domain.models.fingerprint import Fingerprint


@dataclass(frozen=True, eq=True)
class MerkleProofEntry:
    """One step of a Merkle inclusion proof.

    Attributes:
        level: Tree level of the sibling (0 = leaves).
        position: Side the sibling sits on relative to the running hash.
        sibling: Sibling node value.
    """

    level: int
    position: Literal["left", "right"]
    sibling: Fingerprint
