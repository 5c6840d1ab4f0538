"""Ledger client port.

Low-level transport to the certificate registry contract. Implementations
raise ``LedgerTransportError`` (or any exception) on failure; the ledger
adapter turns every failure into a degraded result.

Contract functions addressed by name:
    issueCertificate(bytes32)
    batchIssueCertificates(bytes32[])
    revokeCertificate(bytes32, string)
    verifyCertificate(bytes32) -> (bool exists, address issuer, uint256 issuedAt, bool revoked)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, eq=True)
class TransactionReceipt:
    """Mined transaction receipt.

    Attributes:
        transaction_id: ``0x``-prefixed transaction hash.
        block_number: Block the transaction was included in.
        gas_used: Gas consumed.
        succeeded: False when the transaction reverted.
    """

    transaction_id: str
    block_number: int
    gas_used: int
    succeeded: bool = True


@dataclass(frozen=True, eq=True)
class OnChainCertificate:
    """Raw ``verifyCertificate`` return value."""

    exists: bool
    issuer: str
    issued_at: int
    revoked: bool


@dataclass(frozen=True, eq=True)
class TransactionDetails:
    """Transaction lookup result."""

    transaction_id: str
    sender: str | None
    recipient: str | None
    block_number: int | None
    gas_used: int | None
    status: str  # "success" | "failed" | "pending"


@runtime_checkable
class LedgerClient(Protocol):
    """Transport to the certificate registry contract."""

    async def estimate_gas(self, function: str, args: tuple[Any, ...]) -> int:
        """Estimate gas for a contract call."""
        ...

    async def submit(
        self, function: str, args: tuple[Any, ...], gas_limit: int
    ) -> str:
        """Sign and send a contract transaction.

        Returns:
            The transaction hash.
        """
        ...

    async def wait_for_receipt(
        self, transaction_id: str, confirmations: int, timeout_seconds: float
    ) -> TransactionReceipt:
        """Block until the transaction has the requested confirmations."""
        ...

    async def call_verify(self, fingerprint: bytes) -> OnChainCertificate:
        """Call the read-only ``verifyCertificate`` function."""
        ...

    async def get_block_number(self) -> int:
        """Get the latest block number (connectivity probe)."""
        ...

    async def get_transaction(self, transaction_id: str) -> TransactionDetails | None:
        """Look up a transaction and its receipt, None if unknown."""
        ...
