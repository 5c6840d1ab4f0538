"""Ledger client stub implementation.

In-memory stand-in for the certificate registry contract. Transactions are
mined instantly; every call is recorded so tests can assert on gas limits
and arguments. Individual operations can be made to fail.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any

from certengine.application.ports.ledger_client import (
    LedgerClient,
    OnChainCertificate,
    TransactionDetails,
    TransactionReceipt,
)
from certengine.domain.errors.ledger import LedgerTransportError
from certengine.domain.models.ledger_record import ZERO_ADDRESS


@dataclass(frozen=True)
class SubmittedCall:
    """A transaction submitted to the stub."""

    transaction_id: str
    function: str
    args: tuple[Any, ...]
    gas_limit: int


@dataclass
class _Entry:
    issuer: str
    issued_at: int
    revoked: bool = False


class LedgerClientStub(LedgerClient):
    """In-memory stub implementation of LedgerClient.

    Attributes:
        issuer: Address recorded as issuer of every fingerprint.
        gas_estimate: Value returned by estimate_gas().
        submitted: Transactions submitted so far.
    """

    def __init__(
        self,
        issuer: str = "0x" + "11" * 20,
        gas_estimate: int = 50_000,
        gas_used: int = 45_000,
        start_block: int = 1_000,
        issued_at: int = 1_700_000_000,
    ) -> None:
        self.issuer = issuer
        self.gas_estimate = gas_estimate
        self.gas_used = gas_used
        self.issued_at = issued_at
        self.submitted: list[SubmittedCall] = []
        self._block_number = start_block
        self._registry: dict[bytes, _Entry] = {}
        self._receipts: dict[str, TransactionReceipt] = {}
        self._failing: dict[str, Exception] = {}
        self._reverting = False

    def fail(self, operation: str, error: Exception | None = None) -> None:
        """Make one client method raise.

        Args:
            operation: Method name (estimate_gas, submit, wait_for_receipt,
                call_verify, get_block_number, get_transaction).
            error: Exception to raise (LedgerTransportError by default).
        """
        self._failing[operation] = error or LedgerTransportError(
            operation, "connection refused"
        )

    def revert_transactions(self, reverting: bool = True) -> None:
        """Mine subsequent transactions with a failed status."""
        self._reverting = reverting

    def reset(self) -> None:
        """Clear registry, history and failure modes."""
        self.submitted.clear()
        self._registry.clear()
        self._receipts.clear()
        self._failing.clear()
        self._reverting = False

    def _check(self, operation: str) -> None:
        error = self._failing.get(operation)
        if error is not None:
            raise error

    def _apply(self, function: str, args: tuple[Any, ...]) -> None:
        if function == "issueCertificate":
            self._registry[args[0]] = _Entry(self.issuer, self.issued_at)
        elif function == "batchIssueCertificates":
            for digest in args[0]:
                self._registry[digest] = _Entry(self.issuer, self.issued_at)
        elif function == "revokeCertificate":
            entry = self._registry.get(args[0])
            if entry is None:
                raise LedgerTransportError(function, "execution reverted: not issued")
            entry.revoked = True
        else:
            raise LedgerTransportError(function, "unknown contract function")

    async def estimate_gas(self, function: str, args: tuple[Any, ...]) -> int:
        self._check("estimate_gas")
        return self.gas_estimate

    async def submit(
        self, function: str, args: tuple[Any, ...], gas_limit: int
    ) -> str:
        self._check("submit")
        transaction_id = "0x" + secrets.token_hex(32)
        self.submitted.append(SubmittedCall(transaction_id, function, args, gas_limit))
        if not self._reverting:
            self._apply(function, args)
        self._block_number += 1
        self._receipts[transaction_id] = TransactionReceipt(
            transaction_id=transaction_id,
            block_number=self._block_number,
            gas_used=self.gas_used,
            succeeded=not self._reverting,
        )
        return transaction_id

    async def wait_for_receipt(
        self, transaction_id: str, confirmations: int, timeout_seconds: float
    ) -> TransactionReceipt:
        self._check("wait_for_receipt")
        receipt = self._receipts.get(transaction_id)
        if receipt is None:
            raise LedgerTransportError("wait_for_receipt", "unknown transaction")
        return receipt

    async def call_verify(self, fingerprint: bytes) -> OnChainCertificate:
        self._check("call_verify")
        entry = self._registry.get(fingerprint)
        if entry is None:
            return OnChainCertificate(
                exists=False, issuer=ZERO_ADDRESS, issued_at=0, revoked=False
            )
        return OnChainCertificate(
            exists=True,
            issuer=entry.issuer,
            issued_at=entry.issued_at,
            revoked=entry.revoked,
        )

    async def get_block_number(self) -> int:
        self._check("get_block_number")
        return self._block_number

    async def get_transaction(self, transaction_id: str) -> TransactionDetails | None:
        self._check("get_transaction")
        receipt = self._receipts.get(transaction_id)
        if receipt is None:
            return None
        return TransactionDetails(
            transaction_id=transaction_id,
            sender=self.issuer,
            recipient=None,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            status="success" if receipt.succeeded else "failed",
        )
