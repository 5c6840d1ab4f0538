"""Ledger adapter: fail-open reconciliation with the certificate registry.

Implements ``LedgerPort`` on top of a ``LedgerClient`` transport. The
adapter never raises transport errors to its callers. It runs in one of
three modes:

    live      client present and config complete -> real transactions
    mock      LEDGER_MOCK_MODE set               -> synthetic results
    disabled  connection settings missing        -> synthetic results

Failure asymmetry:
    - Disabled/mock ``verify`` is optimistic (exists, not revoked).
    - A live ``verify`` that errors is pessimistic (does not exist).
    Writes always return a structurally valid ``TxResult``; anything that
    did not round-trip a real ledger is marked ``degraded``.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable, Sequence
from typing import Any, Final

from certengine.application.ports.ledger_client import LedgerClient, TransactionDetails
from certengine.application.services.base import LoggingMixin
from certengine.config.ledger_config import LedgerConfig
from certengine.domain.errors.encoding import EmptyBatchError
from certengine.domain.errors.ledger import LedgerTransportError
from certengine.domain.models.fingerprint import Fingerprint
from certengine.domain.models.ledger_record import (
    MOCK_LEDGER_STATUS,
    NOT_FOUND_LEDGER_STATUS,
    UNAVAILABLE_LEDGER_STATUS,
    ZERO_ADDRESS,
    LedgerRecord,
    TxResult,
)
from certengine.infrastructure.monitoring.metrics import IntegrityMetrics

# Safety margin applied to gas estimates (percent)
GAS_MARGIN_PERCENT: Final[int] = 120

# Synthetic receipts
SYNTHETIC_BLOCK_MIN: Final[int] = 30_000_000
SYNTHETIC_BLOCK_SPAN: Final[int] = 1_000_000
SYNTHETIC_COST_USED: Final[int] = 21_000

# Mock verify pretends the certificate was anchored this long ago
MOCK_ISSUED_AGE_SECONDS: Final[int] = 30 * 24 * 60 * 60


def apply_gas_margin(estimate: int) -> int:
    """Add the 20% safety margin to a gas estimate (integer arithmetic)."""
    return estimate * GAS_MARGIN_PERCENT // 100


def synthetic_transaction_id() -> str:
    """Random ``0x``-prefixed 32-byte transaction id."""
    return "0x" + secrets.token_hex(32)


class LedgerAdapter(LoggingMixin):
    """Fail-open ``LedgerPort`` implementation.

    Example:
        adapter = LedgerAdapter(LedgerConfig.from_environment(), client)
        receipt = await adapter.issue(fingerprint)
        if receipt.degraded:
            ...  # not anchored on a real ledger
    """

    def __init__(
        self,
        config: LedgerConfig,
        client: LedgerClient | None = None,
        metrics: IntegrityMetrics | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Ledger configuration.
            client: Contract transport. Ignored in mock mode; without one the
                adapter runs disabled.
            metrics: Optional metrics collector.
            clock: Unix-seconds clock for mock issue times.
        """
        self._config = config
        self._client = client if config.ledger_enabled else None
        self._metrics = metrics
        self._clock = clock
        self._init_logger(component="ledger")

        if not config.mock_mode and self._client is None:
            self._log.warning(
                "ledger_disabled",
                missing_settings=list(config.missing_settings),
                client_configured=client is not None,
            )

    @property
    def mode(self) -> str:
        """Current mode: ``live``, ``mock`` or ``disabled``."""
        if self._config.mock_mode:
            return "mock"
        return "live" if self._client is not None else "disabled"

    @property
    def network_name(self) -> str:
        return self._config.network_name

    def _record_metrics(self, operation: str, outcome: str, started: float) -> None:
        if self._metrics is not None:
            self._metrics.record_ledger_operation(
                operation, outcome, time.perf_counter() - started
            )

    def _synthetic_tx(self, count: int = 1, error: str | None = None) -> TxResult:
        suffix = "Mock - Error" if error else "Mock"
        return TxResult(
            transaction_id=synthetic_transaction_id(),
            block_number=SYNTHETIC_BLOCK_MIN + secrets.randbelow(SYNTHETIC_BLOCK_SPAN),
            cost_used=SYNTHETIC_COST_USED,
            confirmed=False,
            degraded=True,
            network=f"{self._config.network_name} ({suffix})",
            count=count,
            error=error,
        )

    async def _transact(
        self,
        operation: str,
        function: str,
        args: tuple[Any, ...],
        count: int = 1,
        **context: Any,
    ) -> TxResult:
        """Estimate, sign, submit and confirm one contract transaction."""
        log = self._log_operation(operation, **context)
        started = time.perf_counter()

        if self._client is None:
            log.info(f"ledger_{operation}_mocked", mode=self.mode)
            self._record_metrics(operation, "mock", started)
            return self._synthetic_tx(count=count)

        try:
            estimate = await self._client.estimate_gas(function, args)
            gas_limit = apply_gas_margin(estimate)
            transaction_id = await self._client.submit(function, args, gas_limit)
            log.info(
                f"ledger_{operation}_submitted",
                transaction_id=transaction_id,
                gas_estimate=estimate,
                gas_limit=gas_limit,
            )
            receipt = await self._client.wait_for_receipt(
                transaction_id,
                self._config.confirmations,
                self._config.confirmation_timeout_seconds,
            )
            if not receipt.succeeded:
                raise LedgerTransportError(
                    operation, f"transaction {transaction_id} reverted"
                )
        except Exception as exc:
            log.error(f"ledger_{operation}_degraded", error=str(exc), exc_info=True)
            self._record_metrics(operation, "degraded", started)
            return self._synthetic_tx(count=count, error=str(exc))

        log.info(
            f"ledger_{operation}_confirmed",
            transaction_id=receipt.transaction_id,
            block_number=receipt.block_number,
            cost_used=receipt.gas_used,
        )
        self._record_metrics(operation, "confirmed", started)
        return TxResult(
            transaction_id=receipt.transaction_id,
            block_number=receipt.block_number,
            cost_used=receipt.gas_used,
            confirmed=True,
            network=self._config.network_name,
            count=count,
        )

    async def issue(self, fingerprint: Fingerprint) -> TxResult:
        """Anchor one fingerprint on the ledger.

        Args:
            fingerprint: Certificate fingerprint.

        Returns:
            Confirmed receipt, or a degraded synthetic receipt.
        """
        return await self._transact(
            "issue",
            "issueCertificate",
            (fingerprint.digest,),
            fingerprint=fingerprint.hex,
        )

    async def issue_batch(self, fingerprints: Sequence[Fingerprint]) -> TxResult:
        """Anchor several fingerprints in a single transaction.

        Args:
            fingerprints: Non-empty batch.

        Returns:
            Receipt whose ``count`` is the batch size.

        Raises:
            EmptyBatchError: If the batch is empty.
        """
        if not fingerprints:
            raise EmptyBatchError("issue_batch")
        return await self._transact(
            "issue_batch",
            "batchIssueCertificates",
            ([fp.digest for fp in fingerprints],),
            count=len(fingerprints),
            batch_size=len(fingerprints),
        )

    async def revoke(self, fingerprint: Fingerprint, reason: str) -> TxResult:
        """Mark a fingerprint revoked on the ledger."""
        return await self._transact(
            "revoke",
            "revokeCertificate",
            (fingerprint.digest, reason),
            fingerprint=fingerprint.hex,
            reason=reason,
        )

    async def verify(self, fingerprint: Fingerprint) -> LedgerRecord:
        """Read the ledger state of a fingerprint.

        Args:
            fingerprint: Certificate fingerprint.

        Returns:
            LedgerRecord. Disabled/mock mode is optimistic; a transport
            error yields ``exists=False`` with ``degraded`` set.
        """
        log = self._log_operation("verify", fingerprint=fingerprint.hex)
        started = time.perf_counter()

        if self._client is None:
            log.info("ledger_verify_mocked", mode=self.mode)
            self._record_metrics("verify", "mock", started)
            return LedgerRecord(
                exists=True,
                issuer=ZERO_ADDRESS,
                issued_at=int(self._clock()) - MOCK_ISSUED_AGE_SECONDS,
                revoked=False,
                status=MOCK_LEDGER_STATUS,
                degraded=True,
            )

        try:
            on_chain = await self._client.call_verify(fingerprint.digest)
        except Exception as exc:
            log.error("ledger_verify_degraded", error=str(exc), exc_info=True)
            self._record_metrics("verify", "degraded", started)
            return LedgerRecord(
                exists=False,
                issuer=None,
                issued_at=None,
                revoked=False,
                status=UNAVAILABLE_LEDGER_STATUS,
                degraded=True,
                error=str(exc),
            )

        network = self._config.network_name
        if not on_chain.exists:
            status = NOT_FOUND_LEDGER_STATUS
        elif on_chain.revoked:
            status = f"Revoked on {network}"
        else:
            status = f"Valid on {network}"

        log.info("ledger_verify_completed", exists=on_chain.exists, revoked=on_chain.revoked)
        self._record_metrics("verify", "confirmed", started)
        return LedgerRecord(
            exists=on_chain.exists,
            issuer=on_chain.issuer if on_chain.exists else None,
            issued_at=on_chain.issued_at if on_chain.exists else None,
            revoked=on_chain.revoked,
            status=status,
        )

    async def is_available(self) -> bool:
        """Probe the ledger with a block-number call. Never raises."""
        if self._client is None:
            return False
        try:
            block_number = await self._client.get_block_number()
        except Exception as exc:
            self._log_operation("is_available").warning(
                "ledger_unreachable", error=str(exc)
            )
            return False
        return block_number >= 0

    async def get_transaction(self, transaction_id: str) -> TransactionDetails | None:
        """Look up a transaction. None when disabled, unknown or on error."""
        if self._client is None:
            return None
        try:
            return await self._client.get_transaction(transaction_id)
        except Exception as exc:
            self._log_operation(
                "get_transaction", transaction_id=transaction_id
            ).warning("ledger_transaction_lookup_failed", error=str(exc))
            return None
