"""Ledger adapters (certificate registry contract)."""

from certengine.infrastructure.adapters.ledger.ledger_adapter import (
    LedgerAdapter,
    apply_gas_margin,
)
from certengine.infrastructure.adapters.ledger.web3_client import (
    CERTIFICATE_REGISTRY_ABI,
    Web3LedgerClient,
)

__all__ = [
    "CERTIFICATE_REGISTRY_ABI",
    "LedgerAdapter",
    "Web3LedgerClient",
    "apply_gas_margin",
]
