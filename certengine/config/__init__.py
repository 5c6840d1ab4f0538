"""Configuration module for certengine.

Available Configurations:
- LedgerConfig: Ledger endpoint, signing key, contract and mock mode
- AuditConfig: Audit ingestion limits and timeouts
"""

from certengine.config.audit_config import (
    DEFAULT_AUDIT_CONFIG,
    AuditConfig,
)
from certengine.config.ledger_config import (
    MOCK_LEDGER_CONFIG,
    LedgerConfig,
)

__all__ = [
    "AuditConfig",
    "DEFAULT_AUDIT_CONFIG",
    "LedgerConfig",
    "MOCK_LEDGER_CONFIG",
]
