"""Ledger client configuration.

Environment Variables:
- LEDGER_RPC_URL: JSON-RPC endpoint of the ledger node
- LEDGER_PRIVATE_KEY: Hex signing key of the issuing account
- LEDGER_CONTRACT_ADDRESS: Address of the certificate registry contract
- LEDGER_MOCK_MODE: Skip the ledger entirely (default: false)
- LEDGER_NETWORK_NAME: Display label for the network (default: Polygon Mumbai)
- LEDGER_CONFIRMATIONS: Confirmations to wait for (default: 1)
- LEDGER_CONFIRMATION_TIMEOUT: Seconds to wait for a receipt (default: 120)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from certengine.config._env import (
    get_bool_env,
    get_float_env,
    get_int_env,
    get_str_env,
)

DEFAULT_NETWORK_NAME = "Polygon Mumbai"


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration for the ledger adapter.

    The signing key is excluded from ``repr`` so the config can be logged.

    Attributes:
        rpc_url: JSON-RPC endpoint.
        private_key: Signing key of the issuing account.
        contract_address: Certificate registry contract address.
        mock_mode: When True the adapter never touches the network.
        network_name: Display label used in status lines and receipts.
        confirmations: Confirmations to wait for after submission.
        confirmation_timeout_seconds: Receipt wait timeout.
    """

    rpc_url: str | None = None
    private_key: str | None = field(default=None, repr=False)
    contract_address: str | None = None
    mock_mode: bool = False
    network_name: str = DEFAULT_NETWORK_NAME
    confirmations: int = 1
    confirmation_timeout_seconds: float = 120.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.confirmations < 1:
            raise ValueError(
                f"confirmations must be at least 1, got {self.confirmations}"
            )
        if self.confirmation_timeout_seconds <= 0:
            raise ValueError(
                "confirmation_timeout_seconds must be positive, "
                f"got {self.confirmation_timeout_seconds}"
            )

    @property
    def missing_settings(self) -> tuple[str, ...]:
        """Names of the connection settings that are not set."""
        missing = []
        if not self.rpc_url:
            missing.append("rpc_url")
        if not self.private_key:
            missing.append("private_key")
        if not self.contract_address:
            missing.append("contract_address")
        return tuple(missing)

    @property
    def is_configured(self) -> bool:
        """Check if every connection setting is present."""
        return not self.missing_settings

    @property
    def ledger_enabled(self) -> bool:
        """Check if the adapter should talk to a real ledger."""
        return not self.mock_mode and self.is_configured

    @classmethod
    def from_environment(cls) -> LedgerConfig:
        """Create config from environment variables with defaults.

        Returns:
            LedgerConfig with values from environment or defaults.
        """
        return cls(
            rpc_url=get_str_env("LEDGER_RPC_URL"),
            private_key=get_str_env("LEDGER_PRIVATE_KEY"),
            contract_address=get_str_env("LEDGER_CONTRACT_ADDRESS"),
            mock_mode=get_bool_env("LEDGER_MOCK_MODE", False),
            network_name=get_str_env("LEDGER_NETWORK_NAME", DEFAULT_NETWORK_NAME)
            or DEFAULT_NETWORK_NAME,
            confirmations=get_int_env("LEDGER_CONFIRMATIONS", 1),
            confirmation_timeout_seconds=get_float_env(
                "LEDGER_CONFIRMATION_TIMEOUT", 120.0
            ),
        )


# Demo / test config: never touches the network
MOCK_LEDGER_CONFIG = LedgerConfig(mock_mode=True)
