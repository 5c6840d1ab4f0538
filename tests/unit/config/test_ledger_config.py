"""Unit tests for LedgerConfig."""

import pytest

from certengine.config import MOCK_LEDGER_CONFIG, LedgerConfig
from certengine.config.ledger_config import DEFAULT_NETWORK_NAME

_ENV_KEYS = (
    "LEDGER_RPC_URL",
    "LEDGER_PRIVATE_KEY",
    "LEDGER_CONTRACT_ADDRESS",
    "LEDGER_MOCK_MODE",
    "LEDGER_NETWORK_NAME",
    "LEDGER_CONFIRMATIONS",
    "LEDGER_CONFIRMATION_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLedgerConfigDefaults:
    """Tests for default values and derived properties."""

    def test_defaults(self) -> None:
        config = LedgerConfig()

        assert config.network_name == DEFAULT_NETWORK_NAME
        assert config.confirmations == 1
        assert config.confirmation_timeout_seconds == 120.0
        assert config.mock_mode is False
        assert config.is_configured is False
        assert config.ledger_enabled is False
        assert config.missing_settings == ("rpc_url", "private_key", "contract_address")

    def test_complete_config_enabled(self, live_ledger_config: LedgerConfig) -> None:
        assert live_ledger_config.is_configured is True
        assert live_ledger_config.ledger_enabled is True

    def test_mock_mode_disables_ledger(self) -> None:
        assert MOCK_LEDGER_CONFIG.ledger_enabled is False

    def test_repr_hides_private_key(self, live_ledger_config: LedgerConfig) -> None:
        assert "01010101" not in repr(live_ledger_config)
        assert "private_key" not in repr(live_ledger_config)


class TestLedgerConfigValidation:
    """Tests for __post_init__ validation."""

    def test_confirmations_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="confirmations"):
            LedgerConfig(confirmations=0)

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="confirmation_timeout_seconds"):
            LedgerConfig(confirmation_timeout_seconds=0)


class TestLedgerConfigFromEnvironment:
    """Tests for LedgerConfig.from_environment."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_RPC_URL", "https://rpc.example.org")
        monkeypatch.setenv("LEDGER_PRIVATE_KEY", "0x" + "01" * 32)
        monkeypatch.setenv("LEDGER_CONTRACT_ADDRESS", "0x" + "22" * 20)
        monkeypatch.setenv("LEDGER_NETWORK_NAME", "Polygon Amoy")
        monkeypatch.setenv("LEDGER_CONFIRMATIONS", "3")
        monkeypatch.setenv("LEDGER_CONFIRMATION_TIMEOUT", "45.5")

        config = LedgerConfig.from_environment()

        assert config.rpc_url == "https://rpc.example.org"
        assert config.network_name == "Polygon Amoy"
        assert config.confirmations == 3
        assert config.confirmation_timeout_seconds == 45.5
        assert config.ledger_enabled is True

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("YES", True), ("off", False), ("maybe", False)],
    )
    def test_mock_mode_parsing(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
    ) -> None:
        monkeypatch.setenv("LEDGER_MOCK_MODE", raw)

        assert LedgerConfig.from_environment().mock_mode is expected

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_CONFIRMATIONS", "many")
        monkeypatch.setenv("LEDGER_CONFIRMATION_TIMEOUT", "soon")

        config = LedgerConfig.from_environment()

        assert config.confirmations == 1
        assert config.confirmation_timeout_seconds == 120.0

    def test_blank_values_count_as_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_RPC_URL", "   ")
        monkeypatch.setenv("LEDGER_NETWORK_NAME", "")

        config = LedgerConfig.from_environment()

        assert config.rpc_url is None
        assert config.network_name == DEFAULT_NETWORK_NAME
        assert "rpc_url" in config.missing_settings
