"""Web3 ledger client for the certificate registry contract.

Talks JSON-RPC to an EVM node through ``AsyncWeb3``. Transactions are signed
locally with the configured key and sent raw; the key never leaves the
process.

Every failure is re-raised as ``LedgerTransportError`` so the ledger adapter
can tell transport failures apart in its logs.
"""

from __future__ import annotations

import asyncio
from typing import Any, Final

from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound

from certengine.application.ports.ledger_client import (
    OnChainCertificate,
    TransactionDetails,
    TransactionReceipt,
)
from certengine.config.ledger_config import LedgerConfig
from certengine.domain.errors.ledger import LedgerTransportError

# Poll interval while waiting for confirmations beyond the first
_CONFIRMATION_POLL_SECONDS: Final[float] = 2.0

CERTIFICATE_REGISTRY_ABI: Final[list[dict[str, Any]]] = [
    {
        "inputs": [{"internalType": "bytes32", "name": "certHash", "type": "bytes32"}],
        "name": "issueCertificate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "bytes32[]", "name": "certHashes", "type": "bytes32[]"}
        ],
        "name": "batchIssueCertificates",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "bytes32", "name": "certHash", "type": "bytes32"},
            {"internalType": "string", "name": "reason", "type": "string"},
        ],
        "name": "revokeCertificate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "bytes32", "name": "certHash", "type": "bytes32"}],
        "name": "verifyCertificate",
        "outputs": [
            {"internalType": "bool", "name": "exists", "type": "bool"},
            {"internalType": "address", "name": "issuer", "type": "address"},
            {"internalType": "uint256", "name": "issuedAt", "type": "uint256"},
            {"internalType": "bool", "name": "revoked", "type": "bool"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


class Web3LedgerClient:
    """``LedgerClient`` implementation backed by AsyncWeb3.

    Construction does no network I/O, but it does parse the signing key and
    contract address, so a malformed configuration fails here.
    """

    def __init__(self, config: LedgerConfig, web3: AsyncWeb3 | None = None) -> None:
        """Initialize the client.

        Args:
            config: Ledger configuration with rpc_url, private_key and
                contract_address set.
            web3: Optional pre-built AsyncWeb3 instance (tests, custom providers).

        Raises:
            ValueError: If the configuration is incomplete or malformed.
        """
        if not config.is_configured:
            raise ValueError(
                "Ledger client requires " + ", ".join(config.missing_settings)
            )
        self._w3 = web3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))
        self._account = self._w3.eth.account.from_key(config.private_key)
        self._contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(str(config.contract_address)),
            abi=CERTIFICATE_REGISTRY_ABI,
        )

    @property
    def address(self) -> str:
        """Address of the signing account."""
        return str(self._account.address)

    def _function(self, function: str, args: tuple[Any, ...]) -> Any:
        return getattr(self._contract.functions, function)(*args)

    async def estimate_gas(self, function: str, args: tuple[Any, ...]) -> int:
        try:
            return int(
                await self._function(function, args).estimate_gas(
                    {"from": self._account.address}
                )
            )
        except Exception as exc:
            raise LedgerTransportError(function, str(exc)) from exc

    async def submit(
        self, function: str, args: tuple[Any, ...], gas_limit: int
    ) -> str:
        try:
            nonce = await self._w3.eth.get_transaction_count(
                self._account.address, "pending"
            )
            chain_id = await self._w3.eth.chain_id
            transaction = await self._function(function, args).build_transaction(
                {
                    "from": self._account.address,
                    "nonce": nonce,
                    "gas": gas_limit,
                    "chainId": chain_id,
                }
            )
            signed = self._account.sign_transaction(transaction)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            raise LedgerTransportError(function, str(exc)) from exc
        return AsyncWeb3.to_hex(tx_hash)

    async def wait_for_receipt(
        self, transaction_id: str, confirmations: int, timeout_seconds: float
    ) -> TransactionReceipt:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_seconds
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                transaction_id, timeout=timeout_seconds
            )
            target_block = receipt["blockNumber"] + confirmations - 1
            while await self._w3.eth.block_number < target_block:
                if loop.time() >= deadline:
                    raise TimeoutError(
                        f"{confirmations} confirmations not reached "
                        f"within {timeout_seconds}s"
                    )
                await asyncio.sleep(_CONFIRMATION_POLL_SECONDS)
        except Exception as exc:
            raise LedgerTransportError("wait_for_receipt", str(exc)) from exc

        return TransactionReceipt(
            transaction_id=AsyncWeb3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
            succeeded=receipt["status"] == 1,
        )

    async def call_verify(self, fingerprint: bytes) -> OnChainCertificate:
        try:
            exists, issuer, issued_at, revoked = await self._function(
                "verifyCertificate", (fingerprint,)
            ).call()
        except Exception as exc:
            raise LedgerTransportError("verifyCertificate", str(exc)) from exc
        return OnChainCertificate(
            exists=bool(exists),
            issuer=str(issuer),
            issued_at=int(issued_at),
            revoked=bool(revoked),
        )

    async def get_block_number(self) -> int:
        try:
            return int(await self._w3.eth.block_number)
        except Exception as exc:
            raise LedgerTransportError("get_block_number", str(exc)) from exc

    async def get_transaction(self, transaction_id: str) -> TransactionDetails | None:
        try:
            transaction = await self._w3.eth.get_transaction(transaction_id)
        except TransactionNotFound:
            return None
        except Exception as exc:
            raise LedgerTransportError("get_transaction", str(exc)) from exc

        try:
            receipt = await self._w3.eth.get_transaction_receipt(transaction_id)
        except TransactionNotFound:
            receipt = None
        except Exception as exc:
            raise LedgerTransportError("get_transaction", str(exc)) from exc

        if receipt is None:
            status = "pending"
        else:
            status = "success" if receipt["status"] == 1 else "failed"

        return TransactionDetails(
            transaction_id=AsyncWeb3.to_hex(transaction["hash"]),
            sender=transaction.get("from"),
            recipient=transaction.get("to"),
            block_number=receipt["blockNumber"] if receipt else None,
            gas_used=receipt["gasUsed"] if receipt else None,
            status=status,
        )
