"""CertificateNFT ledger client over web3.py.

Two write paths share one implementation:

- ``for_signer``: signing is delegated to an externally supplied provider
  that manages accounts (a wallet connection). Transactions are sent with
  ``eth_sendTransaction`` and the provider signs them.
- ``for_key``: a private key is held locally; web3's sign-and-send
  middleware turns ``transact`` into ``eth_sendRawTransaction``.

Errors are passed through verbatim inside typed exceptions; deciding what
is user-facing is the orchestrator's job.
"""

from __future__ import annotations

import logging
from typing import Any

from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from web3.logs import DISCARD
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.providers import BaseProvider

from certforge.config import CertforgeConfig
from certforge.core.errors import (
    ConfigurationError,
    LedgerConfirmationTimeout,
    LedgerError,
    LedgerReadError,
    LedgerSubmissionError,
)
from certforge.ledger.abi import CERTIFICATE_NFT_ABI, MINT_EVENT_NAME, event_argument_names
from certforge.models.ledger import MintReceipt, OnChainCredential, TxReceipt

logger = logging.getLogger(__name__)

# web3 surfaces RPC failures as Web3Exception subclasses, ValueError (older
# node error payloads) or OSError (requests connection errors).
_RPC_ERRORS = (Web3Exception, ValueError, OSError)


def _hex(value: Any) -> str:
    return value if isinstance(value, str) else Web3.to_hex(value)


def _message(exc: Exception) -> str:
    """The node's own message; web3 keeps it on ``.message`` for contract errors."""
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) and message else str(exc)


def connect_rpc(config: CertforgeConfig) -> Web3:
    """Open an HTTP connection to the ledger.

    An explicit ``rpc_url`` is used as-is. Otherwise the public fallback
    endpoints are tried in order and the first reachable one wins; if
    none answers the first is returned so later calls fail with the
    node's own error.
    """
    endpoints = config.rpc_endpoints
    if not endpoints:
        raise ConfigurationError("No ledger RPC endpoint configured. Set CERTFORGE_RPC_URL.")

    def _open(url: str) -> Web3:
        return Web3(
            Web3.HTTPProvider(url, request_kwargs={"timeout": config.http_timeout_seconds})
        )

    if config.rpc_url:
        return _open(config.rpc_url)

    for url in endpoints:
        w3 = _open(url)
        if w3.is_connected():
            logger.info("Connected to public RPC endpoint %s", url)
            return w3
        logger.warning("RPC endpoint %s unreachable, trying next", url)
    logger.warning("No RPC endpoint reachable; using %s", endpoints[0])
    return _open(endpoints[0])


class LedgerClient:
    """Contract-call primitives for the CertificateNFT contract.

    Prefer the constructors ``for_signer``, ``for_key``, ``from_config``
    and ``read_only`` over calling ``__init__`` directly.

    Parameters
    ----------
    w3:
        Connected Web3 instance.
    contract_address:
        Deployed contract address. Empty raises ``ConfigurationError``.
    sender:
        Address transactions are sent from; None for a read-only client.
    config:
        Timeouts and gas limits.
    locally_signed:
        True when the key is held in-process (gas limits are then set
        explicitly, as the wallet path leaves estimation to the wallet).
    """

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        *,
        sender: str | None = None,
        config: CertforgeConfig | None = None,
        locally_signed: bool = False,
    ) -> None:
        if not contract_address:
            raise ConfigurationError(
                "Contract address not configured. Set CERTFORGE_CONTRACT_ADDRESS."
            )
        if not Web3.is_address(contract_address):
            raise ConfigurationError(f"Invalid contract address: {contract_address}")
        self._w3 = w3
        self._config = config or CertforgeConfig()
        self._sender = sender
        self._locally_signed = locally_signed
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=CERTIFICATE_NFT_ABI,
        )

    # ------------------------------------------------------------------
    # Construction paths
    # ------------------------------------------------------------------

    @classmethod
    def for_signer(
        cls,
        provider: BaseProvider,
        *,
        contract_address: str,
        signer_address: str | None = None,
        config: CertforgeConfig | None = None,
    ) -> LedgerClient:
        """Client whose transactions are signed by an external wallet provider."""
        w3 = Web3(provider)
        sender = signer_address
        if sender is None:
            try:
                accounts = w3.eth.accounts
            except _RPC_ERRORS as exc:
                raise ConfigurationError(f"Wallet provider unavailable: {_message(exc)}") from exc
            if not accounts:
                raise ConfigurationError("Wallet provider exposes no accounts.")
            sender = accounts[0]
        logger.info("Ledger client using wallet signer %s", sender)
        return cls(
            w3,
            contract_address,
            sender=Web3.to_checksum_address(sender),
            config=config,
        )

    @classmethod
    def for_key(
        cls,
        private_key: str | None,
        *,
        config: CertforgeConfig | None = None,
        contract_address: str | None = None,
        w3: Web3 | None = None,
    ) -> LedgerClient:
        """Client holding a private key and signing locally.

        Raises ``ConfigurationError`` when no key material is given.
        """
        key = (private_key or "").strip()
        if not key:
            raise ConfigurationError(
                "Owner private key not configured. Set CERTFORGE_OWNER_PRIVATE_KEY."
            )
        config = config or CertforgeConfig()
        try:
            account = Account.from_key(key)
        except (ValueError, TypeError) as exc:
            # never echo the key itself
            raise ConfigurationError("Owner private key is malformed.") from exc

        w3 = w3 or connect_rpc(config)
        w3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
        w3.eth.default_account = account.address
        logger.info("Ledger client using local key for %s", account.address)
        return cls(
            w3,
            contract_address or config.contract_address,
            sender=account.address,
            config=config,
            locally_signed=True,
        )

    @classmethod
    def from_config(cls, config: CertforgeConfig, *, w3: Web3 | None = None) -> LedgerClient:
        """Key-held client from ``CERTFORGE_OWNER_PRIVATE_KEY``."""
        key = config.owner_private_key.get_secret_value() if config.owner_private_key else None
        return cls.for_key(key, config=config, w3=w3)

    @classmethod
    def read_only(cls, config: CertforgeConfig, *, w3: Web3 | None = None) -> LedgerClient:
        """Client for view calls only; write calls raise ``ConfigurationError``."""
        return cls(w3 or connect_rpc(config), config.contract_address, config=config)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def signer_address(self) -> str | None:
        return self._sender

    @property
    def mode(self) -> str:
        if self._sender is None:
            return "read-only"
        return "key" if self._locally_signed else "signer"

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def submit_mint(self, recipient: str, metadata_uri: str) -> str:
        """Send ``mintCertificate`` and return the tx hash without waiting."""
        try:
            fn = self._contract.functions.mintCertificate(
                Web3.to_checksum_address(recipient), metadata_uri
            )
        except _RPC_ERRORS as exc:
            raise LedgerSubmissionError(_message(exc)) from exc
        tx_hash = self._transact(fn, self._config.mint_gas_limit)
        logger.info("Mint submitted for %s: %s", recipient, tx_hash)
        return tx_hash

    def confirm_mint(self, tx_hash: str) -> MintReceipt:
        """Wait for a mint and recover the token id from its event log."""
        receipt = self._wait(tx_hash)
        token_id = self._extract_token_id(receipt)
        if token_id is None:
            logger.warning(
                "Mint %s confirmed but no %s event was decoded", tx_hash, MINT_EVENT_NAME
            )
        return MintReceipt(
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            status=receipt.get("status", 1),
            token_id=token_id,
        )

    def mint(self, recipient: str, metadata_uri: str) -> MintReceipt:
        """Submit a mint and block until it is confirmed."""
        return self.confirm_mint(self.submit_mint(recipient, metadata_uri))

    def submit_revoke(self, token_id: int) -> str:
        fn = self._contract.functions.revokeCertificate(token_id)
        tx_hash = self._transact(fn, self._config.revoke_gas_limit)
        logger.info("Revoke submitted for token %s: %s", token_id, tx_hash)
        return tx_hash

    def confirm(self, tx_hash: str) -> TxReceipt:
        """Wait for any transaction to be included."""
        receipt = self._wait(tx_hash)
        return TxReceipt(
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            status=receipt.get("status", 1),
        )

    def revoke(self, token_id: int) -> TxReceipt:
        """Mark a credential revoked. Re-revoking is rejected by the contract."""
        return self.confirm(self.submit_revoke(token_id))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_info(self, token_id: int) -> OnChainCredential:
        owner, issuer, metadata_uri, issued_at, is_valid, revoked = self._call(
            "getCertificateInfo", token_id
        )
        return OnChainCredential(
            token_id=token_id,
            owner=owner,
            issuer=issuer,
            metadata_uri=metadata_uri,
            issued_at=int(issued_at),
            is_valid=bool(is_valid),
            revoked=bool(revoked),
        )

    def is_valid(self, token_id: int) -> bool:
        return bool(self._call("isCertificateValid", token_id))

    def total_supply(self) -> int:
        return int(self._call("getTotalCertificates"))

    def owner_of(self, token_id: int) -> str:
        return str(self._call("ownerOf", token_id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transact(self, fn: Any, gas_limit: int) -> str:
        if self._sender is None:
            raise ConfigurationError("This ledger client is read-only; no signer configured.")
        params: dict[str, Any] = {"from": self._sender}
        if self._locally_signed:
            params["gas"] = gas_limit
        try:
            return _hex(fn.transact(params))
        except _RPC_ERRORS as exc:
            raise LedgerSubmissionError(_message(exc)) from exc

    def _wait(self, tx_hash: str) -> Any:
        try:
            receipt = self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._config.confirmation_timeout_seconds,
                poll_latency=self._config.confirmation_poll_seconds,
            )
        except TimeExhausted as exc:
            raise LedgerConfirmationTimeout(
                f"Transaction {tx_hash} not confirmed within "
                f"{self._config.confirmation_timeout_seconds}s",
                tx_hash=tx_hash,
            ) from exc
        except _RPC_ERRORS as exc:
            raise LedgerError(_message(exc)) from exc

        if receipt.get("status") == 0:
            raise LedgerSubmissionError(
                f"Transaction {tx_hash} reverted in block {receipt.get('blockNumber')}"
            )
        logger.info("Transaction %s confirmed in block %s", tx_hash, receipt.get("blockNumber"))
        return receipt

    def _extract_token_id(self, receipt: Any) -> int | None:
        event = getattr(self._contract.events, MINT_EVENT_NAME)()
        first_arg = event_argument_names(MINT_EVENT_NAME)[0]
        try:
            decoded = event.process_receipt(receipt, errors=DISCARD)
        except _RPC_ERRORS as exc:
            logger.warning(
                "Could not decode logs of %s: %s", receipt.get("transactionHash"), _message(exc)
            )
            return None
        for log in decoded:
            try:
                return int(log["args"][first_arg])
            except (KeyError, TypeError, ValueError):
                continue
        return None

    def _call(self, fn_name: str, *args: Any) -> Any:
        try:
            return getattr(self._contract.functions, fn_name)(*args).call()
        except _RPC_ERRORS as exc:
            raise LedgerReadError(_message(exc)) from exc
