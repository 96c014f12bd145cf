"""Shared test fixtures for certforge."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from certforge.config import CertforgeConfig
from certforge.core.errors import LedgerReadError, LedgerSubmissionError, StorageError
from certforge.core.hasher import canonical_json_bytes
from certforge.core.metadata_builder import content_uri
from certforge.models.content import ContentRecord
from certforge.models.credentials import CredentialInput, ImageSource
from certforge.models.ledger import MintReceipt, OnChainCredential, TxReceipt

ISSUER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
OTHER_ADDRESS = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
# Well-known local development key (hardhat/anvil account #0), never funded.
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeContentStore:
    """Content store that hashes what it is given, like the real network.

    Identical bytes map to the same content id and the second upload is
    flagged as a duplicate.
    """

    def __init__(self, scheme: str = "ipfs") -> None:
        self.scheme = scheme
        self.calls: list[str] = []
        self.blobs: dict[str, bytes] = {}
        self.documents: dict[str, dict[str, Any]] = {}
        self.fail_on: set[str] = set()
        self.unreachable: set[str] = set()
        self.unpinned: list[str] = []
        self.keyvalues: dict[str, dict[str, str]] = {}
        self.reachable = True

    def _pin(self, data: bytes) -> ContentRecord:
        cid = "bafy" + hashlib.sha256(data).hexdigest()[:40]
        duplicate = cid in self.blobs
        self.blobs[cid] = data
        return ContentRecord(content_id=cid, size=len(data), is_duplicate=duplicate)

    def upload(self, image: ImageSource, *, name=None, keyvalues=None) -> ContentRecord:
        self.calls.append("upload")
        if "upload" in self.fail_on:
            raise StorageError("Failed to upload image: 401 - Unauthorized", status_code=401)
        try:
            data = Path(image.location).read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read image {image.location}: {exc}") from exc
        return self._pin(data)

    def upload_document(self, document, *, name=None, keyvalues=None) -> ContentRecord:
        self.calls.append("upload_document")
        if "upload_document" in self.fail_on:
            raise StorageError("Failed to upload JSON: 500 - boom", status_code=500)
        record = self._pin(canonical_json_bytes(document))
        self.documents[record.content_id] = document
        self.keyvalues[record.content_id] = dict(keyvalues or {})
        return record

    def unpin(self, content_id: str) -> None:
        self.calls.append("unpin")
        self.unpinned.append(content_id)

    def fetch_document(self, reference: str) -> dict[str, Any]:
        self.calls.append("fetch_document")
        cid = reference.removeprefix(f"{self.scheme}://")
        if cid in self.unreachable or cid not in self.documents:
            raise StorageError(f"Failed to fetch {reference}: 504", status_code=504)
        return self.documents[cid]

    def to_uri(self, content_id: str) -> str:
        return content_uri(content_id, self.scheme)

    def validate_connection(self) -> bool:
        return self.reachable

    def __enter__(self) -> FakeContentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        pass


class FakeLedger:
    """In-memory CertificateNFT: dense 1-based ids, one-shot revocation."""

    def __init__(self, issuer: str = ISSUER_ADDRESS) -> None:
        self.issuer = issuer
        self.tokens: dict[int, OnChainCredential] = {}
        self.pending: dict[str, tuple[str, str]] = {}
        self.calls: list[str] = []
        self.emit_events = True
        self.submit_error: Exception | None = None
        self.confirm_error: Exception | None = None
        self.unreadable: set[int] = set()
        self._tx_counter = 0

    def _next_tx(self) -> str:
        self._tx_counter += 1
        return "0x" + f"{self._tx_counter:064x}"

    def submit_mint(self, recipient: str, metadata_uri: str) -> str:
        self.calls.append("submit_mint")
        if self.submit_error is not None:
            raise self.submit_error
        tx_hash = self._next_tx()
        self.pending[tx_hash] = (recipient, metadata_uri)
        return tx_hash

    def confirm_mint(self, tx_hash: str) -> MintReceipt:
        self.calls.append("confirm_mint")
        if self.confirm_error is not None:
            raise self.confirm_error
        recipient, metadata_uri = self.pending.pop(tx_hash)
        token_id = len(self.tokens) + 1
        self.tokens[token_id] = OnChainCredential(
            token_id=token_id,
            owner=recipient,
            issuer=self.issuer,
            metadata_uri=metadata_uri,
            issued_at=1_736_467_200 + token_id,
            is_valid=True,
            revoked=False,
        )
        return MintReceipt(
            tx_hash=tx_hash,
            block_number=100 + token_id,
            token_id=token_id if self.emit_events else None,
        )

    def mint(self, recipient: str, metadata_uri: str) -> MintReceipt:
        return self.confirm_mint(self.submit_mint(recipient, metadata_uri))

    def revoke(self, token_id: int) -> TxReceipt:
        self.calls.append("revoke")
        token = self.tokens.get(token_id)
        if token is None:
            raise LedgerSubmissionError("execution reverted: Certificate does not exist")
        if token.revoked:
            raise LedgerSubmissionError("execution reverted: Certificate already revoked")
        self.tokens[token_id] = token.model_copy(update={"revoked": True, "is_valid": False})
        return TxReceipt(tx_hash=self._next_tx(), block_number=200 + token_id)

    def total_supply(self) -> int:
        self.calls.append("total_supply")
        return len(self.tokens)

    def owner_of(self, token_id: int) -> str:
        self.calls.append("owner_of")
        if token_id in self.unreadable or token_id not in self.tokens:
            raise LedgerReadError("execution reverted: ERC721NonexistentToken")
        return self.tokens[token_id].owner

    def get_info(self, token_id: int) -> OnChainCredential:
        self.calls.append("get_info")
        if token_id in self.unreadable or token_id not in self.tokens:
            raise LedgerReadError("execution reverted: ERC721NonexistentToken")
        return self.tokens[token_id]

    def seed(self, owner: str, metadata_uri: str = "", *, revoked: bool = False) -> int:
        """Mint directly, bypassing the transaction flow."""
        token_id = len(self.tokens) + 1
        self.tokens[token_id] = OnChainCredential(
            token_id=token_id,
            owner=owner,
            issuer=self.issuer,
            metadata_uri=metadata_uri or f"ipfs://bafy-seed-{token_id}",
            issued_at=1_736_467_200 + token_id,
            is_valid=not revoked,
            revoked=revoked,
        )
        return token_id


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> CertforgeConfig:
    """Provide a config isolated from the environment and any .env file."""
    return CertforgeConfig(
        _env_file=None,
        storage_jwt="test-jwt",
        contract_address=CONTRACT_ADDRESS,
        rpc_url="http://127.0.0.1:8545",
    )


@pytest.fixture
def dev_private_key() -> str:
    """Private key of ISSUER_ADDRESS."""
    return DEV_PRIVATE_KEY


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "certificate.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def image_source(image_file: Path) -> ImageSource:
    return ImageSource(location=str(image_file), display_name="certificate.png")


@pytest.fixture
def make_credential_input() -> Callable[..., CredentialInput]:
    """Factory fixture: build a CredentialInput with sensible defaults."""

    def _factory(**overrides: Any) -> CredentialInput:
        defaults: dict[str, Any] = {
            "name": "Intro to Systems",
            "description": "Completed the systems programming track.",
            "issuer_name": "Acme Academy",
            "recipient_name": "Ada Lovelace",
            "recipient_address": RECIPIENT_ADDRESS,
            "issue_date": date(2025, 1, 10),
        }
        defaults.update(overrides)
        return CredentialInput(**defaults)

    return _factory


@pytest.fixture
def credential_input(make_credential_input: Callable[..., CredentialInput]) -> CredentialInput:
    """Convenience: the reference scenario input."""
    return make_credential_input()
