"""certforge: verifiable credential issuance over content-addressed storage and a public ledger.

- Content store client (Pinata-compatible pinning API, IPFS gateway reads)
- Deterministic ERC-721 metadata builder
- CertificateNFT ledger client (wallet-delegated or key-held signing)
- Issuance orchestrator with a typed progress stream
- Revocation orchestrator
- Ownership reconciliation scanner with aggregate statistics
"""

__version__ = "0.1.0"
__description__ = (
    "Certificate issuance and reconciliation pipeline over IPFS and an EVM ledger"
)

from certforge.core.issuance import IssuanceOrchestrator
from certforge.core.metadata_builder import build_metadata
from certforge.core.revocation import RevocationOrchestrator
from certforge.core.scanner import OwnershipScanner
from certforge.ledger.client import LedgerClient
from certforge.storage.content_store import ContentStoreClient

__all__ = [
    "ContentStoreClient",
    "LedgerClient",
    "IssuanceOrchestrator",
    "RevocationOrchestrator",
    "OwnershipScanner",
    "build_metadata",
    "__version__",
]
