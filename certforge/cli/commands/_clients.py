"""Client factories shared by the CLI commands.

Commands go through these functions so tests can swap in fakes.
"""

from __future__ import annotations

from certforge.config import CertforgeConfig
from certforge.ledger.client import LedgerClient
from certforge.storage.content_store import ContentStoreClient


def load_config() -> CertforgeConfig:
    return CertforgeConfig()


def build_store(config: CertforgeConfig) -> ContentStoreClient:
    return ContentStoreClient(config)


def build_writer(config: CertforgeConfig) -> LedgerClient:
    """Key-held ledger client; raises ConfigurationError without a key."""
    return LedgerClient.from_config(config)


def build_reader(config: CertforgeConfig) -> LedgerClient:
    return LedgerClient.read_only(config)
