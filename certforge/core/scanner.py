"""Ownership reconciliation: rebuild an owner's credentials from the ledger.

The contract has no owner-indexed query, so the scan walks every token id
``1..total_supply`` (ids are dense and 1-based) and filters by owner. The
walk is sequential; metadata hydration for the matches runs concurrently
and the results are put back in token id order.

Statistics are recomputed from each scanned set, never kept incrementally.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from pydantic import ValidationError

from certforge.core.errors import LedgerReadError, StorageError
from certforge.core.interfaces import ContentStore, LedgerReader
from certforge.models.ledger import HydratedCredential, OnChainCredential
from certforge.models.metadata import CredentialMetadata
from certforge.models.results import OwnershipReport, OwnershipStats

logger = logging.getLogger(__name__)


class OwnershipScanner:
    """Scans the ledger for credentials held by an address.

    Parameters
    ----------
    ledger:
        Any ledger reader (a read-only ``LedgerClient`` is enough).
    store:
        Content store used to fetch metadata documents.
    max_workers:
        Upper bound on concurrent metadata fetches.
    """

    def __init__(
        self,
        ledger: LedgerReader,
        store: ContentStore,
        *,
        max_workers: int = 8,
    ) -> None:
        self._ledger = ledger
        self._store = store
        self._max_workers = max(1, max_workers)

    def scan(self, owner_address: str) -> list[OnChainCredential]:
        """Return every credential currently owned by ``owner_address``.

        Tokens whose owner or info cannot be read are skipped.
        ``LedgerReadError`` from ``total_supply`` propagates: without it
        there is nothing to scan.
        """
        wanted = owner_address.lower()
        total = self._ledger.total_supply()
        logger.info("Scanning %d token ids for owner %s", total, owner_address)

        credentials: list[OnChainCredential] = []
        for token_id in range(1, total + 1):
            try:
                if self._ledger.owner_of(token_id).lower() != wanted:
                    continue
                credentials.append(self._ledger.get_info(token_id))
            except LedgerReadError as exc:
                logger.debug("Skipping token %d: %s", token_id, exc)
        logger.info("Owner %s holds %d credential(s)", owner_address, len(credentials))
        return credentials

    def scan_with_metadata(self, owner_address: str) -> list[HydratedCredential]:
        """``scan`` plus the metadata document of each match."""
        credentials = self.scan(owner_address)
        if not credentials:
            return []

        workers = min(self._max_workers, len(credentials))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hydrate") as pool:
            hydrated = list(pool.map(self._hydrate, credentials))
        return sorted(hydrated, key=lambda c: c.token_id)

    def report(self, owner_address: str, *, with_metadata: bool = True) -> OwnershipReport:
        """Scan and derive fresh statistics in one call."""
        if with_metadata:
            credentials = self.scan_with_metadata(owner_address)
        else:
            credentials = [
                HydratedCredential(**c.model_dump()) for c in self.scan(owner_address)
            ]
        return OwnershipReport(
            owner=owner_address,
            credentials=credentials,
            stats=OwnershipStats.from_credentials(credentials),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _hydrate(self, credential: OnChainCredential) -> HydratedCredential:
        metadata = self.fetch_metadata(credential.metadata_uri)
        return HydratedCredential(**credential.model_dump(), metadata=metadata)

    def fetch_metadata(self, reference: str) -> CredentialMetadata | None:
        """Fetch and parse one metadata document; None on any failure."""
        if not reference:
            return None
        try:
            document = self._store.fetch_document(reference)
            return CredentialMetadata.model_validate(document)
        except StorageError as exc:
            logger.warning("Metadata fetch failed for %s: %s", reference, exc)
        except ValidationError as exc:
            logger.warning("Metadata at %s is malformed: %s", reference, exc.error_count())
        return None
