"""Structural checks: real clients and test fakes satisfy the collaborator protocols."""

from __future__ import annotations

from unittest.mock import MagicMock

from certforge.core.interfaces import ContentStore, LedgerReader, LedgerWriter
from certforge.ledger.client import LedgerClient
from certforge.storage.content_store import ContentStoreClient

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


class TestProtocols:
    def test_content_store_client(self, config):
        with ContentStoreClient(config) as client:
            assert isinstance(client, ContentStore)

    def test_ledger_client(self, config):
        client = LedgerClient(MagicMock(), CONTRACT_ADDRESS, config=config)
        assert isinstance(client, LedgerReader)
        assert isinstance(client, LedgerWriter)

    def test_fakes(self, store, ledger):
        assert isinstance(store, ContentStore)
        assert isinstance(ledger, LedgerReader)
        assert isinstance(ledger, LedgerWriter)

    def test_reader_is_not_a_writer(self):
        class _ViewOnly:
            def total_supply(self):
                return 0

            def owner_of(self, token_id):
                return ""

            def get_info(self, token_id):
                raise NotImplementedError

        assert isinstance(_ViewOnly(), LedgerReader)
        assert not isinstance(_ViewOnly(), LedgerWriter)
