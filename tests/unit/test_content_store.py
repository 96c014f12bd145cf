"""Tests for the pinning API content store client."""

from __future__ import annotations

import json

import httpx
import pytest

from certforge.config import CertforgeConfig
from certforge.core.errors import StorageError
from certforge.models.credentials import ImageSource
from certforge.storage.content_store import (
    PIN_FILE_PATH,
    PIN_JSON_PATH,
    TEST_AUTH_PATH,
    UNPIN_PATH,
    ContentStoreClient,
)

CID = "bafkreigh2akiscaildcqabsyg3dfr6chu3fgpregiymsck7e7aqa4s52zy"


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status: int = 200, payload=None, text: str | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.status = status
        self.payload = payload if payload is not None else {
            "IpfsHash": CID,
            "PinSize": 72,
            "Timestamp": "2025-01-10T12:00:00.000Z",
        }
        self.text = text

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status, text=self.text)
        return httpx.Response(self.status, json=self.payload)


def _invalid_url(request: httpx.Request) -> httpx.Response:
    raise httpx.InvalidURL("Invalid port: '99999'")


def _client(recorder, **overrides) -> ContentStoreClient:
    settings = {"storage_jwt": "test-jwt", **overrides}
    config = CertforgeConfig(_env_file=None, **settings)
    return ContentStoreClient(config, transport=httpx.MockTransport(recorder))


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuth:
    def test_jwt_bearer_header(self, image_source):
        recorder = Recorder()
        _client(recorder).upload(image_source)
        assert recorder.requests[0].headers["Authorization"] == "Bearer test-jwt"

    def test_key_pair_headers(self, image_source):
        recorder = Recorder()
        client = _client(
            recorder, storage_jwt="", storage_api_key="key", storage_api_secret="secret"
        )
        client.upload(image_source)
        headers = recorder.requests[0].headers
        assert headers["pinata_api_key"] == "key"
        assert headers["pinata_secret_api_key"] == "secret"
        assert "Authorization" not in headers

    def test_unconfigured_fails_before_any_request(self, image_source):
        recorder = Recorder()
        client = _client(recorder, storage_jwt="")
        with pytest.raises(StorageError, match="not configured"):
            client.upload(image_source)
        with pytest.raises(StorageError, match="not configured"):
            client.upload_document({"name": "x"})
        assert recorder.requests == []


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


class TestUpload:
    def test_upload_image(self, image_source):
        recorder = Recorder(payload={"IpfsHash": CID, "PinSize": 72, "isDuplicate": True})
        record = _client(recorder).upload(
            image_source, name="cert_image_Intro", keyvalues={"type": "certificate_image"}
        )

        assert record.content_id == CID
        assert record.size == 72
        assert record.is_duplicate is True
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == PIN_FILE_PATH
        body = request.read()
        assert b'name="file"; filename="certificate.png"' in body
        assert b"cert_image_Intro" in body
        assert b'"cidVersion": 1' in body

    def test_missing_image_file(self, tmp_path):
        recorder = Recorder()
        with pytest.raises(StorageError, match="Cannot read image"):
            _client(recorder).upload(ImageSource(location=str(tmp_path / "nope.png")))
        assert recorder.requests == []

    def test_upload_document(self):
        recorder = Recorder()
        record = _client(recorder).upload_document(
            {"name": "Intro", "image": "ipfs://bafy"}, name="cert_metadata_Intro"
        )

        assert record.content_id == CID
        request = recorder.requests[0]
        assert request.url.path == PIN_JSON_PATH
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.read())
        assert body["pinataContent"] == {"name": "Intro", "image": "ipfs://bafy"}
        assert body["pinataMetadata"]["name"] == "cert_metadata_Intro"
        assert body["pinataOptions"] == {"cidVersion": 1}

    def test_identical_documents_send_identical_bytes(self):
        recorder = Recorder()
        client = _client(recorder)
        client.upload_document({"b": 1, "a": [1, 2]}, name="doc")
        client.upload_document({"a": [1, 2], "b": 1}, name="doc")
        first, second = (r.read() for r in recorder.requests)
        assert first == second

    def test_error_status_passes_through(self):
        recorder = Recorder(status=401, text="Invalid API key")
        with pytest.raises(StorageError) as exc_info:
            _client(recorder).upload_document({"name": "x"})
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid API key"
        assert str(exc_info.value) == "Failed to upload JSON: 401 - Invalid API key"

    def test_transport_error_has_no_status(self):
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        config = CertforgeConfig(_env_file=None, storage_jwt="test-jwt")
        client = ContentStoreClient(config, transport=httpx.MockTransport(_refuse))
        with pytest.raises(StorageError, match="connection refused") as exc_info:
            client.upload_document({"name": "x"})
        assert exc_info.value.status_code is None

    def test_invalid_url_becomes_storage_error(self):
        config = CertforgeConfig(_env_file=None, storage_jwt="test-jwt")
        client = ContentStoreClient(config, transport=httpx.MockTransport(_invalid_url))
        with pytest.raises(StorageError, match="Invalid port") as exc_info:
            client.upload_document({"name": "x"})
        assert exc_info.value.status_code is None

    def test_unexpected_body(self):
        recorder = Recorder(payload={"unexpected": True})
        with pytest.raises(StorageError, match="unexpected response body"):
            _client(recorder).upload_document({"name": "x"})

    def test_unpin(self):
        recorder = Recorder(text="OK")
        _client(recorder).unpin(f"ipfs://{CID}")
        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == f"{UNPIN_PATH}/{CID}"


# ---------------------------------------------------------------------------
# Connection check
# ---------------------------------------------------------------------------


class TestValidateConnection:
    def test_success(self):
        recorder = Recorder(payload={"message": "Congratulations!"})
        assert _client(recorder).validate_connection() is True
        assert recorder.requests[0].url.path == TEST_AUTH_PATH

    def test_rejected(self):
        assert _client(Recorder(status=401, text="nope")).validate_connection() is False

    def test_unconfigured(self):
        recorder = Recorder()
        assert _client(recorder, storage_jwt="").validate_connection() is False
        assert recorder.requests == []

    def test_network_failure(self):
        def _timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        config = CertforgeConfig(_env_file=None, storage_jwt="test-jwt")
        client = ContentStoreClient(config, transport=httpx.MockTransport(_timeout))
        assert client.validate_connection() is False

    def test_invalid_url_reports_false(self):
        config = CertforgeConfig(_env_file=None, storage_jwt="test-jwt")
        client = ContentStoreClient(config, transport=httpx.MockTransport(_invalid_url))
        assert client.validate_connection() is False


# ---------------------------------------------------------------------------
# References and fetch
# ---------------------------------------------------------------------------


class TestReferences:
    def test_to_uri_and_back(self):
        client = _client(Recorder())
        assert client.to_uri(CID) == f"ipfs://{CID}"
        assert client.extract_content_id(f"ipfs://{CID}") == CID
        assert client.extract_content_id(CID) == CID

    def test_gateway_url(self):
        client = _client(Recorder(), storage_gateway_url="https://gw.example/ipfs/")
        assert client.gateway_url(f"ipfs://{CID}") == f"https://gw.example/ipfs/{CID}"
        assert client.gateway_url("https://elsewhere/x.json") == "https://elsewhere/x.json"


class TestFetchDocument:
    def test_fetch_through_gateway_without_auth(self):
        recorder = Recorder(payload={"name": "Intro"})
        document = _client(recorder).fetch_document(f"ipfs://{CID}")

        assert document == {"name": "Intro"}
        request = recorder.requests[0]
        assert str(request.url) == f"https://gateway.pinata.cloud/ipfs/{CID}"
        assert "Authorization" not in request.headers

    def test_fetch_failure(self):
        with pytest.raises(StorageError) as exc_info:
            _client(Recorder(status=404, text="not found")).fetch_document(CID)
        assert exc_info.value.status_code == 404

    def test_fetch_malformed_url(self):
        recorder = Recorder()
        with pytest.raises(StorageError, match="Failed to fetch"):
            _client(recorder).fetch_document("https://gw.example/ipfs/bad\x00cid")
        assert recorder.requests == []

    def test_fetch_invalid_json(self):
        with pytest.raises(StorageError, match="not valid JSON"):
            _client(Recorder(text="<html>")).fetch_document(CID)

    def test_fetch_non_object(self):
        with pytest.raises(StorageError, match="not a JSON object"):
            _client(Recorder(payload=[1, 2])).fetch_document(CID)


class TestLifecycle:
    def test_context_manager_closes(self):
        with _client(Recorder()) as client:
            assert client.to_uri(CID).startswith("ipfs://")
        with pytest.raises(RuntimeError):
            client.upload_document({"name": "x"})
