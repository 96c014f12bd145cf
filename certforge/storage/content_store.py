"""Content store client over a Pinata-compatible pinning API.

Uploads are single-attempt HTTP submissions. Any non-success status or
transport failure surfaces as ``StorageError`` carrying the HTTP status
and the server's message verbatim. Retry policy belongs to the caller.

Content identifiers are opaque; this client only prefixes a scheme
(``ipfs://<cid>``) for persisted references and a gateway base for
fetchable URLs.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from certforge.config import CertforgeConfig
from certforge.core.errors import StorageError
from certforge.core.hasher import canonical_json_bytes
from certforge.core.metadata_builder import content_uri
from certforge.models.content import ContentRecord
from certforge.models.credentials import ImageSource

logger = logging.getLogger(__name__)

PIN_FILE_PATH = "/pinning/pinFileToIPFS"
PIN_JSON_PATH = "/pinning/pinJSONToIPFS"
UNPIN_PATH = "/pinning/unpin"
TEST_AUTH_PATH = "/data/testAuthentication"

_PIN_OPTIONS = {"cidVersion": 1}

# InvalidURL is not an HTTPError subclass.
_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class ContentStoreClient:
    """Pin, unpin and fetch content-addressed documents.

    Parameters
    ----------
    config:
        Pipeline configuration; supplies credentials, endpoints, timeout.
    transport:
        Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: CertforgeConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or CertforgeConfig()
        self._scheme = self._config.content_uri_scheme
        self._gateway = self._config.storage_gateway_url.rstrip("/")
        self._http = httpx.Client(
            base_url=self._config.storage_api_base,
            timeout=self._config.http_timeout_seconds,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ContentStoreClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def to_uri(self, content_id: str) -> str:
        """Persisted reference for a content id (``ipfs://<cid>``)."""
        return content_uri(content_id, self._scheme)

    def extract_content_id(self, reference: str) -> str:
        """Strip the scheme prefix from a reference, if present."""
        return reference.removeprefix(f"{self._scheme}://")

    def gateway_url(self, reference: str) -> str:
        """Fetchable HTTP URL for a reference or bare content id.

        ``http(s)`` URLs pass through unchanged.
        """
        if reference.startswith(("http://", "https://")):
            return reference
        return f"{self._gateway}/{self.extract_content_id(reference)}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        jwt = self._config.storage_jwt.get_secret_value()
        if jwt:
            return {"Authorization": f"Bearer {jwt}"}
        return {
            "pinata_api_key": self._config.storage_api_key,
            "pinata_secret_api_key": self._config.storage_api_secret.get_secret_value(),
        }

    def _require_credentials(self) -> None:
        if not self._config.storage_configured:
            raise StorageError(
                "Content store is not configured. Set CERTFORGE_STORAGE_JWT "
                "or CERTFORGE_STORAGE_API_KEY and CERTFORGE_STORAGE_API_SECRET."
            )

    # ------------------------------------------------------------------
    # Connection check
    # ------------------------------------------------------------------

    def validate_connection(self) -> bool:
        """Authenticated connection check. Returns False instead of raising."""
        if not self._config.storage_configured:
            logger.warning("Content store credentials are not configured.")
            return False
        try:
            response = self._http.get(TEST_AUTH_PATH, headers=self._auth_headers())
        except _TRANSPORT_ERRORS as exc:
            logger.warning("Content store check failed: %s", exc)
            return False
        if not response.is_success:
            logger.warning("Content store check rejected: HTTP %s", response.status_code)
        return response.is_success

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        image: ImageSource,
        *,
        name: str | None = None,
        keyvalues: dict[str, str] | None = None,
    ) -> ContentRecord:
        """Pin a binary file and return its content record."""
        self._require_credentials()
        try:
            data = Path(image.location).read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read image {image.location}: {exc}") from exc

        pin_metadata = {
            "name": name or f"certificate_image_{int(time.time())}",
            "keyvalues": keyvalues or {},
        }
        files = {"file": (image.upload_name(), data, image.mime_type)}
        form = {
            "pinataMetadata": json.dumps(pin_metadata),
            "pinataOptions": json.dumps(_PIN_OPTIONS),
        }
        logger.info("Uploading image %s (%d bytes)", image.upload_name(), len(data))
        response = self._send(
            "POST", PIN_FILE_PATH, action="upload image", files=files, data=form
        )
        record = self._parse_record(response, action="upload image")
        logger.info("Image pinned as %s (duplicate=%s)", record.content_id, record.is_duplicate)
        return record

    def upload_document(
        self,
        document: dict[str, Any],
        *,
        name: str | None = None,
        keyvalues: dict[str, str] | None = None,
    ) -> ContentRecord:
        """Pin a JSON document and return its content record.

        The request body is canonical JSON so identical documents are
        submitted as identical bytes.
        """
        self._require_credentials()
        body = {
            "pinataContent": document,
            "pinataMetadata": {
                "name": name or f"metadata_{int(time.time())}.json",
                "keyvalues": keyvalues or {},
            },
            "pinataOptions": _PIN_OPTIONS,
        }
        response = self._send(
            "POST",
            PIN_JSON_PATH,
            action="upload JSON",
            content=canonical_json_bytes(body),
            headers={"Content-Type": "application/json"},
        )
        record = self._parse_record(response, action="upload JSON")
        logger.info("Document pinned as %s (duplicate=%s)", record.content_id, record.is_duplicate)
        return record

    def unpin(self, content_id: str) -> None:
        """Explicitly release a pinned content id."""
        self._require_credentials()
        cid = self.extract_content_id(content_id)
        self._send("DELETE", f"{UNPIN_PATH}/{cid}", action="unpin")
        logger.info("Unpinned %s", cid)

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def fetch_document(self, reference: str) -> dict[str, Any]:
        """GET a JSON document through the gateway (no auth headers)."""
        url = self.gateway_url(reference)
        try:
            response = self._http.get(url)
        except _TRANSPORT_ERRORS as exc:
            raise StorageError(f"Failed to fetch {url}: {exc}") from exc
        if not response.is_success:
            raise StorageError(
                f"Failed to fetch {url}: {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageError(f"Document at {url} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"Document at {url} is not a JSON object")
        return payload

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, *, action: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except _TRANSPORT_ERRORS as exc:
            raise StorageError(f"Failed to {action}: {exc}") from exc
        if not response.is_success:
            raise StorageError(
                f"Failed to {action}: {response.status_code} - {response.text}",
                status_code=response.status_code,
                detail=response.text,
            )
        return response

    @staticmethod
    def _parse_record(response: httpx.Response, *, action: str) -> ContentRecord:
        try:
            return ContentRecord.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StorageError(
                f"Failed to {action}: unexpected response body",
                status_code=response.status_code,
                detail=response.text,
            ) from exc
