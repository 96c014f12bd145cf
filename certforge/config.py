"""Runtime configuration: env-driven, pipeline-wide.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and CERTFORGE_* environment variables.

The owner signing key is optional: its absence only disables key-held
ledger clients, it never prevents the rest of the pipeline from starting.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PUBLIC_RPC_URLS: list[str] = [
    "https://base-sepolia-rpc.publicnode.com",
    "https://sepolia.base.org",
    "https://base-sepolia.blockpi.network/v1/rpc/public",
]


class CertforgeConfig(BaseSettings):
    """Pipeline configuration with environment variable overrides.

    All settings can be overridden via CERTFORGE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export CERTFORGE_STORAGE_JWT=eyJhbGciOi...
        export CERTFORGE_CONTRACT_ADDRESS=0x5FbDB2315678afecb367f032d93F642f64180aa3
        export CERTFORGE_RPC_URL=https://sepolia.base.org

    Or via .env file::

        CERTFORGE_LOG_LEVEL=INFO
        CERTFORGE_OWNER_PRIVATE_KEY=0x...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CERTFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"

    # Content store (Pinata-compatible pinning API)
    storage_jwt: SecretStr = SecretStr("")
    storage_api_key: str = ""
    storage_api_secret: SecretStr = SecretStr("")
    storage_api_base: str = "https://api.pinata.cloud"
    storage_gateway_url: str = "https://gateway.pinata.cloud/ipfs"
    content_uri_scheme: str = "ipfs"

    # Ledger
    rpc_url: str = ""
    public_rpc_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PUBLIC_RPC_URLS)
    )
    contract_address: str = ""
    owner_private_key: SecretStr | None = None  # server-side mint/revoke only

    # Timeouts
    http_timeout_seconds: float = 30.0
    confirmation_timeout_seconds: float = 120.0
    confirmation_poll_seconds: float = 2.0

    # Gas limits for locally signed transactions
    mint_gas_limit: int = 300_000
    revoke_gas_limit: int = 100_000

    # Reconciliation
    hydration_workers: int = 8

    # Metadata
    external_url_base: str = ""

    @property
    def storage_configured(self) -> bool:
        """Whether pinning API credentials are present (JWT or key pair)."""
        if self.storage_jwt.get_secret_value():
            return True
        return bool(self.storage_api_key and self.storage_api_secret.get_secret_value())

    @property
    def signing_key_configured(self) -> bool:
        """Whether an owner private key is available for local signing."""
        return bool(
            self.owner_private_key is not None
            and self.owner_private_key.get_secret_value().strip()
        )

    @property
    def rpc_endpoints(self) -> list[str]:
        """Candidate RPC endpoints, the explicit URL first."""
        endpoints = [self.rpc_url] if self.rpc_url else []
        endpoints.extend(u for u in self.public_rpc_urls if u and u not in endpoints)
        return endpoints
