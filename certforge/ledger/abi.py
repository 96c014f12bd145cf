"""ABI surface of the CertificateNFT contract consumed by the pipeline."""

from __future__ import annotations

from typing import Any

MINT_EVENT_NAME = "CertificateMinted"


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]],
    mutability: str,
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


CERTIFICATE_NFT_ABI: list[dict[str, Any]] = [
    _fn(
        "mintCertificate",
        [("recipient", "address"), ("metadataURI", "string")],
        [("", "uint256")],
        "nonpayable",
    ),
    _fn("revokeCertificate", [("tokenId", "uint256")], [], "nonpayable"),
    _fn(
        "getCertificateInfo",
        [("tokenId", "uint256")],
        [
            ("owner", "address"),
            ("issuer", "address"),
            ("metadataURI", "string"),
            ("issuedAt", "uint256"),
            ("isValid", "bool"),
            ("revoked", "bool"),
        ],
        "view",
    ),
    _fn("isCertificateValid", [("tokenId", "uint256")], [("", "bool")], "view"),
    _fn("getTotalCertificates", [], [("", "uint256")], "view"),
    _fn("ownerOf", [("tokenId", "uint256")], [("", "address")], "view"),
    {
        "type": "event",
        "name": MINT_EVENT_NAME,
        "anonymous": False,
        "inputs": [
            {"name": "tokenId", "type": "uint256", "indexed": True},
            {"name": "recipient", "type": "address", "indexed": True},
            {"name": "issuer", "type": "address", "indexed": True},
            {"name": "metadataURI", "type": "string", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "CertificateRevoked",
        "anonymous": False,
        "inputs": [
            {"name": "tokenId", "type": "uint256", "indexed": True},
        ],
    },
]


def event_argument_names(event_name: str) -> list[str]:
    """Input names of an event, in declaration order."""
    for entry in CERTIFICATE_NFT_ABI:
        if entry["type"] == "event" and entry["name"] == event_name:
            return [i["name"] for i in entry["inputs"]]
    raise KeyError(event_name)
