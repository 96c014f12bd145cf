"""Ledger access for the CertificateNFT contract."""
