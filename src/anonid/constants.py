# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""Shared defaults for anonid components."""

# Verification
HISTORY_LIMIT = 100
ISSUER_TOKEN_PREFIX = "issuer-sig-"
HOLDER_TOKEN_PREFIX = "holder-sig-"
DEFAULT_ISSUER_ID = "did:key:anonid-issuer"
PROOF_ALGORITHM = "Ed25519Signature2020"

# Sessions
DEFAULT_SESSION_MINUTES = 60
DEFAULT_PERMISSION = "read_credentials"

# Presentation requests
DEFAULT_REQUEST_MINUTES = 60

# Storage
STORAGE_KEY = "did-identities"
IPFS_POINTER_KEY = "anon-identities-ipfs-hash"
IPFS_CONTENT_PREFIX = "ipfs-"
LEDGER_CONTENT_PREFIX = "blockchain-"
DEFAULT_IPFS_GATEWAY = "https://ipfs.io/ipfs/"
SUPPORTED_NETWORKS = ("ethereum", "polygon", "arbitrum")
LEDGER_POINTER_KEY = "anon-identities-blockchain-tx"
DEFAULT_LOCAL_PATH = "anonid-identities.json"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SESSION_NAMESPACE = "session"
