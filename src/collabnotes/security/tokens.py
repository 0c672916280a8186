"""
Opaque token helpers.

Only sha256 hex digests of refresh and reset tokens are ever stored. All
comparisons go through hashes_match.
"""

import hashlib
import hmac
import secrets
from typing import Optional


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hashes_match(presented_hash: Optional[str], stored_hash: Optional[str]) -> bool:
    """Constant-time comparison of two hex digests. Missing values never match."""
    if not presented_hash or not stored_hash:
        return False
    if len(presented_hash) != len(stored_hash):
        return False
    return hmac.compare_digest(presented_hash, stored_hash)


def generate_reset_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)
