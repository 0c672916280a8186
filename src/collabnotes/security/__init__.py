"""Security utilities."""

from .jwt import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_user_id_from_token,
    subject_of,
)
from .password import hash_password, verify_password
from .tokens import generate_reset_token, hashes_match, sha256_hex

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "get_user_id_from_token",
    "subject_of",
    "sha256_hex",
    "hashes_match",
    "generate_reset_token",
]
