"""
Session token generation and hashing.

The raw token only ever lives in the client's cookie; the ``sessions``
collection is keyed by its SHA-256 hash.
"""

import hashlib
import secrets


class TokenHasher:
    """
    Handles opaque session token generation and hashing.
    """

    TOKEN_BYTES = 32

    @staticmethod
    def generate_token(length: int = TOKEN_BYTES) -> str:
        """
        Generate a cryptographically secure opaque token.

        Args:
            length: Number of random bytes (output is hex, so 2x length)
        """
        return secrets.token_hex(length)

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest used as the stored lookup key."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
