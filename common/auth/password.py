"""
bcrypt password hashing.

Passwords are pre-hashed with SHA-256 before bcrypt. This handles bcrypt's
72-byte input limit and gives consistent behavior across password lengths.

Example:
    hasher = PasswordHasher(rounds=12)
    stored = hasher.hash_password("Secret1")
    assert hasher.verify_password("Secret1", stored)
"""

import base64
import hashlib

import bcrypt as bcrypt_lib


class PasswordHasher:
    """Salted, slow password hashing with bcrypt."""

    def __init__(self, rounds: int = 12):
        """
        Args:
            rounds: bcrypt cost factor (log2 of iterations, minimum 4)
        """
        self.rounds = rounds

    def _prehash_password(self, password: str) -> str:
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash).decode("utf-8")

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        prehashed = self._prehash_password(password)
        salt = bcrypt_lib.gensalt(rounds=self.rounds)
        return bcrypt_lib.hashpw(prehashed.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Returns False for empty or unparseable hashes instead of raising.
        """
        if not password or not hashed:
            return False

        prehashed = self._prehash_password(password)
        try:
            return bcrypt_lib.checkpw(prehashed.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Invalid salt / not a bcrypt hash
            return False
