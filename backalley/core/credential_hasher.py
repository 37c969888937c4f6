"""Credential Hasher: peppered bcrypt hashing and constant-time verification.

Invariants:
    - The pepper is appended to the plaintext before hashing and before verifying
    - Every byte of plaintext + pepper reaches bcrypt: the concatenation is
      SHA-256 digested and base64 encoded (44 bytes) to stay under the 72-byte cap
    - hash() draws a fresh salt on every call; the salt travels inside the hash string
    - verify() never raises on a malformed stored hash; it returns False
    - An empty pepper is a fatal configuration error (ConfigurationMissingError)
"""

import base64
import hashlib
import logging

import bcrypt

from backalley.core.domain_types import PasswordHash
from backalley.core.errors import ConfigurationMissingError

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12


class CredentialHasher:
    """Hashes and verifies author passwords with a process-wide pepper."""

    def __init__(self, pepper: str, rounds: int = DEFAULT_ROUNDS):
        if not pepper:
            raise ConfigurationMissingError("password_pepper")
        self._pepper = pepper
        self.rounds = rounds

    def _peppered(self, plaintext: str) -> bytes:
        # bcrypt ignores everything past 72 bytes and rejects NUL bytes
        digest = hashlib.sha256((plaintext + self._pepper).encode("utf-8")).digest()
        return base64.b64encode(digest)

    def hash(self, plaintext: str) -> PasswordHash:
        """Return a storable bcrypt hash of plaintext + pepper."""
        digest = bcrypt.hashpw(
            self._peppered(plaintext), bcrypt.gensalt(rounds=self.rounds),
        )
        return PasswordHash(digest.decode("ascii"))

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check plaintext against a stored hash. Malformed hashes verify False."""
        try:
            return bcrypt.checkpw(self._peppered(plaintext), hashed.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError, AttributeError):
            logger.warning("Stored password hash is malformed")
            return False
