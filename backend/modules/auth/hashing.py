"""
One-way password hashing with bcrypt.

The digest embeds its own salt and cost factor, so verification never needs
configuration beyond the digest itself.
"""

import logging
import secrets
from functools import cached_property

import bcrypt

from .exceptions import CredentialHashingError

logger = logging.getLogger(__name__)

# bcrypt only reads this many bytes; longer input is refused, never cut.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    bcrypt-backed credential hasher.

    Both methods are CPU-bound; async callers should run them in a worker
    thread (see UserService).
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext password.

        Raises:
            CredentialHashingError: If the password exceeds 72 bytes or
                bcrypt fails (e.g., no entropy)
        """
        encoded = plaintext.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            logger.error("Refusing to hash a password longer than %d bytes", BCRYPT_MAX_BYTES)
            raise CredentialHashingError()
        try:
            digest = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError, OSError) as e:
            logger.error("Password hashing failed: %s", e.__class__.__name__)
            raise CredentialHashingError() from e
        return digest.decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check a plaintext password against a stored digest.

        Returns False for malformed or empty digests, and for passwords too
        long to have been hashed, instead of raising.
        """
        encoded = plaintext.encode("utf-8")
        if not digest or len(encoded) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    @cached_property
    def decoy_digest(self) -> str:
        """Digest of a random secret at this hasher's cost. Nothing matches it."""
        return self.hash(secrets.token_urlsafe(32))

    def verify_decoy(self, plaintext: str) -> bool:
        """
        Spend the same work as a real check when there is no stored digest.

        Always False. Login uses it for unknown emails so response time
        does not tell registered addresses apart.
        """
        self.verify(plaintext, self.decoy_digest)
        return False
