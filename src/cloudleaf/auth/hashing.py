"""Password hashing.

The auth gate stores and checks credentials only through a
:class:`PasswordHasher`, so the storage format can change without touching
login or sign-up.
"""

import hmac
from abc import ABC, abstractmethod

import bcrypt


class PasswordHasher(ABC):
    """Turns passwords into stored credentials and checks them."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return the credential to store for ``password``."""

    @abstractmethod
    def verify(self, password: str, stored: str) -> bool:
        """Check ``password`` against a stored credential."""


class PlaintextHasher(PasswordHasher):
    """Stores the password as-is. Only for demos and parity tests."""

    def hash(self, password: str) -> str:
        return password

    def verify(self, password: str, stored: str) -> bool:
        return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))


class BcryptHasher(PasswordHasher):
    """bcrypt with a fresh salt per password.

    bcrypt only reads the first 72 bytes of a password.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, stored: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            # Not a bcrypt hash
            return False


def get_hasher(name: str) -> PasswordHasher:
    """Build the hasher named in configuration."""
    if name == "bcrypt":
        return BcryptHasher()
    if name == "plaintext":
        return PlaintextHasher()
    raise ValueError(f"Unknown password hasher: {name}")
