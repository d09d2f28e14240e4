"""
Vault Exceptions.

Error messages never contain passwords, keys, plaintext or ciphertext.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for all Navigator Vault errors."""


class InvalidInput(VaultError, ValueError):
    """Malformed arguments (empty password, wrong salt length, wiped key...)."""


class AuthenticationFailure(VaultError):
    """Ciphertext could not be authenticated.

    Raised uniformly for tampering, wrong key, wrong nonce and corrupted
    storage, so callers cannot tell those cases apart.
    """

    def __init__(self, message: str = "unable to decrypt field", field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class MalformedPlaintext(VaultError):
    """Decryption succeeded but the payload is not a valid serialized value."""

    def __init__(self, message: str = "decrypted payload is malformed", field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NoAlphabetSelected(VaultError, ValueError):
    """Password generator has no character class enabled."""


class VaultLocked(VaultError):
    """Operation requires an unlocked vault session."""
