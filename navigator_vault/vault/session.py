"""
VaultSession — Explicit locked/unlocked state holding the master key.

Provides the public API used by a UI/session layer:
- ``unlock(password, salt)`` — derive the master key and keep it in memory
- ``unlock_async(password, salt)`` — same, off the event loop
- ``lock()`` — wipe the key
- ``encrypt`` / ``decrypt`` / ``encrypt_record`` / ``decrypt_record``

Security Note:
    The master key is never persisted or transmitted. It lives in process
    memory between ``unlock()`` and ``lock()`` (see threat model in
    ``__init__.py``). Never log passwords, keys or plaintext.
"""
import asyncio
import logging
from functools import partial
from typing import Any, Optional

from ..exceptions import VaultLocked
from .config import KdfParams
from .crypto import EncryptedField, decrypt, encrypt
from .encoding import b64encode
from .kdf import MasterKey, derive
from .records import EncryptedRecord, VaultRecord, decrypt_record, encrypt_record

logger = logging.getLogger("navigator.vault")


class VaultSession:
    """Unlock session for one account.

    Starts locked. ``unlock()`` derives the master key from the master
    password and the account salt; ``lock()`` zeroes it. Cipher calls
    receive the key explicitly from this object.
    """

    def __init__(self, account_id: Optional[str] = None):
        self._account_id = account_id
        self._key: Optional[MasterKey] = None
        self._salt: Optional[bytes] = None
        self._params: Optional[KdfParams] = None

    def __repr__(self) -> str:
        state = "locked" if self.locked else "unlocked"
        return f"<VaultSession account={self._account_id!r} {state}>"

    def __enter__(self) -> "VaultSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._key is None

    @property
    def key(self) -> MasterKey:
        """The unlocked master key.

        Raises:
            VaultLocked: If the session is locked.
        """
        if self._key is None:
            raise VaultLocked("Vault session is locked")
        return self._key

    @property
    def salt(self) -> Optional[bytes]:
        return self._salt

    @property
    def salt_b64(self) -> Optional[str]:
        """Account salt as stored by the account store (not secret)."""
        return b64encode(self._salt) if self._salt is not None else None

    @property
    def kdf_params(self) -> Optional[KdfParams]:
        return self._params

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def unlock(
        self,
        password: str,
        salt: Optional[bytes] = None,
        params: Optional[KdfParams] = None,
    ) -> MasterKey:
        """Derive the master key and move to the unlocked state.

        Args:
            password: Master password.
            salt: Account salt; omitted on first use, in which case a new one
                is generated and exposed through ``salt`` / ``salt_b64``.
            params: Account derivation parameters (defaults to version 1).

        Returns:
            The derived master key.

        Raises:
            InvalidInput: If the password is empty or the salt malformed.
        """
        key, salt = derive(password, salt, params)
        self._install(key, salt, params)
        return key

    async def unlock_async(
        self,
        password: str,
        salt: Optional[bytes] = None,
        params: Optional[KdfParams] = None,
    ) -> MasterKey:
        """Run ``unlock`` derivation in the default executor.

        Derivation has no cancellation point: cancelling the awaiting task
        abandons the result but the worker thread runs to completion.
        """
        loop = asyncio.get_running_loop()
        key, salt = await loop.run_in_executor(
            None, partial(derive, password, salt, params),
        )
        self._install(key, salt, params)
        return key

    def _install(self, key: MasterKey, salt: bytes, params: Optional[KdfParams]) -> None:
        if self._key is not None and self._key is not key:
            self._key.wipe()
        self._key = key
        self._salt = salt
        self._params = params or KdfParams()
        logger.info("Vault unlocked: account=%s", self._account_id)

    def lock(self) -> None:
        """Wipe the master key and return to the locked state. Idempotent."""
        if self._key is None:
            return
        self._key.wipe()
        self._key = None
        self._salt = None
        self._params = None
        logger.info("Vault locked: account=%s", self._account_id)

    # ------------------------------------------------------------------
    # Cipher helpers
    # ------------------------------------------------------------------

    def encrypt(self, value: Any) -> EncryptedField:
        return encrypt(value, self.key)

    def decrypt(self, field: EncryptedField) -> Any:
        return decrypt(field, self.key)

    def encrypt_record(self, record: VaultRecord) -> EncryptedRecord:
        return encrypt_record(record, self.key)

    def decrypt_record(self, encrypted: EncryptedRecord) -> VaultRecord:
        return decrypt_record(encrypted, self.key)
