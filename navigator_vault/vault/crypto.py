"""
Vault Crypto Core — Envelope encryption of individual vault fields.

Each logical value is serialized with orjson, encrypted with AES-256-GCM
under the session master key using a fresh random 96-bit nonce, and
returned as a (ciphertext, nonce) pair of base64 strings:

    value → orjson → AES-GCM(key, nonce, aad=None) → [payload + tag 16B]

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
    Ciphertext length reveals the approximate plaintext length.
"""
import os
import base64
import logging
import binascii
from typing import Any, NamedTuple, Optional

import orjson
from cryptography.exceptions import InvalidTag

from ..exceptions import AuthenticationFailure, InvalidInput, MalformedPlaintext
from .config import NONCE_SIZE, TAG_SIZE
from .encoding import b64decode, b64encode
from .kdf import MasterKey

logger = logging.getLogger("navigator.vault")

_BYTES_WRAPPER_KEY = "__vault_bytes_b64__"


class EncryptedField(NamedTuple):
    """One encrypted logical value as stored by the record store."""

    ciphertext: str  # base64, includes the GCM tag
    nonce: str  # base64, 12 bytes


def _require_key(key: Any) -> MasterKey:
    if not isinstance(key, MasterKey):
        raise InvalidInput("A derived MasterKey is required")
    return key


# ---------------------------------------------------------------------------
# Field encryption
# ---------------------------------------------------------------------------

def encrypt(value: Any, key: MasterKey) -> EncryptedField:
    """Encrypt a structured value under the master key.

    Args:
        value: Value to encrypt (str, int, float, bool, None, list, dict, bytes).
        key: Master key derived for the unlocked session.

    Returns:
        EncryptedField with base64 ciphertext and nonce.

    Raises:
        InvalidInput: If ``key`` is not a usable MasterKey or the value
            cannot be serialized.
    """
    cipher = _require_key(key).aead()
    plaintext = serialize_value(value)
    nonce = os.urandom(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext, None)
    return EncryptedField(ciphertext=b64encode(ct), nonce=b64encode(nonce))


def decrypt(field: EncryptedField, key: MasterKey) -> Any:
    """Decrypt an EncryptedField back to its structured value.

    Tampering, a wrong key, a wrong nonce and undecodable storage all raise
    the same AuthenticationFailure.

    Raises:
        AuthenticationFailure: If the field cannot be authenticated.
        MalformedPlaintext: If the decrypted payload cannot be deserialized.
        InvalidInput: If ``key`` is not a usable MasterKey.
    """
    cipher = _require_key(key).aead()
    try:
        ciphertext, nonce = field
        ct = b64decode(ciphertext)
        iv = b64decode(nonce)
    except (binascii.Error, TypeError, ValueError) as err:
        raise AuthenticationFailure() from err
    if len(iv) != NONCE_SIZE or len(ct) < TAG_SIZE:
        raise AuthenticationFailure()
    try:
        plaintext = cipher.decrypt(iv, ct, None)
    except InvalidTag as err:
        raise AuthenticationFailure() from err
    return deserialize_value(plaintext)


# ---------------------------------------------------------------------------
# Value serialization
# ---------------------------------------------------------------------------

def serialize_value(value: Any) -> bytes:
    """Serialize a Python value to canonical bytes for encryption.

    Supports: str, int, float, dict, list, bytes, bool, None.
    bytes values are wrapped as {"__vault_bytes_b64__": "<base64>"} for safe
    JSON round-trip, so a top-level dict holding only that key is refused.
    Dict keys are sorted so equal values encode identically.

    Raises:
        InvalidInput: If the value is not serializable or uses the reserved key.
    """
    if isinstance(value, dict) and _BYTES_WRAPPER_KEY in value and len(value) == 1:
        raise InvalidInput(f"Key {_BYTES_WRAPPER_KEY!r} is reserved")
    if isinstance(value, (bytes, bytearray)):
        value = {_BYTES_WRAPPER_KEY: b64encode(bytes(value))}
    try:
        return orjson.dumps(value, option=orjson.OPT_SORT_KEYS)
    except TypeError as err:
        raise InvalidInput(
            f"Value of type {type(value).__name__} cannot be encrypted"
        ) from err


def deserialize_value(data: bytes, field: Optional[str] = None) -> Any:
    """Deserialize decrypted bytes back to a Python value.

    Raises:
        MalformedPlaintext: If ``data`` is not valid serialized JSON.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise MalformedPlaintext(field=field) from err
    if isinstance(parsed, dict) and _BYTES_WRAPPER_KEY in parsed and len(parsed) == 1:
        try:
            return base64.b64decode(parsed[_BYTES_WRAPPER_KEY], validate=True)
        except (binascii.Error, TypeError) as err:
            raise MalformedPlaintext(field=field) from err
    return parsed
