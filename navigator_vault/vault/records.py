"""
Vault Records — Per-field envelope encryption of password entries.

A record holds title, username and password (mandatory) plus url and
notes (optional). Every present field is encrypted on its own, with its
own nonce, as ``{"<field>": value}``. The record store only ever sees the
resulting ciphertext/nonce pairs:

    {titleEncrypted, titleIv, usernameEncrypted, usernameIv, ...}

Documents written with snake_case keys (title_encrypted, title_iv) are
still accepted on read.
"""
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import AuthenticationFailure, InvalidInput, MalformedPlaintext
from .crypto import EncryptedField, decrypt, encrypt
from .kdf import MasterKey

logger = logging.getLogger("navigator.vault")

MANDATORY_FIELDS = ("title", "username", "password")
OPTIONAL_FIELDS = ("url", "notes")
FIELDS = MANDATORY_FIELDS + OPTIONAL_FIELDS


class VaultRecord(BaseModel):
    """Plaintext password entry. Exists only in client memory."""

    title: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    url: Optional[str] = None
    notes: Optional[str] = None

    def __repr__(self) -> str:
        # passwords stay out of tracebacks and logs
        return f"<VaultRecord title={self.title!r}>"

    __str__ = __repr__


def _lookup(doc: dict[str, Any], *names: str) -> Any:
    for name in names:
        if doc.get(name) is not None:
            return doc[name]
    return None


class EncryptedRecord(BaseModel):
    """Ciphertext form of a VaultRecord, one EncryptedField per field."""

    title: EncryptedField
    username: EncryptedField
    password: EncryptedField
    url: Optional[EncryptedField] = None
    notes: Optional[EncryptedField] = None

    model_config = {"frozen": True}

    def fields(self) -> dict[str, EncryptedField]:
        """Return the present fields by name."""
        return {
            name: getattr(self, name)
            for name in FIELDS
            if getattr(self, name) is not None
        }

    def to_document(self) -> dict[str, str]:
        """Flatten into the record-store schema (camelCase keys)."""
        doc: dict[str, str] = {}
        for name, field in self.fields().items():
            doc[f"{name}Encrypted"] = field.ciphertext
            doc[f"{name}Iv"] = field.nonce
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "EncryptedRecord":
        """Build an EncryptedRecord from a record-store document.

        Raises:
            InvalidInput: If a mandatory pair is missing, an optional pair is
                half-present, or a value is not a string.
        """
        values: dict[str, EncryptedField] = {}
        for name in FIELDS:
            ciphertext = _lookup(doc, f"{name}Encrypted", f"{name}_encrypted")
            nonce = _lookup(doc, f"{name}Iv", f"{name}_iv")
            if ciphertext is None and nonce is None:
                if name in MANDATORY_FIELDS:
                    raise InvalidInput(f"Record document is missing field '{name}'")
                continue
            if ciphertext is None or nonce is None:
                raise InvalidInput(
                    f"Record document has an incomplete pair for field '{name}'"
                )
            values[name] = (ciphertext, nonce)
        try:
            return cls.model_validate(values)
        except ValidationError as err:
            raise InvalidInput(f"Invalid record document: {err}") from err


def decrypt_field(field: EncryptedField, name: str, key: MasterKey) -> str:
    """Decrypt a single named record field.

    Raises:
        AuthenticationFailure: If the field cannot be authenticated.
        MalformedPlaintext: If the payload is not ``{"<name>": str}``.
    """
    try:
        payload = decrypt(field, key)
    except (AuthenticationFailure, MalformedPlaintext) as err:
        err.field = name
        raise
    if not isinstance(payload, dict) or not isinstance(payload.get(name), str):
        raise MalformedPlaintext(field=name)
    return payload[name]


def encrypt_record(record: VaultRecord, key: MasterKey) -> EncryptedRecord:
    """Encrypt every present field of ``record`` with its own nonce.

    Empty optional fields are left out.
    """
    values: dict[str, EncryptedField] = {}
    for name in FIELDS:
        value = getattr(record, name)
        if name in OPTIONAL_FIELDS and not value:
            continue
        values[name] = encrypt({name: value}, key)
    logger.debug("Encrypted record fields: %s", sorted(values))
    return EncryptedRecord(**values)


def decrypt_record(encrypted: EncryptedRecord, key: MasterKey) -> VaultRecord:
    """Decrypt every field of ``encrypted``.

    A field that fails to decrypt raises; it is never replaced by blank
    content. The failing field name is available as ``err.field``.
    """
    values = {
        name: decrypt_field(field, name, key)
        for name, field in encrypted.fields().items()
    }
    # types are checked by decrypt_field; stored records may predate the
    # non-empty rule for mandatory fields
    return VaultRecord.model_construct(**values)


def update_field(
    encrypted: EncryptedRecord,
    name: str,
    value: Optional[str],
    key: MasterKey,
) -> EncryptedRecord:
    """Re-encrypt one field with a fresh nonce, leaving the others untouched.

    Clearing an optional field (``None`` or empty) removes it.

    Raises:
        InvalidInput: On unknown field names or when clearing a mandatory field.
    """
    if name not in FIELDS:
        raise InvalidInput(f"Unknown record field '{name}'")
    if not value:
        if name in MANDATORY_FIELDS:
            raise InvalidInput(f"Field '{name}' is mandatory")
        return encrypted.model_copy(update={name: None})
    if not isinstance(value, str):
        raise InvalidInput(f"Field '{name}' must be a string")
    logger.debug("Updating record field: %s", name)
    return encrypted.model_copy(update={name: encrypt({name: value}, key)})
