"""Vault — Client-side envelope encryption of password-manager records.

Security Note (Threat Model):
    The master password and the derived master key never leave the client.
    The record store only receives ciphertext and nonces; the account store
    only receives the salt and derivation parameters, which are not secret.
    The key is held in process memory while a VaultSession is unlocked; a
    memory dump of the client process during that window exposes it. A
    compromised client (malware, injected code) is out of scope.
"""

from .config import KdfParams, VaultConfig, DEFAULT_KDF_PARAMS
from .kdf import MasterKey, derive, generate_salt, decode_salt
from .crypto import EncryptedField, encrypt, decrypt
from .records import (
    VaultRecord,
    EncryptedRecord,
    encrypt_record,
    decrypt_record,
    update_field,
)
from .session import VaultSession
from .key_rotation import rotate_master_key

__all__ = [
    "KdfParams",
    "VaultConfig",
    "DEFAULT_KDF_PARAMS",
    "MasterKey",
    "derive",
    "generate_salt",
    "decode_salt",
    "EncryptedField",
    "encrypt",
    "decrypt",
    "VaultRecord",
    "EncryptedRecord",
    "encrypt_record",
    "decrypt_record",
    "update_field",
    "VaultSession",
    "rotate_master_key",
]
