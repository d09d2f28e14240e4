"""Navigator Vault.

Client-side envelope encryption for a password manager, plus a
configurable random password generator.
"""
from .version import (
    __title__, __description__, __version__, __author__, __author_email__
)
from .exceptions import (
    VaultError,
    InvalidInput,
    AuthenticationFailure,
    MalformedPlaintext,
    NoAlphabetSelected,
    VaultLocked,
)
from .generator import GeneratorOptions, generate, build_alphabet, entropy_bits
from .vault import (
    KdfParams,
    VaultConfig,
    MasterKey,
    derive,
    EncryptedField,
    encrypt,
    decrypt,
    VaultRecord,
    EncryptedRecord,
    encrypt_record,
    decrypt_record,
    update_field,
    VaultSession,
    rotate_master_key,
)

__all__ = (
    "VaultError",
    "InvalidInput",
    "AuthenticationFailure",
    "MalformedPlaintext",
    "NoAlphabetSelected",
    "VaultLocked",
    "GeneratorOptions",
    "generate",
    "build_alphabet",
    "entropy_bits",
    "KdfParams",
    "VaultConfig",
    "MasterKey",
    "derive",
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
)
