"""
Vault Key Derivation — Master password → AES-256-GCM master key.

Default derivation: PBKDF2-HMAC-SHA256, 210,000 iterations, 16-byte salt,
32-byte output. Argon2id is available for accounts whose KDF parameter
record selects it.

Security Note:
    Never log the password or the derived key. Only algorithm names and
    cost parameters are logged.
"""
import hmac
import secrets
import logging
import binascii
from typing import Optional, Union

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import InvalidInput
from .config import DEFAULT_KDF_PARAMS, KEY_LENGTH, SALT_SIZE, KdfParams
from .encoding import b64decode

logger = logging.getLogger("navigator.vault")


class MasterKey:
    """Opaque 256-bit key usable only for AES-GCM field encryption.

    The key material lives in a private bytearray that ``wipe()`` zeroes.
    It cannot be printed, pickled or copied.
    """

    __slots__ = ("_material", "_wiped")

    algorithm = "AES-GCM"

    def __init__(self, material: Union[bytes, bytearray]):
        if len(material) != KEY_LENGTH:
            raise InvalidInput(f"Master key must be {KEY_LENGTH} bytes")
        self._material = bytearray(material)
        self._wiped = False

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Zero the key material. The key is unusable afterwards."""
        material = getattr(self, "_material", None)
        if material is not None:
            for i in range(len(material)):
                material[i] = 0
        self._wiped = True

    def aead(self) -> AESGCM:
        """Return the AES-GCM primitive bound to this key.

        Raises:
            InvalidInput: If the key was wiped.
        """
        if self._wiped:
            raise InvalidInput("Master key has been wiped")
        return AESGCM(bytes(self._material))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MasterKey):
            return NotImplemented
        if self._wiped or other._wiped:
            return False
        return hmac.compare_digest(bytes(self._material), bytes(other._material))

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{KEY_LENGTH * 8}-bit"
        return f"<MasterKey {self.algorithm} {state}>"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("MasterKey cannot be serialized")

    def __copy__(self):
        raise TypeError("MasterKey cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("MasterKey cannot be copied")

    def __del__(self):
        self.wipe()


def _password_bytes(password: str) -> bytes:
    """UTF-8 encode, replacing lone surrogates with U+FFFD like a browser TextEncoder."""
    try:
        return password.encode("utf-8")
    except UnicodeEncodeError:
        wellformed = password.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
        return wellformed.encode("utf-8")


def generate_salt() -> bytes:
    """Return 16 bytes from the operating system CSPRNG."""
    return secrets.token_bytes(SALT_SIZE)


def decode_salt(salt_b64: str) -> bytes:
    """Decode a stored base64 salt.

    Raises:
        InvalidInput: If the value is not base64 or not 16 bytes long.
    """
    try:
        salt = b64decode(salt_b64)
    except (binascii.Error, TypeError) as err:
        raise InvalidInput("Salt is not valid base64") from err
    if len(salt) != SALT_SIZE:
        raise InvalidInput(f"Salt must be exactly {SALT_SIZE} bytes, got {len(salt)}")
    return salt


def derive(
    password: str,
    salt: Optional[bytes] = None,
    params: Optional[KdfParams] = None,
) -> tuple[MasterKey, bytes]:
    """Derive the master key for ``password``.

    Args:
        password: The user's master password.
        salt: The account's 16-byte salt; generated when omitted (first use).
        params: Derivation parameters stored for the account; defaults to
            PBKDF2-HMAC-SHA256 with 210,000 iterations.

    Returns:
        Tuple of (master_key, salt). The salt is returned unchanged when given.

    Raises:
        InvalidInput: If the password is empty or the salt is not 16 bytes.
    """
    if not isinstance(password, str) or not password:
        raise InvalidInput("Password must be a non-empty string")
    if salt is None:
        salt = generate_salt()
    elif not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        raise InvalidInput(f"Salt must be exactly {SALT_SIZE} bytes")
    salt = bytes(salt)
    params = params or DEFAULT_KDF_PARAMS
    secret = _password_bytes(password)

    if params.algorithm == "argon2id":
        material = hash_secret_raw(
            secret=secret,
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=KEY_LENGTH,
            type=Type.ID,
        )
        logger.debug(
            "Derived master key: argon2id t=%d m=%d p=%d",
            params.time_cost, params.memory_cost, params.parallelism,
        )
    else:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=params.iterations,
        )
        material = kdf.derive(secret)
        logger.debug(
            "Derived master key: pbkdf2-sha256 iterations=%d", params.iterations,
        )
    return MasterKey(material), salt
