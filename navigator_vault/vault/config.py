"""
Vault Configuration — Key-derivation parameters and validated settings.

Reads settings from environment variables:
    VAULT_KDF_ALGORITHM = pbkdf2-sha256 | argon2id
    VAULT_PBKDF2_ITERATIONS = <integer, minimum 210000>
    VAULT_ARGON2_TIME_COST / VAULT_ARGON2_MEMORY_COST / VAULT_ARGON2_PARALLELISM
    VAULT_GENERATOR_LENGTH = <integer>

Security Note:
    Derivation parameters are not secret and are stored next to the
    account salt. Never log passwords or key material.
"""
import os
import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..exceptions import InvalidInput
from ..generator import GeneratorOptions

logger = logging.getLogger("navigator.vault")

SALT_SIZE = 16  # 128-bit per-account salt
NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16  # GCM authentication tag
KEY_LENGTH = 32  # AES-256

# Existing vaults were derived with this count; lowering it breaks them.
PBKDF2_ITERATIONS = 210_000

ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # KiB
ARGON2_PARALLELISM = 4

KDF_VERSION = 1

KdfAlgorithm = Literal["pbkdf2-sha256", "argon2id"]


class KdfParams(BaseModel):
    """Key-derivation parameter record, persisted per account beside the salt.

    The defaults (version 1) reproduce the historical unversioned derivation,
    so accounts without a stored record keep deriving the same key.
    """

    version: int = Field(default=KDF_VERSION, ge=1)
    algorithm: KdfAlgorithm = "pbkdf2-sha256"
    iterations: int = Field(default=PBKDF2_ITERATIONS, ge=PBKDF2_ITERATIONS)
    time_cost: int = Field(default=ARGON2_TIME_COST, ge=1)
    memory_cost: int = Field(default=ARGON2_MEMORY_COST, ge=8192)
    parallelism: int = Field(default=ARGON2_PARALLELISM, ge=1, le=64)

    model_config = {"frozen": True}

    def to_record(self) -> dict[str, Any]:
        """Return a plain dict suitable for the account store."""
        return self.model_dump()

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> "KdfParams":
        """Build params from a stored record; ``None`` means legacy version 1.

        Raises:
            InvalidInput: If the stored record is not valid.
        """
        if not record:
            return cls()
        try:
            return cls.model_validate(record)
        except ValidationError as err:
            raise InvalidInput(f"Invalid KDF parameter record: {err}") from err


DEFAULT_KDF_PARAMS = KdfParams()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}") from err


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    kdf_algorithm: str = Field(default="pbkdf2-sha256")
    pbkdf2_iterations: int = Field(default=PBKDF2_ITERATIONS)
    argon2_time_cost: int = Field(default=ARGON2_TIME_COST, ge=1)
    argon2_memory_cost: int = Field(default=ARGON2_MEMORY_COST, ge=8192)
    argon2_parallelism: int = Field(default=ARGON2_PARALLELISM, ge=1, le=64)
    generator_length: int = Field(default=16, ge=1, le=1024)

    @field_validator("kdf_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Validate the key-derivation algorithm is supported."""
        v = v.lower()
        if v not in ("pbkdf2-sha256", "argon2id"):
            raise ValueError(f"Unsupported KDF algorithm: {v}")
        return v

    @model_validator(mode="after")
    def validate_iterations(self) -> "VaultConfig":
        """Refuse PBKDF2 iteration counts weaker than the compatibility floor."""
        if self.pbkdf2_iterations < PBKDF2_ITERATIONS:
            raise ValueError(
                f"pbkdf2_iterations must be at least {PBKDF2_ITERATIONS}, "
                f"got {self.pbkdf2_iterations}"
            )
        return self

    def kdf_params(self) -> KdfParams:
        """Return the derivation parameters to record for new accounts."""
        return KdfParams(
            algorithm=self.kdf_algorithm,
            iterations=self.pbkdf2_iterations,
            time_cost=self.argon2_time_cost,
            memory_cost=self.argon2_memory_cost,
            parallelism=self.argon2_parallelism,
        )

    def generator_options(self, **overrides: Any) -> GeneratorOptions:
        """Return generator options using the configured default length."""
        overrides.setdefault("length", self.generator_length)
        return GeneratorOptions(**overrides)

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.

        Raises:
            InvalidInput: If a variable is malformed or out of range.
        """
        try:
            config = cls(
                kdf_algorithm=os.environ.get("VAULT_KDF_ALGORITHM", "pbkdf2-sha256"),
                pbkdf2_iterations=_env_int("VAULT_PBKDF2_ITERATIONS", PBKDF2_ITERATIONS),
                argon2_time_cost=_env_int("VAULT_ARGON2_TIME_COST", ARGON2_TIME_COST),
                argon2_memory_cost=_env_int("VAULT_ARGON2_MEMORY_COST", ARGON2_MEMORY_COST),
                argon2_parallelism=_env_int("VAULT_ARGON2_PARALLELISM", ARGON2_PARALLELISM),
                generator_length=_env_int("VAULT_GENERATOR_LENGTH", 16),
            )
        except ValidationError as err:
            raise InvalidInput(f"Invalid vault configuration: {err}") from err
        logger.debug(
            "Vault config loaded: kdf=%s iterations=%d",
            config.kdf_algorithm, config.pbkdf2_iterations,
        )
        return config
