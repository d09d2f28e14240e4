"""
Vault Key Rotation — Re-encryption of records under a new master key.

Used when the master password changes or an account moves to stronger
derivation parameters. Records are processed in batches; every field is
re-encrypted with a fresh nonce.

Security Note:
    Plaintext exists in memory only during re-encryption of each record.
    Never log plaintext or ciphertext values; failures are logged by id.
"""
import logging
from collections.abc import Hashable, Mapping

from ..exceptions import AuthenticationFailure, InvalidInput, MalformedPlaintext
from .kdf import MasterKey
from .records import EncryptedRecord, decrypt_record, encrypt_record

logger = logging.getLogger("navigator.vault")


def rotate_master_key(
    records: Mapping[Hashable, EncryptedRecord],
    old_key: MasterKey,
    new_key: MasterKey,
    batch_size: int = 100,
) -> tuple[dict, dict]:
    """Re-encrypt ``records`` from ``old_key`` to ``new_key``.

    Args:
        records: Mapping of record id to EncryptedRecord under ``old_key``.
        old_key: Master key the records are currently encrypted with.
        new_key: Master key to re-encrypt with.
        batch_size: Number of records processed per logged batch.

    Returns:
        Tuple of (rotated, stats). ``rotated`` maps record id to the new
        EncryptedRecord. Records that fail to decrypt are not included;
        stats has keys: total, rotated, errors, failed (list of ids).

    Raises:
        InvalidInput: If the keys are the same object or batch_size < 1.
    """
    if old_key is new_key:
        raise InvalidInput("Old and new master keys must differ")
    if batch_size < 1:
        raise InvalidInput("batch_size must be at least 1")

    rotated: dict = {}
    stats = {"total": 0, "rotated": 0, "errors": 0, "failed": []}
    ids = list(records)

    logger.info(
        "Starting key rotation of %d record(s) (batch_size=%d)",
        len(ids), batch_size,
    )

    for offset in range(0, len(ids), batch_size):
        batch = ids[offset:offset + batch_size]
        batch_num = (offset // batch_size) + 1
        logger.info("Processing batch %d (%d records)", batch_num, len(batch))

        for record_id in batch:
            stats["total"] += 1
            try:
                plain = decrypt_record(records[record_id], old_key)
            except (AuthenticationFailure, MalformedPlaintext) as err:
                logger.error(
                    "Error rotating record id=%s field=%s: %s",
                    record_id, err.field, type(err).__name__,
                )
                stats["errors"] += 1
                stats["failed"].append(record_id)
                continue
            rotated[record_id] = encrypt_record(plain, new_key)
            stats["rotated"] += 1

    logger.info(
        "Key rotation complete: total=%d rotated=%d errors=%d",
        stats["total"], stats["rotated"], stats["errors"],
    )
    return rotated, stats
