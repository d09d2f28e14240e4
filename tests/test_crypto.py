"""
Tests for field envelope encryption.

Tests cover:
- Round trip of structured values
- Tamper detection on ciphertext and nonce (single bit flips)
- Wrong-key rejection and uniform error reporting
- Nonce uniqueness
- Malformed plaintext handling
- The end-to-end unlock/encrypt/decrypt scenario
"""
import base64
import os

import pytest

from navigator_vault.exceptions import AuthenticationFailure, InvalidInput, MalformedPlaintext
from navigator_vault.vault.crypto import (
    EncryptedField,
    decrypt,
    deserialize_value,
    encrypt,
    serialize_value,
)
from navigator_vault.vault.kdf import derive


def _flip(b64: str, bit: int) -> str:
    raw = bytearray(base64.b64decode(b64))
    raw[bit // 8] ^= 1 << (bit % 8)
    return base64.b64encode(bytes(raw)).decode("ascii")


# --- Test Round Trip ---

class TestRoundTrip:
    """Tests for decrypt(encrypt(v, k), k) == v."""

    @pytest.mark.parametrize("value", [
        {"title": "GitHub"},
        "plain string",
        "",
        "ünïcødé ✓",
        42,
        3.5,
        True,
        None,
        [1, "two", {"three": 3}],
        {"nested": {"a": [1, 2], "b": None}},
    ])
    def test_roundtrip(self, key, value):
        assert decrypt(encrypt(value, key), key) == value

    def test_bytes_roundtrip(self, key):
        assert decrypt(encrypt(b"\x00\xffraw", key), key) == b"\x00\xffraw"

    def test_field_is_printable(self, key):
        field = encrypt({"title": "GitHub"}, key)
        assert isinstance(field, EncryptedField)
        assert field.ciphertext.isascii()
        assert len(base64.b64decode(field.nonce)) == 12

    def test_ciphertext_includes_tag(self, key):
        """Ciphertext is the payload plus a 16-byte tag."""
        field = encrypt("abcd", key)
        assert len(base64.b64decode(field.ciphertext)) == len(b'"abcd"') + 16

    def test_accepts_plain_tuple(self, key):
        field = encrypt("value", key)
        assert decrypt((field.ciphertext, field.nonce), key) == "value"


# --- Test Tamper Detection ---

class TestTamperDetection:
    """Any bit flip must fail authentication, never return other plaintext."""

    def test_every_ciphertext_bit(self, key):
        field = encrypt({"title": "GitHub"}, key)
        bits = len(base64.b64decode(field.ciphertext)) * 8
        for bit in range(bits):
            tampered = EncryptedField(_flip(field.ciphertext, bit), field.nonce)
            with pytest.raises(AuthenticationFailure):
                decrypt(tampered, key)

    def test_every_nonce_bit(self, key):
        field = encrypt({"title": "GitHub"}, key)
        for bit in range(12 * 8):
            tampered = EncryptedField(field.ciphertext, _flip(field.nonce, bit))
            with pytest.raises(AuthenticationFailure):
                decrypt(tampered, key)

    def test_truncated_ciphertext(self, key):
        field = encrypt({"title": "GitHub"}, key)
        raw = base64.b64decode(field.ciphertext)
        for cut in (1, 8, len(raw) - 1):
            short = base64.b64encode(raw[:-cut]).decode("ascii")
            with pytest.raises(AuthenticationFailure):
                decrypt(EncryptedField(short, field.nonce), key)

    def test_swapped_nonce(self, key):
        a = encrypt("a", key)
        b = encrypt("a", key)
        with pytest.raises(AuthenticationFailure):
            decrypt(EncryptedField(a.ciphertext, b.nonce), key)

    @pytest.mark.parametrize("ciphertext,nonce", [
        ("not base64!", None),
        (None, "not base64!"),
        (None, base64.b64encode(os.urandom(16)).decode("ascii")),
        ("", None),
    ])
    def test_undecodable_storage(self, key, ciphertext, nonce):
        field = encrypt("value", key)
        broken = EncryptedField(
            ciphertext if ciphertext is not None else field.ciphertext,
            nonce if nonce is not None else field.nonce,
        )
        with pytest.raises(AuthenticationFailure):
            decrypt(broken, key)


# --- Test Keys ---

class TestKeys:
    """Tests for wrong-key rejection and key handling."""

    def test_wrong_key_rejected(self, key, other_key):
        field = encrypt({"title": "GitHub"}, key)
        with pytest.raises(AuthenticationFailure):
            decrypt(field, other_key)

    def test_errors_are_indistinguishable(self, key, other_key):
        """Wrong key and tampering produce the same message."""
        field = encrypt("value", key)
        with pytest.raises(AuthenticationFailure) as wrong_key:
            decrypt(field, other_key)
        with pytest.raises(AuthenticationFailure) as tampered:
            decrypt(EncryptedField(_flip(field.ciphertext, 0), field.nonce), key)
        assert str(wrong_key.value) == str(tampered.value)

    def test_raw_bytes_key_refused(self):
        with pytest.raises(InvalidInput):
            encrypt("value", os.urandom(32))

    def test_error_has_no_plaintext(self, key, other_key):
        field = encrypt("hunter2-secret", key)
        with pytest.raises(AuthenticationFailure) as exc:
            decrypt(field, other_key)
        assert "hunter2" not in str(exc.value)


# --- Test Nonces ---

class TestNonces:
    """Tests for nonce uniqueness."""

    def test_same_value_twice_differs(self, key):
        a = encrypt({"title": "GitHub"}, key)
        b = encrypt({"title": "GitHub"}, key)
        assert a.nonce != b.nonce
        assert a.ciphertext != b.ciphertext

    def test_nonces_unique_over_many_samples(self, key):
        nonces = {encrypt("x", key).nonce for _ in range(500)}
        assert len(nonces) == 500


# --- Test Serialization ---

class TestSerialization:
    """Tests for value (de)serialization and malformed payloads."""

    def test_canonical_key_order(self):
        assert serialize_value({"b": 1, "a": 2}) == serialize_value({"a": 2, "b": 1})

    def test_unserializable_value(self, key):
        with pytest.raises(InvalidInput):
            encrypt(object(), key)

    def test_reserved_wrapper_key_refused(self, key):
        with pytest.raises(InvalidInput):
            encrypt({"__vault_bytes_b64__": "AAAA"}, key)

    def test_wrapper_key_among_others(self, key):
        value = {"__vault_bytes_b64__": "AAAA", "other": 1}
        assert decrypt(encrypt(value, key), key) == value

    def test_deserialize_garbage(self):
        with pytest.raises(MalformedPlaintext):
            deserialize_value(b"\xff\xfe not json")

    def test_malformed_plaintext_after_decryption(self, key):
        """Authentic ciphertext whose payload is not JSON."""
        nonce = os.urandom(12)
        ct = key.aead().encrypt(nonce, b"{not json", None)
        field = EncryptedField(
            base64.b64encode(ct).decode("ascii"),
            base64.b64encode(nonce).decode("ascii"),
        )
        with pytest.raises(MalformedPlaintext):
            decrypt(field, key)


# --- End-to-end scenario ---

class TestScenario:
    """Fixed salt, known password, wrong password."""

    def test_end_to_end(self, salt):
        k, _ = derive("correct-horse-battery-staple", salt)
        field = encrypt({"title": "GitHub"}, k)
        assert decrypt(field, k) == {"title": "GitHub"}

        wrong, _ = derive("correct-horse-battery-stapler", salt)
        with pytest.raises(AuthenticationFailure):
            decrypt(field, wrong)
