"""Base64 glue: salts, ciphertexts and nonces travel as printable strings."""
import base64
import binascii


def b64encode(data: bytes) -> str:
    """Encode bytes as a standard base64 ASCII string."""
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str) -> bytes:
    """Decode a standard base64 string, rejecting non-alphabet characters.

    Raises:
        binascii.Error: If ``value`` is not valid base64.
    """
    if isinstance(value, str):
        try:
            value = value.encode("ascii")
        except UnicodeEncodeError as err:
            raise binascii.Error("base64 value is not ASCII") from err
    return base64.b64decode(value, validate=True)
