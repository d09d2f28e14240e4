"""
Password Generator — Random passwords from configurable character classes.

The alphabet is the concatenation of the enabled classes. With
``exclude_ambiguous`` the classes already omit ``0 1 O I l`` and the
assembled alphabet is stripped of them a second time.

Sampling draws one CSPRNG byte per position and takes
``alphabet[byte % len(alphabet)]``. When 256 is not a multiple of the
alphabet size this slightly favours low-index characters; set
``unbiased=True`` to use rejection sampling instead.
"""
import math
import secrets
import logging
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .exceptions import InvalidInput, NoAlphabetSelected

logger = logging.getLogger("navigator.vault.generator")

UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWER = "abcdefghijklmnopqrstuvwxyz"
NUMBERS = "0123456789"
SYMBOLS = "!@#$%^&*()-_=+[]{};:,.?"

UPPER_UNAMBIGUOUS = "ABCDEFGHJKLMNPQRSTUVWXYZ"  # no I O
LOWER_UNAMBIGUOUS = "abcdefghijkmnopqrstuvwxyz"  # no l
NUMBERS_UNAMBIGUOUS = "23456789"  # no 0 1

AMBIGUOUS = frozenset("OIl10")


class GeneratorOptions(BaseModel):
    """Generator settings. Accepts snake_case or camelCase names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    length: int = Field(default=16, ge=1)
    include_upper: bool = True
    include_lower: bool = True
    include_numbers: bool = True
    include_symbols: bool = False
    exclude_ambiguous: bool = False
    unbiased: bool = False


_ALIASES = {
    field.alias: name
    for name, field in GeneratorOptions.model_fields.items()
    if field.alias
}


def build_alphabet(options: GeneratorOptions) -> str:
    """Assemble the sampling alphabet for ``options``.

    Raises:
        NoAlphabetSelected: If no character class is enabled.
    """
    ambiguous = options.exclude_ambiguous
    alphabet = ""
    if options.include_upper:
        alphabet += UPPER_UNAMBIGUOUS if ambiguous else UPPER
    if options.include_lower:
        alphabet += LOWER_UNAMBIGUOUS if ambiguous else LOWER
    if options.include_numbers:
        alphabet += NUMBERS_UNAMBIGUOUS if ambiguous else NUMBERS
    if options.include_symbols:
        alphabet += SYMBOLS
    if ambiguous:
        # second pass, kept even though the classes are already reduced
        alphabet = "".join(c for c in alphabet if c not in AMBIGUOUS)
    if not alphabet:
        raise NoAlphabetSelected("No character sets selected")
    return alphabet


def _sample(alphabet: str, length: int, unbiased: bool) -> str:
    size = len(alphabet)
    if not unbiased:
        return "".join(alphabet[b % size] for b in secrets.token_bytes(length))
    limit = 256 - (256 % size)
    out: list[str] = []
    while len(out) < length:
        for b in secrets.token_bytes(length - len(out)):
            if b < limit:
                out.append(alphabet[b % size])
    return "".join(out)


def _resolve(options: Union[GeneratorOptions, Mapping, None], kwargs: dict[str, Any]) -> GeneratorOptions:
    if isinstance(options, Mapping):
        kwargs = {**options, **kwargs}
        options = None
    data = options.model_dump() if options is not None else {}
    for name, value in kwargs.items():
        data[_ALIASES.get(name, name)] = value
    try:
        return GeneratorOptions(**data)
    except ValidationError as err:
        raise InvalidInput(f"Invalid generator options: {err}") from err


def generate(options: Union[GeneratorOptions, Mapping, None] = None, **kwargs: Any) -> str:
    """Generate a random password.

    Options may be given as a GeneratorOptions instance or a mapping, as keyword
    arguments (``length=20, include_symbols=True`` or ``includeSymbols=True``)
    or both, keywords overriding the instance.

    Raises:
        NoAlphabetSelected: If every character class is disabled.
        InvalidInput: If the options are invalid (e.g. ``length < 1``).
    """
    options = _resolve(options, kwargs)
    alphabet = build_alphabet(options)
    logger.debug(
        "Generating password: length=%d alphabet_size=%d unbiased=%s",
        options.length, len(alphabet), options.unbiased,
    )
    return _sample(alphabet, options.length, options.unbiased)


def entropy_bits(options: Union[GeneratorOptions, Mapping, None] = None, **kwargs: Any) -> float:
    """Return ``length * log2(alphabet size)`` for the given options."""
    options = _resolve(options, kwargs)
    return options.length * math.log2(len(build_alphabet(options)))
