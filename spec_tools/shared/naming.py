"""Naming utilities for identifier synthesis.

All functions here are pure and deterministic so that every emitter derives
the same identifier from the same contract name. Run-scoped state such as
collision tracking lives in :mod:`spec_tools.shared.identifiers`.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

WORD_SEPARATORS: frozenset[str] = frozenset({"-", ".", "_", " "})

_VOWELS: frozenset[str] = frozenset("aeiouAEIOU")


class NamingConvention(str, Enum):
    PASCAL_CASE = "PascalCase"
    CAMEL_CASE = "camelCase"
    ORIGINAL = "Original"


def _is_word_boundary(value: str, index: int) -> bool:
    current = value[index]
    if index == 0 or not current.isupper():
        return False
    previous = value[index - 1]
    if previous.islower() or previous.isdigit():
        return True
    # Capital run followed by a lowercase letter: "XMLParser" -> "XML" | "Parser"
    return (
        previous.isupper()
        and index + 1 < len(value)
        and value[index + 1].islower()
    )


@lru_cache(maxsize=1024)
def split_into_words(value: str) -> tuple[str, ...]:
    """Split a raw contract name into capitalized words.

    Separators (``-``, ``.``, ``_`` and space) end the current word and are
    dropped. Case transitions start a new word. Every word is rendered with
    its first character upper-cased and the rest lower-cased, so acronyms are
    flattened.

    Examples:
        >>> split_into_words("my-PET.store")
        ('My', 'Pet', 'Store')
        >>> split_into_words("XMLParser")
        ('Xml', 'Parser')
    """
    words: list[str] = []
    current: list[str] = []

    for index, char in enumerate(value):
        if char in WORD_SEPARATORS:
            if current:
                words.append("".join(current))
                current = []
            continue
        if current and _is_word_boundary(value, index):
            words.append("".join(current))
            current = []
        current.append(char)

    if current:
        words.append("".join(current))

    return tuple(word[0].upper() + word[1:].lower() for word in words)


@lru_cache(maxsize=1024)
def to_identifier(value: str, convention: NamingConvention = NamingConvention.PASCAL_CASE) -> str:
    """Convert a raw name to an identifier in the given convention.

    Examples:
        >>> to_identifier("my-pet-store")
        'MyPetStore'
        >>> to_identifier("my-pet-store", NamingConvention.CAMEL_CASE)
        'myPetStore'
    """
    if convention is NamingConvention.ORIGINAL:
        return value

    joined = "".join(split_into_words(value))
    if not joined:
        return joined
    if convention is NamingConvention.CAMEL_CASE:
        return joined[0].lower() + joined[1:]
    return joined[0].upper() + joined[1:]


def to_pascal_case(value: str) -> str:
    """Convert a string to PascalCase.

    Examples:
        >>> to_pascal_case("hello_world")
        'HelloWorld'
        >>> to_pascal_case("helloWorld")
        'HelloWorld'
    """
    return to_identifier(value, NamingConvention.PASCAL_CASE)


def to_camel_case(value: str) -> str:
    """Convert a string to camelCase."""
    return to_identifier(value, NamingConvention.CAMEL_CASE)


@lru_cache(maxsize=1024)
def to_header_property_name(value: str) -> str:
    """Convert an HTTP header name to a property name.

    A leading ``x-`` (any case) is dropped first, so ``x-correlation-id``
    becomes ``CorrelationId`` and ``Content-Type`` becomes ``ContentType``.
    """
    if value[:2].lower() == "x-":
        value = value[2:]
    return to_pascal_case(value)


@lru_cache(maxsize=1024)
def pluralize(word: str) -> str:
    """Return an approximate English plural of ``word``.

    This is a small rule table, good enough for defaulting names such as a
    collection property. Do not rely on it where the exact plural matters.
    """
    if not word:
        return word

    lower = word.lower()
    if lower.endswith("s"):
        return word
    if lower.endswith("y") and len(word) > 1 and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith(("x", "z", "ch", "sh")):
        return word + "es"
    if lower.endswith("fe"):
        return word[:-2] + "ves"
    if lower.endswith("f"):
        return word[:-1] + "ves"
    return word + "s"
