"""String transforms deriving code identifiers and file names from layer names."""

from __future__ import annotations

import re
from typing import List

FALLBACK_NAME = "unnamed"
VARIABLE_PREFIX = "var"
CLASS_PREFIX = "Class"

_WORD_SEPARATORS = re.compile(r"[/\-_\s.]+")
_DESCRIPTION_SEPARATORS = re.compile(r"[/\-_]+")
_PUNCTUATION = re.compile(r"[#%&*+=<>!@$^|~`()\[\]{}:;\".,?/\\-]")
_INVALID_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_IDENTIFIER_START = re.compile(r"^[a-zA-Z_]")
_CLASS_START = re.compile(r"^[a-zA-Z]")


def split_words(value: str) -> List[str]:
    return [word for word in _WORD_SEPARATORS.split(value) if word]


def to_camel_case(value: str) -> str:
    """``Primary/Blue-500`` -> ``primaryBlue500``."""
    words = [word.lower() for word in split_words(value)]
    if not words:
        return ""
    return words[0] + "".join(_capitalize(word) for word in words[1:])


def to_pascal_case(value: str) -> str:
    return "".join(_capitalize(word.lower()) for word in split_words(value))


def to_snake_case(value: str) -> str:
    """``Icon/Arrow Right`` -> ``icon_arrow_right``."""
    return "_".join(word.lower() for word in split_words(value))


def to_variable_name(value: str) -> str:
    """Return a valid lowerCamel identifier, never empty.

    Empty or fully unconvertible input yields ``unnamed``; a result that does
    not start with a letter or underscore is prefixed with ``var``.
    """
    cleaned = " ".join(_PUNCTUATION.sub(" ", value).split())
    if not cleaned:
        return FALLBACK_NAME
    camel = _INVALID_IDENTIFIER_CHARS.sub("", to_camel_case(cleaned))
    if not camel:
        return FALLBACK_NAME
    if not _IDENTIFIER_START.match(camel):
        return f"{VARIABLE_PREFIX}{camel}"
    return camel


def to_class_name(value: str) -> str:
    pascal = _INVALID_IDENTIFIER_CHARS.sub("", to_pascal_case(value))
    if pascal and not _CLASS_START.match(pascal):
        return f"{CLASS_PREFIX}{pascal}"
    return pascal


def to_description(value: str) -> str:
    """``background-color-light`` -> ``Background Color Light``."""
    words = [word for word in _DESCRIPTION_SEPARATORS.split(value) if word]
    return " ".join(_capitalize(word.lower()) for word in words)


def _capitalize(word: str) -> str:
    if not word:
        return word
    return word[0].upper() + word[1:]


__all__ = [
    "FALLBACK_NAME",
    "split_words",
    "to_camel_case",
    "to_class_name",
    "to_description",
    "to_pascal_case",
    "to_snake_case",
    "to_variable_name",
]
