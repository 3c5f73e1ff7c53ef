"""Input sanitization helpers for request payloads and upstream records."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")
_NULL_LITERALS = {"", "null", "none", "undefined"}


def _strip_control_chars(value: str, *, allow_newlines: bool) -> str:
    cleaned: list[str] = []
    for ch in value:
        if ch == "\n" and allow_newlines:
            cleaned.append(ch)
            continue
        if unicodedata.category(ch) == "Cc":
            continue
        cleaned.append(ch)
    return "".join(cleaned)


def clean_text(value: str | None, *, allow_newlines: bool = False) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = _strip_control_chars(value, allow_newlines=allow_newlines)
    value = value.strip()
    if not allow_newlines:
        value = _WHITESPACE_RE.sub(" ", value)
    else:
        value = "\n".join(line.strip() for line in value.split("\n"))
        value = re.sub(r"\n{3,}", "\n\n", value)
    return value


def clean_single_line(value: str | None) -> str:
    return clean_text(value, allow_newlines=False)


def clean_multiline(value: str | None) -> str:
    return clean_text(value, allow_newlines=True)


def clean_optional_id(value: Any) -> str | None:
    """Normalize a foreign reference: blanks and literal "null" become None."""
    if value is None:
        return None
    cleaned = str(value).strip()
    if cleaned.lower() in _NULL_LITERALS:
        return None
    return cleaned


def same_actor(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return str(left).strip() == str(right).strip()
