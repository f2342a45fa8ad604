"""Detect "remember this" instructions in free text.

A deliberately small stand-in for real entity extraction: a message such as
``remember that my sister's name is Sara`` (or its Persian equivalents) yields
the note ``my sister's name is Sara``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

NOTE_KEY = "note"
NOTE_TAGS = ("user-note",)
NOTE_IMPORTANCE = 3

REMEMBER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("fa", re.compile(r"(?:یاد بگیر|به خاطر بسپار|یادت باشه)\s+(.*)", re.IGNORECASE)),
    ("en", re.compile(r"remember that\s+(.*)", re.IGNORECASE)),
)

_STORED_REPLIES = {
    "fa": "باشه! اینو یاد گرفتم: «{value}» ✅",
    "en": 'Got it! I\'ll remember: "{value}" ✅',
}

_NOT_STORED_REPLY = (
    "گرفتم! ({count} مورد در حافظه‌ات دارم). برای ذخیره بگو: «یاد بگیر که ...»"
)


@dataclass(frozen=True)
class RememberMatch:
    """A note pulled out of a message, plus the language of the trigger phrase."""

    value: str
    language: str


def extract_note(text: str) -> RememberMatch | None:
    """Return the first remember-pattern match with a non-empty note."""
    for language, pattern in REMEMBER_PATTERNS:
        m = pattern.search(text)
        if m and m.group(1):
            value = m.group(1).strip()
            if value:
                return RememberMatch(value=value, language=language)
    return None


def build_reply(match: RememberMatch | None, memories_count: int) -> str:
    """Canned acknowledgement for ``POST /message``."""
    if match is not None:
        return _STORED_REPLIES[match.language].format(value=match.value)
    return _NOT_STORED_REPLY.format(count=memories_count)
