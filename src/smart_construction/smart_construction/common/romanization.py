"""Helpers that turn a CEO's Korean name into a company display abbreviation.

Example: CEO `홍길동`, base name `건설` → `(HGD) 홍길동 건설`.
"""

from __future__ import annotations

import re
from typing import Optional

_HANGUL_START = 0xAC00
_HANGUL_END = 0xD7A3
_SYLLABLES_PER_INITIAL = 588

INITIALS = (
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)

INITIAL_TO_ROMAN = {
    "ㄱ": "G",
    "ㄲ": "KK",
    "ㄴ": "N",
    "ㄷ": "D",
    "ㄸ": "TT",
    "ㄹ": "R",
    "ㅁ": "M",
    "ㅂ": "B",
    "ㅃ": "PP",
    "ㅅ": "S",
    "ㅆ": "SS",
    "ㅇ": "NG",
    "ㅈ": "J",
    "ㅉ": "JJ",
    "ㅊ": "CH",
    "ㅋ": "K",
    "ㅌ": "T",
    "ㅍ": "P",
    "ㅎ": "H",
}

MAX_ABBREVIATION = 6

_TRAILING_ABBR = re.compile(r"\s*\([A-Z]{1,10}\)\s*$")
_LEADING_ABBR = re.compile(r"^\s*\([A-Z]{1,10}\)\s*")
_LATIN = re.compile(r"[A-Za-z]")


def initial_consonant(char: str) -> Optional[str]:
    """Initial consonant (초성) of a Hangul syllable, None for anything else."""
    if not char:
        return None
    code = ord(char[0])
    if code < _HANGUL_START or code > _HANGUL_END:
        return None
    return INITIALS[(code - _HANGUL_START) // _SYLLABLES_PER_INITIAL]


def initial_to_roman(initial: str) -> str:
    return INITIAL_TO_ROMAN.get(initial, "")


def build_ceo_abbreviation(ceo_name: str) -> str:
    trimmed = (ceo_name or "").strip()
    if not trimmed:
        return ""

    if _LATIN.search(trimmed):
        letters = "".join(part[0] for part in trimmed.split() if part)
        letters = re.sub(r"[^A-Za-z]", "", letters).upper()
        return letters[:MAX_ABBREVIATION]

    pieces = []
    for char in trimmed:
        initial = initial_consonant(char)
        if initial:
            pieces.append(initial_to_roman(initial))
    return re.sub(r"[^A-Z]", "", "".join(pieces))[:MAX_ABBREVIATION]


def strip_abbreviation(value: str) -> str:
    """Remove a `(ABBR)` prefix or suffix."""
    without_trailing = _TRAILING_ABBR.sub("", value or "")
    return _LEADING_ABBR.sub("", without_trailing).strip()


def extract_partner_base_name(display_name: str, ceo_name: str) -> str:
    trimmed = strip_abbreviation(display_name).strip()
    ceo = (ceo_name or "").strip()

    if not ceo:
        return trimmed
    if trimmed == ceo:
        return ""
    if not trimmed.startswith(f"{ceo} "):
        return trimmed
    return trimmed[len(ceo) + 1:].strip()


def build_partner_display_name(current_name: str, ceo_name: str) -> str:
    abbr = build_ceo_abbreviation(ceo_name)
    base = extract_partner_base_name(current_name, ceo_name)
    ceo = (ceo_name or "").strip()

    if not abbr:
        if not ceo:
            return base
        if not base:
            return ceo
        return f"{ceo} {base}"

    if not ceo:
        return f"({abbr}) {base}" if base else f"({abbr})"

    if not base:
        return f"({abbr}) {ceo}"
    return f"({abbr}) {ceo} {base}"
