"""
HwrX — short names for fixed-width name fields
"""

from __future__ import annotations
import re
from typing import Set

BAD_CHARS = "\r\n\t"


class ShortNamer:
    """Squeezes free-form names into a device name field."""

    def __init__(self, length: int, badchars: str = BAD_CHARS, must_upper: bool = False,
                 must_uniq: bool = False, whitespace_ok: bool = True,
                 repeating_whitespace_ok: bool = True, default_name: str = "WPT"):
        self.length = length
        self.badchars = badchars
        self.must_upper = must_upper
        self.must_uniq = must_uniq
        self.whitespace_ok = whitespace_ok
        self.repeating_whitespace_ok = repeating_whitespace_ok
        self.default_name = default_name
        self._seen: Set[str] = set()

    def shorten(self, name: str) -> str:
        name = "".join(c for c in (name or "") if c not in self.badchars).strip()
        if not self.whitespace_ok:
            name = re.sub(r"\s+", "", name)
        elif not self.repeating_whitespace_ok:
            name = re.sub(r"\s{2,}", " ", name)
        if self.must_upper:
            name = name.upper()
        name = name[:self.length] or self.default_name[:self.length]
        if self.must_uniq:
            name = self._uniquify(name)
        return name

    def _uniquify(self, name: str) -> str:
        candidate = name
        n = 1
        while candidate in self._seen:
            suffix = f".{n}"
            candidate = name[:self.length - len(suffix)] + suffix
            n += 1
        self._seen.add(candidate)
        return candidate
