"""Ordered set of command trigger strings."""

from __future__ import annotations

from typing import Iterable


class PrefixSet:
    """
    Ordered, de-duplicated trigger strings; the first matching prefix wins.

    The set is never empty: every mutation that would empty it raises
    ``ValueError`` and leaves the current triggers untouched.
    """

    def __init__(self, prefixes: Iterable[str]):
        self._prefixes: list[str] = self._normalize(prefixes)

    @staticmethod
    def _normalize(prefixes: Iterable[str]) -> list[str]:
        cleaned = list(dict.fromkeys(p for p in prefixes if p))
        if not cleaned:
            raise ValueError("at least one prefix is required")
        return cleaned

    def __iter__(self):
        return iter(list(self._prefixes))

    def __len__(self) -> int:
        return len(self._prefixes)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._prefixes

    def as_list(self) -> list[str]:
        return list(self._prefixes)

    @property
    def main(self) -> str:
        return self._prefixes[0]

    def match(self, text: str | None) -> str | None:
        """Return the first prefix that ``text`` starts with."""
        if not text:
            return None
        for prefix in self._prefixes:
            if text.startswith(prefix):
                return prefix
        return None

    def replace(self, prefixes: Iterable[str]) -> list[str]:
        self._prefixes = self._normalize(prefixes)
        return self.as_list()

    def add(self, prefixes: Iterable[str]) -> list[str]:
        return self.replace([*self._prefixes, *prefixes])

    def remove(self, prefixes: Iterable[str]) -> list[str]:
        drop = set(prefixes)
        remaining = [p for p in self._prefixes if p not in drop]
        if not remaining:
            raise ValueError("at least one prefix must remain")
        self._prefixes = remaining
        return self.as_list()
