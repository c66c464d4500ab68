"""Data model: dictionaries and their entries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Union

from .tokenizer import Token


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class PrimitiveEntry:
    """A keyword followed by a stream of one or more tokens."""

    keyword: str
    tokens: list[Token]
    is_pattern: bool = False

    def stream(self) -> Iterator[Token]:
        return iter(self.tokens)


@dataclass(slots=True)
class DictEntry:
    keyword: str
    dictionary: Dictionary
    is_pattern: bool = False


Entry = Union[PrimitiveEntry, DictEntry]


# ---------------------------------------------------------------------------
# Dictionary
# ---------------------------------------------------------------------------

class Dictionary:
    """Ordered, uniquely-keyed mapping from keyword to Entry.

    ``name`` is used for diagnostics only.  ``parent`` is the enclosing
    dictionary (``None`` at the root) and is consulted by recursive lookups.
    Keywords declared as quoted strings are regular expressions, matched
    against the whole key after literal keywords fail.
    """

    def __init__(self, name: str = "", parent: Dictionary | None = None) -> None:
        self.name = name
        self.parent = parent
        self._entries: dict[str, Entry] = {}
        self._patterns: dict[str, re.Pattern[str]] = {}

    # -- Container protocol ---------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.found(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dictionary):
            return NotImplemented
        return list(self._entries.values()) == list(other._entries.values())

    def __repr__(self) -> str:
        return f"Dictionary(name={self.name!r}, keys={list(self._entries)!r})"

    def keys(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def scoped_name(self, keyword: str) -> str:
        """Name given to a sub-dictionary declared under *keyword*."""
        return f"{self.name}.{keyword}" if self.name else keyword

    # -- Modification (reader only) -------------------------------------

    def add(self, entry: Entry, merge: bool = True) -> None:
        """Insert *entry*; a repeated keyword replaces the earlier entry.

        With *merge*, a dictionary declared over an existing dictionary is
        merged into it instead.
        """
        existing = self._entries.get(entry.keyword)
        if (
            merge
            and isinstance(existing, DictEntry)
            and isinstance(entry, DictEntry)
        ):
            existing.dictionary.merge(entry.dictionary)
            return

        self._entries[entry.keyword] = entry
        if entry.is_pattern:
            self._patterns[entry.keyword] = re.compile(entry.keyword)
        else:
            self._patterns.pop(entry.keyword, None)

    def merge(self, other: Dictionary) -> None:
        """Add copies of all entries of *other*, merging nested dictionaries."""
        for entry in other.entries():
            self.add(_reparent(entry, self), merge=True)

    def remove(self, keyword: str) -> bool:
        self._patterns.pop(keyword, None)
        return self._entries.pop(keyword, None) is not None

    # -- Lookup ---------------------------------------------------------

    def lookup_entry(
        self, key: str, recursive: bool = False, pattern_match: bool = True
    ) -> Entry | None:
        """Find the entry for *key*, or ``None``.

        Literal keywords win over patterns; among patterns the most recently
        declared one wins.  With *recursive* the search continues in the
        parent dictionaries.
        """
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        if pattern_match:
            for keyword in reversed(list(self._patterns)):
                if self._patterns[keyword].fullmatch(key):
                    return self._entries[keyword]
        if recursive and self.parent is not None:
            return self.parent.lookup_entry(key, recursive, pattern_match)
        return None

    def found(self, key: str, recursive: bool = False, pattern_match: bool = True) -> bool:
        return self.lookup_entry(key, recursive, pattern_match) is not None

    def is_dict(self, key: str) -> bool:
        return isinstance(self.lookup_entry(key), DictEntry)

    def sub_dict(self, key: str) -> Dictionary | None:
        entry = self.lookup_entry(key)
        if isinstance(entry, DictEntry):
            return entry.dictionary
        return None

    # -- Copy -----------------------------------------------------------

    def copy(self, name: str = "", parent: Dictionary | None = None) -> Dictionary:
        """Deep copy, renamed and attached to *parent*."""
        new = Dictionary(name, parent)
        for entry in self._entries.values():
            new.add(_reparent(entry, new), merge=False)
        return new


def _reparent(entry: Entry, parent: Dictionary) -> Entry:
    if isinstance(entry, DictEntry):
        sub = entry.dictionary.copy(parent.scoped_name(entry.keyword), parent)
        return DictEntry(entry.keyword, sub, entry.is_pattern)
    return PrimitiveEntry(entry.keyword, list(entry.tokens), entry.is_pattern)
