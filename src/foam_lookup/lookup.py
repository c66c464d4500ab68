"""Path resolution for dotted keys."""

from __future__ import annotations

import logging
from typing import Iterator

from .errors import KeyNotFound, SubdictNotFound
from .model import Dictionary, Entry

logger = logging.getLogger(__name__)

SEPARATOR = "."


def split_key_path(key: str) -> Iterator[str]:
    """Yield the ``.``-separated segments of *key* lazily.

    Empty segments are yielded as empty strings.
    """
    start = 0
    while (idx := key.find(SEPARATOR, start)) != -1:
        yield key[start:idx]
        start = idx + 1
    yield key[start:]


def resolve(dictionary: Dictionary, key: str) -> Entry:
    """Return the entry addressed by *key* in *dictionary*.

    - Plain key: looked up in *dictionary* itself.
    - ``a.b.c``: descend into sub-dictionaries ``a`` then ``b``, then look
      up ``c``.

    Raises SubdictNotFound when a leading segment is not a sub-dictionary,
    and KeyNotFound when the final segment is absent.
    """
    if SEPARATOR not in key:
        entry = dictionary.lookup_entry(key)
        if entry is None:
            raise KeyNotFound(key, dictionary.name)
        return entry

    current = dictionary
    segments = split_key_path(key)
    segment = next(segments)
    for following in segments:
        sub = current.sub_dict(segment)
        if sub is None:
            raise SubdictNotFound(segment)
        logger.debug("Descending into %s", sub.name)
        current = sub
        segment = following

    entry = current.lookup_entry(segment)
    if entry is None:
        raise KeyNotFound(segment, current.name, dotted=True)
    return entry
