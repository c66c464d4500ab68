"""foam_lookup — look up entries of OpenFOAM-style dictionaries."""

from .config import Settings
from .errors import (
    DictionaryFileNotFound,
    DictionaryReadError,
    FoamLookupError,
    KeyNotFound,
    MissingKeyArgument,
    ParseError,
    SubdictNotFound,
    UsageError,
)
from .lookup import resolve, split_key_path
from .model import DictEntry, Dictionary, Entry, PrimitiveEntry
from .reader import lookup_scoped, read_dictionary, read_file
from .tokenizer import Token, TokenType, tokenize
from .writer import format_token, render_entry, write_dictionary

__all__ = [
    "read_dictionary",
    "read_file",
    "lookup_scoped",
    "resolve",
    "split_key_path",
    "render_entry",
    "write_dictionary",
    "format_token",
    "tokenize",
    "Token",
    "TokenType",
    "Dictionary",
    "Entry",
    "PrimitiveEntry",
    "DictEntry",
    "Settings",
    "FoamLookupError",
    "MissingKeyArgument",
    "UsageError",
    "DictionaryFileNotFound",
    "KeyNotFound",
    "SubdictNotFound",
    "DictionaryReadError",
    "ParseError",
]
