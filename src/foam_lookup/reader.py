"""Reader layer: converts the token list into a Dictionary tree."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from .errors import DictionaryReadError, KeyNotFound, ParseError, SubdictNotFound
from .lookup import SEPARATOR, resolve
from .model import DictEntry, Dictionary, Entry, PrimitiveEntry
from .tokenizer import Token, TokenType, tokenize

logger = logging.getLogger(__name__)

_MAX_INCLUDE_DEPTH = 32
_KEYWORD_TYPES = (TokenType.WORD, TokenType.NUMBER, TokenType.STRING)
_CLOSERS = {"(": ")", "[": "]", "{": "}"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_dictionary(
    text: str, name: str = "", base_dir: str | os.PathLike[str] | None = None
) -> Dictionary:
    """Parse *text* into a root Dictionary called *name*.

    Relative ``#include`` paths are resolved against *base_dir* (the working
    directory when omitted).  A single enclosing ``{ ... }`` block around the
    whole input is accepted, so rendered dictionaries read back unchanged.
    """
    dictionary = Dictionary(name)
    reader = _Reader(tokenize(text, name), name, Path(base_dir) if base_dir else None)
    reader.read_root(dictionary)
    return dictionary


def read_file(path: str | os.PathLike[str]) -> Dictionary:
    """Read and parse the dictionary file at *path*."""
    path = Path(path)
    return read_dictionary(_read_text(path), name=str(path), base_dir=path.parent)


def _read_text(path: Path) -> str:
    try:
        with open(path, encoding="utf-8") as fh:
            return fh.read()
    except UnicodeDecodeError as exc:
        raise DictionaryReadError(f"cannot decode file: {exc.reason}", str(path)) from exc
    except OSError as exc:
        raise DictionaryReadError(exc.strerror or str(exc), str(path)) from exc


def lookup_scoped(dictionary: Dictionary, name: str) -> Entry | None:
    """Find the entry a variable *name* refers to, seen from *dictionary*.

    - ``:a.b`` starts at the top-level dictionary.
    - ``.x`` is *x* in *dictionary* itself, ``..x`` in its parent, and so on.
    - ``a.b`` is taken literally first (searching enclosing scopes), then as
      a path through sub-dictionary *a*.
    """
    if name.startswith(":"):
        root = dictionary
        while root.parent is not None:
            root = root.parent
        return _resolve_quietly(root, name[1:])

    if name.startswith(SEPARATOR):
        rest = name.lstrip(SEPARATOR)
        scope: Dictionary | None = dictionary
        for _ in range(len(name) - len(rest) - 1):
            scope = scope.parent if scope is not None else None
        if scope is None or not rest:
            return None
        return _resolve_quietly(scope, rest)

    entry = dictionary.lookup_entry(name, recursive=True)
    if entry is not None or SEPARATOR not in name:
        return entry
    head, rest = name.split(SEPARATOR, 1)
    outer = dictionary.lookup_entry(head, recursive=True)
    if not isinstance(outer, DictEntry):
        return None
    return _resolve_quietly(outer.dictionary, rest)


def _resolve_quietly(dictionary: Dictionary, key: str) -> Entry | None:
    try:
        return resolve(dictionary, key)
    except (KeyNotFound, SubdictNotFound):
        return None


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class _Reader:
    def __init__(
        self, tokens: list[Token], source: str, base_dir: Path | None, depth: int = 0
    ) -> None:
        self.tokens = tokens
        self.source = source
        self.base_dir = base_dir
        self.depth = depth
        self.pos = 0

    def error(self, message: str, token: Token | None = None) -> ParseError:
        if token is not None:
            line = token.line
        else:
            line = self.tokens[-1].line if self.tokens else 1
        return ParseError(message, self.source, line)

    def peek(self) -> Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self, after: Token) -> Token:
        tok = self.peek()
        if tok is None:
            raise self.error(f"unexpected end of input after {after.text!r}", after)
        self.pos += 1
        return tok

    def skip_semicolons(self) -> None:
        while (tok := self.peek()) is not None and tok.is_punctuation(";"):
            self.pos += 1

    # -- Dictionaries ---------------------------------------------------

    def read_root(self, dictionary: Dictionary) -> None:
        first = self.peek()
        if first is None or not first.is_punctuation("{"):
            self.read_entries(dictionary, closing=False)
            return
        self.pos += 1
        self.read_entries(dictionary, closing=True)
        self.skip_semicolons()
        trailing = self.peek()
        if trailing is not None:
            raise self.error(f"unexpected {trailing.text!r} after closing '}}'", trailing)

    def read_entries(self, dictionary: Dictionary, closing: bool) -> None:
        """Read entries into *dictionary* until ``}`` (if *closing*) or end."""
        while True:
            tok = self.peek()
            if tok is None:
                if closing:
                    raise self.error(f"missing '}}' for dictionary {dictionary.name!r}")
                return
            self.pos += 1

            if tok.is_punctuation(";"):
                continue
            if tok.is_punctuation("}"):
                if closing:
                    return
                raise self.error("unexpected '}'", tok)
            if tok.type == TokenType.DIRECTIVE:
                self.read_directive(tok, dictionary)
            elif tok.type == TokenType.VARIABLE:
                self.merge_variable(tok, dictionary)
            elif tok.type in _KEYWORD_TYPES:
                self.read_entry(tok, dictionary)
            else:
                raise self.error(f"keyword expected, found {tok.text!r}", tok)

    def read_entry(self, key_token: Token, dictionary: Dictionary) -> None:
        is_pattern = key_token.type == TokenType.STRING
        keyword = str(key_token.value) if is_pattern else key_token.text
        if is_pattern:
            try:
                re.compile(keyword)
            except re.error as exc:
                raise self.error(f"invalid keyword pattern {keyword!r}: {exc}", key_token) from exc

        nxt = self.peek()
        if nxt is not None and nxt.is_punctuation("{"):
            self.pos += 1
            sub = Dictionary(dictionary.scoped_name(keyword), dictionary)
            self.read_entries(sub, closing=True)
            dictionary.add(DictEntry(keyword, sub, is_pattern))
            return

        values = self.read_value(keyword, key_token)
        if len(values) == 1 and values[0].type == TokenType.VARIABLE:
            target = self.resolve_variable(values[0], dictionary)
            if isinstance(target, DictEntry):
                copied = target.dictionary.copy(dictionary.scoped_name(keyword), dictionary)
                dictionary.add(DictEntry(keyword, copied, is_pattern))
                return
        dictionary.add(PrimitiveEntry(keyword, self.expand(values, dictionary), is_pattern))

    def read_value(self, keyword: str, key_token: Token) -> list[Token]:
        """Collect tokens up to the ``;`` that ends the entry."""
        values: list[Token] = []
        open_lists: list[str] = []
        while True:
            tok = self.peek()
            if tok is None:
                raise self.error(f"missing ';' after entry {keyword!r}", key_token)
            self.pos += 1
            if tok.type == TokenType.PUNCTUATION:
                if tok.value in _CLOSERS:
                    open_lists.append(_CLOSERS[tok.value])
                elif tok.value in (")", "]", "}"):
                    if not open_lists or open_lists.pop() != tok.value:
                        raise self.error(f"unbalanced {tok.value!r} in entry {keyword!r}", tok)
                elif tok.value == ";" and not open_lists:
                    break
            values.append(tok)
        if not values:
            raise self.error(f"entry {keyword!r} has no value", key_token)
        return values

    # -- Variables ------------------------------------------------------

    def resolve_variable(self, tok: Token, dictionary: Dictionary) -> Entry:
        name = str(tok.value)
        entry = lookup_scoped(dictionary, name)
        if entry is None:
            raise self.error(f"undefined variable ${name}", tok)
        logger.debug("Expanding $%s in %s", name, dictionary.name or "<root>")
        return entry

    def expand(self, values: list[Token], dictionary: Dictionary) -> list[Token]:
        expanded: list[Token] = []
        for tok in values:
            if tok.type != TokenType.VARIABLE:
                expanded.append(tok)
                continue
            target = self.resolve_variable(tok, dictionary)
            if isinstance(target, DictEntry):
                raise self.error(f"variable ${tok.value} is a dictionary", tok)
            expanded.extend(target.tokens)
        return expanded

    def merge_variable(self, tok: Token, dictionary: Dictionary) -> None:
        target = self.resolve_variable(tok, dictionary)
        if not isinstance(target, DictEntry):
            raise self.error(f"cannot merge ${tok.value}: not a dictionary", tok)
        dictionary.merge(target.dictionary)
        self.skip_semicolons()

    # -- Directives -----------------------------------------------------

    def read_directive(self, tok: Token, dictionary: Dictionary) -> None:
        name = tok.value
        if name in ("include", "includeIfPresent"):
            arg = self.take(tok)
            if arg.type not in (TokenType.STRING, TokenType.WORD):
                raise self.error(f"file name expected after #{name}", arg)
            path = self.include_path(str(arg.value))
            if name == "includeIfPresent" and not path.exists():
                logger.debug("Skipping missing optional include %s", path)
            else:
                self.include(path, dictionary, tok)
        elif name == "remove":
            self.remove(self.take(tok), dictionary)
        elif name == "inputMode":
            mode = self.take(tok)
            logger.debug("Ignoring #inputMode %s", mode.text)
        else:
            raise self.error(f"unsupported directive #{name}", tok)
        self.skip_semicolons()

    def include_path(self, raw: str) -> Path:
        path = Path(os.path.expandvars(os.path.expanduser(raw)))
        if not path.is_absolute():
            path = (self.base_dir or Path.cwd()) / path
        return path

    def include(self, path: Path, dictionary: Dictionary, tok: Token) -> None:
        if self.depth >= _MAX_INCLUDE_DEPTH:
            raise self.error(f"#include nested deeper than {_MAX_INCLUDE_DEPTH} levels", tok)
        logger.debug("Including %s into %s", path, dictionary.name or "<root>")
        text = _read_text(path)
        reader = _Reader(tokenize(text, str(path)), str(path), path.parent, self.depth + 1)
        reader.read_entries(dictionary, closing=False)

    def remove(self, arg: Token, dictionary: Dictionary) -> None:
        if arg.is_punctuation("("):
            targets: list[Token] = []
            while not (tok := self.take(arg)).is_punctuation(")"):
                targets.append(tok)
        else:
            targets = [arg]

        for target in targets:
            if target.type == TokenType.STRING:
                try:
                    pattern = re.compile(str(target.value))
                except re.error as exc:
                    raise self.error(f"invalid #remove pattern {target.text}: {exc}", target) from exc
                doomed = [k for k in dictionary.keys() if pattern.fullmatch(k)]
            else:
                doomed = [target.text]
            for keyword in doomed:
                dictionary.remove(keyword)
