"""Tokenizer: converts dictionary source text into a flat token list."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union

from .errors import ParseError


class TokenType(Enum):
    WORD = auto()
    NUMBER = auto()
    STRING = auto()
    PUNCTUATION = auto()
    DIRECTIVE = auto()    # #include, #remove, ...
    VARIABLE = auto()     # $name, ${name}
    VERBATIM = auto()     # #{ ... #}


@dataclass(slots=True)
class Token:
    type: TokenType
    value: Union[str, int, float]
    text: str = field(default="", compare=False)  # source spelling
    line: int = field(default=0, compare=False)

    def is_punctuation(self, char: str) -> bool:
        return self.type == TokenType.PUNCTUATION and self.value == char


_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")

PUNCTUATION = frozenset(";{}()[],")
_WORD_STOP = frozenset(PUNCTUATION | {'"', "'"}) - {"(", ")"}


# ---------------------------------------------------------------------------
# Atom classification
# ---------------------------------------------------------------------------

def classify_atom(atom: str, line: int = 0) -> Token:
    """Turn a bare atom into a NUMBER or WORD token."""
    if _INT_RE.match(atom):
        return Token(TokenType.NUMBER, int(atom), atom, line)
    if _FLOAT_RE.match(atom):
        return Token(TokenType.NUMBER, float(atom), atom, line)
    return Token(TokenType.WORD, atom, atom, line)


def unescape_string(body: str) -> str:
    r"""Resolve ``\"`` and ``\\`` escapes; other backslashes are kept."""
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body) and body[i + 1] in ('"', "\\"):
            out.append(body[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class _Scanner:
    def __init__(self, text: str, source: str) -> None:
        self.text = text
        self.source = source
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []

    def error(self, message: str, line: int | None = None) -> ParseError:
        return ParseError(message, self.source, self.line if line is None else line)

    def peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < len(self.text) else ""

    def advance(self, n: int = 1) -> str:
        chunk = self.text[self.pos:self.pos + n]
        self.line += chunk.count("\n")
        self.pos += n
        return chunk

    def at_comment(self) -> bool:
        return self.peek() == "/" and self.peek(1) in ("/", "*")

    def skip_comment(self) -> None:
        start = self.line
        if self.peek(1) == "/":
            end = self.text.find("\n", self.pos)
            self.advance((end if end != -1 else len(self.text)) - self.pos)
            return
        end = self.text.find("*/", self.pos + 2)
        if end == -1:
            raise self.error("unterminated block comment", start)
        self.advance(end + 2 - self.pos)

    def scan(self) -> list[Token]:
        while self.pos < len(self.text):
            ch = self.peek()
            if ch.isspace():
                self.advance()
            elif self.at_comment():
                self.skip_comment()
            elif ch in PUNCTUATION:
                self.tokens.append(Token(TokenType.PUNCTUATION, ch, ch, self.line))
                self.advance()
            elif ch == '"':
                self.scan_string()
            elif ch == "#" and self.peek(1) == "{":
                self.scan_verbatim()
            elif ch == "#":
                line = self.line
                self.advance()
                name = self.scan_atom()
                if not name:
                    raise self.error("directive name expected after '#'")
                self.tokens.append(Token(TokenType.DIRECTIVE, name, "#" + name, line))
            elif ch == "$":
                self.scan_variable()
            else:
                line = self.line
                atom = self.scan_atom()
                if not atom:
                    raise self.error(f"unexpected character {ch!r}")
                self.tokens.append(classify_atom(atom, line))
        return self.tokens

    def scan_atom(self) -> str:
        """Read a word; parentheses glued to a word are kept when balanced."""
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            ch = self.peek()
            if ch.isspace() or self.at_comment():
                break
            if ch == "(":
                if self.pos == start:
                    break
                depth += 1
            elif ch == ")":
                if depth == 0:
                    break
                depth -= 1
            elif ch in _WORD_STOP and not (depth and ch == ","):
                # ',' inside div(phi,U) is part of the word
                break
            self.advance()
        if depth:
            raise self.error("unbalanced '(' in word")
        return self.text[start:self.pos]

    def scan_string(self) -> None:
        line = self.line
        i = self.pos + 1
        while i < len(self.text):
            if self.text[i] == "\\":
                i += 2
                continue
            if self.text[i] == '"':
                break
            i += 1
        else:
            raise self.error("unterminated string", line)
        raw = self.text[self.pos:i + 1]
        self.advance(i + 1 - self.pos)
        self.tokens.append(Token(TokenType.STRING, unescape_string(raw[1:-1]), raw, line))

    def scan_verbatim(self) -> None:
        line = self.line
        end = self.text.find("#}", self.pos + 2)
        if end == -1:
            raise self.error("unterminated verbatim block", line)
        raw = self.advance(end + 2 - self.pos)
        self.tokens.append(Token(TokenType.VERBATIM, raw[2:-2], raw, line))

    def scan_variable(self) -> None:
        line = self.line
        start = self.pos
        self.advance()
        if self.peek() == "{":
            end = self.text.find("}", self.pos)
            if end == -1:
                raise self.error("unterminated '${'", line)
            name = self.advance(end + 1 - self.pos)[1:-1]
        else:
            name = self.scan_atom()
        if not name:
            raise self.error("variable name expected after '$'", line)
        self.tokens.append(Token(TokenType.VARIABLE, name, self.text[start:self.pos], line))


def tokenize(text: str, source: str = "") -> list[Token]:
    """Split *text* into tokens, skipping whitespace and comments.

    *source* names the input in error messages.
    """
    return _Scanner(text, source).scan()
