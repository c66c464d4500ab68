"""Writer: renders tokens, entries and dictionaries back to text.

Dictionaries are written in the layout the reader accepts::

    {
        keyword         value;
        sub
        {
            nested          1;
        }
    }
"""

from __future__ import annotations

from .config import DEFAULT_WRITE_PRECISION
from .model import DictEntry, Dictionary, Entry, PrimitiveEntry
from .tokenizer import Token, TokenType

INDENT = "    "
KEYWORD_WIDTH = 16

_NO_SPACE_AFTER = ("(", "[")
_NO_SPACE_BEFORE = (")", "]", ",")


def format_token(token: Token, precision: int | None = DEFAULT_WRITE_PRECISION) -> str:
    """Textual form of a single token.

    Floats are written with *precision* significant digits (``%g`` style), or
    exactly as read when *precision* is ``None``.  Strings are re-quoted,
    everything else is written as it was read.
    """
    if token.type == TokenType.NUMBER:
        if isinstance(token.value, int):
            return str(token.value)
        if precision is None:
            return token.text or repr(token.value)
        return f"{token.value:.{precision}g}"
    if token.type == TokenType.STRING:
        return '"' + str(token.value).replace("\\", "\\\\").replace('"', '\\"') + '"'
    return token.text or str(token.value)


def format_tokens(tokens: list[Token], precision: int | None = None) -> str:
    """Join tokens with single spaces, hugging list brackets."""
    parts: list[str] = []
    previous: Token | None = None
    for tok in tokens:
        text = format_token(tok, precision)
        glue = previous is None or (
            previous.type == TokenType.PUNCTUATION and previous.value in _NO_SPACE_AFTER
        ) or (tok.type == TokenType.PUNCTUATION and tok.value in _NO_SPACE_BEFORE)
        parts.append(text if glue else " " + text)
        previous = tok
    return "".join(parts)


def _format_keyword(entry: Entry) -> str:
    if entry.is_pattern:
        return '"' + entry.keyword.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return entry.keyword


def write_dictionary(dictionary: Dictionary, level: int = 0) -> str:
    """Render *dictionary* as a brace-delimited block.

    Numbers keep their full precision so the text reads back equal.
    """
    pad = INDENT * level
    lines = [pad + "{"]
    for entry in dictionary.entries():
        keyword = _format_keyword(entry)
        if isinstance(entry, DictEntry):
            lines.append(INDENT * (level + 1) + keyword)
            lines.append(write_dictionary(entry.dictionary, level + 1))
        else:
            spacing = " " * max(KEYWORD_WIDTH - len(keyword), 1)
            value = format_tokens(entry.tokens)
            lines.append(f"{INDENT * (level + 1)}{keyword}{spacing}{value};")
    lines.append(pad + "}")
    return "\n".join(lines)


def render_entry(entry: Entry, precision: int = DEFAULT_WRITE_PRECISION) -> str:
    """Text printed for a looked-up entry.

    A token stream yields its first token only, with floats cut to
    *precision* digits; a dictionary is written in full.
    """
    if isinstance(entry, PrimitiveEntry):
        return format_token(next(entry.stream()), precision)
    if isinstance(entry, DictEntry):
        return write_dictionary(entry.dictionary)
    return str(entry)
