"""
Source-located diagnostics for the Verilog front end.

Maps flat source offsets to (line, column) positions, renders numbered
source excerpts with a caret under the offending character, and defines
the exception hierarchy raised by the lexer and parser.

Offsets index the ``str`` handed to the lexer. For ASCII sources (the
only characters the lexer accepts outside of comments) they are equal to
byte offsets.
"""

from __future__ import annotations
from typing import Optional

from verilog_front.hdl_parser.tokens import Token, TokenType


CONTEXT_LINES = 3


# ============================================================
# Offset mapping and excerpts
# ============================================================

def locate(source: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of ``offset`` in ``source``.

    Lines are counted on ``\\n`` boundaries. ``offset == len(source)`` is
    valid and points just past the last character.
    """
    if offset < 0 or offset > len(source):
        raise ValueError(f"offset {offset} outside source of length {len(source)}")

    line_start = 0
    lines = source.split("\n")
    for number, text in enumerate(lines, start=1):
        if offset <= line_start + len(text):
            return number, offset - line_start + 1
        line_start += len(text) + 1

    # split() always yields a final element that covers len(source)
    raise AssertionError("unreachable")


def _numbered(number: int, text: str) -> str:
    return f"{number:>3} | {text.rstrip(chr(13))}"


def report(source: str, offset: int, context: int = CONTEXT_LINES) -> str:
    """Render up to ``context`` numbered lines ending at the line holding
    ``offset``, followed by a caret line pointing at its column.

    Example::

          1 | module m( ; endmodule
        ~~~~~~~~~~~~~~~~^
    """
    line, col = locate(source, offset)
    lines = source.split("\n")

    first = max(1, line - context + 1)
    out = [_numbered(n, lines[n - 1]) for n in range(first, line + 1)]

    gutter = len(_numbered(line, ""))
    out.append("~" * (gutter + col - 1) + "^")
    return "\n".join(out)


def listing(source: str) -> str:
    """Number every line of ``source``."""
    return "\n".join(_numbered(n, text) for n, text in enumerate(source.splitlines(), start=1))


# ============================================================
# Errors
# ============================================================

class ParseError(Exception):
    """Base class for every failure that aborts a parse.

    Carries the offending ``offset`` and, when known, the ``source`` it
    indexes so the message can include a located excerpt. ``offset`` is a
    ``str`` index into ``source``; ``byte_offset`` is the same position in
    its UTF-8 encoding. The two differ only after non-ASCII text, which
    can appear in comments.
    """

    def __init__(self, message: str, offset: int, source: Optional[str] = None):
        self.message = message
        self.offset = offset
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        if self.source is None:
            return f"{self.message} (offset {self.offset})"
        line, col = locate(self.source, self.offset)
        return f"{self.message} at L{line}:{col}\n{report(self.source, self.offset)}"

    def attach_source(self, source: str) -> ParseError:
        """Re-point the excerpt at ``source`` (same offsets, e.g. the
        caller's text before comments were blanked)."""
        self.source = source
        self.args = (self._format(),)
        return self

    @property
    def location(self) -> Optional[tuple[int, int]]:
        if self.source is None:
            return None
        return locate(self.source, self.offset)

    @property
    def byte_offset(self) -> Optional[int]:
        if self.source is None:
            return None
        return len(self.source[:self.offset].encode("utf-8"))

    def excerpt(self) -> str:
        if self.source is None:
            return ""
        return report(self.source, self.offset)


class InvalidToken(ParseError):
    """The lexer rejected a position independent of grammar context."""


class LexError(InvalidToken):
    """A character cannot start or continue any valid token."""

    def __init__(self, char: str, offset: int, source: Optional[str] = None):
        self.char = char
        super().__init__(f"Lexer error: unexpected character {char!r}", offset, source)


class UnexpectedToken(ParseError):
    """The next token is not valid at the parser's grammar position."""

    def __init__(self, found: Token, expected: str, source: Optional[str] = None):
        self.found = found
        self.expected = expected
        super().__init__(
            f"Parse error: expected {expected}, got {found.type.name} {found.value!r}",
            found.offset, source)


class UnexpectedEnd(ParseError):
    """Input ended while a construct was still open."""

    def __init__(self, offset: int, expected: str, source: Optional[str] = None):
        self.expected = expected
        super().__init__(f"Parse error: unexpected end of input, expected {expected}",
                         offset, source)


UnexpectedEndOfInput = UnexpectedEnd


def unexpected(tok: Token, expected: str, source: Optional[str] = None) -> ParseError:
    """Build the right error for ``tok`` appearing where ``expected`` was due."""
    if tok.type == TokenType.EOF:
        return UnexpectedEnd(tok.offset, expected, source)
    return UnexpectedToken(tok, expected, source)
