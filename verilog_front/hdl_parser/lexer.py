"""
Hand-written lexer for the synchronous-logic Verilog subset.

Handles:
  - Verilog number formats: plain decimal, sized (8'hFF, 4'b1010, 3'd7)
    and unsized based ('d10, 'hF)
  - Single and two-character operators
  - Whitespace skipping

Comments are not handled here; run the source through
``preprocess.strip_comments`` first.
"""

from typing import Optional

from verilog_front.hdl_parser.tokens import Token, TokenType, KEYWORDS, ONE_CHAR, TWO_CHAR
from verilog_front.hdl_parser.diagnostics import LexError


BASE_DIGITS = {
    "b": "01",
    "o": "01234567",
    "d": "0123456789",
    "h": "0123456789abcdefABCDEF",
}

DECIMAL_DIGITS = "0123456789_"

# Unknown / high-impedance digits and separators are legal in every based literal
EXTRA_DIGITS = "xXzZ_"


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []

    def _peek(self, offset=0) -> str:
        p = self.pos + offset
        if p < len(self.source):
            return self.source[p]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _error(self, offset: Optional[int] = None) -> LexError:
        if offset is None:
            offset = self.pos
        ch = self.source[offset] if offset < len(self.source) else "\0"
        return LexError(ch, offset, self.source)

    def _skip_whitespace(self):
        while not self._at_end() and self._peek() in " \t\r\n\f\v":
            self._advance()

    def _read_number(self) -> Token:
        """Read a Verilog number literal.

        Formats: 123, 1_000, 8'hFF, 4'b1010, 3'd7, 'h1A, 'd10
        """
        start, start_line, start_col = self.pos, self.line, self.col
        num_str = ""

        # Size prefix or plain number
        while not self._at_end() and self._peek() in DECIMAL_DIGITS:
            num_str += self._advance()

        # Based literal: [<size>]'<base><digits>
        if self._peek() == "'":
            num_str += self._advance()  # consume '
            base = self._peek().lower()
            if base not in BASE_DIGITS:
                raise self._error()
            num_str += self._advance()  # consume base char

            allowed = BASE_DIGITS[base] + EXTRA_DIGITS
            digits_start = self.pos
            while not self._at_end() and self._peek() in allowed:
                num_str += self._advance()
            if self.pos == digits_start:
                raise self._error()

        return Token(TokenType.NUMBER, num_str, start, start_line, start_col)

    def _read_ident_or_keyword(self) -> Token:
        start, start_line, start_col = self.pos, self.line, self.col
        ident = ""
        while not self._at_end() and (self._peek().isascii() and
                                      (self._peek().isalnum() or self._peek() == "_")):
            ident += self._advance()

        tt = KEYWORDS.get(ident, TokenType.IDENT)
        return Token(tt, ident, start, start_line, start_col)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source. Returns list of tokens ending with EOF."""
        self.tokens = []

        while True:
            self._skip_whitespace()
            if self._at_end():
                break

            ch = self._peek()
            start, start_line, start_col = self.pos, self.line, self.col

            # Numbers (also unsized based literals like 'h1A)
            if ch.isascii() and ch.isdigit():
                self.tokens.append(self._read_number())
                continue

            if ch == "'":
                self.tokens.append(self._read_number())
                continue

            # Identifiers and keywords
            if ch.isascii() and (ch.isalpha() or ch == "_"):
                self.tokens.append(self._read_ident_or_keyword())
                continue

            ch2 = ch + self._peek(1)
            if ch2 in TWO_CHAR:
                self._advance(); self._advance()
                self.tokens.append(Token(TWO_CHAR[ch2], ch2, start, start_line, start_col))
                continue

            if ch in ONE_CHAR:
                self._advance()
                self.tokens.append(Token(ONE_CHAR[ch], ch, start, start_line, start_col))
                continue

            raise self._error()

        self.tokens.append(Token(TokenType.EOF, "", self.pos, self.line, self.col))
        return self.tokens


def lex(source: str) -> list[Token]:
    """Convenience function: lex source code into tokens."""
    return Lexer(source).tokenize()
