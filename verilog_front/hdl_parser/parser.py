"""
Recursive-descent parser for the synchronous-logic Verilog subset.

Supported constructs:
  - Module declarations with plain or ANSI-style port lists
  - input / output declaration groups with an optional [hi:lo] width
  - reg / wire declarations, wire initializers
  - parameter / localparam constants
  - Sub-module instantiation with named port bindings
  - always @(posedge clk) / always @(negedge clk)
  - if/else, case, begin/end blocks
  - Blocking (=), non-blocking (<=) and procedural (assign) assignments
    to whole signals, single bits and ranges
  - Expressions: arithmetic, bitwise, logical, comparison, shift,
    ternary, concatenation, replication, bit-select, range-select

Number literals are folded to plain integers: 8'hFF becomes Num(255).
The first error aborts the parse; no partial tree is ever returned.
"""

from __future__ import annotations
import logging
from typing import Optional

from verilog_front.hdl_parser.tokens import Token, TokenType, KEYWORDS, ONE_CHAR, TWO_CHAR
from verilog_front.hdl_parser.lexer import lex
from verilog_front.hdl_parser.preprocess import strip_comments
from verilog_front.hdl_parser.diagnostics import (
    ParseError, UnexpectedToken, unexpected,
)
from verilog_front.hdl_parser.ast_nodes import *

log = logging.getLogger(__name__)


# Human-readable spelling of each token type, for "expected ..." messages
SPELLING: dict[TokenType, str] = {
    tt: f"'{text}'" for text, tt in {**KEYWORDS, **TWO_CHAR, **ONE_CHAR}.items()
}
SPELLING[TokenType.IDENT] = "identifier"
SPELLING[TokenType.NUMBER] = "number"
SPELLING[TokenType.EOF] = "end of input"

# Binary operator levels, loosest first. Every level is left associative.
BINARY_LEVELS: tuple[dict[TokenType, Op], ...] = (
    {TokenType.LOR: Op.OR, TokenType.LAND: Op.AND},
    {TokenType.EQ: Op.EQ, TokenType.NEQ: Op.NE},
    {TokenType.LT: Op.LT, TokenType.GT: Op.GT, TokenType.LE: Op.LTE, TokenType.GE: Op.GTE},
    {TokenType.PIPE: Op.BIN_OR, TokenType.AMP: Op.BIN_AND},
    {TokenType.LSHIFT: Op.LSHIFT, TokenType.RSHIFT: Op.RSHIFT},
    {TokenType.PLUS: Op.ADD, TokenType.MINUS: Op.SUB},
    {TokenType.STAR: Op.MUL, TokenType.SLASH: Op.DIV},
)

NUMBER_BASES = {"b": 2, "o": 8, "d": 10, "h": 16}


class Parser:
    """Recursive-descent parser producing a ``Code`` tree."""

    def __init__(self, tokens: list[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    # ---- Token navigation ----

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset=0) -> Token:
        p = self.pos + offset
        if p < len(self.tokens):
            return self.tokens[p]
        return self.tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._cur().type in types

    def _error(self, expected: str, tok: Optional[Token] = None) -> ParseError:
        return unexpected(tok or self._cur(), expected, self.source)

    def _eat(self, tt: TokenType) -> Token:
        tok = self._cur()
        if tok.type != tt:
            raise self._error(SPELLING[tt])
        self.pos += 1
        return tok

    def _eat_if(self, tt: TokenType) -> Optional[Token]:
        if self._cur().type == tt:
            return self._eat(tt)
        return None

    def _expect_semi(self):
        self._eat(TokenType.SEMICOLON)

    def _ident(self) -> Ident:
        return Ident(self._eat(TokenType.IDENT).value)

    # ---- Number literal resolution ----

    @staticmethod
    def resolve_number(raw: str) -> int:
        """Fold a Verilog number literal to a signed 32-bit integer.

        Width and base are discarded. x/z digits read as 0. Values up to
        2**32 - 1 wrap into the negative range; anything larger raises
        ValueError.
        """
        raw = raw.replace("_", "")

        if "'" in raw:
            rest = raw.split("'", 1)[1]
            base = NUMBER_BASES[rest[0].lower()]
            digits = rest[1:]
            for unknown in "xXzZ":
                digits = digits.replace(unknown, "0")
            value = int(digits, base)
        else:
            value = int(raw)

        if value > 0xFFFFFFFF:
            raise ValueError(f"literal {raw} does not fit in 32 bits")
        if value > INT32_MAX:
            value -= 1 << 32
        return value

    # ---- Top-level ----

    def parse(self) -> Code:
        """Parse a complete Verilog source."""
        items = []
        while not self._at(TokenType.EOF):
            if not self._at(TokenType.MODULE):
                raise self._error("'module'")
            items.append(self._parse_module())
        return Code(tuple(items))

    # ---- Module ----

    def _parse_module(self) -> Module:
        self._eat(TokenType.MODULE)
        name = self._ident()

        ports: tuple[Arg, ...] = ()
        if self._eat_if(TokenType.LPAREN):
            if not self._at(TokenType.RPAREN):
                ports = self._parse_port_list()
            self._eat(TokenType.RPAREN)

        self._expect_semi()

        body: list[Decl] = []
        while not self._at(TokenType.ENDMODULE):
            body.extend(self._parse_module_item())

        self._eat(TokenType.ENDMODULE)
        return Module(name=name, ports=ports, body=tuple(body))

    def _parse_port_list(self) -> tuple[Arg, ...]:
        """Parse the header port list.

        Plain style names ports only: (a, b, c). ANSI style starts with a
        direction: (input [7:0] a, b, output c); ports without their own
        direction inherit the previous direction and width.
        """
        ansi = self._at(TokenType.INPUT, TokenType.OUTPUT)
        direction, width = None, None
        ports = []
        while True:
            if ansi and self._at(TokenType.INPUT, TokenType.OUTPUT):
                direction = self._parse_dir()
                width = self._parse_width() if self._at(TokenType.LBRACKET) else None
            ports.append(Arg(name=self._ident(), direction=direction, width=width))
            if not self._eat_if(TokenType.COMMA):
                break
        return tuple(ports)

    def _parse_dir(self) -> Dir:
        if self._eat_if(TokenType.INPUT):
            return Dir.INPUT
        if self._eat_if(TokenType.OUTPUT):
            return Dir.OUTPUT
        raise self._error("'input' or 'output'")

    def _parse_width(self) -> int:
        """Parse [hi:lo] with literal bounds into a bit count."""
        tok = self._cur()
        hi, lo = self._parse_dims()
        if not (isinstance(hi, Num) and isinstance(lo, Num)):
            raise self._error("integer literal range bounds", tok)
        return abs(hi.value - lo.value) + 1

    def _parse_dims(self) -> tuple[Expr, Expr]:
        """Parse [msb:lsb]"""
        self._eat(TokenType.LBRACKET)
        msb = self._parse_expr()
        self._eat(TokenType.COLON)
        lsb = self._parse_expr()
        self._eat(TokenType.RBRACKET)
        return (msb, lsb)

    # ---- Module body items ----

    def _parse_module_item(self) -> list[Decl]:
        """Parse one module body statement. Multi-name declarations
        (reg a, b;) yield one Decl per name."""
        if self._at(TokenType.INPUT, TokenType.OUTPUT):
            return [self._parse_inner_arg()]

        if self._at(TokenType.REG):
            return self._parse_reg()

        if self._at(TokenType.WIRE):
            return self._parse_wire()

        if self._at(TokenType.PARAMETER, TokenType.LOCALPARAM):
            return self._parse_const()

        if self._at(TokenType.ALWAYS):
            return [self._parse_always()]

        # Instantiation: type_name instance_name (...)
        if self._at(TokenType.IDENT) and self._peek(1).type == TokenType.IDENT:
            return [self._parse_let()]

        raise self._error("module item")

    def _parse_inner_arg(self) -> InnerArg:
        direction = self._parse_dir()
        width = self._parse_width() if self._at(TokenType.LBRACKET) else None
        args = [Arg(name=self._ident(), direction=direction, width=width)]
        while self._eat_if(TokenType.COMMA):
            args.append(Arg(name=self._ident(), direction=direction, width=width))
        self._expect_semi()
        return InnerArg(tuple(args))

    def _parse_reg(self) -> list[Reg]:
        self._eat(TokenType.REG)
        dims = self._parse_dims() if self._at(TokenType.LBRACKET) else ()
        regs = [Reg(name=self._ident(), dims=dims)]
        while self._eat_if(TokenType.COMMA):
            regs.append(Reg(name=self._ident(), dims=dims))
        self._expect_semi()
        return regs

    def _parse_wire(self) -> list[Wire]:
        self._eat(TokenType.WIRE)
        dims = self._parse_dims() if self._at(TokenType.LBRACKET) else ()
        wires = []
        while True:
            name = self._ident()
            init = self._parse_expr() if self._eat_if(TokenType.ASSIGN_OP) else None
            wires.append(Wire(name=name, dims=dims, init=init))
            if not self._eat_if(TokenType.COMMA):
                break
        self._expect_semi()
        return wires

    def _parse_const(self) -> list[Const]:
        self._eat(self._cur().type)  # parameter / localparam
        consts = []
        while True:
            name = self._ident()
            self._eat(TokenType.ASSIGN_OP)
            consts.append(Const(name=name, value=self._parse_expr()))
            if not self._eat_if(TokenType.COMMA):
                break
        self._expect_semi()
        return consts

    def _parse_let(self) -> Let:
        type_name = self._ident()
        instance_name = self._ident()

        # Port bindings: (.port(signal), ...)
        bindings = []
        self._eat(TokenType.LPAREN)
        if not self._at(TokenType.RPAREN):
            while True:
                self._eat(TokenType.DOT)
                port = self._ident()
                self._eat(TokenType.LPAREN)
                expr = self._parse_expr()
                self._eat(TokenType.RPAREN)
                bindings.append(Binding(port=port, expr=expr))
                if not self._eat_if(TokenType.COMMA):
                    break
        self._eat(TokenType.RPAREN)

        self._expect_semi()
        return Let(type_name=type_name, instance_name=instance_name, bindings=tuple(bindings))

    # ---- Always blocks ----

    def _parse_always(self) -> Always:
        self._eat(TokenType.ALWAYS)
        self._eat(TokenType.AT)
        self._eat(TokenType.LPAREN)

        if self._eat_if(TokenType.POSEDGE):
            edge = Edge.POS
        elif self._eat_if(TokenType.NEGEDGE):
            edge = Edge.NEG
        else:
            raise self._error("'posedge' or 'negedge'")
        signal = self._ident()

        self._eat(TokenType.RPAREN)
        return Always(edge=EdgeRef(signal=signal, edge=edge), body=self._parse_seq_block())

    def _parse_seq_block(self) -> SeqBlock:
        """Parse either begin...end or a single statement.

        begin/end around exactly one statement yields Single, never a
        one-element Block.
        """
        if not self._eat_if(TokenType.BEGIN):
            return Single(self._parse_seq())

        stmts = [self._parse_seq()]
        while not self._at(TokenType.END):
            stmts.append(self._parse_seq())
        self._eat(TokenType.END)
        return SeqBlock.of(stmts)

    def _parse_seq(self) -> Seq:
        if self._at(TokenType.IF):
            return self._parse_if()

        if self._at(TokenType.CASE):
            return self._parse_match()

        if self._eat_if(TokenType.ASSIGN):
            return self._parse_assign(static=True)

        if self._at(TokenType.IDENT):
            return self._parse_assign(static=False)

        raise self._error("statement")

    def _parse_if(self) -> If:
        self._eat(TokenType.IF)
        self._eat(TokenType.LPAREN)
        cond = self._parse_expr()
        self._eat(TokenType.RPAREN)

        then = self._parse_seq_block()
        # A nested if has already claimed any else that belongs to it
        otherwise = self._parse_seq_block() if self._eat_if(TokenType.ELSE) else None

        return If(cond=cond, then=then, otherwise=otherwise)

    def _parse_match(self) -> Match:
        self._eat(TokenType.CASE)
        self._eat(TokenType.LPAREN)
        selector = self._parse_expr()
        self._eat(TokenType.RPAREN)

        if self._at(TokenType.ENDCASE):
            raise self._error("case item")

        arms = []
        while not self._at(TokenType.ENDCASE):
            patterns = [self._parse_expr()]
            while self._eat_if(TokenType.COMMA):
                patterns.append(self._parse_expr())
            self._eat(TokenType.COLON)
            arms.append(MatchArm(patterns=tuple(patterns), body=self._parse_seq_block()))

        self._eat(TokenType.ENDCASE)
        return Match(selector=selector, arms=tuple(arms))

    def _parse_assign(self, static: bool) -> Seq:
        target = self._ident()

        high = low = None
        if self._eat_if(TokenType.LBRACKET):
            high = self._parse_expr()
            if self._eat_if(TokenType.COLON):
                low = self._parse_expr()
            self._eat(TokenType.RBRACKET)

        if static:
            self._eat(TokenType.ASSIGN_OP)
            kind = BlockType.STATIC
        elif self._eat_if(TokenType.ASSIGN_OP):
            kind = BlockType.BLOCKING
        elif self._eat_if(TokenType.LE):
            kind = BlockType.NON_BLOCKING
        else:
            raise self._error("'=' or '<='")

        value = self._parse_expr()
        self._expect_semi()

        if high is None:
            return Set(kind=kind, target=target, value=value)
        if low is None:
            return SetIndex(kind=kind, target=target, index=high, value=value)
        return SetRange(kind=kind, target=target, high=high, low=low, value=value)

    # ---- Expression parsing (precedence climbing) ----

    def _parse_expr(self) -> Expr:
        return self._parse_ternary()

    def _parse_ternary(self) -> Expr:
        expr = self._parse_binary(0)
        if self._eat_if(TokenType.QUESTION):
            then = self._parse_expr()
            self._eat(TokenType.COLON)
            otherwise = self._parse_ternary()
            return Ternary(cond=expr, then=then, otherwise=otherwise)
        return expr

    def _parse_binary(self, level: int) -> Expr:
        if level == len(BINARY_LEVELS):
            return self._parse_unary()

        ops = BINARY_LEVELS[level]
        left = self._parse_binary(level + 1)
        while self._cur().type in ops:
            op = ops[self._eat(self._cur().type).type]
            right = self._parse_binary(level + 1)
            left = Arith(op=op, left=left, right=right)
        return left

    def _parse_unary(self) -> Expr:
        if self._eat_if(TokenType.BANG):
            return Unary(op=UnaryOp.NOT, operand=self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        tok = self._cur()

        # Number literal
        if self._at(TokenType.NUMBER):
            self._eat(TokenType.NUMBER)
            try:
                return Num(self.resolve_number(tok.value))
            except ValueError as e:
                raise UnexpectedToken(tok, "number that fits in 32 bits", self.source) from e

        # Identifier with optional bit / range select
        if self._at(TokenType.IDENT):
            ident = self._ident()
            if not self._eat_if(TokenType.LBRACKET):
                return Ref(ident)
            high = self._parse_expr()
            low = self._parse_expr() if self._eat_if(TokenType.COLON) else None
            self._eat(TokenType.RBRACKET)
            return Slice(ident=ident, high=high, low=low)

        # Parenthesized expression
        if self._eat_if(TokenType.LPAREN):
            expr = self._parse_expr()
            self._eat(TokenType.RPAREN)
            return expr

        # Concatenation or replication: {a, b} or {4{a}}
        if self._at(TokenType.LBRACE):
            return self._parse_concat_or_repeat()

        raise self._error("expression")

    def _parse_concat_or_repeat(self) -> Expr:
        self._eat(TokenType.LBRACE)

        first = self._parse_expr()

        # Replication: {count{expr}} or {count{a, b}}
        if self._eat_if(TokenType.LBRACE):
            inner = [self._parse_expr()]
            while self._eat_if(TokenType.COMMA):
                inner.append(self._parse_expr())
            self._eat(TokenType.RBRACE)
            self._eat(TokenType.RBRACE)
            value = inner[0] if len(inner) == 1 else Concat(tuple(inner))
            return Repeat(count=first, value=value)

        # Concatenation: {a, b, c, ...}
        parts = [first]
        while self._eat_if(TokenType.COMMA):
            parts.append(self._parse_expr())
        self._eat(TokenType.RBRACE)
        return Concat(tuple(parts))


# ============================================================
# Public API
# ============================================================

def parse_verilog(source: str) -> Code:
    """Parse comment-free Verilog source code into an AST."""
    tokens = lex(source)
    parser = Parser(tokens, source)
    return parser.parse()


def parse(source: str) -> Code:
    """Strip ``//`` comments, then parse.

    Comments are blanked rather than removed, so error offsets index
    ``source`` as given.
    """
    log.debug("Parsing %d characters of Verilog", len(source))
    try:
        code = parse_verilog(strip_comments(source, keep_offsets=True))
    except ParseError as e:
        e.attach_source(source)
        raise
    log.debug("Parsed %d module(s): %s", len(code), ", ".join(m.name.name for m in code.modules))
    return code
