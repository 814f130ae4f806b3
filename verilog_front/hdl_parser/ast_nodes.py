"""
Abstract Syntax Tree nodes for the synchronous-logic Verilog subset.

The AST is a strict tree: every node owns its children, nothing is shared
and nothing is mutated after construction. Nodes are frozen dataclasses,
so equality and hashing are structural and ``repr`` doubles as the debug
format. Sequence fields are stored as tuples; lists passed to a
constructor are converted.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

from verilog_front.hdl_parser.tokens import KEYWORDS

IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


# ============================================================
# Base
# ============================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                object.__setattr__(self, f.name, tuple(value))


@dataclass(frozen=True)
class Ident(ASTNode):
    """A non-empty, case-sensitive identifier that is not a keyword."""
    name: str = ""

    def __post_init__(self):
        super().__post_init__()
        if not self.name:
            raise ValueError("identifier must be non-empty")
        if not IDENT_RE.fullmatch(self.name) or self.name in KEYWORDS:
            raise ValueError(f"{self.name!r} is not a valid identifier")

    def __str__(self):
        return self.name


# ============================================================
# Enumerations
# ============================================================

class Dir(Enum):
    """Port direction."""
    INPUT = "input"
    OUTPUT = "output"


class Edge(Enum):
    """Clock edge polarity."""
    POS = "posedge"
    NEG = "negedge"


class BlockType(Enum):
    """Assignment kind inside a sequential block."""
    BLOCKING = "="
    NON_BLOCKING = "<="
    STATIC = "assign"


class Op(Enum):
    """Binary operators, valued by their Verilog spelling."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    LTE = "<="
    GTE = ">="
    AND = "&&"
    OR = "||"
    LT = "<"
    GT = ">"
    NE = "!="
    BIN_OR = "|"
    BIN_AND = "&"
    LSHIFT = "<<"
    RSHIFT = ">>"


class UnaryOp(Enum):
    NOT = "!"


# ============================================================
# Expressions
# ============================================================

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


@dataclass(frozen=True)
class Expr(ASTNode):
    """Base class for expressions."""

    def to_int(self) -> int:
        """Value of a ``Num``; any other expression is a caller error."""
        raise TypeError(f"to_int() called on non-Num expression {self!r}")


@dataclass(frozen=True)
class Ref(Expr):
    """A signal reference: my_signal"""
    ident: Ident = None


@dataclass(frozen=True)
class Slice(Expr):
    """Bit or range select: signal[3] or signal[7:0]"""
    ident: Ident = None
    high: Expr = None
    low: Optional[Expr] = None  # None for single-bit select


@dataclass(frozen=True)
class Ternary(Expr):
    """cond ? then : otherwise"""
    cond: Expr = None
    then: Expr = None
    otherwise: Expr = None


@dataclass(frozen=True)
class Concat(Expr):
    """Concatenation, most significant part first: {a, b, c}"""
    parts: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class Repeat(Expr):
    """Replication: {4{a}}"""
    count: Expr = None
    value: Expr = None


@dataclass(frozen=True)
class Arith(Expr):
    """Binary operation: a + b, a == b, a << 2, ..."""
    op: Op = Op.ADD
    left: Expr = None
    right: Expr = None


@dataclass(frozen=True)
class Unary(Expr):
    """Unary operation: !a"""
    op: UnaryOp = UnaryOp.NOT
    operand: Expr = None


@dataclass(frozen=True)
class Num(Expr):
    """An evaluated integer literal. Width and base of sized literals
    (8'hFF) are folded away by the parser."""
    value: int = 0

    def __post_init__(self):
        super().__post_init__()
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"Num value {self.value} does not fit in 32 signed bits")

    def to_int(self) -> int:
        return self.value


# ============================================================
# Sequential statements
# ============================================================

@dataclass(frozen=True)
class Seq(ASTNode):
    """Base class for statements inside an always block."""
    pass


@dataclass(frozen=True)
class SeqBlock(ASTNode):
    """Body of an always block or statement branch: ``Single`` or ``Block``."""

    @property
    def statements(self) -> tuple[Seq, ...]:
        raise NotImplementedError

    @staticmethod
    def of(stmts) -> SeqBlock:
        """Wrap parsed statements, using ``Single`` for exactly one."""
        stmts = tuple(stmts)
        if len(stmts) == 1:
            return Single(stmts[0])
        return Block(stmts)


@dataclass(frozen=True)
class Block(SeqBlock):
    """begin ... end holding two or more statements."""
    seqs: tuple[Seq, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        if len(self.seqs) < 2:
            raise ValueError(f"Block needs at least two statements, got {len(self.seqs)}; "
                             "use Single for one")

    @property
    def statements(self) -> tuple[Seq, ...]:
        return self.seqs


@dataclass(frozen=True)
class Single(SeqBlock):
    """A lone statement, with or without begin/end in the source."""
    seq: Seq = None

    @property
    def statements(self) -> tuple[Seq, ...]:
        return (self.seq,)


@dataclass(frozen=True)
class If(Seq):
    """if (cond) then [else otherwise]"""
    cond: Expr = None
    then: SeqBlock = None
    otherwise: Optional[SeqBlock] = None


@dataclass(frozen=True)
class Set(Seq):
    """Whole-signal assignment: target <= value;"""
    kind: BlockType = BlockType.NON_BLOCKING
    target: Ident = None
    value: Expr = None


@dataclass(frozen=True)
class SetIndex(Seq):
    """Bit-select assignment: target[index] <= value;"""
    kind: BlockType = BlockType.NON_BLOCKING
    target: Ident = None
    index: Expr = None
    value: Expr = None


@dataclass(frozen=True)
class SetRange(Seq):
    """Slice assignment: target[high:low] <= value;"""
    kind: BlockType = BlockType.NON_BLOCKING
    target: Ident = None
    high: Expr = None
    low: Expr = None
    value: Expr = None


@dataclass(frozen=True)
class MatchArm(ASTNode):
    """One arm of a case statement; several patterns may share a body."""
    patterns: tuple[Expr, ...] = ()
    body: SeqBlock = None


@dataclass(frozen=True)
class Match(Seq):
    """case (selector) ... endcase"""
    selector: Expr = None
    arms: tuple[MatchArm, ...] = ()


# ============================================================
# Declarations
# ============================================================

@dataclass(frozen=True)
class Arg(ASTNode):
    """A port or signal name, with direction and width where declared."""
    name: Ident = None
    direction: Optional[Dir] = None
    width: Optional[int] = None


@dataclass(frozen=True)
class EdgeRef(ASTNode):
    """Clock sensitivity of an always block: posedge clk"""
    signal: Ident = None
    edge: Edge = Edge.POS


@dataclass(frozen=True)
class Binding(ASTNode):
    """Named port binding in an instantiation: .port(expr)"""
    port: Ident = None
    expr: Expr = None


@dataclass(frozen=True)
class Decl(ASTNode):
    """Base class for module body items."""
    pass


@dataclass(frozen=True)
class InnerArg(Decl):
    """input/output declaration group: output [7:0] a, b;"""
    args: tuple[Arg, ...] = ()


@dataclass(frozen=True)
class Reg(Decl):
    """reg [7:0] name;  ``dims`` holds (high, low) or is empty."""
    name: Ident = None
    dims: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class Wire(Decl):
    """wire [3:0] name [= init];"""
    name: Ident = None
    dims: tuple[Expr, ...] = ()
    init: Optional[Expr] = None


@dataclass(frozen=True)
class Let(Decl):
    """Sub-module instantiation: type_name instance_name (.p(e), ...);"""
    type_name: Ident = None
    instance_name: Ident = None
    bindings: tuple[Binding, ...] = ()


@dataclass(frozen=True)
class Const(Decl):
    """parameter / localparam NAME = value;"""
    name: Ident = None
    value: Expr = None


@dataclass(frozen=True)
class Always(Decl):
    """always @(posedge clk) body"""
    edge: EdgeRef = None
    body: SeqBlock = None


# ============================================================
# Top-level
# ============================================================

@dataclass(frozen=True)
class Toplevel(ASTNode):
    """Base class for source-file level items."""
    pass


@dataclass(frozen=True)
class Module(Toplevel):
    """A Verilog module definition."""
    name: Ident = None
    ports: tuple[Arg, ...] = ()
    body: tuple[Decl, ...] = ()


@dataclass(frozen=True)
class Code(ASTNode):
    """A complete parse result: top-level items in source order."""
    items: tuple[Toplevel, ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    @property
    def modules(self) -> list[Module]:
        return [item for item in self.items if isinstance(item, Module)]
