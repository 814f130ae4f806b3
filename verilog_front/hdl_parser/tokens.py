"""
Token types for the synchronous-logic Verilog subset.
"""

from enum import Enum, auto
from dataclasses import dataclass


class TokenType(Enum):
    # Literals
    NUMBER = auto()         # 32, 8'hFF, 4'b1010, 'd10
    IDENT = auto()          # my_signal

    # Keywords
    MODULE = auto()
    ENDMODULE = auto()
    INPUT = auto()
    OUTPUT = auto()
    WIRE = auto()
    REG = auto()
    PARAMETER = auto()
    LOCALPARAM = auto()
    ASSIGN = auto()
    ALWAYS = auto()
    BEGIN = auto()
    END = auto()
    IF = auto()
    ELSE = auto()
    CASE = auto()
    ENDCASE = auto()
    POSEDGE = auto()
    NEGEDGE = auto()

    # Operators
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    AMP = auto()            # &
    PIPE = auto()           # |
    BANG = auto()           # !
    LSHIFT = auto()         # <<
    RSHIFT = auto()         # >>

    LAND = auto()           # &&
    LOR = auto()            # ||

    EQ = auto()             # ==
    NEQ = auto()            # !=
    LT = auto()             # <
    LE = auto()             # <=  (also non-blocking assignment)
    GT = auto()             # >
    GE = auto()             # >=

    QUESTION = auto()       # ?
    COLON = auto()          # :
    AT = auto()             # @
    HASH = auto()           # #

    # Delimiters
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,
    DOT = auto()            # .
    ASSIGN_OP = auto()      # = (blocking assignment)

    EOF = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    offset: int             # index into the lexed source
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, @{self.offset} L{self.line}:{self.col})"


# Keyword lookup table
KEYWORDS: dict[str, TokenType] = {
    "module": TokenType.MODULE,
    "endmodule": TokenType.ENDMODULE,
    "input": TokenType.INPUT,
    "output": TokenType.OUTPUT,
    "wire": TokenType.WIRE,
    "reg": TokenType.REG,
    "parameter": TokenType.PARAMETER,
    "localparam": TokenType.LOCALPARAM,
    "assign": TokenType.ASSIGN,
    "always": TokenType.ALWAYS,
    "begin": TokenType.BEGIN,
    "end": TokenType.END,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "case": TokenType.CASE,
    "endcase": TokenType.ENDCASE,
    "posedge": TokenType.POSEDGE,
    "negedge": TokenType.NEGEDGE,
}

TWO_CHAR: dict[str, TokenType] = {
    "<<": TokenType.LSHIFT,
    ">>": TokenType.RSHIFT,
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "&&": TokenType.LAND,
    "||": TokenType.LOR,
}

ONE_CHAR: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "&": TokenType.AMP,
    "|": TokenType.PIPE,
    "!": TokenType.BANG,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "?": TokenType.QUESTION,
    ":": TokenType.COLON,
    "@": TokenType.AT,
    "#": TokenType.HASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "=": TokenType.ASSIGN_OP,
}
