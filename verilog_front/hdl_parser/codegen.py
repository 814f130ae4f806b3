"""
Verilog Code Generation from AST.

Renders a ``Code`` tree (or any node) back into Verilog source. The
generator is total: node kinds without a rendering rule are written as a
visible ``/*UNSUPPORTED:<Node>*/`` placeholder and recorded, never
dropped or half-printed. Construct-by-construct coverage:

  rendered:    Module, InnerArg, Reg, Always, If, Set, Arith(+), Ref, Num
  placeholder: everything else, plus rendered kinds in a shape the
               parser cannot read back (mixed InnerArg groups, a reg
               with one dimension, mixed plain and ANSI header ports)

Formatting is normalized; what is guaranteed is that rendered output
re-parses to an equal tree.
"""

from __future__ import annotations
import logging

from verilog_front.hdl_parser.ast_nodes import *

log = logging.getLogger(__name__)


PLACEHOLDER = "/*UNSUPPORTED:{}*/"


class UnsupportedConstruct(Exception):
    """A node has no rendering rule (raised only in strict mode)."""

    def __init__(self, node: ASTNode):
        self.node = node
        super().__init__(f"No Verilog rendering for {node.__class__.__name__}")


def placeholder(node: ASTNode) -> str:
    return PLACEHOLDER.format(node.__class__.__name__)


def _ends_with_open_if(seq: Seq) -> bool:
    """True if ``seq`` ends in an ``if`` with no ``else`` that a following
    ``else`` would attach to."""
    while isinstance(seq, If):
        if seq.otherwise is None:
            return True
        if not isinstance(seq.otherwise, Single):
            return False
        seq = seq.otherwise.seq
    return False


class VerilogCodeGenerator:
    """
    Generates Verilog source code from AST nodes.

    ``unsupported`` lists the nodes written as placeholders by the last
    ``generate`` call. With ``strict=True`` the first such node raises
    ``UnsupportedConstruct`` instead.
    """

    def __init__(self, indent_str: str = "    ", strict: bool = False):
        self.indent_str = indent_str
        self.strict = strict
        self.indent_level = 0
        self.output = []
        self.unsupported: list[ASTNode] = []

    def generate(self, node: ASTNode) -> str:
        """Generate Verilog code from an AST node."""
        self.output = []
        self.indent_level = 0
        self.unsupported = []
        self._visit(node)
        return "".join(self.output)

    def _indent(self):
        """Add current indentation to output."""
        self.output.append(self.indent_str * self.indent_level)

    def _write(self, text: str):
        """Write text to output."""
        self.output.append(text)

    def _writeln(self, text: str = ""):
        """Write text with newline."""
        if text:
            self.output.append(text)
        self.output.append("\n")

    def _visit(self, node: ASTNode):
        """Dispatch to appropriate generation method."""
        method_name = f'_gen_{node.__class__.__name__}'
        method = getattr(self, method_name, None)
        if method:
            method(node)
        else:
            self._unsupported(node)

    def _unsupported(self, node: ASTNode):
        if self.strict:
            raise UnsupportedConstruct(node)
        log.debug("No rendering for %s, writing placeholder", node.__class__.__name__)
        self.unsupported.append(node)
        self._write(placeholder(node))
        # Statement positions own their line
        if isinstance(node, (Decl, Seq)):
            self._writeln()

    # ============================================================
    # Top-level
    # ============================================================

    def _gen_Code(self, node: Code):
        """Generate all top-level items, blank line between them."""
        for i, item in enumerate(node.items):
            if i > 0:
                self._writeln()
            self._visit(item)

    def _gen_Module(self, node: Module):
        """Generate module definition."""
        self._write(f"module {node.name} (")

        if node.ports:
            self._writeln()
            self.indent_level += 1
            ansi = node.ports[0].direction is not None
            for i, port in enumerate(node.ports):
                self._indent()
                if self._header_port_ok(port, ansi):
                    self._visit(port)
                else:
                    self._unsupported(port)
                if i < len(node.ports) - 1:
                    self._write(",")
                self._writeln()
            self.indent_level -= 1

        self._writeln(");")

        self.indent_level += 1
        for item in node.body:
            self._indent()
            self._visit(item)
        self.indent_level -= 1

        self._writeln("endmodule")

    # ============================================================
    # Declarations
    # ============================================================

    @staticmethod
    def _width_range(width: int) -> str:
        return f"[{width - 1}:0]"

    @staticmethod
    def _header_port_ok(port: Arg, ansi: bool) -> bool:
        """A header is all plain names or all ANSI declarations, and a
        plain name has no width to lose."""
        if port.width is not None and port.width < 1:
            return False
        if ansi:
            return port.direction is not None
        return port.direction is None and port.width is None

    def _gen_Arg(self, node: Arg):
        """Generate a header port: name, or input [7:0] name."""
        if node.direction is not None:
            self._write(f"{node.direction.value} ")
            if node.width is not None:
                self._write(f"{self._width_range(node.width)} ")
        self._write(str(node.name))

    def _gen_InnerArg(self, node: InnerArg):
        """Generate an input/output group. Every arg must share one
        direction and width, as the declaration does in source."""
        shapes = {(arg.direction, arg.width) for arg in node.args}
        if len(shapes) != 1:
            self._unsupported(node)
            return
        direction, width = shapes.pop()
        if direction is None or (width is not None and width < 1):
            self._unsupported(node)
            return

        self._write(direction.value)
        if width is not None:
            self._write(f" {self._width_range(width)}")
        self._writeln(f" {', '.join(str(arg.name) for arg in node.args)};")

    def _gen_Reg(self, node: Reg):
        """Generate reg declaration: reg name; or reg [msb:lsb] name;"""
        if len(node.dims) not in (0, 2):
            self._unsupported(node)
            return
        self._write("reg ")
        if node.dims:
            msb, lsb = node.dims
            self._write("[")
            self._visit(msb)
            self._write(":")
            self._visit(lsb)
            self._write("] ")
        self._writeln(f"{node.name};")

    def _gen_Always(self, node: Always):
        """Generate always block."""
        self._write("always @(")
        self._visit(node.edge)
        self._write(")")
        self._gen_body(node.body)

    def _gen_EdgeRef(self, node: EdgeRef):
        self._write(f"{node.edge.value} {node.signal}")

    # ============================================================
    # Statements
    # ============================================================

    def _gen_body(self, body: SeqBlock, close_open_if: bool = False):
        """Generate a statement body after its still-open header line.

        ``Single`` goes on its own indented line, ``Block`` gets
        begin/end. With ``close_open_if`` a Single ending in an else-less
        if is wrapped in begin/end so a following else cannot bind to it.
        """
        if isinstance(body, Single) and not (close_open_if and _ends_with_open_if(body.seq)):
            self._writeln()
            self.indent_level += 1
            self._indent()
            self._visit(body.seq)
            self.indent_level -= 1
            return

        self._writeln(" begin")
        self.indent_level += 1
        for stmt in body.statements:
            self._indent()
            self._visit(stmt)
        self.indent_level -= 1
        self._indent()
        self._writeln("end")

    def _gen_If(self, node: If):
        """Generate if statement, folding else-if chains."""
        self._write("if (")
        self._visit(node.cond)
        self._write(")")
        self._gen_body(node.then, close_open_if=node.otherwise is not None)

        if node.otherwise is None:
            return

        self._indent()
        self._write("else")
        if isinstance(node.otherwise, Single) and isinstance(node.otherwise.seq, If):
            self._write(" ")
            self._visit(node.otherwise.seq)
        else:
            self._gen_body(node.otherwise)

    def _gen_Set(self, node: Set):
        """Generate whole-signal assignment."""
        if node.kind == BlockType.STATIC:
            self._write("assign ")
        op = "<=" if node.kind == BlockType.NON_BLOCKING else "="
        self._write(f"{node.target} {op} ")
        self._visit(node.value)
        self._writeln(";")

    # ============================================================
    # Expressions
    # ============================================================

    def _gen_Ref(self, node: Ref):
        self._write(str(node.ident))

    def _gen_Num(self, node: Num):
        # Negative values only arise from wrapped 32-bit literals
        if node.value < 0:
            self._write(f"32'h{node.value & 0xFFFFFFFF:X}")
        else:
            self._write(str(node.value))

    def _gen_Arith(self, node: Arith):
        """Generate binary operation (addition only)."""
        if node.op != Op.ADD:
            self._unsupported(node)
            return
        self._visit(node.left)
        self._write(" + ")
        # Addition parses left-associative; a right-nested sum needs parens
        if isinstance(node.right, Arith):
            self._write("(")
            self._visit(node.right)
            self._write(")")
        else:
            self._visit(node.right)


def generate_verilog(node: ASTNode, indent_str: str = "    ", strict: bool = False) -> str:
    """
    Generate Verilog code from an AST node.

    Args:
        node: The AST node to generate code from
        indent_str: String to use for indentation (default: 4 spaces)
        strict: Raise UnsupportedConstruct instead of writing placeholders

    Returns:
        Generated Verilog source code
    """
    generator = VerilogCodeGenerator(indent_str=indent_str, strict=strict)
    return generator.generate(node)


def render(code: Code, indent_str: str = "    ", strict: bool = False) -> str:
    """Serialize a parse result back into Verilog source."""
    return generate_verilog(code, indent_str=indent_str, strict=strict)
