"""
Tests for module framing, port lists and module body declarations.
"""

import pytest

from verilog_front.hdl_parser.parser import parse, parse_verilog
from verilog_front.hdl_parser.diagnostics import UnexpectedToken
from verilog_front.hdl_parser.ast_nodes import *


def body_of(verilog):
    code = parse_verilog(verilog)
    return code.modules[0].body


def test_up_counter(up_counter_src):
    """Test: the classic up counter parses into the expected tree"""
    code = parse(up_counter_src)

    assert len(code) == 1
    mod = code.items[0]
    assert isinstance(mod, Module)
    assert mod.name == Ident("up_counter")
    assert mod.ports == tuple(Arg(Ident(n)) for n in ("out", "enable", "clk", "reset"))

    out, en, clk, rst = (Ident(n) for n in ("out", "enable", "clk", "reset"))
    expected_always = Always(
        edge=EdgeRef(clk, Edge.POS),
        body=Single(If(
            cond=Ref(rst),
            then=Single(Set(BlockType.NON_BLOCKING, out, Num(0))),
            otherwise=Single(If(
                cond=Ref(en),
                then=Single(Set(BlockType.NON_BLOCKING, out, Arith(Op.ADD, Ref(out), Num(1)))),
            )),
        )),
    )
    assert mod.body == (
        InnerArg((Arg(out, Dir.OUTPUT, 8),)),
        InnerArg((Arg(en, Dir.INPUT), Arg(clk, Dir.INPUT), Arg(rst, Dir.INPUT))),
        Reg(out, (Num(7), Num(0))),
        expected_always,
    )


def test_module_without_port_list():
    """Test: module m; has no ports"""
    code = parse_verilog("module m; endmodule")
    assert code.items == (Module(name=Ident("m")),)


def test_module_with_empty_port_list():
    """Test: module m(); has no ports"""
    code = parse_verilog("module m(); endmodule")
    assert code.items[0].ports == ()


def test_multiple_modules_keep_order():
    """Test: top-level items stay in source order"""
    code = parse_verilog("module b; endmodule module a; endmodule")
    assert [m.name.name for m in code.modules] == ["b", "a"]


def test_empty_source():
    """Test: no modules is an empty Code"""
    assert parse_verilog("  \n ") == Code(())


def test_ansi_ports():
    """Test: ANSI header ports carry direction and width, and inherit them"""
    code = parse_verilog("module m(input clk, input [7:0] a, b, output [0:3] q); endmodule")
    assert code.items[0].ports == (
        Arg(Ident("clk"), Dir.INPUT, None),
        Arg(Ident("a"), Dir.INPUT, 8),
        Arg(Ident("b"), Dir.INPUT, 8),
        Arg(Ident("q"), Dir.OUTPUT, 4),
    )


def test_mixed_port_styles_rejected():
    """Test: a plain port list cannot switch to ANSI declarations"""
    with pytest.raises(UnexpectedToken) as exc_info:
        parse_verilog("module m(a, input b); endmodule")
    assert exc_info.value.found.value == "input"


def test_width_needs_literal_bounds():
    """Test: port widths must be integer literals"""
    source = "module m; output [W:0] q; endmodule"
    with pytest.raises(UnexpectedToken) as exc_info:
        parse_verilog(source)
    assert exc_info.value.offset == source.index("[")


def test_reg_declarations():
    """Test: one Reg per declared name, dims shared"""
    assert body_of("module m; reg a; reg [N-1:0] b, c; endmodule") == (
        Reg(Ident("a"), ()),
        Reg(Ident("b"), (Arith(Op.SUB, Ref(Ident("N")), Num(1)), Num(0))),
        Reg(Ident("c"), (Arith(Op.SUB, Ref(Ident("N")), Num(1)), Num(0))),
    )


def test_wire_declarations():
    """Test: wires with and without continuous assignment"""
    assert body_of("module m; wire [3:0] a = b & c, d; wire e; endmodule") == (
        Wire(Ident("a"), (Num(3), Num(0)), Arith(Op.BIN_AND, Ref(Ident("b")), Ref(Ident("c")))),
        Wire(Ident("d"), (Num(3), Num(0)), None),
        Wire(Ident("e"), (), None),
    )


def test_constants():
    """Test: parameter and localparam both produce Const"""
    assert body_of("module m; parameter W = 8; localparam A = 1, B = W * 2; endmodule") == (
        Const(Ident("W"), Num(8)),
        Const(Ident("A"), Num(1)),
        Const(Ident("B"), Arith(Op.MUL, Ref(Ident("W")), Num(2))),
    )


def test_instantiation():
    """Test: sub-module instance with named bindings"""
    body = body_of("module top; counter u0 (.clk(clk), .q(bus[3:0])); adder a1 (); endmodule")
    assert body == (
        Let(Ident("counter"), Ident("u0"), (
            Binding(Ident("clk"), Ref(Ident("clk"))),
            Binding(Ident("q"), Slice(Ident("bus"), Num(3), Num(0))),
        )),
        Let(Ident("adder"), Ident("a1"), ()),
    )


def test_positional_binding_rejected():
    """Test: only named port bindings are accepted"""
    with pytest.raises(UnexpectedToken) as exc_info:
        parse_verilog("module top; counter u0 (clk); endmodule")
    assert exc_info.value.expected == "'.'"


def test_unknown_module_item():
    """Test: a number cannot start a module item"""
    source = "module test;\n    wire a;\n    123456;\nendmodule"
    with pytest.raises(UnexpectedToken) as exc_info:
        parse_verilog(source)
    assert exc_info.value.found.value == "123456"
    assert exc_info.value.offset == source.index("123456")


def test_text_outside_module():
    """Test: only modules are allowed at top level"""
    with pytest.raises(UnexpectedToken) as exc_info:
        parse_verilog("wire a;")
    assert exc_info.value.expected == "'module'"


def test_nodes_are_immutable_and_hashable(up_counter_src):
    """Test: parsed trees are frozen and usable as dict keys"""
    code = parse(up_counter_src)
    with pytest.raises(AttributeError):
        code.items[0].name = Ident("other")
    assert hash(code) == hash(parse(up_counter_src))
    assert {code: 1}[parse(up_counter_src)] == 1


def test_empty_identifier_rejected():
    """Test: Ident must be non-empty"""
    with pytest.raises(ValueError):
        Ident("")


@pytest.mark.parametrize("name", ["end", "module", "a b", "1x", "x-y", "\u00e9t\u00e9", "$x"])
def test_identifier_must_lex_back(name):
    """Test: Ident rejects keywords and text the lexer would split"""
    with pytest.raises(ValueError):
        Ident(name)


def test_identifier_shapes():
    assert Ident("_a9").name == "_a9"
    assert Ident("End").name == "End"
    assert Ident("default").name == "default"


def test_lists_become_tuples():
    """Test: constructor lists are stored as tuples"""
    node = InnerArg([Arg(Ident("a"), Dir.INPUT)])
    assert node == InnerArg((Arg(Ident("a"), Dir.INPUT),))
    assert isinstance(node.args, tuple)
