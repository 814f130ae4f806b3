"""
Tests for rendering AST nodes back to Verilog.
"""

import pytest

from verilog_front.hdl_parser.parser import parse, parse_verilog
from verilog_front.hdl_parser.codegen import *
from verilog_front.hdl_parser.ast_nodes import *


UP_COUNTER_RENDERED = """\
module up_counter (
    out,
    enable,
    clk,
    reset
);
    output [7:0] out;
    input enable, clk, reset;
    reg [7:0] out;
    always @(posedge clk)
        if (reset)
            out <= 0;
        else if (enable)
            out <= out + 1;
endmodule
"""


def round_trip(code):
    return parse_verilog(render(code))


def test_up_counter_rendering(up_counter_src):
    """Test: the up counter renders in the normalized layout"""
    assert render(parse(up_counter_src)) == UP_COUNTER_RENDERED


def test_up_counter_round_trip(up_counter_src):
    """Test: rendered up counter re-parses to the same tree"""
    code = parse(up_counter_src)
    assert round_trip(code) == code


def test_shift_register_round_trip(shift_register_src):
    """Test: ANSI ports, blocks and mixed assignment kinds survive a round trip"""
    code = parse(shift_register_src)
    text = render(code)
    assert "input [3:0] din," in text
    assert "always @(negedge clk) begin" in text
    assert "stage = din + 1;" in text
    assert "q <= q + stage + 2;" in text
    assert parse_verilog(text) == code


def test_dangling_else_round_trip():
    """Test: an inner else-less if is wrapped so the outer else stays outer"""
    code = parse_verilog("module m; always @(posedge c) if (a) begin if (b) x <= 1; end else x <= 2; endmodule")
    text = render(code)
    assert "if (a) begin" in text
    assert round_trip(code) == code


def test_else_if_chain_round_trip():
    """Test: inner else stays with the inner if"""
    code = parse_verilog("module m; always @(posedge c) if (a) if (b) x <= 1; else x <= 2; endmodule")
    assert round_trip(code) == code


def test_right_nested_sum_gets_parentheses():
    """Test: a + (b + c) keeps its grouping"""
    value = Arith(Op.ADD, Ref(Ident("a")), Arith(Op.ADD, Ref(Ident("b")), Ref(Ident("c"))))
    assert generate_verilog(value) == "a + (b + c)"
    code = Code((Module(Ident("m"), (), (
        Always(EdgeRef(Ident("clk")), Single(Set(BlockType.NON_BLOCKING, Ident("x"), value))),
    )),))
    assert round_trip(code) == code


def test_negative_number():
    """Test: wrapped literals render as 32-bit hex"""
    assert generate_verilog(Num(-1)) == "32'hFFFFFFFF"
    assert generate_verilog(Num(-(1 << 31))) == "32'h80000000"
    assert generate_verilog(Num(42)) == "42"


def test_empty_module():
    """Test: module with no ports or items"""
    code = parse_verilog("module m; endmodule")
    assert render(code) == "module m ();\nendmodule\n"
    assert round_trip(code) == code


def test_multiple_modules():
    """Test: modules are separated by a blank line and keep their order"""
    code = parse_verilog("module a; endmodule module b(x); input x; endmodule")
    text = render(code)
    assert "endmodule\n\nmodule b (" in text
    assert round_trip(code) == code


def test_static_assignment():
    """Test: procedural continuous assignment keeps its keyword"""
    assert generate_verilog(Set(BlockType.STATIC, Ident("x"), Num(1))) == "assign x = 1;\n"
    assert generate_verilog(Set(BlockType.BLOCKING, Ident("x"), Num(1))) == "x = 1;\n"


def test_placeholders_are_visible_and_recorded():
    """Test: unrenderable nodes become placeholders, not silent gaps"""
    code = parse_verilog("""module m;
        wire w;
        always @(posedge clk) x <= a - b;
    endmodule""")
    generator = VerilogCodeGenerator()
    text = generator.generate(code)
    assert "/*UNSUPPORTED:Wire*/\n" in text
    assert "x <= /*UNSUPPORTED:Arith*/;" in text
    assert [type(node) for node in generator.unsupported] == [Wire, Arith]
    assert generator.unsupported[1].op == Op.SUB


def test_unsupported_list_reset_between_calls():
    """Test: each generate call starts with a clean record"""
    generator = VerilogCodeGenerator()
    generator.generate(Wire(Ident("w")))
    generator.generate(Num(1))
    assert generator.unsupported == []


def test_strict_mode_raises():
    """Test: strict rendering refuses placeholders"""
    code = parse_verilog("module m; parameter W = 8; endmodule")
    with pytest.raises(UnsupportedConstruct) as exc_info:
        render(code, strict=True)
    assert isinstance(exc_info.value.node, Const)


def test_custom_indent(up_counter_src):
    """Test: indentation string is configurable"""
    text = render(parse(up_counter_src), indent_str="\t")
    assert "\treg [7:0] out;\n" in text
    assert "\t\tif (reset)\n" in text


# Trees built by hand, not by the parser

def module_of(*body, ports=()):
    return Code((Module(Ident("m"), ports, body),))


def clocked(*stmts):
    return Always(EdgeRef(Ident("clk"), Edge.POS), SeqBlock.of(stmts))


def nb(name, value):
    return Set(BlockType.NON_BLOCKING, Ident(name), value)


def test_uniform_input_group_round_trip():
    """Test: a group sharing direction and width renders as one declaration"""
    code = module_of(InnerArg((
        Arg(Ident("a"), Dir.INPUT, 4),
        Arg(Ident("b"), Dir.INPUT, 4),
    )))
    assert "input [3:0] a, b;" in render(code)
    assert round_trip(code) == code


@pytest.mark.parametrize("args", [
    (Arg(Ident("a"), Dir.INPUT), Arg(Ident("b"), Dir.OUTPUT)),
    (Arg(Ident("a"), Dir.INPUT, 4), Arg(Ident("b"), Dir.INPUT)),
    (Arg(Ident("a")),),
    (Arg(Ident("a"), Dir.OUTPUT, 0),),
    (),
])
def test_inexpressible_input_group(args):
    """Test: groups the parser could not read back become placeholders"""
    node = InnerArg(args)
    generator = VerilogCodeGenerator()
    assert generator.generate(module_of(node)).count("/*UNSUPPORTED:InnerArg*/") == 1
    assert generator.unsupported == [node]
    with pytest.raises(UnsupportedConstruct):
        render(module_of(node), strict=True)


@pytest.mark.parametrize("dims", [
    (),
    (Num(7), Num(0)),
    (Num(0), Num(7)),
    (Arith(Op.ADD, Ref(Ident("W")), Num(1)), Num(-1)),
])
def test_reg_dims_round_trip(dims):
    """Test: a reg with no dimensions or a msb:lsb pair"""
    code = module_of(Reg(Ident("r"), dims))
    assert round_trip(code) == code


@pytest.mark.parametrize("dims", [
    (Num(3),),
    (Num(3), Num(2), Num(0)),
])
def test_reg_with_odd_dims(dims):
    """Test: a reg with one or three dims is a placeholder, not reg [3] r;"""
    node = Reg(Ident("r"), dims)
    text = render(module_of(node))
    assert "/*UNSUPPORTED:Reg*/\n" in text
    assert "reg" not in text.replace("UNSUPPORTED:Reg", "")


def test_ansi_header_round_trip():
    """Test: every port directed, widths kept"""
    ports = (
        Arg(Ident("clk"), Dir.INPUT),
        Arg(Ident("d"), Dir.INPUT, 8),
        Arg(Ident("q"), Dir.OUTPUT, 8),
        Arg(Ident("v"), Dir.OUTPUT),
    )
    code = module_of(ports=ports)
    assert round_trip(code) == code


@pytest.mark.parametrize("ports, bad", [
    ((Arg(Ident("a")), Arg(Ident("b"), Dir.INPUT)), 1),
    ((Arg(Ident("a"), Dir.INPUT), Arg(Ident("b"))), 1),
    ((Arg(Ident("a"), None, 8), Arg(Ident("b"))), 0),
])
def test_mixed_header_ports(ports, bad):
    """Test: a port that does not fit the header style is a placeholder"""
    generator = VerilogCodeGenerator()
    text = generator.generate(module_of(ports=ports))
    assert "/*UNSUPPORTED:Arg*/" in text
    assert generator.unsupported == [ports[bad]]
    assert "input b" not in text


def test_if_else_chains_round_trip():
    """Test: hand-built if/else nests keep their else bindings"""
    a, b, c = (Ref(Ident(n)) for n in "abc")
    chains = [
        If(a, Single(If(b, Single(nb("x", Num(1))))), Single(nb("x", Num(2)))),
        If(a, Single(If(b, Single(nb("x", Num(1))), Single(If(c, Single(nb("x", Num(2))))))),
           Single(nb("x", Num(3)))),
        If(a, Single(nb("x", Num(1))),
           Single(If(b, Single(If(c, Single(nb("x", Num(2))))), Single(nb("x", Num(3)))))),
        If(a, Block((nb("y", Num(0)), If(b, Single(nb("x", Num(1)))))), Single(nb("x", Num(2)))),
    ]
    for chain in chains:
        code = module_of(clocked(chain))
        assert round_trip(code) == code


def test_negative_numbers_round_trip():
    """Test: wrapped values survive printing"""
    code = module_of(clocked(
        nb("x", Num(-1)),
        nb("y", Arith(Op.ADD, Num(-(1 << 31)), Num(5))),
    ))
    assert round_trip(code) == code
