"""
Tests for JSON serialization of the AST.
"""

import json

import pytest

from verilog_front.hdl_parser.parser import parse
from verilog_front.hdl_parser.ast_json import *
from verilog_front.hdl_parser.ast_nodes import *


def test_json_round_trip(up_counter_src, shift_register_src):
    """Test: serialized trees load back equal"""
    for source in (up_counter_src, shift_register_src):
        code = parse(source)
        assert json_to_ast(ast_to_json(code)) == code


def test_dict_layout():
    """Test: node type, enum encoding and tuple fields"""
    data = ast_to_dict(Arg(Ident("a"), Dir.INPUT, 8))
    assert data == {
        "_type": "Arg",
        "name": {"_type": "Ident", "name": "a"},
        "direction": {"_enum": "Dir", "name": "INPUT"},
        "width": 8,
    }
    assert json.loads(ast_to_json(Code(())))["items"] == []


def test_unknown_node_type():
    """Test: an unknown _type is rejected"""
    with pytest.raises(ValueError):
        json_to_ast('{"_type": "Gate", "name": "g"}')


def test_missing_type():
    with pytest.raises(ValueError):
        dict_to_ast({"name": "x"})


def test_malformed_node():
    """Test: unknown fields and invalid values are reported as ValueError"""
    with pytest.raises(ValueError):
        dict_to_ast({"_type": "Ident", "label": "x"})
    with pytest.raises(ValueError):
        dict_to_ast({"_type": "Set", "kind": {"_enum": "BlockType", "name": "LATCH"}})
