"""
AST Serialization to JSON format.

Provides functions to serialize the Verilog AST to JSON and deserialize it
back. Useful for debugging, visualization, and tool integration.
"""

from __future__ import annotations
import json
from dataclasses import fields
from enum import Enum
from typing import Any
from verilog_front.hdl_parser.ast_nodes import *


ENUM_TYPES: dict[str, type[Enum]] = {
    cls.__name__: cls for cls in (Dir, Edge, BlockType, Op, UnaryOp)
}


def _node_types() -> dict[str, type[ASTNode]]:
    found = {}
    pending = [ASTNode]
    while pending:
        cls = pending.pop()
        found[cls.__name__] = cls
        pending.extend(cls.__subclasses__())
    return found


NODE_TYPES = _node_types()


def _value_to_json(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return ast_to_dict(value)
    if isinstance(value, Enum):
        return {"_enum": value.__class__.__name__, "name": value.name}
    if isinstance(value, tuple):
        return [_value_to_json(item) for item in value]
    # Primitive types (str, int, None)
    return value


def ast_to_dict(node: ASTNode) -> dict[str, Any]:
    """
    Convert an AST node to a dictionary representation.

    The dictionary includes:
    - _type: The node's class name
    - Every dataclass field; enums become {"_enum": ..., "name": ...}
    - Nested nodes are recursively converted

    Args:
        node: The AST node to convert

    Returns:
        Dictionary representation of the node
    """
    if node is None:
        return None

    result = {"_type": node.__class__.__name__}
    for f in fields(node):
        result[f.name] = _value_to_json(getattr(node, f.name))
    return result


def ast_to_json(node: ASTNode, indent: int = 2) -> str:
    """
    Convert an AST node to JSON string.

    Args:
        node: The AST node to convert
        indent: Number of spaces for indentation (default: 2)

    Returns:
        JSON string representation of the AST
    """
    data = ast_to_dict(node)
    return json.dumps(data, indent=indent)


def _value_from_json(value: Any) -> Any:
    if isinstance(value, dict) and "_type" in value:
        return dict_to_ast(value)
    if isinstance(value, dict) and "_enum" in value:
        try:
            return ENUM_TYPES[value["_enum"]][value["name"]]
        except KeyError:
            raise ValueError(f"Unknown enum value: {value!r}")
    if isinstance(value, list):
        return tuple(_value_from_json(item) for item in value)
    return value


def dict_to_ast(data: dict[str, Any]) -> ASTNode:
    """
    Convert a dictionary back to an AST node.

    Args:
        data: Dictionary representation of an AST node

    Returns:
        Reconstructed AST node

    Raises:
        ValueError: If the node type is unknown or the node is malformed
    """
    if data is None:
        return None

    node_type = data.get("_type")
    if not node_type:
        raise ValueError("Missing _type field in AST dictionary")

    try:
        node_class = NODE_TYPES[node_type]
    except KeyError:
        raise ValueError(f"Unknown AST node type: {node_type}")

    kwargs = {
        name: _value_from_json(value)
        for name, value in data.items()
        if name != "_type"
    }
    try:
        return node_class(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {node_type} node: {e}") from e


def json_to_ast(json_str: str) -> ASTNode:
    """
    Convert a JSON string back to an AST node.

    Args:
        json_str: JSON string representation of an AST node

    Returns:
        Reconstructed AST node
    """
    data = json.loads(json_str)
    return dict_to_ast(data)
