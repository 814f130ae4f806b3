"""
AST Visitor Pattern for traversing and transforming the Verilog AST.

Provides base classes for implementing visitors that can traverse the AST
and perform analysis, rewriting, or dumping. AST nodes are immutable, so
transformers build new nodes instead of editing children in place.
"""

from __future__ import annotations
from dataclasses import fields, replace
from enum import Enum
from typing import Any, Iterator, Optional
from verilog_front.hdl_parser.ast_nodes import *


def iter_child_nodes(node: ASTNode) -> Iterator[ASTNode]:
    """Yield the direct children of ``node`` in field order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, ASTNode):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, ASTNode):
                    yield item


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield ``node`` and all of its descendants, depth-first, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


class ASTVisitor:
    """
    Base class for AST visitors using the visitor pattern.

    Subclasses can override visit_* methods to implement custom behavior
    for specific node types. The default implementation recursively visits
    all children.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_Module(self, node: Module) -> Any:
                print(f"Visiting module: {node.name}")
                return self.generic_visit(node)

        visitor = MyVisitor()
        visitor.visit(code)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to the appropriate visit_* method.
        """
        if node is None:
            return None

        method_name = f'visit_{node.__class__.__name__}'
        visitor_method = getattr(self, method_name, self.generic_visit)
        return visitor_method(node)

    def generic_visit(self, node: ASTNode) -> Any:
        """
        Default visitor that recursively visits all children.
        Override this to provide default behavior for all nodes.
        """
        for child in iter_child_nodes(node):
            self.visit(child)
        return None


class ASTTransformer(ASTVisitor):
    """
    Base class for AST transformers that rewrite the AST.

    Like ASTVisitor, but visitor methods return a node: the original, a
    rebuilt copy, or a replacement. Returning None from a node inside a
    sequence field drops it. Unchanged subtrees are returned as-is.

    Usage:
        class RenameSignals(ASTTransformer):
            def visit_Ident(self, node: Ident) -> Ident:
                return Ident(node.name.upper())
    """

    def generic_visit(self, node: ASTNode) -> Optional[ASTNode]:
        """
        Default transformer that rebuilds ``node`` from transformed children.
        """
        changes = {}
        for f in fields(node):
            value = getattr(node, f.name)

            # Transform sequence of nodes
            if isinstance(value, tuple):
                new_items = []
                for item in value:
                    if isinstance(item, ASTNode):
                        new_item = self.visit(item)
                        if new_item is not None:
                            new_items.append(new_item)
                    else:
                        new_items.append(item)
                new_value = tuple(new_items)

            # Transform single node
            elif isinstance(value, ASTNode):
                new_value = self.visit(value)

            else:
                continue

            if new_value != value:
                changes[f.name] = new_value

        if not changes:
            return node

        # A block that lost statements may now be a single statement
        if isinstance(node, Block):
            return SeqBlock.of(changes.get("seqs", node.seqs))
        return replace(node, **changes)


class ASTDumper(ASTVisitor):
    """
    Visitor that dumps the AST structure as formatted text.
    Useful for debugging and understanding the AST structure.
    """

    def __init__(self, indent: str = "  "):
        self.indent = indent
        self.level = 0
        self.output = []

    def dump(self, node: ASTNode) -> str:
        """Dump the AST and return as string."""
        self.output = []
        self.level = 0
        self.visit(node)
        return "\n".join(self.output)

    def generic_visit(self, node: ASTNode) -> Any:
        """Dump this node and recursively dump children."""
        indent_str = self.indent * self.level
        node_type = node.__class__.__name__

        # Scalar fields are shown inline, child nodes on their own lines
        attrs = []
        for f in fields(node):
            value = getattr(node, f.name)
            if isinstance(value, Enum):
                attrs.append(f"{f.name}={value.name}")
            elif isinstance(value, str):
                attrs.append(f"{f.name}='{value}'")
            elif isinstance(value, int):
                attrs.append(f"{f.name}={value}")

        attr_str = f" ({', '.join(attrs)})" if attrs else ""
        self.output.append(f"{indent_str}{node_type}{attr_str}")

        # Visit children with increased indentation
        self.level += 1
        super().generic_visit(node)
        self.level -= 1

        return None


class ModuleCollector(ASTVisitor):
    """
    Visitor that collects all modules in the AST.
    """

    def __init__(self):
        self.modules = []

    def visit_Module(self, node: Module) -> Any:
        self.modules.append(node)
        return self.generic_visit(node)


class IdentifierCollector(ASTVisitor):
    """
    Visitor that collects all identifier names used in the AST.
    """

    def __init__(self):
        self.identifiers = set()

    def visit_Ident(self, node: Ident) -> Any:
        self.identifiers.add(node.name)
        return None


class StatisticsVisitor(ASTVisitor):
    """
    Visitor that collects statistics about the AST.
    """

    def __init__(self):
        self.node_counts = {}
        self.total_nodes = 0

    def visit(self, node: ASTNode) -> Any:
        node_type = node.__class__.__name__
        self.node_counts[node_type] = self.node_counts.get(node_type, 0) + 1
        self.total_nodes += 1
        return super().visit(node)

    def report(self) -> str:
        """Generate a statistics report."""
        lines = [f"Total nodes: {self.total_nodes}"]
        lines.append("\nNode type counts:")
        for node_type in sorted(self.node_counts.keys()):
            count = self.node_counts[node_type]
            lines.append(f"  {node_type}: {count}")
        return "\n".join(lines)
