# tests/conftest.py
"""
Shared fixtures and helpers for the javasee test suite.

The ``n_*`` helpers build ``SourceNode`` trees by hand so matcher tests do
not depend on the Java parser; ``parse_body`` / ``parse_unit`` go through
tree-sitter for end-to-end tests.
"""

from __future__ import annotations

from typing import Optional

import pytest

from javasee.java_parser import JavaParser
from javasee.source import NodeKind, Role, SourceNode
from javasee.traversal import NodePair, iter_pairs


# ═══════════════════════════════════════════════════════════════════════════
#  Hand-built nodes
# ═══════════════════════════════════════════════════════════════════════════

def n_name(value: str) -> SourceNode:
    return SourceNode(NodeKind.NAME, value)


def n_int(value: int) -> SourceNode:
    return SourceNode(NodeKind.INT_LITERAL, value)


def n_long(value: int) -> SourceNode:
    return SourceNode(NodeKind.LONG_LITERAL, value)


def n_double(value: float) -> SourceNode:
    return SourceNode(NodeKind.DOUBLE_LITERAL, value)


def n_string(value: str) -> SourceNode:
    return SourceNode(NodeKind.STRING_LITERAL, value)


def n_bool(value: bool) -> SourceNode:
    return SourceNode(NodeKind.BOOLEAN_LITERAL, value)


def n_null() -> SourceNode:
    return SourceNode(NodeKind.NULL_LITERAL)


def n_this() -> SourceNode:
    return SourceNode(NodeKind.THIS)


def n_call(name: str, *args: SourceNode, receiver: Optional[SourceNode] = None) -> SourceNode:
    children = [(Role.OBJECT, receiver)] if receiver is not None else []
    children += [(Role.ARGUMENT, arg) for arg in args]
    return SourceNode.build(NodeKind.METHOD_CALL, name, children)


def n_field(obj: SourceNode, name: str) -> SourceNode:
    return SourceNode.build(NodeKind.FIELD_ACCESS, name, [(Role.OBJECT, obj)])


def n_new(type_name: str, *args: SourceNode) -> SourceNode:
    return SourceNode.build(
        NodeKind.OBJECT_CREATION, type_name, [(Role.ARGUMENT, a) for a in args]
    )


def n_instanceof(expr: SourceNode, type_name: str) -> SourceNode:
    return SourceNode.build(NodeKind.INSTANCEOF, type_name, [(Role.LEFT, expr)])


def n_unary(op: str, operand: SourceNode) -> SourceNode:
    return SourceNode.build(NodeKind.UNARY, op, [(Role.OPERAND, operand)])


def n_binary(op: str, lhs: SourceNode, rhs: SourceNode) -> SourceNode:
    return SourceNode.build(NodeKind.BINARY, op, [(Role.LEFT, lhs), (Role.RIGHT, rhs)])


def n_prefix(op: str, operand: SourceNode) -> SourceNode:
    return SourceNode.build(NodeKind.PREFIX_UPDATE, op, [(Role.OPERAND, operand)])


def n_postfix(op: str, operand: SourceNode) -> SourceNode:
    return SourceNode.build(NodeKind.POSTFIX_UPDATE, op, [(Role.OPERAND, operand)])


def n_index(array: SourceNode, index: SourceNode) -> SourceNode:
    return SourceNode.build(
        NodeKind.ARRAY_ACCESS, None, [(Role.ARRAY, array), (Role.INDEX, index)]
    )


def n_lambda() -> SourceNode:
    return SourceNode.build(
        NodeKind.LAMBDA, None, [("parameters", SourceNode(NodeKind.SIMPLE_NAME, "x")),
                                ("body", n_name("x"))]
    )


def n_stmt(expr: SourceNode) -> SourceNode:
    return SourceNode.build(NodeKind.EXPRESSION_STATEMENT, None, [(None, expr)])


def n_return(expr: SourceNode) -> SourceNode:
    return SourceNode.build("return_statement", None, [(None, expr)])


def n_if(condition: SourceNode, *body: SourceNode) -> SourceNode:
    block = SourceNode.build("block", None, [(None, s) for s in body])
    return SourceNode.build(
        NodeKind.IF, None, [(Role.CONDITION, condition), ("consequence", block)]
    )


def n_block(*statements: SourceNode) -> SourceNode:
    return SourceNode.build("block", None, [(None, s) for s in statements])


def sample_nodes():
    """One node of every kind the matcher distinguishes."""
    return [
        n_name("x"),
        n_int(1),
        n_long(1),
        n_double(1.0),
        n_string("s"),
        n_bool(True),
        n_null(),
        n_this(),
        n_call("f", n_int(1)),
        n_call("m", n_int(1), receiver=n_name("o")),
        n_field(n_name("o"), "f"),
        n_new("Foo", n_int(1)),
        n_instanceof(n_name("x"), "Foo"),
        n_unary("-", n_int(1)),
        n_binary("+", n_int(1), n_int(2)),
        n_prefix("++", n_name("i")),
        n_postfix("++", n_name("i")),
        n_index(n_name("a"), n_int(0)),
        n_lambda(),
    ]


def pair_for(root: SourceNode, node: SourceNode) -> NodePair:
    """The traversal pair visiting *node* (by identity) under *root*."""
    for pair in iter_pairs(root):
        if pair.node is node:
            return pair
    raise LookupError(f"{node!r} not under {root!r}")


# ═══════════════════════════════════════════════════════════════════════════
#  Java sources
# ═══════════════════════════════════════════════════════════════════════════

DEBUG_PRINT_JAVA = """\
class Debug {
    void run(java.io.PrintStream out, java.io.PrintStream log) {
        out.println("debug");
        out.println("debug", 1);
        log.println("debug");
        out.println("info");
    }
}
"""

NULL_CHECK_JAVA = """\
class Nulls {
    boolean check(Object x, Object y) {
        if (x == null) {
            return false;
        }
        if (y.equals(null) || y == null) {
            return true;
        }
        boolean b = x == null;
        return b;
    }
}
"""

BROKEN_JAVA = """\
class Broken {
    void run( {
}
"""


@pytest.fixture(scope="module")
def java_parser() -> JavaParser:
    return JavaParser()


def parse_unit(parser: JavaParser, source: str) -> SourceNode:
    return parser.parse(source.encode("utf-8"))


def parse_body(parser: JavaParser, body: str) -> SourceNode:
    """Parse *body* as the statements of a method."""
    return parse_unit(parser, "class T {\n  void m() {\n" + body + "\n  }\n}\n")


def find_kind(root: SourceNode, kind: str) -> SourceNode:
    """First node of *kind* in pre-order."""
    for pair in iter_pairs(root):
        if pair.node.kind == kind:
            return pair.node
    raise LookupError(kind)


def find_all(root: SourceNode, kind: str):
    return [pair.node for pair in iter_pairs(root) if pair.node.kind == kind]
