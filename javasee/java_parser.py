# javasee/java_parser.py
"""
javasee/java_parser.py – Java host parser.

Parses Java source with tree-sitter and normalises the concrete syntax
tree into ``SourceNode`` trees:

  * anonymous tokens and comments are dropped; parenthesised expressions
    are replaced by the expression they enclose;
  * calls, member accesses, object creations and ``instanceof`` tests keep
    their name / simple type name as ``value`` and only their expression
    operands as children;
  * literals carry decoded values, so ``0x10`` and ``16`` are the same int;
  * identifiers in declaration position become ``simple_name`` nodes and
    never match an identifier pattern.

Conversion is iterative, so deeply nested sources never hit the recursion
limit.

Public API
----------
    JavaParser().parse(source: bytes, path: str = "") -> SourceNode
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import tree_sitter_java
from tree_sitter import Language, Node, Parser

from .errors import E, ScriptParseError, SourceSpan
from .literals import decode_double, decode_int, decode_string, is_long_literal
from .source import NodeKind, Role, SourceNode

logger = logging.getLogger(__name__)

JAVA_LANGUAGE = Language(tree_sitter_java.language())

_COMMENTS = frozenset({"line_comment", "block_comment"})

# Subtrees whose contents are fully described by the node text.
_OPAQUE = frozenset({
    "string_literal",
    "character_literal",
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
    "decimal_floating_point_literal",
    "hex_floating_point_literal",
})

# Roles in which an identifier names a declaration rather than a value.
_DECLARATION_ROLES = frozenset({"name", "parameters"})

# Node types whose identifier children are all declaration-like names.
_DECLARATION_CONTAINERS = frozenset({
    "scoped_identifier",
    "inferred_parameters",
    "labeled_statement",
    "break_statement",
    "continue_statement",
})

_Children = List[Tuple[Optional[str], SourceNode]]
_Normalizer = Callable[[Node, _Children, SourceSpan], Optional[SourceNode]]

_NORMALIZERS: Dict[str, _Normalizer] = {}


def _register(*ts_types: str):
    """Decorator: register a normaliser for the given tree-sitter types."""
    def deco(fn):
        for ts_type in ts_types:
            _NORMALIZERS[ts_type] = fn
        return fn
    return deco


# ═══════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _text(ts_node: Node) -> str:
    return ts_node.text.decode("utf-8", errors="replace")


def _span(ts_node: Node) -> SourceSpan:
    start_row, start_col = ts_node.start_point
    end_row, end_col = ts_node.end_point
    return SourceSpan(
        line=start_row + 1,
        column=start_col + 1,
        end_line=end_row + 1,
        end_column=end_col + 1,
    )


def _declared(node: SourceNode) -> SourceNode:
    if node.kind != NodeKind.NAME:
        return node
    return SourceNode(kind=NodeKind.SIMPLE_NAME, value=node.value, span=node.span)


def _simple_type_name(type_text: str) -> str:
    """``java.util.List<String>`` -> ``List``."""
    base = type_text.split("<", 1)[0].split("(", 1)[0]
    return base.rsplit(".", 1)[-1].strip()


def _named_children(ts_node: Node) -> List[Tuple[Optional[str], Node]]:
    """``(field name, child)`` for every named, non-comment child."""
    if ts_node.type in _OPAQUE:
        return []
    out: List[Tuple[Optional[str], Node]] = []
    cursor = ts_node.walk()
    if not cursor.goto_first_child():
        return out
    while True:
        child = cursor.node
        if child.is_named and child.type not in _COMMENTS:
            out.append((cursor.field_name, child))
        if not cursor.goto_next_sibling():
            return out


def _operator(ts_node: Node) -> str:
    op = ts_node.child_by_field_name("operator")
    return op.type if op is not None else ""


def _role_value(children: _Children, role: str):
    for child_role, child in children:
        if child_role == role:
            return child.value
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  Normalisers
# ═══════════════════════════════════════════════════════════════════════════

def _generic(ts_node: Node, children: _Children, span: SourceSpan) -> SourceNode:
    retag_all = ts_node.type in _DECLARATION_CONTAINERS
    pairs = [
        (role, _declared(child) if retag_all or role in _DECLARATION_ROLES else child)
        for role, child in children
    ]
    value = _text(ts_node) if not pairs else None
    return SourceNode.build(ts_node.type, value, pairs, span)


@_register("parenthesized_expression")
def _parenthesized(ts_node, children, span):
    return children[0][1] if children else None


@_register("identifier")
def _identifier(ts_node, children, span):
    return SourceNode(kind=NodeKind.NAME, value=_text(ts_node), span=span)


@_register(
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
)
def _integer(ts_node, children, span):
    text = _text(ts_node)
    kind = NodeKind.LONG_LITERAL if is_long_literal(text) else NodeKind.INT_LITERAL
    return SourceNode(kind=kind, value=decode_int(text), span=span)


@_register("decimal_floating_point_literal", "hex_floating_point_literal")
def _floating(ts_node, children, span):
    return SourceNode(
        kind=NodeKind.DOUBLE_LITERAL, value=decode_double(_text(ts_node)), span=span
    )


@_register("string_literal", "character_literal")
def _string(ts_node, children, span):
    text = _text(ts_node)
    kind = (
        NodeKind.STRING_LITERAL if ts_node.type == "string_literal"
        else NodeKind.CHAR_LITERAL
    )
    try:
        value = decode_string(text)
    except ValueError as exc:
        raise ScriptParseError(str(exc), span=span) from exc
    return SourceNode(kind=kind, value=value, span=span)


@_register("true", "false")
def _boolean(ts_node, children, span):
    return SourceNode(
        kind=NodeKind.BOOLEAN_LITERAL, value=ts_node.type == "true", span=span
    )


@_register("null_literal")
def _null(ts_node, children, span):
    return SourceNode(kind=NodeKind.NULL_LITERAL, span=span)


@_register("method_invocation")
def _method_invocation(ts_node, children, span):
    pairs: _Children = []
    for role, child in children:
        if role == Role.OBJECT:
            pairs.append((Role.OBJECT, child))
        elif role == "arguments":
            pairs.extend((Role.ARGUMENT, arg) for arg in child.children)
    return SourceNode.build(
        NodeKind.METHOD_CALL, _role_value(children, "name"), pairs, span
    )


@_register("field_access")
def _field_access(ts_node, children, span):
    pairs = [(role, child) for role, child in children if role == Role.OBJECT]
    return SourceNode.build(
        NodeKind.FIELD_ACCESS, _role_value(children, "field"), pairs, span
    )


@_register("object_creation_expression")
def _object_creation(ts_node, children, span):
    type_node = ts_node.child_by_field_name("type")
    type_name = _simple_type_name(_text(type_node)) if type_node is not None else ""
    pairs: _Children = []
    for role, child in children:
        if role == "arguments":
            pairs.extend((Role.ARGUMENT, arg) for arg in child.children)
        elif role not in ("type", "type_arguments"):
            pairs.append((role, child))
    return SourceNode.build(NodeKind.OBJECT_CREATION, type_name, pairs, span)


@_register("instanceof_expression")
def _instanceof(ts_node, children, span):
    type_node = ts_node.child_by_field_name("right")
    if type_node is None:
        type_node = ts_node.child_by_field_name("pattern")
    type_name = _simple_type_name(_text(type_node)) if type_node is not None else ""
    pairs = [(role, child) for role, child in children if role == Role.LEFT]
    return SourceNode.build(NodeKind.INSTANCEOF, type_name, pairs, span)


@_register("unary_expression")
def _unary(ts_node, children, span):
    return SourceNode.build(NodeKind.UNARY, _operator(ts_node), children, span)


@_register("binary_expression")
def _binary(ts_node, children, span):
    return SourceNode.build(NodeKind.BINARY, _operator(ts_node), children, span)


@_register("update_expression")
def _update(ts_node, children, span):
    first = ts_node.children[0].type
    if first in ("++", "--"):
        kind, op = NodeKind.PREFIX_UPDATE, first
    else:
        kind, op = NodeKind.POSTFIX_UPDATE, ts_node.children[-1].type
    operands = [(Role.OPERAND, child) for _, child in children]
    return SourceNode.build(kind, op, operands, span)


@_register("method_reference")
def _method_reference(ts_node, children, span):
    pairs = list(children)
    if len(pairs) > 1:
        role, last = pairs[-1]
        pairs[-1] = (role, _declared(last))
    return SourceNode.build(ts_node.type, None, pairs, span)


# ═══════════════════════════════════════════════════════════════════════════
#  Parser
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class _Frame:
    ts_node: Node
    role: Optional[str]
    pending: List[Tuple[Optional[str], Node]]
    built: _Children = field(default_factory=list)


def _first_error(root: Node) -> Node:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(
            child for child in reversed(node.children)
            if child.has_error or child.is_missing
        )
    return root


class JavaParser:
    """Parses Java compilation units into ``SourceNode`` trees."""

    def __init__(self) -> None:
        self._parser = Parser(JAVA_LANGUAGE)

    def parse(self, source: bytes, path: str = "") -> SourceNode:
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            if bad.is_missing:
                message = f"missing {bad.type!r}"
            else:
                snippet = _text(bad).splitlines()[0] if bad.text else ""
                message = f"syntax error near {snippet[:40]!r}"
            raise ScriptParseError(
                message, path=path, code=E.SCRIPT_SYNTAX,
                span=_span(bad).with_file(path),
            )
        try:
            return self._convert(root)
        except ScriptParseError as exc:
            exc.path = path
            raise

    def _convert(self, root: Node) -> SourceNode:
        stack = [_Frame(root, None, _named_children(root)[::-1])]
        while True:
            frame = stack[-1]
            if frame.pending:
                role, child = frame.pending.pop()
                stack.append(_Frame(child, role, _named_children(child)[::-1]))
                continue
            stack.pop()
            normalize = _NORMALIZERS.get(frame.ts_node.type, _generic)
            node = normalize(frame.ts_node, frame.built, _span(frame.ts_node))
            if not stack:
                if node is None:
                    node = SourceNode(kind="program", span=_span(root))
                logger.debug("converted %s", node)
                return node
            if node is not None:
                stack[-1].built.append((frame.role, node))
