# javasee/source.py
"""
javasee/source.py – The immutable Java syntax tree the matcher runs over.

A ``SourceNode`` is a normalised view of one host-parser node:

    kind      node-kind tag (``NodeKind`` constants; tree-sitter type names
              for everything the matcher does not inspect)
    value     payload: identifier text, operator symbol, decoded literal
              value, method/field name or simple type name
    children  ordered child nodes
    roles     the syntactic role of each child (``"condition"``,
              ``"object"``, ``"argument"``, ...), parallel to ``children``
    span      1-based start/end line:column

Nodes never hold a parent link; context is carried by ``NodePair`` during
traversal.  Nodes compare by identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .errors import NO_SPAN, SourceSpan

__all__ = ["NodeKind", "SourceNode", "Role"]


class NodeKind:
    """Kind tags the pattern matcher and context classifiers rely on."""

    NAME = "identifier"
    SIMPLE_NAME = "simple_name"          # declaration names, never matched by IDReference

    INT_LITERAL = "integer_literal"
    LONG_LITERAL = "long_literal"
    DOUBLE_LITERAL = "floating_point_literal"
    STRING_LITERAL = "string_literal"
    CHAR_LITERAL = "character_literal"
    BOOLEAN_LITERAL = "boolean_literal"
    NULL_LITERAL = "null_literal"
    THIS = "this"

    FIELD_ACCESS = "field_access"
    METHOD_CALL = "method_invocation"
    OBJECT_CREATION = "object_creation_expression"
    INSTANCEOF = "instanceof_expression"
    UNARY = "unary_expression"
    BINARY = "binary_expression"
    PREFIX_UPDATE = "prefix_update_expression"
    POSTFIX_UPDATE = "postfix_update_expression"
    ARRAY_ACCESS = "array_access"
    LAMBDA = "lambda_expression"
    TERNARY = "ternary_expression"

    EXPRESSION_STATEMENT = "expression_statement"
    IF = "if_statement"
    WHILE = "while_statement"
    DO = "do_statement"
    FOR = "for_statement"


class Role:
    """Child role names."""

    CONDITION = "condition"
    OBJECT = "object"
    ARGUMENT = "argument"
    OPERAND = "operand"
    LEFT = "left"
    RIGHT = "right"
    ARRAY = "array"
    INDEX = "index"
    INIT = "init"
    UPDATE = "update"


@dataclass(frozen=True, eq=False, slots=True)
class SourceNode:
    kind: str
    value: Any = None
    children: Tuple["SourceNode", ...] = ()
    roles: Tuple[Optional[str], ...] = ()
    span: SourceSpan = NO_SPAN

    @classmethod
    def build(
        cls,
        kind: str,
        value: Any = None,
        children: Iterable[Tuple[Optional[str], "SourceNode"]] = (),
        span: SourceSpan = NO_SPAN,
    ) -> "SourceNode":
        """Build a node from ``(role, child)`` pairs."""
        pairs = tuple(children)
        return cls(
            kind=kind,
            value=value,
            children=tuple(child for _, child in pairs),
            roles=tuple(role for role, _ in pairs),
            span=span,
        )

    def child(self, role: str) -> Optional["SourceNode"]:
        """First child playing *role*, or None."""
        for child_role, child in zip(self.roles, self.children):
            if child_role == role:
                return child
        return None

    def children_in(self, role: str) -> Tuple["SourceNode", ...]:
        """All children playing *role*, in order."""
        return tuple(
            child for child_role, child in zip(self.roles, self.children)
            if child_role == role
        )

    def role_of(self, node: "SourceNode") -> Optional[str]:
        """Role *node* plays as a direct child of this node (by identity)."""
        for child_role, child in zip(self.roles, self.children):
            if child is node:
                return child_role
        return None

    def __repr__(self) -> str:
        payload = f" {self.value!r}" if self.value is not None else ""
        return f"<{self.kind}{payload} @{self.span.line}:{self.span.column}>"
