"""javasee/traversal.py – Node/parent pairs and context classifiers.

The analyzer walks a ``SourceNode`` tree in pre-order and hands each
``NodePair`` to the rules.  A pair links to its parent's pair, so the
context classifiers below can look at the parent and grandparent without
the tree ever storing parent pointers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .source import NodeKind, Role, SourceNode

__all__ = ["NodePair", "iter_pairs", "is_conditional", "is_discarded"]

_CONDITION_OWNERS = frozenset({
    NodeKind.IF,
    NodeKind.WHILE,
    NodeKind.DO,
    NodeKind.FOR,
    NodeKind.TERNARY,
})

# Nodes that are never values themselves.
_NON_VALUE_SUFFIXES = ("_statement", "_declaration", "block", "_body", "program")

# Expressions that read every value-kind child they keep.
_OPERAND_OWNERS = frozenset({
    NodeKind.METHOD_CALL,
    NodeKind.FIELD_ACCESS,
    NodeKind.OBJECT_CREATION,
    NodeKind.INSTANCEOF,
    NodeKind.UNARY,
    NodeKind.BINARY,
    NodeKind.PREFIX_UPDATE,
    NodeKind.POSTFIX_UPDATE,
    NodeKind.ARRAY_ACCESS,
    NodeKind.TERNARY,
})

# (parent kind, role) pairs where the child's value is used.
_CONSUMING_SLOTS = frozenset({
    ("assignment_expression", "right"),
    ("variable_declarator", "value"),
    ("cast_expression", "value"),
    ("lambda_expression", "body"),
    ("enhanced_for_statement", "value"),
    ("switch_expression", Role.CONDITION),
    ("element_value_pair", "value"),
    ("return_statement", None),
    ("throw_statement", None),
    ("yield_statement", None),
    ("assert_statement", None),
    ("synchronized_statement", None),
    ("array_initializer", None),
    ("dimensions_expr", None),
    ("argument_list", None),
})


@dataclass(frozen=True, slots=True, eq=False)
class NodePair:
    """A visited node and the pair of its direct syntactic parent."""

    node: SourceNode
    outer: Optional["NodePair"] = None

    @property
    def parent(self) -> Optional[SourceNode]:
        return self.outer.node if self.outer is not None else None

    @property
    def role(self) -> Optional[str]:
        """Role of ``node`` within ``parent``."""
        if self.outer is None:
            return None
        return self.outer.node.role_of(self.node)

    def __repr__(self) -> str:
        return f"NodePair({self.node!r}, parent={self.parent!r})"


def iter_pairs(root: SourceNode) -> Iterator[NodePair]:
    """Pre-order, left-to-right walk of *root* yielding one pair per node."""
    stack = [NodePair(root)]
    while stack:
        pair = stack.pop()
        yield pair
        for child in reversed(pair.node.children):
            stack.append(NodePair(child, pair))


def _is_condition(pair: NodePair) -> bool:
    parent = pair.parent
    return (
        parent is not None
        and parent.kind in _CONDITION_OWNERS
        and pair.role == Role.CONDITION
    )


def is_conditional(pair: NodePair, negated: bool = False) -> bool:
    """Whether the node is a loop/branch condition.

    With *negated*, whether it is the operand of a ``!`` that is one.
    """
    if not negated:
        return _is_condition(pair)
    outer = pair.outer
    return (
        outer is not None
        and outer.node.kind == NodeKind.UNARY
        and outer.node.value == "!"
        and _is_condition(outer)
    )


def _value_unused(pair: NodePair) -> bool:
    parent = pair.parent
    if parent is None:
        return False
    if parent.kind == NodeKind.EXPRESSION_STATEMENT:
        return True
    return (
        parent.kind == NodeKind.FOR
        and pair.role in (Role.INIT, Role.UPDATE)
        and not pair.node.kind.endswith(_NON_VALUE_SUFFIXES)
    )


def _value_consumed(pair: NodePair) -> bool:
    parent = pair.parent
    if parent is None or pair.node.kind.endswith(_NON_VALUE_SUFFIXES):
        return False
    if parent.kind in _OPERAND_OWNERS or _is_condition(pair):
        return True
    return (parent.kind, pair.role) in _CONSUMING_SLOTS


def is_discarded(pair: NodePair, negated: bool = False) -> bool:
    """Whether the node's value is thrown away.

    With *negated*, whether the node is an expression whose value is
    read by an enclosing expression, declaration, return or condition.
    """
    if not negated:
        return _value_unused(pair)
    return _value_consumed(pair)
