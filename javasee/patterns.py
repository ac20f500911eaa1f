"""javasee/patterns.py – Structural pattern AST and matcher.

A pattern is a small tree of frozen dataclasses describing the shape of a
Java expression.  ``test_node(pattern, node)`` decides whether a
``SourceNode`` has exactly that shape; ``Kind`` wraps a top-level pattern
with a context requirement evaluated against the ``NodePair`` the analyzer
is visiting.

Design invariants
-----------------
* The variant set is closed.  Every variant has exactly one tester in
  ``_TESTERS``; ``PATTERN_VARIANTS`` lists them all.
* Matching is exact: the target kind must be the variant's kind, payloads
  must be equal, and sub-patterns match target operands positionally.
  Nothing is coerced (an int pattern never matches a double literal).
* Patterns are immutable and shared read-only by every traversal.
  ``loc`` is excluded from equality, so two patterns compiled from
  differently spaced text compare equal.

Module layout
-------------
§1  Variant tags (operators, literal types, contexts)
§2  Pattern variants
§3  Tester dispatch
§4  Kind
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence, Tuple

from .errors import NO_SPAN, FatalError, SourceSpan
from .source import NodeKind, Role, SourceNode
from .traversal import is_conditional, is_discarded

if TYPE_CHECKING:
    from .traversal import NodePair

# ════════════════════════════════════════════════════════════════════════
# §1  Variant tags
# ════════════════════════════════════════════════════════════════════════


class LiteralType(Enum):
    INT = NodeKind.INT_LITERAL
    DOUBLE = NodeKind.DOUBLE_LITERAL
    STRING = NodeKind.STRING_LITERAL
    BOOLEAN = NodeKind.BOOLEAN_LITERAL


class UnaryOperator(Enum):
    PLUS = "+"
    MINUS = "-"
    LOGICAL_NOT = "!"


class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    EQ = "=="
    NE = "!="
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"
    SHL = "<<"
    SHR = ">>"
    USHR = ">>>"


class UpdateOperator(Enum):
    PREFIX_INCREMENT = (NodeKind.PREFIX_UPDATE, "++")
    PREFIX_DECREMENT = (NodeKind.PREFIX_UPDATE, "--")
    POSTFIX_INCREMENT = (NodeKind.POSTFIX_UPDATE, "++")
    POSTFIX_DECREMENT = (NodeKind.POSTFIX_UPDATE, "--")

    @property
    def node_kind(self) -> str:
        return self.value[0]

    @property
    def symbol(self) -> str:
        return self.value[1]


class Context(Enum):
    ANY = auto()
    CONDITIONAL = auto()
    DISCARDED = auto()


# ════════════════════════════════════════════════════════════════════════
# §2  Pattern variants
# ════════════════════════════════════════════════════════════════════════


class PatternNode:
    """Base of every pattern variant."""

    __slots__ = ()

    def test_node(self, node: SourceNode) -> bool:
        return test_node(self, node)

    def matches(self, pair: "NodePair") -> bool:
        return test_node(self, pair.node)


def _loc():
    return field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Wildcard(PatternNode):
    """``_`` – any expression."""

    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class IDReference(PatternNode):
    name: str
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class Literal(PatternNode):
    """A literal of one exact type and value."""

    literal_type: LiteralType
    value: object
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class LiteralWildcard(PatternNode):
    """``:int:``, ``:double:``, ``:string:``, ``:bool:`` – any value of a type."""

    literal_type: LiteralType
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class NullLiteral(PatternNode):
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class ThisLiteral(PatternNode):
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class FieldSelection(PatternNode):
    receiver: PatternNode
    name: str
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class MethodCall(PatternNode):
    """``recv.name(args)``; a ``None`` receiver only matches unqualified calls."""

    receiver: Optional[PatternNode]
    name: str
    args: Tuple[PatternNode, ...] = ()
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class FunctionCall(PatternNode):
    """``name(args)`` – an unqualified call."""

    name: str
    args: Tuple[PatternNode, ...] = ()
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class InstanceCreation(PatternNode):
    type_name: str
    args: Tuple[PatternNode, ...] = ()
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class InstanceofTest(PatternNode):
    target: PatternNode
    type_name: str
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class UnaryOp(PatternNode):
    operator: UnaryOperator
    operand: PatternNode
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class BinaryOp(PatternNode):
    operator: BinaryOperator
    lhs: PatternNode
    rhs: PatternNode
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class Update(PatternNode):
    """Prefix/postfix increment or decrement."""

    operator: UpdateOperator
    operand: PatternNode
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class ArrayAccess(PatternNode):
    array: PatternNode
    index: PatternNode
    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class LambdaPlaceholder(PatternNode):
    """``:lambda:`` – any lambda expression."""

    loc: SourceSpan = _loc()


@dataclass(frozen=True, slots=True)
class RepeatedParameter(PatternNode):
    """``...`` – as the sole argument, any argument list."""

    loc: SourceSpan = _loc()


PATTERN_VARIANTS: Tuple[type, ...] = (
    Wildcard,
    IDReference,
    Literal,
    LiteralWildcard,
    NullLiteral,
    ThisLiteral,
    FieldSelection,
    MethodCall,
    FunctionCall,
    InstanceCreation,
    InstanceofTest,
    UnaryOp,
    BinaryOp,
    Update,
    ArrayAccess,
    LambdaPlaceholder,
    RepeatedParameter,
)


# ════════════════════════════════════════════════════════════════════════
# §3  Tester dispatch
# ════════════════════════════════════════════════════════════════════════

_TESTERS: Dict[type, Callable[..., bool]] = {}


def _register(variant: type):
    """Decorator: register the tester for *variant*."""
    def deco(fn):
        _TESTERS[variant] = fn
        return fn
    return deco


def test_node(pattern: PatternNode, node: SourceNode) -> bool:
    """True if *node* has exactly the structure *pattern* describes."""
    tester = _TESTERS.get(type(pattern))
    if tester is None:
        raise FatalError(f"no matcher registered for {type(pattern).__name__}")
    return tester(pattern, node)


# Tell pytest this is not a test function.
test_node.__test__ = False


def test_arguments(patterns: Sequence[PatternNode], args: Sequence[SourceNode]) -> bool:
    """Positional argument matching with the sole-``...`` escape."""
    if len(patterns) == 1 and isinstance(patterns[0], RepeatedParameter):
        return True
    if len(patterns) != len(args):
        return False
    return all(test_node(p, a) for p, a in zip(patterns, args))


test_arguments.__test__ = False


@_register(Wildcard)
def _test_wildcard(pattern: Wildcard, node: SourceNode) -> bool:
    return True


@_register(IDReference)
def _test_id(pattern: IDReference, node: SourceNode) -> bool:
    return node.kind == NodeKind.NAME and node.value == pattern.name


@_register(Literal)
def _test_literal(pattern: Literal, node: SourceNode) -> bool:
    return node.kind == pattern.literal_type.value and node.value == pattern.value


@_register(LiteralWildcard)
def _test_literal_wildcard(pattern: LiteralWildcard, node: SourceNode) -> bool:
    return node.kind == pattern.literal_type.value


@_register(NullLiteral)
def _test_null(pattern: NullLiteral, node: SourceNode) -> bool:
    return node.kind == NodeKind.NULL_LITERAL


@_register(ThisLiteral)
def _test_this(pattern: ThisLiteral, node: SourceNode) -> bool:
    return node.kind == NodeKind.THIS


@_register(FieldSelection)
def _test_field(pattern: FieldSelection, node: SourceNode) -> bool:
    if node.kind != NodeKind.FIELD_ACCESS or node.value != pattern.name:
        return False
    receiver = node.child(Role.OBJECT)
    return receiver is not None and test_node(pattern.receiver, receiver)


@_register(MethodCall)
def _test_method_call(pattern: MethodCall, node: SourceNode) -> bool:
    if node.kind != NodeKind.METHOD_CALL or node.value != pattern.name:
        return False
    receiver = node.child(Role.OBJECT)
    if pattern.receiver is None:
        if receiver is not None:
            return False
    elif receiver is None or not test_node(pattern.receiver, receiver):
        return False
    return test_arguments(pattern.args, node.children_in(Role.ARGUMENT))


@_register(FunctionCall)
def _test_function_call(pattern: FunctionCall, node: SourceNode) -> bool:
    if node.kind != NodeKind.METHOD_CALL or node.value != pattern.name:
        return False
    if node.child(Role.OBJECT) is not None:
        return False
    return test_arguments(pattern.args, node.children_in(Role.ARGUMENT))


@_register(InstanceCreation)
def _test_instance_creation(pattern: InstanceCreation, node: SourceNode) -> bool:
    if node.kind != NodeKind.OBJECT_CREATION or node.value != pattern.type_name:
        return False
    return test_arguments(pattern.args, node.children_in(Role.ARGUMENT))


@_register(InstanceofTest)
def _test_instanceof(pattern: InstanceofTest, node: SourceNode) -> bool:
    if node.kind != NodeKind.INSTANCEOF or node.value != pattern.type_name:
        return False
    target = node.child(Role.LEFT)
    return target is not None and test_node(pattern.target, target)


@_register(UnaryOp)
def _test_unary(pattern: UnaryOp, node: SourceNode) -> bool:
    if node.kind != NodeKind.UNARY or node.value != pattern.operator.value:
        return False
    operand = node.child(Role.OPERAND)
    return operand is not None and test_node(pattern.operand, operand)


@_register(BinaryOp)
def _test_binary(pattern: BinaryOp, node: SourceNode) -> bool:
    if node.kind != NodeKind.BINARY or node.value != pattern.operator.value:
        return False
    lhs, rhs = node.child(Role.LEFT), node.child(Role.RIGHT)
    if lhs is None or rhs is None:
        return False
    return test_node(pattern.lhs, lhs) and test_node(pattern.rhs, rhs)


@_register(Update)
def _test_update(pattern: Update, node: SourceNode) -> bool:
    if node.kind != pattern.operator.node_kind or node.value != pattern.operator.symbol:
        return False
    operand = node.child(Role.OPERAND)
    return operand is not None and test_node(pattern.operand, operand)


@_register(ArrayAccess)
def _test_array_access(pattern: ArrayAccess, node: SourceNode) -> bool:
    if node.kind != NodeKind.ARRAY_ACCESS:
        return False
    array, index = node.child(Role.ARRAY), node.child(Role.INDEX)
    if array is None or index is None:
        return False
    return test_node(pattern.array, array) and test_node(pattern.index, index)


@_register(LambdaPlaceholder)
def _test_lambda(pattern: LambdaPlaceholder, node: SourceNode) -> bool:
    return node.kind == NodeKind.LAMBDA


@_register(RepeatedParameter)
def _test_repeated(pattern: RepeatedParameter, node: SourceNode) -> bool:
    return False


# ════════════════════════════════════════════════════════════════════════
# §4  Kind
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Kind:
    """A top-level pattern plus the context it must appear in.

    ``Context.ANY`` ignores ``negated``.
    """

    expression: PatternNode
    context: Context = Context.ANY
    negated: bool = False

    def matches(self, pair: "NodePair") -> bool:
        if not test_node(self.expression, pair.node):
            return False
        if self.context is Context.CONDITIONAL:
            return is_conditional(pair, self.negated)
        if self.context is Context.DISCARDED:
            return is_discarded(pair, self.negated)
        return True

    def __str__(self) -> str:
        if self.context is Context.ANY:
            return repr(self.expression)
        bang = "!" if self.negated else ""
        return f"{self.expression!r} [{bang}{self.context.name.lower()}]"
