# tests/test_patterns.py
"""
Tests for the structural matcher: every pattern variant against
hand-built source nodes.
"""

import pytest

from javasee.errors import FatalError, SourceSpan
from javasee.patterns import (
    PATTERN_VARIANTS,
    _TESTERS,
    ArrayAccess,
    BinaryOp,
    BinaryOperator,
    FieldSelection,
    FunctionCall,
    IDReference,
    InstanceCreation,
    InstanceofTest,
    LambdaPlaceholder,
    Literal,
    LiteralType,
    LiteralWildcard,
    MethodCall,
    NullLiteral,
    PatternNode,
    RepeatedParameter,
    ThisLiteral,
    UnaryOp,
    UnaryOperator,
    Update,
    UpdateOperator,
    Wildcard,
    test_node,
)
from tests.conftest import (
    n_binary,
    n_bool,
    n_call,
    n_double,
    n_field,
    n_instanceof,
    n_int,
    n_name,
    n_new,
    n_null,
    n_postfix,
    n_prefix,
    n_string,
    n_unary,
    sample_nodes,
)

ONE = Literal(LiteralType.INT, 1)

# (pattern, index into sample_nodes() of the only node it matches)
EXACT_PATTERNS = [
    (IDReference("x"), 0),
    (ONE, 1),
    (Literal(LiteralType.DOUBLE, 1.0), 3),
    (Literal(LiteralType.STRING, "s"), 4),
    (Literal(LiteralType.BOOLEAN, True), 5),
    (NullLiteral(), 6),
    (ThisLiteral(), 7),
    (FunctionCall("f", (ONE,)), 8),
    (MethodCall(IDReference("o"), "m", (ONE,)), 9),
    (FieldSelection(IDReference("o"), "f"), 10),
    (InstanceCreation("Foo", (ONE,)), 11),
    (InstanceofTest(IDReference("x"), "Foo"), 12),
    (UnaryOp(UnaryOperator.MINUS, ONE), 13),
    (BinaryOp(BinaryOperator.ADD, ONE, Literal(LiteralType.INT, 2)), 14),
    (Update(UpdateOperator.PREFIX_INCREMENT, IDReference("i")), 15),
    (Update(UpdateOperator.POSTFIX_INCREMENT, IDReference("i")), 16),
    (ArrayAccess(IDReference("a"), Literal(LiteralType.INT, 0)), 17),
    (LambdaPlaceholder(), 18),
]


class TestDispatch:

    def test_every_variant_has_a_tester(self):
        assert set(_TESTERS) == set(PATTERN_VARIANTS)

    def test_unregistered_variant_is_fatal(self):
        class Stray(PatternNode):
            __slots__ = ()

        with pytest.raises(FatalError):
            test_node(Stray(), n_int(1))

    def test_equality_ignores_location(self):
        a = IDReference("x", loc=SourceSpan(line=1, column=1))
        b = IDReference("x", loc=SourceSpan(line=3, column=7))
        assert a == b


class TestKindMismatch:

    @pytest.mark.parametrize("pattern,target", EXACT_PATTERNS,
                             ids=[type(p).__name__ + str(i) for p, i in EXACT_PATTERNS])
    def test_matches_only_its_own_kind(self, pattern, target):
        nodes = sample_nodes()
        for index, node in enumerate(nodes):
            assert test_node(pattern, node) is (index == target), node

    def test_wildcard_matches_every_kind(self):
        for node in sample_nodes():
            assert test_node(Wildcard(), node)

    def test_repeated_marker_never_matches_directly(self):
        for node in sample_nodes():
            assert not test_node(RepeatedParameter(), node)


class TestLiterals:

    def test_int_value_must_be_equal(self):
        assert ONE.test_node(n_int(1))
        assert not ONE.test_node(n_int(2))

    def test_double_never_matches_int_of_equal_value(self):
        assert not Literal(LiteralType.DOUBLE, 1.0).test_node(n_int(1))
        assert not ONE.test_node(n_double(1.0))

    def test_double_equality_is_exact(self):
        pattern = Literal(LiteralType.DOUBLE, 0.1)
        assert pattern.test_node(n_double(0.1))
        assert not pattern.test_node(n_double(0.1 + 1e-12))

    def test_boolean_is_not_an_int(self):
        assert not Literal(LiteralType.BOOLEAN, True).test_node(n_int(1))
        assert not ONE.test_node(n_bool(True))

    def test_string_is_exact(self):
        pattern = Literal(LiteralType.STRING, "debug")
        assert pattern.test_node(n_string("debug"))
        assert not pattern.test_node(n_string("Debug"))

    @pytest.mark.parametrize("literal_type,node,other", [
        (LiteralType.INT, n_int(42), n_double(42.0)),
        (LiteralType.DOUBLE, n_double(2.5), n_int(2)),
        (LiteralType.STRING, n_string(""), n_name("s")),
        (LiteralType.BOOLEAN, n_bool(False), n_int(0)),
    ])
    def test_literal_wildcards(self, literal_type, node, other):
        pattern = LiteralWildcard(literal_type)
        assert pattern.test_node(node)
        assert not pattern.test_node(other)


class TestCalls:

    def test_repeated_marker_matches_any_arity(self):
        pattern = FunctionCall("f", (RepeatedParameter(),))
        assert pattern.test_node(n_call("f"))
        assert pattern.test_node(n_call("f", n_int(1)))
        assert pattern.test_node(n_call("f", n_int(1), n_string("a")))

    def test_arity_must_match_without_marker(self):
        pattern = FunctionCall("f", (Wildcard(),))
        assert not pattern.test_node(n_call("f"))
        assert pattern.test_node(n_call("f", n_int(1)))
        assert not pattern.test_node(n_call("f", n_int(1), n_int(2)))

    def test_arguments_match_positionally(self):
        pattern = FunctionCall("f", (ONE, Literal(LiteralType.STRING, "a")))
        assert pattern.test_node(n_call("f", n_int(1), n_string("a")))
        assert not pattern.test_node(n_call("f", n_string("a"), n_int(1)))

    def test_name_must_match(self):
        assert not FunctionCall("g", ()).test_node(n_call("f"))

    def test_absent_receiver_requires_unqualified_call(self):
        pattern = MethodCall(None, "f", ())
        assert pattern.test_node(n_call("f"))
        assert not pattern.test_node(n_call("f", receiver=n_name("o")))

    def test_function_call_rejects_qualified_call(self):
        assert not FunctionCall("f", ()).test_node(n_call("f", receiver=n_name("o")))

    def test_wildcard_receiver_requires_a_receiver(self):
        pattern = MethodCall(Wildcard(), "println", (RepeatedParameter(),))
        assert pattern.test_node(n_call("println", receiver=n_field(n_name("System"), "out")))
        assert not pattern.test_node(n_call("println"))

    def test_receiver_is_matched(self):
        pattern = MethodCall(IDReference("out"), "println", (Wildcard(),))
        assert pattern.test_node(n_call("println", n_int(1), receiver=n_name("out")))
        assert not pattern.test_node(n_call("println", n_int(1), receiver=n_name("log")))

    def test_instance_creation(self):
        pattern = InstanceCreation("Foo", (RepeatedParameter(),))
        assert pattern.test_node(n_new("Foo"))
        assert pattern.test_node(n_new("Foo", n_int(1)))
        assert not pattern.test_node(n_new("Bar"))


class TestOperators:

    def test_field_selection(self):
        pattern = FieldSelection(IDReference("System"), "out")
        assert pattern.test_node(n_field(n_name("System"), "out"))
        assert not pattern.test_node(n_field(n_name("System"), "err"))
        assert not pattern.test_node(n_field(n_name("Sys"), "out"))

    def test_instanceof_requires_target_match(self):
        assert InstanceofTest(Wildcard(), "Foo").test_node(n_instanceof(n_name("x"), "Foo"))
        assert not InstanceofTest(IDReference("y"), "Foo").test_node(
            n_instanceof(n_name("x"), "Foo")
        )
        assert not InstanceofTest(Wildcard(), "Bar").test_node(
            n_instanceof(n_name("x"), "Foo")
        )

    def test_unary_operand_is_matched(self):
        pattern = UnaryOp(UnaryOperator.MINUS, ONE)
        assert pattern.test_node(n_unary("-", n_int(1)))
        assert not pattern.test_node(n_unary("-", n_int(2)))
        assert not pattern.test_node(n_unary("+", n_int(1)))

    def test_logical_not(self):
        pattern = UnaryOp(UnaryOperator.LOGICAL_NOT, IDReference("ok"))
        assert pattern.test_node(n_unary("!", n_name("ok")))
        assert not pattern.test_node(n_unary("~", n_name("ok")))

    @pytest.mark.parametrize("operator", list(BinaryOperator))
    def test_binary_operator_must_match(self, operator):
        pattern = BinaryOp(operator, Wildcard(), Wildcard())
        assert pattern.test_node(n_binary(operator.value, n_int(1), n_int(2)))
        other = "&&" if operator is not BinaryOperator.ADD else "-"
        assert not pattern.test_node(n_binary(other, n_int(1), n_int(2)))

    def test_binary_operands_are_ordered(self):
        pattern = BinaryOp(BinaryOperator.EQ, IDReference("x"), NullLiteral())
        assert pattern.test_node(n_binary("==", n_name("x"), n_null()))
        assert not pattern.test_node(n_binary("==", n_null(), n_name("x")))

    def test_prefix_and_postfix_are_distinct(self):
        pre = Update(UpdateOperator.PREFIX_INCREMENT, Wildcard())
        post = Update(UpdateOperator.POSTFIX_INCREMENT, Wildcard())
        dec = Update(UpdateOperator.POSTFIX_DECREMENT, Wildcard())
        assert pre.test_node(n_prefix("++", n_name("i")))
        assert not pre.test_node(n_postfix("++", n_name("i")))
        assert post.test_node(n_postfix("++", n_name("i")))
        assert not dec.test_node(n_postfix("++", n_name("i")))
