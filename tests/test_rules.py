# tests/test_rules.py
"""
Tests for javasee.rules: compilation, justifications and examples.
"""

import pytest

from javasee.errors import PatternCompileError
from javasee.patterns import Context
from javasee.rules import ExampleResult, Rule, RuleSpec, check_examples, compile_rule
from javasee.traversal import iter_pairs
from tests.conftest import n_binary, n_block, n_if, n_name, n_null, n_return, pair_for


def null_rule(**overrides):
    fields = dict(
        id="java.null_check",
        message="Comparison with null\n\nPrefer Objects.isNull.",
        patterns=("_ == null",),
    )
    fields.update(overrides)
    return compile_rule(RuleSpec(**fields))


class TestCompileRule:

    def test_compiles_every_pattern(self):
        rule = null_rule(
            patterns=("_ == null", "null == _ [conditional]"),
            justifications=("this == null",),
            tags=("style",),
        )
        assert len(rule.patterns) == 2
        assert rule.patterns[1].context is Context.CONDITIONAL
        assert len(rule.justifications) == 1
        assert rule.pattern_texts == ("_ == null", "null == _ [conditional]")
        assert rule.justification_texts == ("this == null",)
        assert rule.tags == ("style",)

    def test_summary_is_first_line(self):
        assert null_rule().summary == "Comparison with null"
        assert null_rule(message="").summary == ""

    def test_bad_pattern_names_the_rule(self):
        with pytest.raises(PatternCompileError) as info:
            null_rule(patterns=("_ == null", "_ =="))
        assert info.value.rule_id == "java.null_check"
        assert any("java.null_check" in note for note in info.value.error_message.notes)

    def test_bad_justification_names_the_rule(self):
        with pytest.raises(PatternCompileError) as info:
            null_rule(justifications=("(",))
        assert info.value.rule_id == "java.null_check"

    def test_rule_needs_a_pattern(self):
        with pytest.raises(ValueError):
            Rule(id="empty", message="nothing", patterns=())


class TestAppliesTo:

    def test_pattern_match(self):
        cmp = n_binary("==", n_name("x"), n_null())
        root = n_block(n_return(cmp))
        rule = null_rule()
        hits = [p.node for p in iter_pairs(root) if rule.applies_to(p)]
        assert hits == [cmp]

    def test_justification_suppresses(self):
        excused = n_binary("==", n_name("y"), n_null())
        flagged = n_binary("==", n_name("x"), n_null())
        root = n_block(n_if(excused), n_return(flagged))
        rule = null_rule(justifications=("y == _",))
        assert not rule.applies_to(pair_for(root, excused))
        assert rule.applies_to(pair_for(root, flagged))

    def test_any_pattern_suffices(self):
        cmp = n_binary("!=", n_name("x"), n_null())
        root = n_return(cmp)
        rule = null_rule(patterns=("_ == null", "_ != null"))
        assert rule.applies_to(pair_for(root, cmp))

    def test_justification_respects_context(self):
        in_if = n_binary("==", n_name("x"), n_null())
        returned = n_binary("==", n_name("x"), n_null())
        root = n_block(n_if(in_if), n_return(returned))
        rule = null_rule(justifications=("_ == null [conditional]",))
        assert not rule.applies_to(pair_for(root, in_if))
        assert rule.applies_to(pair_for(root, returned))


class TestExamples:

    def test_examples_pass(self, java_parser):
        rule = null_rule(
            before=("if (x == null) {\n    return;\n}",),
            after=("if (java.util.Objects.isNull(x)) {\n    return;\n}",),
        )
        results = check_examples(rule, java_parser)
        assert [(r.section, r.index) for r in results] == [("before", 0), ("after", 0)]
        assert all(r.passed for r in results)
        assert results[0].matched == 1
        assert results[1].matched == 0

    def test_before_without_match_fails(self, java_parser):
        rule = null_rule(before=("foo();",))
        (result,) = check_examples(rule, java_parser)
        assert not result.passed
        assert result.matched == 0

    def test_after_with_match_fails(self, java_parser):
        rule = null_rule(after=("boolean b = y == null;",))
        (result,) = check_examples(rule, java_parser)
        assert not result.passed

    def test_broken_snippet_fails(self, java_parser):
        rule = null_rule(after=("if (x == {",))
        (result,) = check_examples(rule, java_parser)
        assert result.error is not None
        assert not result.passed
        assert "java.null_check" in result.error.path

    def test_no_examples(self, java_parser):
        assert check_examples(null_rule(), java_parser) == []

    def test_passed_semantics(self):
        assert ExampleResult("r", "before", 0, "", 2).passed
        assert not ExampleResult("r", "before", 0, "", 0).passed
        assert ExampleResult("r", "after", 0, "", 0).passed
        assert not ExampleResult("r", "after", 0, "", 1).passed
