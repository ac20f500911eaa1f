# javasee/compiler.py
"""
javasee/compiler.py – Pattern text → ``Kind``-wrapped pattern tree.

Parsing is done by the parsimonious grammar in ``grammar.py``; this module
walks the resulting parse tree bottom-up and builds the frozen pattern
dataclasses from ``patterns.py``.  Any failure is reported as a
``PatternCompileError`` carrying the line/column and the text found at the
error position.

Public API
----------
    PatternCompiler().compile(text)  -> Kind
    compile_pattern(text)            -> Kind
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional, Tuple

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .errors import E, FatalError, PatternCompileError, SourceSpan
from .grammar import PATTERN_GRAMMAR
from .literals import decode_double, decode_int, decode_string
from .patterns import (
    ArrayAccess,
    BinaryOp,
    BinaryOperator,
    Context,
    FieldSelection,
    FunctionCall,
    IDReference,
    InstanceCreation,
    InstanceofTest,
    Kind,
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
)

logger = logging.getLogger(__name__)

__all__ = ["PatternCompiler", "compile_pattern"]

_TOKEN_RE = re.compile(r"\S{1,20}")

_WILDCARD_TYPES = {
    "int": LiteralType.INT,
    "double": LiteralType.DOUBLE,
    "string": LiteralType.STRING,
    "bool": LiteralType.BOOLEAN,
    "boolean": LiteralType.BOOLEAN,
}

_PREFIX_UPDATES = {
    "++": UpdateOperator.PREFIX_INCREMENT,
    "--": UpdateOperator.PREFIX_DECREMENT,
}

_POSTFIX_UPDATES = {
    "++": UpdateOperator.POSTFIX_INCREMENT,
    "--": UpdateOperator.POSTFIX_DECREMENT,
}


def _opt(value: Any) -> Any:
    """Result of an optional (``?``) term, or None when it did not match."""
    return value[0] if isinstance(value, list) else None


def _many(value: Any) -> List[Any]:
    """Results of a repeated (``*``) term."""
    return value if isinstance(value, list) else []


def _join(start: SourceSpan, end: SourceSpan) -> SourceSpan:
    return SourceSpan(
        line=start.line,
        column=start.column,
        end_line=end.end_line,
        end_column=end.end_column,
    )


# ═══════════════════════════════════════════════════════════════════
#  Parse tree → pattern tree
# ═══════════════════════════════════════════════════════════════════

class PatternBuilder(NodeVisitor):
    """Turns a parsimonious parse tree into pattern dataclasses."""

    unwrapped_exceptions = (PatternCompileError, RecursionError)

    def __init__(self, text: str):
        self.text = text

    def _span(self, node: Node) -> SourceSpan:
        start = SourceSpan.at_offset(self.text, node.start)
        end = SourceSpan.at_offset(self.text, node.end)
        return SourceSpan(
            line=start.line,
            column=start.column,
            end_line=end.line,
            end_column=end.column,
        )

    def _error(self, message: str, node: Node, code=E.PATTERN_SYNTAX) -> PatternCompileError:
        return PatternCompileError(
            message,
            pattern=self.text,
            span=self._span(node),
            token=node.text,
            code=code,
        )

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ─────────────────────────────────────────────────────────────
    # Top level
    # ─────────────────────────────────────────────────────────────

    def visit_pattern(self, node, visited_children) -> Kind:
        _, expression, _, suffix, _, _ = visited_children
        suffix = _opt(suffix)
        if suffix is None:
            return Kind(expression)
        context, negated = suffix
        return Kind(expression, context, negated)

    def visit_kind_suffix(self, node, visited_children) -> Tuple[Context, bool]:
        _, _, negation, word, _, _ = visited_children
        return Context[word.upper()], _opt(negation) is not None

    def visit_kind_negation(self, node, visited_children):
        return True

    def visit_kind_word(self, node, visited_children):
        return node.text

    # ─────────────────────────────────────────────────────────────
    # Binary operators
    # ─────────────────────────────────────────────────────────────

    def _fold(self, node, visited_children) -> PatternNode:
        first, tails = visited_children
        result = first
        for op, operand, span in _many(tails):
            loc = _join(result.loc, span)
            if op == "instanceof":
                result = InstanceofTest(result, operand, loc=loc)
            else:
                result = BinaryOp(BinaryOperator(op), result, operand, loc=loc)
        return result

    def _tail(self, node, visited_children):
        _, op, _, operand = visited_children
        return op, operand, self._span(node)

    def _operator(self, node, visited_children):
        return node.text

    visit_expression = visit_relational = visit_shift = _fold
    visit_additive = visit_multiplicative = _fold

    visit_equality_tail = visit_comparison_tail = visit_shift_tail = _tail
    visit_additive_tail = visit_multiplicative_tail = _tail

    visit_equality_op = visit_comparison_op = visit_shift_op = _operator
    visit_additive_op = visit_multiplicative_op = _operator
    visit_unary_op = visit_update_op = _operator

    def visit_relational_tail(self, node, visited_children):
        return visited_children[0]

    def visit_instanceof_tail(self, node, visited_children):
        type_name = visited_children[-1]
        return "instanceof", type_name, self._span(node)

    # ─────────────────────────────────────────────────────────────
    # Unary and postfix forms
    # ─────────────────────────────────────────────────────────────

    def visit_unary(self, node, visited_children):
        return visited_children[0]

    def visit_prefix_update(self, node, visited_children):
        op, _, operand = visited_children
        return Update(_PREFIX_UPDATES[op], operand, loc=self._span(node))

    def visit_prefix_unary(self, node, visited_children):
        op, _, operand = visited_children
        return UnaryOp(UnaryOperator(op), operand, loc=self._span(node))

    def visit_postfix(self, node, visited_children):
        primary, selectors, update = visited_children
        result = primary
        for selector in _many(selectors):
            tag, payload, args, span = selector
            loc = _join(result.loc, span)
            if tag == "index":
                result = ArrayAccess(result, payload, loc=loc)
            elif args is None:
                result = FieldSelection(result, payload, loc=loc)
            else:
                result = MethodCall(result, payload, args, loc=loc)
        update = _opt(update)
        if update is not None:
            result = Update(_POSTFIX_UPDATES[update], result, loc=self._span(node))
        return result

    def visit_postfix_update(self, node, visited_children):
        return visited_children[1]

    def visit_selector(self, node, visited_children):
        _, choice = visited_children
        return choice[0]

    def visit_member_selector(self, node, visited_children):
        _, _, name, args = visited_children
        return "member", name, _opt(args), self._span(node)

    def visit_index_selector(self, node, visited_children):
        index = visited_children[3]
        return "index", index, None, self._span(node)

    def visit_arguments(self, node, visited_children) -> Tuple[PatternNode, ...]:
        _, _, _, arg_list, _, _ = visited_children
        args = tuple(_opt(arg_list) or ())
        if len(args) > 1:
            for arg in args:
                if isinstance(arg, RepeatedParameter):
                    raise PatternCompileError(
                        "'...' must be the only argument",
                        pattern=self.text,
                        span=arg.loc,
                        token="...",
                        code=E.MISPLACED_REPEATED_PARAMETER,
                    )
        return args

    def visit_argument_list(self, node, visited_children):
        first, rest = visited_children
        return [first] + [item[3] for item in _many(rest)]

    def visit_argument(self, node, visited_children):
        return visited_children[0]

    def visit_repeated_marker(self, node, visited_children):
        return RepeatedParameter(loc=self._span(node))

    # ─────────────────────────────────────────────────────────────
    # Primaries
    # ─────────────────────────────────────────────────────────────

    def visit_primary(self, node, visited_children):
        return visited_children[0]

    def visit_grouped(self, node, visited_children):
        return visited_children[2]

    def visit_instance_creation(self, node, visited_children):
        type_name, args = visited_children[3], visited_children[4]
        return InstanceCreation(type_name, args, loc=self._span(node))

    def visit_literal_wildcard(self, node, visited_children):
        type_name = node.children[1].text
        if type_name == "lambda":
            return LambdaPlaceholder(loc=self._span(node))
        return LiteralWildcard(_WILDCARD_TYPES[type_name], loc=self._span(node))

    def visit_literal(self, node, visited_children):
        return visited_children[0]

    def visit_double_literal(self, node, visited_children):
        return Literal(LiteralType.DOUBLE, decode_double(node.text), loc=self._span(node))

    def visit_int_literal(self, node, visited_children):
        try:
            value = decode_int(node.text)
        except ValueError:
            raise self._error(
                f"invalid integer literal {node.text!r}", node, E.INVALID_LITERAL
            ) from None
        return Literal(LiteralType.INT, value, loc=self._span(node))

    def visit_string_literal(self, node, visited_children):
        try:
            value = decode_string(node.text)
        except ValueError as exc:
            raise self._error(str(exc), node, E.INVALID_LITERAL) from None
        return Literal(LiteralType.STRING, value, loc=self._span(node))

    def visit_keyword_literal(self, node, visited_children):
        loc = self._span(node)
        if node.text == "null":
            return NullLiteral(loc=loc)
        if node.text == "this":
            return ThisLiteral(loc=loc)
        return Literal(LiteralType.BOOLEAN, node.text == "true", loc=loc)

    def visit_wildcard(self, node, visited_children):
        return Wildcard(loc=self._span(node))

    def visit_function_call(self, node, visited_children):
        name, args = visited_children
        return FunctionCall(name, args, loc=self._span(node))

    def visit_identifier_ref(self, node, visited_children):
        return IDReference(node.text, loc=self._span(node))

    def visit_identifier(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  Compiler
# ═══════════════════════════════════════════════════════════════════

class PatternCompiler:
    """Compiles pattern strings; one instance can be reused freely."""

    def __init__(self, grammar: Optional[Grammar] = None):
        self.grammar = grammar or PATTERN_GRAMMAR

    def compile(self, text: str) -> Kind:
        try:
            tree = self.grammar.parse(text)
            kind = PatternBuilder(text).visit(tree)
        except ParseError as exc:
            raise self._syntax_error(text, exc) from exc
        except RecursionError:
            raise PatternCompileError(
                "pattern nested too deeply",
                pattern=text,
                span=SourceSpan.at_offset(text, 0),
                token=text[:20],
            ) from None
        except VisitationError as exc:
            raise FatalError(f"failed to build pattern {text!r}: {exc}") from exc
        logger.debug("compiled %r -> %s", text, kind)
        return kind

    @staticmethod
    def _syntax_error(text: str, exc: ParseError) -> PatternCompileError:
        pos = min(max(exc.pos, 0), len(text))
        token_match = _TOKEN_RE.match(text, pos)
        token = token_match.group(0) if token_match else ""
        if token:
            message = f"unexpected {token!r} in pattern"
        else:
            message = "unexpected end of pattern"
        return PatternCompileError(
            message,
            pattern=text,
            span=SourceSpan.at_offset(text, pos),
            token=token,
        )


_DEFAULT_COMPILER = PatternCompiler()


def compile_pattern(text: str) -> Kind:
    """Compile *text* with the default grammar."""
    return _DEFAULT_COMPILER.compile(text)
