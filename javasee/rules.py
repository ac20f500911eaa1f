# javasee/rules.py
"""
Rules: an id and message plus pattern alternatives that flag a node and
justification alternatives that excuse it.

``RuleSpec`` is the raw, uncompiled form read from configuration;
``compile_rule`` turns it into an immutable ``Rule``.  ``check_examples``
runs a rule over its ``before``/``after`` snippets for ``javasee test``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from .compiler import PatternCompiler
from .errors import PatternCompileError, ScriptParseError
from .patterns import Kind
from .traversal import NodePair, iter_pairs

if TYPE_CHECKING:
    from .java_parser import JavaParser

logger = logging.getLogger(__name__)

__all__ = ["RuleSpec", "Rule", "compile_rule", "ExampleResult", "check_examples"]

_EXAMPLE_TEMPLATE = """\
class JavaSeeExample {{
    void example() {{
{body}
    }}
}}
"""


@dataclass(frozen=True)
class RuleSpec:
    """A rule as written in configuration, patterns still as text."""

    id: str
    message: str
    patterns: Tuple[str, ...]
    justifications: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    before: Tuple[str, ...] = ()
    after: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Rule:
    id: str
    message: str
    patterns: Tuple[Kind, ...]
    justifications: Tuple[Kind, ...] = ()
    pattern_texts: Tuple[str, ...] = ()
    justification_texts: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    before: Tuple[str, ...] = ()
    after: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ValueError(f"rule {self.id!r} has no patterns")

    def applies_to(self, pair: NodePair) -> bool:
        """Some pattern matches *pair* and no justification does."""
        if not any(pattern.matches(pair) for pattern in self.patterns):
            return False
        return not any(j.matches(pair) for j in self.justifications)

    @property
    def summary(self) -> str:
        """First line of the message."""
        lines = self.message.strip().splitlines()
        return lines[0] if lines else ""


def compile_rule(spec: RuleSpec, compiler: Optional[PatternCompiler] = None) -> Rule:
    """Compile every pattern of *spec*.

    Raises ``PatternCompileError`` naming the rule on the first bad pattern.
    """
    compiler = compiler or PatternCompiler()

    def _compile_all(texts: Tuple[str, ...]) -> Tuple[Kind, ...]:
        compiled = []
        for text in texts:
            try:
                compiled.append(compiler.compile(text))
            except PatternCompileError as exc:
                exc.for_rule(spec.id)
                raise
        return tuple(compiled)

    rule = Rule(
        id=spec.id,
        message=spec.message,
        patterns=_compile_all(spec.patterns),
        justifications=_compile_all(spec.justifications),
        pattern_texts=spec.patterns,
        justification_texts=spec.justifications,
        tags=spec.tags,
        before=spec.before,
        after=spec.after,
    )
    logger.debug(
        "compiled rule %s (%d patterns, %d justifications)",
        rule.id, len(rule.patterns), len(rule.justifications),
    )
    return rule


# ───────────────────────────────────────────────────────────────────────────
# Examples
# ───────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExampleResult:
    rule_id: str
    section: str            # "before" or "after"
    index: int
    snippet: str
    matched: int
    error: Optional[ScriptParseError] = None

    @property
    def passed(self) -> bool:
        if self.error is not None:
            return False
        if self.section == "before":
            return self.matched > 0
        return self.matched == 0


def _wrap(snippet: str) -> bytes:
    body = "\n".join(" " * 8 + line for line in snippet.splitlines())
    return _EXAMPLE_TEMPLATE.format(body=body).encode("utf-8")


def check_examples(rule: Rule, parser: "JavaParser") -> List[ExampleResult]:
    """Run *rule* on each of its example snippets.

    ``before`` snippets must produce at least one match, ``after``
    snippets none.
    """
    results = []
    for section, snippets in (("before", rule.before), ("after", rule.after)):
        for index, snippet in enumerate(snippets):
            try:
                root = parser.parse(_wrap(snippet), path=f"<{rule.id} {section}[{index}]>")
            except ScriptParseError as exc:
                results.append(ExampleResult(rule.id, section, index, snippet, 0, exc))
                continue
            matched = sum(1 for pair in iter_pairs(root) if rule.applies_to(pair))
            results.append(ExampleResult(rule.id, section, index, snippet, matched))
    return results
