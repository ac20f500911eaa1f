# javasee/analyzer.py
"""
javasee/analyzer.py – Applies rules to scripts and yields outcomes.

Outcome order is canonical and independent of ``jobs``:

  1. ``RuleError``s, in configuration order;
  2. for each script, in enumeration order, either its ``ScriptError`` or
     its ``Issue``s in pre-order traversal order, rules in configuration
     order within a node.

Matching never mutates the trees.  Only unexpected internal failures
escape, wrapped in ``FatalError``.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Deque, Iterable, Iterator, List, Optional, Sequence, Union

from .errors import FatalError, JavaSeeError
from .outcomes import Issue, Outcome, RuleError, ScriptError
from .rules import Rule
from .scripts import Script
from .traversal import iter_pairs

logger = logging.getLogger(__name__)

__all__ = ["Analyzer"]

_Item = Union[Script, ScriptError]


class Analyzer:
    """
    Parameters
    ----------
    rules:
        Compiled rules, in configuration order.
    scripts:
        Loaded scripts (or load failures), consumed lazily.
    rule_errors:
        Rules that failed to compile, reported before anything else.
    rule_id:
        Restrict the run to the rule with this id.
    max_issues:
        Stop after this many issues.
    jobs:
        Number of worker threads matching scripts concurrently.
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        scripts: Iterable[_Item],
        *,
        rule_errors: Sequence[RuleError] = (),
        rule_id: Optional[str] = None,
        max_issues: Optional[int] = None,
        jobs: int = 1,
    ):
        if rule_id is not None:
            rules = [rule for rule in rules if rule.id == rule_id]
            rule_errors = [err for err in rule_errors if err.rule_id == rule_id]
        self.rules = tuple(rules)
        self.rule_errors = tuple(rule_errors)
        self.scripts = scripts
        self.max_issues = max_issues
        self.jobs = max(1, jobs)
        self.issue_count = 0
        self.truncated = False

    def analyze_script(self, script: Script) -> List[Issue]:
        """All issues in *script*, in traversal order."""
        issues = []
        for pair in iter_pairs(script.root):
            for rule in self.rules:
                if rule.applies_to(pair):
                    issues.append(Issue(script, rule, pair))
        return issues

    def _analyze_item(self, item: _Item) -> List[Outcome]:
        if isinstance(item, ScriptError):
            return [item]
        try:
            return self.analyze_script(item)
        except JavaSeeError:
            raise
        except Exception as exc:
            raise FatalError(f"internal error while analyzing {item.path}: {exc}") from exc

    def _results(self) -> Iterator[List[Outcome]]:
        if self.jobs == 1:
            for item in self.scripts:
                yield self._analyze_item(item)
            return
        # At most 2 * jobs scripts are loaded ahead of the consumer.
        window = 2 * self.jobs
        pending: Deque["Future[List[Outcome]]"] = deque()
        executor = ThreadPoolExecutor(max_workers=self.jobs, thread_name_prefix="javasee")
        try:
            for item in self.scripts:
                pending.append(executor.submit(self._analyze_item, item))
                if len(pending) >= window:
                    yield pending.popleft().result()
            while pending:
                yield pending.popleft().result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def run(self) -> Iterator[Outcome]:
        """Yield every outcome in canonical order."""
        yield from self.rule_errors
        if not self.rules:
            logger.warning("no rules to apply")
        if self.max_issues is not None and self.max_issues <= 0:
            self.truncated = True
            return
        results = self._results()
        try:
            for outcomes in results:
                for outcome in outcomes:
                    yield outcome
                    if isinstance(outcome, Issue):
                        self.issue_count += 1
                        if self.max_issues is not None and self.issue_count >= self.max_issues:
                            logger.info("stopping after %d issues", self.issue_count)
                            self.truncated = True
                            return
        finally:
            results.close()
