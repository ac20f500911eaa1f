# javasee/outcomes.py
"""Tagged results of an analysis run: ``Issue | ScriptError | RuleError``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Union

from .errors import PatternCompileError, ScriptParseError, SourceSpan

if TYPE_CHECKING:
    from .rules import Rule
    from .scripts import Script
    from .traversal import NodePair


@dataclass(frozen=True, eq=False)
class Issue:
    """*rule* matched ``pair.node`` in *script*."""

    script: "Script"
    rule: "Rule"
    pair: "NodePair"

    @property
    def span(self) -> SourceSpan:
        return self.pair.node.span.with_file(str(self.script.path))


@dataclass(frozen=True)
class ScriptError:
    """A script that could not be loaded; analysis skipped it."""

    path: Path
    error: ScriptParseError


@dataclass(frozen=True)
class RuleError:
    """A rule whose patterns failed to compile; it was disabled."""

    rule_id: str
    error: PatternCompileError


Outcome = Union[Issue, ScriptError, RuleError]
