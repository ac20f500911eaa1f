# javasee/formatters.py
"""
Report formatters.

A formatter receives the analyzer's outcomes one by one through
``consume`` plus lifecycle hooks from the CLI (``on_start``,
``on_config_error``, ``on_fatal_error``, ``on_finish``).  ``TextFormatter``
prints issues as they arrive; ``JSONFormatter`` collects everything and
writes a single document on ``on_finish``.
"""

from __future__ import annotations

import json
import sys
import traceback
from typing import Any, Dict, List, Optional, TextIO

from .errors import ConfigError, JavaSeeError
from .outcomes import Issue, Outcome, RuleError, ScriptError

__all__ = ["Formatter", "TextFormatter", "JSONFormatter", "FORMATTERS", "make_formatter"]


def _backtrace(error: BaseException) -> List[str]:
    return [
        line.rstrip("\n")
        for line in traceback.format_exception(type(error), error, error.__traceback__)
    ]


def _error_json(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, JavaSeeError):
        payload = error.to_json()
    else:
        payload = {"message": str(error)}
    payload["backtrace"] = _backtrace(error)
    return payload


class Formatter:
    """Base class; subclasses override the ``on_*`` hooks they need."""

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def consume(self, outcome: Outcome) -> None:
        if isinstance(outcome, Issue):
            self.on_issue_found(outcome)
        elif isinstance(outcome, ScriptError):
            self.on_script_error(outcome)
        elif isinstance(outcome, RuleError):
            self.on_rule_error(outcome)
        else:
            raise TypeError(f"unknown outcome {outcome!r}")

    def source_line(self, issue: Issue) -> str:
        """Line of source the issue starts on."""
        return issue.script.line(issue.pair.node.span.line)

    # Hooks ------------------------------------------------------------------

    def on_start(self) -> None:
        pass

    def on_finish(self) -> None:
        pass

    def on_config_error(self, path: str, error: ConfigError) -> None:
        pass

    def on_script_error(self, error: ScriptError) -> None:
        pass

    def on_rule_error(self, error: RuleError) -> None:
        pass

    def on_issue_found(self, issue: Issue) -> None:
        pass

    def on_fatal_error(self, error: BaseException) -> None:
        self.stderr.write(f"Fatal error: {error}\n")
        self.stderr.write("Backtrace:\n")
        for line in _backtrace(error):
            self.stderr.write(f"  {line}\n")


class TextFormatter(Formatter):
    """``path:line:col<TAB>source<TAB>message (rule id)``, one issue per line."""

    def on_config_error(self, path, error):
        self.stderr.write(f"Failed to load configuration: {path}\n")
        self.stderr.write(f"{error}\n")

    def on_script_error(self, error):
        self.stderr.write(f"Failed to load script: {error.path}\n")
        self.stderr.write(f"{error.error}\n")

    def on_rule_error(self, error):
        self.stderr.write(f"Failed to compile rule: {error.rule_id}\n")
        self.stderr.write(f"{error.error}\n")

    def on_issue_found(self, issue):
        span = issue.pair.node.span
        src = self.source_line(issue).strip()
        self.stdout.write(
            f"{issue.script.path}:{span.line}:{span.column}\t{src}\t"
            f"{issue.rule.summary} ({issue.rule.id})\n"
        )


class JSONFormatter(Formatter):
    """Collects outcomes and prints one JSON document on finish."""

    def __init__(self, stdout=None, stderr=None):
        super().__init__(stdout, stderr)
        self.issues: List[Dict[str, Any]] = []
        self.script_errors: List[Dict[str, Any]] = []
        self.rule_errors: List[Dict[str, Any]] = []
        self.config_errors: List[Dict[str, Any]] = []
        self.fatal_error: Optional[Dict[str, Any]] = None

    def on_config_error(self, path, error):
        self.config_errors.append({"path": str(path), "error": _error_json(error)})

    def on_script_error(self, error):
        self.script_errors.append({"path": str(error.path), "error": _error_json(error.error)})

    def on_rule_error(self, error):
        self.rule_errors.append({"rule": error.rule_id, "error": _error_json(error.error)})

    def on_issue_found(self, issue):
        span = issue.pair.node.span
        self.issues.append({
            "script": str(issue.script.path),
            "rule": {
                "id": issue.rule.id,
                "message": issue.rule.message,
                "justifications": list(issue.rule.justification_texts),
            },
            "location": {
                "start": [span.line, span.column],
                "end": [span.end_line, span.end_column],
            },
        })

    def on_fatal_error(self, error):
        super().on_fatal_error(error)
        self.fatal_error = {"message": str(error), "backtrace": _backtrace(error)}

    def as_json(self) -> Dict[str, Any]:
        if self.fatal_error is not None:
            return {"fatal_error": self.fatal_error}
        if self.config_errors:
            return {"config_errors": self.config_errors}
        return {
            "issues": self.issues,
            "errors": self.script_errors,
            "rule_errors": self.rule_errors,
        }

    def on_finish(self):
        self.stdout.write(json.dumps(self.as_json(), indent=2) + "\n")


FORMATTERS = {
    "text": TextFormatter,
    "json": JSONFormatter,
}


def make_formatter(name: str, stdout: Optional[TextIO] = None,
                   stderr: Optional[TextIO] = None) -> Formatter:
    try:
        cls = FORMATTERS[name]
    except KeyError:
        raise ValueError(f"unknown format {name!r}") from None
    return cls(stdout, stderr)
