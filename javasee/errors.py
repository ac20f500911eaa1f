# javasee/errors.py
"""
javasee error types and reporting.

Every failure the linter can report carries a structured ``ErrorMessage``
(code, message, span, notes, hint) that renders either as a gcc-style
diagnostic or as a JSON-serialisable dict.

    JavaSeeError
    ├── PatternCompileError   malformed pattern text; disables one rule
    ├── ScriptParseError      unreadable or unparsable Java; skips a script
    ├── ConfigError           configuration could not be loaded
    │   ├── ConfigNotFoundError
    │   ├── ConfigSyntaxError
    │   └── ConfigSchemaError
    └── FatalError            unexpected internal failure; aborts the run

Codes are ``JSEE-NNNN``: 0001-0999 configuration, 1000-1999 patterns,
2000-2999 scripts, 9000-9999 internal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto, unique
from typing import Any, Dict, List, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# CODES
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorSeverity(Enum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"


@unique
class ErrorPhase(Enum):
    """Stage of a run where the error occurred."""

    CONFIG = "config"          # loading javasee.yml
    PATTERN = "pattern"        # compiling rule patterns
    SCRIPT = "script"          # reading / parsing Java sources
    INTERNAL = "internal"


@unique
class ErrorCategory(Enum):
    CONFIG_NOT_FOUND = auto()
    CONFIG_SYNTAX = auto()
    CONFIG_SCHEMA = auto()
    DUPLICATE_RULE = auto()

    PATTERN_SYNTAX = auto()
    MISPLACED_REPEATED_PARAMETER = auto()
    INVALID_LITERAL = auto()

    SCRIPT_READ = auto()
    SCRIPT_SYNTAX = auto()

    INTERNAL_ERROR = auto()


@dataclass(frozen=True)
class ErrorCode:
    """A registered ``PREFIX-NNNN`` code with its phase and category."""

    prefix: str
    number: int
    category: ErrorCategory
    phase: ErrorPhase
    default_severity: ErrorSeverity = ErrorSeverity.ERROR

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code


def _code(number: int, category: ErrorCategory, phase: ErrorPhase,
          severity: ErrorSeverity = ErrorSeverity.ERROR) -> ErrorCode:
    return ErrorCode("JSEE", number, category, phase, severity)


class JavaSeeErrorCodes:
    """Every code javasee can emit."""

    CONFIG_NOT_FOUND = _code(1, ErrorCategory.CONFIG_NOT_FOUND, ErrorPhase.CONFIG)
    CONFIG_SYNTAX = _code(2, ErrorCategory.CONFIG_SYNTAX, ErrorPhase.CONFIG)
    CONFIG_SCHEMA = _code(3, ErrorCategory.CONFIG_SCHEMA, ErrorPhase.CONFIG)
    DUPLICATE_RULE_ID = _code(4, ErrorCategory.DUPLICATE_RULE, ErrorPhase.CONFIG)
    CONFIG_UNKNOWN = _code(5, ErrorCategory.CONFIG_SCHEMA, ErrorPhase.CONFIG)

    PATTERN_SYNTAX = _code(1000, ErrorCategory.PATTERN_SYNTAX, ErrorPhase.PATTERN)
    MISPLACED_REPEATED_PARAMETER = _code(
        1001, ErrorCategory.MISPLACED_REPEATED_PARAMETER, ErrorPhase.PATTERN
    )
    INVALID_LITERAL = _code(1002, ErrorCategory.INVALID_LITERAL, ErrorPhase.PATTERN)

    SCRIPT_READ = _code(2000, ErrorCategory.SCRIPT_READ, ErrorPhase.SCRIPT)
    SCRIPT_SYNTAX = _code(2001, ErrorCategory.SCRIPT_SYNTAX, ErrorPhase.SCRIPT)

    INTERNAL_ERROR = _code(
        9000, ErrorCategory.INTERNAL_ERROR, ErrorPhase.INTERNAL, ErrorSeverity.FATAL
    )


E = JavaSeeErrorCodes


# ═══════════════════════════════════════════════════════════════════════════════
# LOCATIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    A 1-based ``line:column`` range in a Java file or a pattern string.

    ``line == 0`` means the location is unknown.  Missing end coordinates
    default to the start.
    """

    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        if not self.end_line:
            object.__setattr__(self, "end_line", self.line)
        if not self.end_column:
            object.__setattr__(self, "end_column", self.column)

    @classmethod
    def at_offset(cls, text: str, offset: int, file: str = "") -> "SourceSpan":
        """Span of the single character at *offset* in *text*."""
        line = text.count("\n", 0, offset) + 1
        column = offset - text.rfind("\n", 0, offset)
        return cls(file=file, line=line, column=column)

    def with_file(self, file: str) -> "SourceSpan":
        return SourceSpan(file, self.line, self.column, self.end_line, self.end_column)

    def __str__(self) -> str:
        where = [self.file] if self.file else []
        if self.line:
            where.append(str(self.line))
            if self.column:
                where.append(str(self.column))
        return ":".join(where) or "<unknown location>"


NO_SPAN = SourceSpan()


# ═══════════════════════════════════════════════════════════════════════════════
# MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ErrorMessage:
    code: ErrorCode
    message: str
    span: SourceSpan = NO_SPAN
    severity: Optional[ErrorSeverity] = None
    notes: List[str] = field(default_factory=list)
    hint: str = ""
    source_line: str = ""

    def __post_init__(self) -> None:
        if self.severity is None:
            self.severity = self.code.default_severity

    def to_gcc_format(self) -> str:
        """``file:line:col: severity: message [JSEE-NNNN]`` plus context lines."""
        out = [f"{self.span}: {self.severity.value}: {self.message} [{self.code}]"]
        if self.source_line:
            out.append("    " + self.source_line)
            if self.span.column:
                width = 1
                if self.span.end_line == self.span.line:
                    width = max(1, self.span.end_column - self.span.column)
                out.append("    " + " " * (self.span.column - 1) + "^" * width)
        out.extend(f"note: {note}" for note in self.notes)
        if self.hint:
            out.append(f"hint: {self.hint}")
        return "\n".join(out)

    def to_json(self) -> Dict[str, Any]:
        span = self.span
        return {
            "code": str(self.code),
            "severity": self.severity.value,
            "phase": self.code.phase.value,
            "message": self.message,
            "location": {
                "file": span.file,
                "start": [span.line, span.column],
                "end": [span.end_line, span.end_column],
            },
            "notes": list(self.notes),
            "hint": self.hint,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class JavaSeeError(Exception):
    """
    Base exception for all javasee errors.

    ``str()`` renders the structured message in gcc format.
    """

    default_code: ErrorCode = E.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        severity: Optional[ErrorSeverity] = None,
        notes: Optional[List[str]] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.error_message = ErrorMessage(
            code=code or self.default_code,
            message=message,
            span=span or NO_SPAN,
            severity=severity,
            notes=list(notes or ()),
            hint=hint,
        )

    @property
    def message(self) -> str:
        return self.error_message.message

    @property
    def code(self) -> ErrorCode:
        return self.error_message.code

    @property
    def span(self) -> SourceSpan:
        return self.error_message.span

    @property
    def severity(self) -> ErrorSeverity:
        return self.error_message.severity

    def add_note(self, note: str) -> "JavaSeeError":
        self.error_message.notes.append(note)
        return self

    def to_json(self) -> Dict[str, Any]:
        return self.error_message.to_json()

    def __str__(self) -> str:
        return self.error_message.to_gcc_format()


class PatternCompileError(JavaSeeError):
    """
    Malformed pattern text.

    ``pattern`` is the offending source text and ``token`` the text found
    at the error position (empty at end of input).  ``rule_id`` is set
    once the rule loader has attached the owning rule.
    """

    default_code = E.PATTERN_SYNTAX

    def __init__(
        self,
        message: str,
        pattern: str = "",
        span: Optional[SourceSpan] = None,
        token: str = "",
        rule_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, span=span, **kwargs)
        self.pattern = pattern
        self.token = token
        self.rule_id = rule_id
        self.error_message.source_line = _line_at(pattern, self.span.line)

    def for_rule(self, rule_id: str) -> "PatternCompileError":
        self.rule_id = rule_id
        self.add_note(f"in rule {rule_id!r}")
        return self


class ScriptParseError(JavaSeeError):
    """A Java file could not be read or parsed."""

    default_code = E.SCRIPT_SYNTAX

    def __init__(self, message: str, path: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.path = path


class ConfigError(JavaSeeError):
    """The configuration file could not be loaded."""

    default_code = E.CONFIG_UNKNOWN

    def __init__(self, message: str, path: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.path = path


class ConfigNotFoundError(ConfigError):
    default_code = E.CONFIG_NOT_FOUND


class ConfigSyntaxError(ConfigError):
    """Not valid YAML."""

    default_code = E.CONFIG_SYNTAX


class ConfigSchemaError(ConfigError):
    """Valid YAML with the wrong shape."""

    default_code = E.CONFIG_SCHEMA


class FatalError(JavaSeeError):
    """Unexpected internal failure; aborts the whole run."""

    default_code = E.INTERNAL_ERROR


def _line_at(text: str, line: int) -> str:
    lines = text.splitlines()
    return lines[line - 1] if 0 < line <= len(lines) else ""
