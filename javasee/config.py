# javasee/config.py
"""
Configuration loading (``javasee.yml``).

Shape::

    rules:
      - id: com.example.no_debug_print
        message: Remove debug print
        pattern: '_.println("debug")'        # string or list of strings
        justification:                        # optional, string or list
          - 'log.println("debug")'
        tags: [debug]                         # optional
        before: ['System.out.println("debug");']
        after: ['log.debug("x");']
    import:
      - load: more_rules/*.yml                # files with a ``rules:`` list
    exclude:
      - build/**

Every shape is validated strictly; nothing is coerced.  Rules whose
patterns fail to compile do not fail the load: they are returned as
``RuleError``s next to the rules that did compile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from .compiler import PatternCompiler
from .errors import (
    E,
    ConfigError,
    ConfigNotFoundError,
    ConfigSchemaError,
    ConfigSyntaxError,
    PatternCompileError,
    SourceSpan,
)
from .outcomes import RuleError
from .rules import Rule, RuleSpec, compile_rule

logger = logging.getLogger(__name__)

__all__ = ["Config", "DEFAULT_CONFIG_NAME", "load_config", "parse_config"]

DEFAULT_CONFIG_NAME = "javasee.yml"

_RULE_KEYS = frozenset({
    "id", "message", "pattern", "justification", "tags", "before", "after",
})
_TOP_LEVEL_KEYS = frozenset({"rules", "import", "exclude"})


@dataclass(frozen=True)
class Config:
    path: Optional[Path]
    rules: Tuple[Rule, ...] = ()
    rule_errors: Tuple[RuleError, ...] = ()
    exclude: Tuple[str, ...] = ()
    root: Path = field(default_factory=lambda: Path("."))

    def rule(self, rule_id: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


# ═══════════════════════════════════════════════════════════════════════════
#  Shape helpers
# ═══════════════════════════════════════════════════════════════════════════

def _schema_error(message: str, path: Optional[Path]) -> ConfigSchemaError:
    return ConfigSchemaError(
        message,
        path=str(path or ""),
        span=SourceSpan(file=str(path or "")),
    )


def _expect_mapping(value: Any, what: str, path: Optional[Path]) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _schema_error(
            f"{what} must be a mapping, got {type(value).__name__}", path
        )
    return value


def _expect_list(value: Any, what: str, path: Optional[Path]) -> List[Any]:
    if not isinstance(value, list):
        raise _schema_error(
            f"{what} must be a list, got {type(value).__name__}", path
        )
    return value


def _as_str(value: Any, what: str, path: Optional[Path]) -> str:
    if not isinstance(value, str):
        raise _schema_error(
            f"{what} must be a string, got {type(value).__name__}: {value!r}", path
        )
    return value


def _as_str_tuple(value: Any, what: str, path: Optional[Path]) -> Tuple[str, ...]:
    """A string or a list of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    items = _expect_list(value, what, path)
    return tuple(_as_str(item, f"{what}[{i}]", path) for i, item in enumerate(items))


# ═══════════════════════════════════════════════════════════════════════════
#  Loading
# ═══════════════════════════════════════════════════════════════════════════

def _read_yaml(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(
            f"configuration file not found: {path}", path=str(path)
        ) from exc
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}", path=str(path)) from exc
    try:
        return yaml.safe_load(text)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark
        span = SourceSpan(file=str(path))
        if mark is not None:
            span = SourceSpan(file=str(path), line=mark.line + 1, column=mark.column + 1)
        raise ConfigSyntaxError(
            f"invalid YAML: {exc.problem or exc}", path=str(path), span=span
        ) from exc
    except yaml.YAMLError as exc:
        raise ConfigSyntaxError(f"invalid YAML: {exc}", path=str(path)) from exc


def _rule_spec(entry: Any, index: int, path: Optional[Path]) -> RuleSpec:
    what = f"rules[{index}]"
    entry = _expect_mapping(entry, what, path)
    unknown = sorted(set(entry) - _RULE_KEYS)
    if unknown:
        raise _schema_error(f"{what}: unknown keys {', '.join(unknown)}", path)
    for key in ("id", "message", "pattern"):
        if key not in entry:
            raise _schema_error(f"{what}: missing required key {key!r}", path)

    rule_id = _as_str(entry["id"], f"{what}.id", path)
    patterns = _as_str_tuple(entry["pattern"], f"{rule_id}.pattern", path)
    if not patterns:
        raise _schema_error(f"{rule_id}: at least one pattern is required", path)
    return RuleSpec(
        id=rule_id,
        message=_as_str(entry["message"], f"{rule_id}.message", path),
        patterns=patterns,
        justifications=_as_str_tuple(
            entry.get("justification"), f"{rule_id}.justification", path
        ),
        tags=_as_str_tuple(entry.get("tags"), f"{rule_id}.tags", path),
        before=_as_str_tuple(entry.get("before"), f"{rule_id}.before", path),
        after=_as_str_tuple(entry.get("after"), f"{rule_id}.after", path),
    )


def _rule_specs(document: Dict[str, Any], path: Optional[Path]) -> List[RuleSpec]:
    entries = document.get("rules")
    if entries is None:
        return []
    entries = _expect_list(entries, "rules", path)
    return [_rule_spec(entry, i, path) for i, entry in enumerate(entries)]


def _imported_specs(
    document: Dict[str, Any], base: Path, path: Optional[Path]
) -> List[RuleSpec]:
    specs: List[RuleSpec] = []
    imports = _expect_list(document.get("import") or [], "import", path)
    for i, item in enumerate(imports):
        item = _expect_mapping(item, f"import[{i}]", path)
        pattern = _as_str(item.get("load"), f"import[{i}].load", path)
        matches = sorted(base.glob(pattern))
        if not matches:
            logger.warning("import %r matched no files", pattern)
        for match in matches:
            logger.info("importing rules from %s", match)
            loaded = _read_yaml(match)
            if loaded is None:
                continue
            if isinstance(loaded, list):
                loaded = {"rules": loaded}
            specs.extend(_rule_specs(_expect_mapping(loaded, str(match), match), match))
    return specs


def parse_config(
    document: Any,
    path: Optional[Path] = None,
    root: Optional[Path] = None,
    compiler: Optional[PatternCompiler] = None,
) -> Config:
    """Validate a loaded YAML *document* and compile its rules."""
    if document is None:
        document = {}
    document = _expect_mapping(document, "configuration", path)
    unknown = sorted(set(document) - _TOP_LEVEL_KEYS)
    if unknown:
        raise _schema_error(f"unknown top-level keys {', '.join(unknown)}", path)

    base = path.parent if path is not None else Path(".")
    specs = _rule_specs(document, path) + _imported_specs(document, base, path)
    exclude = _as_str_tuple(document.get("exclude"), "exclude", path)

    seen: Set[str] = set()
    for spec in specs:
        if spec.id in seen:
            raise ConfigSchemaError(
                f"duplicate rule id {spec.id!r}",
                path=str(path or ""),
                code=E.DUPLICATE_RULE_ID,
            )
        seen.add(spec.id)

    compiler = compiler or PatternCompiler()
    rules: List[Rule] = []
    errors: List[RuleError] = []
    for spec in specs:
        try:
            rules.append(compile_rule(spec, compiler))
        except PatternCompileError as exc:
            logger.warning("rule %s disabled: %s", spec.id, exc.message)
            errors.append(RuleError(spec.id, exc))

    logger.info("loaded %d rules (%d disabled)", len(rules), len(errors))
    return Config(
        path=path,
        rules=tuple(rules),
        rule_errors=tuple(errors),
        exclude=exclude,
        root=root or base,
    )


def load_config(
    path: Path,
    root: Optional[Path] = None,
    compiler: Optional[PatternCompiler] = None,
) -> Config:
    """Load, validate and compile the configuration at *path*.

    Raises ``ConfigNotFoundError``, ``ConfigSyntaxError`` or
    ``ConfigSchemaError``.
    """
    path = Path(path)
    logger.info("loading configuration %s", path)
    return parse_config(_read_yaml(path), path=path, root=root, compiler=compiler)
