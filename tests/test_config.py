# tests/test_config.py
"""
Tests for javasee.config: YAML loading and validation.
"""

import textwrap

import pytest

from javasee.config import DEFAULT_CONFIG_NAME, load_config, parse_config
from javasee.errors import (
    E,
    ConfigNotFoundError,
    ConfigSchemaError,
    ConfigSyntaxError,
)
from javasee.patterns import Context


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text))
    return path


BASIC = """\
rules:
  - id: debug
    message: |
      Debug print

      Use a logger.
    pattern: '_.println("debug")'
  - id: null_check
    message: Null check
    pattern:
      - '_ == null [conditional]'
      - 'null == _'
    justification: 'this == null'
    tags: [style, nulls]
    before: ['if (x == null) {}']
    after: ['boolean b = x == null;']
exclude:
  - gen/**
"""


class TestLoad:

    def test_basic(self, tmp_path):
        config = load_config(write(tmp_path / DEFAULT_CONFIG_NAME, BASIC))
        assert [r.id for r in config.rules] == ["debug", "null_check"]
        assert config.rule_errors == ()
        assert config.exclude == ("gen/**",)
        assert config.root == tmp_path

        null = config.rule("null_check")
        assert null.patterns[0].context is Context.CONDITIONAL
        assert null.justification_texts == ("this == null",)
        assert null.tags == ("style", "nulls")
        assert null.before == ("if (x == null) {}",)
        assert config.rule("debug").summary == "Debug print"
        assert config.rule("missing") is None

    def test_root_override(self, tmp_path):
        config = load_config(write(tmp_path / "c.yml", BASIC), root=tmp_path / "src")
        assert config.root == tmp_path / "src"

    def test_empty_document(self, tmp_path):
        config = load_config(write(tmp_path / "c.yml", ""))
        assert config.rules == ()

    def test_bad_pattern_becomes_rule_error(self, tmp_path):
        config = load_config(write(tmp_path / "c.yml", """\
            rules:
              - id: good
                message: ok
                pattern: '_'
              - id: bad
                message: broken
                pattern: '_.foo(..., 1)'
            """))
        assert [r.id for r in config.rules] == ["good"]
        (error,) = config.rule_errors
        assert error.rule_id == "bad"
        assert error.error.code is E.MISPLACED_REPEATED_PARAMETER

    def test_deep_pattern_disables_only_its_rule(self):
        deep = "(" * 3000 + "x" + ")" * 3000
        config = parse_config({"rules": [
            {"id": "deep", "message": "too deep", "pattern": deep},
            {"id": "good", "message": "ok", "pattern": "_ == null"},
        ]})
        assert [r.id for r in config.rules] == ["good"]
        (error,) = config.rule_errors
        assert error.rule_id == "deep"
        assert error.error.message == "pattern nested too deeply"

    def test_import(self, tmp_path):
        write(tmp_path / "rules" / "a.yml", """\
            rules:
              - id: imported.a
                message: a
                pattern: 'a()'
            """)
        write(tmp_path / "rules" / "b.yml", """\
            - id: imported.b
              message: b
              pattern: 'b()'
            """)
        config = load_config(write(tmp_path / "c.yml", """\
            rules:
              - id: local
                message: local
                pattern: 'c()'
            import:
              - load: rules/*.yml
            """))
        assert [r.id for r in config.rules] == ["local", "imported.a", "imported.b"]

    def test_import_matching_nothing(self, tmp_path):
        config = load_config(write(tmp_path / "c.yml", "import:\n  - load: none/*.yml\n"))
        assert config.rules == ()

    def test_parse_document_directly(self):
        config = parse_config({"rules": [{"id": "x", "message": "m", "pattern": "x"}]})
        assert config.path is None
        assert [r.id for r in config.rules] == ["x"]


class TestErrors:

    def test_not_found(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as info:
            load_config(tmp_path / "missing.yml")
        assert info.value.code is E.CONFIG_NOT_FOUND
        assert info.value.path.endswith("missing.yml")

    def test_yaml_syntax(self, tmp_path):
        path = write(tmp_path / "c.yml", "rules:\n  - id: x\n   message: [\n")
        with pytest.raises(ConfigSyntaxError) as info:
            load_config(path)
        assert info.value.code is E.CONFIG_SYNTAX
        assert info.value.span.line >= 2

    @pytest.mark.parametrize("document,fragment", [
        ([1, 2], "must be a mapping"),
        ({"rulez": []}, "unknown top-level keys rulez"),
        ({"rules": {"id": "x"}}, "rules must be a list"),
        ({"rules": [{"id": "x", "message": "m"}]}, "missing required key 'pattern'"),
        ({"rules": [{"id": "x", "message": "m", "pattern": "_", "when": 1}]},
         "unknown keys when"),
        ({"rules": [{"id": 3, "message": "m", "pattern": "_"}]}, "must be a string"),
        ({"rules": [{"id": "x", "message": "m", "pattern": []}]},
         "at least one pattern"),
        ({"rules": [{"id": "x", "message": "m", "pattern": ["_", 1]}]},
         "x.pattern[1] must be a string"),
        ({"exclude": 5}, "exclude must be a list"),
        ({"import": [{"file": "x"}]}, "import[0].load must be a string"),
    ])
    def test_schema(self, document, fragment):
        with pytest.raises(ConfigSchemaError) as info:
            parse_config(document)
        assert fragment in info.value.message
        assert info.value.code is E.CONFIG_SCHEMA

    def test_duplicate_rule_id(self):
        rule = {"id": "dup", "message": "m", "pattern": "_"}
        with pytest.raises(ConfigSchemaError) as info:
            parse_config({"rules": [rule, dict(rule)]})
        assert info.value.code is E.DUPLICATE_RULE_ID
        assert "dup" in info.value.message

    def test_duplicate_across_import(self, tmp_path):
        write(tmp_path / "more.yml", "- {id: dup, message: m, pattern: _}\n")
        path = write(tmp_path / "c.yml", """\
            rules:
              - {id: dup, message: m, pattern: _}
            import:
              - load: more.yml
            """)
        with pytest.raises(ConfigSchemaError) as info:
            load_config(path)
        assert info.value.code is E.DUPLICATE_RULE_ID
