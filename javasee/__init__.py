"""javasee – a structural pattern linter for Java.

Rules are written as Java-like expression patterns (``_.println("debug")``,
``_ == null [conditional]``) and matched against the syntax tree of every
analysed file.
"""

__version__ = "0.1.0"

from .analyzer import Analyzer
from .compiler import PatternCompiler, compile_pattern
from .config import Config, load_config
from .errors import (
    ConfigError,
    FatalError,
    JavaSeeError,
    PatternCompileError,
    ScriptParseError,
)
from .java_parser import JavaParser
from .outcomes import Issue, RuleError, ScriptError
from .rules import Rule, RuleSpec, compile_rule
from .traversal import NodePair, iter_pairs

__all__ = [
    "__version__",
    "Analyzer",
    "PatternCompiler",
    "compile_pattern",
    "Config",
    "load_config",
    "ConfigError",
    "FatalError",
    "JavaSeeError",
    "PatternCompileError",
    "ScriptParseError",
    "JavaParser",
    "Issue",
    "RuleError",
    "ScriptError",
    "Rule",
    "RuleSpec",
    "compile_rule",
    "NodePair",
    "iter_pairs",
]
