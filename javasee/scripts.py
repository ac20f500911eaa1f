# javasee/scripts.py
"""
Locating and loading the Java files to analyze.

``ScriptEnumerator`` turns command-line paths into a deterministic list of
``.java`` files; ``load_scripts`` parses them lazily, one per iteration
step, producing a ``Script`` or a ``ScriptError`` for each.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Set, Union

from .errors import E, ScriptParseError
from .java_parser import JavaParser
from .outcomes import ScriptError
from .source import SourceNode

logger = logging.getLogger(__name__)

__all__ = ["Script", "ScriptEnumerator", "load_script", "load_scripts"]

JAVA_SUFFIX = ".java"


@dataclass(frozen=True, eq=False)
class Script:
    path: Path
    root: SourceNode
    source: str = ""

    def line(self, number: int) -> str:
        """Text of 1-based line *number*, without its terminator."""
        lines = self.source.splitlines()
        if 1 <= number <= len(lines):
            return lines[number - 1]
        return ""


def load_script(path: Path, parser: Optional[JavaParser] = None) -> Script:
    """Read and parse one file; raises ``ScriptParseError``."""
    parser = parser or JavaParser()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ScriptParseError(
            f"cannot read {path}: {exc.strerror or exc}",
            path=str(path),
            code=E.SCRIPT_READ,
        ) from exc
    root = parser.parse(data, path=str(path))
    return Script(path=path, root=root, source=data.decode("utf-8", errors="replace"))


class ScriptEnumerator:
    """
    Expand paths into ``.java`` files.

    Explicit files are kept in argument order whatever their suffix;
    directories are walked recursively in sorted order.  Paths matching an
    ``exclude`` glob (relative to *root*) and repeats are dropped.
    """

    def __init__(
        self,
        paths: Sequence[Union[str, Path]],
        exclude: Sequence[str] = (),
        root: Optional[Path] = None,
    ):
        self.paths = [Path(p) for p in paths] or [Path(".")]
        self.exclude = tuple(exclude)
        self.root = root or Path(".")

    def is_excluded(self, path: Path) -> bool:
        try:
            relative = path.resolve().relative_to(self.root.resolve())
        except ValueError:
            relative = path
        text = relative.as_posix()
        return any(
            fnmatch.fnmatch(text, pattern) or fnmatch.fnmatch(path.name, pattern)
            for pattern in self.exclude
        )

    def __iter__(self) -> Iterator[Path]:
        seen: Set[Path] = set()
        for path in self.paths:
            if path.is_dir():
                candidates: Iterable[Path] = sorted(
                    p for p in path.rglob(f"*{JAVA_SUFFIX}") if p.is_file()
                )
            else:
                candidates = [path]
            for candidate in candidates:
                key = candidate.resolve()
                if key in seen:
                    continue
                seen.add(key)
                if self.is_excluded(candidate):
                    logger.debug("excluded %s", candidate)
                    continue
                yield candidate


def load_scripts(
    paths: Iterable[Path], parser: Optional[JavaParser] = None
) -> Iterator[Union[Script, ScriptError]]:
    """Lazily load each path, turning failures into ``ScriptError``s."""
    parser = parser or JavaParser()
    for path in paths:
        try:
            script = load_script(path, parser)
        except ScriptParseError as exc:
            logger.info("failed to load %s: %s", path, exc.message)
            yield ScriptError(path, exc)
            continue
        logger.debug("loaded %s", path)
        yield script
