# javasee/literals.py
"""Decoding of Java literal text, shared by the pattern compiler and the
Java host parser so both sides of a comparison agree on values."""

from __future__ import annotations

import re

_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    "s": " ",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

_ESCAPE_RE = re.compile(
    r"\\(?:u+([0-9a-fA-F]{4})|([0-3][0-7]{0,2}|[4-7][0-7]?)|\n|(.))",
    re.DOTALL,
)


def decode_int(text: str) -> int:
    """Value of a Java integer literal (suffix ``L`` allowed)."""
    digits = text.replace("_", "").rstrip("lL")
    lowered = digits.lower()
    if lowered.startswith("0x"):
        return int(digits[2:], 16)
    if lowered.startswith("0b"):
        return int(digits[2:], 2)
    if len(digits) > 1 and digits.startswith("0"):
        return int(digits[1:], 8)
    return int(digits)


def is_long_literal(text: str) -> bool:
    return text[-1:] in ("l", "L")


def decode_double(text: str) -> float:
    """Value of a Java floating point literal (``f``/``d`` suffix allowed)."""
    digits = text.replace("_", "")
    if digits.lower().startswith("0x"):
        if digits[-1:] in ("f", "F", "d", "D"):
            digits = digits[:-1]
        return float.fromhex(digits)
    return float(digits.rstrip("fFdD"))


def _replace_escape(match: "re.Match[str]") -> str:
    unicode_digits, octal, single = match.groups()
    if unicode_digits is not None:
        return chr(int(unicode_digits, 16))
    if octal is not None:
        return chr(int(octal, 8))
    if single is not None:
        try:
            return _ESCAPES[single]
        except KeyError:
            raise ValueError(f"invalid escape sequence \\{single}") from None
    # Line continuation inside a text block.
    return ""


def decode_string(text: str) -> str:
    """
    Contents of a quoted Java string literal or text block.

    Raises ``ValueError`` on an unknown escape sequence.
    """
    if text.startswith('"""'):
        body = text[3:-3]
        # The opening delimiter is followed by a line terminator.
        body = body.split("\n", 1)[1] if "\n" in body else body
        return _ESCAPE_RE.sub(_replace_escape, _strip_incidental_indent(body))
    return _ESCAPE_RE.sub(_replace_escape, text[1:-1])


def _strip_incidental_indent(body: str) -> str:
    lines = body.split("\n")
    significant = [line for line in lines if line.strip()]
    # The closing delimiter line counts even when blank.
    if lines and not lines[-1].strip():
        significant.append(lines[-1])
    indent = min(
        (len(line) - len(line.lstrip(" \t")) for line in significant),
        default=0,
    )
    return "\n".join(line[indent:].rstrip(" \t") for line in lines)
