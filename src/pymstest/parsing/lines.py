#
# src/pymstest/parsing/lines.py
#
"""
Classification of single lines of mstest.exe console output.

None of these functions raise: a line that fits no other category is a
continuation line, and whether that is legal depends on parser state.
"""
import re
import string
from enum import Enum, auto

from pymstest.parsing.localization import LocalizedTokens

BEGIN_MARKER = "----"
ATTRIBUTE_OPENER = "["
ATTRIBUTE_SEPARATOR = " = "

_WHITESPACE_RE = re.compile(r"\s+")


class LineKind(Enum):
    """What a line of runner output means inside the result block."""

    BEGIN_MARKER = auto()
    END_MARKER = auto()
    NEW_TEST_HEADER = auto()
    ATTRIBUTE_HEADER = auto()
    CONTINUATION_LINE = auto()


def is_begin_marker(line: str) -> bool:
    return line.startswith(BEGIN_MARKER)


def is_end_marker(line: str, tokens: LocalizedTokens) -> bool:
    # The summary either starts with a count ("10/10 test(s) Passed") or the sentinel.
    return (bool(line) and line[0] in string.digits) or line.startswith(tokens.final_results)


def match_outcome(line: str, tokens: LocalizedTokens) -> str | None:
    """Returns the first outcome token the line starts with, if any."""
    for outcome in tokens.outcomes:
        if line.startswith(outcome):
            return outcome
    return None


def is_attribute_header(line: str) -> bool:
    return line.startswith(ATTRIBUTE_OPENER)


def classify_line(line: str, tokens: LocalizedTokens) -> LineKind:
    """Classifies a line found inside the result block."""
    if is_end_marker(line, tokens):
        return LineKind.END_MARKER
    if match_outcome(line, tokens) is not None:
        return LineKind.NEW_TEST_HEADER
    if is_attribute_header(line):
        return LineKind.ATTRIBUTE_HEADER
    if is_begin_marker(line):
        return LineKind.BEGIN_MARKER
    return LineKind.CONTINUATION_LINE


def parse_result_header(line: str, tokens: LocalizedTokens | None = None) -> tuple[str, str]:
    """
    Splits a result header into (status, name).

    When tokens are given, a matching outcome token is taken whole, so
    multi-word outcomes such as ``Non superato`` stay intact. The name is the
    next whitespace-delimited token; a test name containing whitespace is
    truncated.
    """
    outcome = match_outcome(line, tokens) if tokens is not None else None
    if outcome is not None:
        rest = line[len(outcome):]
        if not rest or rest[0].isspace():
            names = rest.split()
            return outcome, names[0] if names else ""

    parts = _WHITESPACE_RE.split(line.strip())
    status = parts[0] if parts else ""
    name = parts[1] if len(parts) > 1 else ""
    return status, name


def parse_attribute_header(line: str) -> tuple[str, str]:
    """
    Splits an attribute header into (key, value).

    Handles both ``[key] = value`` and ``[Key = value]``. A missing separator
    yields an empty value.
    """
    raw_key, separator, value = line.partition(ATTRIBUTE_SEPARATOR)
    if separator and "]" not in raw_key and value.endswith("]"):
        value = value[:-1]
    key = raw_key.replace("[", "").replace("]", "").strip()
    if not separator:
        key = key.rstrip("=").rstrip()
    return key, value

# 🔼⚙️
