"""Quote- and parenthesis-aware scanning of WHERE clause bodies.

The scanner is an explicit state machine so the quoting and nesting
rules can be exercised on their own, independent of condition assembly.
"""

import re
from enum import Enum
from typing import NamedTuple


class ScanState(Enum):
    NORMAL = "normal"
    IN_SINGLE_QUOTE = "in_single_quote"
    IN_DOUBLE_QUOTE = "in_double_quote"
    IN_PARENS = "in_parens"


_QUOTE_STATES = {"'": ScanState.IN_SINGLE_QUOTE, '"': ScanState.IN_DOUBLE_QUOTE}

CONNECTORS = ("AND", "OR")

_LEADING_PARENS = re.compile(r"\(+")
_TRAILING_PARENS = re.compile(r"\)+$")


class SqlScanner:
    """Tracks quoting and parenthesis depth one character at a time.

    A quote preceded by a backslash does not open or close a string.
    Parentheses only count outside strings; an unmatched `)` never takes
    the depth below zero.
    """

    def __init__(self):
        self.state = ScanState.NORMAL
        self.depth = 0
        self._prev = ""

    @property
    def at_top_level(self) -> bool:
        return self.state is ScanState.NORMAL

    def _settle(self) -> ScanState:
        return ScanState.IN_PARENS if self.depth > 0 else ScanState.NORMAL

    def feed(self, char: str) -> ScanState:
        """Consume one character and return the resulting state."""
        escaped = self._prev == "\\"
        self._prev = char

        if self.state in (ScanState.IN_SINGLE_QUOTE, ScanState.IN_DOUBLE_QUOTE):
            if not escaped and _QUOTE_STATES.get(char) is self.state:
                self.state = self._settle()
            return self.state

        if char in _QUOTE_STATES and not escaped:
            self.state = _QUOTE_STATES[char]
        elif char == "(":
            self.depth += 1
            self.state = ScanState.IN_PARENS
        elif char == ")":
            self.depth = max(0, self.depth - 1)
            self.state = self._settle()
        return self.state


class Token(NamedTuple):
    kind: str  # "fragment" / "connector"
    text: str


def _connector_at(text: str, i: int) -> str | None:
    """Return the connector keyword starting at i, if one does."""
    if i > 0 and (text[i - 1].isalnum() or text[i - 1] == "_"):
        return None
    for keyword in CONNECTORS:
        end = i + len(keyword)
        if text[i:end].upper() == keyword and end < len(text) and text[end].isspace():
            return keyword
    return None


def tokenize_conditions(where_body: str) -> list[Token]:
    """Split a WHERE body into fragments and top-level AND/OR connectors.

    Connectors inside strings or parentheses stay part of their fragment;
    parentheses are kept in the fragment text.
    """
    tokens = []
    scanner = SqlScanner()
    current = ""
    i = 0

    while i < len(where_body):
        if scanner.at_top_level:
            keyword = _connector_at(where_body, i)
            if keyword:
                if current.strip():
                    tokens.append(Token("fragment", current.strip()))
                tokens.append(Token("connector", keyword))
                current = ""
                i += len(keyword) + 1
                continue

        char = where_body[i]
        scanner.feed(char)
        current += char
        i += 1

    if current.strip():
        tokens.append(Token("fragment", current.strip()))
    return tokens


def paren_runs(fragment: str) -> tuple[str, str]:
    """Return the leading run of `(` and the trailing run of `)` of a fragment.

    The fragment text itself is left alone; a condition's statement keeps
    its parentheses and these runs only describe the grouping.
    """
    text = fragment.strip()
    opening = _LEADING_PARENS.match(text)
    closing = _TRAILING_PARENS.search(text)
    return (opening.group(0) if opening else "", closing.group(0) if closing else "")
