"""Ordered extraction rules and pipe-table parsing.

A field is resolved by evaluating its rule table top to bottom; the
first rule that yields a non-empty value wins, otherwise the caller's
default is used.
"""

import re
from collections.abc import Callable, Iterator, Sequence
from typing import NamedTuple


def _strip_markup(value: str) -> str:
    return value.strip().strip("`*").strip()


class FieldRule(NamedTuple):
    """A regex predicate paired with a value extractor for its first group."""

    label: str
    pattern: re.Pattern
    extract: Callable[[str], str] = _strip_markup

    def apply(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if not match:
            return None
        value = self.extract(match.group(1))
        return value or None


def first_match(rules: Sequence[FieldRule], text: str, default: str) -> str:
    """Return the value of the first matching rule, else the default."""
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            return value
    return default


def labelled(labels: str, value: str = r"(.+?)(?:\n|$)", flags: int = 0) -> re.Pattern:
    """Build a `**label**: value` pattern; the emphasis markup is optional."""
    return re.compile(rf"(?<![A-Za-z_])(?:\*\*)?(?:{labels})(?:\*\*)?\s*[：:]\s*{value}", flags)


def find_section(patterns: Sequence[re.Pattern], text: str) -> str | None:
    """Return the captured body of the first section pattern that matches."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def _is_separator(line: str) -> bool:
    stripped = line.strip()
    return "---" in stripped and set(stripped) <= set("|-: ")


def split_cells(line: str) -> list[str]:
    """Split a pipe-delimited row into its non-empty, trimmed cells."""
    return [c.strip() for c in line.split("|") if c.strip()]


def iter_table_rows(block: str, min_cells: int) -> Iterator[list[str]]:
    """Yield the data rows of the first pipe table in a block.

    Blank lines are skipped, exactly one header row is dropped, the
    dashed separator row marks the start of the data and the first
    non-table line after it ends the table. Rows with fewer than
    ``min_cells`` non-empty cells are ignored.
    """
    in_table = False
    header_found = False

    for line in block.split("\n"):
        if not line.strip():
            continue

        if "|" not in line:
            if in_table:
                break
            continue

        if _is_separator(line):
            in_table = True
            continue

        if not header_found:
            header_found = True
            continue

        if in_table:
            cells = split_cells(line)
            if len(cells) >= min_cells:
                yield cells
