# src/ontask/tasks/status_filter.py

from __future__ import annotations

"""
Status filter compiler and checkbox line grammar.

A task line looks like "- [x] text": optional indentation, a dash, a single
character in brackets, whitespace, then anything. The bracket character is the
status symbol tested against the compiled filter.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from .task_models import TaskLine

CHECKBOX_REGEX = re.compile(r"^\s*-\s*\[(.)\]\s.*")

# "." is the canonical to-do symbol; "- [ ]" lines are treated as the same status.
TODO_SYMBOL = "."
TODO_SYNONYM = " "


@dataclass(frozen=True, slots=True)
class StatusPredicate:
    """Compiled inclusion predicate. Call it with a status symbol."""

    allowed: frozenset[str]

    def __call__(self, symbol: str) -> bool:
        return symbol in self.allowed

    @property
    def is_empty(self) -> bool:
        return not self.allowed


def compile_filter(filter_set: Mapping[str, bool]) -> StatusPredicate:
    """
    Closed world: only symbols mapped to True are included.

    If "." is included, " " is included as well (one direction only).
    An empty inclusion set compiles to a predicate that matches nothing.
    """
    allowed = {symbol for symbol, included in filter_set.items() if included is True}
    if TODO_SYMBOL in allowed:
        allowed.add(TODO_SYNONYM)
    return StatusPredicate(frozenset(allowed))


def parse_task_line(line: str) -> str | None:
    """Return the status symbol if the line is a checkbox line, else None."""
    m = CHECKBOX_REGEX.match(line.rstrip("\r"))
    if not m:
        return None
    return m.group(1)


def extract_matches(document_id: str, text: str, predicate: StatusPredicate) -> list[TaskLine]:
    """The document's match list, in line order."""
    if predicate.is_empty:
        return []

    out: list[TaskLine] = []
    for idx, line in enumerate(text.split("\n")):
        symbol = parse_task_line(line)
        if symbol is None or not predicate(symbol):
            continue
        out.append(
            TaskLine(
                document_id=document_id,
                line_number=idx + 1,
                raw_line=line.strip(),
                status_symbol=symbol,
            )
        )
    return out
