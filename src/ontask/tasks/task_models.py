# src/ontask/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class TaskLine:
    """One checkbox line found in a document. Recreated on every read."""

    document_id: str
    line_number: int  # 1-based
    raw_line: str  # trimmed
    status_symbol: str

    @property
    def text(self) -> str:
        """Task text after the "- [s]" token."""
        _, sep, rest = self.raw_line.partition("]")
        return rest.strip() if sep else self.raw_line


@dataclass(frozen=True, slots=True)
class ScanCursor:
    """
    Exact resume point of a scan session.

    document_index: position in the session's ordered document list
    match_index: index into that document's match list
    """

    document_index: int = 0
    match_index: int = 0

    @classmethod
    def start(cls) -> ScanCursor:
        return cls(0, 0)


@dataclass(frozen=True, slots=True)
class ScanScope:
    only_current_period: bool = False
    today: date | None = None  # None -> local date at aggregation time


@dataclass(frozen=True, slots=True)
class ScanBatch:
    tasks: tuple[TaskLine, ...]
    has_more: bool
    cursor: ScanCursor


@dataclass(frozen=True, slots=True)
class RankTier:
    status_symbol: str
    priority: int  # lower value wins
    name: str = ""


DEFAULT_RANK_TIERS: tuple[RankTier, ...] = (
    RankTier("/", 1, "slash"),
    RankTier("!", 2, "exclamation"),
    RankTier("+", 3, "plus"),
)


@dataclass(frozen=True, slots=True)
class RankedTask:
    task: TaskLine
    rank: int | None = None
    is_top: bool = False

    @property
    def document_id(self) -> str:
        return self.task.document_id

    @property
    def line_number(self) -> int:
        return self.task.line_number

    @property
    def raw_line(self) -> str:
        return self.task.raw_line

    @property
    def status_symbol(self) -> str:
        return self.task.status_symbol


@dataclass(frozen=True, slots=True)
class RankingResult:
    ranked_tasks: tuple[RankedTask, ...]
    top_task: RankedTask | None

    @property
    def has_top_task(self) -> bool:
        return self.top_task is not None
