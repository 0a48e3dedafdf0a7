# src/ontask/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Union, cast

from ..config import parse_symbols
from ..core.state import AppState
from ..tasks.task_models import RankedTask
from ..tasks.task_view import TaskListSnapshot

CommandEmitter = Callable[[str], None]
CommandResult = Union[str, Awaitable[str]]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /more, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            result = await result
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(i: int, task: RankedTask) -> str:
    marker = "*" if task.is_top else " "
    rank = f" (rank {task.rank})" if task.rank is not None else ""
    return f"{marker}{i:>3}. {task.raw_line}{rank}  [{task.document_id}:{task.line_number}]"


def _format_snapshot(snapshot: TaskListSnapshot, limit: int | None = None) -> str:
    ranked = snapshot.ranking.ranked_tasks
    if not ranked:
        return "No tasks loaded."
    shown = ranked if limit is None else ranked[:limit]
    lines = [_format_task(i, t) for i, t in enumerate(shown, start=1)]
    if limit is not None and len(ranked) > limit:
        lines.append(f"  ... {len(ranked) - limit} more loaded (use /list)")
    lines.append("More available: /more" if snapshot.has_more else "End of task list.")
    return "\n".join(lines)


def _format_filters(filters: dict[str, bool]) -> str:
    enabled = sorted(s for s, on in filters.items() if on)
    if not enabled:
        return "Status filter: (nothing enabled)"
    shown = ", ".join(f"'{s}'" for s in enabled)
    return f"Status filter: {shown}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    ctl = state.controller
    snap = ctl.snapshot
    cursor = state.scanner.cursor
    return (
        "Status:\n"
        f"  Vault: {getattr(state.settings, 'vault_root', '?')}\n"
        f"  Documents in session: {len(state.scanner.document_ids)}\n"
        f"  Cursor: document {cursor.document_index}, match {cursor.match_index}\n"
        f"  Loaded tasks: {len(snap.tasks)} (page size {ctl.load_more_limit})\n"
        f"  More available: {'yes' if snap.has_more else 'no'}\n"
        f"  Only today: {'ON' if ctl.only_show_today else 'OFF'}\n"
        f"  {_format_filters(ctl.status_filters)}"
    )


async def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Loading tasks...")
    snap = await state.controller.refresh()
    return _format_snapshot(snap)


async def cmd_more(state: AppState, args: list[str]) -> str:
    before = len(state.controller.snapshot.tasks)
    if before and not state.controller.snapshot.has_more:
        return "No more tasks."
    snap = await state.controller.load_more()
    added = len(snap.tasks) - before
    tail = snap.ranking.ranked_tasks[before:]
    lines = [_format_task(i, t) for i, t in enumerate(tail, start=before + 1)]
    lines.append(f"Loaded {added} more task(s). " + ("More available: /more" if snap.has_more else "End of task list."))
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    limit: int | None = None
    if args:
        try:
            limit = max(1, int(args[0]))
        except ValueError:
            return "Usage: /list [n]"
    return _format_snapshot(state.controller.snapshot, limit)


def cmd_top(state: AppState, args: list[str]) -> str:
    top = state.controller.snapshot.ranking.top_task
    if top is None:
        return "No top task among loaded tasks."
    return f"Top task: {top.raw_line}\n  {top.document_id}:{top.line_number} (rank {top.rank})"


async def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter            -> show enabled statuses
    /filter ./!x       -> enable exactly these statuses ("_" = space)
    """
    if not args:
        return _format_filters(state.controller.status_filters)
    filters = parse_symbols("".join(args))
    snap = await state.controller.set_status_filters(filters)
    return _format_filters(state.controller.status_filters) + "\n" + _format_snapshot(snap)


async def cmd_today(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Only today is {'ON' if state.controller.only_show_today else 'OFF'}. Use /today on or /today off."
    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        snap = await state.controller.set_only_show_today(True)
    elif arg in ("off", "0", "false", "no"):
        snap = await state.controller.set_only_show_today(False)
    else:
        return "Usage: /today on or /today off."
    return _format_snapshot(snap)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show scan session state and settings.")
registry.register("refresh", cmd_refresh, help_text="Rebuild the document list and load the first page.", aliases=["r"])
registry.register("more", cmd_more, help_text="Load the next page of tasks.", aliases=["m"])
registry.register("list", cmd_list, help_text="Show loaded tasks: /list [n].", aliases=["ls"])
registry.register("top", cmd_top, help_text="Show the current top task.")
registry.register("filter", cmd_filter, help_text="Show or set status filter: /filter ./!x (_ = space).")
registry.register("today", cmd_today, help_text="Only scan today's documents: /today on | /today off.")
