# src/ontask/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import RankedTask

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleTopTaskObserver:
    """Prints top task changes as they happen."""

    def __init__(self) -> None:
        self._last: tuple[str, int] | None = None

    def on_top_task_found(self, task: RankedTask) -> None:
        key = (task.document_id, task.line_number)
        if key == self._last:
            return
        self._last = key
        _print_ts(f"[TOP] {task.raw_line}  ({task.document_id}:{task.line_number})")

    def on_top_task_cleared(self) -> None:
        if self._last is None:
            return
        self._last = None
        _print_ts("[TOP] cleared")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /more to load the next page, /exit to quit.\n")

    unsubscribe = state.ranker.subscribe(ConsoleTopTaskObserver())

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        # Initial page, like opening the task view.
        reply = await command_registry.handle(state, "/refresh", emit=emit)
        if reply:
            _print_ts(reply)

        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                _print_ts("Commands start with '/'. Use /help.")
                continue

            try:
                reply = await command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is not None:
                _print_ts(reply)
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
