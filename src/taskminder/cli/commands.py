# src/taskminder/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any, cast

from ..core.state import AppState
from ..tasks.task_models import Priority, Task
from ..tasks.task_views import (
    filter_by_priority,
    format_due,
    format_task_line,
    parse_due,
    search_tasks,
    sort_by_title,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_WRITE_TIMEOUT_S = 10.0


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
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
            logger.debug("Unknown command /%s", name)
            return f"Unknown command: /{name}. Use /help to list available commands."
        logger.debug("Command /%s args=%s", name, args)

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _run(state: AppState, fn: Callable[..., Any], *args: Any) -> Any:
    """Send a write to the background command worker and wait for its result."""
    return state.service.launch(fn, *args).result(timeout=_WRITE_TIMEOUT_S)


def _snapshot(state: AppState) -> list[Task]:
    if state.all_tasks is not None and state.all_tasks.active:
        return list(state.all_tasks.latest)
    return state.service.list_tasks()


def _parse_id(raw: str) -> int | None:
    s = raw.lstrip("#")
    return int(s) if s.isdigit() else None


def _render(tasks: list[Task], empty: str = "No tasks.") -> str:
    if not tasks:
        return empty
    return "\n".join(format_task_line(t) for t in tasks)


def _split_options(state: AppState, args: list[str]) -> tuple[dict[str, Any], list[str]]:
    """
    Leading "!priority" and "@due" tokens are options; the rest is the title.

    "@none" clears the due date.
    """
    opts: dict[str, Any] = {}
    rest = list(args)
    while rest and rest[0][:1] in ("!", "@"):
        tok = rest.pop(0)
        if tok.startswith("!"):
            opts["priority"] = Priority.parse(tok[1:])
        elif tok[1:].lower() == "none":
            opts["due_date"] = None
        else:
            opts["due_date"] = parse_due(tok[1:], state.service.now())
    return opts, rest


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add [!low|!med|!high] [@+15m|@2026-01-31T09:00] title words...
    """
    try:
        opts, rest = _split_options(state, args)
    except ValueError as e:
        return f"Invalid option: {e}"

    title = " ".join(rest).strip()
    if not title:
        return "Title must not be empty. Usage: /add [!prio] [@due] title"

    task_id = _run(
        state,
        state.service.add_task,
        title,
        opts.get("priority", Priority.LOW),
        opts.get("due_date"),
    )
    due = opts.get("due_date")
    suffix = f", reminder at {format_due(due)}" if due is not None else ""
    return f"Task #{task_id} added{suffix}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [!prio] [@due|@none] [new title...]
    """
    if not args or _parse_id(args[0]) is None:
        return "Usage: /edit <id> [!prio] [@due|@none] [title]"

    task_id = cast(int, _parse_id(args[0]))
    task = state.service.get_task_once(task_id)
    if task is None:
        return f"Task #{task_id} not found."

    try:
        opts, rest = _split_options(state, args[1:])
    except ValueError as e:
        return f"Invalid option: {e}"

    title = " ".join(rest).strip()
    if title:
        opts["title"] = title
    if not opts:
        return "Nothing to change."

    updated = replace(task, **opts)
    if not _run(state, state.service.update_task, updated):
        return f"Task #{task_id} not found."
    return f"Task #{task_id} updated."


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <id>      -> mark completed
    /done <id> off  -> mark not completed
    """
    if not args or _parse_id(args[0]) is None:
        return "Usage: /done <id> [off]"
    task_id = cast(int, _parse_id(args[0]))
    completed = not (len(args) > 1 and args[1].lower() in ("off", "0", "no", "false"))
    if not _run(state, state.service.set_completed, task_id, completed):
        return f"Task #{task_id} not found."
    return f"Task #{task_id} marked {'done' if completed else 'not done'}."


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args or _parse_id(args[0]) is None:
        return "Usage: /show <id>"
    task_id = cast(int, _parse_id(args[0]))
    task = state.service.get_task_once(task_id)
    if task is None:
        return f"Task #{task_id} not found."
    job = state.scheduler.pending_job(task_id)
    reminder = f"pending at {format_due(job.run_at)}" if job else "none"
    return f"{format_task_line(task)}\n  reminder: {reminder}"


def cmd_del(state: AppState, args: list[str]) -> str:
    if not args or _parse_id(args[0]) is None:
        return "Usage: /del <id>"
    task_id = cast(int, _parse_id(args[0]))
    task = state.service.get_task_once(task_id)
    if task is None:
        return f"Task #{task_id} not found."
    _run(state, state.service.delete_task, task)
    window = state.service.undo_window_ms // 1000
    return f"Task #{task_id} deleted. Use /undo within {window}s to restore it."


def cmd_undo(state: AppState, args: list[str]) -> str:
    restored = _run(state, state.service.undo_last_delete)
    if restored is None:
        return "Nothing to undo."
    return f"Task #{restored.id} restored."


def cmd_list(state: AppState, args: list[str]) -> str:
    return _render(_snapshot(state))


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter all|low|med|high
    """
    if not args:
        return "Usage: /filter all|low|med|high"
    arg = args[0].lower()
    if arg == "all":
        return _render(_snapshot(state))
    try:
        prio = Priority.parse(arg)
    except ValueError:
        return "Usage: /filter all|low|med|high"
    return _render(filter_by_priority(_snapshot(state), prio), empty=f"No {prio.name.lower()} priority tasks.")


def cmd_sort(state: AppState, args: list[str]) -> str:
    """
    /sort az  -> title A-Z
    /sort za  -> title Z-A
    """
    order = (args[0].lower() if args else "az")
    if order not in ("az", "za"):
        return "Usage: /sort az|za"
    return _render(sort_by_title(_snapshot(state), descending=(order == "za")))


def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args).strip()
    return _render(search_tasks(_snapshot(state), query), empty=f"No tasks match {query!r}.")


def cmd_jobs(state: AppState, args: list[str]) -> str:
    jobs = state.job_queue.list_pending(limit=50)
    if not jobs:
        return "No pending reminders."
    lines = ["Pending reminders:"]
    for j in jobs:
        title = j.payload.get("taskTitle", "?")
        lines.append(f"  {j.key}  at {format_due(j.run_at)}  {title}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add [!low|!med|!high] [@+15m|@YYYY-MM-DDTHH:MM] title.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [!prio] [@due|@none] [title].")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id> [off].")
registry.register("show", cmd_show, help_text="Show one task and its reminder: /show <id>.")
registry.register("del", cmd_del, help_text="Delete a task: /del <id>.", aliases=["rm", "delete"])
registry.register("undo", cmd_undo, help_text="Restore the last deleted task (inside the undo window).")
registry.register("list", cmd_list, help_text="List all tasks.", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Filter by priority: /filter all|low|med|high.")
registry.register("sort", cmd_sort, help_text="Sort by title: /sort az|za.")
registry.register("search", cmd_search, help_text="Search titles: /search <text>.")
registry.register("jobs", cmd_jobs, help_text="List pending reminder jobs.")
