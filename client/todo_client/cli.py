"""
Todo Client CLI
===============

Usage:
    # Interactive shell (default)
    todo-client --token "$SESSION_TOKEN"

    # Print the lists once and exit
    todo-client lists --base-url http://localhost:4000

Inside the shell, lists are addressed by their number on the page and
tasks by "<list> <task>" numbers; `help` lists every command.
"""

import argparse
import asyncio
import cmd
import logging
import sys
from dataclasses import replace
from typing import Optional, Set, Tuple

from todo_client import __version__
from todo_client.api import TodoApiClient
from todo_client.config import ClientSettings
from todo_client.models import Task, TodoList
from todo_client.render import render_view
from todo_client.session import ERROR, Notice, TodoSession
from todo_client.view import ViewOptions, derive_view, is_filter_active

logger = logging.getLogger(__name__)


class UsageError(Exception):
    pass


class TodoShell(cmd.Cmd):
    intro = f"Todo client {__version__}. Type 'help' for commands, 'quit' to exit."
    prompt = "todo> "

    def __init__(
        self,
        session: TodoSession,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        stdin=None,
        stdout=None,
    ):
        super().__init__(stdin=stdin, stdout=stdout)
        self.session = session
        self.loop = loop or asyncio.new_event_loop()
        self.options = ViewOptions()
        self.expanded: Set[str] = set()
        self.token: str = ""

    # ── Plumbing ──────────────────────────────────────────────────────────

    def _run(self, coro):
        return self.loop.run_until_complete(coro)

    def _print(self, text: str = "") -> None:
        self.stdout.write(text + "\n")

    def show_notice(self, notice: Notice) -> None:
        prefix = "!" if notice.level == ERROR else "✓"
        self._print(f"{prefix} {notice.message}")

    def _page(self) -> None:
        self._print(render_view(self.session.store.state, self.options, self.expanded))

    def _view(self) -> Tuple[TodoList, ...]:
        return derive_view(self.session.store.state.lists, self.options)

    def _list_at(self, position: str) -> TodoList:
        view = self._view()
        try:
            index = int(position)
        except ValueError:
            raise UsageError(f"Not a list number: {position}")
        if not 1 <= index <= len(view):
            raise UsageError(f"No list number {index}")
        return view[index - 1]

    def _task_at(self, list_position: str, task_position: str) -> Tuple[TodoList, Task]:
        todo_list = self._list_at(list_position)
        try:
            index = int(task_position)
        except ValueError:
            raise UsageError(f"Not a task number: {task_position}")
        if not 1 <= index <= len(todo_list.tasks):
            raise UsageError(f"List {list_position} has no task number {index}")
        return todo_list, todo_list.tasks[index - 1]

    @staticmethod
    def _split(arg: str, count: int) -> list:
        """Split off `count` leading words; the remainder (may contain spaces) comes last."""
        parts = arg.split(None, count)
        if len(parts) < count + 1:
            raise UsageError("Missing arguments")
        return parts

    @staticmethod
    def _pair(arg: str) -> Tuple[str, str]:
        parts = arg.split()
        if len(parts) != 2:
            raise UsageError("Expected <list> <task>")
        return parts[0], parts[1]

    def onecmd(self, line: str) -> bool:
        try:
            return super().onecmd(line)
        except UsageError as e:
            self._print(f"? {e}")
            return False

    def emptyline(self) -> bool:
        return False

    def default(self, line: str) -> None:
        self._print(f"? Unknown command: {line.split()[0]}")

    # ── Session ───────────────────────────────────────────────────────────

    def do_signin(self, arg: str) -> None:
        """signin [token]  Sign in (optionally with a new session token) and load lists."""
        if arg.strip():
            self.token = arg.strip()
        self._run(self.session.sign_in())
        self._page()

    def do_signout(self, arg: str) -> None:
        """signout  Forget the token and clear the local lists."""
        self.session.sign_out()
        self.token = ""
        self.expanded.clear()
        self.options = ViewOptions()
        self._print("Signed out.")

    def do_show(self, arg: str) -> None:
        """show  Print the lists."""
        self._page()

    do_ls = do_show

    # ── Lists ─────────────────────────────────────────────────────────────

    def do_new(self, arg: str) -> None:
        """new <title>  Create a list."""
        if self._run(self.session.create_list(arg)) is not None:
            self._page()

    def do_rename(self, arg: str) -> None:
        """rename <list> <title>  Rename a list."""
        position, draft = self._split(arg, 1)
        todo_list = self._list_at(position)
        title = self._run(self.session.rename_list(todo_list.id, draft))
        self._print(f"Title: {title}")

    def _confirm(self, question: str) -> bool:
        self.stdout.write(f"{question} [y/N] ")
        self.stdout.flush()
        answer = self.stdin.readline().strip().lower()
        return answer in ("y", "yes")

    def do_rm(self, arg: str) -> None:
        """rm [-y] <list>  Delete a list and all of its tasks (-y skips the confirmation)."""
        words = arg.split()
        assume_yes = "-y" in words
        positions = [w for w in words if w != "-y"]
        if len(positions) != 1:
            raise UsageError("Usage: rm [-y] <list>")
        todo_list = self._list_at(positions[0])
        if not assume_yes and not self._confirm(f"Delete list \"{todo_list.title}\"?"):
            self._print("Cancelled")
            return
        if self._run(self.session.delete_list(todo_list.id)):
            self.expanded.discard(todo_list.id)
            self._page()

    def do_expand(self, arg: str) -> None:
        """expand <list>  Show a list's tasks."""
        self.expanded.add(self._list_at(arg.strip()).id)
        self._page()

    def do_collapse(self, arg: str) -> None:
        """collapse <list>  Hide a list's tasks (no effect while a filter is on)."""
        self.expanded.discard(self._list_at(arg.strip()).id)
        if is_filter_active(self.options):
            self._print("Lists stay expanded while a search or filter is active.")
        self._page()

    # ── Tasks ─────────────────────────────────────────────────────────────

    def do_add(self, arg: str) -> None:
        """add <list> <content>  Add a task to a list."""
        position, content = self._split(arg, 1)
        todo_list = self._list_at(position)
        if self._run(self.session.add_task(todo_list.id, content)) is not None:
            self.expanded.add(todo_list.id)
            self._page()

    def do_toggle(self, arg: str) -> None:
        """toggle <list> <task>  Mark a task done / not done."""
        todo_list, task = self._task_at(*self._pair(arg))
        if self._run(self.session.toggle_task(todo_list.id, task.id)) is not None:
            self._page()

    def do_edit(self, arg: str) -> None:
        """edit <list> <task> <content>  Change a task's text."""
        list_position, task_position, draft = self._split(arg, 2)
        todo_list, task = self._task_at(list_position, task_position)
        content = self._run(self.session.edit_task(todo_list.id, task.id, draft))
        self._print(f"Task: {content}")

    def do_del(self, arg: str) -> None:
        """del <list> <task>  Delete a task."""
        todo_list, task = self._task_at(*self._pair(arg))
        if self._run(self.session.delete_task(todo_list.id, task.id)):
            self._page()

    # ── View controls ─────────────────────────────────────────────────────

    def do_search(self, arg: str) -> None:
        """search [text]  Filter tasks by text; no text clears the search."""
        if not self.session.store.state.has_tasks and arg.strip():
            self._print("Nothing to search yet: add a task first.")
            return
        self._set(search=arg)

    def do_incomplete(self, arg: str) -> None:
        """incomplete  Toggle showing only incomplete tasks."""
        self._set(incomplete_only=not self.options.incomplete_only)

    def do_sort(self, arg: str) -> None:
        """sort lists|tasks  Flip the A→Z / Z→A order of lists or tasks."""
        target = arg.strip()
        if target == "lists":
            self._set(lists_ascending=not self.options.lists_ascending)
        elif target == "tasks":
            self._set(tasks_ascending=not self.options.tasks_ascending)
        else:
            raise UsageError("Usage: sort lists|tasks")

    def _set(self, **changes) -> None:
        self.options = replace(self.options, **changes)
        self._page()

    # ── Exit ──────────────────────────────────────────────────────────────

    def do_quit(self, arg: str) -> bool:
        """quit  Leave the shell."""
        return True

    do_exit = do_quit

    def do_EOF(self, arg: str) -> bool:
        self._print()
        return True


# ══════════════════════════════════════════════════════════════════════════
# Entry point
# ══════════════════════════════════════════════════════════════════════════

def build_shell(settings: ClientSettings, stdout=None) -> TodoShell:
    """Wire settings → API client → session → shell."""
    def token_provider() -> Optional[str]:
        return shell.token or None

    api = TodoApiClient(settings.api_base_url, token_provider, timeout=settings.request_timeout)
    session = TodoSession(api)
    shell = TodoShell(session, stdout=stdout)
    shell.token = settings.auth_token
    session.on_notice = shell.show_notice
    return shell


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="todo-client",
        description="Terminal client for the Todo API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment:\n"
            "  TODO_API_BASE_URL, TODO_AUTH_TOKEN, TODO_REQUEST_TIMEOUT, TODO_LOG_LEVEL\n"
        ),
    )
    parser.add_argument("--base-url", help="Backend origin (overrides TODO_API_BASE_URL)")
    parser.add_argument("--token", help="Session token (overrides TODO_AUTH_TOKEN)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    subparsers.add_parser("shell", help="Interactive shell (default)")
    subparsers.add_parser("lists", help="Sign in, print every list expanded, and exit")

    args = parser.parse_args(argv)

    overrides = {
        key: value
        for key, value in {
            "api_base_url": args.base_url,
            "auth_token": args.token,
            "request_timeout": args.timeout,
            "log_level": args.log_level,
        }.items()
        if value is not None
    }
    settings = ClientSettings(**overrides)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    shell = build_shell(settings)
    try:
        if args.command == "lists":
            signed_in = shell.loop.run_until_complete(shell.session.sign_in())
            shell.expanded.update(l.id for l in shell.session.store.state.lists)
            shell._page()
            return 0 if signed_in else 1

        if shell.token:
            shell.onecmd("signin")
        else:
            shell._print("No token configured; use 'signin <token>'.")
        try:
            shell.cmdloop()
        except KeyboardInterrupt:
            shell._print()
        return 0
    finally:
        shell.loop.run_until_complete(shell.session.api.aclose())
        shell.loop.close()


if __name__ == "__main__":
    sys.exit(main())
