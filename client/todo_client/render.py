"""
Plain-text rendering of the derived view.

Lists and tasks are numbered by their position in the view; the shell uses
the same numbers to address them.
"""

from typing import AbstractSet, List

from todo_client.store import TodoState
from todo_client.view import ViewOptions, derive_view, is_expanded

EMPTY_VIEW_MESSAGE = "No lists match the current filters or search. Create one below."
LOADING_MESSAGE = "Loading your lists…"


def _direction(ascending: bool) -> str:
    return "A→Z" if ascending else "Z→A"


def render_view(
    state: TodoState,
    options: ViewOptions,
    expanded: AbstractSet[str] = frozenset(),
) -> str:
    lines: List[str] = ["To Do", ""]

    if not state.loaded:
        lines.append(LOADING_MESSAGE)
        return "\n".join(lines)

    if state.error:
        lines.append(f"Error: {state.error}")

    # Searching only makes sense once there is something to search
    if state.has_tasks:
        term = f'"{options.search}"' if options.search.strip() else "(none)"
        lines.append(f"Search: {term}")
    lines.append(
        "Only incomplete tasks: {}   Lists: {}   Tasks: {}".format(
            "on" if options.incomplete_only else "off",
            _direction(options.lists_ascending),
            _direction(options.tasks_ascending),
        )
    )
    lines.append("")

    view = derive_view(state.lists, options)
    if not view:
        lines.append(EMPTY_VIEW_MESSAGE)
        return "\n".join(lines)

    for position, todo_list in enumerate(view, start=1):
        open_ = is_expanded(todo_list.id, expanded, options)
        lines.append(
            f"{position:>2}. {todo_list.title}  "
            f"{todo_list.completed_count}/{len(todo_list.tasks)}  "
            f"{'[-]' if open_ else '[+]'}"
        )
        if not open_:
            continue
        for number, task in enumerate(todo_list.tasks, start=1):
            mark = "[x]" if task.completed else "[ ]"
            lines.append(f"      {number}. {mark} {task.content}")

    return "\n".join(lines)
