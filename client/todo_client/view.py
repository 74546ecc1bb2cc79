"""
Derived view over the mirror: what the page shows for the current controls.

Pipeline, in this order:
    1. search        keep tasks whose content contains the term (case-insensitive)
    2. incomplete    keep tasks that are not completed
    3. sort          lists by title, tasks by content, each A→Z or Z→A

Either filter being active hides lists left with no tasks and forces every
list open.
"""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Tuple

from todo_client.models import TodoList


@dataclass(frozen=True)
class ViewOptions:
    search: str = ""
    incomplete_only: bool = False
    lists_ascending: bool = True
    tasks_ascending: bool = True


def is_filter_active(options: ViewOptions) -> bool:
    return options.incomplete_only or bool(options.search.strip())


def derive_view(lists: Iterable[TodoList], options: ViewOptions) -> Tuple[TodoList, ...]:
    view = list(lists)

    if options.search.strip():
        term = options.search.casefold()
        view = [
            l.with_tasks(t for t in l.tasks if term in t.content.casefold())
            for l in view
        ]
        view = [l for l in view if l.tasks]

    if options.incomplete_only:
        view = [l.with_tasks(t for t in l.tasks if not t.completed) for l in view]
        view = [l for l in view if l.tasks]

    view.sort(key=lambda l: l.title.casefold(), reverse=not options.lists_ascending)
    return tuple(
        l.with_tasks(
            sorted(
                l.tasks,
                key=lambda t: t.content.casefold(),
                reverse=not options.tasks_ascending,
            )
        )
        for l in view
    )


def is_expanded(list_id: str, expanded: AbstractSet[str], options: ViewOptions) -> bool:
    """A filter forces every list open; otherwise the user's choice stands."""
    return is_filter_active(options) or list_id in expanded
