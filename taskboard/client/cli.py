"""cli.py — Terminal front end for the taskboard API.

Each subcommand drives one of the data views and prints its ``render()``
output. Exit status is 1 when the view ends with an error.

    taskboard projects
    taskboard add-project --title "Website" --description "Relaunch"
    taskboard toggle-task <projectId> <taskId>
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from taskboard.client.api import TaskboardApi
from taskboard.client.views import ProjectListView, TaskForm, TaskListView
from taskboard.config import TASKBOARD_API_TIMEOUT, TASKBOARD_API_URL

__all__ = [
    "build_parser",
    "main",
]


def _prompt_confirm(message: str) -> bool:
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _errored(*views) -> bool:
    return any(view is not None and view.error for view in views)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_projects(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = ProjectListView(api, confirm)
    view.mount()
    _print(view.render())
    return 1 if _errored(view) else 0


def _cmd_show(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = ProjectListView(api, confirm)
    view.mount()
    if not _errored(view) and view.find(args.project_id) is None:
        print("! Project not found")
        return 1
    if not _errored(view):
        view.select_project(args.project_id)
    _print(view.render())
    return 1 if _errored(view, view.task_list) else 0


def _cmd_add_project(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = ProjectListView(api, confirm)
    form = view.toggle_form()
    form.title = args.title
    form.description = args.description
    form.submit()
    if _errored(form):
        _print(form.render())
        return 1
    _print(view.render())
    return 1 if _errored(view) else 0


def _cmd_edit_project(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = ProjectListView(api, confirm)
    view.mount()
    if _errored(view):
        _print(view.render())
        return 1
    form = view.edit_project(args.project_id)
    if form is None:
        print("! Project not found")
        return 1
    if args.title is not None:
        form.title = args.title
    if args.description is not None:
        form.description = args.description
    form.submit()
    if _errored(form):
        _print(form.render())
        return 1
    _print(view.render())
    return 0


def _cmd_delete_project(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = ProjectListView(api, confirm)
    view.mount()
    if _errored(view):
        _print(view.render())
        return 1
    view.delete_project(args.project_id)
    _print(view.render())
    return 1 if _errored(view) else 0


def _cmd_tasks(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = TaskListView(api, args.project_id, confirm)
    view.mount()
    _print(view.render())
    return 1 if _errored(view) else 0


def _cmd_add_task(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    tasks = TaskListView(api, args.project_id, confirm)
    form = TaskForm(api, args.project_id, on_save=tasks.add_task)
    form.title = args.title
    form.submit()
    if _errored(form):
        _print(form.render())
        return 1
    tasks.mount()
    _print(tasks.render())
    return 1 if _errored(tasks) else 0


def _cmd_toggle_task(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = TaskListView(api, args.project_id, confirm)
    view.mount()
    if _errored(view):
        _print(view.render())
        return 1
    if not view.toggle_complete(args.task_id) and not _errored(view):
        print("! Task not found")
        return 1
    _print(view.render())
    return 1 if _errored(view) else 0


def _cmd_delete_task(api: TaskboardApi, args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    view = TaskListView(api, args.project_id, confirm)
    view.mount()
    if _errored(view):
        _print(view.render())
        return 1
    view.delete_task(args.task_id)
    _print(view.render())
    return 1 if _errored(view) else 0


_COMMANDS: Dict[str, Callable[[TaskboardApi, argparse.Namespace, Callable[[str], bool]], int]] = {
    "projects": _cmd_projects,
    "show": _cmd_show,
    "add-project": _cmd_add_project,
    "edit-project": _cmd_edit_project,
    "delete-project": _cmd_delete_project,
    "tasks": _cmd_tasks,
    "add-task": _cmd_add_task,
    "toggle-task": _cmd_toggle_task,
    "delete-task": _cmd_delete_task,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard", description="Manage taskboard projects and tasks.")
    parser.add_argument("--api-url", default=TASKBOARD_API_URL, help=f"API base URL (default: {TASKBOARD_API_URL}).")
    parser.add_argument("--timeout", type=float, default=TASKBOARD_API_TIMEOUT)
    parser.add_argument("--yes", "-y", action="store_true", help="Do not ask before deleting.")
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("projects", help="List projects.")

    p = sub.add_parser("show", help="Show a project and its tasks.")
    p.add_argument("project_id")

    p = sub.add_parser("add-project", help="Create a project.")
    p.add_argument("--title", required=True)
    p.add_argument("--description", required=True)

    p = sub.add_parser("edit-project", help="Update a project's title and/or description.")
    p.add_argument("project_id")
    p.add_argument("--title")
    p.add_argument("--description")

    p = sub.add_parser("delete-project", help="Delete a project.")
    p.add_argument("project_id")

    p = sub.add_parser("tasks", help="List tasks of a project.")
    p.add_argument("project_id")

    p = sub.add_parser("add-task", help="Create a task in a project.")
    p.add_argument("project_id")
    p.add_argument("--title", required=True)

    p = sub.add_parser("toggle-task", help="Flip a task's completed flag.")
    p.add_argument("project_id")
    p.add_argument("task_id")

    p = sub.add_parser("delete-task", help="Delete a task.")
    p.add_argument("project_id")
    p.add_argument("task_id")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("taskboard").setLevel(level)
    api = TaskboardApi(args.api_url, timeout=args.timeout)
    confirm = (lambda _message: True) if args.yes else _prompt_confirm
    return _COMMANDS[args.command](api, args, confirm)


if __name__ == "__main__":
    raise SystemExit(main())
