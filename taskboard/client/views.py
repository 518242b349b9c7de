"""views.py — UI-agnostic view models for projects and tasks.

Each view holds its data, a load ``state`` and an inline ``error``
message, and exposes ``render()`` returning text lines. Local data only
changes from a server response: a failed action leaves it as it was and
sets ``error``. A mutating action triggered again while the same action is
still running is ignored.

Deletions ask an injected ``confirm(message) -> bool`` callback first.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional

from taskboard.client.api import ApiRequestError, TaskboardApi

__all__ = [
    "ERRORED",
    "IDLE",
    "LOADED",
    "LOADING",
    "ProjectForm",
    "ProjectListView",
    "TaskForm",
    "TaskListView",
]

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
LOADED = "loaded"
ERRORED = "errored"

Confirm = Callable[[str], bool]
Document = Dict[str, Any]

CONFIRM_DELETE_PROJECT = "Are you sure you want to delete this project?"
CONFIRM_DELETE_TASK = "Are you sure you want to delete this task?"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class _View:
    """Load state, inline error and in-flight bookkeeping shared by all views."""

    def __init__(self, api: TaskboardApi) -> None:
        self.api = api
        self.state = IDLE
        self.error: Optional[str] = None
        self._in_flight: set = set()

    def _begin(self, key: Hashable) -> bool:
        if key in self._in_flight:
            logger.debug("%s: ignoring repeated %r", type(self).__name__, key)
            return False
        self._in_flight.add(key)
        return True

    def _end(self, key: Hashable) -> None:
        self._in_flight.discard(key)

    def _fail(self, message: str, exc: ApiRequestError) -> None:
        logger.warning("%s (%s)", message, exc.detail or exc.status or "no response")
        self.error = message

    def _error_lines(self) -> List[str]:
        return [f"! {self.error}"] if self.error else []


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskForm(_View):
    """Single-field form creating a task in ``project_id``."""

    def __init__(
        self,
        api: TaskboardApi,
        project_id: str,
        on_save: Optional[Callable[[Document], None]] = None,
    ) -> None:
        super().__init__(api)
        self.project_id = project_id
        self.on_save = on_save
        self.title = ""

    def submit(self) -> Optional[Document]:
        if not self._begin("submit"):
            return None
        try:
            if _is_blank(self.title):
                self.error = "Title is required"
                return None
            self.error = None
            try:
                task = self.api.create_task(self.project_id, {"title": self.title, "completed": False})
            except ApiRequestError as exc:
                self._fail("Failed to create task", exc)
                return None
            self.title = ""
            if self.on_save is not None:
                self.on_save(task)
            return task
        finally:
            self._end("submit")

    def render(self) -> List[str]:
        return self._error_lines() + [f"New task: {self.title}", "[Add Task]"]


class TaskListView(_View):
    """Tasks of one project."""

    def __init__(self, api: TaskboardApi, project_id: str, confirm: Confirm) -> None:
        super().__init__(api)
        self.project_id = project_id
        self.confirm = confirm
        self.tasks: List[Document] = []

    def mount(self) -> None:
        self.state = LOADING
        try:
            tasks = self.api.fetch_tasks(self.project_id)
        except ApiRequestError as exc:
            self._fail("Failed to fetch tasks", exc)
            self.state = ERRORED
            return
        self.tasks = list(tasks or [])
        self.error = None
        self.state = LOADED

    def set_project(self, project_id: str) -> None:
        if project_id == self.project_id and self.state == LOADED:
            return
        self.project_id = project_id
        self.tasks = []
        self.mount()

    def _find(self, task_id: str) -> Optional[Document]:
        for task in self.tasks:
            if task.get("id") == task_id:
                return task
        return None

    def add_task(self, task: Document) -> None:
        self.tasks.append(task)

    def toggle_complete(self, task_id: str) -> bool:
        task = self._find(task_id)
        if task is None:
            return False
        key = ("toggle", task_id)
        if not self._begin(key):
            return False
        try:
            payload = {"title": task.get("title"), "completed": not task.get("completed", False)}
            try:
                updated = self.api.update_task(task_id, payload)
            except ApiRequestError as exc:
                self._fail("Failed to update task", exc)
                return False
            self.error = None
            self.tasks = [updated if t.get("id") == task_id else t for t in self.tasks]
            return True
        finally:
            self._end(key)

    def delete_task(self, task_id: str) -> bool:
        key = ("delete", task_id)
        if not self._begin(key):
            return False
        try:
            if not self.confirm(CONFIRM_DELETE_TASK):
                return False
            try:
                self.api.delete_task(task_id)
            except ApiRequestError as exc:
                self._fail("Failed to delete task", exc)
                return False
            self.error = None
            self.tasks = [t for t in self.tasks if t.get("id") != task_id]
            return True
        finally:
            self._end(key)

    def render(self) -> List[str]:
        lines = self._error_lines()
        if self.state == LOADING:
            return lines + ["Loading tasks..."]
        if not self.tasks:
            return lines + ["No tasks."]
        for task in self.tasks:
            mark = "x" if task.get("completed") else " "
            lines.append(f"[{mark}] {task.get('title')}  ({task.get('id')})")
        return lines


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ProjectForm(_View):
    """Create a project, or update ``project`` when one is given."""

    def __init__(
        self,
        api: TaskboardApi,
        on_save: Optional[Callable[[Document], None]] = None,
        project: Optional[Document] = None,
    ) -> None:
        super().__init__(api)
        self.on_save = on_save
        self.project = project
        self.title = (project or {}).get("title") or ""
        self.description = (project or {}).get("description") or ""

    @property
    def is_edit(self) -> bool:
        return self.project is not None

    @property
    def submit_label(self) -> str:
        return "Update Project" if self.is_edit else "Add Project"

    def submit(self) -> Optional[Document]:
        if not self._begin("submit"):
            return None
        try:
            if _is_blank(self.title) or _is_blank(self.description):
                self.error = "Title and description are required"
                return None
            self.error = None
            payload = {"title": self.title, "description": self.description}
            try:
                if self.is_edit:
                    saved = self.api.update_project(self.project["id"], payload)
                else:
                    saved = self.api.create_project(payload)
            except ApiRequestError as exc:
                self._fail("Failed to save project", exc)
                return None
            if self.on_save is not None:
                self.on_save(saved)
            return saved
        finally:
            self._end("submit")

    def render(self) -> List[str]:
        return self._error_lines() + [
            f"Title: {self.title}",
            f"Description: {self.description}",
            f"[{self.submit_label}]",
        ]


class ProjectListView(_View):
    """All projects, the add/edit form and the selected project's tasks."""

    def __init__(self, api: TaskboardApi, confirm: Confirm) -> None:
        super().__init__(api)
        self.confirm = confirm
        self.projects: List[Document] = []
        self.show_form = False
        self.form: Optional[ProjectForm] = None
        self.selected_id: Optional[str] = None
        self.task_form: Optional[TaskForm] = None
        self.task_list: Optional[TaskListView] = None

    def mount(self) -> None:
        self.state = LOADING
        try:
            projects = self.api.fetch_projects()
        except ApiRequestError as exc:
            self._fail("Failed to fetch projects", exc)
            self.state = ERRORED
            return
        self.projects = list(projects or [])
        self.error = None
        self.state = LOADED

    def find(self, project_id: str) -> Optional[Document]:
        for project in self.projects:
            if project.get("id") == project_id:
                return project
        return None

    @property
    def selected(self) -> Optional[Document]:
        return self.find(self.selected_id) if self.selected_id else None

    def _close_form(self) -> None:
        self.show_form = False
        self.form = None

    def toggle_form(self) -> Optional[ProjectForm]:
        self.show_form = not self.show_form
        self.form = ProjectForm(self.api, on_save=self._on_project_added) if self.show_form else None
        return self.form

    def _on_project_added(self, _project: Document) -> None:
        # The list is refetched rather than patched with the new project.
        try:
            projects = self.api.fetch_projects()
        except ApiRequestError as exc:
            self._fail("Failed to add project", exc)
            return
        self.projects = list(projects or [])
        self.error = None
        self._close_form()

    def edit_project(self, project_id: str) -> Optional[ProjectForm]:
        project = self.find(project_id)
        if project is None:
            return None
        self.show_form = True
        self.form = ProjectForm(self.api, on_save=self._on_project_updated, project=project)
        return self.form

    def _on_project_updated(self, project: Document) -> None:
        self.projects = [project if p.get("id") == project.get("id") else p for p in self.projects]
        self._close_form()

    def select_project(self, project_id: str) -> None:
        self.selected_id = project_id
        if self.task_list is None:
            self.task_list = TaskListView(self.api, project_id, self.confirm)
            self.task_list.mount()
        else:
            self.task_list.set_project(project_id)
        self.task_form = TaskForm(self.api, project_id, on_save=self.task_list.add_task)

    def _clear_selection(self) -> None:
        self.selected_id = None
        self.task_list = None
        self.task_form = None

    def delete_project(self, project_id: str) -> bool:
        key = ("delete", project_id)
        if not self._begin(key):
            return False
        try:
            if not self.confirm(CONFIRM_DELETE_PROJECT):
                return False
            try:
                self.api.delete_project(project_id)
            except ApiRequestError as exc:
                self._fail("Failed to delete project", exc)
                return False
            self.error = None
            self.projects = [p for p in self.projects if p.get("id") != project_id]
            if self.selected_id == project_id:
                self._clear_selection()
            return True
        finally:
            self._end(key)

    def render(self) -> List[str]:
        lines = self._error_lines()
        if self.state == LOADING:
            return lines + ["Loading projects..."]
        lines.append("Projects")
        if not self.projects:
            lines.append("  (none)")
        for project in self.projects:
            marker = "*" if project.get("id") == self.selected_id else "-"
            lines.append(f"{marker} {project.get('title')}: {project.get('description')}  ({project.get('id')})")
        if self.form is not None:
            lines.extend("  " + line for line in self.form.render())
        if self.task_list is not None:
            selected = self.selected
            lines.append(f"Tasks for {selected.get('title') if selected else self.selected_id}")
            if self.task_form is not None:
                lines.extend("  " + line for line in self.task_form.render())
            lines.extend("  " + line for line in self.task_list.render())
        return lines
