import dataclasses
import re
import sqlite3
import uuid
from datetime import date, datetime, timedelta

from fncli import UsageError, cli

from . import config, db
from .core.errors import ConflictError, NotFoundError, StateError, ValidationError
from .core.models import Project, ProjectStatus
from .lib import clock
from .lib.converters import PROJECT_COLS, row_to_project
from .lib.dates import parse_day
from .lib.errors import echo
from .lib.format import format_outcome, format_project, format_status
from .lib.fuzzy import find_in_pool
from .pacing import classify, classify_outcome

__all__ = [
    "add_project",
    "clamp_progress",
    "complete",
    "delete_project",
    "find_project",
    "get_completed_projects",
    "get_project",
    "get_projects",
    "reopen",
    "resolve_project",
    "set_project_status",
    "update_project",
    "with_progress",
]


# ── domain ───────────────────────────────────────────────────────────────────


def clamp_progress(value: int) -> int:
    return max(0, min(100, value))


def with_progress(project: Project, value: int, now: datetime) -> Project:
    return dataclasses.replace(project, progress=clamp_progress(value), updated=now)


def complete(project: Project, today: date, now: datetime) -> Project:
    return dataclasses.replace(
        project,
        status=ProjectStatus.COMPLETED,
        completed_date=today,
        progress=100,
        updated=now,
    )


def reopen(project: Project, now: datetime) -> Project:
    """Revert to Active. The only transition that clears completed_date."""
    return dataclasses.replace(
        project, status=ProjectStatus.ACTIVE, completed_date=None, updated=now
    )


def _with_status(project: Project, status: ProjectStatus, today: date, now: datetime) -> Project:
    if status is ProjectStatus.COMPLETED:
        return complete(project, today, now)
    if status is ProjectStatus.ACTIVE:
        return reopen(project, now)
    return dataclasses.replace(project, status=status, updated=now)


# ── persistence ──────────────────────────────────────────────────────────────


def _fetch_projects(
    conn: sqlite3.Connection, where: str, params: tuple[object, ...] = ()
) -> list[Project]:
    cursor = conn.execute(
        f"SELECT {PROJECT_COLS} FROM projects WHERE {where}",  # noqa: S608
        params,
    )
    return [row_to_project(row) for row in cursor.fetchall()]


def _save(project: Project) -> Project:
    with db.get_db() as conn:
        conn.execute(
            """
            UPDATE projects
            SET name = ?, progress = ?, start_date = ?, deadline = ?,
                completed_date = ?, status = ?, updated = ?
            WHERE id = ?""",
            (
                project.name,
                clamp_progress(project.progress),
                project.start_date.isoformat(),
                project.deadline.isoformat(),
                project.completed_date.isoformat() if project.completed_date else None,
                project.status.value,
                project.updated.isoformat(),
                project.id,
            ),
        )
    return project


def add_project(name: str, start_date: date | None = None, deadline: date | None = None) -> str:
    start = start_date or clock.today()
    due = deadline or start + timedelta(days=config.get_default_project_days())
    project_id = str(uuid.uuid4())
    stamp = clock.now().isoformat()
    with db.get_db() as conn:
        taken = conn.execute(
            "SELECT 1 FROM projects WHERE status = 'active' AND lower(name) = lower(?)", (name,)
        ).fetchone()
        if taken:
            raise ConflictError(f"project '{name}' already exists")
        try:
            conn.execute(
                """
                INSERT INTO projects (id, name, start_date, deadline, created, updated)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (project_id, name, start.isoformat(), due.isoformat(), stamp, stamp),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Failed to add project: {e}") from e
    return project_id


def get_project(project_id: str) -> Project | None:
    with db.get_db() as conn:
        found = _fetch_projects(conn, "id = ?", (project_id,))
    return found[0] if found else None


def get_projects(status: ProjectStatus = ProjectStatus.ACTIVE) -> list[Project]:
    with db.get_db() as conn:
        return _fetch_projects(conn, "status = ? ORDER BY deadline, created", (status.value,))


def get_completed_projects() -> list[Project]:
    with db.get_db() as conn:
        return _fetch_projects(
            conn, "status = 'completed' ORDER BY completed_date DESC, updated DESC"
        )


def update_project(
    project_id: str,
    name: str | None = None,
    progress: int | None = None,
    deadline: date | None = None,
) -> Project | None:
    project = get_project(project_id)
    if not project:
        return None
    now = clock.now()
    if progress is not None:
        project = with_progress(project, progress, now)
    if name is not None:
        project = dataclasses.replace(project, name=name, updated=now)
    if deadline is not None:
        project = dataclasses.replace(project, deadline=deadline, updated=now)
    return _save(project)


def set_project_status(project_id: str, status: ProjectStatus) -> Project | None:
    project = get_project(project_id)
    if not project:
        return None
    return _save(_with_status(project, status, clock.today(), clock.now()))


def delete_project(project_id: str) -> None:
    with db.get_db() as conn:
        conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))


def find_project(ref: str, status: ProjectStatus | None = ProjectStatus.ACTIVE) -> Project | None:
    if status is None:
        with db.get_db() as conn:
            pool = _fetch_projects(conn, "1 = 1 ORDER BY created")
    else:
        pool = get_projects(status)
    return find_in_pool(ref, pool)


def resolve_project(ref: str, status: ProjectStatus | None = ProjectStatus.ACTIVE) -> Project:
    project = find_project(ref, status)
    if not project:
        raise NotFoundError("project", ref)
    return project


# ── cli ──────────────────────────────────────────────────────────────────────

_PROGRESS_RE = re.compile(r"^([+-]?)(\d+)%?$")


def _parse_progress(value: str, current: int) -> int:
    """'40' sets, '+10' / '-5' adjust relative to current progress."""
    match = _PROGRESS_RE.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid progress '{value}' — use N, +N or -N")
    sign, amount = match.group(1), int(match.group(2))
    if sign == "+":
        return current + amount
    if sign == "-":
        return current - amount
    return amount


@cli("growth project", name="add", flags={"start": ["-s", "--start"], "deadline": ["-d", "--deadline"]})
def add(name: list[str], start: str | None = None, deadline: str | None = None):
    """Add a time-boxed project"""
    content = " ".join(name).strip() if name else ""
    if not content:
        raise UsageError("Usage: growth project add <name>")
    start_date = parse_day(start) if start else None
    due = parse_day(deadline) if deadline else None
    if start_date and due and due < start_date:
        raise ValidationError("deadline is before start")
    project_id = add_project(content, start_date, due)
    project = get_project(project_id)
    if project:
        echo(format_status("□", f"{content}  due {project.deadline.isoformat()}", project_id))


@cli("growth project", name="progress", flags={"value": []}, passthrough=True)
def progress(ref: str, value: str | None = None, _rest: list[str] | None = None):
    """Set progress (N) or adjust it (+N / -N)"""
    # fncli treats "-5" as an unknown flag, so a decrement arrives in _rest
    extra = list(_rest or [])
    if value is None and extra:
        value = extra.pop(0)
    if value is None:
        raise UsageError("Usage: growth project progress <project> <N|+N|-N>")
    if extra:
        raise UsageError(f"unexpected argument: {extra[0]}")
    project = resolve_project(ref)
    updated = update_project(project.id, progress=_parse_progress(value, project.progress))
    if updated:
        echo(format_project(updated, classify(updated, clock.now())))


@cli("growth project", name="rename")
def rename(ref: str, name: list[str]):
    """Rename a project"""
    project = resolve_project(ref, status=None)
    content = " ".join(name).strip() if name else ""
    if not content:
        raise UsageError("Usage: growth project rename <project> <name>")
    update_project(project.id, name=content)
    echo(f"→ {content}")


@cli("growth project", name="deadline")
def deadline(ref: str, when: str):
    """Move a project's deadline"""
    project = resolve_project(ref)
    due = parse_day(when)
    update_project(project.id, deadline=due)
    echo(format_status("⏱", f"{project.name}  due {due.isoformat()}", project.id))


@cli("growth project", name="done")
def done(ref: str):
    """Mark a project completed"""
    project = resolve_project(ref)
    completed = set_project_status(project.id, ProjectStatus.COMPLETED)
    if completed:
        outcome = classify_outcome(completed)
        label = outcome.value if outcome else "done"
        echo(format_status("✓", f"{completed.name}  {label}", completed.id))


@cli("growth project", name="reopen")
def reopen_cmd(ref: str):
    """Revert a completed or archived project to active"""
    project = resolve_project(ref, status=None)
    if project.status is ProjectStatus.ACTIVE:
        raise StateError(f"project '{project.name}' is already active")
    set_project_status(project.id, ProjectStatus.ACTIVE)
    echo(format_status("↺", f"{project.name}  active", project.id))


@cli("growth project", name="archive")
def archive(ref: str):
    """Hide a project without deleting it"""
    project = resolve_project(ref, status=None)
    set_project_status(project.id, ProjectStatus.ARCHIVED)
    echo(format_status("⌫", f"{project.name}  archived", project.id))


@cli("growth project", name="rm")
def rm(ref: str):
    """Delete a project"""
    project = resolve_project(ref, status=None)
    delete_project(project.id)
    echo(format_status("✗", f"{project.name}  deleted", project.id))


@cli("growth project", name="ls", default=True)
def ls():
    """List active projects with pacing"""
    projects = get_projects()
    if not projects:
        echo("no active projects")
        return
    now = clock.now()
    for p in projects:
        echo(format_project(p, classify(p, now)))


@cli("growth project", name="history")
def history():
    """Completed projects and how they finished"""
    projects = get_completed_projects()
    if not projects:
        echo("no completed projects")
        return
    for p in projects:
        outcome = classify_outcome(p)
        if outcome:
            echo(format_outcome(p, outcome))
