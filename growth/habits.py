import dataclasses
import sqlite3
import time
import uuid
from collections.abc import Iterable
from datetime import date

from fncli import UsageError, cli

from . import config, db
from .core.errors import ConflictError, NotFoundError, StateError
from .core.models import Habit, HabitKind, HabitStatus
from .lib import clock
from .lib.converters import HABIT_COLS, row_to_habit
from .lib.errors import echo
from .lib.format import format_habit, format_status
from .lib.fuzzy import find_in_pool
from .streaks import evaluate_rollover, toggle

__all__ = [
    "add_habit",
    "archive_habit",
    "delete_habit",
    "find_habit",
    "get_archived_habits",
    "get_habit",
    "get_habits",
    "rename_habit",
    "resolve_habit",
    "restore_habit",
    "save_habit",
    "set_habit_status",
    "toggle_habit",
]


# ── domain ───────────────────────────────────────────────────────────────────


def _log(msg: str) -> None:
    config.LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    with config.LOG_PATH.open("a") as f:
        f.write(f"{timestamp} {msg}\n")


def _get_history(conn: sqlite3.Connection, habit_id: str) -> list[str]:
    cursor = conn.execute(
        "SELECT check_date FROM habit_history WHERE habit_id = ? ORDER BY check_date",
        (habit_id,),
    )
    return [row[0] for row in cursor.fetchall()]


def _fetch_habits(
    conn: sqlite3.Connection, where: str, params: tuple[object, ...] = ()
) -> list[Habit]:
    """Fetch habits matching a WHERE clause and hydrate their history."""
    cursor = conn.execute(
        f"SELECT {HABIT_COLS} FROM habits WHERE {where}",  # noqa: S608
        params,
    )
    return [row_to_habit(row, _get_history(conn, row[0])) for row in cursor.fetchall()]


def _write(conn: sqlite3.Connection, habit: Habit) -> None:
    conn.execute(
        """
        UPDATE habits
        SET name = ?, completed_today = ?, streak = ?, last_evaluated = ?,
            status = ?, streak_before_mark = ?
        WHERE id = ?""",
        (
            habit.name,
            int(habit.completed_today),
            habit.streak,
            habit.last_evaluated.isoformat(),
            habit.status.value,
            habit.streak_before_mark,
            habit.id,
        ),
    )
    stored = set(_get_history(conn, habit.id))
    wanted = {d.isoformat() for d in habit.history}
    for day in stored - wanted:
        conn.execute(
            "DELETE FROM habit_history WHERE habit_id = ? AND check_date = ?", (habit.id, day)
        )
    for day in sorted(wanted - stored):
        conn.execute(
            "INSERT INTO habit_history (habit_id, check_date) VALUES (?, ?)", (habit.id, day)
        )


def _roll(conn: sqlite3.Connection, habits: Iterable[Habit], today: date) -> list[Habit]:
    """Run the daily rollover on active habits, persisting only the ones that changed."""
    result = []
    for habit in habits:
        if habit.status is not HabitStatus.ACTIVE:
            result.append(habit)
            continue
        rolled = evaluate_rollover(habit, today)
        if rolled != habit:
            _write(conn, rolled)
            _log(f"[rollover] {habit.id[:8]} {habit.name}: streak {habit.streak} -> {rolled.streak}")
        result.append(rolled)
    return result


def save_habit(habit: Habit) -> Habit:
    with db.get_db() as conn:
        _write(conn, habit)
    return habit


def add_habit(name: str, kind: HabitKind = HabitKind.BUILD) -> str:
    habit_id = str(uuid.uuid4())
    now = clock.now()
    with db.get_db() as conn:
        taken = conn.execute(
            "SELECT 1 FROM habits WHERE status = 'active' AND lower(name) = lower(?)", (name,)
        ).fetchone()
        if taken:
            raise ConflictError(f"habit '{name}' already exists")
        try:
            conn.execute(
                "INSERT INTO habits (id, name, kind, last_evaluated, created) VALUES (?, ?, ?, ?, ?)",
                (habit_id, name, kind.value, now.date().isoformat(), now.isoformat()),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Failed to add habit: {e}") from e
    return habit_id


def get_habit(habit_id: str, today: date | None = None) -> Habit | None:
    with db.get_db() as conn:
        found = _fetch_habits(conn, "id = ?", (habit_id,))
        if not found:
            return None
        return _roll(conn, found, today or clock.today())[0]


def get_habits(kind: HabitKind | None = None) -> list[Habit]:
    """Active habits, oldest first, with today's rollover applied."""
    where = "status = 'active'"
    params: tuple[object, ...] = ()
    if kind is not None:
        where += " AND kind = ?"
        params = (kind.value,)
    with db.get_db() as conn:
        habits = _fetch_habits(conn, f"{where} ORDER BY created, rowid", params)
        return _roll(conn, habits, clock.today())


def get_archived_habits() -> list[Habit]:
    with db.get_db() as conn:
        return _fetch_habits(conn, "status = 'archived' ORDER BY created, rowid")


def toggle_habit(habit_id: str) -> Habit | None:
    today = clock.today()
    habit = get_habit(habit_id, today)
    if not habit:
        return None
    if habit.status is not HabitStatus.ACTIVE:
        raise StateError(f"habit '{habit.name}' is archived")
    return save_habit(toggle(habit, today))


def rename_habit(habit_id: str, name: str) -> Habit | None:
    habit = get_habit(habit_id)
    if not habit:
        return None
    return save_habit(dataclasses.replace(habit, name=name))


def delete_habit(habit_id: str) -> None:
    with db.get_db() as conn:
        conn.execute("DELETE FROM habits WHERE id = ?", (habit_id,))


def set_habit_status(habit_id: str, status: HabitStatus) -> Habit | None:
    """Archive, restore or purge a habit. Returns None once purged."""
    if status is HabitStatus.DELETED:
        delete_habit(habit_id)
        return None
    habit = get_habit(habit_id)
    if not habit:
        return None
    if status is HabitStatus.ACTIVE and habit.status is HabitStatus.ARCHIVED:
        habit = _thaw(habit, clock.today())
    return save_habit(dataclasses.replace(habit, status=status))


def _thaw(habit: Habit, today: date) -> Habit:
    """Resume an archived habit from today. Archived days earn no streak and break none."""
    if habit.last_evaluated >= today:
        return habit
    return dataclasses.replace(
        habit, last_evaluated=today, completed_today=False, streak_before_mark=None
    )


def archive_habit(habit_id: str) -> Habit | None:
    return set_habit_status(habit_id, HabitStatus.ARCHIVED)


def restore_habit(habit_id: str) -> Habit | None:
    return set_habit_status(habit_id, HabitStatus.ACTIVE)


def find_habit(ref: str, archived: bool = False) -> Habit | None:
    pool = get_archived_habits() if archived else get_habits()
    return find_in_pool(ref, pool)


def resolve_habit(ref: str, archived: bool = False) -> Habit:
    habit = find_habit(ref, archived=archived)
    if not habit:
        raise NotFoundError("habit", ref)
    return habit


# ── cli ──────────────────────────────────────────────────────────────────────


def _joined(words: list[str], usage: str) -> str:
    text = " ".join(words).strip() if words else ""
    if not text:
        raise UsageError(usage)
    return text


@cli("growth habit", name="add", flags={"avoid": ["-a", "--avoid"]})
def add(name: list[str], avoid: bool = False):
    """Add a habit to build (or to avoid with --avoid)"""
    content = _joined(name, "Usage: growth habit add <name>")
    kind = HabitKind.AVOID if avoid else HabitKind.BUILD
    habit_id = add_habit(content, kind)
    echo(format_status("□", f"{content} ({kind.value})", habit_id))


@cli("growth habit", name="check")
def check(ref: str):
    """Toggle today's mark on a habit"""
    habit = resolve_habit(ref)
    updated = toggle_habit(habit.id)
    if updated:
        echo(format_habit(updated))


@cli("growth habit", name="rename")
def rename(ref: str, name: list[str]):
    """Rename a habit"""
    habit = resolve_habit(ref)
    content = _joined(name, "Usage: growth habit rename <habit> <name>")
    rename_habit(habit.id, content)
    echo(f"→ {content}")


@cli("growth habit", name="archive")
def archive(ref: str):
    """Hide a habit from the active list"""
    habit = resolve_habit(ref)
    archive_habit(habit.id)
    echo(format_status("⌫", f"{habit.name}  archived", habit.id))


@cli("growth habit", name="restore")
def restore(ref: str):
    """Bring an archived habit back"""
    habit = resolve_habit(ref, archived=True)
    restore_habit(habit.id)
    echo(format_status("↺", f"{habit.name}  restored", habit.id))


@cli("growth habit", name="rm")
def rm(ref: str):
    """Delete a habit and its history"""
    habit = find_habit(ref) or resolve_habit(ref, archived=True)
    set_habit_status(habit.id, HabitStatus.DELETED)
    echo(format_status("✗", f"{habit.name}  deleted", habit.id))


@cli("growth habit", name="ls", default=True)
def ls(archived: bool = False):
    """List habits with streaks"""
    if archived:
        habits = get_archived_habits()
        if not habits:
            echo("no archived habits")
            return
        for h in habits:
            echo(format_habit(h))
        return

    build = get_habits(HabitKind.BUILD)
    avoid = get_habits(HabitKind.AVOID)
    if not build and not avoid:
        echo("no habits yet")
        return
    if build:
        echo("BUILD:")
        for h in build:
            echo(f"  {format_habit(h)}")
    if avoid:
        echo("AVOID:")
        for h in avoid:
            echo(f"  {format_habit(h)}")
