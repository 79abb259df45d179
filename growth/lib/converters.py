from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum
from typing import TypeVar, cast

from growth.core.errors import ValidationError
from growth.core.models import (
    Habit,
    HabitKind,
    HabitStatus,
    Project,
    ProjectStatus,
    Reflection,
)

E = TypeVar("E", bound=Enum)

HabitRow = tuple[object, ...]
ProjectRow = tuple[object, ...]
ReflectionRow = tuple[object, ...]

HABIT_COLS = "id, name, kind, completed_today, streak, last_evaluated, status, created, streak_before_mark"
PROJECT_COLS = "id, name, progress, start_date, deadline, completed_date, status, created, updated"
REFLECTION_COLS = "id, content, date, verse_reference, created"


def _parse_date(val) -> date | None:
    """Date part of an ISO date, datetime or sqlite timestamp string."""
    if isinstance(val, str) and val:
        return date.fromisoformat(val.split("T")[0].split(" ")[0])
    return None


def _require_date(val, field: str) -> date:
    parsed = _parse_date(val)
    if parsed is None:
        raise ValidationError(f"missing {field}")
    return parsed


def _parse_datetime(val) -> datetime:
    """Parse an ISO datetime. A bare date reads as midnight."""
    if isinstance(val, str) and val:
        return datetime.fromisoformat(val)
    return datetime.min


def _parse_enum(enum_cls: type[E], val: object, field: str) -> E:
    try:
        return enum_cls(val)
    except ValueError:
        raise ValidationError(f"invalid {field}: {val!r}") from None


def _parse_streak(val: object) -> int:
    streak = int(cast(int, val or 0))
    if streak < 0:
        raise ValidationError(f"negative streak: {streak}")
    return streak


def row_to_habit(row: HabitRow, history: Iterable[str] = ()) -> Habit:
    """
    Converts a raw row from the habits table into a Habit.
    Expected row format matches HABIT_COLS; history holds ISO check dates.
    """
    status = _parse_enum(HabitStatus, row[6], "habit status")
    if status is HabitStatus.DELETED:
        raise ValidationError("deleted habits are not stored")
    snapshot = row[8] if len(row) > 8 else None
    return Habit(
        id=cast(str, row[0]),
        name=cast(str, row[1]),
        kind=_parse_enum(HabitKind, row[2], "habit kind"),
        completed_today=bool(row[3]),
        streak=_parse_streak(row[4]),
        last_evaluated=_require_date(row[5], "last_evaluated"),
        status=status,
        created=_parse_datetime(row[7]),
        streak_before_mark=int(cast(int, snapshot)) if snapshot is not None else None,
        history=tuple(sorted({d for d in (_parse_date(h) for h in history) if d})),
    )


def row_to_project(row: ProjectRow) -> Project:
    """
    Converts a raw row from the projects table into a Project.
    Expected row format matches PROJECT_COLS.
    """
    progress = int(cast(int, row[2] or 0))
    return Project(
        id=cast(str, row[0]),
        name=cast(str, row[1]),
        progress=max(0, min(100, progress)),
        start_date=_require_date(row[3], "start_date"),
        deadline=_require_date(row[4], "deadline"),
        completed_date=_parse_date(row[5]),
        status=_parse_enum(ProjectStatus, row[6], "project status"),
        created=_parse_datetime(row[7]),
        updated=_parse_datetime(row[8]),
    )


def row_to_reflection(row: ReflectionRow) -> Reflection:
    return Reflection(
        id=cast(int, row[0]),
        content=cast(str, row[1]),
        date=_require_date(row[2], "reflection date"),
        verse_reference=cast(str, row[3]) if row[3] else None,
        created=_parse_datetime(row[4]),
    )
