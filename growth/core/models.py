import dataclasses
from datetime import date, datetime
from enum import Enum


class HabitKind(Enum):
    BUILD = "build"
    AVOID = "avoid"


class HabitStatus(Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class ProjectStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PaceStatus(Enum):
    AHEAD = "ahead"
    ON_TRACK = "on_track"
    BEHIND = "behind"
    OVERDUE = "overdue"


class Outcome(Enum):
    SUCCESS = "success"
    LATE = "late"
    ABANDONED = "abandoned"


@dataclasses.dataclass(frozen=True)
class Habit:
    id: str
    name: str
    kind: HabitKind
    last_evaluated: date
    created: datetime
    completed_today: bool = False
    streak: int = 0
    status: HabitStatus = HabitStatus.ACTIVE
    streak_before_mark: int | None = None
    history: tuple[date, ...] = dataclasses.field(default=(), hash=False)


@dataclasses.dataclass(frozen=True)
class Project:
    id: str
    name: str
    start_date: date
    deadline: date
    created: datetime
    updated: datetime
    progress: int = 0
    status: ProjectStatus = ProjectStatus.ACTIVE
    completed_date: date | None = None


@dataclasses.dataclass(frozen=True)
class Reflection:
    id: int
    content: str
    date: date
    created: datetime
    verse_reference: str | None = None


@dataclasses.dataclass(frozen=True)
class Pace:
    status: PaceStatus
    time_elapsed_pct: float
    gap: float
    days_left: int
