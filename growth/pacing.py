import math
from datetime import date, datetime, timedelta

from .core.models import Outcome, Pace, PaceStatus, Project, ProjectStatus

__all__ = ["PACE_TOLERANCE", "classify", "classify_outcome"]

PACE_TOLERANCE = 10

_DAY = timedelta(days=1)


def _midnight(day: date) -> datetime:
    if isinstance(day, datetime):
        return day
    return datetime.combine(day, datetime.min.time())


def _elapsed_pct(start: datetime, deadline: datetime, now: datetime) -> float:
    pct = (now - start) / (deadline - start) * 100
    return max(0.0, min(100.0, pct))


def classify(project: Project, now: datetime | date) -> Pace:
    """Compare elapsed share of the project window against its progress."""
    now_dt = _midnight(now)
    start = _midnight(project.start_date)
    deadline = _midnight(project.deadline)

    days_left = math.ceil((deadline - now_dt) / _DAY)
    degenerate = deadline <= start

    if days_left < 0:
        elapsed = 0.0 if degenerate else 100.0
        return Pace(PaceStatus.OVERDUE, elapsed, project.progress - elapsed, days_left)

    if degenerate:
        return Pace(PaceStatus.ON_TRACK, 0.0, 0.0, days_left)

    elapsed = _elapsed_pct(start, deadline, now_dt)
    gap = project.progress - elapsed
    if gap > PACE_TOLERANCE:
        status = PaceStatus.AHEAD
    elif gap < -PACE_TOLERANCE:
        status = PaceStatus.BEHIND
    else:
        status = PaceStatus.ON_TRACK
    return Pace(status, elapsed, gap, days_left)


def classify_outcome(project: Project) -> Outcome | None:
    """Outcome of a completed project. Non-completed projects have none."""
    if project.status is not ProjectStatus.COMPLETED:
        return None
    if project.completed_date is None:
        return Outcome.ABANDONED
    if project.completed_date <= project.deadline:
        return Outcome.SUCCESS
    return Outcome.LATE
