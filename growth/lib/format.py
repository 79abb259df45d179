from growth.core.models import Habit, HabitKind, Outcome, Pace, PaceStatus, Project

from . import ansi

__all__ = [
    "format_days_left",
    "format_habit",
    "format_outcome",
    "format_project",
    "format_status",
    "progress_bar",
]

_PACE_LABELS = {
    PaceStatus.AHEAD: ("ahead", "green"),
    PaceStatus.ON_TRACK: ("on track", "cyan"),
    PaceStatus.BEHIND: ("behind", "yellow"),
    PaceStatus.OVERDUE: ("overdue", "red"),
}

_OUTCOME_LABELS = {
    Outcome.SUCCESS: ("success", "green"),
    Outcome.LATE: ("late", "yellow"),
    Outcome.ABANDONED: ("abandoned", "gray"),
}


def _colored(label_color: tuple[str, str]) -> str:
    label, color = label_color
    return getattr(ansi, color)(label)


def progress_bar(progress: int, width: int = 10) -> str:
    filled = round(progress / 100 * width)
    return "█" * filled + "░" * (width - filled)


def format_days_left(days_left: int) -> str:
    if days_left < 0:
        return f"{-days_left}d late"
    if days_left == 0:
        return "due today"
    return f"{days_left}d left"


def format_habit(habit: Habit, show_id: bool = True) -> str:
    """Format a habit for display. Returns: [✓|✗|□] name streak [id]"""
    if habit.kind is HabitKind.BUILD:
        mark = ansi.green("✓") if habit.completed_today else "□"
        streak = f"{habit.streak}d streak"
    else:
        mark = ansi.red("✗") if habit.completed_today else "□"
        streak = f"{habit.streak}d clean"

    parts = [mark, habit.name.lower(), ansi.muted(streak)]
    if show_id:
        parts.append(ansi.muted(f"[{habit.id[:8]}]"))
    return " ".join(parts)


def format_project(project: Project, pace: Pace | None = None, show_id: bool = True) -> str:
    """Format a project for display. Returns: name bar pct [pace days] [id]"""
    parts = [project.name.lower(), progress_bar(project.progress), f"{project.progress}%"]
    if pace is not None:
        parts.append(_colored(_PACE_LABELS[pace.status]))
        parts.append(ansi.muted(format_days_left(pace.days_left)))
    if show_id:
        parts.append(ansi.muted(f"[{project.id[:8]}]"))
    return " ".join(parts)


def format_outcome(project: Project, outcome: Outcome) -> str:
    done = project.completed_date.isoformat() if project.completed_date else "?"
    return f"{project.name.lower()} {_colored(_OUTCOME_LABELS[outcome])} {ansi.muted(f'done {done} due {project.deadline.isoformat()}')}"


def format_status(symbol: str, content: str, item_id: str | None = None) -> str:
    """Format status message for action confirmations."""
    if item_id:
        return f"{symbol} {content} {ansi.muted(f'[{item_id[:8]}]')}"
    return f"{symbol} {content}"
