from dataclasses import dataclass
from urllib.parse import quote

from fncli import UsageError, cli

from . import config
from .core.models import HabitKind, ProjectStatus
from .habits import get_habits
from .lib import ansi
from .lib.errors import echo
from .projects import get_projects
from .reflections import get_reflections

__all__ = ["Stats", "avatar_url", "get_stats", "initials"]

AVATAR_API = "https://ui-avatars.com/api/?name={name}&background=random"


@dataclass(frozen=True)
class Stats:
    build_habits: int
    avoid_habits: int
    active_projects: int
    best_streak: int
    reflections: int


def initials(name: str) -> str:
    """'John Doe' -> 'JD'. At most two letters."""
    return "".join(part[0] for part in name.split() if part)[:2].upper()


def avatar_url(name: str) -> str:
    return AVATAR_API.format(name=quote(name))


def get_stats() -> Stats:
    habits = get_habits()
    return Stats(
        build_habits=sum(1 for h in habits if h.kind is HabitKind.BUILD),
        avoid_habits=sum(1 for h in habits if h.kind is HabitKind.AVOID),
        active_projects=len(get_projects(ProjectStatus.ACTIVE)),
        best_streak=max((h.streak for h in habits), default=0),
        reflections=len(get_reflections()),
    )


@cli("growth profile", name="show", default=True)
def show():
    """Profile and statistics"""
    name = config.get_name()
    if name:
        echo(f"{ansi.bold(initials(name))}  {name}")
        echo(ansi.muted(avatar_url(name)))
    else:
        echo(ansi.muted("no name set — growth profile name <name>"))
    stats = get_stats()
    echo(f"  build habits     {stats.build_habits}")
    echo(f"  avoid habits     {stats.avoid_habits}")
    echo(f"  active projects  {stats.active_projects}")
    echo(f"  best streak      {stats.best_streak}d")
    echo(f"  reflections      {stats.reflections}")


@cli("growth profile", name="name")
def name(value: list[str]):
    """Set your display name"""
    text = " ".join(value).strip() if value else ""
    if not text:
        raise UsageError("Usage: growth profile name <name>")
    config.set_name(text)
    echo(f"→ {text}  ({initials(text)})")
