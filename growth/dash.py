from fncli import cli

from .core.models import HabitKind
from .habits import get_habits
from .lib import ansi, clock
from .lib.errors import echo
from .lib.format import format_habit, format_project
from .pacing import classify
from .projects import get_projects
from .reflections import get_reflections_on


def render_dashboard() -> str:
    today = clock.today()
    now = clock.now()
    habits = get_habits()
    projects = get_projects()

    lines = [ansi.bold(today.strftime("%A %d %B").upper())]

    build = [h for h in habits if h.kind is HabitKind.BUILD]
    avoid = [h for h in habits if h.kind is HabitKind.AVOID]
    if build:
        done = sum(1 for h in build if h.completed_today)
        lines.append("")
        lines.append(f"BUILD {done}/{len(build)}:")
        lines.extend(f"  {format_habit(h)}" for h in build)
    if avoid:
        lines.append("")
        lines.append("AVOID:")
        lines.extend(f"  {format_habit(h)}" for h in avoid)
    if projects:
        lines.append("")
        lines.append("PROJECTS:")
        lines.extend(f"  {format_project(p, classify(p, now))}" for p in projects)
    if not habits and not projects:
        lines.append("")
        lines.append(ansi.muted("nothing tracked yet — growth habit add <name>"))

    reflected = bool(get_reflections_on(today))
    lines.append("")
    lines.append(ansi.muted("reflected today ✓") if reflected else ansi.muted("no reflection today"))
    return "\n".join(lines)


@cli("growth")
def dashboard() -> None:
    """Today's habits and projects"""
    echo(render_dashboard())
