from datetime import date, datetime

import pytest

from growth.core.models import Habit, HabitKind, Pace, PaceStatus, Project
from growth.lib import ansi
from growth.lib.format import format_days_left, format_habit, format_project, progress_bar


@pytest.fixture(autouse=True)
def plain(monkeypatch):
    monkeypatch.setattr(ansi, "_active", ansi.PLAIN)


def test_progress_bar():
    assert progress_bar(0) == "░" * 10
    assert progress_bar(50) == "█" * 5 + "░" * 5
    assert progress_bar(100) == "█" * 10


@pytest.mark.parametrize(("days", "text"), [(-5, "5d late"), (0, "due today"), (3, "3d left")])
def test_format_days_left(days, text):
    assert format_days_left(days) == text


def test_format_build_habit():
    h = Habit(
        id="abcdef1234",
        name="Read",
        kind=HabitKind.BUILD,
        last_evaluated=date(2025, 1, 1),
        created=datetime(2025, 1, 1),
        completed_today=True,
        streak=4,
    )
    assert format_habit(h) == "✓ read 4d streak [abcdef12]"


def test_format_avoid_habit():
    h = Habit(
        id="abcdef1234",
        name="Doomscroll",
        kind=HabitKind.AVOID,
        last_evaluated=date(2025, 1, 1),
        created=datetime(2025, 1, 1),
        streak=9,
    )
    assert format_habit(h, show_id=False) == "□ doomscroll 9d clean"


def test_format_project_with_pace():
    p = Project(
        id="0123456789",
        name="Novel",
        start_date=date(2025, 1, 1),
        deadline=date(2025, 1, 31),
        created=datetime(2025, 1, 1),
        updated=datetime(2025, 1, 1),
        progress=50,
    )
    line = format_project(p, Pace(PaceStatus.BEHIND, 80.0, -30.0, 6))
    assert line == "novel █████░░░░░ 50% behind 6d left [01234567]"
