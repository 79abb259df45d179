from datetime import date, datetime

import pytest

from growth import config, db
from growth.core.errors import ConflictError
from growth.core.models import HabitKind, HabitStatus
from growth.habits import (
    add_habit,
    archive_habit,
    get_archived_habits,
    get_habit,
    get_habits,
    restore_habit,
    set_habit_status,
    toggle_habit,
)
from growth.lib import clock
from tests.conftest import FnCLIRunner, set_today

MON = date(2025, 3, 3)
TUE = date(2025, 3, 4)
FRI = date(2025, 3, 7)


def test_add_and_list(tmp_growth_dir):
    add_habit("read")
    add_habit("doomscroll", HabitKind.AVOID)

    habits = get_habits()

    assert [h.name for h in habits] == ["read", "doomscroll"]
    assert habits[1].kind is HabitKind.AVOID


def test_toggle_persists_streak_and_history(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    habit_id = add_habit("read")

    toggled = toggle_habit(habit_id)

    assert toggled is not None
    stored = get_habit(habit_id)
    assert stored.completed_today is True
    assert stored.streak == 1
    assert stored.history == (MON,)

    toggle_habit(habit_id)
    stored = get_habit(habit_id)
    assert stored.completed_today is False
    assert stored.streak == 0
    assert stored.history == ()


def test_rollover_runs_lazily_on_read(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    habit_id = add_habit("read")
    toggle_habit(habit_id)

    set_today(monkeypatch, TUE)
    habit = get_habits()[0]

    assert habit.streak == 1
    assert habit.completed_today is False
    assert habit.last_evaluated == TUE
    assert habit.history == (MON,)
    with db.get_db() as conn:
        row = conn.execute(
            "SELECT last_evaluated, completed_today FROM habits WHERE id = ?", (habit_id,)
        ).fetchone()
    assert row == ("2025-03-04", 0)
    assert habit_id[:8] in config.LOG_PATH.read_text()


def test_missed_days_reset_build_and_credit_avoid(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    build_id = add_habit("read")
    avoid_id = add_habit("doomscroll", HabitKind.AVOID)
    toggle_habit(build_id)

    set_today(monkeypatch, FRI)
    by_id = {h.id: h for h in get_habits()}

    assert by_id[build_id].streak == 0
    assert by_id[avoid_id].streak == 4


def test_avoid_mark_and_undo_restores_streak(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    avoid_id = add_habit("doomscroll", HabitKind.AVOID)
    set_today(monkeypatch, FRI)
    assert get_habit(avoid_id).streak == 4

    marked = toggle_habit(avoid_id)
    assert marked.streak == 0
    assert get_habit(avoid_id).streak_before_mark == 4

    undone = toggle_habit(avoid_id)
    assert undone.streak == 4
    assert get_habit(avoid_id).streak_before_mark is None


def test_archive_hides_and_restore_brings_back(tmp_growth_dir):
    habit_id = add_habit("read")

    archived = archive_habit(habit_id)

    assert archived.status is HabitStatus.ARCHIVED
    assert get_habits() == []
    assert [h.id for h in get_archived_habits()] == [habit_id]

    restored = restore_habit(habit_id)
    assert restored.status is HabitStatus.ACTIVE
    assert [h.id for h in get_habits()] == [habit_id]


def test_delete_purges_history(tmp_growth_dir):
    habit_id = add_habit("read")
    toggle_habit(habit_id)

    assert set_habit_status(habit_id, HabitStatus.DELETED) is None

    assert get_habit(habit_id) is None
    with db.get_db() as conn:
        assert conn.execute("SELECT COUNT(*) FROM habit_history").fetchone()[0] == 0


def test_cli_add_check_ls(tmp_growth_dir):
    runner = FnCLIRunner()

    result = runner.invoke(["habit", "add", "read", "ten", "pages"])
    assert result.exit_code == 0
    assert "read ten pages" in result.stdout

    result = runner.invoke(["habit", "check", "read ten"])
    assert result.exit_code == 0
    assert "1d streak" in result.stdout

    result = runner.invoke(["habit", "ls"])
    assert result.exit_code == 0
    assert "BUILD:" in result.stdout
    assert "✓ read ten pages" in result.stdout


def test_cli_add_avoid(tmp_growth_dir):
    runner = FnCLIRunner()

    result = runner.invoke(["habit", "add", "doomscroll", "--avoid"])

    assert result.exit_code == 0
    assert get_habits(HabitKind.AVOID)[0].name == "doomscroll"


def test_cli_unknown_habit_fails(tmp_growth_dir):
    runner = FnCLIRunner()

    result = runner.invoke(["habit", "check", "nothing"])

    assert result.exit_code != 0
    assert "No habit found" in result.stderr


def test_cli_archive_and_rm(tmp_growth_dir):
    runner = FnCLIRunner()
    runner.invoke(["habit", "add", "stretch"])

    assert runner.invoke(["habit", "archive", "stretch"]).exit_code == 0
    listed = runner.invoke(["habit", "ls", "--archived"])
    assert "stretch" in listed.stdout

    assert runner.invoke(["habit", "rm", "stretch"]).exit_code == 0
    assert get_archived_habits() == []


def test_restored_avoid_habit_earns_nothing_while_archived(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, date(2024, 1, 1))
    habit_id = add_habit("doomscroll", HabitKind.AVOID)
    set_today(monkeypatch, date(2024, 1, 4))
    assert get_habit(habit_id).streak == 3
    archive_habit(habit_id)

    set_today(monkeypatch, date(2024, 3, 1))
    restored = restore_habit(habit_id)

    assert restored.streak == 3
    assert restored.last_evaluated == date(2024, 3, 1)
    assert get_habits()[0].streak == 3


def test_restored_build_habit_keeps_streak(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    habit_id = add_habit("read")
    toggle_habit(habit_id)
    archive_habit(habit_id)

    set_today(monkeypatch, FRI)
    restored = restore_habit(habit_id)

    assert restored.streak == 1
    assert restored.completed_today is False
    assert restored.history == (MON,)


def test_duplicate_active_habit_name_conflicts(tmp_growth_dir):
    add_habit("read")

    with pytest.raises(ConflictError):
        add_habit("Read")

    result = FnCLIRunner().invoke(["habit", "add", "read"])
    assert result.exit_code != 0
    assert "already exists" in result.stderr


def test_toggle_uses_one_day_across_midnight(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)
    habit_id = add_habit("read")
    ticks = iter([datetime(2025, 3, 3, 23, 59, 59)])
    monkeypatch.setattr(clock, "now", lambda: next(ticks, datetime(2025, 3, 4, 0, 0, 1)))

    toggled = toggle_habit(habit_id)

    assert toggled.last_evaluated == MON
    assert toggled.history == (MON,)


def test_created_uses_local_clock(tmp_growth_dir, monkeypatch):
    set_today(monkeypatch, MON)

    habit = get_habit(add_habit("read"))

    assert habit.created == datetime(2025, 3, 3, 12, 0)
