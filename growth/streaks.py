"""Daily rollover and toggle rules for habit streaks.

Build habits earn a day by being checked. Avoid habits earn a day by being left
alone: checking an Avoid habit records a failure. Both functions are pure and
return a new Habit.
"""

import dataclasses
from datetime import date

from .core.models import Habit, HabitKind

__all__ = ["evaluate_rollover", "toggle"]


def evaluate_rollover(habit: Habit, today: date) -> Habit:
    if habit.last_evaluated >= today:
        return habit

    gap = (today - habit.last_evaluated).days

    if habit.kind is HabitKind.BUILD:
        kept = gap == 1 and habit.completed_today
        streak = habit.streak if kept else 0
    elif habit.completed_today:
        # failure on last_evaluated; only the clean days after it count
        streak = gap - 1
    else:
        streak = habit.streak + gap

    return dataclasses.replace(
        habit,
        streak=streak,
        completed_today=False,
        last_evaluated=today,
        streak_before_mark=None,
    )


def toggle(habit: Habit, today: date) -> Habit:
    history = set(habit.history)

    if not habit.completed_today:
        history.add(today)
        if habit.kind is HabitKind.BUILD:
            return dataclasses.replace(
                habit,
                completed_today=True,
                streak=habit.streak + 1,
                history=tuple(sorted(history)),
            )
        return dataclasses.replace(
            habit,
            completed_today=True,
            streak=0,
            streak_before_mark=habit.streak,
            history=tuple(sorted(history)),
        )

    history.discard(today)
    if habit.kind is HabitKind.BUILD:
        streak = max(0, habit.streak - 1)
    else:
        streak = habit.streak_before_mark if habit.streak_before_mark is not None else habit.streak
    return dataclasses.replace(
        habit,
        completed_today=False,
        streak=streak,
        streak_before_mark=None,
        history=tuple(sorted(history)),
    )
