from datetime import date, datetime

import pytest

from growth.core.errors import AmbiguousError
from growth.core.models import Habit, HabitKind
from growth.lib.fuzzy import find_in_pool


def _habit(habit_id: str, name: str) -> Habit:
    return Habit(
        id=habit_id,
        name=name,
        kind=HabitKind.BUILD,
        last_evaluated=date(2025, 1, 1),
        created=datetime(2025, 1, 1),
    )


POOL = [
    _habit("11111111-aaaa", "Read 10 pages"),
    _habit("22222222-bbbb", "Morning walk"),
    _habit("23333333-cccc", "Evening walk"),
]


def test_match_by_id_prefix():
    assert find_in_pool("1111", POOL) is POOL[0]


def test_ambiguous_id_prefix():
    with pytest.raises(AmbiguousError):
        find_in_pool("2", POOL)


def test_match_exact_name_case_insensitive():
    assert find_in_pool("morning walk", POOL) is POOL[1]


def test_match_substring():
    assert find_in_pool("pages", POOL) is POOL[0]


def test_ambiguous_substring():
    with pytest.raises(AmbiguousError) as exc:
        find_in_pool("walk", POOL)
    assert exc.value.count == 2


def test_fuzzy_match():
    assert find_in_pool("mornin walk", POOL) is POOL[1]


def test_match_by_full_id():
    assert find_in_pool("22222222-bbbb", POOL) is POOL[1]


def test_id_prefix_longer_than_short_id():
    assert find_in_pool("23333333-c", POOL) is POOL[2]


def test_empty_pool():
    assert find_in_pool("read", []) is None
