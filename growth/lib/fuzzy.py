from collections.abc import Sequence
from difflib import get_close_matches
from typing import TypeVar

from growth.core.errors import AmbiguousError
from growth.core.models import Habit, Project

__all__ = ["find_in_pool"]

FUZZY_MATCH_CUTOFF = 0.8

T = TypeVar("T", Habit, Project)


def _match_id_prefix(ref: str, pool: Sequence[T]) -> T | None:
    ref_lower = ref.lower()
    matches = [item for item in pool if item.id.startswith(ref_lower)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        exact = next((item for item in matches if item.id == ref), None)
        if exact:
            return exact
        raise AmbiguousError(ref, count=len(matches), sample=[item.id[:8] for item in matches[:3]])
    return None


def _match_name(ref: str, pool: Sequence[T]) -> T | None:
    ref_lower = ref.lower()
    exact = next((item for item in pool if item.name.lower() == ref_lower), None)
    if exact:
        return exact
    matches = [item for item in pool if ref_lower in item.name.lower()]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise AmbiguousError(ref, count=len(matches), sample=[item.name for item in matches[:3]])
    return None


def _match_fuzzy(ref: str, pool: Sequence[T]) -> T | None:
    by_name = {item.name.lower(): item for item in pool}
    close = get_close_matches(ref.lower(), list(by_name), n=1, cutoff=FUZZY_MATCH_CUTOFF)
    return by_name[close[0]] if close else None


def find_in_pool(ref: str, pool: Sequence[T]) -> T | None:
    if not pool or not ref:
        return None
    return _match_id_prefix(ref, pool) or _match_name(ref, pool) or _match_fuzzy(ref, pool)
