from datetime import date

from fncli import UsageError, cli

from .core.models import Reflection
from .db import get_db
from .lib import clock
from .lib.converters import REFLECTION_COLS, row_to_reflection
from .lib.errors import echo

__all__ = ["add_reflection", "get_reflections", "get_reflections_on"]


def add_reflection(content: str, verse_reference: str | None = None) -> int:
    """Append a reflection dated today. Reflections are never edited."""
    with get_db() as conn:
        cursor = conn.execute(
            "INSERT INTO reflections (content, date, verse_reference, created) VALUES (?, ?, ?, ?)",
            (content, clock.today().isoformat(), verse_reference, clock.now().isoformat()),
        )
        return cursor.lastrowid or 0


def get_reflections(limit: int | None = None) -> list[Reflection]:
    query = f"SELECT {REFLECTION_COLS} FROM reflections ORDER BY date DESC, id DESC"  # noqa: S608
    params: tuple[object, ...] = ()
    if limit is not None:
        query += " LIMIT ?"
        params = (limit,)
    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()
    return [row_to_reflection(row) for row in rows]


def get_reflections_on(day: date) -> list[Reflection]:
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT {REFLECTION_COLS} FROM reflections WHERE date = ? ORDER BY id",  # noqa: S608
            (day.isoformat(),),
        ).fetchall()
    return [row_to_reflection(row) for row in rows]


@cli("growth", flags={"verse": ["-v", "--verse"]})
def reflect(text: list[str], verse: str | None = None):
    """Write today's reflection"""
    content = " ".join(text).strip() if text else ""
    if not content:
        raise UsageError("Usage: growth reflect <text>")
    add_reflection(content, verse)
    suffix = f"  ({verse})" if verse else ""
    echo(f"✎ {content}{suffix}")


@cli("growth")
def reflections(limit: int = 10):
    """Show recent reflections"""
    entries = get_reflections(limit=limit)
    if not entries:
        echo("no reflections yet")
        return
    for r in entries:
        ref = f"  — {r.verse_reference}" if r.verse_reference else ""
        echo(f"{r.date.isoformat()}  {r.content}{ref}")
