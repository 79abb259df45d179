import re
from dataclasses import dataclass
from typing import Any

import requests
from fncli import cli

from . import config
from .lib import ansi
from .lib.errors import echo

__all__ = ["FALLBACK", "Verse", "fetch_verse", "parse_votd"]

TIMEOUT = 10
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class Verse:
    text: str
    reference: str


FALLBACK = Verse(
    text=(
        "Trust in the Lord with all your heart and lean not on your own understanding; "
        "in all your ways submit to him, and he will make your paths straight."
    ),
    reference="Proverbs 3:5-6",
)


def parse_votd(payload: Any) -> Verse | None:
    """Read the first passage of a votd JSON payload. None if it has no usable verse."""
    if not isinstance(payload, list) or not payload:
        return None
    first = payload[0]
    if not isinstance(first, dict):
        return None
    text = _TAG_RE.sub("", str(first.get("text") or "")).strip()
    book = first.get("bookname")
    if not text or not book:
        return None
    return Verse(text=text, reference=f"{book} {first.get('chapter')}:{first.get('verse')}")


def fetch_verse(url: str | None = None) -> Verse:
    """Verse of the day, or the fallback verse when the source is unreachable."""
    try:
        resp = requests.get(url or config.get_verse_url(), timeout=TIMEOUT)
        resp.raise_for_status()
        verse = parse_votd(resp.json())
    except (requests.RequestException, ValueError):
        return FALLBACK
    return verse or FALLBACK


@cli("growth")
def verse():
    """Show the verse of the day"""
    v = fetch_verse()
    echo(f'"{v.text}"')
    echo(ansi.cyan(f"  — {v.reference}"))
