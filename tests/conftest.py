import contextlib
import io
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path

import fncli
import pytest

from growth import config, db
from growth.core.errors import GrowthError
from growth.lib import ansi, clock

GROWTH_PKG = Path(__file__).parent.parent / "growth"


@dataclass
class CLIResult:
    exit_code: int
    stdout: str
    stderr: str


class FnCLIRunner:
    def __init__(self) -> None:
        fncli.autodiscover(GROWTH_PKG, "growth")

    def invoke(self, args: list[str]) -> CLIResult:
        out, err = io.StringIO(), io.StringIO()
        code = 0
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            try:
                code = fncli.dispatch(["growth", *(args or ["dashboard"])]) or 0
            except SystemExit as e:
                code = e.code if isinstance(e.code, int) else 1
            except (GrowthError, fncli.UsageError) as e:
                err.write(f"{e}\n")
                code = 1
        return CLIResult(exit_code=code, stdout=out.getvalue(), stderr=err.getvalue())


def set_today(monkeypatch: pytest.MonkeyPatch, day: date) -> None:
    """Pin the clock to midday on the given day."""
    monkeypatch.setattr(clock, "now", lambda: datetime.combine(day, time(12, 0)))


@pytest.fixture
def tmp_growth_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "GROWTH_DIR", tmp_path)
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "store.db")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.yaml")
    monkeypatch.setattr(config, "LOG_PATH", tmp_path / "rollover.log")
    monkeypatch.setattr(config, "BACKUP_DIR", tmp_path / "backups")
    monkeypatch.setattr(config.Config, "_instance", None)
    monkeypatch.setattr(ansi, "_active", ansi.PLAIN)
    db.init()
    return tmp_path
