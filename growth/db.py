import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from fncli import cli

from . import config
from .lib.errors import echo, exit_error

MIGRATIONS_TABLE = "_migrations"
MIGRATIONS_DIR = Path(__file__).parent / "migrations"

Migration = tuple[str, str]


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def get_db(db_path: Path | None = None):
    db_path = db_path if db_path else config.DB_PATH
    conn = _connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_backup(db_path: Path) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    mig_dir = config.BACKUP_DIR / "migrations"
    mig_dir.mkdir(parents=True, exist_ok=True)
    backup_path = mig_dir / f"growth.{timestamp}.backup"
    src = sqlite3.connect(db_path, timeout=30)
    dst = sqlite3.connect(backup_path)
    try:
        src.backup(dst)
    except Exception:
        dst.close()
        src.close()
        if backup_path.exists():
            backup_path.unlink()
        raise
    dst.close()
    src.close()
    return backup_path


def _restore_backup(backup_path: Path, conn: sqlite3.Connection) -> None:
    src = sqlite3.connect(backup_path)
    try:
        src.backup(conn)
    finally:
        src.close()


def _table_count(conn: sqlite3.Connection, table: str) -> int:
    try:
        return conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]  # noqa: S608
    except sqlite3.OperationalError:
        return 0


def _user_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name != ? AND name NOT LIKE 'sqlite_%'",
        (MIGRATIONS_TABLE,),
    ).fetchall()
    return sorted(row[0] for row in rows)


def _check_data_loss(conn: sqlite3.Connection, before: dict[str, int]) -> None:
    for table, count in before.items():
        after = _table_count(conn, table)
        if after < count:
            raise ValueError(f"migration data loss: {table} had {count} rows, now {after}")


def load_migrations() -> list[Migration]:
    if not MIGRATIONS_DIR.exists():
        return []
    return [(sql_file.stem, sql_file.read_text()) for sql_file in sorted(MIGRATIONS_DIR.glob("*.sql"))]


def _apply_migrations(conn: sqlite3.Connection, db_path: Path) -> list[str]:
    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {MIGRATIONS_TABLE} "
        "(id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL UNIQUE, applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )
    conn.commit()

    applied = {row[0] for row in conn.execute(f"SELECT name FROM {MIGRATIONS_TABLE}").fetchall()}  # noqa: S608
    pending = [(n, sql) for n, sql in load_migrations() if n not in applied]
    if not pending:
        return []

    backup_path: Path | None = None
    if applied and db_path.exists():
        backup_path = _create_backup(db_path)

    done: list[str] = []
    for name, sql in pending:
        before = {t: _table_count(conn, t) for t in _user_tables(conn)}
        try:
            conn.executescript(sql)
            _check_data_loss(conn, before)
            conn.execute(f"INSERT OR IGNORE INTO {MIGRATIONS_TABLE} (name) VALUES (?)", (name,))  # noqa: S608
            conn.commit()
        except Exception:
            conn.rollback()
            if backup_path:
                _restore_backup(backup_path, conn)
            raise
        done.append(name)

    if backup_path and backup_path.exists():
        backup_path.unlink()
    return done


def init(db_path: Path | None = None) -> list[str]:
    db_path = db_path if db_path else config.DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(db_path)
    try:
        return _apply_migrations(conn, db_path)
    finally:
        conn.close()


def integrity_problems(db_path: Path | None = None) -> list[str]:
    """Return human-readable problems: corruption, orphan rows, schema drift."""
    problems: list[str] = []
    with get_db(db_path) as conn:
        result = conn.execute("PRAGMA integrity_check").fetchone()[0]
        if result != "ok":
            problems.append(f"integrity: {result}")

        for row in conn.execute("PRAGMA foreign_key_check").fetchall():
            problems.append(f"orphan row in {row[0]} -> {row[2]}")

        expected = _expected_schema()
        for table, cols in expected.items():
            live = {r[1] for r in conn.execute(f"PRAGMA table_info('{table}')").fetchall()}
            if not live:
                problems.append(f"missing table: {table}")
                continue
            missing = cols - live
            if missing:
                problems.append(f"{table} missing columns: {', '.join(sorted(missing))}")
    return problems


def _expected_schema() -> dict[str, set[str]]:
    mem = sqlite3.connect(":memory:")
    try:
        for _name, sql in load_migrations():
            mem.executescript(sql)
        return {
            table: {col[1] for col in mem.execute(f"PRAGMA table_info('{table}')").fetchall()}
            for table in _user_tables(mem)
        }
    finally:
        mem.close()


@cli("growth db", name="migrate")
def db_migrate():
    """Run pending database migrations"""
    applied = init()
    if not applied:
        echo("up to date")
        return
    for name in applied:
        echo(f"applied {name}")


@cli("growth db", name="health")
def db_health():
    """Check database integrity"""
    problems = integrity_problems()
    if problems:
        for p in problems:
            echo(f"  ✗ {p}")
        exit_error(f"{len(problems)} problem(s) found")
    echo("✓ healthy")
