from pathlib import Path

import yaml

GROWTH_DIR = Path.home() / ".growth"
DB_PATH = GROWTH_DIR / "growth.db"
CONFIG_PATH = GROWTH_DIR / "config.yaml"
LOG_PATH = GROWTH_DIR / "rollover.log"
BACKUP_DIR = Path.home() / ".growth_backups"

DEFAULT_VERSE_URL = "https://labs.bible.org/api/?passage=votd&type=json"
DEFAULT_PROJECT_DAYS = 30


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        try:
            with CONFIG_PATH.open() as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            loaded = None
        self._data = loaded if isinstance(loaded, dict) else {}

    def _save(self) -> None:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        self._data[key] = value
        self._save()


def _config() -> Config:
    return Config()


def get_name() -> str:
    """Display name shown on the profile. Empty when unset."""
    name = _config().get("name", "")
    return str(name).strip() if name else ""


def set_name(name: str) -> None:
    _config().set("name", name.strip())


def get_verse_url() -> str:
    url = _config().get("verse_url")
    return str(url) if url else DEFAULT_VERSE_URL


def get_default_project_days() -> int:
    """Length of a new project's window when no deadline is given."""
    val = _config().get("default_project_days")
    if isinstance(val, int) and val > 0:
        return val
    return DEFAULT_PROJECT_DAYS
