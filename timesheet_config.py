# timesheet_config.py
import os
import sys
import logging
from dataclasses import dataclass, field

from dotenv import load_dotenv

# -----------------------
# DEFAULT LISTS
# -----------------------
DEFAULT_PEOPLE = [
    "Alice Silva",
    "Bruno Lima",
    "Carla Souza",
    "Diego Santos",
    "Eva Martins",
]
DEFAULT_PROJECTS = [
    "Brand Film",
    "Cycling Campaign",
    "Product Launch",
    "Investor Day",
]
DEFAULT_BUSINESS_UNITS = ["Branding", "Communication", "Content", "Shared Services"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _env_int(name, default):
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        logging.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


@dataclass
class Settings:
    database_url: str | None = None
    db_attempts: int = 1
    recent_days: int = 365
    recent_limit: int = 2000
    log_path: str = "timesheet_app.log"
    log_level: str = "INFO"
    people: list = field(default_factory=lambda: list(DEFAULT_PEOPLE))
    projects: list = field(default_factory=lambda: list(DEFAULT_PROJECTS))
    business_units: list = field(default_factory=lambda: list(DEFAULT_BUSINESS_UNITS))

    @property
    def store_configured(self) -> bool:
        return bool(self.database_url)


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env, if present)."""
    load_dotenv()
    return Settings(
        database_url=os.getenv("TS_DATABASE_URL") or None,
        db_attempts=max(1, _env_int("TS_DB_ATTEMPTS", 1)),
        recent_days=_env_int("TS_RECENT_DAYS", 365),
        recent_limit=_env_int("TS_RECENT_LIMIT", 2000),
        log_path=os.getenv("TS_LOG_PATH", "timesheet_app.log"),
        log_level=os.getenv("TS_LOG_LEVEL", "INFO").upper(),
    )


# -----------------------
# LOGGING
# -----------------------
def setup_logging(settings: Settings):
    root = logging.getLogger()
    # Streamlit re-executes the script on every interaction
    if getattr(root, "_timesheet_configured", False):
        return
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        filename=settings.log_path,
        level=level,
        format=LOG_FORMAT,
    )
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    root.addHandler(console)
    root._timesheet_configured = True
