import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/establishments.db"


def load_env() -> None:
    """Load .env from the working directory if present.
    Values already in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def db_path() -> Path:
    return Path(os.getenv("BIZSLUG_DB", DEFAULT_DB_PATH))


def booking_url() -> str:
    return os.getenv("BIZSLUG_BOOKING_URL", "")
