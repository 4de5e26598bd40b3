"""
Application configuration.
Reads environment variables, including those from a .env file.
"""
import getpass
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from waste_inventory import DEFAULT_CHAR_LIMIT

# Load variables from .env
load_dotenv()

DEFAULT_DB_PATH = "./waste_management.db"
DEFAULT_LOG_FILE = "wmtui.log"


@dataclass
class Config:
    """Editor configuration."""
    db_path: str
    log_file: str
    log_level: str
    username: str
    char_limit: int = DEFAULT_CHAR_LIMIT

    @classmethod
    def from_env(cls) -> "Config":
        """Build the configuration from environment variables."""
        char_limit_str = os.getenv("WMTUI_CHAR_LIMIT", str(DEFAULT_CHAR_LIMIT))
        try:
            char_limit = int(char_limit_str)
        except ValueError:
            raise ValueError(f"WMTUI_CHAR_LIMIT must be an integer, got {char_limit_str!r}") from None
        if char_limit <= 0:
            raise ValueError("WMTUI_CHAR_LIMIT must be positive")

        return cls(
            db_path=os.getenv("WMTUI_DB_PATH", DEFAULT_DB_PATH),
            log_file=os.getenv("WMTUI_LOG_FILE", DEFAULT_LOG_FILE),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            username=os.getenv("WMTUI_USER") or login_name(),
            char_limit=char_limit,
        )


def login_name() -> str:
    """Login name of the current user (LOGNAME, USER, LNAME, USERNAME), or "operator"."""
    try:
        return getpass.getuser() or "operator"
    except (OSError, KeyError, ImportError):
        return "operator"


# Global configuration instance
config: Optional[Config] = None


def setup_logging(log_file: str, level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Configure application logging.

    Logs go to a file: the terminal is owned by curses while the editor runs.

    Args:
        log_file: Path of the log file.
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_string: Log line format. Defaults to the standard one.
    """
    log_format = format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )


def get_config() -> Config:
    """Return the application configuration (singleton)."""
    global config
    if config is None:
        config = Config.from_env()
        setup_logging(config.log_file, config.log_level)
    return config


def reset_config() -> None:
    global config
    config = None
