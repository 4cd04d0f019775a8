"""Environment-driven settings and logging setup."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    db_path: Optional[str] = None
    database_url: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read LEDGERHEALTH_* environment variables.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        Settings instance; unset variables keep their defaults
    """
    environ = os.environ if environ is None else environ
    return Settings(
        db_path=environ.get("LEDGERHEALTH_DB_PATH") or None,
        database_url=environ.get("LEDGERHEALTH_DATABASE_URL") or None,
        log_level=(environ.get("LEDGERHEALTH_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the process.

    Raises:
        ValueError: If level is not a known logging level name
    """
    level_name = (level or DEFAULT_LOG_LEVEL).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: '{level}'")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
