"""
Configuration for the ChopChop ingredient store.

Two environments are supported. Development keeps the SQLite file in the
project's data/ directory; production keeps it under ~/Documents/ChopChop.
CHOPCHOP_ENV picks the environment and CHOPCHOP_DATABASE_URL replaces the
database URL entirely (tests point it at sqlite:///:memory:).
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import APP_NAME, APP_VERSION, DATABASE_FILENAME

ENVIRONMENT_VARIABLE = "CHOPCHOP_ENV"
DATABASE_URL_VARIABLE = "CHOPCHOP_DATABASE_URL"
ENVIRONMENTS = ("production", "development")

logger = logging.getLogger(__name__)


def _data_dir_for(environment: str) -> Path:
    if environment == "development":
        return Path(__file__).resolve().parent.parent.parent / "data"
    return Path.home() / "Documents" / APP_NAME


class Config:
    """Where the ingredient store lives for one environment."""

    app_name = APP_NAME
    app_version = APP_VERSION

    def __init__(self, environment: str = "production"):
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"Unknown environment '{environment}': expected one of {', '.join(ENVIRONMENTS)}"
            )
        self.environment = environment
        self.data_dir = _data_dir_for(environment)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def database_path(self) -> Path:
        return self.data_dir / DATABASE_FILENAME

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL, honouring CHOPCHOP_DATABASE_URL when it is set."""
        override = os.environ.get(DATABASE_URL_VARIABLE)
        if override:
            return override
        return f"sqlite:///{self.database_path.as_posix()}"

    def ensure_directories(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def database_exists(self) -> bool:
        return self.database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_path='{self.database_path}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Return the process-wide Config, creating it on first call.

    Args:
        environment: Environment to create the config with. Defaults to
            CHOPCHOP_ENV, then production. Once the config exists a
            different value is ignored with a warning so the store cannot
            switch databases part way through a run.
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment or os.environ.get(ENVIRONMENT_VARIABLE, "production"))
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but the config "
            f"singleton already exists with environment='{_config_instance.environment}'; "
            f"keeping the existing one"
        )
    return _config_instance


def reset_config() -> None:
    """Forget the current Config (used by tests)."""
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    return get_config().database_url
