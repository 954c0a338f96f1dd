"""
Configuration management for the Cocktail Porter application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
"""

import os
from pathlib import Path
from typing import Optional

from .constants import DATABASE_FILENAME


class Config:
    """
    Application configuration manager.

    Handles database location and environment settings.
    """

    def __init__(self, environment: str = "production", database_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
            database_path: Optional explicit database file path (overrides environment default)
        """
        self.environment = environment

        if database_path:
            self._database_path = Path(database_path)
            self._database_dir = self._database_path.parent
        else:
            if environment == "development":
                self._base_dir = self._get_project_data_dir()
            else:
                self._base_dir = self._get_user_data_dir()
            self._database_dir = self._base_dir
            self._database_path = self._database_dir / DATABASE_FILENAME

        self._ensure_directories()

    def _get_project_data_dir(self) -> Path:
        """Project data/ directory used in development."""
        project_root = Path(__file__).parent.parent.parent
        return project_root / "data"

    def _get_user_data_dir(self) -> Path:
        """Per-user application directory used in production."""
        return Path.home() / ".cocktail_porter"

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def database_exists(self) -> bool:
        """Check if the database file exists."""
        return self._database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_path='{self._database_path}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    COCKTAIL_PORTER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get("COCKTAIL_PORTER_ENV", "production")
        _config_instance = Config(
            environment, database_path=os.environ.get("COCKTAIL_PORTER_DB_PATH")
        )
    elif environment is not None and environment != _config_instance.environment:
        import logging

        logger = logging.getLogger(__name__)
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    """Get the database URL."""
    return get_config().database_url
