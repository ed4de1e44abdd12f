"""
Configuration management for TastyTray application.

Handles environment variables, backend store settings, recipe provider
credentials, and application configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Config:
    """Application configuration settings"""

    # Backend store settings
    backend_type: str = "sqlite"  # sqlite, supabase
    database_path: str = "tastytray.db"
    database_url: str = ""

    # Authentication settings
    session_duration_hours: int = 24
    password_min_length: int = 6

    # Recipe provider settings
    spoonacular_api_key: str = ""
    spoonacular_url: str = "https://api.spoonacular.com/recipes"
    mealdb_url: str = "https://www.themealdb.com/api/json/v1/1"
    spoonacular_timeout_seconds: int = 8
    mealdb_timeout_seconds: int = 5
    random_recipe_count: int = 6

    # Pantry settings
    expiring_soon_days: int = 3

    # Streamlit settings
    debug_mode: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/tastytray.log"

    @classmethod
    def from_environment(cls) -> 'Config':
        """Create configuration from environment variables"""
        return cls(
            # Backend
            backend_type=os.getenv("TASTY_BACKEND", "sqlite").lower(),
            database_path=os.getenv("TASTY_DB_PATH", "tastytray.db"),
            database_url=os.getenv("DATABASE_URL", ""),

            # Authentication
            session_duration_hours=int(os.getenv("TASTY_SESSION_DURATION", "24")),
            password_min_length=int(os.getenv("TASTY_PASSWORD_MIN_LENGTH", "6")),

            # Recipe providers
            spoonacular_api_key=os.getenv("SPOONACULAR_API_KEY", ""),
            spoonacular_url=os.getenv("TASTY_SPOONACULAR_URL", "https://api.spoonacular.com/recipes"),
            mealdb_url=os.getenv("TASTY_MEALDB_URL", "https://www.themealdb.com/api/json/v1/1"),
            spoonacular_timeout_seconds=int(os.getenv("TASTY_SPOONACULAR_TIMEOUT", "8")),
            mealdb_timeout_seconds=int(os.getenv("TASTY_MEALDB_TIMEOUT", "5")),
            random_recipe_count=int(os.getenv("TASTY_RANDOM_RECIPES", "6")),

            # Pantry
            expiring_soon_days=int(os.getenv("TASTY_EXPIRING_SOON_DAYS", "3")),

            # Streamlit
            debug_mode=os.getenv("TASTY_DEBUG", "false").lower() == "true",

            # Logging
            log_level=os.getenv("TASTY_LOG_LEVEL", "INFO"),
            log_file=os.getenv("TASTY_LOG_FILE", "logs/tastytray.log")
        )

    def ensure_directories(self):
        """Create necessary directories"""
        directories = [Path(self.log_file).parent]
        if self.backend_type == "sqlite" and self.database_path != ":memory:":
            directories.append(Path(self.database_path).parent)

        for directory in directories:
            if directory and directory != Path("."):
                directory.mkdir(parents=True, exist_ok=True)

    def has_spoonacular(self) -> bool:
        """Check if the paid recipe provider is configured"""
        return bool(self.spoonacular_api_key)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance"""
    global _config
    if _config is None:
        _config = Config.from_environment()
        _config.ensure_directories()
    return _config
