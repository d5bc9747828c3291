"""Configuration management for gdblint.

Loads environment variables (optionally from a .env file) and provides
centralized config access.
"""
import os
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

__version__ = "1.0.0"

PROGRAM_NAME = "gdblint"

_TRUTHY = {"1", "true", "yes", "on"}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self):
        """Initialize config by loading the nearest .env file."""
        load_dotenv(find_dotenv(usecwd=True))

    @property
    def gdb_executable(self) -> str:
        """Get the GDB executable used for environment queries.

        Returns:
            Executable name or path
        """
        return os.getenv("GDBLINT_GDB", "gdb")

    @property
    def gdb_timeout(self) -> float:
        """Get the timeout in seconds for a single GDB invocation.

        Falls back to 30 seconds when the variable is missing or not a number.
        """
        raw = os.getenv("GDBLINT_GDB_TIMEOUT", "30")
        try:
            return float(raw)
        except ValueError:
            return 30.0

    @property
    def cache_dir(self) -> Path:
        """Get the directory holding the environment cache.

        Priority:
        1. GDBLINT_CACHE_DIR environment variable
        2. XDG_CACHE_HOME
        3. ~/.cache

        Returns:
            Cache directory path
        """
        explicit = os.getenv("GDBLINT_CACHE_DIR")
        if explicit:
            return Path(explicit).expanduser()
        xdg = os.getenv("XDG_CACHE_HOME")
        if xdg:
            return Path(xdg).expanduser()
        return Path.home() / ".cache"

    @property
    def cache_file(self) -> Path:
        """Get the cache file path, keyed by program name."""
        return self.cache_dir / PROGRAM_NAME

    @property
    def check_duplicates(self) -> bool:
        """Whether symbol tables skip identical (name, kind, line) entries."""
        return os.getenv("GDBLINT_CHECK_DUPLICATES", "").strip().lower() in _TRUTHY

    @property
    def log_level(self) -> str:
        """Get the logging level name for internal tracing."""
        return os.getenv("GDBLINT_LOG_LEVEL", "WARNING").upper()


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config():
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config
    _config = None
