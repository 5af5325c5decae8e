"""Settings file for gh-fork-cleanup.

Settings live in ~/.config/gh-fork-cleanup/config in INI format:

    [cleanup]
    gh_path = /usr/local/bin/gh
    page_size = 50
    skip_confirmation = false
    log_level = INFO

The GH_FORK_CLEANUP_CONFIG environment variable points at an alternate
file. Command-line flags override whatever the file says.
"""

from __future__ import annotations

import logging
import os
from configparser import ConfigParser
from configparser import Error as ConfigParserError
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "gh-fork-cleanup"
CONFIG_FILE = CONFIG_DIR / "config"
CONFIG_ENV_VAR = "GH_FORK_CLEANUP_CONFIG"
SECTION = "cleanup"

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Settings:
    """Persistent defaults for a cleanup run.

    Attributes:
        gh_path: Path or name of the GitHub CLI executable.
        page_size: GraphQL page size (1-100).
        skip_confirmation: Default for --skip-confirmation.
        log_level: Logging level name used without --verbose.
    """

    gh_path: str = "gh"
    page_size: int = MAX_PAGE_SIZE
    skip_confirmation: bool = False
    log_level: str = "WARNING"


@dataclass(frozen=True)
class SessionConfig:
    """Behaviour flags for one session, passed to the session runner."""

    force: bool = False
    skip_confirmation: bool = False


def default_config_path() -> Path:
    """Resolve the settings path, honouring GH_FORK_CLEANUP_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from an INI file.

    Missing files yield defaults. Unreadable files and invalid values are
    logged and replaced by defaults, one key at a time.

    Args:
        path: Settings file. Defaults to ``default_config_path()``.

    Returns:
        Loaded settings.
    """
    path = path or default_config_path()
    defaults = Settings()

    if not path.exists():
        return defaults

    parser = ConfigParser()
    try:
        parser.read(path)
    except (ConfigParserError, OSError) as e:
        log.warning(f"Failed to load settings from {path}: {e}")
        return defaults

    if not parser.has_section(SECTION):
        return defaults

    section = parser[SECTION]

    gh_path = section.get("gh_path", defaults.gh_path).strip() or defaults.gh_path

    try:
        page_size = section.getint("page_size", defaults.page_size)
    except ValueError:
        log.warning(f"Invalid page_size in {path}, using {defaults.page_size}")
        page_size = defaults.page_size
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        log.warning(f"page_size must be between 1 and {MAX_PAGE_SIZE}, using {defaults.page_size}")
        page_size = defaults.page_size

    try:
        skip_confirmation = section.getboolean("skip_confirmation", defaults.skip_confirmation)
    except ValueError:
        log.warning(f"Invalid skip_confirmation in {path}, using default")
        skip_confirmation = defaults.skip_confirmation

    log_level = section.get("log_level", defaults.log_level).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log.warning(f"Unknown log_level {log_level!r} in {path}, using {defaults.log_level}")
        log_level = defaults.log_level

    return Settings(
        gh_path=gh_path,
        page_size=page_size,
        skip_confirmation=skip_confirmation,
        log_level=log_level,
    )
