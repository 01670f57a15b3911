from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences as JSON in the per-user data
directory, and the immutable StagingConfig value that a single run passes
to every component.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from geestager.domain.constants import (
    CANONICAL_EXTENSION,
    CURRENT_CONFIG_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_BRANCH,
    DEFAULT_ENTRY_PATH,
    DEFAULT_ENTRY_REPO,
    DEFAULT_MODULE_MAP_FILE,
    DEFAULT_MODULES_DIR,
    DEFAULT_RAW_REPOS_DIR,
    DEFAULT_REPOS,
    DEFAULT_SCRIPTS_DIR,
    DEFAULT_USERNAME,
    IMPORT_PREFIX,
    USERNAME_ENV_VAR,
)
from geestager.infra.fs import get_user_data_dir, normalize_path, resolve_under

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration (Session State).

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Identity & Remote
        "username": os.environ.get(USERNAME_ENV_VAR) or DEFAULT_USERNAME,
        "base_url": DEFAULT_BASE_URL,
        "branch": DEFAULT_BRANCH,
        "repos": list(DEFAULT_REPOS),

        # Workspace Layout
        "workspace_dir": os.getcwd(),
        "raw_repos_dir": DEFAULT_RAW_REPOS_DIR,
        "modules_dir": DEFAULT_MODULES_DIR,
        "module_map_file": DEFAULT_MODULE_MAP_FILE,
        "scripts_dir": DEFAULT_SCRIPTS_DIR,

        # Entry Script
        "entry_repo": DEFAULT_ENTRY_REPO,
        "entry_path": DEFAULT_ENTRY_PATH,

        # Import Conventions
        "canonical_extension": CANONICAL_EXTENSION,
        "import_prefix": IMPORT_PREFIX,

        # Run Behavior
        "fetch_repos": True,
        "update_callers": True,
        "max_files": 0,
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default state persisted in config.json.

    Returns:
        Dict[str, Any]: Versioned state with the last session configuration.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "last_session": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return state

    session = data.get("last_session")
    if isinstance(session, dict):
        state["last_session"].update(session)

    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> bool:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.

    Returns:
        bool: True if the file was written.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False

    logger.debug(f"Configuration saved to {CONFIG_FILE}")
    return True


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """Retrieve the last session configuration merged over defaults."""
    defaults = get_default_config()
    defaults.update(load_app_state().get("last_session", {}))
    return defaults


def save_config(config: Dict[str, Any]) -> bool:
    """Save the provided config as the 'last_session'."""
    state = load_app_state()
    state["last_session"] = dict(config)
    return save_app_state(state)


# -----------------------------------------------------------------------------
# Run Configuration Value
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class StagingConfig:
    """
    Immutable configuration of one staging run.

    Built once from a validated configuration dictionary; directories are
    absolute. Components receive the individual values they need.
    """
    username: str
    base_url: str
    branch: str
    repos: Tuple[str, ...]

    workspace_dir: str
    raw_repos_dir: str
    modules_dir: str
    module_map_path: str
    scripts_dir: str

    entry_repo: str
    entry_path: str

    extension: str = CANONICAL_EXTENSION
    import_prefix: str = IMPORT_PREFIX

    fetch_repos: bool = True
    update_callers: bool = True
    max_files: int = 0

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "StagingConfig":
        """
        Build the run value from a validated configuration dictionary.

        Relative directories are resolved against 'workspace_dir'.
        """
        workspace = normalize_path(cfg.get("workspace_dir"), os.getcwd())
        return cls(
            username=cfg["username"],
            base_url=cfg["base_url"],
            branch=cfg["branch"],
            repos=tuple(cfg["repos"]),
            workspace_dir=workspace,
            raw_repos_dir=resolve_under(workspace, cfg["raw_repos_dir"]),
            modules_dir=resolve_under(workspace, cfg["modules_dir"]),
            module_map_path=resolve_under(workspace, cfg["module_map_file"]),
            scripts_dir=resolve_under(workspace, cfg["scripts_dir"]),
            entry_repo=cfg["entry_repo"],
            entry_path=cfg["entry_path"],
            extension=cfg["canonical_extension"],
            import_prefix=cfg["import_prefix"],
            fetch_repos=bool(cfg["fetch_repos"]),
            update_callers=bool(cfg["update_callers"]),
            max_files=int(cfg["max_files"]),
        )
