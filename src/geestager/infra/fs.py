from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, staging directory lifecycle and
script-file discovery utilities. Acts as an abstraction over the 'os' and
'shutil' modules to ensure uniform behavior across Windows and Unix-like systems.
"""

import logging
import os
import shutil
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "GeeStager"
UNIX_APP_DIR_NAME = ".geestager"

# Directories never descended into when enumerating script trees
IGNORED_DIR_NAMES = (".git", "node_modules")

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/GeeStager
    - Linux/Mac: ~/.geestager

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.debug(f"Could not create user data dir '{path}': {e}")

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def resolve_under(base_dir: str, path: str) -> str:
    """
    Resolve a possibly relative path against a base directory.

    Absolute inputs are returned normalized; relative inputs are joined
    to base_dir first.
    """
    expanded = os.path.expandvars(os.path.expanduser(path))
    if not os.path.isabs(expanded):
        expanded = os.path.join(base_dir, expanded)
    return os.path.abspath(os.path.normpath(expanded))


def is_within(path: str, root: str) -> bool:
    """Check whether path equals root or lies underneath it."""
    path_abs = os.path.abspath(path)
    root_abs = os.path.abspath(root)
    try:
        return os.path.commonpath([path_abs, root_abs]) == root_abs
    except ValueError:
        # Different drives on Windows
        return False


def to_posix(rel_path: str) -> str:
    """Convert a relative path to forward-slash form for persisted documents."""
    return rel_path.replace(os.sep, "/")

# -----------------------------------------------------------------------------
# DIRECTORY LIFECYCLE API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def reset_directory(path: str) -> Tuple[bool, Optional[str]]:
    """
    Remove a directory with all of its contents and recreate it empty.

    Args:
        path: Directory to wipe.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        elif os.path.lexists(path):
            os.remove(path)
    except OSError as e:
        return False, f"Failed to clear '{path}': {e}"

    return safe_mkdir(path)

# -----------------------------------------------------------------------------
# DISCOVERY API
# -----------------------------------------------------------------------------

def is_script_name(file_name: str, extension: str) -> bool:
    """
    Decide whether a file name follows a script naming convention.

    Scripts either carry the canonical extension or have no extension at
    all (the layout of hosted script repositories).
    """
    return file_name.endswith(extension) or "." not in file_name


def iter_script_files(root_dir: str, extension: str) -> Iterator[str]:
    """
    Walk a directory tree in sorted order and yield script file paths.

    Ignored directories are pruned in place. Unreadable sub-directories
    are logged and skipped.

    Args:
        root_dir: Tree to enumerate.
        extension: Canonical script extension (e.g. '.js').

    Yields:
        str: Absolute path of each script file.
    """
    def _on_error(err: OSError) -> None:
        logger.warning(f"Skipping unreadable directory '{err.filename}': {err.strerror}")

    for root, dirs, files in os.walk(os.path.abspath(root_dir), onerror=_on_error):
        dirs[:] = sorted(d for d in dirs if d not in IGNORED_DIR_NAMES)
        for file_name in sorted(files):
            if is_script_name(file_name, extension):
                yield os.path.join(root, file_name)


def first_existing_file(candidates: List[str]) -> Optional[str]:
    """Return the first candidate that is a regular file, if any."""
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return None
