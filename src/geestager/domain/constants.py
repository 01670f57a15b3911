from __future__ import annotations

"""
Domain Constants.

Defaults describing the hosted script ecosystem: import syntax, the
canonical script suffix, storage layout and the repository set needed by
the default caller script.
"""

from typing import List

CURRENT_CONFIG_VERSION = "1.0.0"

DEFAULT_USERNAME = "alemlakes"
USERNAME_ENV_VAR = "GEE_USERNAME"
DEFAULT_BASE_URL = "https://earthengine.googlesource.com"
DEFAULT_BRANCH = "master"

# Import syntax: require('users/<owner>/<repo>[:<internal/path>]')
IMPORT_PREFIX = "users/"
CANONICAL_EXTENSION = ".js"

# Workspace layout (relative to the workspace directory)
DEFAULT_RAW_REPOS_DIR = "gee_repos_raw"
DEFAULT_MODULES_DIR = "gee_modules"
DEFAULT_MODULE_MAP_FILE = "module-map.json"
DEFAULT_SCRIPTS_DIR = "scripts_to_run"

MODULE_MAP_COMMENT = "Maps GEE require paths to local files"

# Repositories needed by the default caller and its transitive imports
DEFAULT_REPOS: List[str] = [
    "r-2909-BULC-Releases",
    "r-2903-Dev",
    "r-2902-Dev",
    "CommonCode",
    "CommonCode2",
]

DEFAULT_ENTRY_REPO = "r-2909-BULC-Releases"
DEFAULT_ENTRY_PATH = "BULC/BULC-Callers-Current/BULCD-Caller/BULCD-Caller-Current"
