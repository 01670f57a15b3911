from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A raw repository storage builder used by service and pipeline tests.
3. A complete configuration dictionary pointing into a temporary workspace.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace directory holding raw storage and outputs."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def raw_root(workspace: Path) -> Path:
    """Raw repository storage inside the workspace."""
    root = workspace / "gee_repos_raw"
    root.mkdir()
    return root


@pytest.fixture
def write_script(raw_root: Path) -> Callable[[str, str, str], Path]:
    """
    Factory writing a script into raw storage.

    Usage: write_script("repoA", "util/helpers.js", "content")
    """
    def _write(repo: str, rel_path: str, content: str = "") -> Path:
        target = raw_root / repo / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


@pytest.fixture
def example_storage(write_script: Callable[[str, str, str], Path]) -> Dict[str, Path]:
    """
    Raw storage for the reference scenario.

    repoA/main (extensionless entry) -> repoA:util/helpers
    repoA/util/helpers.js -> repoB:math/core and itself
    repoB/math/core.js -> nothing
    repoA/util/unused.js is never imported.
    """
    entry = write_script(
        "repoA", "main",
        "var helpers = require('users/alice/repoA:util/helpers');\n"
        "print(helpers.version);\n",
    )
    helpers = write_script(
        "repoA", "util/helpers.js",
        "var core = require(\"users/alice/repoB:math/core\");\n"
        "var self = require('users/alice/repoA:util/helpers');\n"
        "exports.version = 1;\n",
    )
    core = write_script("repoB", "math/core.js", "exports.add = function (a, b) { return a + b; };\n")
    unused = write_script("repoA", "util/unused.js", "exports.unused = true;\n")
    return {"entry": entry, "helpers": helpers, "core": core, "unused": unused}


@pytest.fixture
def mock_config_dict(workspace: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Points at the temporary workspace and the reference scenario entry.
    """
    return {
        "username": "alice",
        "base_url": "https://example.googlesource.com",
        "branch": "master",
        "repos": ["repoA", "repoB"],

        "workspace_dir": str(workspace),
        "raw_repos_dir": "gee_repos_raw",
        "modules_dir": "gee_modules",
        "module_map_file": "module-map.json",
        "scripts_dir": "scripts_to_run",

        "entry_repo": "repoA",
        "entry_path": "main",

        "canonical_extension": ".js",
        "import_prefix": "users/",

        "fetch_repos": False,
        "update_callers": True,
        "max_files": 0,
    }
