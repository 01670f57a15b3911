from __future__ import annotations

"""
Unit tests for the Module Map Service.

Covers logical path derivation, tree enumeration and the persisted JSON
document layout.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from geestager.core.services.module_map import (
    generate_module_map,
    logical_import_path,
    utc_timestamp,
    write_module_map,
)


def _touch(root: Path, rel: str) -> None:
    target = root / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("", encoding="utf-8")


def test_logical_import_path() -> None:
    assert logical_import_path("repoA/util/helpers.js", "alice") == "users/alice/repoA:util/helpers"
    assert logical_import_path("repoA/main", "alice") == "users/alice/repoA:main"
    assert logical_import_path("loose.js", "alice") is None


def test_logical_import_path_strips_only_trailing_suffix() -> None:
    """'.js' in the middle of a name is kept."""
    assert logical_import_path("repoA/my.jsutils.js", "bob") == "users/bob/repoA:my.jsutils"


def test_generate_module_map_lists_tree(tmp_path: Path) -> None:
    """TC-01: One entry per file, keys sorted, values POSIX relative paths."""
    _touch(tmp_path, "repoB/math/core.js")
    _touch(tmp_path, "repoA/util/helpers.js")
    _touch(tmp_path, "repoA/main.js")
    _touch(tmp_path, "repoA/README.md")

    module_map = generate_module_map(str(tmp_path), "alice", generated="T")

    assert module_map.modules == {
        "users/alice/repoA:main": "repoA/main.js",
        "users/alice/repoA:util/helpers": "repoA/util/helpers.js",
        "users/alice/repoB:math/core": "repoB/math/core.js",
    }
    assert list(module_map.modules) == sorted(module_map.modules)


def test_generate_module_map_skips_git_and_root_files(tmp_path: Path) -> None:
    _touch(tmp_path, "repoA/.git/HEAD")
    _touch(tmp_path, "repoA/a.js")
    _touch(tmp_path, "rootfile.js")

    module_map = generate_module_map(str(tmp_path), "alice", generated="T")

    assert module_map.modules == {"users/alice/repoA:a": "repoA/a.js"}


def test_generate_module_map_missing_dir(tmp_path: Path) -> None:
    module_map = generate_module_map(str(tmp_path / "absent"), "alice", generated="T")
    assert len(module_map) == 0


def test_utc_timestamp_format() -> None:
    moment = datetime(2024, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)
    assert utc_timestamp(moment) == "2024-03-05T07:08:09.123Z"


def test_write_module_map_document(tmp_path: Path) -> None:
    """TC-02: Persisted layout carries comment, timestamp, owner and modules."""
    _touch(tmp_path / "mods", "repoA/a.js")
    module_map = generate_module_map(str(tmp_path / "mods"), "alice", generated="2024-01-01T00:00:00.000Z")
    out = tmp_path / "nested" / "module-map.json"

    write_module_map(module_map, str(out))

    doc = json.loads(out.read_text(encoding="utf-8"))
    assert set(doc) == {"_comment", "_generated", "username", "modules"}
    assert doc["_generated"] == "2024-01-01T00:00:00.000Z"
    assert doc["username"] == "alice"
    assert doc["modules"] == {"users/alice/repoA:a": "repoA/a.js"}
