from __future__ import annotations

"""
Integration tests for the staging pipeline.

Runs run_pipeline against real temporary repository trees. Network access
is never needed: fetching is disabled or its infrastructure is mocked.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import pytest

from geestager.core.pipeline.engine import run_pipeline
from geestager.domain.import_models import ResolutionStatus
from geestager.infra.vcs import FetchResult

FETCH_STAGE = "geestager.core.pipeline.stages.fetch"


def _tree(root: Path) -> Dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def staged(mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]):
    result = run_pipeline(mock_config_dict)
    assert result.ok, result.error
    return result


def test_reference_scenario_end_to_end(staged, workspace: Path) -> None:
    """TC-01: Closure, destination tree and module map for the reference layout."""
    assert staged.files == ["repoA/main", "repoA/util/helpers.js", "repoB/math/core.js"]
    assert staged.repos == ["repoA", "repoB"]
    assert staged.copied_count == 3
    assert staged.missing == []

    assert sorted(_tree(workspace / "gee_modules")) == [
        "repoA/main.js",
        "repoA/util/helpers.js",
        "repoB/math/core.js",
    ]

    doc = json.loads((workspace / "module-map.json").read_text(encoding="utf-8"))
    assert doc["username"] == "alice"
    assert doc["modules"] == {
        "users/alice/repoA:main": "repoA/main.js",
        "users/alice/repoA:util/helpers": "repoA/util/helpers.js",
        "users/alice/repoB:math/core": "repoB/math/core.js",
    }


def test_module_map_matches_destination_tree(staged, workspace: Path) -> None:
    """Every map value exists in the tree and every tree file is in the map."""
    doc = json.loads((workspace / "module-map.json").read_text(encoding="utf-8"))

    assert sorted(doc["modules"].values()) == sorted(_tree(workspace / "gee_modules"))
    assert staged.module_count == len(doc["modules"])


def test_summary_contents(staged) -> None:
    summary = staged.summary

    assert summary["closure_files"] == 3
    assert summary["repo_files"] == {"repoA": 2, "repoB": 1}
    assert summary["fetch"] == []
    assert summary["caller_script"].endswith(os.path.join("scripts_to_run", "main.js"))


def test_rerun_is_idempotent(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path], workspace: Path
) -> None:
    """TC-02: Unchanged sources give an identical tree and map apart from the timestamp."""
    first = run_pipeline(mock_config_dict)
    tree_first = _tree(workspace / "gee_modules")
    map_first = json.loads((workspace / "module-map.json").read_text(encoding="utf-8"))

    second = run_pipeline(mock_config_dict)
    tree_second = _tree(workspace / "gee_modules")
    map_second = json.loads((workspace / "module-map.json").read_text(encoding="utf-8"))

    assert first.ok and second.ok
    assert tree_first == tree_second
    map_first.pop("_generated")
    map_second.pop("_generated")
    assert map_first == map_second


def test_removed_dependency_disappears(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path], workspace: Path
) -> None:
    """TC-03: Files dropped from the closure leave the tree and the map."""
    run_pipeline(mock_config_dict)
    example_storage["helpers"].write_text("exports.version = 2;\n", encoding="utf-8")

    result = run_pipeline(mock_config_dict)

    assert result.files == ["repoA/main", "repoA/util/helpers.js"]
    assert not (workspace / "gee_modules" / "repoB").exists()
    doc = json.loads((workspace / "module-map.json").read_text(encoding="utf-8"))
    assert "users/alice/repoB:math/core" not in doc["modules"]


def test_unresolvable_import_does_not_abort(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]
) -> None:
    example_storage["core"].write_text(
        "var gone = require('users/alice/repoB:does/not/exist');\n"
        "var other = require('users/alice/neverFetched:x');\n",
        encoding="utf-8",
    )

    result = run_pipeline(mock_config_dict)

    assert result.ok
    assert result.copied_count == 3
    assert {m.status for m in result.missing} == {
        ResolutionStatus.NOT_FOUND,
        ResolutionStatus.MISSING_REPOSITORY,
    }


def test_missing_entry_is_fatal(mock_config_dict: Dict[str, Any], raw_root: Path, workspace: Path) -> None:
    """TC-04: No entry script means no output at all."""
    result = run_pipeline(mock_config_dict)

    assert not result.ok
    assert "Entry script not found" in result.error
    assert not (workspace / "module-map.json").exists()


def test_unsafe_layout_is_fatal(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]
) -> None:
    mock_config_dict["modules_dir"] = "."

    result = run_pipeline(mock_config_dict)

    assert not result.ok
    assert example_storage["entry"].exists()


def test_callers_can_be_disabled(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path], workspace: Path
) -> None:
    mock_config_dict["update_callers"] = False

    result = run_pipeline(mock_config_dict)

    assert result.summary["caller_script"] == ""
    assert not (workspace / "scripts_to_run").exists()


def test_map_write_failure_is_fatal(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]
) -> None:
    with patch(
        "geestager.core.pipeline.engine.write_module_map",
        side_effect=PermissionError("read-only"),
    ):
        result = run_pipeline(mock_config_dict)

    assert not result.ok
    assert "read-only" in result.error


def test_git_missing_is_fatal(mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]) -> None:
    mock_config_dict["fetch_repos"] = True

    with patch(f"{FETCH_STAGE}.check_git_installed", return_value=False):
        result = run_pipeline(mock_config_dict)

    assert not result.ok
    assert "Git is not installed" in result.error


def test_skip_fetch_overrides_config(mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]) -> None:
    mock_config_dict["fetch_repos"] = True

    with patch(f"{FETCH_STAGE}.check_git_installed") as git_check:
        result = run_pipeline(mock_config_dict, skip_fetch=True)

    git_check.assert_not_called()
    assert result.ok


def test_fetch_failures_are_reported(
        mock_config_dict: Dict[str, Any], example_storage: Dict[str, Path]
) -> None:
    """TC-05: A failed repository fetch is reported while staging proceeds."""
    mock_config_dict["fetch_repos"] = True
    outcomes = [
        FetchResult(repo="repoA", ok=True, action="update"),
        FetchResult(repo="repoB", ok=False, action="update", error="denied"),
    ]

    with patch(f"{FETCH_STAGE}.check_git_installed", return_value=True), \
            patch(f"{FETCH_STAGE}.get_active_gcloud_account", return_value=None), \
            patch(f"{FETCH_STAGE}.configure_git_credentials", return_value=False), \
            patch(f"{FETCH_STAGE}.fetch_repositories", return_value=outcomes) as fetch:
        result = run_pipeline(mock_config_dict)

    assert result.ok
    assert fetch.call_args[0][0] == ["repoA", "repoB"]
    assert result.summary["fetch_failed"] == ["repoB"]
    assert len(result.summary["fetch"]) == 2
