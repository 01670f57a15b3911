from __future__ import annotations

"""
Unit tests for Configuration Validation.

Verifies type coercion, fallback injection and the normalization of the
import conventions in both lenient and strict modes.
"""

from typing import Any, Dict

import pytest

from geestager.core.pipeline.stages.validator import validate_config
from geestager.domain.config import get_default_config
from geestager.domain.constants import DEFAULT_REPOS


def test_valid_config_passes_unchanged(mock_config_dict: Dict[str, Any]) -> None:
    """TC-01: A clean configuration produces no warnings."""
    clean, warnings = validate_config(mock_config_dict)

    assert warnings == []
    assert clean["repos"] == ["repoA", "repoB"]
    assert clean["entry_path"] == "main"


def test_non_dict_returns_defaults() -> None:
    clean, warnings = validate_config(["not", "a", "dict"])

    assert clean.keys() == get_default_config().keys()
    assert warnings


def test_non_dict_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config("nope", strict=True)


def test_missing_keys_get_defaults() -> None:
    clean, _ = validate_config({"username": "bob"})

    assert clean["username"] == "bob"
    assert clean["modules_dir"] == "gee_modules"
    assert clean["repos"] == list(DEFAULT_REPOS)


def test_bool_coercion(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["fetch_repos"] = "no"
    mock_config_dict["update_callers"] = 1

    clean, warnings = validate_config(mock_config_dict)

    assert clean["fetch_repos"] is False
    assert clean["update_callers"] is True
    assert len(warnings) == 2


def test_repos_csv_and_dedup(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["repos"] = "repoA, repoB,,repoC"
    clean, _ = validate_config(mock_config_dict)
    assert clean["repos"] == ["repoA", "repoB", "repoC"]

    mock_config_dict["repos"] = ["repoA", " repoA ", 7, "repoB"]
    clean, warnings = validate_config(mock_config_dict)
    assert clean["repos"] == ["repoA", "repoB"]
    assert any("repos[2]" in w for w in warnings)


def test_empty_repos_falls_back(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["repos"] = []
    clean, _ = validate_config(mock_config_dict)
    assert clean["repos"] == list(DEFAULT_REPOS)


def test_max_files(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["max_files"] = "25"
    assert validate_config(mock_config_dict)[0]["max_files"] == 25

    mock_config_dict["max_files"] = -3
    assert validate_config(mock_config_dict)[0]["max_files"] == 0

    with pytest.raises(ValueError):
        validate_config(mock_config_dict, strict=True)


def test_extension_and_prefix_normalization(mock_config_dict: Dict[str, Any]) -> None:
    """TC-02: Dot and trailing slash are added where missing."""
    mock_config_dict["canonical_extension"] = "js"
    mock_config_dict["import_prefix"] = "/projects"

    clean, _ = validate_config(mock_config_dict)

    assert clean["canonical_extension"] == ".js"
    assert clean["import_prefix"] == "projects/"


def test_entry_path_separators(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["entry_path"] = "\\BULC\\Caller\\"

    assert validate_config(mock_config_dict)[0]["entry_path"] == "BULC/Caller"


def test_wrong_string_type_strict(mock_config_dict: Dict[str, Any]) -> None:
    mock_config_dict["username"] = 42

    assert validate_config(mock_config_dict)[0]["username"] == get_default_config()["username"]
    with pytest.raises(TypeError):
        validate_config(mock_config_dict, strict=True)
