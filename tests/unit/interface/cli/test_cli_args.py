from __future__ import annotations

"""
Unit tests for CLI argument parsing and mapping.
"""

import pytest

from geestager.interface.cli.args import args_to_overrides, build_parser


def test_defaults_produce_no_overrides() -> None:
    """TC-01: Unset options map to None and are ignored by the merge."""
    args = build_parser().parse_args([])
    overrides = args_to_overrides(args)

    assert all(v is None for v in overrides.values())
    assert "repos" not in overrides
    assert "update_callers" not in overrides


def test_value_options_are_mapped() -> None:
    args = build_parser().parse_args([
        "-u", "alice",
        "-r", "repoA, repoB,",
        "-w", "/tmp/ws",
        "--modules-dir", "out",
        "--entry-repo", "repoA",
        "--entry-path", "main",
        "--max-files", "10",
        "--no-callers",
    ])
    overrides = args_to_overrides(args)

    assert overrides["username"] == "alice"
    assert overrides["repos"] == ["repoA", "repoB"]
    assert overrides["workspace_dir"] == "/tmp/ws"
    assert overrides["modules_dir"] == "out"
    assert overrides["max_files"] == 10
    assert overrides["update_callers"] is False


def test_skip_fetch_is_not_a_persisted_override() -> None:
    args = build_parser().parse_args(["--skip-fetch"])

    assert args.skip_fetch is True
    assert "fetch_repos" not in args_to_overrides(args)


def test_mode_flags() -> None:
    args = build_parser().parse_args(["--scan-only", "--json", "--debug", "--use-defaults"])

    assert args.scan_only and args.json_output and args.debug and args.use_defaults


def test_invalid_max_files_exits() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--max-files", "many"])


def test_log_file_optional_value() -> None:
    """A bare --log-file selects the default location (empty string marker)."""
    parser = build_parser()

    assert parser.parse_args([]).log_file is None
    assert parser.parse_args(["--log-file"]).log_file == ""
    assert parser.parse_args(["--log-file", "run.log"]).log_file == "run.log"
