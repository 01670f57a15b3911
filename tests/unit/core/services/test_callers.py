from __future__ import annotations

"""
Unit tests for caller script deployment.
"""

import os
from pathlib import Path
from unittest.mock import patch

from geestager.core.services.callers import update_caller_script


def test_update_caller_appends_suffix(tmp_path: Path) -> None:
    entry = tmp_path / "raw" / "Caller-Current"
    entry.parent.mkdir()
    entry.write_text("print('run');", encoding="utf-8")
    scripts = tmp_path / "scripts_to_run"

    written = update_caller_script(str(entry), str(scripts))

    assert written == os.path.join(str(scripts), "Caller-Current.js")
    assert Path(written).read_text(encoding="utf-8") == "print('run');"


def test_update_caller_missing_source(tmp_path: Path) -> None:
    assert update_caller_script(str(tmp_path / "nope"), str(tmp_path / "s")) is None
    assert not (tmp_path / "s").exists()


def test_update_caller_copy_failure(tmp_path: Path) -> None:
    entry = tmp_path / "c.js"
    entry.write_text("", encoding="utf-8")

    with patch("geestager.core.services.callers.shutil.copyfile", side_effect=OSError("ro")):
        assert update_caller_script(str(entry), str(tmp_path / "s")) is None
