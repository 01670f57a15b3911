from __future__ import annotations

"""
Import Discovery Service.

Extracts require('users/...') import strings from script text. The scan is
a tolerant pattern match over raw text: malformed surrounding code never
makes it fail, and unreadable files yield a failed ScanResult instead of
an exception.
"""

import logging
import re
from typing import Pattern, Set

from geestager.domain.constants import IMPORT_PREFIX
from geestager.domain.import_models import ScanResult

logger = logging.getLogger(__name__)


def build_import_pattern(prefix: str = IMPORT_PREFIX) -> Pattern[str]:
    """
    Compile the require() pattern for a namespace prefix.

    Group 1 captures the full import string including the prefix.
    """
    return re.compile(
        r"""require\s*\(\s*['"](""" + re.escape(prefix) + r"""[^'"]+)['"]\s*\)"""
    )


_DEFAULT_PATTERN = build_import_pattern()


def scan_text(text: str, prefix: str = IMPORT_PREFIX) -> Set[str]:
    """
    Collect the distinct import strings present in a piece of script text.

    Args:
        text: Raw file content.
        prefix: Namespace prefix an import string must start with.

    Returns:
        Set[str]: Import strings, e.g. 'users/alice/repoA:util/helpers'.
    """
    pattern = _DEFAULT_PATTERN if prefix == IMPORT_PREFIX else build_import_pattern(prefix)
    return {m.group(1).strip() for m in pattern.finditer(text or "")}


def scan_file(file_path: str, prefix: str = IMPORT_PREFIX) -> ScanResult:
    """
    Read a file and scan it for import strings.

    Invalid UTF-8 sequences are replaced rather than rejected; content
    holding NUL bytes is treated as binary and reported as a read error.

    Args:
        file_path: File to scan.
        prefix: Namespace prefix of import strings.

    Returns:
        ScanResult: Sorted imports, or the read error.
    """
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
    except OSError as e:
        logger.warning(f"Cannot read '{file_path}': {e}")
        return ScanResult(path=file_path, error=str(e))

    if "\x00" in content:
        logger.warning(f"Skipping binary content in '{file_path}'")
        return ScanResult(path=file_path, error="binary content")

    return ScanResult(path=file_path, imports=tuple(sorted(scan_text(content, prefix))))
