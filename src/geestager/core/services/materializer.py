from __future__ import annotations

"""
Closure Materialization Service.

Copies the files of a dependency closure into a freshly wiped destination
tree laid out as '<dest>/<repo>/<internal path><ext>'. The destination is
owned by this stage: every run starts from an empty directory, so no file
from a previous run survives.
"""

import logging
import os
import shutil
from typing import Dict

from geestager.domain.constants import CANONICAL_EXTENSION
from geestager.domain.import_models import ResolvedFile
from geestager.domain.pipeline_models import Closure, CopyFailure, MaterializationResult
from geestager.infra.fs import reset_directory

logger = logging.getLogger(__name__)


def destination_rel_path(resolved: ResolvedFile, extension: str = CANONICAL_EXTENSION) -> str:
    """
    Compute the destination-relative POSIX path of a closure file.

    The canonical suffix is appended when the stored name lacks it.
    """
    internal = resolved.internal_path
    if not internal.endswith(extension):
        internal += extension
    return f"{resolved.repo_name}/{internal}"


def materialize(
        closure: Closure,
        destination: str,
        extension: str = CANONICAL_EXTENSION,
) -> MaterializationResult:
    """
    Copy a closure into a clean destination tree.

    Individual copy failures are logged and recorded as skipped. Two closure
    files mapping to the same destination name (e.g. 'a' and 'a.js' reached
    through different spellings) keep the first one.

    Args:
        closure: Files to copy.
        destination: Destination root; wiped before copying.
        extension: Canonical script suffix.

    Returns:
        MaterializationResult: ok=False only if the destination could not be reset.
    """
    dest_root = os.path.abspath(destination)

    ok, err = reset_directory(dest_root)
    if not ok:
        msg = f"Cannot prepare destination '{dest_root}': {err}"
        logger.error(msg)
        return MaterializationResult(ok=False, destination=dest_root, error=msg)

    result = MaterializationResult(ok=True, destination=dest_root)
    claimed: Dict[str, str] = {}

    for resolved in closure.files:
        rel = destination_rel_path(resolved, extension)

        if rel in claimed:
            msg = f"Destination '{rel}' already written from '{claimed[rel]}'"
            logger.warning(f"Skipping {resolved.path}: {msg}")
            result.skipped.append(CopyFailure(source=resolved.path, error=msg))
            continue

        target = os.path.join(dest_root, *rel.split("/"))
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            shutil.copyfile(resolved.path, target)
        except OSError as e:
            logger.warning(f"Failed to copy {resolved.path}: {e}")
            result.skipped.append(CopyFailure(source=resolved.path, error=str(e)))
            _discard_partial(target)
            continue

        claimed[rel] = resolved.path
        result.copied.append(rel)
        if resolved.repo_name not in result.repos:
            result.repos.append(resolved.repo_name)

    logger.info(f"Copied {len(result.copied)} files to {dest_root}")
    return result


def _discard_partial(target: str) -> None:
    """Remove a file left behind by an interrupted copy."""
    if not os.path.lexists(target):
        return
    try:
        os.remove(target)
    except OSError as e:
        logger.warning(f"Could not remove partial copy {target}: {e}")
