from __future__ import annotations

"""
Dependency Closure Service.

Breadth-first traversal over the import graph of the raw repository
storage. Nodes are absolute file paths; an edge A -> B exists when one of
A's import strings resolves to B. The graph is discovered lazily, one
scanned file at a time, and a visited set guarantees that every file is
processed once, even when imports form cycles.
"""

import logging
import os
from collections import deque
from typing import Deque, Set

from geestager.core.services.resolver import resolve_import, resolved_file_from_path
from geestager.core.services.scanner import scan_file
from geestager.domain.constants import CANONICAL_EXTENSION, IMPORT_PREFIX
from geestager.domain.import_models import MissingImport, ResolutionStatus, ResolvedFile
from geestager.domain.pipeline_models import Closure

logger = logging.getLogger(__name__)


def build_closure(
        entry_file: str,
        raw_root: str,
        extension: str = CANONICAL_EXTENSION,
        prefix: str = IMPORT_PREFIX,
        max_files: int = 0,
) -> Closure:
    """
    Compute every file transitively required by an entry script.

    Files are returned in discovery order, grouped by distance from the
    entry. Unresolvable imports and unreadable files are recorded on the
    closure and never abort the traversal.

    Args:
        entry_file: Path of the entry script inside raw storage.
        raw_root: Raw storage root.
        extension: Canonical script suffix.
        prefix: Namespace prefix of import strings.
        max_files: Stop after this many files (0 means unlimited).

    Returns:
        Closure: The entry file and everything reachable from it.

    Raises:
        FileNotFoundError: If the entry file does not exist.
        ValueError: If the entry file is outside raw storage.
    """
    if not os.path.isfile(entry_file):
        raise FileNotFoundError(f"Entry script not found: {entry_file}")

    entry = resolved_file_from_path(entry_file, raw_root)
    closure = Closure(entry=entry)

    queue: Deque[ResolvedFile] = deque([entry])
    visited: Set[str] = {entry.path}

    while queue:
        if max_files and len(closure.files) >= max_files:
            closure.truncated = True
            logger.warning(f"File limit of {max_files} reached; {len(queue)} queued files dropped.")
            break

        current = queue.popleft()
        closure.files.append(current)

        scan = scan_file(current.path, prefix)
        if not scan.ok:
            closure.read_errors.append(scan)
            continue

        for import_string in scan.imports:
            result = resolve_import(import_string, raw_root, extension, prefix)

            if not result.ok:
                _record_missing(closure, current, import_string, result.status)
                continue

            target = result.resolved
            if target.path in visited:
                continue

            visited.add(target.path)
            queue.append(target)
            logger.debug(f"Queued {target.repo_name}/{target.internal_path} (from {current.internal_path})")

    logger.info(
        f"Closure of '{entry.internal_path}': {len(closure.files)} files, "
        f"{len(closure.missing)} unresolved imports."
    )
    return closure


def _record_missing(
        closure: Closure,
        source: ResolvedFile,
        import_string: str,
        status: ResolutionStatus,
) -> None:
    """Store an unresolved import and log it at a severity matching its cause."""
    closure.missing.append(
        MissingImport(
            source=f"{source.repo_name}/{source.internal_path}",
            import_path=import_string,
            status=status,
        )
    )

    if status is ResolutionStatus.MISSING_REPOSITORY:
        logger.info(f"Import from a repository that was not fetched: {import_string}")
    else:
        logger.warning(
            f"Unresolved import '{import_string}' in {source.repo_name}/{source.internal_path} "
            f"({status.value})"
        )
