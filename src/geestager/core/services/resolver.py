from __future__ import annotations

"""
Import Path Resolution Service.

Maps an import string onto a file of the raw repository storage. Hosted
repositories are inconsistent about file suffixes, so two candidates are
tried: '<internal><ext>' first, then the extensionless '<internal>'. The
suffixed-first order is a tie-break policy; a tree holding both forms with
different content resolves to the suffixed file.
"""

import logging
import os
from typing import List

from geestager.domain.constants import CANONICAL_EXTENSION, IMPORT_PREFIX
from geestager.domain.import_models import (
    ImportPath,
    ResolutionResult,
    ResolutionStatus,
    ResolvedFile,
)
from geestager.infra.fs import first_existing_file, is_within, to_posix

logger = logging.getLogger(__name__)


def candidate_paths(
        import_path: ImportPath,
        raw_root: str,
        extension: str = CANONICAL_EXTENSION,
) -> List[str]:
    """
    List the local paths an import may refer to, in preference order.

    Args:
        import_path: Parsed import.
        raw_root: Raw storage root holding one folder per repository.
        extension: Canonical script suffix.

    Returns:
        List[str]: Absolute candidate paths.
    """
    base = os.path.abspath(
        os.path.normpath(os.path.join(raw_root, import_path.repo_name, import_path.internal_path))
    )
    return [base + extension, base]


def resolve_import(
        import_string: str,
        raw_root: str,
        extension: str = CANONICAL_EXTENSION,
        prefix: str = IMPORT_PREFIX,
) -> ResolutionResult:
    """
    Resolve one import string to a file in raw storage.

    Only regular files count as a resolution. The repository owner does not
    take part in the lookup: storage holds one folder per repository name.

    Repository-root imports ('users/alice/repoA', no internal path) never
    resolve: the repository folder is not a script file, so they are
    reported as NOT_FOUND rather than mapped to a root entry file.

    Args:
        import_string: e.g. 'users/alice/repoA:util/helpers'.
        raw_root: Raw storage root.
        extension: Canonical script suffix.
        prefix: Namespace prefix of import strings.

    Returns:
        ResolutionResult: Status plus the resolved file when found.
    """
    parsed = ImportPath.parse(import_string, prefix)
    if parsed is None:
        logger.debug(f"Malformed import string: {import_string!r}")
        return ResolutionResult(import_path=import_string, status=ResolutionStatus.INVALID)

    repo_dir = os.path.abspath(os.path.join(raw_root, parsed.repo_name))

    if not os.path.isdir(repo_dir):
        return ResolutionResult(
            import_path=import_string,
            status=ResolutionStatus.MISSING_REPOSITORY,
        )

    # No root entry file convention exists for hosted repositories
    if not parsed.internal_path:
        return ResolutionResult(import_path=import_string, status=ResolutionStatus.NOT_FOUND)

    candidates = candidate_paths(parsed, raw_root, extension)

    # '..' segments must not lead out of the repository folder
    if not all(is_within(c, repo_dir) and c != repo_dir for c in candidates):
        return ResolutionResult(
            import_path=import_string,
            status=ResolutionStatus.INVALID,
            candidates=tuple(candidates),
        )

    found = first_existing_file(candidates)
    if found is None:
        return ResolutionResult(
            import_path=import_string,
            status=ResolutionStatus.NOT_FOUND,
            candidates=tuple(candidates),
        )

    return ResolutionResult(
        import_path=import_string,
        status=ResolutionStatus.RESOLVED,
        resolved=ResolvedFile(
            path=found,
            repo_name=parsed.repo_name,
            internal_path=to_posix(os.path.relpath(found, repo_dir)),
        ),
        candidates=tuple(candidates),
    )


def resolved_file_from_path(file_path: str, raw_root: str) -> ResolvedFile:
    """
    Describe a file already known to live under raw storage.

    Args:
        file_path: Path of a file inside '<raw_root>/<repo>/'.
        raw_root: Raw storage root.

    Returns:
        ResolvedFile: The file with its repository and internal path.

    Raises:
        ValueError: If the file is not inside a repository folder of raw_root.
    """
    path = os.path.abspath(os.path.normpath(file_path))
    root = os.path.abspath(raw_root)
    if not is_within(path, root):
        raise ValueError(f"'{file_path}' is outside raw storage '{raw_root}'")

    parts = to_posix(os.path.relpath(path, root)).split("/")
    if len(parts) < 2:
        raise ValueError(f"'{file_path}' is not inside a repository folder")

    return ResolvedFile(path=path, repo_name=parts[0], internal_path="/".join(parts[1:]))
