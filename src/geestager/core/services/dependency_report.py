from __future__ import annotations

"""
Dependency Report Service.

Audits an already materialized module tree: lists every import its scripts
declare and whether the imported repository is present in the tree.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Set

from geestager.core.services.scanner import scan_file
from geestager.domain.constants import CANONICAL_EXTENSION, IMPORT_PREFIX
from geestager.domain.import_models import ImportPath
from geestager.infra.fs import iter_script_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyStatus:
    """One distinct import of the tree and the availability of its repository."""
    import_path: str
    repo_name: str
    present: bool


def build_dependency_report(
        modules_dir: str,
        extension: str = CANONICAL_EXTENSION,
        prefix: str = IMPORT_PREFIX,
) -> List[DependencyStatus]:
    """
    Scan every script of a module tree and report its imports.

    Args:
        modules_dir: Materialized tree root.
        extension: Canonical script suffix.
        prefix: Namespace prefix of import strings.

    Returns:
        List[DependencyStatus]: One entry per distinct import, sorted.
    """
    if not os.path.isdir(modules_dir):
        logger.warning(f"No module directory found at {modules_dir}")
        return []

    found: Set[str] = set()
    for file_path in iter_script_files(modules_dir, extension):
        scan = scan_file(file_path, prefix)
        found.update(scan.imports)

    report: List[DependencyStatus] = []
    for import_string in sorted(found):
        parsed = ImportPath.parse(import_string, prefix)
        repo = parsed.repo_name if parsed else ""
        present = bool(repo) and os.path.isdir(os.path.join(modules_dir, repo))
        report.append(DependencyStatus(import_path=import_string, repo_name=repo, present=present))

    missing = sum(1 for d in report if not d.present)
    logger.info(f"Dependency scan: {len(report)} imports, {missing} from missing repositories.")
    return report
