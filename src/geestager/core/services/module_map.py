from __future__ import annotations

"""
Module Map Service.

Derives the import-path -> file map from a materialized tree and persists
it as JSON. The map is rebuilt from the tree on every run; entries exist
exactly for the files currently present.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, Optional

from geestager.domain.constants import CANONICAL_EXTENSION, IMPORT_PREFIX
from geestager.domain.import_models import ImportPath
from geestager.domain.pipeline_models import ModuleMap
from geestager.infra.fs import iter_script_files, to_posix

logger = logging.getLogger(__name__)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a UTC instant as ISO-8601 with millisecond precision and 'Z'."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def logical_import_path(
        rel_path: str,
        owner: str,
        extension: str = CANONICAL_EXTENSION,
        prefix: str = IMPORT_PREFIX,
) -> Optional[str]:
    """
    Rebuild the import path of a destination-relative file.

    'repoA/util/helpers.js' -> 'users/<owner>/repoA:util/helpers'.
    Returns None for files sitting directly in the destination root.
    """
    parts = to_posix(rel_path).split("/")
    if len(parts) < 2:
        return None

    internal = "/".join(parts[1:])
    if internal.endswith(extension):
        internal = internal[: -len(extension)]
    return ImportPath(owner=owner, repo_name=parts[0], internal_path=internal).qualified(prefix=prefix)


def generate_module_map(
        destination: str,
        owner: str,
        extension: str = CANONICAL_EXTENSION,
        prefix: str = IMPORT_PREFIX,
        generated: Optional[str] = None,
) -> ModuleMap:
    """
    Enumerate a materialized tree and map logical import paths to files.

    Args:
        destination: Materialized tree root.
        owner: Namespace owner used to qualify the import paths.
        extension: Canonical script suffix.
        prefix: Namespace prefix of import strings.
        generated: Timestamp override; defaults to now.

    Returns:
        ModuleMap: Map with keys in sorted order.
    """
    modules: Dict[str, str] = {}
    dest_root = os.path.abspath(destination)

    if os.path.isdir(dest_root):
        for file_path in iter_script_files(dest_root, extension):
            rel = to_posix(os.path.relpath(file_path, dest_root))
            key = logical_import_path(rel, owner, extension, prefix)
            if key is None:
                logger.debug(f"Ignoring file outside repository folders: {rel}")
                continue
            if key in modules:
                logger.warning(f"Duplicate module '{key}': keeping {modules[key]}, ignoring {rel}")
                continue
            modules[key] = rel
    else:
        logger.warning(f"Module directory does not exist: {dest_root}")

    return ModuleMap(
        owner=owner,
        generated=generated or utc_timestamp(),
        modules=dict(sorted(modules.items())),
    )


def write_module_map(module_map: ModuleMap, output_path: str) -> None:
    """
    Persist the module map document.

    Raises:
        OSError: If the file cannot be written.
    """
    parent = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(parent, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(module_map.to_document(), f, ensure_ascii=False, indent=2)
        f.write("\n")
    logger.info(f"Module map written: {output_path} ({len(module_map)} modules)")

