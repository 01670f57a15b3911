from __future__ import annotations

"""
Pipeline Setup & Environment Preparation Stage.

Handles the preconditions of a staging run:
1. Construction of the immutable StagingConfig.
2. Workspace layout sanity (the destination must never overlap raw storage).
3. Location of the entry script after the fetch step.
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

from geestager.domain.config import StagingConfig
from geestager.domain.pipeline_models import PipelineResult, create_error_result
from geestager.infra.fs import first_existing_file, is_within

logger = logging.getLogger(__name__)


def prepare_environment(
        cfg: Dict[str, Any],
) -> Tuple[Optional[PipelineResult], Optional[StagingConfig]]:
    """
    Build the run configuration and verify the workspace layout.

    The modules directory is wiped on every run, so it may neither be the
    raw storage nor contain it. The caller script and the module map are
    written outside both the modules directory and raw storage.

    Args:
        cfg: Validated configuration dictionary.

    Returns:
        Tuple[Optional[PipelineResult], Optional[StagingConfig]]:
            An error result and None on failure, else None and the run config.
    """
    staging = StagingConfig.from_dict(cfg)

    if is_within(staging.raw_repos_dir, staging.modules_dir):
        msg = (
            f"Unsafe layout: modules directory '{staging.modules_dir}' would wipe "
            f"raw storage '{staging.raw_repos_dir}'."
        )
        logger.error(msg)
        return create_error_result(msg, cfg), None

    if is_within(staging.modules_dir, staging.raw_repos_dir):
        msg = f"Modules directory '{staging.modules_dir}' must be outside raw storage."
        logger.error(msg)
        return create_error_result(msg, cfg), None

    if is_within(staging.workspace_dir, staging.modules_dir):
        msg = f"Modules directory '{staging.modules_dir}' must not contain the workspace."
        logger.error(msg)
        return create_error_result(msg, cfg), None

    outputs = (
        ("Scripts directory", staging.scripts_dir),
        ("Module map file", staging.module_map_path),
    )
    for label, path in outputs:
        if is_within(path, staging.modules_dir):
            msg = f"{label} '{path}' must be outside the modules directory '{staging.modules_dir}'."
        elif is_within(path, staging.raw_repos_dir):
            msg = f"{label} '{path}' must be outside raw storage '{staging.raw_repos_dir}'."
        else:
            continue
        logger.error(msg)
        return create_error_result(msg, cfg), None

    logger.debug(f"Workspace: {staging.workspace_dir}")
    return None, staging


def locate_entry_file(staging: StagingConfig) -> Optional[str]:
    """
    Find the entry script inside raw storage.

    Tries '<entry_path><ext>' before the extensionless '<entry_path>'.

    Returns:
        Optional[str]: Absolute path of the entry script, None if absent.
    """
    base = os.path.join(staging.raw_repos_dir, staging.entry_repo, *staging.entry_path.split("/"))
    base = os.path.abspath(base)
    candidates = [base]
    if not base.endswith(staging.extension):
        candidates.insert(0, base + staging.extension)
    return first_existing_file(candidates)
