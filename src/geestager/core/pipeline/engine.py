from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the staging workflow. Each step runs to
completion before the next one starts:
1. Validates configuration and workspace layout.
2. Fetches the source repositories into raw storage (optional).
3. Locates the entry script (fatal if absent).
4. Computes the dependency closure.
5. Materializes the closure into the clean modules directory.
6. Deploys the caller script (optional).
7. Regenerates and persists the module map.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from geestager.core.pipeline.stages.fetch import fetch_sources
from geestager.core.pipeline.stages.setup import locate_entry_file, prepare_environment
from geestager.core.pipeline.stages.validator import validate_config
from geestager.core.services.callers import update_caller_script
from geestager.core.services.closure import build_closure
from geestager.core.services.materializer import materialize
from geestager.core.services.module_map import generate_module_map, write_module_map
from geestager.domain.pipeline_models import (
    PipelineResult,
    create_error_result,
    create_success_result,
)
from geestager.infra.vcs import FetchResult

logger = logging.getLogger(__name__)


def run_pipeline(
        config: Optional[Dict[str, Any]],
        *,
        skip_fetch: bool = False,
) -> PipelineResult:
    """
    Execute the full staging pipeline.

    Args:
        config: The configuration dictionary (raw or partial).
        skip_fetch: Use raw storage as-is even if fetching is configured.

    Returns:
        PipelineResult: Object containing status, closure, metrics and summary.
    """
    logger.info("Pipeline execution started.")

    # -------------------------------------------------------------------------
    # 1) Config & Layout
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    error_result, staging = prepare_environment(cfg)
    if error_result is not None or staging is None:
        return error_result or create_error_result("Environment setup failed.", cfg)

    cfg = dict(cfg, raw_repos_dir=staging.raw_repos_dir, modules_dir=staging.modules_dir)

    # -------------------------------------------------------------------------
    # 2) Fetch
    # -------------------------------------------------------------------------
    fetch_results: List[FetchResult] = []
    if staging.fetch_repos and not skip_fetch:
        fatal, fetch_results = fetch_sources(staging)
        if fatal:
            logger.error(fatal)
            return create_error_result(fatal, cfg)
    else:
        logger.info("Skipping repository fetch; using raw storage as-is.")

    fetch_summary = [asdict(r) for r in fetch_results]

    # -------------------------------------------------------------------------
    # 3) Entry Script
    # -------------------------------------------------------------------------
    entry_file = locate_entry_file(staging)
    if entry_file is None:
        msg = (
            f"Entry script not found: {staging.entry_repo}/{staging.entry_path} "
            f"in {staging.raw_repos_dir}"
        )
        logger.error(msg)
        return create_error_result(msg, cfg, summary_extra={"fetch": fetch_summary})

    logger.info(f"Starting from: {staging.entry_repo}/{staging.entry_path}")

    # -------------------------------------------------------------------------
    # 4) Dependency Closure
    # -------------------------------------------------------------------------
    try:
        closure = build_closure(
            entry_file,
            staging.raw_repos_dir,
            extension=staging.extension,
            prefix=staging.import_prefix,
            max_files=staging.max_files,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return create_error_result(str(e), cfg, entry_file, {"fetch": fetch_summary})

    logger.info(f"Found {len(closure)} files needed for execution")

    # -------------------------------------------------------------------------
    # 5) Materialization
    # -------------------------------------------------------------------------
    materialized = materialize(closure, staging.modules_dir, staging.extension)
    if not materialized.ok:
        return create_error_result(
            materialized.error, cfg, entry_file, {"fetch": fetch_summary}
        )

    # -------------------------------------------------------------------------
    # 6) Caller Script
    # -------------------------------------------------------------------------
    caller_path: Optional[str] = None
    if staging.update_callers:
        caller_path = update_caller_script(entry_file, staging.scripts_dir, staging.extension)

    # -------------------------------------------------------------------------
    # 7) Module Map
    # -------------------------------------------------------------------------
    module_map = generate_module_map(
        staging.modules_dir,
        staging.username,
        extension=staging.extension,
        prefix=staging.import_prefix,
    )
    try:
        write_module_map(module_map, staging.module_map_path)
    except OSError as e:
        msg = f"Failed to write module map '{staging.module_map_path}': {e}"
        logger.error(msg)
        return create_error_result(msg, cfg, entry_file, {"fetch": fetch_summary})

    # -------------------------------------------------------------------------
    # 8) Summary
    # -------------------------------------------------------------------------
    summary = {
        "closure_files": len(closure),
        "copied": len(materialized.copied),
        "skipped": len(materialized.skipped),
        "read_errors": [r.path for r in closure.read_errors],
        "missing": len(closure.missing),
        "truncated": closure.truncated,
        "repo_files": {repo: len(files) for repo, files in closure.by_repo().items()},
        "module_count": len(module_map),
        "caller_script": caller_path or "",
        "fetch": fetch_summary,
        "fetch_failed": [r.repo for r in fetch_results if not r.ok],
    }

    logger.info("Pipeline completed successfully.")
    return create_success_result(
        cfg, closure, materialized, module_map, staging.module_map_path, summary
    )
