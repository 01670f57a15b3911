from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, saved state, CLI overrides), pipeline or scan execution
and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from geestager.core.pipeline.engine import run_pipeline
from geestager.core.pipeline.stages.validator import validate_config
from geestager.core.services.dependency_report import DependencyStatus, build_dependency_report
from geestager.domain.config import get_default_config, load_config, save_config
from geestager.domain.pipeline_models import PipelineResult
from geestager.infra.fs import normalize_path, resolve_under
from geestager.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from geestager.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 130 interrupted).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    log_file = args.log_file
    if log_file == "":
        log_file = get_default_log_path()
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if args.save_config:
        if not save_config(clean_conf):
            print("ERROR: could not save configuration.", file=sys.stderr)
            return 1
        logger.info("Configuration saved as default.")

    if args.scan_only:
        return _run_scan(clean_conf, args.json_output)

    try:
        result = run_pipeline(clean_conf, skip_fetch=bool(args.skip_fetch))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130

    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# SCAN-ONLY MODE
# -----------------------------------------------------------------------------

def _run_scan(cfg: Dict[str, Any], json_output: bool) -> int:
    """Report the imports of the existing modules directory."""
    workspace = normalize_path(cfg.get("workspace_dir"), os.getcwd())
    modules_dir = resolve_under(workspace, cfg["modules_dir"])

    report = build_dependency_report(
        modules_dir, cfg["canonical_extension"], cfg["import_prefix"]
    )

    if json_output:
        print(json.dumps([asdict(d) for d in report], ensure_ascii=False, indent=2))
    else:
        _print_dependency_report(report)
    return 0


def _print_dependency_report(report: List[DependencyStatus]) -> None:
    if not report:
        print("No require() dependencies found")
        return

    print("Found dependencies:")
    for dep in report:
        flag = "ok" if dep.present else "MISSING"
        print(f"  [{flag}] {dep.import_path}")

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of non-None override values into the base.

    Only keys known to the default configuration are merged.
    """
    out = dict(base)
    known = set(get_default_config().keys())
    for k, v in overrides.items():
        if k in known and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: PipelineResult) -> None:
    """
    Format and print the execution result to the standard output.

    Args:
        result: The pipeline result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary

    fetch = summary.get("fetch", [])
    if fetch:
        ok_count = sum(1 for f in fetch if f.get("ok"))
        print(f"Fetched: {ok_count}/{len(fetch)} repos")
        for name in summary.get("fetch_failed", []):
            print(f"  - failed: {name}")

    print(f"Caller: {result.entry_file}")
    print(f"Dependencies: {result.copied_count} files from {len(result.repos)} repos")
    for repo, count in summary.get("repo_files", {}).items():
        print(f"  - {repo}: {count} files")

    if result.skipped:
        print(f"Files skipped: {len(result.skipped)}")
        for failure in result.skipped:
            print(f"  - {failure.source}: {failure.error}")

    if result.missing:
        print(f"Unresolved imports: {len(result.missing)}")
        for miss in result.missing:
            print(f"  - {miss.import_path} (in {miss.source}, {miss.status.value})")

    if summary.get("truncated"):
        print("Traversal stopped at the configured file limit.")

    print(f"Module map: {result.module_map_path} ({result.module_count} modules)")
    if summary.get("caller_script"):
        print(f"Caller script: {summary['caller_script']}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
