from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
argparse namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the geestager CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="geestager",
        description=(
            "Fetch Earth Engine script repositories, collect the files an entry "
            "script transitively requires and stage them with a module map."
        ),
    )

    # --- Identity & Sources ---
    p.add_argument("-u", "--user", dest="username", default=None,
                   help="Repository owner / namespace user (default: $GEE_USERNAME).")
    p.add_argument("-r", "--repos", dest="repos", default=None,
                   help="Comma-separated list of repositories to fetch.")
    p.add_argument("--base-url", dest="base_url", default=None,
                   help="Script host URL.")
    p.add_argument("--branch", dest="branch", default=None,
                   help="Remote branch working copies are reset to.")

    # --- Workspace Layout ---
    p.add_argument("-w", "--workspace", dest="workspace_dir", default=None,
                   help="Base directory for relative paths (default: current directory).")
    p.add_argument("--raw-dir", dest="raw_repos_dir", default=None,
                   help="Raw repository storage.")
    p.add_argument("--modules-dir", dest="modules_dir", default=None,
                   help="Destination of the staged modules (wiped on every run).")
    p.add_argument("--map-file", dest="module_map_file", default=None,
                   help="Output path of the module map JSON.")
    p.add_argument("--scripts-dir", dest="scripts_dir", default=None,
                   help="Directory receiving the caller script.")

    # --- Entry Script ---
    p.add_argument("--entry-repo", dest="entry_repo", default=None,
                   help="Repository holding the entry script.")
    p.add_argument("--entry-path", dest="entry_path", default=None,
                   help="Path of the entry script inside its repository.")

    # --- Run Behavior ---
    p.add_argument("--skip-fetch", action="store_true",
                   help="Do not clone or pull; use raw storage as-is.")
    p.add_argument("--no-callers", action="store_true",
                   help="Do not copy the entry script to the scripts directory.")
    p.add_argument("--max-files", dest="max_files", type=int, default=None,
                   help="Stop the traversal after this many files.")
    p.add_argument("--scan-only", action="store_true",
                   help="Only report the imports of the existing modules directory.")

    # --- Configuration and Diagnostics ---
    p.add_argument("--use-defaults", action="store_true",
                   help="Ignore the saved configuration.")
    p.add_argument("--dump-config", action="store_true",
                   help="Print the effective configuration and exit.")
    p.add_argument("--save-config", action="store_true",
                   help="Persist the effective configuration as the new default.")
    p.add_argument("--log-file", dest="log_file", nargs="?", const="", default=None,
                   help="Also write a rotating diagnostic log (default location if no path is given).")
    p.add_argument("--debug", action="store_true",
                   help="Elevate logging verbosity to DEBUG.")
    p.add_argument("--json", dest="json_output", action="store_true",
                   help="Print the result as JSON.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "username": args.username,
        "base_url": args.base_url,
        "branch": args.branch,
        "workspace_dir": args.workspace_dir,
        "raw_repos_dir": args.raw_repos_dir,
        "modules_dir": args.modules_dir,
        "module_map_file": args.module_map_file,
        "scripts_dir": args.scripts_dir,
        "entry_repo": args.entry_repo,
        "entry_path": args.entry_path,
        "max_files": args.max_files,
    }

    if args.repos:
        overrides["repos"] = _split_csv(args.repos)
    if args.no_callers:
        overrides["update_callers"] = False

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of sanitized strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
