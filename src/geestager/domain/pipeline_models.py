from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the structures produced by each pipeline stage (closure,
materialization, module map) and the unified PipelineResult handed to the
interface layer, together with its factory functions.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from geestager.domain.constants import MODULE_MAP_COMMENT
from geestager.domain.import_models import MissingImport, ResolvedFile, ScanResult

# -----------------------------------------------------------------------------
# STAGE MODELS
# -----------------------------------------------------------------------------

@dataclass
class Closure:
    """
    Files reachable from one entry file, in breadth-first discovery order.

    Attributes:
        entry: The entry file (always files[0]).
        files: Reachable files, each present exactly once.
        missing: Imports that did not resolve.
        read_errors: Files of the closure whose content could not be scanned.
        truncated: True if traversal stopped at the configured file limit.
    """
    entry: ResolvedFile
    files: List[ResolvedFile] = field(default_factory=list)
    missing: List[MissingImport] = field(default_factory=list)
    read_errors: List[ScanResult] = field(default_factory=list)
    truncated: bool = False

    def by_repo(self) -> Dict[str, List[ResolvedFile]]:
        grouped: Dict[str, List[ResolvedFile]] = OrderedDict()
        for f in self.files:
            grouped.setdefault(f.repo_name, []).append(f)
        return grouped

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class CopyFailure:
    """A closure file that was not copied into the destination."""
    source: str
    error: str


@dataclass
class MaterializationResult:
    """
    Outcome of copying a closure into the destination tree.

    Attributes:
        ok: False only when the destination root itself could not be reset.
        error: Fatal error description.
        destination: Destination root.
        copied: Destination-relative POSIX paths, in closure order.
        skipped: Files that failed to copy.
        repos: Repository folders that received at least one file.
    """
    ok: bool
    destination: str
    error: str = ""
    copied: List[str] = field(default_factory=list)
    skipped: List[CopyFailure] = field(default_factory=list)
    repos: List[str] = field(default_factory=list)


@dataclass
class ModuleMap:
    """
    Mapping from fully qualified import path to destination-relative file.

    Attributes:
        owner: Namespace owner used to qualify the keys.
        generated: ISO-8601 UTC generation timestamp.
        modules: Import path -> relative POSIX file path, sorted by key.
    """
    owner: str
    generated: str
    modules: Dict[str, str] = field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        """Render the persisted JSON layout read by the script runner."""
        return {
            "_comment": MODULE_MAP_COMMENT,
            "_generated": self.generated,
            "username": self.owner,
            "modules": dict(self.modules),
        }

    def __len__(self) -> int:
        return len(self.modules)


# -----------------------------------------------------------------------------
# PIPELINE RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result of a complete staging run.

    Attributes:
        ok: Flag indicating success or fatal failure.
        error: Description of the fatal failure.
        username: Namespace owner used for the run.
        raw_repos_dir: Raw storage root.
        modules_dir: Materialization destination.
        module_map_path: Written module map ('' if not written).
        entry_file: Absolute path of the entry script.
        files: Closure members as '<repo>/<internal path>', BFS order.
        missing: Unresolved imports.
        skipped: Files excluded by read or copy failures.
        repos: Repositories that contributed files.
        copied_count: Number of files written to modules_dir.
        module_count: Number of module map entries.
        summary: Execution statistics for reporting.
    """
    ok: bool
    error: str

    username: str
    raw_repos_dir: str
    modules_dir: str
    module_map_path: str = ""
    entry_file: str = ""

    files: List[str] = field(default_factory=list)
    missing: List[MissingImport] = field(default_factory=list)
    skipped: List[CopyFailure] = field(default_factory=list)
    repos: List[str] = field(default_factory=list)

    copied_count: int = 0
    module_count: int = 0

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        entry_file: str = "",
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        cfg: Validated configuration of the failed run.
        entry_file: Entry script path if it was determined.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        username=cfg.get("username", ""),
        raw_repos_dir=cfg.get("raw_repos_dir", ""),
        modules_dir=cfg.get("modules_dir", ""),
        entry_file=entry_file,
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        closure: Closure,
        materialized: MaterializationResult,
        module_map: ModuleMap,
        module_map_path: str,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        cfg: Validated configuration of the run.
        closure: Computed dependency closure.
        materialized: Copy stage outcome.
        module_map: Generated module map.
        module_map_path: Where the map was written.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    return PipelineResult(
        ok=True,
        error="",
        username=cfg.get("username", ""),
        raw_repos_dir=cfg.get("raw_repos_dir", ""),
        modules_dir=materialized.destination,
        module_map_path=module_map_path,
        entry_file=closure.entry.path,
        files=[f"{f.repo_name}/{f.internal_path}" for f in closure.files],
        missing=list(closure.missing),
        skipped=list(materialized.skipped),
        repos=list(materialized.repos),
        copied_count=len(materialized.copied),
        module_count=len(module_map),
        summary=summary_extra or {},
    )
