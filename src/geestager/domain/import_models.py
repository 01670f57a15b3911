from __future__ import annotations

"""
Import Resolution Domain Models.

Value objects exchanged between the scanner, the resolver and the closure
builder. A resolution always produces a ResolutionResult whose status tells
the caller why a file is or is not part of the closure.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from geestager.domain.constants import IMPORT_PREFIX


# -----------------------------------------------------------------------------
# IMPORT PATHS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ImportPath:
    """
    Parsed form of 'users/<owner>/<repo>[:<internal/path>]'.

    Attributes:
        owner: Namespace owner segment.
        repo_name: Repository name (last segment before ':').
        internal_path: Path inside the repository, '' for the root entry.
        raw: Original import string.
    """
    owner: str
    repo_name: str
    internal_path: str
    raw: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str, prefix: str = IMPORT_PREFIX) -> Optional["ImportPath"]:
        """
        Parse an import string.

        The namespace prefix is optional on input. Returns None when the
        repository segment lacks an owner or a repository name.
        """
        raw = (text or "").strip()
        body = raw.replace("\\", "/")
        if body.startswith(prefix):
            body = body[len(prefix):]

        repo_segment, _, internal = body.partition(":")
        segments = [s for s in repo_segment.split("/") if s]
        if len(segments) < 2:
            return None

        return cls(
            owner=segments[-2],
            repo_name=segments[-1],
            internal_path=internal.strip().strip("/"),
            raw=raw,
        )

    def qualified(self, owner: Optional[str] = None, prefix: str = IMPORT_PREFIX) -> str:
        """Render the fully qualified import string, optionally re-owned."""
        return f"{prefix}{owner or self.owner}/{self.repo_name}:{self.internal_path}"


# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedFile:
    """
    A script file located in raw storage.

    Attributes:
        path: Absolute normalized local path.
        repo_name: Repository folder the file belongs to.
        internal_path: POSIX path inside the repository, as stored on disk.
    """
    path: str
    repo_name: str
    internal_path: str


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    MISSING_REPOSITORY = "missing_repository"
    INVALID = "invalid"


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of resolving one import string.

    Attributes:
        import_path: Import string as written in the source file.
        status: Resolution outcome.
        resolved: The located file when status is RESOLVED.
        candidates: Local paths that were tried, in order.
    """
    import_path: str
    status: ResolutionStatus
    resolved: Optional[ResolvedFile] = None
    candidates: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED


# -----------------------------------------------------------------------------
# SCANNING
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanResult:
    """
    Import strings discovered in one file.

    Attributes:
        path: Scanned file.
        imports: Distinct import strings, sorted.
        error: Read failure description, None on success.
    """
    path: str
    imports: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class MissingImport:
    """An import found during traversal that did not resolve to a file."""
    source: str
    import_path: str
    status: ResolutionStatus
