from __future__ import annotations

"""
Version Control Infrastructure.

Thin wrappers over the git and gcloud executables used to populate the
raw repository storage before dependency analysis. Every call runs with
captured output; failures are converted into return values so that one
unreachable repository never interrupts the remaining fetches.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 600


# -----------------------------------------------------------------------------
# RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of refreshing one repository working copy.

    Attributes:
        repo: Repository name (folder under the raw storage).
        ok: True if the working copy is present and current.
        action: 'clone' for a fresh checkout, 'update' for fetch + reset.
        error: Captured git error output on failure.
    """
    repo: str
    ok: bool
    action: str
    error: str = ""


# -----------------------------------------------------------------------------
# TOOLING CHECKS
# -----------------------------------------------------------------------------

def check_git_installed() -> bool:
    """Check that a git executable is available on PATH."""
    try:
        _run(["git", "--version"])
        return True
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired):
        return False


def get_active_gcloud_account() -> Optional[str]:
    """
    Return the active gcloud account e-mail, or None if not authenticated.
    """
    try:
        proc = _run([
            "gcloud", "auth", "list",
            "--filter=status:ACTIVE",
            "--format=value(account)",
        ])
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired):
        return None

    accounts = [line.strip() for line in proc.stdout.splitlines() if "@" in line]
    return accounts[0] if accounts else None


def configure_git_credentials(base_url: str) -> bool:
    """
    Ensure git authenticates against the script host through gcloud.

    Leaves an already configured helper untouched.

    Args:
        base_url: Host URL, e.g. 'https://earthengine.googlesource.com'.

    Returns:
        bool: True if a credential helper is configured after the call.
    """
    key = f"credential.{base_url}.helper"

    try:
        _run(["git", "config", "--global", "--get", key])
        logger.info("Git credential helper already configured.")
        return True
    except subprocess.CalledProcessError:
        pass
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Unable to inspect git configuration: {e}")
        return False

    if shutil.which("gcloud") is None:
        logger.warning(
            "gcloud not available for credential helper. "
            "Run 'gcloud auth login' or configure .netrc / SSH access manually."
        )
        return False

    try:
        _run(["git", "config", "--global", key, "gcloud.sh"])
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Failed to configure gcloud credential helper: {_describe(e)}")
        return False

    logger.info("Configured gcloud as git credential helper.")
    return True


# -----------------------------------------------------------------------------
# FETCH OPERATIONS
# -----------------------------------------------------------------------------

def build_repo_url(base_url: str, username: str, repo: str) -> str:
    """Compose the remote URL of a hosted user repository."""
    return f"{base_url.rstrip('/')}/users/{username}/{repo}"


def fetch_repository(
        repo: str,
        username: str,
        raw_dir: str,
        base_url: str,
        branch: str = "master",
) -> FetchResult:
    """
    Clone a repository into raw storage, or hard-reset an existing clone.

    Args:
        repo: Repository name.
        username: Owner of the hosted repository.
        raw_dir: Raw storage root; the working copy lives in raw_dir/repo.
        base_url: Script host URL.
        branch: Remote branch the working copy is reset to.

    Returns:
        FetchResult: Fetch outcome.
    """
    clone_path = os.path.join(raw_dir, repo)
    os.makedirs(raw_dir, exist_ok=True)

    if os.path.isdir(os.path.join(clone_path, ".git")):
        action = "update"
        commands = [
            ["git", "-C", clone_path, "fetch", "--all"],
            ["git", "-C", clone_path, "reset", "--hard", f"origin/{branch}"],
        ]
        logger.info(f"Pulling latest changes: {repo}")
    else:
        action = "clone"
        commands = [["git", "clone", build_repo_url(base_url, username, repo), clone_path]]
        logger.info(f"Cloning: {repo}")

    for cmd in commands:
        try:
            _run(cmd)
        except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            msg = _describe(e)
            logger.error(f"Failed to fetch {repo}: {msg}")
            return FetchResult(repo=repo, ok=False, action=action, error=msg)

    logger.info(f"Fetched: {repo}")
    return FetchResult(repo=repo, ok=True, action=action)


def fetch_repositories(
        repos: List[str],
        username: str,
        raw_dir: str,
        base_url: str,
        branch: str = "master",
) -> List[FetchResult]:
    """Fetch every repository in order and collect the individual outcomes."""
    return [fetch_repository(r, username, raw_dir, base_url, branch) for r in repos]


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _run(cmd: List[str]) -> subprocess.CompletedProcess[str]:
    """Run a command with captured text output, raising on non-zero exit."""
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=True,
        timeout=GIT_TIMEOUT_SECONDS,
    )


def _describe(error: Exception) -> str:
    """Extract the most useful message from a subprocess failure."""
    if isinstance(error, subprocess.CalledProcessError):
        detail = (error.stderr or error.stdout or "").strip()
        return detail or f"exit status {error.returncode}"
    return str(error)
