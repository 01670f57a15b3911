from __future__ import annotations

"""
Source Fetch Stage.

Brings the raw storage up to date with the hosted repositories before the
dependency analysis. Individual repository failures are tolerated; a
missing git executable is not.
"""

import logging
from typing import List, Optional, Tuple

from geestager.domain.config import StagingConfig
from geestager.infra.vcs import (
    FetchResult,
    check_git_installed,
    configure_git_credentials,
    fetch_repositories,
    get_active_gcloud_account,
)

logger = logging.getLogger(__name__)


def fetch_sources(staging: StagingConfig) -> Tuple[Optional[str], List[FetchResult]]:
    """
    Clone or refresh every configured repository into raw storage.

    Args:
        staging: Run configuration.

    Returns:
        Tuple[Optional[str], List[FetchResult]]: Fatal error (or None) and
        the per-repository outcomes.
    """
    if not check_git_installed():
        return "Git is not installed or not on PATH.", []

    account = get_active_gcloud_account()
    if account:
        logger.info(f"gcloud authenticated: {account}")
    else:
        logger.warning("gcloud not authenticated. Run: gcloud auth login")

    configure_git_credentials(staging.base_url)

    logger.info(f"Fetching {len(staging.repos)} repositories to {staging.raw_repos_dir}")
    results = fetch_repositories(
        list(staging.repos),
        staging.username,
        staging.raw_repos_dir,
        staging.base_url,
        staging.branch,
    )

    failed = [r.repo for r in results if not r.ok]
    logger.info(f"Fetched: {len(results) - len(failed)}/{len(results)} repos")
    if failed:
        logger.error(f"Failed to fetch {len(failed)} repos: {', '.join(failed)}")

    return None, results
