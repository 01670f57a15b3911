from __future__ import annotations

"""
Caller Script Deployment.

Places the entry (caller) script next to the runner as
'<scripts_dir>/<name><ext>' so it can be executed against the module tree.
"""

import logging
import os
import shutil
from typing import Optional

from geestager.domain.constants import CANONICAL_EXTENSION

logger = logging.getLogger(__name__)


def update_caller_script(
        entry_file: str,
        scripts_dir: str,
        extension: str = CANONICAL_EXTENSION,
) -> Optional[str]:
    """
    Copy the entry script into the scripts directory.

    Args:
        entry_file: Source caller script in raw storage.
        scripts_dir: Directory of runnable scripts.
        extension: Canonical script suffix added when missing.

    Returns:
        Optional[str]: Written path, or None if the copy did not happen.
    """
    if not os.path.isfile(entry_file):
        logger.warning(f"Caller not found: {entry_file}")
        return None

    name = os.path.basename(entry_file)
    if not name.endswith(extension):
        name += extension
    dest = os.path.join(scripts_dir, name)

    try:
        os.makedirs(scripts_dir, exist_ok=True)
        shutil.copyfile(entry_file, dest)
    except OSError as e:
        logger.warning(f"Failed to update caller script {dest}: {e}")
        return None

    logger.info(f"Updated caller script: {dest}")
    return dest
