"""Bundle size check."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from vsixguard.scan_core.config import LARGE_FILE_MESSAGE, MAX_BUNDLE_SIZE
from vsixguard.scan_core.models import Issue, Severity

LOGGER = logging.getLogger("vsixguard")


def check_bundle_size(bundle_path: Path, limit: int = MAX_BUNDLE_SIZE) -> Optional[Issue]:
    """Flag bundles strictly larger than ``limit`` bytes."""
    try:
        size = bundle_path.stat().st_size
    except OSError as exc:
        LOGGER.debug("Unable to stat bundle %s: %s", bundle_path, exc)
        return None
    if size <= limit:
        return None
    return Issue(
        severity=Severity.LOW,
        message_key=LARGE_FILE_MESSAGE,
        details=f"{size / (1024 * 1024):.1f} MB",
    )
