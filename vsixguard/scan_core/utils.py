"""Utility functions for scanning operations."""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from vsixguard.scan_core.config import DEFAULT_CHECK_DIR, ENV_CHECK_DIR, SCRATCH_PREFIX

LOGGER = logging.getLogger("vsixguard")


def resolve_check_dir(cli_path: Optional[str] = None) -> Path:
    """Pick the scratch workspace: CLI value, environment, then default."""
    raw = cli_path or os.environ.get(ENV_CHECK_DIR)
    check_dir = Path(raw).expanduser() if raw else DEFAULT_CHECK_DIR
    if not check_dir.is_absolute():
        check_dir = check_dir.resolve()
    LOGGER.debug("Using check directory %s", check_dir)
    return check_dir


def ensure_directory(path: Path) -> Path:
    """Create a private directory if it does not exist yet."""
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


@contextmanager
def scratch_directory(check_dir: Path) -> Iterator[Path]:
    """Yield a unique scratch directory that is removed on exit."""
    ensure_directory(check_dir)
    scratch = Path(tempfile.mkdtemp(prefix=f"{SCRATCH_PREFIX}{time.time_ns()}-", dir=check_dir))
    try:
        yield scratch
    finally:
        remove_tree(scratch)


def remove_tree(path: Path) -> None:
    """Delete a directory tree, logging instead of raising."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as exc:
        LOGGER.warning("Unable to remove %s: %s", path, exc)


def load_json(path: Path) -> Optional[Dict[str, object]]:
    """Load a JSON object, returning None when missing or malformed."""
    if not path.is_file():
        LOGGER.debug("JSON file %s not found", path)
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.warning("Failed to read JSON from %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        LOGGER.warning("Ignoring %s: expected a JSON object", path)
        return None
    return data


def format_size(size: int) -> str:
    """Render a byte count as B, KB or MB."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def file_size(path: Path) -> str:
    """Human-readable size of a file, or "Unknown"."""
    try:
        return format_size(path.stat().st_size)
    except OSError as exc:
        LOGGER.debug("Unable to stat %s: %s", path, exc)
        return "Unknown"


def relative_posix(path: Path, root: Path) -> str:
    """Path relative to root with forward slashes."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
