"""Unpack .vsix bundles into a scratch directory."""
from __future__ import annotations

import logging
import shutil
import subprocess
import zipfile
from pathlib import Path
from typing import List, Tuple

from vsixguard.scan_core.config import EXTRACT_COMMANDS, EXTRACT_TIMEOUT
from vsixguard.scan_core.errors import ExtractionError
from vsixguard.scan_core.utils import ensure_directory

LOGGER = logging.getLogger("vsixguard")

BUILTIN_EXTRACTOR = "zipfile"


def _run_extract_command(name: str, template: List[str], archive: Path, target: Path) -> bool:
    """Run one external extraction tool; True on a zero exit status."""
    cmd = [part.format(archive=archive, target=target) for part in template]
    try:
        result = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            timeout=EXTRACT_TIMEOUT,
        )
    except FileNotFoundError:
        LOGGER.debug("%s executable not found; trying next extractor.", name)
        return False
    except subprocess.TimeoutExpired:
        LOGGER.warning("%s timed out after %ss extracting %s", name, EXTRACT_TIMEOUT, archive.name)
        return False
    if result.returncode != 0:
        LOGGER.debug("%s exited with status %s: %s", name, result.returncode, result.stderr.strip())
        return False
    return True


def _is_within_directory(base_dir: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(base_dir.resolve())
        return True
    except ValueError:
        return False


def _extract_with_zipfile(archive: Path, target: Path) -> bool:
    """Extract with the built-in zip reader, refusing members outside target."""
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            for member in zf.infolist():
                name = member.filename.replace("\\", "/").lstrip("/")
                if not name:
                    continue
                out_path = target / name
                if not _is_within_directory(target, out_path):
                    LOGGER.warning("Skipping archive member outside target: %s", member.filename)
                    continue
                if member.is_dir():
                    out_path.mkdir(parents=True, exist_ok=True)
                    continue
                out_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member, "r") as src, open(out_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (OSError, zipfile.BadZipFile) as exc:
        LOGGER.debug("Built-in zip extraction failed: %s", exc)
        return False
    return True


def extract_archive(archive_path: Path, target_dir: Path) -> str:
    """Unpack a zip-compatible archive into target_dir.

    External tools from ``EXTRACT_COMMANDS`` are tried first, then the
    built-in zip reader. Nothing from the archive is ever executed.

    Returns the name of the extractor that succeeded.
    Raises ExtractionError when every extractor fails.
    """
    archive = Path(archive_path)
    target = ensure_directory(Path(target_dir))

    attempts: List[Tuple[str, bool]] = []
    for name, template in EXTRACT_COMMANDS:
        ok = _run_extract_command(name, template, archive, target)
        attempts.append((name, ok))
        if ok:
            LOGGER.debug("Extracted %s with %s", archive.name, name)
            return name

    if _extract_with_zipfile(archive, target):
        LOGGER.debug("Extracted %s with %s", archive.name, BUILTIN_EXTRACTOR)
        return BUILTIN_EXTRACTOR

    tried = ", ".join([name for name, _ok in attempts] + [BUILTIN_EXTRACTOR])
    LOGGER.error("Could not extract %s (tried %s)", archive.name, tried)
    raise ExtractionError(f"Could not extract {archive.name}: no extractor succeeded ({tried})")
