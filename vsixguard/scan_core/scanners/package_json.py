"""Bundle manifest (extension/package.json) checks."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from vsixguard.scan_core.config import (
    BLOCKED_DEPENDENCIES,
    DEPENDENCY_MESSAGE,
    DEPENDENCY_SECTIONS,
    MANIFEST_RELATIVE_PATH,
)
from vsixguard.scan_core.models import Issue, Severity
from vsixguard.scan_core.utils import load_json


def read_manifest(extracted_root: Path) -> Optional[Dict[str, object]]:
    """Return the parsed bundle manifest, or None when missing or invalid."""
    return load_json(extracted_root / MANIFEST_RELATIVE_PATH)


def manifest_display_name(manifest: Optional[Dict[str, object]]) -> Optional[str]:
    if not manifest:
        return None
    for key in ("displayName", "name"):
        value = manifest.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def declared_dependencies(manifest: Dict[str, object]) -> Set[str]:
    """Union of runtime and development dependency names."""
    names: Set[str] = set()
    for section in DEPENDENCY_SECTIONS:
        block = manifest.get(section)
        if isinstance(block, dict):
            names.update(str(name) for name in block)
    return names


def check_manifest(
    extracted_root: Path,
    blocked: Iterable[str] = BLOCKED_DEPENDENCIES,
) -> List[Issue]:
    """Report blocked dependencies declared by the bundle manifest."""
    manifest = read_manifest(extracted_root)
    if manifest is None:
        return []

    declared = declared_dependencies(manifest)
    return [
        Issue(
            severity=Severity.MEDIUM,
            message_key=DEPENDENCY_MESSAGE,
            details=dependency,
        )
        for dependency in blocked
        if dependency in declared
    ]
