"""Suspicious code pattern detection in extracted JavaScript sources."""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Pattern, Sequence

from vsixguard.scan_core.config import (
    ALLOWED_PATH_PATTERNS,
    GENERIC_ALLOWED_PATH_PATTERN,
    MAX_MATCH_LENGTH,
    OBFUSCATED_MESSAGE,
    OBFUSCATION_INDICATORS,
    OBFUSCATION_THRESHOLD,
    PATH_ACCESS_MESSAGE,
    SOURCE_FILE_EXTENSION,
    SUSPICIOUS_CODE_PATTERNS,
    VENDOR_DIR_NAME,
)
from vsixguard.scan_core.models import Issue, Rule, Severity
from vsixguard.scan_core.utils import relative_posix

LOGGER = logging.getLogger("vsixguard")

_OBFUSCATION_REGEXES = [re.compile(pattern) for pattern in OBFUSCATION_INDICATORS]


def load_rules() -> List[Rule]:
    """Compile the rule catalog in configuration order."""
    return [
        Rule(
            pattern=re.compile(entry["pattern"]),
            message_key=entry["message"],
            severity=Severity(entry["severity"]),
        )
        for entry in SUSPICIOUS_CODE_PATTERNS
    ]


def load_allowed_paths(extra: Sequence[str] = (), include_generic: bool = True) -> List[Pattern[str]]:
    """Compile the path allow-list, optionally extended by the caller."""
    patterns = list(ALLOWED_PATH_PATTERNS)
    if include_generic:
        patterns.append(GENERIC_ALLOWED_PATH_PATTERN)
    patterns.extend(extra)
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


DEFAULT_RULES: List[Rule] = load_rules()
DEFAULT_ALLOWED_PATHS: List[Pattern[str]] = load_allowed_paths()


def is_allowed_path(match: str, allowed_paths: Sequence[Pattern[str]] = DEFAULT_ALLOWED_PATHS) -> bool:
    """Check whether a path-access match points at an expected directory."""
    return any(allowed.search(match) for allowed in allowed_paths)


def count_obfuscation_indicators(content: str) -> int:
    return sum(1 for indicator in _OBFUSCATION_REGEXES if indicator.search(content))


def is_obfuscated(content: str) -> bool:
    """Heuristic: at least two independent obfuscation indicators.

    A single indicator is common in ordinary minified code, so it is not
    enough on its own. This is a hint, not proof.
    """
    return count_obfuscation_indicators(content) >= OBFUSCATION_THRESHOLD


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield source files below root in a stable order, skipping vendored code."""
    def onerror(exc: OSError) -> None:
        LOGGER.warning("Unable to access directory %s: %s", exc.filename or root, exc)

    for dirpath, dirnames, filenames in os.walk(root, topdown=True, onerror=onerror, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if d != VENDOR_DIR_NAME)
        for filename in sorted(filenames):
            if not filename.endswith(SOURCE_FILE_EXTENSION):
                continue
            path = Path(dirpath) / filename
            if path.is_symlink():
                LOGGER.debug("Skipping symlinked source file %s", path)
                continue
            yield path


def scan_content(
    content: str,
    relative_path: Optional[str] = None,
    rules: Sequence[Rule] = DEFAULT_RULES,
    allowed_paths: Sequence[Pattern[str]] = DEFAULT_ALLOWED_PATHS,
) -> List[Issue]:
    """Apply every rule and the obfuscation heuristic to one file's text."""
    issues: List[Issue] = []
    for rule in rules:
        found = rule.pattern.search(content)
        if not found:
            continue
        matched = found.group(0)
        details = None
        if rule.message_key == PATH_ACCESS_MESSAGE:
            if is_allowed_path(matched, allowed_paths):
                LOGGER.debug("Allow-listed path access in %s", relative_path)
                continue
            # sensitive directory is the last group of the match, lost on truncation
            if found.lastindex:
                details = f"~/{found.group(found.lastindex)}"
        issues.append(
            Issue(
                severity=rule.severity,
                message_key=rule.message_key,
                file=relative_path,
                match=matched[:MAX_MATCH_LENGTH],
                details=details,
                full_content=content,
            )
        )

    if is_obfuscated(content):
        issues.append(
            Issue(
                severity=Severity.HIGH,
                message_key=OBFUSCATED_MESSAGE,
                file=relative_path,
            )
        )
    return issues


def scan_file_for_patterns(
    file_path: Path,
    root: Path,
    rules: Sequence[Rule] = DEFAULT_RULES,
    allowed_paths: Sequence[Pattern[str]] = DEFAULT_ALLOWED_PATHS,
) -> List[Issue]:
    """Scan one source file; unreadable files yield no issues."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.debug("Unable to read file %s: %s", file_path, exc)
        return []
    return scan_content(content, relative_posix(file_path, root), rules, allowed_paths)


def scan_extracted_code(
    root: Path,
    rules: Sequence[Rule] = DEFAULT_RULES,
    allowed_paths: Sequence[Pattern[str]] = DEFAULT_ALLOWED_PATHS,
) -> List[Issue]:
    """Scan every source file under an extracted bundle."""
    issues: List[Issue] = []
    scanned = 0
    for file_path in iter_source_files(root):
        scanned += 1
        issues.extend(scan_file_for_patterns(file_path, root, rules, allowed_paths))
    LOGGER.debug("Scanned %s source files, %s pattern issues", scanned, len(issues))
    return issues
