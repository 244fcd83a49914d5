"""Severity-grouped security report for install confirmation prompts."""
from __future__ import annotations

import re
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Set

from vsixguard.scan_core.config import (
    DELETED_PATH_PATTERN,
    FILE_DELETE_MESSAGE,
    MIN_DELETED_DIR_LENGTH,
    PATH_ACCESS_MESSAGE,
    SENSITIVE_DIRECTORIES,
)
from vsixguard.scan_core.i18n import Translator
from vsixguard.scan_core.models import Issue, ScanResult, Severity
from vsixguard.scan_core.reporting.formatters import SEVERITY_COLORS, SEVERITY_EMOJIS, Colors, Emojis

_DELETED_PATH_RE = re.compile(DELETED_PATH_PATTERN)
_SENSITIVE_PATH_RE = re.compile(r"['\"](" + "|".join(SENSITIVE_DIRECTORIES) + ")")


def describe_message(message_key: str, translator: Translator) -> str:
    """Long description for a message key, falling back to its short text."""
    desc_key = message_key.replace("security.", "security.desc.", 1)
    if translator.has(desc_key):
        return translator.t(desc_key)
    return translator.t(message_key)


def sensitive_path(match: Optional[str]) -> Optional[str]:
    """The sensitive home directory named in a path-access match."""
    if not match:
        return None
    found = _SENSITIVE_PATH_RE.findall(match)
    if not found:
        return None
    return f"~/{found[-1]}"


def extract_deleted_paths(content: Optional[str]) -> Set[str]:
    """Quoted dot-directory names in file content, as ``~/name``."""
    paths: Set[str] = set()
    if not content:
        return paths
    for found in _DELETED_PATH_RE.finditer(content):
        dir_name = found.group(1)[1:]
        if len(dir_name) >= MIN_DELETED_DIR_LENGTH:
            paths.add(f"~/{dir_name}")
    return paths


def issue_label(issue: Issue, translator: Translator) -> str:
    """One display line for an issue, with inline path or details."""
    label = describe_message(issue.message_key, translator)
    if issue.message_key == PATH_ACCESS_MESSAGE:
        path = issue.details or sensitive_path(issue.match)
        if path:
            label += f": {path}"
    elif issue.details:
        label += f" ({issue.details})"
    return label


def group_issues(issues: Sequence[Issue]) -> Dict[str, List[Issue]]:
    """Group issues by message key, keeping first-seen order."""
    grouped: Dict[str, List[Issue]] = OrderedDict()
    for issue in issues:
        grouped.setdefault(issue.message_key, []).append(issue)
    return grouped


def group_sub_paths(group: Sequence[Issue]) -> List[str]:
    """Sorted union of deleted paths across a group of file-deletion issues."""
    paths: Set[str] = set()
    for issue in group:
        if issue.message_key == FILE_DELETE_MESSAGE:
            paths.update(extract_deleted_paths(issue.full_content))
    return sorted(paths)


def severity_header(severity: Severity, translator: Translator, color: bool = False) -> str:
    text = Emojis.prefix(SEVERITY_EMOJIS[severity], translator.t(f"security.severity.{severity.value}"))
    return Colors.colorize(text, SEVERITY_COLORS[severity]) if color else text


def format_user_friendly(
    result: ScanResult,
    translator: Translator,
    extension_name: str = "Extension",
    color: bool = False,
) -> str:
    """Render a result as a grouped, severity-ordered report.

    Issues sharing a message key collapse into one line; file-deletion
    findings list every targeted directory beneath that line. Severity
    headers carry ANSI colors only when ``color`` is set.
    """
    if result.safe:
        return Emojis.prefix(Emojis.CLEAN, translator.t("security.noIssues"))

    lines: List[str] = [
        translator.t("security.report.title", extension_name),
        translator.t("security.severity.legend"),
        "",
    ]

    for severity in Severity.ordered():
        issues = result.issues_with(severity)
        if not issues:
            continue
        lines.append(severity_header(severity, translator, color))
        for group in group_issues(issues).values():
            lines.append(f"   • {issue_label(group[0], translator)}")
            for path in group_sub_paths(group):
                lines.append(f"     - {path}")
        lines.append("")

    return "\n".join(lines)


def format_plain(result: ScanResult, translator: Translator, color: bool = False) -> str:
    """Compact listing with per-severity counts and file locations."""
    if result.safe:
        return Emojis.prefix(Emojis.CLEAN, translator.t("security.noIssues"))

    lines: List[str] = [Emojis.prefix(Emojis.WARNING, translator.t("security.issuesDetected"))]
    for severity in Severity.ordered():
        issues = result.issues_with(severity)
        if not issues:
            continue
        lines.append(f"{severity_header(severity, translator, color)} ({len(issues)}):")
        for issue in issues:
            text = translator.t(issue.message_key)
            if issue.file:
                text += " " + translator.t("security.inFile", issue.file)
            lines.append(f"  - {text}")
    return "\n".join(lines)
