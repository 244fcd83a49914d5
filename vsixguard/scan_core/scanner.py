"""Scan orchestrator: stage, extract, scan and clean up one bundle."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence

from vsixguard.scan_core.config import (
    BLOCKED_DEPENDENCIES,
    BUNDLE_SUFFIX,
    EXTRACTED_DIRNAME,
    MAX_BUNDLE_SIZE,
    UNINSTALL_RELATIVE_PATH,
)
from vsixguard.scan_core.errors import InvalidBundleError
from vsixguard.scan_core.extractor import extract_archive
from vsixguard.scan_core.i18n import Translator
from vsixguard.scan_core.models import ExtensionInfo, Issue, Rule, ScanResult
from vsixguard.scan_core.reporting.user_friendly import format_user_friendly
from vsixguard.scan_core.scanners.package_json import check_manifest, manifest_display_name, read_manifest
from vsixguard.scan_core.scanners.patterns import DEFAULT_ALLOWED_PATHS, DEFAULT_RULES, scan_extracted_code
from vsixguard.scan_core.scanners.size import check_bundle_size
from vsixguard.scan_core.utils import file_size, resolve_check_dir, scratch_directory

LOGGER = logging.getLogger("vsixguard")


def validate_bundle_path(bundle_path: Path) -> Path:
    """Reject anything that is not an existing .vsix file."""
    path = Path(bundle_path).expanduser()
    if not path.is_file() or path.suffix.lower() != BUNDLE_SUFFIX:
        raise InvalidBundleError(f"Not a {BUNDLE_SUFFIX} bundle: {path}")
    return path


class BundleScanner:
    """Screens .vsix bundles before installation.

    Every call stages the bundle in its own scratch directory below
    ``check_dir`` and removes that directory before returning, whether the
    scan succeeded or not. Concurrent scans never share a directory.
    """

    def __init__(
        self,
        check_dir: Optional[Path] = None,
        translator: Optional[Translator] = None,
        rules: Optional[Sequence[Rule]] = None,
        allowed_paths: Optional[Sequence[Pattern[str]]] = None,
        blocked_dependencies: Optional[Iterable[str]] = None,
        max_bundle_size: int = MAX_BUNDLE_SIZE,
    ) -> None:
        self.check_dir = Path(check_dir) if check_dir else resolve_check_dir()
        self.translator = translator or Translator.load()
        self.rules = list(rules) if rules is not None else DEFAULT_RULES
        self.allowed_paths = list(allowed_paths) if allowed_paths is not None else DEFAULT_ALLOWED_PATHS
        self.blocked_dependencies = (
            tuple(blocked_dependencies) if blocked_dependencies is not None else BLOCKED_DEPENDENCIES
        )
        self.max_bundle_size = max_bundle_size

    def _stage(self, bundle: Path, scratch: Path) -> Path:
        """Copy the bundle into scratch and unpack it; returns the extraction root."""
        staged = scratch / bundle.name
        shutil.copyfile(bundle, staged)
        extracted = scratch / EXTRACTED_DIRNAME
        extract_archive(staged, extracted)
        return extracted

    def scan_bundle(self, bundle_path: Path) -> ScanResult:
        """Scan a bundle and return its findings.

        Raises InvalidBundleError for a bad path and ExtractionError when the
        archive cannot be unpacked; the bundle must then be treated as not
        analysed, never as safe.
        """
        bundle = validate_bundle_path(bundle_path)
        LOGGER.info("Scanning %s", bundle)

        with scratch_directory(self.check_dir) as scratch:
            extracted = self._stage(bundle, scratch)

            issues: List[Issue] = scan_extracted_code(extracted, self.rules, self.allowed_paths)
            issues.extend(check_manifest(extracted, self.blocked_dependencies))

            size_issue = check_bundle_size(bundle, self.max_bundle_size)
            if size_issue:
                issues.append(size_issue)

            manifest = read_manifest(extracted)
            extension_name = manifest_display_name(manifest)
            has_uninstall_config = (extracted / UNINSTALL_RELATIVE_PATH).is_file()

        result = ScanResult.from_issues(issues, extension_name, has_uninstall_config)
        if result.safe:
            LOGGER.info("No security issues found in %s", bundle.name)
        else:
            LOGGER.warning("%s issues found in %s", len(result.issues), bundle.name)
            for issue in result.issues:
                LOGGER.debug("[%s] %s %s", issue.severity.value, issue.message_key, issue.file or issue.details or "")
        return result

    def extract_extension_info(self, bundle_path: Path) -> ExtensionInfo:
        """Read display metadata from a bundle's manifest."""
        bundle = validate_bundle_path(bundle_path)
        with scratch_directory(self.check_dir) as scratch:
            extracted = self._stage(bundle, scratch)
            manifest = read_manifest(extracted)

        if manifest is None:
            raise InvalidBundleError(f"{bundle.name} has no readable extension/package.json")

        return ExtensionInfo(
            name=manifest_display_name(manifest) or bundle.stem,
            version=str(manifest.get("version") or ""),
            publisher=str(manifest.get("publisher") or ""),
            description=str(manifest.get("description") or ""),
            size=file_size(bundle),
        )

    def format_report(self, result: ScanResult, extension_name: Optional[str] = None, color: bool = False) -> str:
        """Human-readable report using this scanner's translator; plain text unless ``color``."""
        name = extension_name or result.extension_name or "Extension"
        return format_user_friendly(result, self.translator, name, color)
