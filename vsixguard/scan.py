#!/usr/bin/env python3
"""Security pre-install check for .vsix extension bundles.

Unpacks a bundle into a private scratch directory, looks for risky code
patterns, obfuscation, high-risk dependencies and oversized packages, and
prints a report for the person deciding whether to install it.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from vsixguard.scan_core.errors import ExtractionError, InvalidBundleError
from vsixguard.scan_core.i18n import Translator
from vsixguard.scan_core.models import ExtensionInfo, ScanResult
from vsixguard.scan_core.reporting.formatters import ColoredFormatter, Colors, Emojis
from vsixguard.scan_core.reporting.install_dialog import ACTIONS, format_install_message
from vsixguard.scan_core.reporting.json_output import print_json_output
from vsixguard.scan_core.reporting.user_friendly import format_plain
from vsixguard.scan_core.scanner import BundleScanner
from vsixguard.scan_core.scanners.patterns import load_allowed_paths
from vsixguard.scan_core.utils import file_size, resolve_check_dir

LOGGER = logging.getLogger("vsixguard")


def setup_logging(log_dir: Path, level: str) -> Path:
    """Initialise console and file logging for the current execution."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"vsixguard_scan_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    for handler in list(LOGGER.handlers):
        handler.close()
    LOGGER.handlers.clear()
    LOGGER.setLevel(numeric_level)
    LOGGER.propagate = False

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    LOGGER.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ColoredFormatter("%(levelname)s: %(message)s"))
    LOGGER.addHandler(console_handler)

    return log_path


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check a .vsix extension bundle for risky code before installing it.")
    parser.add_argument("bundle", help="Path to the .vsix bundle to check.")
    parser.add_argument(
        "--format",
        choices=["dialog", "report", "compact", "json"],
        default="dialog",
        help=(
            "Output style: full install prompt (dialog), grouped security report (report), "
            "one line per finding (compact) or JSON (default: dialog)."
        ),
    )
    parser.add_argument(
        "--action",
        choices=list(ACTIONS),
        default="install",
        help="Install action shown in the dialog header (default: install).",
    )
    parser.add_argument(
        "--current-version",
        help="Installed version, shown for upgrade/downgrade/reinstall prompts.",
    )
    parser.add_argument(
        "--check-dir",
        help="Scratch workspace for staged bundles. Overrides $VSIXGUARD_CHECK_DIR (default: ~/.extensionmanager/check).",
    )
    parser.add_argument(
        "--locale",
        help="Report language, e.g. 'de'. Overrides $VSIXGUARD_LOCALE and $LANG (default: en).",
    )
    parser.add_argument("--locales-dir", help="Directory holding <locale>.json message tables.")
    parser.add_argument(
        "--allow-path",
        action="append",
        default=[],
        metavar="REGEX",
        help="Extra allow-listed directory pattern for home-directory access; repeatable.",
    )
    parser.add_argument(
        "--no-generic-allowlist",
        action="store_true",
        help="Do not allow-list every '.<name>plus/ide/manager/helper' directory.",
    )
    parser.add_argument(
        "--max-size-mb",
        type=float,
        default=50.0,
        help="Report bundles larger than this many MB (default: 50).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    parser.add_argument("--no-emoji", action="store_true", help="Disable emoji icons.")
    parser.add_argument(
        "--log-dir",
        default="logs",
        help="Directory where timestamped scan logs are written (default: logs).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console/log verbosity (default: INFO).",
    )
    return parser.parse_args(argv)


def configure_output(args: argparse.Namespace) -> None:
    if args.no_color or args.format == "json" or not Colors.supports_color():
        Colors.disable()
    else:
        Colors.enable()
    if args.no_emoji or not Emojis.supports_emoji():
        Emojis.disable()
    else:
        Emojis.enable()


def load_extension_info(scanner: BundleScanner, bundle: Path, result: ScanResult) -> ExtensionInfo:
    """Manifest metadata for the prompt; a bundle without one still gets a prompt."""
    try:
        return scanner.extract_extension_info(bundle)
    except (InvalidBundleError, ExtractionError) as exc:
        LOGGER.warning("Extension metadata unavailable: %s", exc)
        return ExtensionInfo(name=result.extension_name or bundle.stem, version="", size=file_size(bundle))


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_output(args)

    log_dir = Path(args.log_dir).expanduser().resolve()
    log_path = setup_logging(log_dir, args.log_level)
    LOGGER.info("Detailed execution log: %s", log_path)

    translator = Translator.load(args.locale, Path(args.locales_dir) if args.locales_dir else None)
    LOGGER.debug("Using locale %s", translator.locale)

    scanner = BundleScanner(
        check_dir=resolve_check_dir(args.check_dir),
        translator=translator,
        allowed_paths=load_allowed_paths(args.allow_path, include_generic=not args.no_generic_allowlist),
        max_bundle_size=int(args.max_size_mb * 1024 * 1024),
    )

    bundle = Path(args.bundle)
    try:
        result = scanner.scan_bundle(bundle)
    except InvalidBundleError as exc:
        LOGGER.error("%s", exc)
        return 2
    except ExtractionError as exc:
        LOGGER.error("Bundle could not be analysed: %s", exc)
        return 2

    color = Colors.is_enabled()
    if args.format == "json":
        print_json_output(result)
    elif args.format == "compact":
        print(format_plain(result, translator, color))
    elif args.format == "report":
        print(scanner.format_report(result, color=color))
    else:
        info = load_extension_info(scanner, bundle, result)
        print(format_install_message(info, result, translator, args.action, args.current_version, color))

    if not result.safe:
        LOGGER.warning("Findings recorded in %s", log_path)
        return 1
    LOGGER.info("Scan completed successfully. Log retained at %s", log_path)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
