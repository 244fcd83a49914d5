"""Install confirmation text: bundle metadata plus the security report."""
from __future__ import annotations

from typing import List, Optional

from vsixguard.scan_core.i18n import Translator
from vsixguard.scan_core.models import ExtensionInfo, ScanResult
from vsixguard.scan_core.reporting.formatters import Emojis
from vsixguard.scan_core.reporting.user_friendly import format_user_friendly

ACTIONS = ("install", "upgrade", "downgrade", "reinstall")

ACTION_EMOJIS = {
    "install": Emojis.PACKAGE,
    "upgrade": Emojis.UPGRADE,
    "downgrade": Emojis.DOWNGRADE,
    "reinstall": Emojis.REINSTALL,
}


def _version_line(action: str, current_version: Optional[str], new_version: str, translator: Translator) -> Optional[str]:
    if not current_version:
        return None
    if action == "upgrade":
        return translator.t("install.dialog.version", current_version, new_version)
    if action == "downgrade":
        transition = translator.t("install.dialog.version", current_version, new_version)
        return f"{transition} ({translator.t('install.dialog.olderVersion')})"
    if action == "reinstall":
        return f"{translator.t('info.version')} {current_version} ({translator.t('install.dialog.reinstall')})"
    return None


def format_install_message(
    info: ExtensionInfo,
    result: ScanResult,
    translator: Translator,
    action: str = "install",
    current_version: Optional[str] = None,
    color: bool = False,
) -> str:
    """Build the full confirmation prompt shown before installing a bundle."""
    if action not in ACTIONS:
        raise ValueError(f"Unknown install action: {action}")

    lines: List[str] = []
    action_text = translator.t(f"install.action.{action}")
    lines.append(Emojis.prefix(ACTION_EMOJIS[action], f"{info.name} {action_text}?"))
    lines.append("")

    version_line = _version_line(action, current_version, info.version, translator)
    if version_line:
        lines.append(version_line)
        lines.append("")

    lines.append(Emojis.prefix(Emojis.INFO, translator.t("install.dialog.header")))
    lines.append(f"   {translator.t('info.name')}: {info.name}")
    lines.append(f"   {translator.t('info.version')}: {info.version}")
    if info.publisher:
        lines.append(f"   {translator.t('info.publisher')}: {info.publisher}")
    if info.description:
        lines.append(f"   {translator.t('info.description')}: {info.description}")
    if info.size:
        lines.append(f"   {translator.t('info.size')}: {info.size}")
    lines.append("")

    if result.has_uninstall_config:
        uninstall = f"{translator.t('info.uninstallConfig')}: {translator.t('info.hasUninstallConfig')}"
        lines.append(Emojis.prefix(Emojis.CLEAN, uninstall))
        lines.append("")

    if result.safe:
        lines.append(Emojis.prefix(Emojis.CLEAN, translator.t("install.dialog.noPermissions")))
    else:
        lines.append(Emojis.prefix(Emojis.LOCK, translator.t("install.dialog.permissions")))
        lines.append(format_user_friendly(result, translator, info.name, color))

    return "\n".join(lines)
