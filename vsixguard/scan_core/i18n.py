"""Message-key translation service."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from vsixguard.scan_core.config import DEFAULT_LOCALE, DEFAULT_LOCALES_DIR, ENV_LOCALE

LOGGER = logging.getLogger("vsixguard")


def detect_locale(cli_locale: Optional[str] = None) -> str:
    """Language code from the CLI value, VSIXGUARD_LOCALE, LANG, or the default."""
    for candidate in (cli_locale, os.environ.get(ENV_LOCALE), os.environ.get("LANG")):
        if not candidate:
            continue
        # "de-DE", "de_DE.UTF-8" -> "de"
        code = candidate.split(".")[0].replace("_", "-").split("-")[0].lower()
        if code and code not in ("c", "posix"):
            return code
    return DEFAULT_LOCALE


class Translator:
    """Resolve message keys to display text for one locale.

    Built once at startup and handed to whatever renders text. Unknown keys
    come back unchanged.
    """

    def __init__(self, translations: Optional[Mapping[str, str]] = None, locale: str = DEFAULT_LOCALE) -> None:
        self._translations: Dict[str, str] = dict(translations or {})
        self.locale = locale

    @classmethod
    def load(cls, locale: Optional[str] = None, locales_dir: Optional[Path] = None) -> "Translator":
        """Load ``<locale>.json`` from locales_dir, falling back to English."""
        directory = Path(locales_dir) if locales_dir else DEFAULT_LOCALES_DIR
        code = detect_locale(locale)

        path = directory / f"{code}.json"
        if not path.is_file():
            LOGGER.debug("Locale file %s not found; falling back to %s", path, DEFAULT_LOCALE)
            code = DEFAULT_LOCALE
            path = directory / f"{DEFAULT_LOCALE}.json"
        if not path.is_file():
            LOGGER.warning("No locale table found in %s; showing message keys", directory)
            return cls({}, code)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to load locale table %s: %s", path, exc)
            return cls({}, code)
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring locale table %s: expected a JSON object", path)
            return cls({}, code)
        return cls({str(key): str(value) for key, value in data.items()}, code)

    def has(self, key: str) -> bool:
        return key in self._translations

    def t(self, key: str, *args: object) -> str:
        """Translate key, replacing {0}, {1}, ... with args."""
        text = self._translations.get(key) or key
        for index, arg in enumerate(args):
            text = text.replace(f"{{{index}}}", str(arg))
        return text

    __call__ = t
