import json
import logging
import zipfile
from pathlib import Path
from typing import Callable, Dict, Optional, Union

import pytest

from vsixguard.scan_core.i18n import Translator
from vsixguard.scan_core.reporting.formatters import Colors, Emojis

VSIX_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<PackageManifest Version="2.0.0" xmlns="http://schemas.microsoft.com/developer/vsx-schema/2011">
  <Metadata><Identity Id="fixture" Version="1.0.0" Publisher="tester"/></Metadata>
</PackageManifest>
"""

BundleFactory = Callable[..., Path]


def _write_bundle(
    path: Path,
    files: Optional[Dict[str, Union[str, bytes]]] = None,
    manifest: Optional[dict] = None,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("extension.vsixmanifest", VSIX_MANIFEST)
        if manifest is not None:
            zf.writestr("extension/package.json", json.dumps(manifest, indent=2))
        for name, content in (files or {}).items():
            zf.writestr(name, content)
    return path


@pytest.fixture
def make_bundle(tmp_path: Path) -> BundleFactory:
    """Build a .vsix bundle under tmp_path/bundles."""
    def factory(
        files: Optional[Dict[str, Union[str, bytes]]] = None,
        manifest: Optional[dict] = None,
        name: str = "fixture-1.0.0.vsix",
    ) -> Path:
        return _write_bundle(tmp_path / "bundles" / name, files, manifest)

    return factory


@pytest.fixture
def check_dir(tmp_path: Path) -> Path:
    return tmp_path / "check"


@pytest.fixture
def translator() -> Translator:
    return Translator.load("en")


@pytest.fixture(autouse=True)
def plain_output():
    """Reports are asserted without ANSI colors or emojis unless a test opts in."""
    Colors.disable()
    Emojis.disable()
    yield
    Colors.enable()
    Emojis.enable()


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("vsixguard")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
