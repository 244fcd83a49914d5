import zipfile
from pathlib import Path

import pytest

from vsixguard.scan_core import extractor
from vsixguard.scan_core.errors import ExtractionError
from vsixguard.scan_core.extractor import BUILTIN_EXTRACTOR, extract_archive


def _zip(path: Path, members: dict) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def test_extract_archive_unpacks_into_new_directory(tmp_path: Path) -> None:
    archive = _zip(tmp_path / "sample.vsix", {"extension/package.json": "{}", "extension/out/main.js": "1;"})
    target = tmp_path / "out" / "nested"

    extract_archive(archive, target)

    assert (target / "extension" / "package.json").read_text(encoding="utf-8") == "{}"
    assert (target / "extension" / "out" / "main.js").is_file()


def test_missing_tools_fall_back_to_builtin_reader(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(
        extractor,
        "EXTRACT_COMMANDS",
        [("ghost", ["vsixguard-no-such-extractor", "{archive}", "{target}"])],
    )
    archive = _zip(tmp_path / "sample.vsix", {"extension/out/main.js": "1;"})

    used = extract_archive(archive, tmp_path / "out")

    assert used == BUILTIN_EXTRACTOR
    assert (tmp_path / "out" / "extension" / "out" / "main.js").is_file()


def test_builtin_reader_refuses_members_outside_target(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(extractor, "EXTRACT_COMMANDS", [])
    archive = _zip(tmp_path / "slip.vsix", {"../escaped.js": "eval(x);", "extension/ok.js": "1;"})

    extract_archive(archive, tmp_path / "out")

    assert not (tmp_path / "escaped.js").exists()
    assert (tmp_path / "out" / "extension" / "ok.js").is_file()


def test_unreadable_archive_raises_extraction_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(extractor, "EXTRACT_COMMANDS", [])
    archive = tmp_path / "broken.vsix"
    archive.write_bytes(b"this is not an archive")

    with pytest.raises(ExtractionError):
        extract_archive(archive, tmp_path / "out")


def test_valid_archive_fails_when_every_extractor_fails(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(extractor, "EXTRACT_COMMANDS", [])
    monkeypatch.setattr(extractor, "_extract_with_zipfile", lambda archive, target: False)
    archive = _zip(tmp_path / "sample.vsix", {"extension/out/main.js": "1;"})

    with pytest.raises(ExtractionError):
        extract_archive(archive, tmp_path / "out")
