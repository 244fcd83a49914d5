from pathlib import Path

import pytest

from vsixguard.scan_core.models import Severity
from vsixguard.scan_core.scanners import patterns
from vsixguard.scan_core.scanners.patterns import (
    count_obfuscation_indicators,
    is_allowed_path,
    is_obfuscated,
    iter_source_files,
    load_allowed_paths,
    scan_content,
    scan_extracted_code,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


RULE_CASES = [
    (
        "security.suspiciousPath",
        Severity.HIGH,
        "const key = path.join(os.homedir(), '.ssh', 'id_rsa');",
        "const key = path.join(os.homedir(), 'projects', 'id_rsa');",
    ),
    (
        "security.codeExecution",
        Severity.HIGH,
        "child_process.exec('ls -la');",
        "const listing = [];",
    ),
    (
        "security.evalFound",
        Severity.CRITICAL,
        "const total = eval('1 + 1');",
        "const total = 1 + 1;",
    ),
    (
        "security.dynamicFunction",
        Severity.CRITICAL,
        "const fn = Function('return process');",
        "const fn = () => process;",
    ),
    (
        "security.unknownNetwork",
        Severity.MEDIUM,
        "fetch('https://collector.example.com/upload');",
        "fetch('https://api.github.com/repos');",
    ),
    (
        "security.fileDelete",
        Severity.MEDIUM,
        "fs.unlinkSync(target);",
        "fs.readFileSync(target);",
    ),
    (
        "security.remoteRequire",
        Severity.CRITICAL,
        "const payload = require('https://cdn.npmjs.com/payload.js');",
        "const payload = require('./payload.js');",
    ),
]


@pytest.mark.parametrize(
    "message_key, severity, content, cleaned",
    RULE_CASES,
    ids=[case[0] for case in RULE_CASES],
)
def test_each_rule_triggers_independently(message_key, severity, content, cleaned) -> None:
    issues = scan_content(content, "extension/out/main.js")
    assert [(i.message_key, i.severity) for i in issues] == [(message_key, severity)]
    assert issues[0].file == "extension/out/main.js"
    assert issues[0].match and issues[0].match in content

    assert scan_content(cleaned, "extension/out/main.js") == []


def test_every_catalog_rule_has_a_case() -> None:
    assert {rule.message_key for rule in patterns.DEFAULT_RULES} == {case[0] for case in RULE_CASES}


def test_match_is_truncated_to_100_characters() -> None:
    content = "child_process.exec" + " " * 200 + "('x');"
    issues = scan_content(content)
    assert len(issues) == 1
    assert len(issues[0].match) == 100


def test_issues_follow_rule_order_within_a_file() -> None:
    content = "fs.rmSync(dir, { recursive: true });\nconst out = eval(code);\nchild_process.spawn('sh');"
    keys = [issue.message_key for issue in scan_content(content)]
    assert keys == ["security.codeExecution", "security.evalFound", "security.fileDelete"]


def test_trusted_domains_cover_subdomains_only() -> None:
    assert scan_content("get('https://raw.githubusercontent.com/a/b');") == []
    assert scan_content("get('https://downloads.arduino.cc/index.json');") == []
    flagged = scan_content("get('https://evil.io/?next=.github.');")
    assert [i.message_key for i in flagged] == ["security.unknownNetwork"]


def test_urls_in_regex_literals_and_attributes_are_ignored() -> None:
    assert scan_content("const re = /'https:\\/\\/x/;") == []
    assert scan_content('html += "<a href=\\"https://example.org\\">";') == []


def test_allow_listed_directory_suppresses_path_access() -> None:
    allowed = "const cfg = path.join(os.homedir(), '.vscode', 'Documents');"
    assert scan_content(allowed) == []

    flagged = scan_content("const cfg = path.join(os.homedir(), '.aws', 'credentials');")
    assert [(i.message_key, i.severity) for i in flagged] == [("security.suspiciousPath", Severity.HIGH)]


def test_generic_allow_list_entry_can_be_disabled() -> None:
    content = "const dir = path.join(os.homedir(), '.arduinoplus', 'Desktop');"
    assert scan_content(content) == []

    strict = load_allowed_paths(include_generic=False)
    issues = scan_content(content, allowed_paths=strict)
    assert [i.message_key for i in issues] == ["security.suspiciousPath"]


def test_extra_allow_list_entries() -> None:
    custom = load_allowed_paths([r"\.mytool"], include_generic=False)
    assert is_allowed_path("os.homedir(), '.mytool', 'Downloads", custom)
    assert not is_allowed_path("os.homedir(), 'Downloads", custom)


def test_obfuscation_needs_two_indicators() -> None:
    one = "var _0x1a2b3c = compute();"
    assert count_obfuscation_indicators(one) == 1
    assert not is_obfuscated(one)
    assert scan_content(one) == []

    two = "var _0x1a2b3c = '\\x68\\x69';"
    assert count_obfuscation_indicators(two) == 2
    issues = scan_content(two, "out/packed.js")
    assert [(i.message_key, i.severity, i.file) for i in issues] == [
        ("security.obfuscatedCode", Severity.HIGH, "out/packed.js")
    ]


def test_all_obfuscation_indicators_are_counted() -> None:
    content = "var _0xabcd = 1; s = '\\x41'; eval(atob('Zm9v')); obj['ab'];"
    assert count_obfuscation_indicators(content) == 4
    keys = [issue.message_key for issue in scan_content(content)]
    assert keys == ["security.evalFound", "security.obfuscatedCode"]


def test_iter_source_files_skips_vendor_directory(tmp_path: Path) -> None:
    _write(tmp_path / "extension" / "out" / "b.js", "")
    _write(tmp_path / "extension" / "out" / "a.js", "")
    _write(tmp_path / "extension" / "node_modules" / "dep" / "index.js", "")
    _write(tmp_path / "extension" / "README.md", "")

    found = [p.relative_to(tmp_path).as_posix() for p in iter_source_files(tmp_path)]
    assert found == ["extension/out/a.js", "extension/out/b.js"]


def test_pattern_only_in_vendor_directory_is_not_reported(tmp_path: Path) -> None:
    _write(tmp_path / "extension" / "node_modules" / "evil" / "index.js", "eval(payload);")
    _write(tmp_path / "extension" / "out" / "extension.js", "module.exports = {};")
    assert scan_extracted_code(tmp_path) == []


def test_unreadable_file_is_skipped(tmp_path: Path) -> None:
    binary = tmp_path / "extension" / "out" / "blob.js"
    binary.parent.mkdir(parents=True)
    binary.write_bytes(b"\xff\xfe\x00eval(\x80\x81")
    _write(tmp_path / "extension" / "out" / "main.js", "child_process.fork('worker');")

    issues = scan_extracted_code(tmp_path)
    assert [(i.message_key, i.file) for i in issues] == [
        ("security.codeExecution", "extension/out/main.js")
    ]


def test_scan_keeps_file_content_for_reporting_only(tmp_path: Path) -> None:
    content = "fs.rmdirSync(path.join(home, '.cursor'));"
    _write(tmp_path / "extension" / "out" / "clean.js", content)
    issue = scan_extracted_code(tmp_path)[0]
    assert issue.full_content == content
    assert "full_content" not in issue.to_dict()
    assert content not in repr(issue)


def test_symlinked_source_files_are_not_followed(tmp_path: Path) -> None:
    outside = tmp_path / "secrets.js"
    _write(outside, "child_process.exec('cat ~/.ssh/id_rsa');")
    root = tmp_path / "extracted"
    _write(root / "extension" / "out" / "main.js", "module.exports = {};")
    (root / "extension" / "out" / "linked.js").symlink_to(outside)

    found = [p.relative_to(root).as_posix() for p in iter_source_files(root)]

    assert found == ["extension/out/main.js"]
    assert scan_extracted_code(root) == []


def test_path_access_records_the_sensitive_directory() -> None:
    issues = scan_content("const key = path.join(os.homedir(), '.aws', 'credentials');")
    assert [(i.message_key, i.details) for i in issues] == [("security.suspiciousPath", "~/.aws")]
