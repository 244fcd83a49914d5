"""Configuration constants and patterns for VSIX security scanning."""
from pathlib import Path
from typing import Dict, List, Tuple

# Project paths
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_LOCALES_DIR = PACKAGE_ROOT / "locales"
DEFAULT_LOCALE = "en"
ENV_LOCALE = "VSIXGUARD_LOCALE"

# Scratch workspace for staged bundles
DEFAULT_CHECK_DIR = Path.home() / ".extensionmanager" / "check"
ENV_CHECK_DIR = "VSIXGUARD_CHECK_DIR"
SCRATCH_PREFIX = "temp-"
EXTRACTED_DIRNAME = "extracted"

# Bundle layout
BUNDLE_SUFFIX = ".vsix"
MANIFEST_RELATIVE_PATH = Path("extension") / "package.json"
UNINSTALL_RELATIVE_PATH = Path("extension") / "uninstall.json"

# Source files
SOURCE_FILE_EXTENSION = ".js"
VENDOR_DIR_NAME = "node_modules"

# Bundles above this size are reported (50 MB)
MAX_BUNDLE_SIZE = 50 * 1024 * 1024

# Matched snippets are cut to this length
MAX_MATCH_LENGTH = 100

# Message keys with special handling
PATH_ACCESS_MESSAGE = "security.suspiciousPath"
FILE_DELETE_MESSAGE = "security.fileDelete"
OBFUSCATED_MESSAGE = "security.obfuscatedCode"
DEPENDENCY_MESSAGE = "security.suspiciousDependency"
LARGE_FILE_MESSAGE = "security.largeFile"

SENSITIVE_DIRECTORIES: Tuple[str, ...] = (
    r"\.ssh",
    r"\.aws",
    r"\.gnupg",
    "Documents",
    "Desktop",
    "Downloads",
)

# Outbound URLs to these hosts (or their subdomains) are expected
TRUSTED_DOMAINS: Tuple[str, ...] = (
    "github",
    "githubusercontent",
    "vscode",
    "microsoft",
    "arduino",
    "npmjs",
    "cloudflare",
)

_SENSITIVE = "|".join(SENSITIVE_DIRECTORIES)
_TRUSTED = "|".join(TRUSTED_DOMAINS)

# Ordered rule catalog; every rule runs, order only decides reporting order
SUSPICIOUS_CODE_PATTERNS: List[Dict[str, str]] = [
    {
        "pattern": rf"os\.homedir\(\).*['\"]({_SENSITIVE})",
        "message": PATH_ACCESS_MESSAGE,
        "severity": "high",
    },
    {
        "pattern": r"child_process\.(exec|spawn|execFile|fork)\s*\(",
        "message": "security.codeExecution",
        "severity": "high",
    },
    {
        "pattern": r"eval\s*\(",
        "message": "security.evalFound",
        "severity": "critical",
    },
    {
        "pattern": r"Function\s*\(\s*['\"`]",
        "message": "security.dynamicFunction",
        "severity": "critical",
    },
    {
        # String literals only, not regex literals or href="..." attributes
        "pattern": rf"(?<![/\\=])['\"`]https?://(?!(?:[\w-]+\.)*(?:{_TRUSTED})\.)",
        "message": "security.unknownNetwork",
        "severity": "medium",
    },
    {
        "pattern": r"\.unlinkSync|\.rmdirSync|\.rmSync.*recursive",
        "message": FILE_DELETE_MESSAGE,
        "severity": "medium",
    },
    {
        "pattern": r"require\s*\(\s*['\"`]https?:",
        "message": "security.remoteRequire",
        "severity": "critical",
    },
]

# Path-access matches containing one of these are the extension's own state
ALLOWED_PATH_PATTERNS: List[str] = [
    r"\.vscode",
    r"\.arduinoIDE",
    r"\.extensionmanager",
]

# Catches sibling tools such as ".fooplus" or ".barhelper"; broad, can be disabled
GENERIC_ALLOWED_PATH_PATTERN = r"\.[a-z]+(?:plus|ide|manager|helper)"

# Obfuscation indicators; two or more make a file "obfuscated"
OBFUSCATION_INDICATORS: List[str] = [
    r"(?i)_0x[0-9a-f]{4,}",
    r"(?i)\\x[0-9a-f]{2}",
    r"eval\(.*atob",
    r"\[['\"][a-z]{1,2}['\"]\]",
]
OBFUSCATION_THRESHOLD = 2

# Quoted dot-directory literals inside file-deletion code
DELETED_PATH_PATTERN = r"(?<![\\/])['\"`](\.\w+)(?:[-\\/]|['\"`])"
MIN_DELETED_DIR_LENGTH = 5

# Dependencies considered high-risk regardless of use
BLOCKED_DEPENDENCIES: Tuple[str, ...] = (
    "keytar",
    "node-keytar",
    "ssh2",
    "ssh-exec",
)

DEPENDENCY_SECTIONS: Tuple[str, ...] = ("dependencies", "devDependencies")

# External extraction tools, tried in order before the built-in zip reader
EXTRACT_COMMANDS: List[Tuple[str, List[str]]] = [
    ("unzip", ["unzip", "-q", "{archive}", "-d", "{target}"]),
    ("tar", ["tar", "-xf", "{archive}", "-C", "{target}"]),
]
EXTRACT_TIMEOUT = 120
