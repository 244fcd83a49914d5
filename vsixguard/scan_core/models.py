"""Data models for scan rules, issues and results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Pattern, Tuple


class Severity(str, Enum):
    """Risk tier of an issue, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordinal where 0 is the most severe."""
        return _SEVERITY_RANKS[self]

    @classmethod
    def ordered(cls) -> Iterator["Severity"]:
        """Yield severities from critical to low."""
        return iter(sorted(cls, key=lambda severity: severity.rank))


_SEVERITY_RANKS = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


@dataclass(frozen=True)
class Rule:
    """A suspicious code pattern with the issue it produces."""

    pattern: Pattern[str]
    message_key: str
    severity: Severity


@dataclass
class Issue:
    """A single suspicious condition detected in a bundle."""

    severity: Severity
    message_key: str
    file: Optional[str] = None
    match: Optional[str] = None
    details: Optional[str] = None
    # Attacker-controlled file content, kept only for report path extraction
    full_content: Optional[str] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.message_key:
            raise ValueError("Issue requires a message key")
        self.severity = Severity(self.severity)

    def to_dict(self) -> Dict[str, str]:
        """Convert issue to dictionary format, omitting file content."""
        data = asdict(self)
        data.pop("full_content", None)
        data["severity"] = self.severity.value
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning one bundle."""

    safe: bool
    issues: Tuple[Issue, ...]
    details: str
    extension_name: Optional[str] = None
    has_uninstall_config: bool = False

    @classmethod
    def from_issues(
        cls,
        issues: Iterable[Issue],
        extension_name: Optional[str] = None,
        has_uninstall_config: bool = False,
    ) -> "ScanResult":
        collected = tuple(issues)
        return cls(
            safe=not collected,
            issues=collected,
            details="\n".join(issue.message_key for issue in collected),
            extension_name=extension_name,
            has_uninstall_config=has_uninstall_config,
        )

    def issues_with(self, severity: Severity) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity is severity]

    def to_dict(self) -> Dict[str, object]:
        """Convert result to dictionary format."""
        return {
            "safe": self.safe,
            "extension_name": self.extension_name,
            "has_uninstall_config": self.has_uninstall_config,
            "details": self.details,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class ExtensionInfo:
    """Metadata shown to the user before installing a bundle."""

    name: str
    version: str
    publisher: str = ""
    description: str = ""
    size: str = ""
