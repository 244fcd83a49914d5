"""JSON output formatting."""
from __future__ import annotations

import json

from vsixguard.scan_core.models import ScanResult


def render_json(result: ScanResult) -> str:
    """Serialize a scan result; file contents are never included."""
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


def print_json_output(result: ScanResult) -> None:
    """Print scan result as JSON."""
    print(render_json(result))
