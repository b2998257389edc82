"""JSON output formatter for lss.

Findings are rendered as a JSON array, one object per finding, using
Pydantic's model serialization.
"""

from pydantic import TypeAdapter

from lss.core.models import Finding, ScanResult
from lss.outputs import BaseOutput

_FINDINGS_ADAPTER = TypeAdapter(list[Finding])


class JsonOutput(BaseOutput):
    """Output formatter that serializes findings to a formatted JSON array.

    Example:
        formatter = JsonOutput()
        print(formatter.format(scan_result))
    """

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "json"

    def format(self, result: ScanResult) -> str:
        """Format the findings of a scan result as a JSON array."""
        return _FINDINGS_ADAPTER.dump_json(result.findings, indent=2).decode("utf-8")
