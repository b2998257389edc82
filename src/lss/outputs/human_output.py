"""Line-oriented output formatter for lss.

One line per finding, in the style of compiler diagnostics::

    config.py:3: aws_key = "AKIA..." [AWS Access Key ID] tags=aws,cloud,key conf=0.9

followed by a blank line and a count.
"""

from lss.core.models import Finding, ScanResult
from lss.outputs import BaseOutput


def format_finding(finding: Finding) -> str:
    """Render one finding as ``path:line: snippet [rules] tags=... conf=N``.

    The rule list and tag list are left out when empty.
    """
    rules = f" [{','.join(finding.matched_rules)}]" if finding.matched_rules else ""
    tags = f" tags={','.join(finding.tags)}" if finding.tags else ""
    return f"{finding.path}:{finding.line}: {finding.snippet}{rules}{tags} conf={finding.confidence}"


class HumanOutput(BaseOutput):
    """Output formatter producing one diagnostic-style line per finding."""

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "human"

    def format(self, result: ScanResult) -> str:
        lines = [format_finding(finding) for finding in result.findings]
        lines.append("")
        lines.append(f"Found {len(result.findings)} potential secrets")
        return "\n".join(lines)
