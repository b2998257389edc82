"""Scanner module for lss.

The filesystem scan lives in :mod:`lss.core.scanner`; this package holds
the git history scanner, which feeds historical blob contents through the
same rule matcher.
"""

from lss.scanners.git_history import GitHistoryScanner, ObjectReader, TreeEntry, scan_git_history

__all__ = ["GitHistoryScanner", "ObjectReader", "TreeEntry", "scan_git_history"]
