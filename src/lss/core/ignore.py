"""Ignore-path resolution for lss.

Ignore entries are plain substrings, not globs: a path is ignored when its
text contains any entry. Entries come from three places:

- the ``ignore`` list of the user config file (and ``--ignore-file``),
- a ``.lssignore`` file at the scan root,
- a ``.lssignore`` file in any directory between a scanned file and the
  scan root (inclusive).

Missing or unreadable ignore files simply contribute nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".lssignore"


def should_ignore(path_text: str, ignores: Iterable[str]) -> bool:
    """Return True if ``path_text`` contains any of ``ignores``."""
    return any(entry in path_text for entry in ignores)


def read_ignore_file(path: Path | str) -> set[str]:
    """Read one ignore substring per non-blank line.

    Args:
        path: The ignore file to read.

    Returns:
        The stripped entries, or an empty set if the file does not exist or
        cannot be read.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return set()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read ignore file {path}: {e}")
        return set()
    return {line.strip() for line in text.splitlines() if line.strip()}


class IgnoreResolver:
    """Computes the effective ignore set for files under a scan root.

    The resolver only reads files; it holds no state that changes after
    construction, so a single instance can be shared by parallel workers.

    Example:
        >>> resolver = IgnoreResolver(Path("/src"), {"node_modules"})
        >>> resolver.is_ignored(Path("/src/app/node_modules/x.js"))
        True
    """

    def __init__(self, root: Path, base_ignores: Iterable[str] = ()):
        """Initialize the resolver.

        Args:
            root: The scan root. Directory ignore files are looked up to
                  and including this directory.
            base_ignores: Entries from the config file and ignore file
                          option, applied everywhere.
        """
        self.root = Path(root)
        self.base_ignores = frozenset(base_ignores)
        root_dir = self.root if self.root.is_dir() else self.root.parent
        self.root_ignores = frozenset(read_ignore_file(root_dir / IGNORE_FILE_NAME))

    def _directory_ignores(self, file_path: Path) -> set[str]:
        """Collect entries from ignore files walking up from the file's directory."""
        entries: set[str] = set()
        directory = file_path.parent
        while directory.is_relative_to(self.root):
            entries |= read_ignore_file(directory / IGNORE_FILE_NAME)
            if directory == directory.parent:
                break
            directory = directory.parent
        return entries

    def ignores_for(self, file_path: Path) -> set[str]:
        """Return the union of every ignore entry that applies to ``file_path``."""
        return set(self.base_ignores) | self.root_ignores | self._directory_ignores(file_path)

    def is_ignored(self, file_path: Path) -> bool:
        """Return True if ``file_path`` should not be scanned."""
        return should_ignore(str(file_path), self.ignores_for(file_path))
