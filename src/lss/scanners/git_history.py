"""Git history scanner module for lss.

This module provides the GitHistoryScanner class which replays every blob
of every commit reachable from HEAD through the rule matcher.

The scanner:
- Lists the commits reachable from HEAD with ``git log``
- Walks each commit's root tree with an explicit work stack
- Reads trees and blobs through one ``git cat-file --batch`` process per
  repository and skips non-UTF-8 content
- Drops matching lines whose own entropy is below the threshold before
  merging matches per line
- Addresses findings as ``git:<commit>:<entry name>``

Nothing is deduplicated across commits: an unchanged secret present in
ten commits is reported ten times.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from lss.core.exceptions import ScanError
from lss.core.ignore import should_ignore
from lss.core.models import DEFAULT_ENTROPY_THRESHOLD, Finding, Rule, ScanResult
from lss.detectors.entropy_detector import meets_threshold
from lss.detectors.regex_detector import RegexDetector

logger = logging.getLogger(__name__)

TREE_MODE = "40000"
GITLINK_MODE = "160000"


@dataclass(frozen=True)
class TreeEntry:
    """One entry of a git tree object.

    Attributes:
        mode: File mode as stored in the tree object (e.g. '100644').
        kind: Object type: 'blob', 'tree' or 'commit' (submodule).
        object_id: The object's hash.
        name: The entry's name within its tree (not a full path).
    """

    mode: str
    kind: str
    object_id: str
    name: str


def _kind_for_mode(mode: str) -> str:
    if mode == TREE_MODE:
        return "tree"
    if mode == GITLINK_MODE:
        return "commit"
    return "blob"


def parse_tree_object(data: bytes, hash_size: int = 20) -> list[TreeEntry]:
    """Parse the raw body of a git tree object.

    Each entry is ``<mode> SP <name> NUL`` followed by ``hash_size`` raw
    bytes of object id. Names that are not valid UTF-8 are decoded with
    replacement characters.

    Raises:
        ValueError: If the data is truncated or malformed.
    """
    entries: list[TreeEntry] = []
    pos = 0
    while pos < len(data):
        space = data.find(b" ", pos)
        nul = data.find(b"\0", space + 1)
        if space < 0 or nul < 0 or nul + 1 + hash_size > len(data):
            raise ValueError(f"Truncated tree entry at offset {pos}")
        mode = data[pos:space].decode("ascii")
        name = data[space + 1 : nul].decode("utf-8", errors="replace")
        object_id = data[nul + 1 : nul + 1 + hash_size].hex()
        entries.append(TreeEntry(mode, _kind_for_mode(mode), object_id, name))
        pos = nul + 1 + hash_size
    return entries


class ObjectReader:
    """Reads objects from a repository through one ``git cat-file --batch``.

    Each request writes an object id and reads back
    ``<oid> SP <type> SP <size> LF <content> LF``. Use as a context manager
    so the process is always shut down.
    """

    def __init__(self, repo_path: str | Path):
        cmd = ["git", "-C", str(repo_path), "cat-file", "--batch"]
        logger.debug(f"Starting git object reader: {' '.join(cmd)}")
        try:
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            raise ScanError("Git is not installed or not in PATH", context={"command": " ".join(cmd)})

    def read(self, object_id: str) -> tuple[str, bytes]:
        """Return ``(type, content)`` of one object.

        Raises:
            ScanError: If the object is missing or the reader has died.
        """
        stdin = self._process.stdin
        stdout = self._process.stdout
        try:
            stdin.write(object_id.encode("ascii") + b"\n")
            stdin.flush()
            header = stdout.readline()
        except OSError as e:
            raise ScanError(f"Git object reader failed: {e}", context={"object": object_id})
        if not header:
            raise ScanError("Git object reader exited", context={"object": object_id})

        parts = header.decode("ascii", errors="replace").split()
        if len(parts) != 3:
            raise ScanError(f"Cannot read object {object_id}", context={"reply": " ".join(parts)})
        _, kind, size = parts
        content = stdout.read(int(size))
        stdout.read(1)
        return kind, content

    def close(self) -> None:
        if self._process.stdin and not self._process.stdin.closed:
            self._process.stdin.close()
        self._process.wait()
        if self._process.stdout:
            self._process.stdout.close()

    def __enter__(self) -> ObjectReader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class GitHistoryScanner:
    """Scans every blob of every commit reachable from HEAD.

    Attributes:
        repo_path: Path to the repository's working directory.
        rules: Active rule set.
        ignores: Substrings; a blob whose entry name contains one is skipped.
        entropy_threshold: Minimum entropy of a matching line.
    """

    def __init__(
        self,
        repo_path: str | Path,
        rules: Sequence[Rule],
        ignores: Iterable[str] = (),
        entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD,
    ):
        self.repo_path = Path(repo_path)
        self.rules = rules
        self.ignores = frozenset(ignores)
        self.entropy_threshold = entropy_threshold
        self.detector = RegexDetector(rules, line_filter=self._line_has_entropy)

        self._commits_scanned = 0
        self._blobs_scanned = 0
        self._blobs_skipped = 0
        self._errors: list[str] = []

    @property
    def scanner_type(self) -> str:
        """Return 'git_history'."""
        return "git_history"

    def _line_has_entropy(self, line: str) -> bool:
        return meets_threshold(line, self.entropy_threshold)

    def _run_git(self, args: list[str]) -> bytes:
        """Run a git command in the repository and return its stdout.

        Raises:
            ScanError: If git is missing or the command fails.
        """
        cmd = ["git", "-C", str(self.repo_path), *args]
        logger.debug(f"Running git command: {' '.join(cmd)}")
        try:
            process = subprocess.run(cmd, capture_output=True, check=False)
        except FileNotFoundError:
            raise ScanError("Git is not installed or not in PATH", context={"command": " ".join(cmd)})
        if process.returncode != 0:
            raise ScanError(
                f"Git command failed: {' '.join(cmd)}",
                path=str(self.repo_path),
                context={
                    "stderr": process.stderr.decode("utf-8", errors="replace").strip(),
                    "returncode": process.returncode,
                },
            )
        return process.stdout

    def _validate_repository(self) -> None:
        """Raise ScanError unless the path is inside a git repository."""
        if not self.repo_path.is_dir():
            raise ScanError(f"Path does not exist: {self.repo_path}", path=str(self.repo_path))
        self._run_git(["rev-parse", "--git-dir"])

    def _list_commits(self) -> list[tuple[str, str]]:
        """Return ``(commit id, root tree id)`` for every commit reachable from HEAD."""
        output = self._run_git(["log", "--topo-order", "--format=%H %T", "HEAD", "--"])
        commits = []
        for line in output.decode("ascii", errors="replace").splitlines():
            commit_id, _, tree_id = line.strip().partition(" ")
            if commit_id and tree_id:
                commits.append((commit_id, tree_id))
        return commits

    def _read_tree(self, reader: ObjectReader, tree_id: str) -> list[TreeEntry]:
        kind, data = reader.read(tree_id)
        if kind != "tree":
            raise ScanError(f"Object {tree_id} is a {kind}, not a tree")
        try:
            return parse_tree_object(data, hash_size=len(tree_id) // 2)
        except ValueError as e:
            raise ScanError(f"Malformed tree {tree_id}: {e}")

    def _read_blob(self, reader: ObjectReader, blob_id: str) -> bytes:
        kind, data = reader.read(blob_id)
        if kind != "blob":
            raise ScanError(f"Object {blob_id} is a {kind}, not a blob")
        return data

    def _scan_blob(self, reader: ObjectReader, commit_id: str, entry: TreeEntry) -> list[Finding]:
        try:
            content = self._read_blob(reader, entry.object_id).decode("utf-8")
        except UnicodeDecodeError:
            self._blobs_skipped += 1
            return []
        self._blobs_scanned += 1
        return self.detector.detect(content, f"git:{commit_id}:{entry.name}")

    def scan_commit(self, commit_id: str, tree_id: str, reader: ObjectReader | None = None) -> list[Finding]:
        """Scan every blob in one commit's tree.

        The tree is walked with an explicit LIFO stack of tree ids so deep
        directory hierarchies never grow the Python call stack. A tree or
        blob that cannot be read is logged and skipped.

        Args:
            commit_id: Commit hash, used in finding paths.
            tree_id: The commit's root tree.
            reader: Open object reader to share across commits. A private
                one is started when omitted.

        Returns:
            Findings from all blobs of the commit.
        """
        if reader is None:
            with ObjectReader(self.repo_path) as own_reader:
                return self.scan_commit(commit_id, tree_id, own_reader)

        findings: list[Finding] = []
        stack = [tree_id]
        while stack:
            current = stack.pop()
            try:
                entries = self._read_tree(reader, current)
            except ScanError as e:
                logger.debug(f"Skipping unreadable tree {current} in {commit_id[:8]}: {e}")
                self._errors.append(str(e))
                continue
            for entry in entries:
                if entry.kind == "tree":
                    stack.append(entry.object_id)
                elif entry.kind == "blob":
                    if should_ignore(entry.name, self.ignores):
                        continue
                    try:
                        findings.extend(self._scan_blob(reader, commit_id, entry))
                    except ScanError as e:
                        logger.debug(f"Skipping unreadable blob {entry.object_id}: {e}")
                        self._errors.append(str(e))
        return findings

    def scan_findings(self) -> list[Finding]:
        """Scan the whole history and return the findings.

        Returns:
            All findings, or an empty list if the path is not a repository
            or HEAD cannot be resolved (for example an empty repository).
        """
        self._commits_scanned = 0
        self._blobs_scanned = 0
        self._blobs_skipped = 0
        self._errors = []

        try:
            self._validate_repository()
            commits = self._list_commits()
        except ScanError as e:
            logger.warning(f"Skipping git history of {self.repo_path}: {e.message}")
            self._errors.append(str(e))
            return []

        logger.info(f"Scanning {len(commits)} commits in {self.repo_path}")

        findings: list[Finding] = []
        try:
            with ObjectReader(self.repo_path) as reader:
                for commit_id, tree_id in commits:
                    findings.extend(self.scan_commit(commit_id, tree_id, reader))
                    self._commits_scanned += 1
        except ScanError as e:
            logger.warning(f"Git history of {self.repo_path} incomplete: {e.message}")
            self._errors.append(str(e))

        logger.info(
            f"Git history scan complete: {self._commits_scanned} commits, "
            f"{self._blobs_scanned} blobs, {len(findings)} findings"
        )
        return findings

    def scan(self) -> ScanResult:
        """Execute the scan and wrap the findings in a ScanResult."""
        start_time = time.time()
        findings = self.scan_findings()
        return ScanResult(
            target_path=str(self.repo_path),
            findings=findings,
            scan_duration=time.time() - start_time,
            stats=self.get_stats(),
        )

    def get_stats(self) -> dict:
        """Get statistics about the last scan."""
        return {
            "commits_scanned": self._commits_scanned,
            "blobs_scanned": self._blobs_scanned,
            "blobs_skipped": self._blobs_skipped,
            "errors": self._errors,
        }


def scan_git_history(
    repo_path: str | Path,
    rules: Sequence[Rule],
    ignores: Iterable[str] = (),
    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD,
) -> list[Finding]:
    """Scan all history reachable from HEAD of the repository at ``repo_path``.

    Convenience wrapper around :class:`GitHistoryScanner`.
    """
    return GitHistoryScanner(repo_path, rules, ignores, entropy_threshold).scan_findings()
