"""Core scanner module for lss.

This module provides the Scanner class which discovers files, scans them
in parallel, filters the findings, and then replays the history of any git
repositories found directly under the scan root.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from lss.core.exceptions import ScanError
from lss.core.filters import FindingFilter
from lss.core.ignore import IgnoreResolver
from lss.core.models import Finding, Rule, ScanConfig, ScanResult
from lss.detectors.regex_detector import aggregate_matches
from lss.scanners.git_history import GitHistoryScanner

logger = logging.getLogger(__name__)


def scan_file(path: Path | str, rules: Sequence[Rule]) -> list[Finding]:
    """Scan one file on disk with the given rules.

    Args:
        path: File to read.
        rules: Active rule set.

    Returns:
        Unfiltered findings stamped with ``str(path)``, or an empty list if
        the file cannot be read or is not valid UTF-8 text.
    """
    try:
        content = Path(path).read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        logger.debug(f"Skipping non-text file: {path}")
        return []
    except OSError as e:
        logger.debug(f"Error reading file {path}: {e}")
        return []
    return aggregate_matches(content, rules, str(path))


def _sort_key(finding: Finding) -> tuple[str, int, str]:
    return finding.path, finding.line, finding.snippet


@dataclass
class _FileOutcome:
    """Result of one parallel file task. Owned by that task alone."""

    findings: list[Finding] = field(default_factory=list)
    ignored: bool = False
    skipped: bool = False


def _scan_one(
    path: Path,
    rules: Sequence[Rule],
    resolver: IgnoreResolver,
    finding_filter: FindingFilter,
) -> _FileOutcome:
    if resolver.is_ignored(path):
        return _FileOutcome(ignored=True)
    try:
        findings = scan_file(path, rules)
    except Exception as e:
        logger.error(f"Failed to scan {path}: {e}")
        return _FileOutcome(skipped=True)
    return _FileOutcome(findings=finding_filter.apply(findings))


# Read-only scan state, set once in each worker process by _init_worker.
_worker_state: tuple[Sequence[Rule], IgnoreResolver, FindingFilter] | None = None


def _init_worker(rules: Sequence[Rule], resolver: IgnoreResolver, finding_filter: FindingFilter) -> None:
    global _worker_state
    _worker_state = (rules, resolver, finding_filter)


def _scan_path(path: Path) -> _FileOutcome:
    assert _worker_state is not None, "worker process was not initialized"
    return _scan_one(path, *_worker_state)


class Scanner:
    """Scans a directory tree and the git repositories directly under it.

    Files are scanned in parallel with a process pool so matching uses
    every CPU; each task returns its own outcome, and the findings are
    concatenated once all tasks finish.
    Git repositories are then scanned one after another.
    """

    def __init__(self, config: ScanConfig, rules: Sequence[Rule]):
        """Initialize the scanner.

        Args:
            config: Scan configuration.
            rules: Active rule set, read-only for the whole scan.
        """
        self.config = config
        self.rules = rules
        self.finding_filter = FindingFilter.from_config(config)

    def _discover_files(self) -> list[Path]:
        """Return every regular file under the target, without following symlinks."""
        target = self.config.target_path

        if target.is_file():
            return [target]

        files: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(target, onerror=self._walk_error):
            for filename in filenames:
                item = Path(dirpath) / filename
                if item.is_file() and not item.is_symlink():
                    files.append(item)
        return files

    @staticmethod
    def _walk_error(error: OSError) -> None:
        logger.warning(f"Error during directory walk: {error}")

    def _discover_repositories(self) -> list[Path]:
        """Return immediate subdirectories of the target that contain ``.git``."""
        target = self.config.target_path
        if not target.is_dir():
            return []
        try:
            children = sorted(target.iterdir())
        except OSError as e:
            logger.warning(f"Could not list {target}: {e}")
            return []
        return [child for child in children if child.is_dir() and (child / ".git").exists()]

    def scan_files(self) -> tuple[list[Finding], dict[str, int]]:
        """Run the parallel file phase.

        Returns:
            The filtered findings sorted by path and line, and counters.
        """
        files = self._discover_files()
        logger.info(f"Found {len(files)} files to scan")
        resolver = IgnoreResolver(self.config.target_path, self.config.ignores)

        outcomes: list[_FileOutcome] = []
        if files:
            workers = self.config.workers or os.cpu_count() or 1
            with ProcessPoolExecutor(
                max_workers=workers,
                initializer=_init_worker,
                initargs=(tuple(self.rules), resolver, self.finding_filter),
            ) as executor:
                chunksize = max(1, len(files) // (workers * 4))
                outcomes = list(executor.map(_scan_path, files, chunksize=chunksize))

        findings = [finding for outcome in outcomes for finding in outcome.findings]
        findings.sort(key=_sort_key)
        ignored = sum(1 for outcome in outcomes if outcome.ignored)
        skipped = sum(1 for outcome in outcomes if outcome.skipped)
        stats = {
            "files_discovered": len(files),
            "files_scanned": len(files) - ignored - skipped,
            "files_ignored": ignored,
            "files_skipped": skipped,
        }
        return findings, stats

    def scan_git(self) -> tuple[list[Finding], dict[str, int]]:
        """Run the sequential git history phase.

        Blob names are checked against the base ignores only; directory
        ignore files do not apply to history. A repository that fails
        contributes nothing.
        """
        findings: list[Finding] = []
        repositories = self._discover_repositories()
        for repo_path in repositories:
            scanner = GitHistoryScanner(
                repo_path,
                self.rules,
                ignores=self.config.ignores,
                entropy_threshold=self.config.entropy_threshold,
            )
            findings.extend(scanner.scan_findings())
        findings.sort(key=_sort_key)
        return findings, {"repositories_scanned": len(repositories)}

    def scan(self) -> ScanResult:
        """Execute the scan operation.

        Returns:
            ScanResult with file findings first, then git history findings.

        Raises:
            ScanError: If the target path does not exist.
        """
        target = self.config.target_path
        if not target.exists():
            raise ScanError(f"Target path does not exist: {target}", path=str(target))

        start_time = time.time()

        file_findings, file_stats = self.scan_files()
        git_findings, git_stats = self.scan_git()

        findings = file_findings + git_findings
        return ScanResult(
            target_path=str(target),
            findings=findings,
            scan_duration=time.time() - start_time,
            stats={
                **file_stats,
                **git_stats,
                "file_findings": len(file_findings),
                "git_findings": len(git_findings),
                "total_findings": len(findings),
            },
        )
