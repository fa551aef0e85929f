"""Ignore rules for directory scans.

This module provides:
- IgnorePatterns: .mynkignore rules applied while scanning
- RESERVED_PATTERNS, is_reserved: mynk's own files, never synchronized

Rule syntax, one per line in .mynkignore:
    *.log       matches a file or directory name at any depth
    build/      trailing "/" restricts the rule to directories
    docs/*.pdf  a "/" anywhere but the end anchors the rule at the root
    /notes.txt  a leading "/" anchors a single name at the root
    logs/**     "**" spans any number of directories

In anchored rules "*", "?" and "[...]" never match "/", so docs/*.pdf
leaves docs/old/a.pdf alone. A rule matching a directory also covers
everything below it.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from pathlib import Path

from mynk.client.anchor import BASELINE_NAME, LOCK_NAME, MARKER_NAME

# Marker, baseline, baseline temp files and round lock
RESERVED_PATTERNS = [
    MARKER_NAME,
    BASELINE_NAME,
    f"{BASELINE_NAME}.*.tmp",
    LOCK_NAME,
]


def is_reserved(rel_path: str) -> bool:
    """Check whether a root-relative "/"-separated path is a mynk file.

    Names match at any depth, so the files of a sync root nested inside
    another are never picked up by the outer one.
    """
    return any(
        fnmatch.fnmatch(part, pattern)
        for part in rel_path.split("/")
        for pattern in RESERVED_PATTERNS
    )


def _match_segments(parts: list[str], globs: tuple[str, ...]) -> bool:
    """Match path parts against glob segments one to one, "**" taking any run."""
    if not globs:
        return not parts
    head, rest = globs[0], globs[1:]
    if head == "**":
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatch(parts[0], head) and _match_segments(parts[1:], rest)


@dataclass(frozen=True)
class _Rule:
    segments: tuple[str, ...]
    dir_only: bool
    anchored: bool

    @classmethod
    def parse(cls, line: str) -> _Rule:
        dir_only = line.endswith("/")
        body = line.rstrip("/")
        segments = tuple(s for s in body.lstrip("/").split("/") if s)
        return cls(segments=segments, dir_only=dir_only, anchored="/" in body)

    def matches(self, parts: list[str], is_dir: bool) -> bool:
        for depth in range(1, len(parts) + 1):
            # Only the last part can be a file
            if self.dir_only and depth == len(parts) and not is_dir:
                continue
            if self.anchored:
                if _match_segments(parts[:depth], self.segments):
                    return True
            elif fnmatch.fnmatch(parts[depth - 1], self.segments[0]):
                return True
        return False


class IgnorePatterns:
    """Scan exclusions for one sync root.

    Reserved mynk files and symlinks are always excluded, whatever the
    configured rules.
    """

    def __init__(self, patterns: list[str] | None = None) -> None:
        """Initialize with patterns.

        Args:
            patterns: Rules in .mynkignore syntax.
        """
        self._patterns: list[str] = []
        self._rules: list[_Rule] = []
        for pattern in patterns or []:
            self.add_pattern(pattern)

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def add_pattern(self, pattern: str) -> None:
        """Add an ignore rule. Blank patterns are ignored."""
        pattern = pattern.strip()
        if not pattern.strip("/"):
            return
        self._patterns.append(pattern)
        self._rules.append(_Rule.parse(pattern))

    def load_from_file(self, path: Path) -> None:
        """Add the rules from a .mynkignore file, if it exists."""
        if not path.is_file():
            return
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip().startswith("#"):
                self.add_pattern(line)

    def should_ignore(self, path: Path, base_path: Path) -> bool:
        """Check if a path should be left out of the scan.

        Args:
            path: Absolute path to check.
            base_path: Sync root.

        Returns:
            True if the path should be ignored.
        """
        if path.is_symlink():
            return True

        try:
            rel_str = path.relative_to(base_path).as_posix()
        except ValueError:
            return False

        if is_reserved(rel_str):
            return True

        parts = rel_str.split("/")
        is_dir = path.is_dir()
        return any(rule.matches(parts, is_dir) for rule in self._rules)
