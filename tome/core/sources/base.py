"""Base classes for source handlers."""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from tome.models.skill import MARKER_FILE, DiscoveredSkill, Source

logger = logging.getLogger(__name__)


@dataclass
class SourceScan:
    """Skills and warnings produced by scanning one source."""

    skills: List[DiscoveredSkill] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


class SourceHandler(ABC):
    """Abstract base class for skill source handlers."""

    @abstractmethod
    def discover(self, source: Source) -> SourceScan:
        """
        Find the skills provided by a source.

        Problems with the source (missing path, unreadable or malformed
        files) are reported as warnings on the scan, never raised.

        Args:
            source: Configured source to scan

        Returns:
            SourceScan with skills in discovery order
        """
        pass


def has_marker(directory: Path) -> bool:
    """Whether the marker is a regular file (not a symlink) inside directory."""
    marker = directory / MARKER_FILE
    return marker.is_file() and not marker.is_symlink()


def add_skill(scan: SourceScan, directory: Path, source_name: str) -> None:
    """Append the skill rooted at ``directory``, warning on unusable names."""
    try:
        skill = DiscoveredSkill(
            name=directory.name,
            origin_path=directory,
            source_name=source_name,
        )
    except ValueError as e:
        scan.warn(f"skipping skill in {directory}: {e}")
        return

    if not skill.has_conventional_name:
        scan.warn(
            f"skill name '{skill.name}' should be lowercase letters, digits, or hyphens"
        )
    scan.skills.append(skill)


def scan_for_skills(directory: Path, source_name: str, scan: SourceScan) -> None:
    """
    Scan a directory for skills, appending them to ``scan``.

    The directory itself is a skill if it holds the marker file, and so is
    every direct subdirectory that does. Symlinked subdirectories are not
    followed. Entries are visited in name order.

    Args:
        directory: Directory to scan
        source_name: Name of the source being scanned
        scan: Scan to append skills and warnings to
    """
    directory = directory.absolute()

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        scan.warn(f"cannot read {directory}: {e}")
        return

    if has_marker(directory):
        add_skill(scan, directory, source_name)

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            scan.warn(f"skipping entry in {directory}: {e}")
            continue
        if not is_dir:
            continue

        child = Path(entry.path)
        try:
            if has_marker(child):
                add_skill(scan, child, source_name)
        except OSError as e:
            scan.warn(f"skipping entry in {directory}: {e}")
