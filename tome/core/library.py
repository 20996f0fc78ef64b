"""Consolidation of discovered skills into the library directory."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence

from tome.core.errors import LinkError
from tome.core.links import ensure_directory, reconcile_link
from tome.models.result import OperationResult
from tome.models.skill import DiscoveredSkill

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LibraryEntry:
    """One name in the library directory."""

    name: str
    path: Path
    is_link: bool
    resolves: bool

    @property
    def usable(self) -> bool:
        """A managed link whose skill directory still exists."""
        return self.is_link and self.resolves


def read_library(library_dir: Path) -> List[LibraryEntry]:
    """
    List the entries currently in the library, sorted by name.

    A missing library is empty. Hidden entries (leftover temporary links,
    editor files) are ignored.

    Raises:
        LinkError: If the library exists but cannot be read
    """
    if not library_dir.exists() and not library_dir.is_symlink():
        return []

    try:
        with os.scandir(library_dir) as it:
            names = sorted(entry.name for entry in it)
    except OSError as e:
        raise LinkError(f"failed to read library dir {library_dir}: {e}") from e

    entries = []
    for name in names:
        if name.startswith("."):
            continue
        path = library_dir / name
        entries.append(LibraryEntry(
            name=name,
            path=path,
            is_link=path.is_symlink(),
            resolves=path.exists(),
        ))
    return entries


def project_library(
    library_dir: Path,
    discovered: Sequence[DiscoveredSkill],
) -> List[LibraryEntry]:
    """
    Describe the library as it will be once ``consolidate`` has run.

    Every discovered skill becomes a resolving link unless a foreign entry
    occupies its name. Used so later stages make the same decisions in a
    dry run as in a real one.
    """
    entries: Dict[str, LibraryEntry] = {
        entry.name: entry for entry in read_library(library_dir)
    }
    for skill in discovered:
        current = entries.get(skill.name)
        if current is not None and not current.is_link:
            continue
        entries[skill.name] = LibraryEntry(
            name=skill.name,
            path=library_dir / skill.name,
            is_link=True,
            resolves=True,
        )
    return [entries[name] for name in sorted(entries)]


def consolidate(
    discovered: Sequence[DiscoveredSkill],
    library_dir: Path,
    dry_run: bool = False,
    force: bool = False,
) -> OperationResult:
    """
    Link every discovered skill into the library.

    ``library_dir/<name>`` becomes a symlink to the skill's origin. Links for
    skills that were not discovered are left for cleanup.

    Args:
        discovered: Deduplicated discovery output
        library_dir: Library directory (created if missing)
        dry_run: Count decisions without writing
        force: Recreate links that are already correct

    Returns:
        OperationResult with created/updated/unchanged/skipped counts

    Raises:
        LinkError: If the library directory cannot be created or written
    """
    result = OperationResult()
    ensure_directory(library_dir, dry_run)

    for skill in discovered:
        reconcile_link(
            result,
            library_dir / skill.name,
            skill.origin_path,
            dry_run=dry_run,
            force=force,
        )

    logger.info(
        "library %s: %d created, %d updated, %d unchanged, %d skipped",
        library_dir, result.created, result.updated, result.unchanged, result.skipped,
    )
    return result
