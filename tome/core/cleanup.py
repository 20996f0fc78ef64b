"""Remove broken and stale symlinks from the library and target directories.

Only symlinks are ever removed, and in targets only symlinks that point
into the library: anything else was not created by tome.
"""
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from tome.core.errors import LinkError
from tome.core.library import LibraryEntry, read_library
from tome.core.links import is_within, link_target, remove_link, same_location
from tome.models.result import OperationResult
from tome.models.skill import Target, TargetMethod

logger = logging.getLogger(__name__)


def find_broken_links(
    library_dir: Path,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> List[Path]:
    """
    Library symlinks whose skill directory no longer exists.

    Args:
        library_dir: Library directory
        entries: Library contents to use instead of reading library_dir
    """
    if entries is None:
        entries = read_library(library_dir)
    return [entry.path for entry in entries if entry.is_link and not entry.resolves]


def _library_entry_alive(
    target_path: Path,
    library_dir: Path,
    lookup: Optional[Dict[str, LibraryEntry]],
) -> bool:
    if lookup is not None and same_location(target_path.parent, library_dir):
        entry = lookup.get(target_path.name)
        return entry is not None and entry.resolves
    return os.path.exists(target_path)


def find_stale_links(
    skills_dir: Path,
    library_dir: Path,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> List[Path]:
    """
    Target symlinks that point into the library at an entry that is gone.

    Symlinks pointing anywhere else are never reported, even when broken.

    Args:
        skills_dir: Target skills directory
        library_dir: Library directory
        entries: Library contents to use instead of reading library_dir;
            links named after a usable entry are then kept, since
            distribution repoints them

    Raises:
        LinkError: If the target directory exists but cannot be read
    """
    if not skills_dir.is_dir():
        return []

    try:
        with os.scandir(skills_dir) as it:
            names = sorted(entry.name for entry in it)
    except OSError as e:
        raise LinkError(f"failed to read target dir {skills_dir}: {e}") from e

    lookup = None
    if entries is not None:
        lookup = {entry.name: entry for entry in entries}

    stale = []
    for name in names:
        path = skills_dir / name
        target_path = link_target(path)
        if target_path is None or not is_within(target_path, library_dir):
            continue
        if lookup is not None and name in lookup and lookup[name].usable:
            continue
        if not _library_entry_alive(target_path, library_dir, lookup):
            stale.append(path)
    return stale


def cleanup_library(
    library_dir: Path,
    dry_run: bool = False,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> OperationResult:
    """
    Remove broken symlinks from the library.

    Links that still resolve are kept whether or not their skill was
    discovered this run.

    Args:
        library_dir: Library directory
        dry_run: Count removals without performing them
        entries: Library contents to use instead of reading library_dir

    Returns:
        OperationResult with the ``removed`` count
    """
    result = OperationResult()

    for path in find_broken_links(library_dir, entries):
        remove_link(path, dry_run)
        result.removed += 1

    if result.removed:
        logger.info("library %s: removed %d broken link(s)", library_dir, result.removed)
    return result


def cleanup_target(
    target: Target,
    library_dir: Path,
    dry_run: bool = False,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> OperationResult:
    """
    Remove stale library links from a symlink target.

    MCP targets have nothing to clean and disabled targets are not touched.

    Args:
        target: Target to clean
        library_dir: Library directory
        dry_run: Count removals without performing them
        entries: Library contents to use instead of reading library_dir

    Returns:
        OperationResult with the ``removed`` count
    """
    if not target.enabled:
        return OperationResult(disabled=True)

    result = OperationResult()
    if target.method != TargetMethod.SYMLINK:
        return result

    for path in find_stale_links(target.skills_dir, library_dir, entries):
        remove_link(path, dry_run)
        result.removed += 1

    if result.removed:
        logger.info("target '%s': removed %d stale link(s)", target.name, result.removed)
    return result
