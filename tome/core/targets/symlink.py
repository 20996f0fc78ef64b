"""Symlink distribution: one link per library entry in the target's skills dir."""
import logging
from pathlib import Path
from typing import Optional, Sequence

from tome.core.library import LibraryEntry, read_library
from tome.core.links import ensure_directory, reconcile_link
from tome.core.targets.base import TargetHandler
from tome.models.result import OperationResult
from tome.models.skill import Target

logger = logging.getLogger(__name__)


class SymlinkTargetHandler(TargetHandler):
    """Link each library entry into a target's skills directory.

    Target links point at the library entry, not at the skill's origin, so
    cleanup can tell links it owns from links it does not.
    """

    def distribute(
        self,
        target: Target,
        library_dir: Path,
        dry_run: bool = False,
        force: bool = False,
        entries: Optional[Sequence[LibraryEntry]] = None,
    ) -> OperationResult:
        if entries is None:
            entries = read_library(library_dir)

        result = OperationResult()
        skills_dir = target.skills_dir
        ensure_directory(skills_dir, dry_run)

        for entry in entries:
            if not entry.is_link:
                message = (
                    f"library entry {entry.path} is not a symlink, "
                    f"not distributing to '{target.name}'"
                )
                logger.warning(message)
                result.warnings.append(message)
                result.skipped += 1
                continue
            if not entry.resolves:
                logger.debug("library entry %s is broken, not distributing", entry.path)
                continue

            reconcile_link(
                result,
                skills_dir / entry.name,
                library_dir / entry.name,
                dry_run=dry_run,
                force=force,
            )

        logger.info(
            "target '%s': %d created, %d updated, %d unchanged, %d skipped",
            target.name, result.created, result.updated, result.unchanged, result.skipped,
        )
        return result
