"""The sync pipeline: discover, consolidate, distribute, cleanup."""
import logging

from tome.core.cleanup import cleanup_library, cleanup_target
from tome.core.config import Config
from tome.core.discovery import discover_all
from tome.core.distributor import distribute
from tome.core.library import consolidate, project_library
from tome.models.result import SyncReport

logger = logging.getLogger(__name__)


def sync(config: Config, dry_run: bool = False, force: bool = False) -> SyncReport:
    """
    Run the full pipeline once.

    Later stages work from the library as consolidation leaves it, so a dry
    run reports the same counts a real run would for the same starting
    state.

    Args:
        config: Validated configuration
        dry_run: Decide and count without writing anything
        force: Recreate links that are already correct

    Returns:
        SyncReport; stages after discovery are None when nothing was found

    Raises:
        LinkError: If the library or a target root cannot be read or created
    """
    if dry_run:
        logger.info("[dry-run] No changes will be made")

    skills, warnings = discover_all(config.sources, config.exclude)
    report = SyncReport(dry_run=dry_run, skills=skills, discovery_warnings=warnings)

    if not skills:
        logger.info("no skills found")
        return report

    library_dir = config.library_dir
    entries = project_library(library_dir, skills)

    report.library = consolidate(skills, library_dir, dry_run=dry_run, force=force)
    report.targets = distribute(
        list(config.targets.values()),
        library_dir,
        dry_run=dry_run,
        force=force,
        entries=entries,
    )

    report.library_cleanup = cleanup_library(library_dir, dry_run=dry_run, entries=entries)
    for target in config.enabled_targets():
        report.target_cleanups[target.name] = cleanup_target(
            target, library_dir, dry_run=dry_run, entries=entries
        )

    return report
