"""Diagnose and optionally repair broken links and missing source paths."""
import logging
from typing import List

from tome.core.cleanup import cleanup_library, cleanup_target, find_broken_links, find_stale_links
from tome.core.config import Config
from tome.core.links import read_link
from tome.models.result import Diagnosis, Issue
from tome.models.skill import TargetMethod

logger = logging.getLogger(__name__)


def check_library(config: Config) -> List[Issue]:
    """Report a missing library directory or broken library links."""
    library_dir = config.library_dir
    if not library_dir.is_dir():
        return [Issue(
            kind="missing_library",
            path=library_dir,
            message="library directory does not exist",
        )]

    issues = []
    for path in find_broken_links(library_dir):
        issues.append(Issue(
            kind="broken_link",
            path=path,
            message=f"broken symlink: {path} -> {read_link(path)}",
        ))
    return issues


def check_targets(config: Config) -> List[Issue]:
    """Report missing skills directories and stale links in enabled symlink targets."""
    issues = []
    for target in config.enabled_targets():
        if target.method != TargetMethod.SYMLINK:
            continue

        if not target.skills_dir.is_dir():
            issues.append(Issue(
                kind="missing_target_dir",
                path=target.skills_dir,
                message=f"target directory does not exist ({target.skills_dir})",
                target_name=target.name,
            ))
            continue

        for path in find_stale_links(target.skills_dir, config.library_dir):
            issues.append(Issue(
                kind="stale_link",
                path=path,
                message=f"stale symlink {path}",
                target_name=target.name,
            ))
    return issues


def check_sources(config: Config) -> List[Issue]:
    """Report configured source paths that do not exist."""
    issues = []
    for source in config.sources:
        if not source.path.exists():
            issues.append(Issue(
                kind="missing_source",
                path=source.path,
                message=f"source '{source.name}' path does not exist: {source.path}",
            ))
    return issues


def diagnose(config: Config) -> Diagnosis:
    """
    Inspect the library, targets and sources without changing anything.

    Args:
        config: Loaded configuration

    Returns:
        Diagnosis; ``configured`` is False when there is no configuration yet
    """
    if not config.is_configured:
        return Diagnosis(configured=False)

    issues = check_library(config) + check_targets(config) + check_sources(config)
    for issue in issues:
        logger.debug("doctor: %s", issue.message)
    return Diagnosis(issues=issues)


def doctor(config: Config, dry_run: bool = False, repair: bool = False) -> Diagnosis:
    """
    Diagnose and, if requested, repair by running both cleanups.

    With ``repair`` and not ``dry_run`` the cleanups run for real and the
    returned diagnosis describes the state after repair. With ``dry_run``
    the cleanups only count what they would remove.

    Args:
        config: Loaded configuration
        dry_run: Never write, only report
        repair: Run library and target cleanup

    Returns:
        Diagnosis with cleanup results attached when repair was requested
    """
    diagnosis = diagnose(config)
    if not repair or not diagnosis.configured or diagnosis.healthy:
        return diagnosis

    library_cleanup = cleanup_library(config.library_dir, dry_run=dry_run)
    target_cleanups = {
        target.name: cleanup_target(target, config.library_dir, dry_run=dry_run)
        for target in config.enabled_targets()
        if target.method == TargetMethod.SYMLINK
    }

    if not dry_run:
        diagnosis = diagnose(config)
        diagnosis.repaired = True

    diagnosis.library_cleanup = library_cleanup
    diagnosis.target_cleanups = target_cleanups
    return diagnosis
