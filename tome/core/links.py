"""Symlink primitives shared by consolidation, distribution and cleanup.

Every function that changes the filesystem takes ``dry_run`` and branches
at the write itself, so a counted decision and the performed action cannot
diverge.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from tome.core.errors import LinkError
from tome.models.result import LinkAction, OperationResult

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tome-tmp"


def read_link(link_path: Path) -> Optional[Path]:
    """
    Read the raw stored target of a symlink.

    Args:
        link_path: Path that may be a symlink

    Returns:
        The raw target (possibly relative), or None if not a symlink
    """
    try:
        return Path(os.readlink(link_path))
    except OSError:
        return None


def resolve_link_target(link_path: Path, raw_target: Path) -> Path:
    """
    Turn a raw symlink target into a normalized absolute path.

    Relative targets are interpreted against the link's parent directory.
    Only the link itself is followed; the returned path is not resolved any
    further.
    """
    if not raw_target.is_absolute():
        raw_target = link_path.absolute().parent / raw_target
    return Path(os.path.normpath(raw_target))


def link_target(link_path: Path) -> Optional[Path]:
    """Absolute path a symlink points at, or None if it is not a symlink."""
    raw_target = read_link(link_path)
    if raw_target is None:
        return None
    return resolve_link_target(link_path, raw_target)


def _through_real_parent(path: Path) -> Path:
    path = Path(os.path.normpath(path.absolute()))
    return Path(os.path.realpath(path.parent)) / path.name


def same_location(first: Path, second: Path) -> bool:
    """
    Compare two paths without following their final component.

    Paths spelled through different (but equivalent) parent directories,
    e.g. via a symlinked temp dir, compare equal.
    """
    first_norm = Path(os.path.normpath(first.absolute()))
    second_norm = Path(os.path.normpath(second.absolute()))
    if first_norm == second_norm:
        return True
    return _through_real_parent(first_norm) == _through_real_parent(second_norm)


def link_points_to(link_path: Path, expected: Path) -> bool:
    """Whether ``link_path`` is a symlink whose target is ``expected``."""
    target = link_target(link_path)
    if target is None:
        return False
    return same_location(target, expected)


def is_within(path: Path, directory: Path) -> bool:
    """Whether ``path`` is ``directory`` itself or lies underneath it."""
    path = Path(os.path.normpath(path.absolute()))
    roots = {
        Path(os.path.normpath(directory.absolute())),
        Path(os.path.realpath(directory)),
    }
    candidates = {path, _through_real_parent(path)}
    for candidate in candidates:
        for root in roots:
            if candidate == root or root in candidate.parents:
                return True
    return False


def ensure_directory(path: Path, dry_run: bool) -> None:
    """
    Create a managed root directory if it is missing.

    Raises:
        LinkError: If the path exists but is not a directory, or cannot be created
    """
    if path.is_dir():
        return
    if path.exists() or path.is_symlink():
        raise LinkError(f"{path} exists but is not a directory")
    if dry_run:
        logger.debug("[dry-run] would create directory %s", path)
        return
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LinkError(f"failed to create directory {path}: {e}") from e
    logger.debug("created directory %s", path)


def create_link(link_path: Path, destination: Path, dry_run: bool) -> None:
    """Create a new symlink ``link_path`` -> ``destination``."""
    if dry_run:
        logger.debug("[dry-run] would link %s -> %s", link_path, destination)
        return
    try:
        os.symlink(destination, link_path, target_is_directory=True)
    except OSError as e:
        raise LinkError(f"failed to symlink {link_path} -> {destination}: {e}") from e
    logger.debug("linked %s -> %s", link_path, destination)


def replace_link(link_path: Path, destination: Path, dry_run: bool) -> None:
    """
    Atomically repoint an existing symlink.

    A temporary link is created next to ``link_path`` and renamed over it,
    so the path never disappears.
    """
    if dry_run:
        logger.debug("[dry-run] would relink %s -> %s", link_path, destination)
        return
    if not link_path.is_symlink():
        raise LinkError(f"refusing to replace {link_path}: not a symlink")

    temp_path = link_path.with_name(f".{link_path.name}{TEMP_SUFFIX}")
    try:
        if temp_path.is_symlink():
            temp_path.unlink()
        os.symlink(destination, temp_path, target_is_directory=True)
        os.replace(temp_path, link_path)
    except OSError as e:
        raise LinkError(f"failed to relink {link_path} -> {destination}: {e}") from e
    logger.debug("relinked %s -> %s", link_path, destination)


def remove_link(link_path: Path, dry_run: bool) -> None:
    """Remove a symlink. Real files and directories are never removed."""
    if not link_path.is_symlink():
        raise LinkError(f"refusing to remove {link_path}: not a symlink")
    if dry_run:
        logger.debug("[dry-run] would remove link %s", link_path)
        return
    try:
        link_path.unlink()
    except OSError as e:
        raise LinkError(f"failed to remove symlink {link_path}: {e}") from e
    logger.debug("removed link %s", link_path)


def reconcile_link(
    result: OperationResult,
    link_path: Path,
    destination: Path,
    dry_run: bool,
    force: bool = False,
) -> LinkAction:
    """
    Make ``link_path`` a symlink to ``destination`` and count the decision.

    Absent paths are created, correct links are left alone, wrong links are
    replaced and anything that is not a symlink is reported and skipped.

    Args:
        result: Result to record the decision (and any warning) in
        link_path: Managed path
        destination: Where the link must point
        dry_run: Decide and count without writing
        force: Recreate correct links as well

    Returns:
        The decision taken for this path
    """
    action: LinkAction
    if link_path.is_symlink():
        if not force and link_points_to(link_path, destination):
            action = "unchanged"
        else:
            replace_link(link_path, destination, dry_run)
            action = "updated"
    elif link_path.exists():
        message = f"{link_path} exists and is not a symlink, skipping"
        logger.warning(message)
        result.warnings.append(message)
        action = "skipped"
    else:
        create_link(link_path, destination, dry_run)
        action = "created"

    result.record(action)
    return action
