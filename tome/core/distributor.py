"""Distribution of the library to every configured target."""
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from tome.core.errors import TargetError
from tome.core.library import LibraryEntry
from tome.core.targets import get_target_handler
from tome.models.result import OperationResult
from tome.models.skill import Target

logger = logging.getLogger(__name__)


def distribute_to_target(
    target: Target,
    library_dir: Path,
    dry_run: bool = False,
    force: bool = False,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> OperationResult:
    """
    Distribute the library to a single target.

    A disabled target is not touched at all and gets a result marked
    ``disabled``.

    Raises:
        TargetError: If this target's config cannot be used
        LinkError: If a managed root cannot be read or created
    """
    if not target.enabled:
        logger.debug("target '%s' is disabled, skipping", target.name)
        return OperationResult(disabled=True)

    handler = get_target_handler(target.method)
    return handler.distribute(
        target, library_dir, dry_run=dry_run, force=force, entries=entries
    )


def distribute(
    targets: Sequence[Target],
    library_dir: Path,
    dry_run: bool = False,
    force: bool = False,
    entries: Optional[Sequence[LibraryEntry]] = None,
) -> Dict[str, OperationResult]:
    """
    Distribute the library to every target, in configured order.

    A target whose own config is unusable records the error on its result;
    the remaining targets are still processed.

    Args:
        targets: Configured targets
        library_dir: Library directory
        dry_run: Count decisions without writing
        force: Rewrite entries that are already correct
        entries: Library contents to use instead of reading library_dir

    Returns:
        Mapping of target name to its OperationResult
    """
    results: Dict[str, OperationResult] = {}

    for target in targets:
        try:
            results[target.name] = distribute_to_target(
                target, library_dir, dry_run=dry_run, force=force, entries=entries
            )
        except TargetError as e:
            logger.error(str(e))
            results[target.name] = OperationResult(error=str(e))

    return results
