"""Base classes for target handlers."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from tome.core.library import LibraryEntry
from tome.models.result import OperationResult
from tome.models.skill import Target


class TargetHandler(ABC):
    """Abstract base class for distribution methods."""

    @abstractmethod
    def distribute(
        self,
        target: Target,
        library_dir: Path,
        dry_run: bool = False,
        force: bool = False,
        entries: Optional[Sequence[LibraryEntry]] = None,
    ) -> OperationResult:
        """
        Make an enabled target reflect the library.

        Args:
            target: Target to update
            library_dir: Library directory
            dry_run: Count decisions without writing
            force: Rewrite entries that are already correct
            entries: Library contents to use instead of reading library_dir

        Returns:
            OperationResult for this target

        Raises:
            TargetError: If this target cannot be updated
            LinkError: If a managed root cannot be read or created
        """
        pass
