"""Plain directory source handler."""
from tome.core.sources.base import SourceHandler, SourceScan, scan_for_skills
from tome.models.skill import Source


class DirectorySourceHandler(SourceHandler):
    """Handle sources that are a directory of skill directories."""

    def discover(self, source: Source) -> SourceScan:
        """
        Scan ``source.path`` for skill directories.

        Args:
            source: Source with type ``directory``

        Returns:
            SourceScan; a missing path yields a warning and no skills
        """
        scan = SourceScan()

        if not source.path.is_dir():
            scan.warn(f"source '{source.name}' path does not exist: {source.path}")
            return scan

        scan_for_skills(source.path, source.name, scan)
        return scan
