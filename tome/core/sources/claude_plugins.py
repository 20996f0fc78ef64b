"""Claude Code plugin cache source handler."""
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from tome.core.sources.base import (
    SourceHandler,
    SourceScan,
    add_skill,
    has_marker,
    scan_for_skills,
)
from tome.models.skill import Source

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAME = "installed_plugins.json"
INSTALL_PATH_KEY = "installPath"


def parse_install_records(data: Any) -> Optional[List[Any]]:
    """
    Extract the install records from a parsed plugins descriptor.

    Supports two formats:
    1. v1, a flat list of install records:
       [{"installPath": "..."}, ...]

    2. v2, a versioned envelope keyed by plugin:
       {"version": 2, "plugins": {"name@registry": [{"installPath": "..."}]}}

    Args:
        data: Parsed JSON document

    Returns:
        Install records in document order, or None if the shape is not recognized
    """
    if isinstance(data, list):
        return data

    if isinstance(data, dict) and isinstance(data.get("plugins"), dict):
        records: List[Any] = []
        for plugin_records in data["plugins"].values():
            if isinstance(plugin_records, list):
                records.extend(plugin_records)
        return records

    return None


class ClaudePluginsSourceHandler(SourceHandler):
    """Handle sources backed by Claude Code's installed_plugins.json."""

    def locate_descriptor(self, source: Source, scan: SourceScan) -> Optional[Path]:
        """
        Find the plugins descriptor for a source.

        The source path may be the descriptor itself, the directory holding
        it, or the plugin cache directory whose parent holds it.
        """
        if source.path.is_file():
            return source.path

        descriptor = source.path / DESCRIPTOR_FILENAME
        if descriptor.is_file():
            return descriptor

        parent_descriptor = source.path.parent / DESCRIPTOR_FILENAME
        if parent_descriptor.is_file():
            scan.warn(
                f"{DESCRIPTOR_FILENAME} not found at '{descriptor}', "
                "trying parent directory"
            )
            return parent_descriptor

        scan.warn(f"no {DESCRIPTOR_FILENAME} found for source '{source.name}'")
        return None

    def discover(self, source: Source) -> SourceScan:
        """
        Discover skills under every installed plugin's ``skills/`` directory.

        Args:
            source: Source with type ``claude-plugins``

        Returns:
            SourceScan; unreadable, malformed or unrecognized descriptors
            yield a warning and no skills
        """
        scan = SourceScan()

        descriptor = self.locate_descriptor(source, scan)
        if descriptor is None:
            return scan

        try:
            data = json.loads(descriptor.read_text())
        except OSError as e:
            scan.warn(f"failed to read {descriptor}: {e}")
            return scan
        except ValueError as e:
            scan.warn(f"failed to parse {descriptor}: {e}")
            return scan

        records = parse_install_records(data)
        if records is None:
            scan.warn(f"unrecognized {DESCRIPTOR_FILENAME} format in {descriptor}")
            return scan

        for record in records:
            install_path = record.get(INSTALL_PATH_KEY) if isinstance(record, dict) else None
            if not isinstance(install_path, str) or not install_path:
                logger.debug("ignoring plugin record without %s in %s", INSTALL_PATH_KEY, descriptor)
                continue

            install_dir = Path(install_path)
            if has_marker(install_dir):
                add_skill(scan, install_dir.absolute(), source.name)

            skills_dir = install_dir / "skills"
            if skills_dir.is_dir():
                scan_for_skills(skills_dir, source.name, scan)

        return scan
