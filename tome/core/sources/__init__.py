"""Source handlers for skill discovery."""
from typing import Dict

from tome.core.sources.base import SourceHandler, SourceScan, scan_for_skills
from tome.core.sources.claude_plugins import ClaudePluginsSourceHandler
from tome.core.sources.directory import DirectorySourceHandler
from tome.models.skill import SourceKind

HANDLERS: Dict[SourceKind, SourceHandler] = {
    SourceKind.CLAUDE_PLUGINS: ClaudePluginsSourceHandler(),
    SourceKind.DIRECTORY: DirectorySourceHandler(),
}


def get_source_handler(kind: SourceKind) -> SourceHandler:
    """Look up the handler for a source kind."""
    try:
        return HANDLERS[kind]
    except KeyError:
        raise ValueError(f"Unsupported source type: {kind}") from None


__all__ = [
    "SourceHandler",
    "SourceScan",
    "scan_for_skills",
    "ClaudePluginsSourceHandler",
    "DirectorySourceHandler",
    "HANDLERS",
    "get_source_handler",
]
