"""MCP distribution: register tome's own server in a target's MCP config."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from tome.core.errors import TargetConfigError, TargetError
from tome.core.library import LibraryEntry
from tome.core.targets.base import TargetHandler
from tome.models.result import OperationResult
from tome.models.skill import Target

logger = logging.getLogger(__name__)

SERVER_MAP_KEY = "mcpServers"
SERVER_NAME = "tome"
SERVER_COMMAND = "tome-mcp"


def server_entry(existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the launch descriptor for tome's MCP server.

    Keys the user added to an existing entry (``env``, ``cwd``...) are kept;
    ``command`` and ``args`` are always ours.
    """
    entry: Dict[str, Any] = dict(existing or {})
    entry["command"] = SERVER_COMMAND
    entry["args"] = []
    entry.setdefault("env", {})
    return entry


class McpTargetHandler(TargetHandler):
    """Insert or update a single named server in a shared MCP config document."""

    def __init__(self, server_name: str = SERVER_NAME):
        self.server_name = server_name

    def load_document(self, target: Target) -> Dict[str, Any]:
        """
        Read the target's MCP config, or an empty document if it is missing.

        Raises:
            TargetConfigError: If the file is not a JSON object
            TargetError: If the file cannot be read
        """
        path = target.mcp_config
        if not path.exists():
            return {}

        try:
            content = path.read_text()
        except OSError as e:
            raise TargetError(target.name, f"failed to read {path}: {e}") from e

        if not content.strip():
            return {}

        try:
            document = json.loads(content)
        except ValueError as e:
            raise TargetConfigError(target.name, f"failed to parse {path}: {e}") from e

        if not isinstance(document, dict):
            raise TargetConfigError(target.name, f"{path} is not a JSON object")
        return document

    def write_document(
        self, target: Target, document: Dict[str, Any], dry_run: bool
    ) -> None:
        """
        Write the document back through a temporary file.

        A symlinked config file is written through: the temporary file sits
        next to the file the link resolves to, and the link is kept.
        """
        path = target.mcp_config
        if dry_run:
            logger.debug("[dry-run] would write %s", path)
            return

        path = Path(os.path.realpath(path))
        temp_path = path.with_name(f".{path.name}.tome-tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(document, indent=2) + "\n")
            os.replace(temp_path, path)
        except OSError as e:
            raise TargetError(target.name, f"failed to write {path}: {e}") from e
        logger.debug("wrote %s", path)

    def distribute(
        self,
        target: Target,
        library_dir: Path,
        dry_run: bool = False,
        force: bool = False,
        entries: Optional[Sequence[LibraryEntry]] = None,
    ) -> OperationResult:
        result = OperationResult()
        document = self.load_document(target)

        servers = document.get(SERVER_MAP_KEY, {})
        if not isinstance(servers, dict):
            raise TargetConfigError(
                target.name,
                f"'{SERVER_MAP_KEY}' in {target.mcp_config} is not a JSON object",
            )

        present = self.server_name in servers
        existing = servers.get(self.server_name)
        desired = server_entry(existing if isinstance(existing, dict) else None)
        if present and existing == desired:
            result.unchanged += 1
            return result

        updated_servers = dict(servers)
        updated_servers[self.server_name] = desired
        updated_document = dict(document)
        updated_document[SERVER_MAP_KEY] = updated_servers

        self.write_document(target, updated_document, dry_run)
        if present:
            result.updated += 1
        else:
            result.created += 1

        logger.info(
            "target '%s': %s MCP server '%s' in %s",
            target.name, "updated" if present else "registered",
            self.server_name, target.mcp_config,
        )
        return result
