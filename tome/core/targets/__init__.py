"""Target handlers for skill distribution."""
from typing import Dict

from tome.core.targets.base import TargetHandler
from tome.core.targets.mcp import McpTargetHandler
from tome.core.targets.symlink import SymlinkTargetHandler
from tome.models.skill import TargetMethod

HANDLERS: Dict[TargetMethod, TargetHandler] = {
    TargetMethod.SYMLINK: SymlinkTargetHandler(),
    TargetMethod.MCP: McpTargetHandler(),
}


def get_target_handler(method: TargetMethod) -> TargetHandler:
    """Look up the handler for a distribution method."""
    try:
        return HANDLERS[method]
    except KeyError:
        raise ValueError(f"Unsupported distribution method: {method}") from None


__all__ = [
    "TargetHandler",
    "McpTargetHandler",
    "SymlinkTargetHandler",
    "HANDLERS",
    "get_target_handler",
]
