"""FastMCP stdio server exposing discovered skills for reading.

Registered in MCP targets as ``tome-mcp``; read-only.
"""
import logging
import sys
from typing import List, Optional, Sequence

from fastmcp import FastMCP

from tome.core.config import Config, load_config_or_default
from tome.core.discovery import discover_all
from tome.core.errors import TomeError
from tome.models.skill import DiscoveredSkill

logger = logging.getLogger(__name__)

NO_SKILLS_MESSAGE = "No skills found. Run `tome init` to configure sources."


def format_skill_list(skills: Sequence[DiscoveredSkill]) -> str:
    """Render the list_skills tool output."""
    if not skills:
        return NO_SKILLS_MESSAGE

    lines = [f"{len(skills)} skill(s) found:\n"]
    for skill in skills:
        lines.append(
            f"- {skill.name} (source: {skill.source_name}, path: {skill.origin_path})"
        )
    return "\n".join(lines)


def find_skill(skills: Sequence[DiscoveredSkill], name: str) -> Optional[DiscoveredSkill]:
    for skill in skills:
        if skill.name == name:
            return skill
    return None


def read_skill_content(skills: Sequence[DiscoveredSkill], name: str) -> str:
    """
    Return the marker file content of a skill.

    Raises:
        ValueError: If the skill is unknown or its file cannot be read
    """
    skill = find_skill(skills, name)
    if skill is None:
        raise ValueError(
            f"Skill '{name}' not found. Use list_skills to see available skills."
        )

    try:
        return skill.marker_path.read_text()
    except OSError as e:
        raise ValueError(f"failed to read {skill.marker_path}: {e}") from e


def create_server(config: Config) -> FastMCP:
    """Discover skills once and build the MCP server around them."""
    skills: List[DiscoveredSkill]
    skills, _ = discover_all(config.sources, config.exclude)

    mcp = FastMCP(
        name="tome-mcp",
        instructions="Tome MCP server: exposes discovered AI coding skills for reading",
    )

    @mcp.tool(description="List all skills available in the tome library")
    def list_skills() -> str:
        return format_skill_list(skills)

    @mcp.tool(description="Read the SKILL.md content of a skill by name")
    def read_skill(name: str) -> str:
        return read_skill_content(skills, name)

    return mcp


def serve(config: Config) -> None:
    """Run the server on stdio until the client disconnects."""
    create_server(config).run()


def main() -> int:
    """Console entry point for ``tome-mcp``."""
    # stdout carries the protocol
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    try:
        config = load_config_or_default()
        config.validate()
    except TomeError as e:
        logger.error(str(e))
        return 1

    serve(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
