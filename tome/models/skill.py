"""Data models for skills, sources and targets."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
import re

# A directory is a skill when it directly contains this file.
MARKER_FILE = "SKILL.md"

NAME_PATTERN = re.compile(r'^[a-z0-9-]+$')


class SourceKind(str, Enum):
    """How skills are discovered in a source."""

    CLAUDE_PLUGINS = "claude-plugins"
    DIRECTORY = "directory"


class TargetMethod(str, Enum):
    """How the library is distributed to a target."""

    SYMLINK = "symlink"
    MCP = "mcp"


@dataclass(frozen=True)
class Source:
    """A configured origin of skills."""

    name: str
    path: Path
    kind: SourceKind

    def __post_init__(self) -> None:
        """Validate source data after initialization."""
        if not self.name:
            raise ValueError("source name cannot be empty")


@dataclass(frozen=True)
class Target:
    """A configured distribution destination."""

    name: str
    method: TargetMethod
    enabled: bool = True
    skills_dir: Optional[Path] = None
    mcp_config: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate that the method has the location it needs."""
        if not self.name:
            raise ValueError("target name cannot be empty")

        if self.method == TargetMethod.SYMLINK and self.skills_dir is None:
            raise ValueError(
                f"Target '{self.name}' uses the symlink method but has no skills_dir"
            )
        if self.method == TargetMethod.MCP and self.mcp_config is None:
            raise ValueError(
                f"Target '{self.name}' uses the mcp method but has no mcp_config"
            )

    @property
    def location(self) -> Path:
        """The directory or config file this target writes to."""
        if self.method == TargetMethod.SYMLINK:
            return self.skills_dir
        return self.mcp_config


@dataclass(frozen=True)
class DiscoveredSkill:
    """A skill found in one of the configured sources."""

    name: str
    origin_path: Path
    source_name: str

    def __post_init__(self) -> None:
        """Reject names that cannot be used as a library entry."""
        if not self.name:
            raise ValueError("skill name cannot be empty")
        if "/" in self.name or "\\" in self.name:
            raise ValueError(f"skill name contains path separator: '{self.name}'")
        if self.name.startswith("."):
            raise ValueError(f"skill name cannot start with '.': '{self.name}'")

    @property
    def has_conventional_name(self) -> bool:
        """Whether the name uses only lowercase letters, digits and hyphens."""
        return bool(NAME_PATTERN.match(self.name))

    @property
    def marker_path(self) -> Path:
        return self.origin_path / MARKER_FILE
