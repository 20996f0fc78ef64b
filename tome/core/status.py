"""Read-only summary of the library, sources and targets."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tome.core.config import Config
from tome.core.discovery import discover_source
from tome.core.errors import LinkError
from tome.core.library import read_library
from tome.models.skill import SourceKind, TargetMethod


@dataclass
class SourceStatus:
    name: str
    path: Path
    kind: SourceKind
    skill_count: int
    warnings: List[str] = field(default_factory=list)


@dataclass
class TargetStatus:
    name: str
    method: TargetMethod
    enabled: bool
    location: Path


@dataclass
class StatusReport:
    """Current state of the tome system."""

    library_dir: Path
    library_count: Optional[int]
    library_error: Optional[str] = None
    sources: List[SourceStatus] = field(default_factory=list)
    targets: List[TargetStatus] = field(default_factory=list)


def gather_status(config: Config) -> StatusReport:
    """
    Collect status without changing anything.

    Args:
        config: Loaded configuration

    Returns:
        StatusReport; ``library_count`` is None if the library cannot be read
    """
    try:
        library_count: Optional[int] = len(read_library(config.library_dir))
        library_error = None
    except LinkError as e:
        library_count = None
        library_error = str(e)

    report = StatusReport(
        library_dir=config.library_dir,
        library_count=library_count,
        library_error=library_error,
    )

    for source in config.sources:
        scan = discover_source(source)
        report.sources.append(SourceStatus(
            name=source.name,
            path=source.path,
            kind=source.kind,
            skill_count=len(scan.skills),
            warnings=scan.warnings,
        ))

    for target in config.targets.values():
        report.targets.append(TargetStatus(
            name=target.name,
            method=target.method,
            enabled=target.enabled,
            location=target.location,
        ))

    return report
