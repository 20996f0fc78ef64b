"""Result models returned by every pipeline stage."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, Optional

from tome.models.skill import DiscoveredSkill

LinkAction = Literal["created", "updated", "unchanged", "skipped"]


@dataclass
class OperationResult:
    """Outcome counters for one stage (or one target).

    Under dry-run the counters describe the decisions that were taken,
    not writes that were performed.
    """

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    disabled: bool = False

    def record(self, action: LinkAction) -> None:
        """Count a single link decision."""
        if action == "created":
            self.created += 1
        elif action == "updated":
            self.updated += 1
        elif action == "unchanged":
            self.unchanged += 1
        elif action == "skipped":
            self.skipped += 1
        else:
            raise ValueError(f"Unknown link action: {action}")

    @property
    def changed(self) -> int:
        """Number of entries that were (or would be) written or removed."""
        return self.created + self.updated + self.removed

    @property
    def ok(self) -> bool:
        return self.error is None

    def counts(self) -> Dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "removed": self.removed,
            "skipped": self.skipped,
        }


@dataclass
class Issue:
    """A single problem found by the doctor."""

    kind: Literal[
        "missing_library",
        "broken_link",
        "missing_target_dir",
        "stale_link",
        "missing_source",
    ]
    path: Path
    message: str
    target_name: Optional[str] = None


@dataclass
class Diagnosis:
    """Aggregated health report for the library, targets and sources."""

    configured: bool = True
    issues: List[Issue] = field(default_factory=list)
    repaired: bool = False
    library_cleanup: Optional[OperationResult] = None
    target_cleanups: Dict[str, OperationResult] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return not self.issues

    @property
    def broken_link_count(self) -> int:
        return sum(1 for issue in self.issues if issue.kind == "broken_link")

    @property
    def stale_link_count(self) -> int:
        return sum(1 for issue in self.issues if issue.kind == "stale_link")

    @property
    def unreachable_sources(self) -> List[Path]:
        return [issue.path for issue in self.issues if issue.kind == "missing_source"]


@dataclass
class SyncReport:
    """Results of a full discover, consolidate, distribute and cleanup run."""

    dry_run: bool
    skills: List[DiscoveredSkill] = field(default_factory=list)
    discovery_warnings: List[str] = field(default_factory=list)
    library: Optional[OperationResult] = None
    targets: Dict[str, OperationResult] = field(default_factory=dict)
    library_cleanup: Optional[OperationResult] = None
    target_cleanups: Dict[str, OperationResult] = field(default_factory=dict)

    @property
    def removed_from_targets(self) -> int:
        return sum(result.removed for result in self.target_cleanups.values())

    @property
    def failed_targets(self) -> List[str]:
        return [name for name, result in self.targets.items() if not result.ok]
