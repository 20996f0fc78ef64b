"""Skill discovery across all configured sources."""
import logging
from typing import Collection, Dict, List, Sequence, Tuple

from tome.core.sources import SourceScan, get_source_handler
from tome.models.skill import DiscoveredSkill, Source

logger = logging.getLogger(__name__)


def discover_source(source: Source) -> SourceScan:
    """Discover skills from a single source."""
    handler = get_source_handler(source.kind)
    return handler.discover(source)


def discover_all(
    sources: Sequence[Source],
    exclusions: Collection[str] = (),
) -> Tuple[List[DiscoveredSkill], List[str]]:
    """
    Discover skills from every source, in configured order.

    When several sources (or one source twice) provide the same skill name,
    the first occurrence wins and a warning names both sources. Excluded
    names are dropped after deduplication.

    Args:
        sources: Configured sources, highest priority first
        exclusions: Skill names to drop

    Returns:
        Tuple of (skills, warnings)
    """
    seen: Dict[str, DiscoveredSkill] = {}
    skills: List[DiscoveredSkill] = []
    warnings: List[str] = []

    for source in sources:
        scan = discover_source(source)
        warnings.extend(scan.warnings)

        for skill in scan.skills:
            winner = seen.get(skill.name)
            if winner is None:
                seen[skill.name] = skill
                skills.append(skill)
                continue

            if skill.name in exclusions:
                continue
            if winner.source_name == skill.source_name:
                message = (
                    f"skill '{skill.name}' found twice in '{winner.source_name}', "
                    f"using {winner.origin_path}"
                )
            else:
                message = (
                    f"skill '{skill.name}' found in both '{winner.source_name}' and "
                    f"'{skill.source_name}', using '{winner.source_name}'"
                )
            logger.warning(message)
            warnings.append(message)

    discovered = [skill for skill in skills if skill.name not in exclusions]
    logger.debug(
        "discovered %d skill(s) from %d source(s), %d excluded",
        len(discovered), len(sources), len(skills) - len(discovered),
    )
    return discovered, warnings
