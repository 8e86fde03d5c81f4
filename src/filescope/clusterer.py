"""Group extracted file names into naming-pattern clusters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from config import Settings
from .logging_utils import get_logger
from .pattern_matcher import PatternMatcher
from .pattern_normalizer import PatternNormalizer
from .pipeline import MISCELLANEOUS, ExtractedName, PatternGroup
from .prefix_extractor import PrefixExtractor

logger = get_logger(__name__)

ClusterKey = Tuple[str, str]  # (prefix, pattern)


@dataclass
class ClusterCandidate:
    prefix: str
    pattern: str
    files: List[ExtractedName] = field(default_factory=list)


class PatternClusterer:
    """Cluster names by shared literal prefix or closely aligned pattern strings."""

    def __init__(
        self,
        settings: Settings,
        *,
        normalizer: Optional[PatternNormalizer] = None,
        prefix_extractor: Optional[PrefixExtractor] = None,
        matcher: Optional[PatternMatcher] = None,
    ):
        self.settings = settings
        self.normalizer = normalizer or PatternNormalizer(settings)
        self.prefix_extractor = prefix_extractor or PrefixExtractor()
        self.matcher = matcher or PatternMatcher(settings)

    def cluster(self, names: Sequence[ExtractedName]) -> List[PatternGroup]:
        clusters: Dict[ClusterKey, ClusterCandidate] = {}

        for item in names:
            pattern = self.normalizer.normalize(item.name)
            prefix = self.prefix_extractor.extract_from_name(item.name)
            target = self._find_cluster(clusters, prefix, pattern)
            if target is None:
                logger.debug("Opening cluster prefix=%r pattern=%r for %s", prefix, pattern, item.name)
                target = ClusterCandidate(prefix=prefix, pattern=pattern)
                clusters[(prefix, pattern)] = target
            target.files.append(item)

        groups = [PatternGroup(pattern=c.pattern, files=list(c.files)) for c in clusters.values()]
        groups.sort(key=lambda group: group.count, reverse=True)
        return self._demote_small_groups(groups)

    def _find_cluster(
        self,
        clusters: Dict[ClusterKey, ClusterCandidate],
        prefix: str,
        pattern: str,
    ) -> Optional[ClusterCandidate]:
        for candidate in clusters.values():
            if candidate.prefix == prefix or self.matcher.is_similar(pattern, candidate.pattern):
                return candidate
        return None

    def _demote_small_groups(self, groups: List[PatternGroup]) -> List[PatternGroup]:
        regular: List[PatternGroup] = []
        leftovers: List[ExtractedName] = []
        for group in groups:
            if not group.is_miscellaneous and group.count < self.settings.min_group_size:
                leftovers.extend(group.files)
            else:
                regular.append(group)

        existing = next((group for group in regular if group.is_miscellaneous), None)
        if existing is not None:
            regular.remove(existing)
            leftovers = existing.files + leftovers

        if leftovers:
            regular.append(PatternGroup(pattern=MISCELLANEOUS, files=leftovers))
            logger.debug("Moved %s files into %s", len(leftovers), MISCELLANEOUS)
        return regular
