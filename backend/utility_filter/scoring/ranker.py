"""
Video Ranking Module
====================
Ranks the scored videos of a listing page.

Features:
- Score-based ranking
- Tie-breaking by vote count
- Top-K selection and tier filtering
- Rank statistics and rank comparison
"""

import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from ..models import ScoredVideo, Tier

logger = logging.getLogger(__name__)


@dataclass
class RankingResult:
    """Result of ranking operation."""
    ranked_videos: List[ScoredVideo]
    total_count: int
    score_range: Tuple[float, float]  # (min, max)
    score_mean: float
    score_std: float
    tier_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'ranked_videos': [v.to_dict() for v in self.ranked_videos],
            'total_count': self.total_count,
            'score_range': list(self.score_range),
            'score_mean': self.score_mean,
            'score_std': self.score_std,
            'tier_counts': dict(self.tier_counts),
        }


class VideoRanker:
    """
    Ranks scored videos by utility score.

    Features:
    - Descending score ranking (highest = best)
    - Ties broken by effective vote count (better-evidenced first)
    - Top-K filtering with an optional minimum score
    - Tier filtering

    Usage:
        ranker = VideoRanker()
        ranked = ranker.rank(videos)
        top_5 = ranker.top_k(videos, k=5)
    """

    def __init__(
        self,
        tie_breaker: str = 'votes',
        ascending: bool = False
    ):
        """
        Initialize the ranker.

        Args:
            tie_breaker: How to break ties ('votes', 'confidence', 'none')
            ascending: If True, lower scores rank higher
        """
        if tie_breaker not in ('votes', 'confidence', 'none'):
            raise ValueError(f"Unknown tie breaker: {tie_breaker}")
        self.tie_breaker = tie_breaker
        self.ascending = ascending

    def rank(
        self,
        videos: List[ScoredVideo],
        update_rank_field: bool = True
    ) -> List[ScoredVideo]:
        """
        Rank videos by their scores.

        Args:
            videos: Scored videos
            update_rank_field: Whether to update video.rank

        Returns:
            Videos sorted by rank (best first)
        """
        if not videos:
            return []

        # sorted() is stable, so full ties keep page order
        sorted_videos = sorted(
            videos,
            key=self._sort_key,
            reverse=not self.ascending
        )

        if update_rank_field:
            for rank, video in enumerate(sorted_videos, 1):
                video.rank = rank

        return sorted_videos

    def _sort_key(self, video: ScoredVideo) -> tuple:
        """Tuple of (score, tie_breaker_value)."""
        if self.tie_breaker == 'votes':
            secondary = video.result.diagnostics.effective_votes
        elif self.tie_breaker == 'confidence':
            secondary = int(video.result.is_reliable)
        else:
            secondary = 0

        return (video.score, secondary)

    def top_k(
        self,
        videos: List[ScoredVideo],
        k: int,
        min_score: Optional[float] = None
    ) -> List[ScoredVideo]:
        """
        Get top K videos by score.

        Args:
            videos: Scored videos
            k: Number of videos to return
            min_score: Optional minimum score threshold

        Returns:
            Top K videos, ranked
        """
        ranked = self.rank(videos, update_rank_field=False)

        if min_score is not None:
            ranked = [v for v in ranked if v.score >= min_score]

        top = ranked[:k]

        for rank, video in enumerate(top, 1):
            video.rank = rank

        return top

    def filter_by_tier(
        self,
        videos: List[ScoredVideo],
        tiers: List[Tier]
    ) -> List[ScoredVideo]:
        """
        Keep only videos in the given tiers.

        Args:
            videos: Scored videos
            tiers: Tiers to keep

        Returns:
            Filtered and ranked videos
        """
        wanted = set(Tier(t) for t in tiers)
        filtered = [v for v in videos if v.result.tier in wanted]
        return self.rank(filtered)

    def get_ranking_result(self, videos: List[ScoredVideo]) -> RankingResult:
        """
        Get detailed ranking statistics.

        Args:
            videos: Videos to rank

        Returns:
            RankingResult with statistics
        """
        ranked = self.rank(videos)

        if not ranked:
            return RankingResult(
                ranked_videos=[],
                total_count=0,
                score_range=(0.0, 0.0),
                score_mean=0.0,
                score_std=0.0
            )

        scores = [v.score for v in ranked]

        score_mean = sum(scores) / len(scores)
        variance = sum((s - score_mean) ** 2 for s in scores) / len(scores)

        tier_counts = {tier.value: 0 for tier in Tier}
        for video in ranked:
            tier_counts[video.result.tier.value] += 1

        return RankingResult(
            ranked_videos=ranked,
            total_count=len(ranked),
            score_range=(min(scores), max(scores)),
            score_mean=score_mean,
            score_std=variance ** 0.5,
            tier_counts=tier_counts
        )

    def compare_rankings(
        self,
        ranking1: List[ScoredVideo],
        ranking2: List[ScoredVideo]
    ) -> dict:
        """
        Compare two rankings of the same listing.

        Useful for comparing scoring strategies or calibrations.

        Returns dict with comparison metrics.
        """
        ids1 = [v.video_id for v in ranking1]
        ids2 = [v.video_id for v in ranking2]

        common = set(ids1) & set(ids2)

        if not common:
            return {
                'common_videos': 0,
                'rank_correlation': None,
                'top_1_agreement': False,
                'top_3_agreement': 0
            }

        # Spearman's rho over the shared videos
        rank_diffs = []
        for video_id in common:
            rank1 = ids1.index(video_id) + 1
            rank2 = ids2.index(video_id) + 1
            rank_diffs.append((rank1 - rank2) ** 2)

        n = len(rank_diffs)
        d_squared_sum = sum(rank_diffs)
        rho = 1 - (6 * d_squared_sum) / (n * (n**2 - 1)) if n > 1 else 1.0

        return {
            'common_videos': len(common),
            'rank_correlation': rho,
            'top_1_agreement': ids1[0] == ids2[0],
            'top_3_agreement': len(set(ids1[:3]) & set(ids2[:3]))
        }


def rank_videos(
    videos: List[ScoredVideo],
    top_k: Optional[int] = None
) -> List[ScoredVideo]:
    """
    Convenience function to rank videos.

    Args:
        videos: Scored videos
        top_k: Optional limit on results

    Returns:
        Ranked videos
    """
    ranker = VideoRanker()

    if top_k:
        return ranker.top_k(videos, top_k)
    return ranker.rank(videos)
