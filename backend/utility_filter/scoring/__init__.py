"""
Utility Scoring Module
======================
Scores and ranks videos from their engagement telemetry.

This module implements:
- Input normalization with divisor floors
- Independent component estimators (approval, volume, velocity, integrity)
- Title clickbait detection
- Composite assembly with decay, anti-bot floor, confidence and tiers
- Listing-page ranking
- Score explanations for the badge breakdown

Usage:
    from utility_filter.scoring import UtilityScorer

    scorer = UtilityScorer()
    result = scorer.score({"likes": 120, "dislikes": 4, "viewCount": 5300})

    # Rank a listing page
    ranked = scorer.score_and_rank(records, top_k=10)
"""

from .scorer import UtilityScorer, create_scorer, score_video, analyze_impact
from .strategies import (
    ScoringStrategy,
    ParetoUtilityScoring,
    ClassicScoring,
    STRATEGY_REGISTRY,
    get_strategy,
    classify_tier,
    classify_confidence,
)
from .normalizers import InputNormalizer, normalize_signals, parse_days_old
from .clickbait import ClickbaitDetector, CLICKBAIT_PHRASES
from .ranker import VideoRanker, RankingResult, rank_videos

__all__ = [
    'UtilityScorer',
    'create_scorer',
    'score_video',
    'analyze_impact',
    'ScoringStrategy',
    'ParetoUtilityScoring',
    'ClassicScoring',
    'STRATEGY_REGISTRY',
    'get_strategy',
    'classify_tier',
    'classify_confidence',
    'InputNormalizer',
    'normalize_signals',
    'parse_days_old',
    'ClickbaitDetector',
    'CLICKBAIT_PHRASES',
    'VideoRanker',
    'RankingResult',
    'rank_videos',
]
