"""
Utility Scorer Module
=====================
Main interface for scoring videos.

Combines normalization, a scoring strategy and ranking into a unified
workflow. The scorer holds only immutable configuration; every call is
independent, so one instance can be shared across threads.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from .strategies import ScoringStrategy, get_strategy
from .normalizers import InputNormalizer
from .ranker import VideoRanker, RankingResult
from ..models import VideoSignals, ScoreResult, ScoredVideo, Confidence
from ..config import ScoringConfig, WeightConfig, ThresholdConfig, get_config
from ..logging_config import get_utility_logger, log_video_score, log_scoring_decision

logger = get_utility_logger("scoring")

RawRecord = Union[VideoSignals, Mapping[str, Any], None]

# Weighted loss bands for explanations
IMPACT_SEVERE = 0.15
IMPACT_MODERATE = 0.08
IMPACT_LIGHT = 0.03
IMPACT_POSITIVE = 0.95


def analyze_impact(value: float, weight: float) -> str:
    """
    Classify how much a component held the score back.

    'positive' for near-perfect components, otherwise banded by the
    weighted loss (1 - value) * weight.
    """
    if value >= IMPACT_POSITIVE:
        return 'positive'
    loss = (1.0 - value) * weight
    if loss > IMPACT_SEVERE:
        return 'severe'
    if loss > IMPACT_MODERATE:
        return 'moderate'
    if loss > IMPACT_LIGHT:
        return 'light'
    return 'none'


class UtilityScorer:
    """
    Main class for scoring video utility.

    Orchestrates:
    - Input normalization
    - Scoring strategy selection
    - Weight and threshold configuration
    - Ranking and explanation

    Usage:
        scorer = UtilityScorer()

        # Score a single video
        result = scorer.score({"likes": 9000, "dislikes": 1000, "viewCount": 500000})

        # Score and rank a listing page
        ranked = scorer.score_and_rank(records, top_k=10)
    """

    def __init__(
        self,
        strategy: Optional[str] = None,
        config: Optional[ScoringConfig] = None,
        weights: Optional[WeightConfig] = None,
        thresholds: Optional[ThresholdConfig] = None
    ):
        """
        Initialize the utility scorer.

        Args:
            strategy: Scoring strategy name ('pareto_utility', 'classic')
            config: Scoring configuration
            weights: Override weights
            thresholds: Override thresholds
        """
        self.config = config or get_config().scoring

        strategy_name = strategy or self.config.strategy
        self.strategy: ScoringStrategy = get_strategy(strategy_name)

        # Configured weights belong to the configured strategy
        if weights is not None:
            self.weights = weights
        elif strategy_name == self.config.strategy:
            self.weights = self.config.weights
        else:
            self.weights = self.strategy.default_weights()

        self.thresholds = thresholds or self.config.thresholds
        self.normalizer = InputNormalizer(self.thresholds)
        self.ranker = VideoRanker()

        logger.debug(
            "Initialized UtilityScorer",
            extra={
                'strategy': self.strategy.name,
                'tier_green': self.thresholds.tier_green,
                'tier_yellow': self.thresholds.tier_yellow,
            }
        )

    def score(self, raw: RawRecord, video_id: Optional[str] = None) -> ScoreResult:
        """
        Score a single video.

        Never raises for malformed signals; missing values take their
        defaults.

        Args:
            raw: Raw signals (VideoSignals, mapping or None)
            video_id: Optional identifier (defaults to the record's own)

        Returns:
            ScoreResult with diagnostics
        """
        signals = self.normalizer.to_signals(raw)
        score_input = self.normalizer.normalize(signals)

        result = self.strategy.score(score_input, self.weights, self.thresholds)
        result.video_id = video_id or signals.video_id

        log_video_score(
            video_id=result.video_id,
            score=result.score,
            tier=result.tier.value,
            confidence=result.confidence.value,
            components=result.diagnostics.components(),
            slop_flag=result.slop_flag,
            method=result.scoring_method
        )

        return result

    def score_batch(self, records: List[RawRecord]) -> List[ScoredVideo]:
        """
        Score every video on a listing page, in page order.

        Records without an id get a positional one ("video_0", ...).

        Args:
            records: Raw signal records

        Returns:
            Unranked ScoredVideo list
        """
        scored = []
        for index, raw in enumerate(records):
            signals = self.normalizer.to_signals(raw)
            video_id = signals.video_id or f"video_{index}"
            result = self.score(signals, video_id=video_id)
            scored.append(ScoredVideo(
                video_id=video_id,
                result=result,
                title=signals.title if isinstance(signals.title, str) else "",
            ))
        return scored

    def score_and_rank(
        self,
        records: List[RawRecord],
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        request_id: Optional[str] = None
    ) -> List[ScoredVideo]:
        """
        Score and rank a listing page.

        Args:
            records: Raw signal records
            top_k: Optional limit on results
            min_score: Optional minimum score (only applied with top_k)
            request_id: For logging

        Returns:
            Ranked videos (best first)
        """
        scored = self.score_batch(records)

        if top_k:
            ranked = self.ranker.top_k(scored, top_k, min_score=min_score)
        else:
            ranked = self.ranker.rank(scored)

        if ranked:
            log_scoring_decision(
                "ranking_complete",
                {
                    'video_count': len(scored),
                    'returned': len(ranked),
                    'top_video': ranked[0].video_id,
                    'top_score': ranked[0].score,
                    'score_range': (ranked[-1].score, ranked[0].score),
                    'strategy': self.strategy.name,
                    'weights': self.weights.to_dict()
                },
                request_id=request_id
            )

        return ranked

    def get_ranking_stats(self, videos: List[ScoredVideo]) -> RankingResult:
        """Get detailed ranking statistics."""
        return self.ranker.get_ranking_result(videos)

    def explain_score(self, result: ScoreResult) -> Dict[str, Any]:
        """
        Explain how a score was computed.

        Returns a per-component breakdown (value, weight, contribution,
        impact band), the weak factors, the badge warnings and the tier
        verdict.
        """
        diag = result.diagnostics
        w = self.weights
        t = self.thresholds

        components = {}
        for name, weight in (
            ('approval', w.approval),
            ('velocity', w.velocity),
            ('integrity', w.integrity),
            ('volume', w.volume),
        ):
            value = getattr(diag, name)
            components[name] = {
                'value': value,
                'weight': weight,
                'contribution': value * weight,
                'impact': analyze_impact(value, weight),
            }

        # Clickbait subtracts, so its loss is the value itself
        components['clickbait'] = {
            'value': diag.clickbait,
            'weight': w.clickbait,
            'contribution': -diag.clickbait * w.clickbait,
            'impact': analyze_impact(1.0 - diag.clickbait, w.clickbait),
        }

        negative_factors = [
            name for name in ('approval', 'velocity', 'integrity', 'volume')
            if getattr(diag, name) < t.weak_component
        ]
        if diag.clickbait > t.clickbait_warning:
            negative_factors.append('clickbait')
        if diag.decay < t.decay_warning:
            negative_factors.append('decay')

        warnings = []
        if result.slop_flag:
            warnings.append('low_interaction')
        if result.clickbait_score > t.clickbait_warning:
            warnings.append('clickbait')
        if result.confidence != Confidence.FULL:
            warnings.append(result.confidence.value)

        return {
            'video_id': result.video_id,
            'score': result.score,
            'display_score': result.display_score,
            'tier': result.tier.value,
            'verdict': result.tier.verdict,
            'detail': result.tier.detail,
            'confidence': result.confidence.value,
            'strategy': result.scoring_method,
            'components': components,
            'decay': diag.decay,
            'smoothed_ratio': diag.smoothed_ratio,
            'recency_multiplier': diag.recency_multiplier,
            'effective_votes': diag.effective_votes,
            'interaction_density': result.interaction_density,
            'matched_keywords': list(diag.matched_keywords),
            'negative_factors': negative_factors,
            'warnings': warnings,
            'interpretation': self._interpret_score(result),
        }

    def _interpret_score(self, result: ScoreResult) -> str:
        """Generate human-readable interpretation of score."""
        diag = result.diagnostics
        w = self.weights

        contributions = [
            ('approval', diag.approval * w.approval),
            ('velocity', diag.velocity * w.velocity),
            ('integrity', diag.integrity * w.integrity),
            ('volume', diag.volume * w.volume),
        ]
        dominant = max(contributions, key=lambda x: x[1])

        text = (
            f"{result.tier.verdict} ({result.score:.1f}). "
            f"Primary driver: {dominant[0]} ({dominant[1]:.2f})"
        )
        if result.slop_flag:
            text += ". Low-interaction floor applied"
        if result.confidence != Confidence.FULL:
            text += f". Based on only {diag.effective_votes} votes"
        return text

    def compare_strategies(
        self,
        records: List[RawRecord],
        strategies: Optional[List[str]] = None
    ) -> Dict[str, Dict]:
        """
        Compare rankings from different scoring strategies.

        Useful for calibrating tier cutoffs against the classic model.
        """
        strategies = strategies or ['pareto_utility', 'classic']

        results = {}
        rankings = {}

        for strategy_name in strategies:
            scorer = UtilityScorer(
                strategy=strategy_name,
                config=self.config,
                thresholds=self.thresholds
            )

            ranked = scorer.score_and_rank(records)
            rankings[strategy_name] = ranked

            stats = scorer.get_ranking_stats(ranked)
            results[strategy_name] = {
                'top_video': ranked[0].video_id if ranked else None,
                'top_score': ranked[0].score if ranked else 0,
                'score_mean': stats.score_mean,
                'score_std': stats.score_std,
                'score_range': stats.score_range,
                'tier_counts': stats.tier_counts
            }

        # Compare rankings pairwise
        strategy_list = list(rankings.keys())
        for i, s1 in enumerate(strategy_list):
            for s2 in strategy_list[i+1:]:
                comparison = self.ranker.compare_rankings(rankings[s1], rankings[s2])
                results[f'{s1}_vs_{s2}'] = comparison

        return results


def create_scorer(
    strategy: str = 'pareto_utility',
    classic_tiers: bool = False
) -> UtilityScorer:
    """
    Factory function to create a utility scorer.

    Args:
        strategy: Scoring strategy name
        classic_tiers: Use the 70/40 tier cutoffs instead of 70/45

    Returns:
        Configured UtilityScorer
    """
    thresholds = ThresholdConfig.classic() if classic_tiers else None
    return UtilityScorer(strategy=strategy, thresholds=thresholds)


def score_video(raw: RawRecord, **kwargs) -> ScoreResult:
    """
    Convenience function to score one record with the global configuration.

    Args:
        raw: Raw signals
        **kwargs: Passed to UtilityScorer

    Returns:
        ScoreResult
    """
    return UtilityScorer(**kwargs).score(raw)
