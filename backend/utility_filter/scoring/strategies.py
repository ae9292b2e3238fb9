"""
Scoring Strategies Module
=========================
Composite assemblers that turn component estimates into a ScoreResult.

Engagement telemetry is noisy, adversarial and wildly scaled:
1. Small samples produce extreme like ratios
2. View counts can be inflated without matching interaction
3. Channel size varies across six orders of magnitude

Strategies:
1. ParetoUtilityScoring - Canonical 5-factor model: smoothed approval,
   volume, velocity with recency, integrity, clickbait penalty, temporal
   decay, anti-bot floor
2. ClassicScoring - Older 4-factor model: unsmoothed approval, velocity,
   integrity and log volume, no decay, no floor

The canonical composite follows the form:
    composite = Wa*A + Wv*Volume + Wg*Velocity + Wi*Integrity - Wc*Clickbait
    score     = clamp(composite * decay * 100, 0, 100)

Every strategy is a pure function of (input, weights, thresholds) and holds
no state between calls.
"""

import math
import logging
from abc import ABC, abstractmethod
from typing import Dict, Type

from .estimators import (
    clamp,
    laplace_ratio,
    estimate_approval,
    estimate_volume,
    estimate_velocity,
    estimate_integrity,
)
from .clickbait import ClickbaitDetector
from ..models import ScoreInput, ScoreResult, ScoreDiagnostics, Tier, Confidence
from ..config import WeightConfig, ThresholdConfig

logger = logging.getLogger(__name__)


# =============================================================================
# CLASSIFIERS
# =============================================================================

def classify_tier(score: float, thresholds: ThresholdConfig) -> Tier:
    """Map a score to its tier; cutoffs are inclusive."""
    if score >= thresholds.tier_green:
        return Tier.GREEN
    if score >= thresholds.tier_yellow:
        return Tier.YELLOW
    return Tier.RED


def classify_confidence(effective_votes: int, thresholds: ThresholdConfig) -> Confidence:
    """Reliability of the vote-derived components, from the vote count alone."""
    if effective_votes >= thresholds.confidence_full:
        return Confidence.FULL
    if effective_votes >= thresholds.confidence_low:
        return Confidence.LOW_SAMPLE
    return Confidence.LOW_CONFIDENCE


def temporal_decay(days_old: float, thresholds: ThresholdConfig) -> float:
    """decay_rate ^ (age in years)."""
    return thresholds.decay_rate ** (days_old / 365.0)


# =============================================================================
# STRATEGIES
# =============================================================================

class ScoringStrategy(ABC):
    """
    Abstract base class for scoring strategies.

    Each strategy implements a different way of combining the engagement
    components into a bounded score.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name for logging and results."""
        pass

    @abstractmethod
    def score(
        self,
        score_input: ScoreInput,
        weights: WeightConfig,
        thresholds: ThresholdConfig
    ) -> ScoreResult:
        """
        Score one normalized input.

        Args:
            score_input: Normalized signals
            weights: Component weights
            thresholds: Calibration parameters

        Returns:
            ScoreResult with diagnostics
        """
        pass

    def default_weights(self) -> WeightConfig:
        """Weights to use when the caller does not supply any."""
        return WeightConfig()


class ParetoUtilityScoring(ScoringStrategy):
    """
    Canonical 5-factor utility model.

    Steps:
    1. Estimate approval, volume, velocity, integrity and clickbait
       independently from the same input
    2. Weighted sum, clamped to [0, 1]
    3. Multiply by the annual decay and scale to [0, 100]
    4. Halve (by default) content whose interaction rate is implausibly low
       for its view count
    5. Classify confidence from Veff and tier from the rounded score
    """

    @property
    def name(self) -> str:
        return "pareto_utility"

    def score(
        self,
        score_input: ScoreInput,
        weights: WeightConfig,
        thresholds: ThresholdConfig
    ) -> ScoreResult:
        approval = estimate_approval(score_input, thresholds)
        volume = estimate_volume(score_input, thresholds)
        velocity = estimate_velocity(score_input, thresholds)
        integrity = estimate_integrity(score_input, thresholds)
        clickbait = ClickbaitDetector(thresholds).analyze(score_input.title)

        composite = clamp(
            weights.approval * approval.approval
            + weights.volume * volume
            + weights.velocity * velocity.velocity
            + weights.integrity * integrity.integrity
            - weights.clickbait * clickbait.score
        )

        decay = temporal_decay(score_input.days_old, thresholds)
        pre_floor = clamp(composite * decay * 100.0, 0.0, 100.0)

        # Hard floor for view counts with next to no interaction
        slop_flag = (
            integrity.interaction_rate < thresholds.slop_threshold
            and score_input.view_count > thresholds.slop_min_views
        )
        final = pre_floor * thresholds.slop_penalty if slop_flag else pre_floor
        final = round(final, 1)

        diagnostics = ScoreDiagnostics(
            approval=approval.approval,
            volume=volume,
            velocity=velocity.velocity,
            integrity=integrity.integrity,
            clickbait=clickbait.score,
            decay=decay,
            smoothed_ratio=approval.smoothed_ratio,
            laplace_ratio=approval.laplace_ratio,
            effective_votes=score_input.effective_votes,
            view_sub_ratio=velocity.view_sub_ratio,
            velocity_base=velocity.base,
            recency_multiplier=velocity.recency_multiplier,
            engagement_velocity=velocity.engagement_velocity,
            interaction_rate=integrity.interaction_rate,
            composite=composite,
            pre_floor_score=pre_floor,
            matched_keywords=list(clickbait.matched_keywords),
        )

        return ScoreResult(
            score=final,
            tier=classify_tier(final, thresholds),
            confidence=classify_confidence(score_input.effective_votes, thresholds),
            slop_flag=slop_flag,
            clickbait_score=clickbait.score,
            diagnostics=diagnostics,
            scoring_method=self.name,
        )


class ClassicScoring(ScoringStrategy):
    """
    Older 4-factor model, kept for calibration comparisons.

    Approval uses the plain Laplace ratio (no prior), velocity has no
    recency multiplier and volume is log(1+likes)/10. There is no decay,
    no clickbait penalty and no slop floor.
    """

    VOLUME_DIVISOR = 10.0

    @property
    def name(self) -> str:
        return "classic"

    def default_weights(self) -> WeightConfig:
        return WeightConfig.classic()

    def score(
        self,
        score_input: ScoreInput,
        weights: WeightConfig,
        thresholds: ThresholdConfig
    ) -> ScoreResult:
        raw = laplace_ratio(score_input.likes, score_input.dislikes)
        window = thresholds.approval_ceiling - thresholds.approval_floor
        approval = clamp((raw - thresholds.approval_floor) / window)

        ratio = score_input.view_count / score_input.subscribers
        velocity = clamp(math.log1p(ratio) / math.log1p(thresholds.velocity_ref))

        integrity = estimate_integrity(score_input, thresholds)
        volume = min(math.log1p(score_input.likes) / self.VOLUME_DIVISOR, 1.0)

        composite = clamp(
            weights.approval * approval
            + weights.velocity * velocity
            + weights.integrity * integrity.integrity
            + weights.volume * volume
        )
        final = round(composite * 100.0, 1)

        diagnostics = ScoreDiagnostics(
            approval=approval,
            volume=volume,
            velocity=velocity,
            integrity=integrity.integrity,
            smoothed_ratio=raw,
            laplace_ratio=raw,
            effective_votes=score_input.effective_votes,
            view_sub_ratio=ratio,
            velocity_base=velocity,
            interaction_rate=integrity.interaction_rate,
            composite=composite,
            pre_floor_score=composite * 100.0,
        )

        return ScoreResult(
            score=final,
            tier=classify_tier(final, thresholds),
            confidence=classify_confidence(score_input.effective_votes, thresholds),
            diagnostics=diagnostics,
            scoring_method=self.name,
        )


# Strategy registry
STRATEGY_REGISTRY: Dict[str, Type[ScoringStrategy]] = {
    'pareto_utility': ParetoUtilityScoring,
    'classic': ClassicScoring,
}


def get_strategy(name: str) -> ScoringStrategy:
    """Get a scoring strategy by name."""
    if name not in STRATEGY_REGISTRY:
        raise ValueError(f"Unknown scoring strategy: {name}")
    return STRATEGY_REGISTRY[name]()
