"""
Component Estimators Module
===========================
The four engagement components of the utility score.

Each estimator is a pure function of the normalized input and the threshold
configuration, returning values in [0, 1]:

1. Approval  - Bayesian-smoothed like ratio rescaled to the platform's
               real-world distribution window
2. Volume    - Logarithmic absolute engagement magnitude
3. Velocity  - Views/subscribers ratio with a recency multiplier
               ("hidden gem" detection)
4. Integrity - Interaction-rate ramp that exposes view inflation

Estimators are independent of each other; they share only the ScoreInput.
"""

import math
from dataclasses import dataclass

from ..models import ScoreInput
from ..config import ThresholdConfig


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value to [low, high]."""
    return max(low, min(high, value))


# =============================================================================
# APPROVAL
# =============================================================================

@dataclass(frozen=True)
class ApprovalEstimate:
    """Approval component with its intermediate ratios."""
    laplace_ratio: float
    smoothed_ratio: float
    approval: float


def laplace_ratio(likes: int, dislikes: int) -> float:
    """Laplace-smoothed like ratio (L+1)/(L+D+2)."""
    return (likes + 1) / (likes + dislikes + 2)


def estimate_approval(score_input: ScoreInput, thresholds: ThresholdConfig) -> ApprovalEstimate:
    """
    Bayesian-smoothed approval, rescaled to the floor/ceiling window.

    bayesian = (raw*Veff + K*MU) / (Veff + K)

    A single vote cannot push the estimate to an extreme: with K=10 and
    one like, the smoothed ratio is only ~0.52. The smoothed value is then
    stretched over [approval_floor, approval_ceiling] because raw like
    ratios cluster near the top of [0, 1].
    """
    veff = score_input.effective_votes
    raw = laplace_ratio(score_input.likes, score_input.dislikes)

    k = thresholds.prior_weight
    smoothed = (raw * veff + k * thresholds.prior_mean) / (veff + k)

    window = thresholds.approval_ceiling - thresholds.approval_floor
    approval = clamp((smoothed - thresholds.approval_floor) / window)

    return ApprovalEstimate(laplace_ratio=raw, smoothed_ratio=smoothed, approval=approval)


# =============================================================================
# VOLUME
# =============================================================================

def estimate_volume(score_input: ScoreInput, thresholds: ThresholdConfig) -> float:
    """
    log(1+likes) / log(1+high_breakpoint), clamped.

    Separates 10,000 likes from 100 likes at the same ratio without letting
    viral outliers saturate immediately. Likes only, not total votes.
    """
    return clamp(
        math.log1p(score_input.likes) / math.log1p(thresholds.volume_breakpoint_high)
    )


# =============================================================================
# VELOCITY
# =============================================================================

@dataclass(frozen=True)
class VelocityEstimate:
    """Velocity component with its sub-signals."""
    view_sub_ratio: float
    base: float
    recency_multiplier: float
    engagement_velocity: float
    velocity: float


def recency_multiplier(days_old: float, thresholds: ThresholdConfig) -> float:
    """
    Boost fresh content, shrink stale content.

    Within the optimal window the bonus falls linearly from
    1 + recency_max_bonus to 1.0. Beyond it the multiplier is
    1 / (1 + log(1 + age/penalty_horizon)), approaching 0 slowly.
    """
    window = thresholds.velocity_days_optimal
    if days_old <= window:
        return 1.0 + thresholds.recency_max_bonus * (1.0 - days_old / window)
    return 1.0 / (1.0 + math.log1p(days_old / thresholds.velocity_days_penalty))


def estimate_velocity(score_input: ScoreInput, thresholds: ThresholdConfig) -> VelocityEstimate:
    """
    Views relative to channel size, adjusted for recency.

    The engagement velocity (likes+dislikes)/(views*age) is reported for
    explanation only and does not feed the velocity value.
    """
    ratio = score_input.view_count / score_input.subscribers
    base = clamp(math.log1p(ratio) / math.log1p(thresholds.velocity_ref))

    multiplier = recency_multiplier(score_input.days_old, thresholds)

    engagement_velocity = (
        score_input.effective_votes / score_input.view_divisor / score_input.days_old
    )

    return VelocityEstimate(
        view_sub_ratio=ratio,
        base=base,
        recency_multiplier=multiplier,
        engagement_velocity=engagement_velocity,
        velocity=clamp(base * multiplier),
    )


# =============================================================================
# INTEGRITY
# =============================================================================

@dataclass(frozen=True)
class IntegrityEstimate:
    """Integrity component with the raw interaction rate."""
    interaction_rate: float
    integrity: float


def interaction_rate(score_input: ScoreInput) -> float:
    """(likes+dislikes)/views, or 0 when there are no views."""
    if score_input.view_count == 0:
        return 0.0
    return score_input.effective_votes / score_input.view_count


def estimate_integrity(score_input: ScoreInput, thresholds: ThresholdConfig) -> IntegrityEstimate:
    """
    Interaction rate ramp: full credit at the target rate (3% by default).

    Low integrity means the view count is large relative to genuine
    engagement.
    """
    rate = interaction_rate(score_input)
    return IntegrityEstimate(
        interaction_rate=rate,
        integrity=min(rate / thresholds.integrity_target, 1.0),
    )
