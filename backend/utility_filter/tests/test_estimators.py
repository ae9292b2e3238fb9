"""
Component Estimator Tests
=========================
Tests for the approval, volume, velocity and integrity components.
"""

import os
import sys
import math

import pytest

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from utility_filter.scoring.estimators import (
    clamp,
    laplace_ratio,
    recency_multiplier,
    interaction_rate,
    estimate_approval,
    estimate_volume,
    estimate_velocity,
    estimate_integrity,
)
from utility_filter.models import ScoreInput
from utility_filter.config import ThresholdConfig


THRESHOLDS = ThresholdConfig()


# =============================================================================
# TEST FIXTURES
# =============================================================================

def create_test_input(
    likes: int = 0,
    dislikes: int = 0,
    views: int = 0,
    subscribers: int = 1,
    days_old: float = 0.1
) -> ScoreInput:
    """Create a normalized input with configurable values."""
    return ScoreInput(
        likes=likes,
        dislikes=dislikes,
        view_count=views,
        subscribers=subscribers,
        days_old=days_old,
        view_divisor=max(views, 1),
    )


def test_clamp():
    assert clamp(-0.5) == 0.0
    assert clamp(1.5) == 1.0
    assert clamp(0.25) == 0.25
    assert clamp(150.0, 0.0, 100.0) == 100.0

    print("[PASS] Clamp test passed")


# =============================================================================
# APPROVAL TESTS
# =============================================================================

def test_laplace_ratio():
    assert laplace_ratio(0, 0) == 0.5
    assert laplace_ratio(9000, 1000) == pytest.approx(9001 / 10002)

    print("[PASS] Laplace ratio test passed")


def test_approval_no_votes():
    """With no votes the estimate is the prior, far below the floor."""
    estimate = estimate_approval(create_test_input(), THRESHOLDS)

    assert estimate.smoothed_ratio == pytest.approx(0.5)
    assert estimate.approval == 0.0

    print("[PASS] Approval with no votes test passed")


def test_approval_single_vote_is_damped():
    """One like cannot push the smoothed ratio to an extreme."""
    estimate = estimate_approval(create_test_input(likes=1), THRESHOLDS)

    assert estimate.laplace_ratio == pytest.approx(2 / 3)
    assert estimate.smoothed_ratio == pytest.approx((2 / 3 + 5) / 11)
    assert estimate.smoothed_ratio < 0.52

    print("[PASS] Single vote damping test passed")


def test_approval_large_sample_saturates():
    estimate = estimate_approval(create_test_input(likes=10000), THRESHOLDS)

    assert estimate.smoothed_ratio > 0.99
    assert estimate.approval == 1.0

    print("[PASS] Large sample approval test passed")


def test_approval_rescaling_window():
    """A ratio inside the floor/ceiling window maps linearly."""
    # 95.0% like ratio over a huge sample lands in the middle of [0.92, 0.98]
    estimate = estimate_approval(create_test_input(likes=950000, dislikes=50000), THRESHOLDS)

    assert estimate.approval == pytest.approx(0.5, abs=0.01)

    print("[PASS] Approval rescaling test passed")


def test_approval_monotonic():
    """More likes never lower approval; more dislikes never raise it."""
    previous = -1.0
    for likes in (0, 1, 10, 100, 1000, 10000):
        approval = estimate_approval(create_test_input(likes=likes, dislikes=5), THRESHOLDS).approval
        assert approval >= previous
        previous = approval

    previous = 2.0
    for dislikes in (0, 1, 10, 100, 1000):
        approval = estimate_approval(create_test_input(likes=5000, dislikes=dislikes), THRESHOLDS).approval
        assert approval <= previous
        previous = approval

    print("[PASS] Approval monotonicity test passed")


# =============================================================================
# VOLUME TESTS
# =============================================================================

def test_volume_scale():
    assert estimate_volume(create_test_input(likes=0), THRESHOLDS) == 0.0
    assert estimate_volume(create_test_input(likes=10000), THRESHOLDS) == pytest.approx(1.0)
    assert estimate_volume(create_test_input(likes=10 ** 7), THRESHOLDS) == 1.0
    assert estimate_volume(create_test_input(likes=100), THRESHOLDS) == pytest.approx(
        math.log(101) / math.log(10001)
    )

    print("[PASS] Volume scale test passed")


def test_volume_ignores_dislikes():
    with_dislikes = estimate_volume(create_test_input(likes=500, dislikes=5000), THRESHOLDS)
    without = estimate_volume(create_test_input(likes=500), THRESHOLDS)

    assert with_dislikes == without

    print("[PASS] Volume ignores dislikes test passed")


# =============================================================================
# VELOCITY TESTS
# =============================================================================

def test_recency_multiplier():
    """Bonus inside the optimal window, slow decline after it."""
    assert recency_multiplier(0.0, THRESHOLDS) == pytest.approx(1.2)
    assert recency_multiplier(3.0, THRESHOLDS) == pytest.approx(1 + 0.2 * (1 - 3 / 7))
    assert recency_multiplier(7.0, THRESHOLDS) == pytest.approx(1.0)
    assert recency_multiplier(365.0, THRESHOLDS) == pytest.approx(1 / (1 + math.log(2)))
    assert 0.0 < recency_multiplier(36500.0, THRESHOLDS) < 0.25

    print("[PASS] Recency multiplier test passed")


def test_velocity_reference_ratio():
    """views/subs at the reference ratio gives a base of 1."""
    estimate = estimate_velocity(
        create_test_input(views=50000, subscribers=1000, days_old=7.0), THRESHOLDS
    )

    assert estimate.view_sub_ratio == 50.0
    assert estimate.base == pytest.approx(1.0)
    assert estimate.recency_multiplier == pytest.approx(1.0)
    assert estimate.velocity == pytest.approx(1.0)

    print("[PASS] Velocity reference test passed")


def test_velocity_clamped_after_bonus():
    """The recency bonus cannot push velocity above 1."""
    estimate = estimate_velocity(
        create_test_input(views=500000, subscribers=10000, days_old=3.0), THRESHOLDS
    )

    assert estimate.base == 1.0
    assert estimate.recency_multiplier > 1.0
    assert estimate.velocity == 1.0

    print("[PASS] Velocity clamp test passed")


def test_velocity_no_views():
    estimate = estimate_velocity(create_test_input(), THRESHOLDS)

    assert estimate.base == 0.0
    assert estimate.velocity == 0.0
    assert estimate.engagement_velocity == 0.0

    print("[PASS] Velocity with no views test passed")


def test_engagement_velocity():
    """(likes+dislikes) / views / age, reported but not scored."""
    estimate = estimate_velocity(
        create_test_input(likes=250, dislikes=50, views=10000, days_old=2.0), THRESHOLDS
    )

    assert estimate.engagement_velocity == pytest.approx(300 / 10000 / 2.0)

    print("[PASS] Engagement velocity test passed")


# =============================================================================
# INTEGRITY TESTS
# =============================================================================

def test_interaction_rate_zero_views():
    assert interaction_rate(create_test_input(likes=10)) == 0.0

    print("[PASS] Interaction rate zero views test passed")


def test_integrity_ramp():
    """Full credit at a 3% interaction rate, linear below it."""
    full = estimate_integrity(create_test_input(likes=300, views=10000), THRESHOLDS)
    half = estimate_integrity(create_test_input(likes=150, views=10000), THRESHOLDS)
    capped = estimate_integrity(create_test_input(likes=5000, views=10000), THRESHOLDS)

    assert full.integrity == pytest.approx(1.0)
    assert half.integrity == pytest.approx(0.5)
    assert capped.integrity == 1.0
    assert capped.interaction_rate == 0.5

    print("[PASS] Integrity ramp test passed")


def test_components_in_unit_range():
    """Every component stays in [0, 1] across extreme inputs."""
    cases = [
        create_test_input(),
        create_test_input(likes=10 ** 9, dislikes=0, views=1, subscribers=1, days_old=0.1),
        create_test_input(likes=0, dislikes=10 ** 9, views=10 ** 12, subscribers=10 ** 9, days_old=10 ** 5),
        create_test_input(likes=1, dislikes=1, views=2, subscribers=10 ** 8, days_old=1.0),
    ]

    for score_input in cases:
        approval = estimate_approval(score_input, THRESHOLDS)
        assert 0.0 <= approval.approval <= 1.0
        assert 0.0 <= approval.smoothed_ratio <= 1.0
        assert 0.0 <= estimate_volume(score_input, THRESHOLDS) <= 1.0
        assert 0.0 <= estimate_velocity(score_input, THRESHOLDS).velocity <= 1.0
        assert 0.0 <= estimate_integrity(score_input, THRESHOLDS).integrity <= 1.0

    print("[PASS] Component range test passed")


def run_all_tests():
    """Run all estimator tests."""
    print("\n" + "="*60)
    print("COMPONENT ESTIMATOR TESTS")
    print("="*60 + "\n")

    test_clamp()

    print("\n--- Approval Tests ---")
    test_laplace_ratio()
    test_approval_no_votes()
    test_approval_single_vote_is_damped()
    test_approval_large_sample_saturates()
    test_approval_rescaling_window()
    test_approval_monotonic()

    print("\n--- Volume Tests ---")
    test_volume_scale()
    test_volume_ignores_dislikes()

    print("\n--- Velocity Tests ---")
    test_recency_multiplier()
    test_velocity_reference_ratio()
    test_velocity_clamped_after_bonus()
    test_velocity_no_views()
    test_engagement_velocity()

    print("\n--- Integrity Tests ---")
    test_interaction_rate_zero_views()
    test_integrity_ramp()
    test_components_in_unit_range()

    print("\n" + "="*60)
    print("ALL ESTIMATOR TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
