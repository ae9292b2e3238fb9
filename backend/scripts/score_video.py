#!/usr/bin/env python3
"""
Score Video Script
==================
Command-line interface for the utility scoring engine.

Usage:
    python scripts/score_video.py --likes 9000 --dislikes 1000 --views 500000 \\
        --subscribers 10000 --days-old 3 --title "Insane Secret Hack Revealed!!!"
    python scripts/score_video.py --input video.json --explain
    python scripts/score_video.py --input listing.json --top-k 10
    python scripts/score_video.py --input listing.json --compare
"""

import argparse
import sys
import json
from dataclasses import replace
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from utility_filter.scoring import UtilityScorer, STRATEGY_REGISTRY
from utility_filter.config import get_config, load_experiment_config
from utility_filter.logging_config import get_utility_logger

logger = get_utility_logger("cli", log_to_file=False)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Score video engagement signals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Score one video from flags
    python scripts/score_video.py --likes 120 --dislikes 4 --views 5300 --age-text "3 weeks ago"

    # Score a JSON record and explain the result
    python scripts/score_video.py --input video.json --explain

    # Rank a listing page (JSON list) with the older 70/40 tiers
    python scripts/score_video.py --input listing.json --tier-yellow 40 --top-k 5

    # Compare the canonical and classic models on a listing page
    python scripts/score_video.py --input listing.json --compare
        """
    )

    parser.add_argument('--video-id', type=str, default=None, help='Video identifier')
    parser.add_argument('--likes', type=int, default=None, help='Like count')
    parser.add_argument('--dislikes', type=int, default=None, help='Dislike count')
    parser.add_argument('--views', type=int, default=None, help='View count')
    parser.add_argument('--subscribers', type=int, default=None, help='Channel subscriber count')
    parser.add_argument('--days-old', type=float, default=None, help='Content age in days')
    parser.add_argument('--age-text', type=str, default=None, help='Relative age, e.g. "3 weeks ago"')
    parser.add_argument('--title', type=str, default=None, help='Video title')

    parser.add_argument(
        '--input', '-i',
        type=str,
        metavar='FILE',
        help='JSON file with one record (object) or a listing page (list)'
    )

    parser.add_argument(
        '--strategy', '-s',
        type=str,
        choices=sorted(STRATEGY_REGISTRY),
        default=None,
        help='Scoring strategy (default: from configuration)'
    )

    parser.add_argument(
        '--tier-yellow',
        type=float,
        default=None,
        help='Yellow tier cutoff (default: 45; the classic badge used 40)'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        metavar='FILE',
        help='Experiment configuration JSON file'
    )

    parser.add_argument('--top-k', type=int, default=None, help='Limit ranked listing output')
    parser.add_argument('--explain', action='store_true', help='Show component breakdown')
    parser.add_argument('--compare', action='store_true', help='Compare strategies on a listing page')
    parser.add_argument('--json', action='store_true', help='Print machine-readable JSON')

    args = parser.parse_args(argv)

    if args.config:
        try:
            load_experiment_config(args.config)
        except (OSError, ValueError, TypeError) as e:
            print(f"Error: cannot load {args.config}: {e}")
            return 1

    try:
        scorer = build_scorer(args.strategy, args.tier_yellow)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.input:
        try:
            with open(args.input, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error: cannot read {args.input}: {e}")
            return 1

        if isinstance(payload, list):
            if args.compare:
                return compare_cli(scorer, payload, args.json)
            return rank_cli(scorer, payload, args.top_k, args.json)
        if not isinstance(payload, dict):
            print("Error: input must be a JSON object or list")
            return 1
        record = payload
    else:
        record = {
            'video_id': args.video_id,
            'likes': args.likes,
            'dislikes': args.dislikes,
            'view_count': args.views,
            'subscribers': args.subscribers,
            'days_old': args.days_old,
            'age_text': args.age_text,
            'title': args.title,
        }

    return score_cli(scorer, record, args.explain, args.json)


def build_scorer(strategy: str = None, tier_yellow: float = None) -> UtilityScorer:
    """Build a scorer from the global configuration plus CLI overrides."""
    scoring_config = get_config().scoring
    thresholds = scoring_config.thresholds
    if tier_yellow is not None:
        thresholds = replace(thresholds, tier_yellow=tier_yellow)
    return UtilityScorer(strategy=strategy, config=scoring_config, thresholds=thresholds)


def score_cli(scorer: UtilityScorer, record: dict, explain: bool = False, as_json: bool = False) -> int:
    """Score one record and display the result."""
    result = scorer.score(record)
    explanation = scorer.explain_score(result) if explain else None

    if as_json:
        output = {'result': result.to_dict()}
        if explanation:
            output['explanation'] = explanation
        print(json.dumps(output, indent=2))
        return 0

    print("="*60)
    print("UTILITY SCORE")
    print("="*60)
    print(f"Video: {result.video_id or '<anonymous>'}")
    print(f"Strategy: {result.scoring_method}")
    print(f"Score: {result.display_score} ({result.score:.1f})")
    print(f"Tier: {result.tier.value} - {result.tier.verdict}: {result.tier.detail}")
    print(f"Confidence: {result.confidence.value} ({result.diagnostics.effective_votes} votes)")
    if result.slop_flag:
        print("Warning: low interaction floor applied")
    if result.clickbait_score > 0:
        print(f"Clickbait: {result.clickbait_score:.2f} {result.diagnostics.matched_keywords}")

    if explanation:
        print()
        print("COMPONENTS:")
        for name, component in explanation['components'].items():
            marker = " *" if name in explanation['negative_factors'] else ""
            print(
                f"  - {name:<10} value={component['value']:.3f} "
                f"weight={component['weight']:.3f} "
                f"contribution={component['contribution']:+.3f} "
                f"impact={component['impact']}{marker}"
            )
        print(f"  - decay      {explanation['decay']:.4f}")
        print(f"  - recency    x{explanation['recency_multiplier']:.3f}")
        print(f"  - interaction density {explanation['interaction_density']}%")
        print()
        print(explanation['interpretation'])

    print("="*60)
    return 0


def rank_cli(scorer: UtilityScorer, records: list, top_k: int = None, as_json: bool = False) -> int:
    """Score and rank a listing page."""
    ranked = scorer.score_and_rank(records, top_k=top_k)
    stats = scorer.get_ranking_stats(ranked)

    if as_json:
        print(json.dumps(stats.to_dict(), indent=2))
        return 0

    print("="*60)
    print(f"RANKED LISTING ({len(ranked)} of {len(records)})")
    print("="*60)
    for video in ranked:
        result = video.result
        print(f"  {video.rank:>3}. {result.display_score:>4} [{result.tier.value:<6}] {video.video_id} {video.title}")
    print()
    print(f"Mean: {stats.score_mean:.1f}  Std: {stats.score_std:.1f}  Tiers: {stats.tier_counts}")
    print("="*60)
    return 0


def compare_cli(scorer: UtilityScorer, records: list, as_json: bool = False) -> int:
    """Compare strategy rankings on a listing page."""
    comparison = scorer.compare_strategies(records)

    if as_json:
        print(json.dumps(comparison, indent=2, default=list))
        return 0

    print("="*60)
    print("STRATEGY COMPARISON")
    print("="*60)
    for name, summary in comparison.items():
        print(f"{name}:")
        for key, value in summary.items():
            print(f"  - {key}: {value}")
    print("="*60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
