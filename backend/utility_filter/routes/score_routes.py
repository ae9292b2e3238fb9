"""
Score Routes Module
===================
REST API endpoints for scoring videos.

Endpoints:
- POST /api/score          - Score one video
- POST /api/score/batch    - Score and rank a listing page
- POST /api/score/explain  - Score one video with a component breakdown
- GET  /api/score/config   - Active weights, thresholds and strategies

Vote data (likes, dislikes, view count) must be present. A record without it
is reported as unavailable rather than scored from defaults.
"""

from flask import Blueprint, request, jsonify, current_app
import json
import traceback
from dataclasses import replace

from ..scoring import UtilityScorer, STRATEGY_REGISTRY
from ..models import VideoSignals, generate_request_id
from ..config import ThresholdConfig
from ..logging_config import get_utility_logger, get_api_logger, log_scoring_decision

# Configure logging
logger = get_utility_logger("routes.score", log_to_file=False)

# Create blueprint
score_bp = Blueprint('score', __name__)


def _request_payload():
    """Return the JSON object body, or None when the body is not a JSON object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


def _build_scorer(data: dict) -> UtilityScorer:
    """Scorer for one request; raises ValueError on a bad or unknown strategy."""
    strategy = data.get('strategy')
    if strategy is not None and not isinstance(strategy, str):
        raise ValueError("'strategy' must be a string")

    scoring_config = current_app.app_config.scoring
    thresholds = scoring_config.thresholds
    if data.get('classic_tiers'):
        thresholds = replace(thresholds, tier_yellow=ThresholdConfig.classic().tier_yellow)
    return UtilityScorer(
        strategy=strategy,
        config=scoring_config,
        thresholds=thresholds
    )


def _unavailable(signals: VideoSignals):
    return jsonify({
        'success': False,
        'status': 'unavailable',
        'video_id': signals.video_id,
        'error': 'Vote data unavailable'
    }), 422


@score_bp.route('', methods=['POST'])
def score_video():
    """
    Score a single video.

    Request JSON:
        {
            "signals": {                     # Required: raw signal record
                "videoId": "abc123",
                "likes": 9000, "dislikes": 1000, "viewCount": 500000,
                "subscribers": 10000, "daysOld": 3, "title": "..."
            },
            "strategy": "pareto_utility",    # Optional: scoring strategy
            "classic_tiers": false           # Optional: 70/40 tier cutoffs
        }

    The record may also be sent at the top level instead of under "signals".

    Response JSON:
        {
            "success": true,
            "request_id": "...",
            "result": {...ScoreResult...}
        }
    """
    data = _request_payload()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        record = data.get('signals', data)
        if not isinstance(record, dict):
            return jsonify({'error': "'signals' must be an object"}), 400

        signals = VideoSignals.from_dict(record)
        if not signals.has_vote_data:
            return _unavailable(signals)

        request_id = generate_request_id(json.dumps(data, sort_keys=True, default=str))
        api_logger = get_api_logger(request_id)

        scorer = _build_scorer(data)
        result = scorer.score(signals)

        api_logger.info(f"Scored {result.video_id or '<anonymous>'}: {result.score}")

        return jsonify({
            'success': True,
            'request_id': request_id,
            'result': result.to_dict()
        }), 200

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Scoring error: {str(e)}")
        logger.error(traceback.format_exc())
        return jsonify({'error': f'Scoring error: {str(e)}'}), 500


@score_bp.route('/batch', methods=['POST'])
def score_batch():
    """
    Score and rank the videos of a listing page.

    Request JSON:
        {
            "videos": [{...}, {...}],   # Required: raw signal records
            "top_k": 10,                # Optional: limit on results
            "min_score": 45,            # Optional: with top_k, drop lower scores
            "strategy": "classic"       # Optional: scoring strategy
        }

    Response JSON:
        {
            "success": true,
            "request_id": "...",
            "videos": [...ranked ScoredVideo...],
            "unavailable": ["id", ...],
            "stats": {...}
        }
    """
    data = _request_payload()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        records = data.get('videos')
        if not isinstance(records, list):
            return jsonify({'error': "'videos' must be a list"}), 400

        max_batch = current_app.app_config.flask.max_batch_size
        if len(records) > max_batch:
            return jsonify({'error': f'Batch too large: {len(records)} > {max_batch}'}), 400

        top_k = data.get('top_k')
        min_score = data.get('min_score')
        if top_k is not None and (not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1):
            return jsonify({'error': "'top_k' must be a positive integer"}), 400
        if min_score is not None and not isinstance(min_score, (int, float)):
            return jsonify({'error': "'min_score' must be a number"}), 400

        available = []
        unavailable = []
        for index, record in enumerate(records):
            signals = VideoSignals.from_dict(record) if isinstance(record, dict) else VideoSignals()
            if not signals.has_vote_data:
                unavailable.append(signals.video_id or f"video_{index}")
                continue
            if signals.video_id is None:
                signals.video_id = f"video_{index}"
            available.append(signals)

        request_id = generate_request_id(json.dumps(data, sort_keys=True, default=str))

        scorer = _build_scorer(data)
        ranked = scorer.score_and_rank(
            available,
            top_k=top_k,
            min_score=min_score,
            request_id=request_id
        )
        stats = scorer.get_ranking_stats(ranked).to_dict()
        stats.pop('ranked_videos')

        if unavailable:
            log_scoring_decision(
                "votes_unavailable",
                {'count': len(unavailable), 'video_ids': unavailable[:20]},
                request_id=request_id
            )

        return jsonify({
            'success': True,
            'request_id': request_id,
            'videos': [v.to_dict() for v in ranked],
            'unavailable': unavailable,
            'stats': stats
        }), 200

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Batch scoring error: {str(e)}")
        logger.error(traceback.format_exc())
        return jsonify({'error': f'Batch scoring error: {str(e)}'}), 500


@score_bp.route('/explain', methods=['POST'])
def explain_video():
    """
    Score a single video and explain the result.

    Request JSON: same as POST /api/score.

    Response JSON:
        {
            "success": true,
            "result": {...},
            "explanation": {
                "components": {"approval": {"value", "weight", "contribution", "impact"}, ...},
                "negative_factors": [...],
                "warnings": [...],
                "verdict": "Certified Fresh",
                "interpretation": "..."
            }
        }
    """
    data = _request_payload()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        record = data.get('signals', data)
        if not isinstance(record, dict):
            return jsonify({'error': "'signals' must be an object"}), 400

        signals = VideoSignals.from_dict(record)
        if not signals.has_vote_data:
            return _unavailable(signals)

        scorer = _build_scorer(data)
        result = scorer.score(signals)

        return jsonify({
            'success': True,
            'result': result.to_dict(),
            'explanation': scorer.explain_score(result)
        }), 200

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Explain error: {str(e)}")
        logger.error(traceback.format_exc())
        return jsonify({'error': f'Explain error: {str(e)}'}), 500


@score_bp.route('/config', methods=['GET'])
def get_scoring_config():
    """
    Get the active scoring configuration.

    Response JSON:
        {
            "strategy": "pareto_utility",
            "strategies": ["pareto_utility", "classic"],
            "weights": {...},
            "thresholds": {...}
        }
    """
    scoring_config = current_app.app_config.scoring
    return jsonify({
        'strategy': scoring_config.strategy,
        'strategies': sorted(STRATEGY_REGISTRY),
        'weights': scoring_config.weights.to_dict(),
        'thresholds': scoring_config.thresholds.to_dict()
    }), 200
