"""
Data Models Package
===================
Exports all data model classes for the Utility Filter scoring engine.

Usage:
    from utility_filter.models import VideoSignals, ScoreInput, ScoreResult
    from utility_filter.models import Tier, Confidence
"""

from .schemas import (
    # Enums
    Tier,
    Confidence,

    # Base
    BaseModel,

    # Inputs
    VideoSignals,
    ScoreInput,

    # Results
    ClickbaitAnalysis,
    ScoreDiagnostics,
    ScoreResult,
    ScoredVideo,

    # Utilities
    generate_request_id,
)

__all__ = [
    # Enums
    'Tier',
    'Confidence',

    # Base
    'BaseModel',

    # Inputs
    'VideoSignals',
    'ScoreInput',

    # Results
    'ClickbaitAnalysis',
    'ScoreDiagnostics',
    'ScoreResult',
    'ScoredVideo',

    # Utilities
    'generate_request_id',
]
