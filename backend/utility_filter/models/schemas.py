"""
Data Models and Schemas Module
==============================
Defines structured data representations for every stage of scoring.

This module provides:
- The raw signal record handed over by the vote/subscriber collaborators
- The normalized, immutable scoring input
- Score results with full diagnostics
- Serialization helpers

These models form the contract between the scoring stages and enable:
- Reproducibility: identical inputs serialize to identical outputs
- Inspectability: every intermediate component value is exposed
- Extensibility: new diagnostics can be added without breaking callers

Usage:
    from utility_filter.models.schemas import VideoSignals, ScoreResult

    signals = VideoSignals.from_dict({"likes": 120, "dislikes": 4, "viewCount": 5300})
    result = scorer.score(signals)
    payload = result.to_dict()
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum
import json
import hashlib


# =============================================================================
# ENUMS
# =============================================================================

class Tier(str, Enum):
    """Categorical quality tier derived from the score."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

    @property
    def classic_name(self) -> str:
        """Name used by the older four-factor badge."""
        return _CLASSIC_TIER_NAMES[self]

    @property
    def verdict(self) -> str:
        return _TIER_VERDICTS[self][0]

    @property
    def detail(self) -> str:
        return _TIER_VERDICTS[self][1]


_CLASSIC_TIER_NAMES = {
    Tier.GREEN: "organic",
    Tier.YELLOW: "filler",
    Tier.RED: "synthetic",
}

_TIER_VERDICTS = {
    Tier.GREEN: ("Certified Fresh", "High signal, pure content."),
    Tier.YELLOW: ("Edible", "Processed, caloric but empty."),
    Tier.RED: ("Bio-Hazard", "Do not consume."),
}


class Confidence(str, Enum):
    """Statistical reliability of the vote-derived components."""
    FULL = "full"
    LOW_SAMPLE = "low_sample"
    LOW_CONFIDENCE = "low_confidence"


# =============================================================================
# BASE CLASSES
# =============================================================================

class BaseModel:
    """Mixin for all data models with common serialization methods."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary, handling nested objects."""
        def convert(obj):
            if isinstance(obj, BaseModel):
                return obj.to_dict()
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, datetime):
                return obj.isoformat()
            elif isinstance(obj, (list, tuple)):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            return obj

        return {k: convert(v) for k, v in asdict(self).items()}

    def to_json(self, indent: int = 2) -> str:
        """Convert model to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseModel":
        """Create model from dictionary. Override in subclasses for nested objects."""
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "BaseModel":
        """Create model from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# RAW SIGNALS
# =============================================================================

# Accepted spellings for each field, first match wins. The vote service
# answers in camelCase, the page scraper in snake_case.
_SIGNAL_ALIASES = {
    'video_id': ('video_id', 'videoId', 'id'),
    'likes': ('likes',),
    'dislikes': ('dislikes',),
    'view_count': ('view_count', 'viewCount', 'views'),
    'subscribers': ('subscribers', 'subscriberCount', 'subscriber_count', 'subs'),
    'days_old': ('days_old', 'daysOld'),
    'age_text': ('age_text', 'ageText'),
    'title': ('title',),
    'channel_handle': ('channel_handle', 'channelHandle'),
}


@dataclass
class VideoSignals(BaseModel):
    """
    Raw, possibly partial engagement signals for one video.

    Every field may be missing; the normalizer supplies defaults.

    Attributes:
        video_id: Platform video identifier
        likes: Like count from the vote service
        dislikes: Dislike count from the vote service
        view_count: View count from the vote service
        subscribers: Channel subscriber count (None when the lookup failed)
        days_old: Content age in days
        age_text: Relative age as displayed ("3 weeks ago"), used when
            days_old is missing
        title: Video title
        channel_handle: Channel handle or id the subscriber count came from
    """
    video_id: Optional[str] = None
    likes: Optional[int] = None
    dislikes: Optional[int] = None
    view_count: Optional[int] = None
    subscribers: Optional[int] = None
    days_old: Optional[float] = None
    age_text: Optional[str] = None
    title: Optional[str] = None
    channel_handle: Optional[str] = None

    @property
    def has_vote_data(self) -> bool:
        """Whether likes, dislikes and view count were all resolved."""
        return (
            self.likes is not None
            and self.dislikes is not None
            and self.view_count is not None
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoSignals":
        """Create from a dictionary using snake_case or camelCase keys."""
        values = {}
        for attr, aliases in _SIGNAL_ALIASES.items():
            for alias in aliases:
                if data.get(alias) is not None:
                    values[attr] = data[alias]
                    break
        return cls(**values)


# =============================================================================
# NORMALIZED INPUT
# =============================================================================

@dataclass(frozen=True)
class ScoreInput(BaseModel):
    """
    Well-formed scoring input, built only by the InputNormalizer.

    Invariant: subscribers, view_divisor and days_old are strictly positive,
    so no estimator needs to guard a division.

    Attributes:
        likes: Non-negative like count
        dislikes: Non-negative dislike count
        view_count: Non-negative view count (may be 0)
        subscribers: Subscriber count floored to the configured minimum
        days_old: Age in days floored to the configured minimum
        title: Title text, possibly empty
        view_divisor: view_count floored to the configured minimum
    """
    likes: int = 0
    dislikes: int = 0
    view_count: int = 0
    subscribers: int = 1
    days_old: float = 0.1
    title: str = ""
    view_divisor: int = 1

    @property
    def effective_votes(self) -> int:
        """Veff: total votes cast."""
        return self.likes + self.dislikes


# =============================================================================
# SCORING RESULTS
# =============================================================================

@dataclass
class ClickbaitAnalysis(BaseModel):
    """
    Breakdown of the title heuristic.

    Attributes:
        score: Total clickbait score in [0, 1]
        caps_ratio: Uppercase share of ASCII letters
        caps_signal: Contribution from capitalization
        matched_keywords: Clickbait phrases found in the title
        keyword_signal: Contribution from keywords (capped)
        emoji_count: Emoji code points found
        emoji_signal: Contribution from emoji density
    """
    score: float = 0.0
    caps_ratio: float = 0.0
    caps_signal: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)
    keyword_signal: float = 0.0
    emoji_count: int = 0
    emoji_signal: float = 0.0


@dataclass
class ScoreDiagnostics(BaseModel):
    """
    Every intermediate value behind a score.

    Components (approval, volume, velocity, integrity, clickbait, decay,
    smoothed_ratio) lie in [0, 1]. The remaining values are raw ratios kept
    for explanation and may exceed 1.
    """
    approval: float = 0.0
    volume: float = 0.0
    velocity: float = 0.0
    integrity: float = 0.0
    clickbait: float = 0.0
    decay: float = 1.0
    smoothed_ratio: float = 0.5
    laplace_ratio: float = 0.5
    effective_votes: int = 0
    view_sub_ratio: float = 0.0
    velocity_base: float = 0.0
    recency_multiplier: float = 1.0
    engagement_velocity: float = 0.0
    interaction_rate: float = 0.0
    composite: float = 0.0
    pre_floor_score: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)

    def components(self) -> Dict[str, float]:
        """The five weighted components."""
        return {
            'approval': self.approval,
            'velocity': self.velocity,
            'integrity': self.integrity,
            'volume': self.volume,
            'clickbait': self.clickbait,
        }


@dataclass
class ScoreResult(BaseModel):
    """
    Outcome of scoring one video.

    Attributes:
        score: Utility score in [0, 100], one decimal
        tier: Quality tier
        confidence: Reliability of the vote-derived components
        slop_flag: Whether the anti-bot floor fired
        clickbait_score: Title heuristic in [0, 1]
        diagnostics: Intermediate values
        scoring_method: Strategy that produced the result
        video_id: Video identifier, when known
    """
    score: float
    tier: Tier
    confidence: Confidence
    slop_flag: bool = False
    clickbait_score: float = 0.0
    diagnostics: ScoreDiagnostics = field(default_factory=ScoreDiagnostics)
    scoring_method: str = "pareto_utility"
    video_id: Optional[str] = None

    @property
    def display_score(self) -> str:
        """Score as shown on a badge; prefixed with '~' unless confidence is full."""
        text = f"{self.score:.0f}"
        if self.confidence != Confidence.FULL:
            return f"~{text}"
        return text

    @property
    def interaction_density(self) -> str:
        """Interaction rate as a percentage with two decimals."""
        return f"{self.diagnostics.interaction_rate * 100:.2f}"

    @property
    def is_reliable(self) -> bool:
        return self.confidence == Confidence.FULL

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['display_score'] = self.display_score
        data['interaction_density'] = self.interaction_density
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreResult":
        """Create from dictionary with nested diagnostics."""
        return cls(
            score=data['score'],
            tier=Tier(data['tier']),
            confidence=Confidence(data['confidence']),
            slop_flag=data.get('slop_flag', False),
            clickbait_score=data.get('clickbait_score', 0.0),
            diagnostics=ScoreDiagnostics(**data.get('diagnostics', {})),
            scoring_method=data.get('scoring_method', 'pareto_utility'),
            video_id=data.get('video_id'),
        )


@dataclass
class ScoredVideo(BaseModel):
    """
    A scored video on a listing page.

    Attributes:
        video_id: Platform video identifier
        result: Score result
        title: Title as scraped
        rank: Position among the listing (1 = best, 0 = unranked)
    """
    video_id: str
    result: ScoreResult
    title: str = ""
    rank: int = 0

    @property
    def score(self) -> float:
        return self.result.score

    def to_dict(self) -> Dict[str, Any]:
        """Override for the nested result."""
        return {
            'video_id': self.video_id,
            'title': self.title,
            'rank': self.rank,
            'result': self.result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoredVideo":
        return cls(
            video_id=data['video_id'],
            result=ScoreResult.from_dict(data['result']),
            title=data.get('title', ''),
            rank=data.get('rank', 0),
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def generate_request_id(payload: str) -> str:
    """Generate a unique request ID for an API call."""
    content = f"{payload}_{datetime.now().isoformat()}"
    return hashlib.md5(content.encode()).hexdigest()[:16]
