"""
Input Normalization Module
==========================
Turns raw, possibly partial signal records into a well-formed ScoreInput.

This is the single place where defaults and divisor floors are enforced:
- Missing or negative counts become 0
- Subscribers are floored to a strictly positive minimum
- Views get a floored divisor; the raw count may legitimately stay 0
- Age is floored to a small positive epsilon
- Counts and ages are capped at finite ceilings
- A missing title becomes the empty string

A missing subscriber count is treated as 0 and then floored, which maximizes
the views/subscribers ratio. Unknown channel size is read as "small channel",
not as an error.
"""

import math
import re
import logging
from typing import Any, Mapping, Optional, Union

from ..models import ScoreInput, VideoSignals
from ..config import ThresholdConfig

logger = logging.getLogger(__name__)


# Days per unit for relative ages as the page displays them
AGE_UNITS = {
    'second': 1 / 86400,
    'minute': 1 / 1440,
    'hour': 1 / 24,
    'day': 1,
    'week': 7,
    'month': 30,
    'year': 365,
}

# Ceilings far past any real video; every component has saturated long
# before them and they keep all arithmetic inside float range
MAX_COUNT = 10 ** 15
MAX_DAYS = 1e9

_AGE_PATTERN = re.compile(r'(\d+)\s*(second|minute|hour|day|week|month|year)', re.IGNORECASE)


def parse_days_old(text: Optional[str]) -> float:
    """
    Parse a relative age such as "3 weeks ago" into days.

    Only the first "<number> <unit>" pair is used. Text without one
    yields 0.0. Absurdly large ages are capped at MAX_DAYS.

    Examples:
        parse_days_old("5 hours ago")           -> 0.2083...
        parse_days_old("Streamed 2 years ago")  -> 730.0
        parse_days_old("yesterday")             -> 0.0
    """
    if not text:
        return 0.0

    match = _AGE_PATTERN.search(text)
    if not match:
        return 0.0

    # float() of an over-long digit run is inf rather than an error
    days = float(match.group(1)) * AGE_UNITS[match.group(2).lower()]
    return min(days, MAX_DAYS)


def _as_count(value: Any) -> int:
    """Coerce a raw count to an int in [0, MAX_COUNT]; anything unusable is 0."""
    if value is None:
        return 0
    if not isinstance(value, int):
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0
        if math.isnan(number):
            return 0
        value = int(min(number, MAX_COUNT))
    return min(max(value, 0), MAX_COUNT)


def _as_days(value: Any) -> Optional[float]:
    """Coerce a raw age to a float in [0, MAX_DAYS], or None when unusable."""
    if value is None:
        return None
    try:
        days = float(value)
    except OverflowError:
        # An int too large for a float is still a valid, very old age
        return MAX_DAYS if value > 0 else 0.0
    except (TypeError, ValueError):
        return None
    if math.isnan(days):
        return None
    return min(max(days, 0.0), MAX_DAYS)


class InputNormalizer:
    """
    Clamps and defaults raw signals into a ScoreInput.

    Never raises for any input shape: a VideoSignals record, a mapping
    (snake_case or camelCase keys) or None are all accepted.

    Usage:
        normalizer = InputNormalizer()
        score_input = normalizer.normalize({"likes": 10, "viewCount": 900})
    """

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        """
        Initialize the normalizer.

        Args:
            thresholds: Threshold configuration holding the divisor floors
        """
        self.thresholds = thresholds or ThresholdConfig()

    def normalize(
        self,
        raw: Union[VideoSignals, Mapping[str, Any], None]
    ) -> ScoreInput:
        """
        Normalize a raw signal record.

        Args:
            raw: Raw signals in any accepted shape

        Returns:
            ScoreInput with every field defaulted and every divisor floored
        """
        signals = self.to_signals(raw)
        t = self.thresholds

        view_count = _as_count(signals.view_count)

        days_old = _as_days(signals.days_old)
        if days_old is None:
            days_old = parse_days_old(signals.age_text)

        title = signals.title if isinstance(signals.title, str) else ""

        return ScoreInput(
            likes=_as_count(signals.likes),
            dislikes=_as_count(signals.dislikes),
            view_count=view_count,
            subscribers=max(_as_count(signals.subscribers), t.min_subscribers),
            days_old=max(days_old, t.min_days_old),
            title=title,
            view_divisor=max(view_count, t.min_views),
        )

    @staticmethod
    def to_signals(raw: Union[VideoSignals, Mapping[str, Any], None]) -> VideoSignals:
        """Coerce any accepted record shape into VideoSignals."""
        if isinstance(raw, VideoSignals):
            return raw
        if isinstance(raw, Mapping):
            return VideoSignals.from_dict(raw)
        if raw is not None:
            logger.debug(f"Unsupported signal record type {type(raw).__name__}, using defaults")
        return VideoSignals()


def normalize_signals(
    raw: Union[VideoSignals, Mapping[str, Any], None],
    thresholds: Optional[ThresholdConfig] = None
) -> ScoreInput:
    """
    Convenience function to normalize one record.

    Args:
        raw: Raw signals
        thresholds: Optional threshold configuration

    Returns:
        ScoreInput
    """
    return InputNormalizer(thresholds).normalize(raw)
