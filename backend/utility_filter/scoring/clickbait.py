"""
Clickbait Detection Module
==========================
Title-text heuristic producing a subtractive penalty in [0, 1].

Signals (each capped individually, total capped at 1.0):
- Capitalization: uppercase share of ASCII letters above a threshold
- Keywords: case-insensitive substring match against known bait phrases
- Emoji density: count of emoji code points at or above a threshold

This is a heuristic, not a classifier. False positives are expected;
determinism and the additive cap structure are what matter.
"""

import re
import logging
from typing import List, Optional

from ..models import ClickbaitAnalysis
from ..config import ThresholdConfig

logger = logging.getLogger(__name__)


# =============================================================================
# LEXICONS
# =============================================================================

CLICKBAIT_PHRASES = (
    "you won't believe", "insane", "shocking", "no way", "mind blown",
    "gone wrong", "not clickbait", "i tried", "challenge", "prank", "hack",
    "exposed", "destroyed", "impossible", "unbelievable", "secret",
    "they don't want you", "finally revealed", "truth about", "you need to see",
    "will shock you", "can't believe", "never expected",
)

# Emoticons, misc symbols, dingbats, pictographs, transport
EMOJI_PATTERN = re.compile(
    '['
    '\U0001F600-\U0001F9FF'
    '\u2600-\u26FF'
    '\u2700-\u27BF'
    '\U0001F300-\U0001F5FF'
    '\U0001F680-\U0001F6FF'
    ']'
)

_LETTER_PATTERN = re.compile(r'[A-Za-z]')


class ClickbaitDetector:
    """
    Scores a title for clickbait signals.

    Usage:
        detector = ClickbaitDetector()
        analysis = detector.analyze("Insane Secret Hack Revealed!!!")
        print(analysis.score, analysis.matched_keywords)
    """

    def __init__(
        self,
        thresholds: Optional[ThresholdConfig] = None,
        phrases: Optional[List[str]] = None
    ):
        """
        Initialize the detector.

        Args:
            thresholds: Threshold configuration with the clickbait signal sizes
            phrases: Override for the keyword list (lowercase)
        """
        self.thresholds = thresholds or ThresholdConfig()
        self.phrases = tuple(phrases) if phrases is not None else CLICKBAIT_PHRASES

    def analyze(self, title: Optional[str]) -> ClickbaitAnalysis:
        """
        Break a title down into its clickbait signals.

        Args:
            title: Title text; None or empty yields a zero analysis

        Returns:
            ClickbaitAnalysis with per-signal contributions
        """
        if not title or not isinstance(title, str):
            return ClickbaitAnalysis()

        t = self.thresholds

        caps_ratio = self._caps_ratio(title)
        letters = len(_LETTER_PATTERN.findall(title))
        caps_signal = 0.0
        if letters > t.clickbait_caps_min_letters and caps_ratio > t.clickbait_caps_threshold:
            caps_signal = t.clickbait_caps_signal

        lower = title.lower()
        matched = [phrase for phrase in self.phrases if phrase in lower]
        keyword_signal = min(len(matched) * t.clickbait_keyword_signal, t.clickbait_keyword_cap)

        emoji_count = len(EMOJI_PATTERN.findall(title))
        emoji_signal = 0.0
        if emoji_count >= t.clickbait_emoji_threshold:
            emoji_signal = t.clickbait_emoji_signal

        score = min(caps_signal + keyword_signal + emoji_signal, 1.0)

        return ClickbaitAnalysis(
            score=score,
            caps_ratio=caps_ratio,
            caps_signal=caps_signal,
            matched_keywords=matched,
            keyword_signal=keyword_signal,
            emoji_count=emoji_count,
            emoji_signal=emoji_signal,
        )

    def score(self, title: Optional[str]) -> float:
        """Clickbait score in [0, 1]."""
        return self.analyze(title).score

    @staticmethod
    def _caps_ratio(title: str) -> float:
        letters = _LETTER_PATTERN.findall(title)
        if not letters:
            return 0.0
        upper = sum(1 for ch in letters if ch.isupper())
        return upper / len(letters)
