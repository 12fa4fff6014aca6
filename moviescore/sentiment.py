"""
Lexicon-based sentiment of review texts and aggregation of reviews.
"""

from typing import AbstractSet, Optional, Sequence

from moviescore.config import MAX_RATING, NEUTRAL_SENTIMENT
from moviescore.logger import logger
from moviescore.models import Review
from moviescore.utils import clamp

POSITIVE_WORDS = frozenset(
    {
        "great", "awesome", "excellent", "good", "love", "amazing", "fantastic",
        "brilliant", "outstanding", "perfect", "masterpiece", "wonderful",
        "enjoyed", "best", "recommend",
    }
)
NEGATIVE_WORDS = frozenset(
    {
        "bad", "poor", "terrible", "awful", "hate", "disappointing", "boring",
        "waste", "worst", "mediocre", "horrible", "unwatchable", "skip",
        "bland", "forgettable",
    }
)


def analyze_sentiment(
    text: Optional[str],
    positive_words: AbstractSet[str] = POSITIVE_WORDS,
    negative_words: AbstractSet[str] = NEGATIVE_WORDS,
) -> float:
    """
    Score a text between 0 (negative) and 1 (positive).

    Tokens are whitespace separated and matched exactly against the lexicons,
    so "great!" or "not good" get no special treatment. Texts without any
    lexicon word are neutral (0.5).
    """
    score = 0
    matches = 0
    for word in (text or "").lower().split():
        if word in positive_words:
            score += 1
            matches += 1
        if word in negative_words:
            score -= 1
            matches += 1

    if matches == 0:
        return NEUTRAL_SENTIMENT
    return (score / matches + 1) / 2


def aggregate_review_score(reviews: Sequence[Review]) -> float:
    """Mean of the per-review average of text sentiment and normalized rating."""
    if not reviews:
        return NEUTRAL_SENTIMENT

    parts = [(analyze_sentiment(review.content), clamp(review.rating / MAX_RATING)) for review in reviews]
    aggregate = sum(0.5 * sentiment + 0.5 * rating for sentiment, rating in parts) / len(reviews)
    logger.debug(f"review analysis: {len(reviews)} reviews, {parts = }, {aggregate = }")
    return aggregate
