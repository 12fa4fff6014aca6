"""
Recomputation of the stored ML recommendation score after a new rating.
"""

from statistics import mean
from typing import Optional, Sequence

from moviescore.config import MAX_RATING
from moviescore.db.base import RecomputeStore
from moviescore.logger import logger
from moviescore.models import Rating, UserId, UserPreferences
from moviescore.utils import clamp

BASE_SCORE = 0.5
HISTORY_WEIGHT = 0.3
PREFERENCES_BONUS = 0.1


def compute_ml_score(
    ratings: Sequence[Rating], preferences: Optional[UserPreferences] = None
) -> float:
    score = BASE_SCORE
    if ratings:
        average_rating = mean(rating.rating for rating in ratings)
        score += average_rating / MAX_RATING * HISTORY_WEIGHT
    if preferences is not None and preferences.favorite_genres:
        score += PREFERENCES_BONUS
    return clamp(score)


async def background_recompute(store: RecomputeStore, user_id: UserId, movie_id: int) -> None:
    """Recompute and persist the ML score of (user, movie). Runs detached, never raises."""
    try:
        ratings = await store.get_ratings_by_user(user_id)
        preferences = await store.get_user_preferences(user_id)
        score = compute_ml_score(ratings, preferences)
        await store.upsert_ml_score(user_id, movie_id, score)
        logger.info(f"stored ML score {score:.3f} for user {user_id} - movie {movie_id}")
    except Exception as exc:
        logger.error(f"ML score recomputation for user {user_id} - movie {movie_id} failed: {exc}")
