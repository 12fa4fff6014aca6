"""
Dictionary-backed store, used for tests and when no database is configured.
"""

from datetime import datetime
from statistics import mean
from typing import Iterable, Optional, Sequence

from moviescore.models import Rating, UserId, UserPreferences


class InMemoryStore:
    def __init__(
        self,
        ratings: Iterable[Rating] = (),
        ml_scores: Optional[dict[tuple[UserId, int], float]] = None,
        preferences: Iterable[UserPreferences] = (),
    ):
        self.ratings: dict[tuple[UserId, int], Rating] = {}
        for rating in ratings:
            self.ratings[(rating.user_id, rating.movie_id)] = rating
        self.ml_scores = dict(ml_scores or {})
        self.preferences = {pref.user_id: pref for pref in preferences}

    async def get_ratings_by_user(self, user_id: UserId) -> list[Rating]:
        return [r for r in self.ratings.values() if r.user_id == user_id]

    async def get_other_users_ratings(
        self, user_id: UserId, movie_ids: Sequence[int]
    ) -> list[Rating]:
        movie_ids = set(movie_ids)
        return [
            r for r in self.ratings.values() if r.user_id != user_id and r.movie_id in movie_ids
        ]

    async def get_ratings_by_movie(self, movie_id: int, user_ids: Sequence[UserId]) -> list[float]:
        user_ids = set(user_ids)
        return [
            r.rating for r in self.ratings.values() if r.movie_id == movie_id and r.user_id in user_ids
        ]

    async def upsert_rating(self, rating: Rating) -> None:
        if rating.timestamp is None:
            rating = rating._replace(timestamp=datetime.now())
        # replacing the value keeps the original insertion position
        self.ratings[(rating.user_id, rating.movie_id)] = rating

    async def get_ml_score(self, movie_id: int, user_id: Optional[UserId] = None) -> Optional[float]:
        if user_id is not None and (user_id, movie_id) in self.ml_scores:
            return self.ml_scores[(user_id, movie_id)]
        scores = [score for (_, movie), score in self.ml_scores.items() if movie == movie_id]
        if not scores:
            return None
        return mean(scores)

    async def get_user_preferences(self, user_id: UserId) -> Optional[UserPreferences]:
        return self.preferences.get(user_id)

    async def upsert_ml_score(self, user_id: UserId, movie_id: int, score: float) -> None:
        self.ml_scores[(user_id, movie_id)] = score
