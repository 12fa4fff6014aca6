"""
Read/write interfaces the scoring engine expects from a data store.
"""

from typing import Optional, Protocol, Sequence

from moviescore.models import Rating, UserId, UserPreferences


class RatingStore(Protocol):
    async def get_ratings_by_user(self, user_id: UserId) -> list[Rating]:
        ...

    async def get_other_users_ratings(
        self, user_id: UserId, movie_ids: Sequence[int]
    ) -> list[Rating]:
        """Ratings of every user except `user_id` on the given movies."""
        ...

    async def get_ratings_by_movie(self, movie_id: int, user_ids: Sequence[UserId]) -> list[float]:
        ...

    async def upsert_rating(self, rating: Rating) -> None:
        ...


class MLScoreStore(Protocol):
    async def get_ml_score(self, movie_id: int, user_id: Optional[UserId] = None) -> Optional[float]:
        ...


class RecomputeStore(Protocol):
    async def get_ratings_by_user(self, user_id: UserId) -> list[Rating]:
        ...

    async def get_user_preferences(self, user_id: UserId) -> Optional[UserPreferences]:
        ...

    async def upsert_ml_score(self, user_id: UserId, movie_id: int, score: float) -> None:
        ...


class ScoreStore(RatingStore, MLScoreStore, Protocol):
    """Everything the score composer reads."""
