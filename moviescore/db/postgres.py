"""
Functions to interact with PostgreSQL database.
"""

from datetime import datetime
from typing import Optional, Sequence

import asyncpg

from moviescore.models import Rating, UserId, UserPreferences


async def create_ratings_table(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as connection:
        await connection.execute(open("./sql/create_ratings.sql", "r").read())


async def create_recommendations_table(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as connection:
        await connection.execute(open("./sql/create_recommendations.sql", "r").read())


async def create_preferences_table(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as connection:
        await connection.execute(open("./sql/create_preferences.sql", "r").read())


def _rating_to_tuple(rating: Rating) -> tuple:
    timestamp = rating.timestamp or datetime.now()
    return (str(rating.user_id), rating.movie_id, rating.rating, rating.review, timestamp)


def _row_to_rating(row) -> Rating:
    return Rating(
        user_id=row["user_id"],
        movie_id=row["movie_id"],
        rating=row["rating"],
        review=row["review"],
        timestamp=row["rating_timestamp"],
    )


async def upsert_movie_rating(pool: asyncpg.Pool, rating: Rating) -> None:
    async with pool.acquire() as connection:
        await connection.execute(
            """
            INSERT INTO movie_ratings
            (user_id, movie_id, rating, review, rating_timestamp)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (user_id, movie_id) DO UPDATE
            SET rating = $3, review = $4, rating_timestamp = $5
        """,
            *_rating_to_tuple(rating),
        )


async def upsert_movie_ratings(pool: asyncpg.Pool, ratings: list[Rating]) -> None:
    """
    Bulk upsert of movie ratings.
    """
    async with pool.acquire() as connection:
        ratings_gen = (_rating_to_tuple(rating) for rating in ratings)
        await connection.executemany(
            """
            INSERT INTO movie_ratings
            (user_id, movie_id, rating, review, rating_timestamp)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (user_id, movie_id) DO UPDATE
            SET rating = $3, review = $4, rating_timestamp = $5
        """,
            ratings_gen,
        )


async def get_user_ratings(pool: asyncpg.Pool, user_id: UserId) -> list[Rating]:
    async with pool.acquire() as connection:
        rows = await connection.fetch(
            """
            SELECT user_id, movie_id, rating, review, rating_timestamp
            FROM movie_ratings WHERE user_id = $1
            """,
            str(user_id),
        )
    return [_row_to_rating(row) for row in rows]


async def get_other_users_ratings(
    pool: asyncpg.Pool, user_id: UserId, movie_ids: Sequence[int]
) -> list[Rating]:
    async with pool.acquire() as connection:
        rows = await connection.fetch(
            """
            SELECT user_id, movie_id, rating, review, rating_timestamp
            FROM movie_ratings
            WHERE user_id <> $1 AND movie_id = ANY($2::int[])
            """,
            str(user_id),
            list(movie_ids),
        )
    return [_row_to_rating(row) for row in rows]


async def get_movie_ratings(
    pool: asyncpg.Pool, movie_id: int, user_ids: Sequence[UserId]
) -> list[float]:
    async with pool.acquire() as connection:
        rows = await connection.fetch(
            "SELECT rating FROM movie_ratings WHERE movie_id = $1 AND user_id = ANY($2::text[])",
            movie_id,
            [str(user_id) for user_id in user_ids],
        )
    return [row["rating"] for row in rows]


async def get_ml_score(
    pool: asyncpg.Pool, movie_id: int, user_id: Optional[UserId] = None
) -> Optional[float]:
    async with pool.acquire() as connection:
        if user_id is not None:
            score = await connection.fetchval(
                "SELECT score FROM movie_recommendations WHERE movie_id = $1 AND user_id = $2",
                movie_id,
                str(user_id),
            )
            if score is not None:
                return score
        return await connection.fetchval(
            "SELECT AVG(score) FROM movie_recommendations WHERE movie_id = $1", movie_id
        )


async def upsert_ml_score(pool: asyncpg.Pool, user_id: UserId, movie_id: int, score: float) -> None:
    async with pool.acquire() as connection:
        await connection.execute(
            """
            INSERT INTO movie_recommendations (user_id, movie_id, score, updated_at)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_id, movie_id) DO UPDATE
            SET score = $3, updated_at = $4
        """,
            str(user_id),
            movie_id,
            score,
            datetime.now(),
        )


async def get_user_preferences(pool: asyncpg.Pool, user_id: UserId) -> Optional[UserPreferences]:
    async with pool.acquire() as connection:
        row = await connection.fetchrow(
            "SELECT user_id, favorite_genres FROM user_preferences WHERE user_id = $1",
            str(user_id),
        )
    if row is None:
        return None
    return UserPreferences(user_id=row["user_id"], favorite_genres=list(row["favorite_genres"] or []))


class PostgresStore:
    """Store backed by an asyncpg pool."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def get_ratings_by_user(self, user_id: UserId) -> list[Rating]:
        return await get_user_ratings(self.pool, user_id)

    async def get_other_users_ratings(
        self, user_id: UserId, movie_ids: Sequence[int]
    ) -> list[Rating]:
        return await get_other_users_ratings(self.pool, user_id, movie_ids)

    async def get_ratings_by_movie(self, movie_id: int, user_ids: Sequence[UserId]) -> list[float]:
        return await get_movie_ratings(self.pool, movie_id, user_ids)

    async def upsert_rating(self, rating: Rating) -> None:
        await upsert_movie_rating(self.pool, rating)

    async def get_ml_score(self, movie_id: int, user_id: Optional[UserId] = None) -> Optional[float]:
        return await get_ml_score(self.pool, movie_id, user_id)

    async def get_user_preferences(self, user_id: UserId) -> Optional[UserPreferences]:
        return await get_user_preferences(self.pool, user_id)

    async def upsert_ml_score(self, user_id: UserId, movie_id: int, score: float) -> None:
        await upsert_ml_score(self.pool, user_id, movie_id, score)
