"""
User-based collaborative filtering over the rating store.

Two users are similar when they rated the same movies alike: for every
shared movie the rating similarity is added to the pair's score. The top
neighbours' ratings of a movie then estimate the target user's rating.
"""

from collections import defaultdict
from statistics import mean
from typing import Iterable, Optional

from moviescore.config import NEIGHBORHOOD_SIZE
from moviescore.db.base import RatingStore
from moviescore.logger import logger
from moviescore.models import Movie, Rating, UserId
from moviescore.similarity import rating_similarity
from moviescore.utils import read_or_none


def rank_similar_users(
    target_ratings: Iterable[Rating],
    other_ratings: Iterable[Rating],
    neighborhood_size: int = NEIGHBORHOOD_SIZE,
) -> list[UserId]:
    """
    Return the ids of the most similar users, most similar first.

    Equal scores are ordered by user id so the neighbourhood does not
    depend on the order rows come back from the store.
    """
    movie_2_rating = {rating.movie_id: rating.rating for rating in target_ratings}
    similarities: dict[UserId, float] = defaultdict(float)
    for other in other_ratings:
        own_rating = movie_2_rating.get(other.movie_id)
        if own_rating is None:
            continue
        similarities[other.user_id] += rating_similarity(own_rating, other.rating)

    ranked = sorted(similarities.items(), key=lambda item: (-item[1], str(item[0])))
    return [user_id for user_id, _ in ranked[:neighborhood_size]]


async def find_similar_users(
    store: RatingStore,
    user_id: UserId,
    neighborhood_size: int = NEIGHBORHOOD_SIZE,
    timeout: Optional[float] = None,
) -> list[UserId]:
    target_ratings = await read_or_none(
        store.get_ratings_by_user(user_id), timeout, f"ratings of user {user_id}"
    )
    if not target_ratings:
        return []

    movie_ids = sorted({rating.movie_id for rating in target_ratings})
    other_ratings = await read_or_none(
        store.get_other_users_ratings(user_id, movie_ids),
        timeout,
        f"ratings overlapping with user {user_id}",
    )
    if not other_ratings:
        return []

    similar_users = rank_similar_users(target_ratings, other_ratings, neighborhood_size)
    logger.debug(f"similar users of {user_id}: {similar_users}")
    return similar_users


async def estimate_rating(
    store: RatingStore,
    movie: Movie,
    user_id: UserId,
    neighborhood_size: int = NEIGHBORHOOD_SIZE,
    timeout: Optional[float] = None,
) -> float:
    """Mean rating of the user's neighbourhood, or the catalog average without one."""
    similar_users = await find_similar_users(store, user_id, neighborhood_size, timeout)
    if not similar_users:
        return movie.vote_average

    ratings = await read_or_none(
        store.get_ratings_by_movie(movie.id, similar_users),
        timeout,
        f"neighbourhood ratings of movie {movie.id}",
    )
    if not ratings:
        return movie.vote_average
    logger.debug(f"neighbourhood ratings of movie {movie.id}: {ratings}")
    return mean(ratings)
