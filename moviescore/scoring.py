"""
Composite score of a single movie.
"""

import asyncio
from typing import Optional, Sequence

from moviescore.collaborative import estimate_rating
from moviescore.config import (DEFAULT_SCORE_WEIGHTS, NEIGHBORHOOD_SIZE,
                               STORE_TIMEOUT, ScoreWeights)
from moviescore.db.base import ScoreStore
from moviescore.logger import logger
from moviescore.models import MovieDetails, MovieScore, Review, UserId
from moviescore.sentiment import aggregate_review_score
from moviescore.utils import clamp, is_finite_number, read_or_none, round_half_up, timed


async def _self_rating(movie: MovieDetails) -> float:
    return movie.vote_average


def fallback_score(movie: MovieDetails) -> MovieScore:
    rating = movie.vote_average if is_finite_number(movie.vote_average) else 0.0
    return MovieScore(rating=rating, recommendation_score=0, total_reviews=0, sentiment_score=0.0)


def compose_score(
    vote_average: float,
    similar_users_average: float,
    sentiment_score: float,
    ml_score: float,
    popularity: float,
    total_reviews: int,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> MovieScore:
    """Blend already fetched signals into a MovieScore."""
    for name, value in (
        ("vote_average", vote_average),
        ("similar_users_average", similar_users_average),
        ("sentiment_score", sentiment_score),
        ("popularity", popularity),
        ("ml_score", ml_score),
    ):
        if not is_finite_number(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")

    ml_score = clamp(ml_score)
    popularity_factor = min(max(popularity, 0.0) / weights.popularity_saturation, 1.0)
    # sentiment and ML scores are in [0, 1], rescaled to the 0-10 rating scale
    final_rating = (
        vote_average * weights.vote_average
        + similar_users_average * weights.similar_users
        + sentiment_score * 10 * weights.sentiment
        + ml_score * 10 * weights.ml_score
    )
    recommendation_score = round_half_up(
        final_rating / 10 * weights.rating_points
        + popularity_factor * weights.popularity_points
        + sentiment_score * weights.sentiment_points
        + ml_score * weights.ml_points
    )
    logger.debug(
        f"score components: {vote_average = }, {similar_users_average = }, "
        f"{sentiment_score = }, {ml_score = }, {popularity_factor = }, "
        f"{final_rating = }, {recommendation_score = }"
    )
    return MovieScore(
        rating=round_half_up(final_rating * 10) / 10,
        recommendation_score=int(clamp(recommendation_score, 0, 100)),
        total_reviews=total_reviews,
        sentiment_score=sentiment_score,
    )


@timed
async def calculate_movie_score(
    movie: MovieDetails,
    reviews: Sequence[Review] = (),
    user_id: Optional[UserId] = None,
    *,
    store: ScoreStore,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
    neighborhood_size: int = NEIGHBORHOOD_SIZE,
    timeout: Optional[float] = STORE_TIMEOUT,
) -> MovieScore:
    """
    Score a movie for display: a 0-10 rating and a 0-100 recommendation strength.

    The score is advisory. Store failures and malformed movie data never
    reach the caller; they are logged and a fallback score is returned.
    """
    logger.info(f"calculating score for movie {movie.id} ({movie.title})")
    reads = []
    try:
        if user_id is not None:
            similar_users_read = estimate_rating(
                store, movie, user_id, neighborhood_size=neighborhood_size, timeout=timeout
            )
        else:
            similar_users_read = _self_rating(movie)

        reads = [
            asyncio.ensure_future(
                read_or_none(store.get_ml_score(movie.id, user_id), timeout, f"ML score of movie {movie.id}")
            ),
            asyncio.ensure_future(similar_users_read),
        ]
        ml_score, similar_users_average = await asyncio.gather(*reads)
        sentiment_score = aggregate_review_score(reviews)

        return compose_score(
            vote_average=movie.vote_average,
            similar_users_average=similar_users_average,
            sentiment_score=sentiment_score,
            ml_score=ml_score or 0.0,
            popularity=movie.popularity,
            total_reviews=len(reviews),
            weights=weights,
        )
    except Exception as exc:
        logger.error(f"calculating score of movie {movie.id} failed, using fallback: {exc}")
        return fallback_score(movie)
    finally:
        # a failed read must not leave the other one running
        for read in reads:
            if not read.done():
                read.cancel()
