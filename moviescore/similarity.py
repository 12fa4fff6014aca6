"""
Pairwise similarity between a reference movie and a candidate.

Each function returns a value in [0, 1] and never NaN: empty genre sets,
zero popularity, non-finite numbers and unparseable dates are all guarded.
"""

from datetime import date
from typing import Optional

from moviescore.config import (DEFAULT_SIMILARITY_WEIGHTS, MAX_RATING,
                               MAX_YEAR_GAP, SimilarityWeights)
from moviescore.models import Movie
from moviescore.utils import clamp, is_finite_number


def genre_similarity(movie: Movie, other: Movie) -> float:
    genres = movie.genre_id_set
    other_genres = other.genre_id_set
    union = genres | other_genres
    if not union:
        return 0.0
    return len(genres & other_genres) / len(union)


def rating_similarity(rating: float, other: float) -> float:
    if not (is_finite_number(rating) and is_finite_number(other)):
        return 0.0
    return clamp(1 - abs(rating - other) / MAX_RATING)


def release_year(release_date) -> Optional[int]:
    if isinstance(release_date, date):
        return release_date.year
    if not release_date:
        return None
    try:
        return date.fromisoformat(str(release_date)[:10]).year
    except ValueError:
        pass
    try:
        # year-only dates such as "1999"
        return int(str(release_date)[:4])
    except ValueError:
        return None


def recency_similarity(release_date, other_release_date) -> float:
    year = release_year(release_date)
    other_year = release_year(other_release_date)
    if year is None or other_year is None:
        return 0.0
    return max(0.0, 1 - abs(year - other_year) / MAX_YEAR_GAP)


def popularity_similarity(popularity: float, other: float) -> float:
    if not (is_finite_number(popularity) and is_finite_number(other)):
        return 0.0
    if popularity < 0 or other < 0:
        return 0.0
    max_popularity = max(popularity, other) or 1.0
    return clamp(1 - abs(popularity - other) / max_popularity)


def similarity_breakdown(
    movie: Movie, other: Movie, weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS
) -> dict[str, float]:
    breakdown = {
        "genre": genre_similarity(movie, other),
        "rating": rating_similarity(movie.vote_average, other.vote_average),
        "recency": recency_similarity(movie.release_date, other.release_date),
        "popularity": popularity_similarity(movie.popularity, other.popularity),
    }
    breakdown["total"] = (
        breakdown["genre"] * weights.genre
        + breakdown["rating"] * weights.rating
        + breakdown["recency"] * weights.recency
        + breakdown["popularity"] * weights.popularity
    )
    return breakdown


def composite_similarity(
    movie: Movie, other: Movie, weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS
) -> float:
    return similarity_breakdown(movie, other, weights)["total"]
