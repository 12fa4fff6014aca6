"""
Reordering of candidate recommendations by similarity to the current movie.
"""

from typing import Sequence

import numpy as np

from moviescore.config import DEFAULT_SIMILARITY_WEIGHTS, SimilarityWeights
from moviescore.logger import logger
from moviescore.models import Movie, MovieDetails, Review
from moviescore.similarity import similarity_breakdown


def similarity_scores(
    current_movie: MovieDetails,
    candidates: Sequence[Movie],
    weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS,
) -> np.ndarray:
    scores = np.zeros(len(candidates), dtype=float)
    for i, movie in enumerate(candidates):
        breakdown = similarity_breakdown(current_movie, movie, weights)
        logger.debug(f"similarity of {movie.id} ({movie.title}) to {current_movie.id}: {breakdown}")
        scores[i] = breakdown["total"]
    return scores


def enhance_recommendations(
    current_movie: MovieDetails,
    recommendations: Sequence[Movie],
    reviews: Sequence[Review] = (),
    weights: SimilarityWeights = DEFAULT_SIMILARITY_WEIGHTS,
) -> list[Movie]:
    """
    Sort candidate movies by composite similarity to `current_movie`, best first.

    `reviews` is accepted for symmetry with the score composer but does not
    take part in the similarity. Equal scores keep their input order.
    """
    if not recommendations:
        return []

    scores = similarity_scores(current_movie, recommendations, weights)
    # stable sort keeps ties in input order
    order = np.argsort(-scores, kind="stable")
    logger.info(f"reordered {len(recommendations)} recommendations for movie {current_movie.id}")
    return [recommendations[idx] for idx in order]
