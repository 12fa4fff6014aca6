"""
Scoring constants and runtime settings.

Every weight used by the engine lives here so callers can override it
instead of editing literals. Runtime settings come from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from moviescore.logger import logger

MAX_RATING = 10.0
MAX_YEAR_GAP = 30
NEIGHBORHOOD_SIZE = 5
NEUTRAL_SENTIMENT = 0.5
STORE_TIMEOUT = 2.0


@dataclass(frozen=True)
class SimilarityWeights:
    """Weights of the catalog-only composite used for ranking (sum is 0.75)."""

    genre: float = 0.25
    rating: float = 0.20
    recency: float = 0.15
    popularity: float = 0.15


@dataclass(frozen=True)
class ScoreWeights:
    # final rating, every term on a 0-10 scale
    vote_average: float = 0.2
    similar_users: float = 0.4
    sentiment: float = 0.2
    ml_score: float = 0.2
    # recommendation score, points out of 100
    rating_points: float = 40.0
    popularity_points: float = 20.0
    sentiment_points: float = 20.0
    ml_points: float = 20.0
    # popularity at which the popularity factor saturates
    popularity_saturation: float = 100.0


DEFAULT_SIMILARITY_WEIGHTS = SimilarityWeights()
DEFAULT_SCORE_WEIGHTS = ScoreWeights()


@dataclass(frozen=True)
class Settings:
    postgres_uri: Optional[str] = None
    store_timeout: float = STORE_TIMEOUT
    neighborhood_size: int = NEIGHBORHOOD_SIZE
    debug: bool = False


def _get_float_env(key: str, default: float, min_val: float = 0.0) -> float:
    try:
        val = float(os.environ.get(key, default))
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default
    if val < min_val:
        logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
        return min_val
    return val


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    try:
        val = int(os.environ.get(key, default))
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default
    if val < min_val:
        logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
        return min_val
    return val


def load_settings() -> Settings:
    return Settings(
        postgres_uri=os.environ.get("POSTGRES_URI") or None,
        store_timeout=_get_float_env("MOVIESCORE_STORE_TIMEOUT", STORE_TIMEOUT, min_val=0.01),
        neighborhood_size=_get_int_env("MOVIESCORE_NEIGHBORHOOD_SIZE", NEIGHBORHOOD_SIZE),
        debug=bool(os.environ.get("DEBUG")),
    )
