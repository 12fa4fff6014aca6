"""
Data models and types.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple, Optional, Union


class Genre(NamedTuple):
    id: int
    name: str


@dataclass
class Movie:
    id: int
    title: str
    vote_average: float
    popularity: float
    release_date: str = ""
    genre_ids: list[int] = field(default_factory=list)
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None

    @property
    def genre_id_set(self) -> set[int]:
        return set(self.genre_ids)


@dataclass
class MovieDetails(Movie):
    runtime: Optional[int] = None
    genres: list[Genre] = field(default_factory=list)
    tagline: str = ""

    @property
    def genre_id_set(self) -> set[int]:
        # detail payloads carry genre objects instead of genre_ids
        return set(self.genre_ids) | {genre.id for genre in self.genres}

    @property
    def genre_names(self) -> list[str]:
        return [genre.name for genre in self.genres]


UserId = Union[int, str]


class Rating(NamedTuple):
    user_id: UserId
    movie_id: int
    rating: float
    review: Optional[str] = None
    timestamp: Optional[datetime] = None


@dataclass
class Review:
    id: str
    movie_id: int
    user_id: UserId
    rating: float
    content: str
    created_at: Optional[datetime] = None


@dataclass
class MovieScore:
    rating: float
    recommendation_score: int
    total_reviews: int
    sentiment_score: float

    def as_json(self) -> dict:
        return {
            "rating": self.rating,
            "recommendationScore": self.recommendation_score,
            "totalReviews": self.total_reviews,
            "sentimentScore": self.sentiment_score,
        }


class UserPreferences(NamedTuple):
    user_id: UserId
    favorite_genres: list[int]
