from datetime import datetime
from typing import Optional, Union

import asyncpg
from fastapi import BackgroundTasks, FastAPI, Request
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from moviescore.config import load_settings
from moviescore.db.memory import InMemoryStore
from moviescore.db.postgres import PostgresStore
from moviescore.logger import logger
from moviescore.lookup import enhance_recommendations
from moviescore.ml.background import background_recompute
from moviescore.models import Genre, Movie, MovieDetails, Rating, Review
from moviescore.scoring import calculate_movie_score
from moviescore.utils import timed

app = FastAPI()


class GenreParams(BaseModel):
    id: int
    name: str = ""


class MovieParams(BaseModel):
    id: int
    title: str
    vote_average: float = Field(ge=0.0, le=10.0)
    popularity: float = Field(ge=0.0)
    release_date: str = ""
    genre_ids: list[int] = []
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None

    def to_movie(self) -> Movie:
        return Movie(**self.model_dump())


class MovieDetailsParams(MovieParams):
    runtime: Optional[int] = None
    genres: list[GenreParams] = []
    tagline: Optional[str] = ""

    def to_movie(self) -> MovieDetails:
        fields = self.model_dump(exclude={"genres"})
        fields["tagline"] = fields["tagline"] or ""
        return MovieDetails(**fields, genres=[Genre(g.id, g.name) for g in self.genres])


class ReviewParams(BaseModel):
    id: str
    movie_id: int
    user_id: Union[int, str]
    rating: float = Field(ge=0.0, le=10.0)
    content: str = ""
    created_at: Optional[datetime] = None

    def to_review(self) -> Review:
        return Review(**self.model_dump())


class ScoreParams(BaseModel):
    movie: MovieDetailsParams
    reviews: list[ReviewParams] = []
    user_id: Optional[Union[int, str]] = None


class RecommendationParams(BaseModel):
    movie: MovieDetailsParams
    candidates: list[MovieParams]
    reviews: list[ReviewParams] = []


class RateParams(BaseModel):
    user_id: Union[int, str]
    movie_id: int = Field(ge=0)
    rating: float = Field(ge=0.0, le=10.0)
    review: Optional[str] = None


@app.on_event("startup")
@timed
async def startup_event():
    settings = load_settings()
    app.state.settings = settings
    if settings.postgres_uri:
        app.state.pool = await asyncpg.create_pool(settings.postgres_uri)
        app.state.store = PostgresStore(app.state.pool)
    else:
        logger.warning("POSTGRES_URI not set, ratings are kept in memory")
        app.state.store = InMemoryStore()


@app.on_event("shutdown")
async def shutdown_event():
    pool = getattr(app.state, "pool", None)
    if pool is not None:
        await pool.close()


def _settings(request: Request):
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()


@app.post("/score")
@timed
async def score_movie(request: Request, body: ScoreParams) -> JSONResponse:
    settings = _settings(request)
    score = await calculate_movie_score(
        body.movie.to_movie(),
        [review.to_review() for review in body.reviews],
        body.user_id,
        store=request.app.state.store,
        neighborhood_size=settings.neighborhood_size,
        timeout=settings.store_timeout,
    )
    return JSONResponse(score.as_json())


@app.post("/recommendations")
@timed
async def recommendations(request: Request, body: RecommendationParams) -> JSONResponse:
    candidates = [candidate.to_movie() for candidate in body.candidates]
    ranked = enhance_recommendations(
        body.movie.to_movie(),
        candidates,
        [review.to_review() for review in body.reviews],
    )
    id_2_params = {id(movie): params for movie, params in zip(candidates, body.candidates)}
    return JSONResponse([id_2_params[id(movie)].model_dump() for movie in ranked])


@app.post("/rate_movie")
@timed
async def rate_movie(request: Request, bg_tasks: BackgroundTasks, body: RateParams) -> JSONResponse:
    store = request.app.state.store
    rating_obj = Rating(
        user_id=body.user_id,
        movie_id=body.movie_id,
        rating=body.rating,
        review=body.review,
        timestamp=datetime.now(),
    )
    try:
        await store.upsert_rating(rating_obj)
        logger.info(f"upserted rating of user {body.user_id} - movie {body.movie_id}")
    except Exception as exc:
        logger.error(f"failed to upsert rating {rating_obj}: {exc}")
        return JSONResponse({"error": "unknown internal exception"}, status_code=500)

    bg_tasks.add_task(background_recompute, store, body.user_id, body.movie_id)
    return JSONResponse({"status": "ok"}, status_code=200)


@app.get("/health")
async def health(request: Request) -> JSONResponse:
    store = getattr(request.app.state, "store", None)
    return JSONResponse({"status": "ok", "store": type(store).__name__})
