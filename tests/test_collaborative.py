import asyncio

from moviescore.collaborative import (estimate_rating, find_similar_users,
                                      rank_similar_users)
from moviescore.db.memory import InMemoryStore
from moviescore.models import Movie, Rating

MOVIE = Movie(id=100, title="target", vote_average=6.5, popularity=20.0)


def _ratings(user_id, movie_ratings: dict[int, float]) -> list[Rating]:
    return [Rating(user_id, movie_id, rating) for movie_id, rating in movie_ratings.items()]


def test_rank_similar_users_orders_by_accumulated_similarity():
    target = _ratings("me", {1: 8, 2: 6})
    others = [
        *_ratings("close", {1: 8, 2: 6}),
        *_ratings("far", {1: 0, 2: 1}),
        *_ratings("one_shared", {1: 8, 3: 5}),
    ]
    assert rank_similar_users(target, others) == ["close", "one_shared", "far"]


def test_rank_similar_users_breaks_ties_by_user_id():
    target = _ratings("me", {1: 8})
    others = [*_ratings("b", {1: 8}), *_ratings("c", {1: 8}), *_ratings("a", {1: 8})]
    assert rank_similar_users(target, others) == ["a", "b", "c"]


def test_rank_similar_users_ignores_unshared_movies():
    target = _ratings("me", {1: 8})
    others = _ratings("other", {2: 8, 3: 8})
    assert rank_similar_users(target, others) == []


def test_neighborhood_size_never_exceeds_limit():
    target = _ratings("me", {1: 8, 2: 5})
    others = [r for i in range(20) for r in _ratings(f"user{i:02d}", {1: 8, 2: 5})]
    store = InMemoryStore([*target, *others])
    similar = asyncio.run(find_similar_users(store, "me"))
    assert len(similar) == 5
    assert "me" not in similar
    assert len(asyncio.run(find_similar_users(store, "me", neighborhood_size=3))) == 3


def test_find_similar_users_without_history():
    store = InMemoryStore(_ratings("other", {1: 5}))
    assert asyncio.run(find_similar_users(store, "me")) == []


def test_estimate_rating_mean_of_neighbourhood():
    store = InMemoryStore(
        [
            *_ratings("me", {1: 8}),
            *_ratings("a", {1: 8, MOVIE.id: 9}),
            *_ratings("b", {1: 7, MOVIE.id: 7}),
        ]
    )
    assert asyncio.run(estimate_rating(store, MOVIE, "me")) == 8.0


def test_estimate_rating_falls_back_to_vote_average():
    store = InMemoryStore([*_ratings("me", {1: 8}), *_ratings("a", {1: 8, 2: 3})])
    assert asyncio.run(estimate_rating(store, MOVIE, "me")) == MOVIE.vote_average


def test_estimate_rating_unknown_user():
    store = InMemoryStore(_ratings("a", {MOVIE.id: 2}))
    assert asyncio.run(estimate_rating(store, MOVIE, "nobody")) == MOVIE.vote_average


class SlowStore(InMemoryStore):
    async def get_ratings_by_user(self, user_id):
        await asyncio.sleep(1)
        return await super().get_ratings_by_user(user_id)


def test_estimate_rating_timeout_is_absent():
    store = SlowStore([*_ratings("me", {1: 8}), *_ratings("a", {1: 8, MOVIE.id: 1})])
    assert asyncio.run(estimate_rating(store, MOVIE, "me", timeout=0.01)) == MOVIE.vote_average
