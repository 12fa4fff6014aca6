import asyncio

from moviescore.db.memory import InMemoryStore
from moviescore.ml.background import background_recompute, compute_ml_score
from moviescore.models import Rating, UserPreferences


def test_compute_ml_score_base():
    assert compute_ml_score([]) == 0.5


def test_compute_ml_score_history_and_preferences():
    ratings = [Rating("u", 1, 10.0), Rating("u", 2, 6.0)]
    # 0.5 + 0.8 * 0.3
    assert abs(compute_ml_score(ratings) - 0.74) < 1e-9
    preferences = UserPreferences("u", favorite_genres=[28])
    assert abs(compute_ml_score(ratings, preferences) - 0.84) < 1e-9


def test_compute_ml_score_empty_preferences_no_bonus():
    assert compute_ml_score([], UserPreferences("u", favorite_genres=[])) == 0.5


def test_compute_ml_score_is_clamped():
    ratings = [Rating("u", 1, 10.0)]
    preferences = UserPreferences("u", favorite_genres=[1, 2])
    assert abs(compute_ml_score(ratings, preferences) - 0.9) < 1e-9
    assert compute_ml_score([Rating("u", 1, 50.0)], preferences) == 1.0


def test_background_recompute_stores_score():
    store = InMemoryStore([Rating("u", 1, 10.0)], preferences=[UserPreferences("u", [12])])
    asyncio.run(background_recompute(store, "u", 1))
    assert abs(store.ml_scores[("u", 1)] - 0.9) < 1e-9


class BrokenStore(InMemoryStore):
    async def get_user_preferences(self, user_id):
        raise ConnectionError("database is down")


def test_background_recompute_swallows_errors():
    store = BrokenStore([Rating("u", 1, 10.0)])
    asyncio.run(background_recompute(store, "u", 1))
    assert store.ml_scores == {}
