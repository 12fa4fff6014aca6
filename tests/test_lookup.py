from moviescore.lookup import enhance_recommendations, similarity_scores
from moviescore.models import Genre, Movie, MovieDetails, Review

CURRENT = MovieDetails(
    id=1,
    title="current",
    vote_average=8.0,
    popularity=100.0,
    release_date="2010-01-01",
    genres=[Genre(28, "Action"), Genre(878, "Science Fiction")],
)


def _candidate(movie_id, genre_ids, vote_average=8.0, popularity=100.0, release_date="2010-01-01"):
    return Movie(
        id=movie_id,
        title=f"movie {movie_id}",
        vote_average=vote_average,
        popularity=popularity,
        release_date=release_date,
        genre_ids=list(genre_ids),
    )


def test_enhance_recommendations_sorts_by_similarity():
    far = _candidate(2, [18], vote_average=3.0, popularity=5.0, release_date="1980-01-01")
    close = _candidate(3, [28, 878])
    middle = _candidate(4, [28], vote_average=7.0)
    result = enhance_recommendations(CURRENT, [far, close, middle])
    assert [movie.id for movie in result] == [3, 4, 2]


def test_enhance_recommendations_is_permutation():
    candidates = [_candidate(i, [i % 3 + 27], popularity=float(i)) for i in range(2, 30)]
    result = enhance_recommendations(CURRENT, candidates)
    assert len(result) == len(candidates)
    assert sorted(movie.id for movie in result) == sorted(movie.id for movie in candidates)
    scores = similarity_scores(CURRENT, result)
    assert all(scores[i] >= scores[i + 1] for i in range(len(scores) - 1))


def test_enhance_recommendations_stable_on_ties():
    candidates = [_candidate(i, [28]) for i in range(10, 16)]
    result = enhance_recommendations(CURRENT, candidates)
    assert [movie.id for movie in result] == [10, 11, 12, 13, 14, 15]


def test_enhance_recommendations_ignores_reviews():
    candidates = [_candidate(2, [18]), _candidate(3, [28])]
    review = Review(id="r", movie_id=1, user_id="u", rating=1, content="terrible")
    assert enhance_recommendations(CURRENT, candidates, [review]) == enhance_recommendations(
        CURRENT, candidates
    )


def test_enhance_recommendations_empty():
    assert enhance_recommendations(CURRENT, []) == []
