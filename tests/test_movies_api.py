from datetime import date

import pytest

from cineman.models import Genre, Format, Language
from tests.conftest import make_movie, make_show_time

MOVIES = "/api/v1/movies"


@pytest.fixture
def catalog(db):
    return [
        make_movie(db, "Arrival", release_date=date(2016, 11, 11), running_time=116, rating="8.0",
                   genre=Genre.SCIFI, format=Format.TWO_D, language=Language.ENGLISH),
        make_movie(db, "Baahubali", release_date=date(2015, 7, 10), running_time=159, rating="8.1",
                   genre=Genre.ACTION, format=Format.THREE_D, language=Language.TELUGU),
        make_movie(db, "Coco", release_date=date(2017, 11, 22), running_time=105, rating="8.4",
                   genre=Genre.ANIMATION, format=Format.TWO_D, language=Language.SPANISH),
        make_movie(db, "Dune", release_date=date(2021, 10, 22), running_time=155, rating="8.0",
                   genre=Genre.SCIFI, format=Format.IMAX, language=Language.ENGLISH),
    ]


def search(client, headers, body=None, **params):
    return client.post(f"{MOVIES}/query", headers=headers, json=body or {}, params=params)


def titles(response):
    return [m["title"] for m in response.json()["result"]["movies"]]


def test_query_parameters(client, auth_headers):
    result = client.get(f"{MOVIES}/query", headers=auth_headers).json()["result"]

    assert "SCIFI" in result["genres"]
    assert result["formats"] == ["TWO_D", "THREE_D", "IMAX", "FOUR_DX"]
    assert "TELUGU" in result["languages"]
    assert result["sortBy"] == ["TITLE", "RATING", "RELEASE_DATE", "DURATION"]


def test_catalog_requires_access_token(client):
    assert client.get(f"{MOVIES}/query").status_code == 401


def test_default_search_is_sorted_by_title(client, auth_headers, catalog):
    response = search(client, auth_headers)

    assert response.json()["result"]["totalRecordsFound"] == 4
    assert titles(response) == ["Arrival", "Baahubali", "Coco", "Dune"]


def test_filters_combine(client, auth_headers, catalog):
    response = search(client, auth_headers, {"genre": "SCIFI", "language": "ENGLISH", "format": "IMAX"})

    assert titles(response) == ["Dune"]


def test_title_filter_is_case_insensitive_substring(client, auth_headers, catalog):
    response = search(client, auth_headers, {"title": "aHu"})

    assert titles(response) == ["Baahubali"]


@pytest.mark.parametrize("sort_by, sort_order, expected", [
    ("RELEASE_DATE", "DESCENDING", ["Dune", "Coco", "Arrival", "Baahubali"]),
    ("DURATION", "ASCENDING", ["Coco", "Arrival", "Dune", "Baahubali"]),
    ("TITLE", "DESCENDING", ["Dune", "Coco", "Baahubali", "Arrival"]),
])
def test_sorting(client, auth_headers, catalog, sort_by, sort_order, expected):
    response = search(client, auth_headers, {"sort": {"sortBy": sort_by, "sortOrder": sort_order}})

    assert titles(response) == expected


def test_pagination_keeps_total(client, auth_headers, catalog):
    response = search(client, auth_headers, pageNumber=2, resultPerPage=3)

    assert response.json()["result"]["totalRecordsFound"] == 4
    assert titles(response) == ["Dune"]


def test_unknown_filter_value_is_validation_problem(client, auth_headers):
    response = search(client, auth_headers, {"genre": "OPERA"})

    assert response.status_code == 422
    assert response.json()["status"] == 422


def test_movie_details_include_show_times(client, db, auth_headers, movie):
    later = make_show_time(db, movie, days_ahead=5, seats={"EVENING": 40}, price=80)
    sooner = make_show_time(db, movie, days_ahead=2)

    response = client.get(f"{MOVIES}/{movie.id}", headers=auth_headers)

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["movie"]["movieId"] == str(movie.id)
    assert result["movie"]["title"] == "Interstellar"
    assert result["movie"]["poster"] == movie.poster_url
    assert [s["id"] for s in result["showTimes"]] == [str(sooner.id), str(later.id)]
    assert result["showTimes"][1]["seatsPerTimeSlot"] == {"EVENING": 40}
    assert result["showTimes"][1]["pricePerSeat"] == 80


def test_unknown_movie(client, auth_headers, unknown_id):
    response = client.get(f"{MOVIES}/{unknown_id}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["title"] == "movie.id.notfound"
