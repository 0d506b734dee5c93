from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from bson.errors import InvalidId

from api_movies.movies_functions import (
    ValidationError,
    build_category_document,
    build_list_links,
    build_movie_document,
    build_search_query,
    order_by_reference,
    parse_limit_param,
    parse_object_id,
    parse_page_param,
    parse_rating,
    parse_release_date,
    serialize_document,
    total_pages,
)

BASE_URL = "http://localhost/movies"


class TestBuildSearchQuery:
    def test_no_parameters_gives_empty_filter(self):
        assert build_search_query() == {}
        assert build_search_query("", "") == {}

    def test_title_only(self):
        assert build_search_query(title="abc") == {"name": {"$regex": "abc", "$options": "i"}}

    def test_description_only(self):
        assert build_search_query(description="dream") == {"description": {"$regex": "dream", "$options": "i"}}

    def test_both_parameters_are_combined_with_and(self):
        assert build_search_query("abc", "dream") == {
            "$and": [
                {"name": {"$regex": "abc", "$options": "i"}},
                {"description": {"$regex": "dream", "$options": "i"}},
            ]
        }

    def test_regex_characters_are_escaped(self):
        assert build_search_query(title="a.b*") == {"name": {"$regex": r"a\.b\*", "$options": "i"}}


class TestPaginationParams:
    @pytest.mark.parametrize("raw, expected", [(None, 1), ("3", 3), ("0", 1), ("-2", 1), ("two", 1)])
    def test_page(self, raw, expected):
        assert parse_page_param(raw) == expected

    @pytest.mark.parametrize("raw, expected", [(None, 10), ("25", 25), ("0", 10), ("x", 10), ("500", 500)])
    def test_limit(self, raw, expected):
        assert parse_limit_param(raw, 10) == expected

    def test_limit_is_capped_only_when_configured(self):
        assert parse_limit_param("500", 10, None) == 500
        assert parse_limit_param("500", 10, 100) == 100

    @pytest.mark.parametrize("count, limit, expected", [(0, 10, 0), (10, 10, 1), (25, 10, 3), (1, 10, 1)])
    def test_total_pages(self, count, limit, expected):
        assert total_pages(count, limit) == expected


class TestBuildListLinks:
    def test_middle_page_has_next_and_prev(self):
        links = build_list_links(BASE_URL, 2, 10, 25)

        assert links == {
            "self": {"href": f"{BASE_URL}?page=2&limit=10"},
            "next": {"href": f"{BASE_URL}?page=3&limit=10"},
            "prev": {"href": f"{BASE_URL}?page=1&limit=10"},
            "allMovies": {"href": BASE_URL},
        }

    def test_exact_last_page_has_no_next(self):
        links = build_list_links(BASE_URL, 2, 10, 20)

        assert "next" not in links
        assert "prev" in links

    def test_empty_filters_are_not_repeated(self):
        links = build_list_links(BASE_URL, 1, 10, 0, {"title": "a b", "description": None})

        assert links["self"]["href"] == f"{BASE_URL}?title=a+b&page=1&limit=10"


class TestParsers:
    def test_parse_object_id(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid
        assert parse_object_id(oid) is oid

    @pytest.mark.parametrize("value", ["abc", None, 12, "z" * 24])
    def test_parse_object_id_rejects_malformed(self, value):
        with pytest.raises(InvalidId):
            parse_object_id(value)

    @pytest.mark.parametrize(
        "value",
        [
            "2010-07-16",
            "2010-07-16T22:15:00",
            "2010-07-16T00:00:00.000Z",
            "2010-07-17T01:30:00+02:00",
            datetime(2010, 7, 16, 8, 0),
            datetime(2010, 7, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5))),
        ],
    )
    def test_parse_release_date(self, value):
        assert parse_release_date(value) == datetime(2010, 7, 16)

    @pytest.mark.parametrize("value", ["16/07/2010", "", 20100716, None])
    def test_parse_release_date_rejects_garbage(self, value):
        assert parse_release_date(value) is None

    @pytest.mark.parametrize("value, expected", [(4, 4), (4.5, 4.5), ("3", 3), ("2.5", 2.5)])
    def test_parse_rating(self, value, expected):
        assert parse_rating(value) == expected

    @pytest.mark.parametrize("value", [True, "nan", "five", [3]])
    def test_parse_rating_rejects_non_numbers(self, value):
        assert parse_rating(value) is None


class TestBuildMovieDocument:
    def test_valid_movie(self):
        category = ObjectId()

        document = build_movie_document(
            {
                "name": "Inception",
                "description": "Dreams",
                "releaseDate": "2010-07-16",
                "rating": 5,
                "categories": [str(category)],
            }
        )

        assert document == {
            "name": "Inception",
            "description": "Dreams",
            "releaseDate": datetime(2010, 7, 16),
            "rating": 5,
            "categories": [category],
        }

    def test_rating_bounds_are_inclusive(self):
        base = {"name": "A", "description": "B", "releaseDate": "2000-01-01"}

        assert build_movie_document({**base, "rating": 0})["rating"] == 0
        assert build_movie_document({**base, "rating": 5})["rating"] == 5

    def test_all_errors_are_reported(self):
        with pytest.raises(ValidationError) as excinfo:
            build_movie_document({"name": 42, "releaseDate": "yesterday", "rating": 6})

        assert str(excinfo.value) == (
            "Movie validation failed: name must be a string, description is required, "
            "releaseDate must be a valid date, rating must be between 0 and 5"
        )
        assert len(excinfo.value.errors) == 4

    def test_categories_must_be_a_list(self):
        with pytest.raises(ValidationError, match="categories must be a list"):
            build_movie_document(
                {"name": "A", "description": "B", "releaseDate": "2000-01-01", "categories": "drama"}
            )

    def test_categories_ignored_when_excluded(self):
        document = build_movie_document(
            {"name": "A", "description": "B", "releaseDate": "2000-01-01", "categories": ["bad"]},
            include_categories=False,
        )

        assert "categories" not in document

    def test_body_must_be_an_object(self):
        with pytest.raises(ValidationError):
            build_movie_document(None)


def test_build_category_document():
    assert build_category_document({"name": "Drama"}) == {"name": "Drama"}
    with pytest.raises(ValidationError):
        build_category_document({"name": ""})


def test_serialize_document_converts_bson_types():
    movie_id = ObjectId()
    category_id = ObjectId()

    serialized = serialize_document(
        {
            "_id": movie_id,
            "name": "Inception",
            "releaseDate": datetime(2010, 7, 16),
            "categories": [category_id],
        }
    )

    assert serialized == {
        "_id": str(movie_id),
        "name": "Inception",
        "releaseDate": "2010-07-16",
        "categories": [str(category_id)],
    }
    assert serialize_document(None) == {}


def test_order_by_reference_skips_missing_documents():
    first, second, missing = ObjectId(), ObjectId(), ObjectId()
    documents = [{"_id": first, "name": "first"}, {"_id": second, "name": "second"}]

    ordered = order_by_reference([second, missing, first], documents)

    assert [doc["name"] for doc in ordered] == ["second", "first"]


def test_parse_release_date_uses_the_utc_day_for_offsets():
    assert parse_release_date("2010-07-16T23:30:00-05:00") == datetime(2010, 7, 17)
    assert parse_release_date("2010-07-16T00:30:00+02:00") == datetime(2010, 7, 15)
