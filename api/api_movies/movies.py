import logging

from bson.errors import InvalidId
from flask import Blueprint, current_app, jsonify, request, url_for
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from api_movies.database import movies_collection
from api_movies.movies_functions import (
    ValidationError,
    build_list_links,
    build_list_payload,
    build_movie_document,
    build_movie_envelope,
    build_search_query,
    parse_limit_param,
    parse_object_id,
    parse_page_param,
    serialize_document,
)

logger = logging.getLogger(__name__)

movies_bp = Blueprint("movies", __name__, url_prefix="/movies")


def collection_url():
    return url_for("movies.list_movies", _external=True)


@movies_bp.route("", methods=["GET"])
def list_movies():
    """
    Handle GET requests for the paginated movie listing.

    Query parameters ``title`` and ``description`` filter by case-insensitive
    substring; ``page`` and ``limit`` select the page.

    Returns:
        Response: Flask response with the HAL page payload.
    """
    title = request.args.get("title")
    description = request.args.get("description")
    page = parse_page_param(request.args.get("page"))
    limit = parse_limit_param(
        request.args.get("limit"),
        current_app.config["DEFAULT_PAGE_LIMIT"],
        current_app.config["MAX_PAGE_LIMIT"],
    )

    query = build_search_query(title, description)
    skip = (page - 1) * limit

    try:
        collection = movies_collection()
        documents = list(collection.find(query).sort("_id", ASCENDING).skip(skip).limit(limit))
        count = collection.count_documents(query)
    except PyMongoError as e:
        logger.error(f"Failed to list movies: {str(e)}")
        return jsonify({"error": str(e)}), 500

    filters = {"title": title, "description": description}
    links = build_list_links(collection_url(), page, limit, count, filters)
    return jsonify(build_list_payload(documents, count, page, limit, links))


@movies_bp.route("/<movie_id>", methods=["GET"])
def get_movie(movie_id: str):
    """
    Handle GET requests for a single movie.

    Args:
        movie_id (str): Identifier from the path segment.

    Returns:
        Response: Flask response with the HAL envelope and status code.
    """
    try:
        document = movies_collection().find_one({"_id": parse_object_id(movie_id)})
    except (InvalidId, PyMongoError) as e:
        logger.error(f"Failed to fetch movie {movie_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

    if not document:
        return jsonify({"error": "Movie not found"}), 404

    return jsonify(build_movie_envelope(collection_url(), document))


@movies_bp.route("", methods=["POST"])
def create_movie():
    """
    Handle POST requests that insert a movie.

    Returns:
        Response: Flask response with the created movie and status code.
    """
    try:
        payload = build_movie_document(request.get_json(silent=True))
    except ValidationError as e:
        logger.warning(str(e))
        return jsonify({"error": str(e)}), 400

    try:
        collection = movies_collection()
        result = collection.insert_one(payload)
        document = collection.find_one({"_id": result.inserted_id})
    except PyMongoError as e:
        logger.error(f"Failed to create movie: {str(e)}")
        return jsonify({"error": str(e)}), 500

    logger.info(f"Created movie {result.inserted_id}")
    return jsonify(build_movie_envelope(collection_url(), document)), 201


@movies_bp.route("/<movie_id>", methods=["PUT"])
def update_movie(movie_id: str):
    """
    Handle PUT requests that replace a movie's fields.

    ``name``, ``description``, ``releaseDate`` and ``rating`` are overwritten
    with what the body holds, absent ones included. ``categories`` is kept.

    Args:
        movie_id (str): Identifier from the path segment.

    Returns:
        Response: Flask response with the updated movie and status code.
    """
    try:
        collection = movies_collection()
        object_id = parse_object_id(movie_id)
        existing = collection.find_one({"_id": object_id})
        if not existing:
            return jsonify({"error": "Movie not found"}), 404

        replacement = build_movie_document(request.get_json(silent=True), include_categories=False)
        replacement["categories"] = existing.get("categories", [])
        result = collection.replace_one({"_id": object_id}, replacement)
        if result.matched_count == 0:
            return jsonify({"error": "Movie not found"}), 404
    except ValidationError as e:
        logger.warning(str(e))
        return jsonify({"error": str(e)}), 422
    except (InvalidId, PyMongoError) as e:
        logger.error(f"Failed to update movie {movie_id}: {str(e)}")
        return jsonify({"error": str(e)}), 422

    logger.info(f"Updated movie {movie_id}")
    return jsonify(serialize_document({"_id": object_id, **replacement}))


@movies_bp.route("/<movie_id>", methods=["DELETE"])
def delete_movie(movie_id: str):
    """
    Handle DELETE requests that remove a movie.

    Args:
        movie_id (str): Identifier from the path segment.

    Returns:
        Response: Flask response with delete status payload.
    """
    try:
        collection = movies_collection()
        object_id = parse_object_id(movie_id)
        movie = collection.find_one({"_id": object_id})
        if not movie:
            return jsonify({"error": "Movie not found"}), 404
        collection.delete_one({"_id": object_id})
    except (InvalidId, PyMongoError) as e:
        logger.error(f"Failed to delete movie {movie_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

    logger.info(f"Deleted movie {movie_id}")
    return jsonify({"message": "Deleted Movie"})
