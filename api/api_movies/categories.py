import logging

from bson.errors import InvalidId
from flask import Blueprint, jsonify, request
from pymongo.errors import PyMongoError

from api_movies.database import categories_collection, movies_collection
from api_movies.movies_functions import (
    ValidationError,
    build_category_document,
    order_by_reference,
    parse_object_id,
    serialize_document,
)

logger = logging.getLogger(__name__)

categories_bp = Blueprint("categories", __name__, url_prefix="/categories")


@categories_bp.route("", methods=["POST"])
def create_category():
    """
    Handle POST requests that insert a category.

    Returns:
        Response: Flask response with the created category and status code.
    """
    try:
        payload = build_category_document(request.get_json(silent=True))
    except ValidationError as e:
        logger.warning(str(e))
        return jsonify({"error": str(e)}), 400

    try:
        collection = categories_collection()
        result = collection.insert_one(payload)
        document = collection.find_one({"_id": result.inserted_id})
    except PyMongoError as e:
        logger.error(f"Failed to create category: {str(e)}")
        return jsonify({"error": str(e)}), 500

    logger.info(f"Created category {result.inserted_id}")
    return jsonify(serialize_document(document)), 201


# The identifier is a movie id: this returns the categories of that movie.
@categories_bp.route("/<movie_id>", methods=["GET"])
def get_movie_categories(movie_id: str):
    """
    Handle GET requests for the categories attached to a movie.

    Args:
        movie_id (str): Movie identifier from the path segment.

    Returns:
        Response: Flask response with the resolved categories or error payload.
    """
    try:
        movie = movies_collection().find_one({"_id": parse_object_id(movie_id)})
        if not movie:
            return jsonify({"error": "Movie not found"}), 404

        reference_ids = movie.get("categories") or []
        documents = list(categories_collection().find({"_id": {"$in": reference_ids}}))
    except (InvalidId, PyMongoError) as e:
        logger.error(f"Failed to load categories of movie {movie_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

    categories = order_by_reference(reference_ids, documents)
    return jsonify([serialize_document(doc) for doc in categories])


@categories_bp.route("/<category_id>/movies", methods=["GET"])
def get_category_movies(category_id: str):
    """
    Handle GET requests for every movie tagged with a category.

    Args:
        category_id (str): Category identifier from the path segment.

    Returns:
        Response: Flask response with the matching movies.
    """
    try:
        documents = list(movies_collection().find({"categories": parse_object_id(category_id)}))
    except (InvalidId, PyMongoError) as e:
        logger.error(f"Failed to list movies of category {category_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

    return jsonify([serialize_document(doc) for doc in documents])
