from api_movies.movies_functions import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, RATING_MAX, RATING_MIN

ID_PARAMETER = {
    "in": "path",
    "name": "id",
    "required": True,
    "schema": {"type": "string"},
}

ERROR_RESPONSE = {
    "content": {
        "application/json": {
            "schema": {"$ref": "#/components/schemas/Error"},
        }
    }
}


def json_body(schema_ref: str):
    return {
        "required": True,
        "content": {"application/json": {"schema": {"$ref": schema_ref}}},
    }


def json_response(description: str, schema: dict):
    return {
        "description": description,
        "content": {"application/json": {"schema": schema}},
    }


def error_response(description: str):
    return {"description": description, **ERROR_RESPONSE}


def build_openapi_document(server_url: str):
    """
    Describe the HTTP surface as an OpenAPI 3.0 document.

    Args:
        server_url (str): Base URL advertised in ``servers``.

    Returns:
        dict: OpenAPI document.
    """
    movie_ref = {"$ref": "#/components/schemas/Movie"}
    category_ref = {"$ref": "#/components/schemas/Category"}

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Movie Catalog API",
            "version": "1.0.0",
            "description": "A simple API to manage a collection of movies and their categories",
        },
        "servers": [{"url": server_url}],
        "paths": {
            "/movies": {
                "get": {
                    "summary": "Search movies by title or description",
                    "tags": ["Movies"],
                    "parameters": [
                        {"in": "query", "name": "title", "schema": {"type": "string"},
                         "description": "Partial or full title, case-insensitive"},
                        {"in": "query", "name": "description", "schema": {"type": "string"},
                         "description": "Partial or full description, case-insensitive"},
                        {"in": "query", "name": "page", "schema": {"type": "integer", "default": 1}},
                        {"in": "query", "name": "limit", "schema": {"type": "integer", "default": 10}},
                    ],
                    "responses": {
                        "200": json_response("Page of matching movies", {"$ref": "#/components/schemas/MoviePage"}),
                        "500": error_response("Server error"),
                    },
                },
                "post": {
                    "summary": "Create a movie",
                    "tags": ["Movies"],
                    "requestBody": json_body("#/components/schemas/MovieInput"),
                    "responses": {
                        "201": json_response("Movie created", {"$ref": "#/components/schemas/MovieEnvelope"}),
                        "400": error_response("Invalid movie"),
                    },
                },
            },
            "/movies/{id}": {
                "get": {
                    "summary": "Fetch a movie by id",
                    "tags": ["Movies"],
                    "parameters": [ID_PARAMETER],
                    "responses": {
                        "200": json_response("Requested movie", {"$ref": "#/components/schemas/MovieEnvelope"}),
                        "404": error_response("Movie not found"),
                        "500": error_response("Server error"),
                    },
                },
                "put": {
                    "summary": "Replace the fields of a movie",
                    "description": "name, description, releaseDate and rating are all overwritten; categories is kept.",
                    "tags": ["Movies"],
                    "parameters": [ID_PARAMETER],
                    "requestBody": json_body("#/components/schemas/MovieInput"),
                    "responses": {
                        "200": json_response("Movie updated", movie_ref),
                        "404": error_response("Movie not found"),
                        "422": error_response("Movie could not be validated"),
                    },
                },
                "delete": {
                    "summary": "Delete a movie",
                    "tags": ["Movies"],
                    "parameters": [ID_PARAMETER],
                    "responses": {
                        "200": json_response(
                            "Movie deleted",
                            {"type": "object", "properties": {"message": {"type": "string", "example": "Deleted Movie"}}},
                        ),
                        "404": error_response("Movie not found"),
                        "500": error_response("Server error"),
                    },
                },
            },
            "/categories": {
                "post": {
                    "summary": "Create a category",
                    "tags": ["Categories"],
                    "requestBody": json_body("#/components/schemas/CategoryInput"),
                    "responses": {
                        "201": json_response("Category created", category_ref),
                        "400": error_response("Invalid category"),
                    },
                },
            },
            "/categories/{id}": {
                "get": {
                    "summary": "List the categories of a movie",
                    "description": "The path identifier is a movie id.",
                    "tags": ["Categories"],
                    "parameters": [ID_PARAMETER],
                    "responses": {
                        "200": json_response("Categories of the movie", {"type": "array", "items": category_ref}),
                        "404": error_response("Movie not found"),
                        "500": error_response("Server error"),
                    },
                },
            },
            "/categories/{categoryId}/movies": {
                "get": {
                    "summary": "List the movies of a category",
                    "tags": ["Categories"],
                    "parameters": [{**ID_PARAMETER, "name": "categoryId"}],
                    "responses": {
                        "200": json_response("Movies of the category", {"type": "array", "items": movie_ref}),
                        "500": error_response("Server error"),
                    },
                },
            },
            "/health": {
                "get": {
                    "summary": "Check the database connection",
                    "tags": ["Health"],
                    "responses": {
                        "200": {"description": "Service healthy"},
                        "503": {"description": "Database unreachable"},
                    },
                },
            },
        },
        "components": {
            "schemas": {
                "MovieInput": {
                    "type": "object",
                    "required": ["name", "description", "releaseDate"],
                    "properties": {
                        "name": {"type": "string", "maxLength": NAME_MAX_LENGTH, "example": "Inception"},
                        "description": {"type": "string", "maxLength": DESCRIPTION_MAX_LENGTH,
                                        "example": "A thief who steals secrets through dreams"},
                        "releaseDate": {"type": "string", "format": "date", "example": "2010-07-16"},
                        "rating": {"type": "number", "minimum": RATING_MIN, "maximum": RATING_MAX, "example": 5},
                        "categories": {"type": "array", "items": {"type": "string"},
                                       "example": ["5f8d0d55b54764421b7156fc"]},
                    },
                },
                "Movie": {
                    "allOf": [
                        {"type": "object", "properties": {"_id": {"type": "string"}}},
                        {"$ref": "#/components/schemas/MovieInput"},
                    ],
                },
                "MovieEnvelope": {
                    "type": "object",
                    "properties": {
                        "_links": {"$ref": "#/components/schemas/Links"},
                        "data": movie_ref,
                    },
                },
                "MoviePage": {
                    "type": "object",
                    "properties": {
                        "_links": {"$ref": "#/components/schemas/Links"},
                        "count": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                        "currentPage": {"type": "integer"},
                        "data": {"type": "array", "items": movie_ref},
                    },
                },
                "Links": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {"href": {"type": "string"}},
                    },
                },
                "CategoryInput": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {"name": {"type": "string", "example": "Science fiction"}},
                },
                "Category": {
                    "type": "object",
                    "properties": {"_id": {"type": "string"}, "name": {"type": "string"}},
                },
                "Error": {
                    "type": "object",
                    "properties": {"error": {"type": "string"}},
                },
            }
        },
    }
