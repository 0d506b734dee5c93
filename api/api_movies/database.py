import logging

from flask import Flask, current_app
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

MOVIES_COLLECTION = "movies"
CATEGORIES_COLLECTION = "categories"


def init_db(app: Flask, client: MongoClient | None = None):
    """
    Open the MongoDB connection for the application and check that it answers.

    Args:
        app (Flask): Application receiving the connection.
        client (MongoClient | None): Client to use instead of building one from the config.

    Returns:
        Database: Handle on the configured database.

    Raises:
        PyMongoError: When the server does not answer the readiness ping.
    """
    if client is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config["MONGO_TIMEOUT_MS"],
        )

    db = client[app.config["MONGO_DB_NAME"]]
    ping(db)
    logger.info(f"Connected to MongoDB database '{app.config['MONGO_DB_NAME']}'")

    app.extensions["mongo_client"] = client
    app.extensions["mongo_db"] = db
    return db


def ping(db):
    """
    Run the ``ping`` command against the database.

    Args:
        db (Database): Database handle.

    Returns:
        bool: True when the server answered.
    """
    result = db.command("ping")
    return bool(result.get("ok"))


def close_db(app: Flask):
    """
    Release the MongoDB connection held by the application.

    Args:
        app (Flask): Application owning the connection.
    """
    client = app.extensions.pop("mongo_client", None)
    app.extensions.pop("mongo_db", None)
    if client is None:
        return
    try:
        client.close()
        logger.info("MongoDB connection closed")
    except PyMongoError as e:
        logger.error(f"Error closing MongoDB connection: {str(e)}")


def get_db():
    """Return the database bound to the current application."""
    return current_app.extensions["mongo_db"]


def movies_collection() -> Collection:
    return get_db()[MOVIES_COLLECTION]


def categories_collection() -> Collection:
    return get_db()[CATEGORIES_COLLECTION]
