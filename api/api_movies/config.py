import os

from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "api_movies")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", 5000))

DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", 10))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT")) if os.getenv("MAX_PAGE_LIMIT") else None

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", 3000))
API_DEBUG = os.getenv("API_DEBUG", "false").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_config(overrides: dict | None = None):
    """
    Collect the settings used by the application factory.

    Args:
        overrides (dict | None): Values replacing the environment defaults.

    Returns:
        dict: Settings keyed by their environment variable name.
    """
    settings = {
        "MONGO_URI": MONGO_URI,
        "MONGO_DB_NAME": MONGO_DB_NAME,
        "MONGO_TIMEOUT_MS": MONGO_TIMEOUT_MS,
        "DEFAULT_PAGE_LIMIT": DEFAULT_PAGE_LIMIT,
        "MAX_PAGE_LIMIT": MAX_PAGE_LIMIT,
        "API_HOST": API_HOST,
        "API_PORT": API_PORT,
        "API_DEBUG": API_DEBUG,
        "LOG_LEVEL": LOG_LEVEL,
    }
    if overrides:
        settings.update(overrides)
    return settings
