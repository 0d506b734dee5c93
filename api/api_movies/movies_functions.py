import math
import re
from datetime import date, datetime, timezone
from urllib.parse import urlencode

from bson import ObjectId
from bson.errors import InvalidId

NAME_MAX_LENGTH = 128
DESCRIPTION_MAX_LENGTH = 2048
RATING_MIN = 0
RATING_MAX = 5


class ValidationError(Exception):
    """Raised when a submitted movie or category breaks the field rules."""

    def __init__(self, model: str, errors: list[str]):
        self.model = model
        self.errors = list(errors)
        super().__init__(f"{model} validation failed: {', '.join(self.errors)}")


def safe_int(value, default=0):
    """
    Convert arbitrary values into integers while guarding against failures.

    Args:
        value (Any): Raw value to convert.
        default (int): Fallback value when parsing is unsuccessful.

    Returns:
        int: Parsed integer or the provided default.
    """
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def parse_page_param(raw_value: object, default_page: int = 1):
    """
    Sanitize the 1-based page query parameter.

    Args:
        raw_value (Any): Page value provided by the client.
        default_page (int): Fallback page when parsing fails.

    Returns:
        int: Page number, at least 1.
    """
    page = safe_int(raw_value, default_page)
    if page <= 0:
        return default_page
    return page


def parse_limit_param(raw_value: object, default_limit: int, max_limit: int | None = None):
    """
    Sanitize limit query parameters, clamping to the configured cap when one is set.

    Args:
        raw_value (Any): Limit value provided by the client.
        default_limit (int): Fallback limit when parsing fails.
        max_limit (int | None): Maximum allowed limit, no cap when None.

    Returns:
        int: Validated limit value.
    """
    limit = safe_int(raw_value, default_limit)
    if limit <= 0:
        return default_limit
    if max_limit is None:
        return limit
    return min(limit, max_limit)


def parse_object_id(value: object):
    """
    Turn a path or body identifier into an ObjectId.

    Args:
        value (Any): Identifier as sent by the client.

    Returns:
        ObjectId: Parsed identifier.

    Raises:
        InvalidId: When the value is not a 24 character hex string.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidId(f'Cast to ObjectId failed for value "{value}"')
    return ObjectId(value)


def build_search_query(title: str | None = None, description: str | None = None):
    """
    Build the MongoDB filter used by the movie listing.

    Each supplied parameter adds one case-insensitive substring clause; the
    clauses are combined with ``$and``.

    Args:
        title (str | None): Text searched in the movie name.
        description (str | None): Text searched in the movie description.

    Returns:
        dict: MongoDB filter, empty when no parameter is supplied.
    """
    optional_clauses = [
        ("name", title),
        ("description", description),
    ]

    clauses = []
    for field, text in optional_clauses:
        if not text:
            continue
        clauses.append({field: {"$regex": re.escape(text), "$options": "i"}})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def parse_release_date(value: object):
    """
    Parse a release date into the datetime stored in MongoDB.

    Args:
        value (Any): ISO 8601 date or datetime string, or a date object.
            Datetimes carrying an offset are converted to UTC first.

    Returns:
        datetime | None: Midnight of the release day, None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return datetime(parsed.year, parsed.month, parsed.day)


def parse_rating(value: object):
    """
    Coerce a rating into a number.

    Args:
        value (Any): Number or numeric string.

    Returns:
        int | float | None: Parsed number, None when not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if number.is_integer():
            number = int(number)
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def check_text_field(errors: list[str], data: dict, field: str, max_length: int | None = None):
    """
    Validate a required text field and append the problems found.

    Args:
        errors (list[str]): Messages collected so far.
        data (dict): Submitted body.
        field (str): Field name.
        max_length (int | None): Maximum number of characters.

    Returns:
        str | None: The value when valid.
    """
    value = data.get(field)
    if value is None or value == "":
        errors.append(f"{field} is required")
        return None
    if not isinstance(value, str):
        errors.append(f"{field} must be a string")
        return None
    if max_length is not None and len(value) > max_length:
        errors.append(f"{field} exceeds the maximum allowed length ({max_length})")
        return None
    return value


def build_movie_document(data: object, include_categories: bool = True):
    """
    Validate a submitted movie and build the document to persist.

    Args:
        data (Any): Decoded JSON body.
        include_categories (bool): Whether ``categories`` is read from the body.

    Returns:
        dict: Document ready for MongoDB. ``rating`` is left out when absent.

    Raises:
        ValidationError: When any field breaks the movie rules.
    """
    if not isinstance(data, dict):
        raise ValidationError("Movie", ["request body must be a JSON object"])

    errors = []
    name = check_text_field(errors, data, "name", NAME_MAX_LENGTH)
    description = check_text_field(errors, data, "description", DESCRIPTION_MAX_LENGTH)

    raw_release = data.get("releaseDate")
    release_date = None
    if raw_release is None or raw_release == "":
        errors.append("releaseDate is required")
    else:
        release_date = parse_release_date(raw_release)
        if release_date is None:
            errors.append("releaseDate must be a valid date")

    raw_rating = data.get("rating")
    rating = None
    if raw_rating is not None and raw_rating != "":
        rating = parse_rating(raw_rating)
        if rating is None:
            errors.append("rating must be a number")
        elif rating < RATING_MIN or rating > RATING_MAX:
            errors.append(f"rating must be between {RATING_MIN} and {RATING_MAX}")

    categories = []
    if include_categories:
        raw_categories = data.get("categories")
        if raw_categories is not None:
            if not isinstance(raw_categories, list):
                errors.append("categories must be a list of category ids")
            else:
                try:
                    categories = [parse_object_id(item) for item in raw_categories]
                except InvalidId:
                    errors.append("categories must contain valid category ids")

    if errors:
        raise ValidationError("Movie", errors)

    document = {
        "name": name,
        "description": description,
        "releaseDate": release_date,
    }
    if rating is not None:
        document["rating"] = rating
    if include_categories:
        document["categories"] = categories
    return document


def build_category_document(data: object):
    """
    Validate a submitted category and build the document to persist.

    Args:
        data (Any): Decoded JSON body.

    Returns:
        dict: Document ready for MongoDB.

    Raises:
        ValidationError: When the name is missing or not a string.
    """
    if not isinstance(data, dict):
        raise ValidationError("Category", ["request body must be a JSON object"])

    errors = []
    name = check_text_field(errors, data, "name")
    if name is not None and not name.strip():
        errors.append("name is required")
    if errors:
        raise ValidationError("Category", errors)
    return {"name": name}


def serialize_value(value: object):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(doc: dict | None):
    """
    Convert a MongoDB document into an API-friendly dictionary.

    Args:
        doc (dict | None): MongoDB document.

    Returns:
        dict: Serializable representation with string identifiers and ISO dates.
    """
    if not doc:
        return {}

    serialized = {}
    for key, value in doc.items():
        serialized[key] = serialize_value(value)
    return serialized


def order_by_reference(reference_ids: list, documents: list[dict]):
    """
    Arrange fetched documents in the order of a reference list.

    Identifiers without a matching document are skipped.

    Args:
        reference_ids (list): Identifiers held on the referencing document.
        documents (list[dict]): Documents fetched for those identifiers.

    Returns:
        list[dict]: Documents following the reference order.
    """
    lookup = {doc["_id"]: doc for doc in documents}
    return [lookup[ref] for ref in reference_ids if ref in lookup]


def total_pages(count: int, limit: int):
    return math.ceil(count / limit) if limit else 0


def build_page_url(base_url: str, page: int, limit: int, filters: dict | None = None):
    """
    Build a listing URL for a given page.

    Args:
        base_url (str): Absolute URL of the movie collection.
        page (int): Page number.
        limit (int): Page size.
        filters (dict | None): Active search parameters.

    Returns:
        str: URL with the query string.
    """
    params = {key: value for key, value in (filters or {}).items() if value}
    params["page"] = page
    params["limit"] = limit
    return f"{base_url}?{urlencode(params)}"


def build_list_links(base_url: str, page: int, limit: int, count: int, filters: dict | None = None):
    """
    Build the HAL ``_links`` object of a movie listing page.

    Args:
        base_url (str): Absolute URL of the movie collection.
        page (int): Current page.
        limit (int): Page size.
        count (int): Number of movies matching the filter.
        filters (dict | None): Active search parameters.

    Returns:
        dict: Links keyed by relation; ``next`` and ``prev`` only when reachable.
    """
    links = {"self": {"href": build_page_url(base_url, page, limit, filters)}}
    if page * limit < count:
        links["next"] = {"href": build_page_url(base_url, page + 1, limit, filters)}
    if page > 1:
        links["prev"] = {"href": build_page_url(base_url, page - 1, limit, filters)}
    links["allMovies"] = {"href": base_url}
    return links


def build_movie_envelope(base_url: str, doc: dict):
    """
    Wrap a single movie in a HAL envelope.

    Args:
        base_url (str): Absolute URL of the movie collection.
        doc (dict): MongoDB movie document.

    Returns:
        dict: Envelope with ``_links`` and ``data``.
    """
    return {
        "_links": {
            "self": {"href": f"{base_url}/{doc['_id']}"},
            "allMovies": {"href": base_url},
        },
        "data": serialize_document(doc),
    }


def build_list_payload(documents: list[dict], count: int, page: int, limit: int, links: dict):
    """
    Prepare the listing payload.

    Args:
        documents (list[dict]): Movies on the current page.
        count (int): Number of movies matching the filter.
        page (int): Current page.
        limit (int): Page size.
        links (dict): HAL links for the page.

    Returns:
        dict: Payload for JSON output.
    """
    return {
        "_links": links,
        "count": count,
        "totalPages": total_pages(count, limit),
        "currentPage": page,
        "data": [serialize_document(doc) for doc in documents],
    }
