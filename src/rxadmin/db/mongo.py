"""MongoDB client for the API process."""

import logging
from functools import lru_cache

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_client() -> MongoClient:
    """Get the cached, pooled MongoDB client.

    The client connects lazily; the first query surfaces connection errors.
    """
    return MongoClient(
        settings.mongodb_uri,
        maxPoolSize=settings.mongodb_max_pool_size,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        socketTimeoutMS=settings.mongodb_socket_timeout_ms,
        tz_aware=True,
    )


def get_database() -> Database:
    """Return the application database."""
    return get_client()[settings.mongodb_db_name]


UNIQUE_INDEXES: dict[str, list[list[tuple[str, int]]]] = {
    "users": [[("email", ASCENDING)]],
    "distributors": [[("email", ASCENDING)]],
    "districts": [[("code", ASCENDING)]],
    "cities": [[("name", ASCENDING)]],
    "products": [[("sku", ASCENDING)]],
    "patients": [[("mrn", ASCENDING)]],
    "team_products": [[("team_id", ASCENDING), ("product_id", ASCENDING)]],
    "district_products": [[("district_id", ASCENDING), ("product_id", ASCENDING)]],
}

LOOKUP_INDEXES: dict[str, list[list[tuple[str, int]]]] = {
    "teams": [[("district_id", ASCENDING), ("status", ASCENDING)]],
    "cities": [[("status", ASCENDING)], [("distributor_channel", ASCENDING)]],
    "distributors": [[("city_id", ASCENDING)], [("status", ASCENDING)]],
    "orders": [[("prescription_id", ASCENDING)], [("doctor_info.doctor_id", ASCENDING)]],
    "prescriptions": [[("patient_id", ASCENDING)], [("doctor_id", ASCENDING)]],
}


def ensure_indexes(db: Database | None = None) -> None:
    """Create the uniqueness and lookup indexes the collections rely on."""
    database = db if db is not None else get_database()
    for collection, specs in UNIQUE_INDEXES.items():
        for keys in specs:
            database[collection].create_index(keys, unique=True)
    for collection, specs in LOOKUP_INDEXES.items():
        for keys in specs:
            database[collection].create_index(keys)
    logger.info("MongoDB indexes ensured on '%s'", database.name)


def ping_database() -> bool:
    """Check connectivity with a lightweight server command."""
    try:
        get_database().command("ping")
        return True
    except Exception as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False
