from __future__ import annotations

from pymongo import MongoClient
from pymongo.collection import Collection

from core.config import Settings, settings as default_settings


def create_client(config: Settings | None = None) -> MongoClient:
    config = config or default_settings
    timeout_ms = int(config.store_timeout_ms)
    return MongoClient(
        config.require_database_url(),
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        socketTimeoutMS=timeout_ms,
        tz_aware=True,
    )


def match_collection(client: MongoClient, config: Settings | None = None) -> Collection:
    config = config or default_settings
    database = client.get_default_database(default=config.database_name)
    return database[config.match_collection]
