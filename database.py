"""
MongoDB store handle

One `Database` is built when the app starts and closed on shutdown. Routes
receive it through the `get_db` dependency instead of importing a global.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from bson import ObjectId
from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection

logger = logging.getLogger(__name__)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL or token; None when it is malformed"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    def __init__(self, client: MongoClient, name: str):
        self.client = client
        self.db = client[name]
        self.name = name

    @property
    def users(self) -> Collection:
        return self.db["user"]

    @property
    def profiles(self) -> Collection:
        return self.db["profile"]

    @property
    def posts(self) -> Collection:
        return self.db["post"]

    def ensure_indexes(self) -> None:
        self.users.create_index([("email", ASCENDING)], unique=True)
        self.profiles.create_index([("user", ASCENDING)], unique=True)
        self.posts.create_index([("date", DESCENDING)])
        self.posts.create_index([("user", ASCENDING)])

    def list_collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def close(self) -> None:
        self.client.close()
        logger.info(f"[DATABASE] Connection to '{self.name}' closed")


def connect(url: str, name: str) -> Database:
    """Open a client and make sure the indexes this app relies on exist"""
    client = MongoClient(url, tz_aware=True)
    database = Database(client, name)
    database.ensure_indexes()
    logger.info(f"[DATABASE] Connected to '{name}'")
    return database


def get_db(request: Request) -> Database:
    return request.app.state.db
