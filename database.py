"""
MongoDB access for the portfolio API.

Each Pydantic document model in schemas.py maps to one collection below.
DocumentStore is the only place that talks to pymongo directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

from settings import Settings

USERS = "users"
PROJECTS = "projects"
EXPERIENCES = "experiences"
SKILLS = "skills"
CERTIFICATIONS = "certifications"
SOCIALS = "socials"
CONTACTS = "contacts"

CONTENT_COLLECTIONS = (USERS, PROJECTS, EXPERIENCES, SKILLS, CERTIFICATIONS, SOCIALS)

# Never leaves the API.
PRIVATE_FIELDS = ("password_hash",)

Sort = List[Tuple[str, int]]


class DatabaseUnavailable(Exception):
    """Raised when no database is configured or it cannot be reached."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Turn a stored document into a JSON-safe dict with a string ``id``."""
    if document is None:
        return None
    out: Dict[str, Any] = {}
    if "_id" in document:
        out["id"] = str(document["_id"])
    for key, value in document.items():
        if key == "_id" or key in PRIVATE_FIELDS:
            continue
        out[key] = _jsonable(value)
    return out


def _jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def connect(settings: Settings) -> MongoClient:
    if not settings.mongodb_uri:
        raise DatabaseUnavailable("MONGODB_URI environment variable is not defined")
    return MongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=5000,
        socketTimeoutMS=45000,
        maxPoolSize=10,
    )


class DocumentStore:
    """Thin data-access object over a pymongo database."""

    def __init__(self, database: Database):
        self.db = database

    def create(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        document = dict(data)
        document.setdefault("created_at", now)
        document["updated_at"] = now
        result = self.db[collection].insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def get(
        self, collection: str, doc_id: Any, **conditions: Any
    ) -> Optional[Dict[str, Any]]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        return self.db[collection].find_one({"_id": oid, **conditions})

    def find_one(
        self, collection: str, query: Dict[str, Any], sort: Optional[Sort] = None
    ) -> Optional[Dict[str, Any]]:
        return self.db[collection].find_one(query, sort=sort)

    def find(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        *,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        cursor = self.db[collection].find(query or {})
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        return self.db[collection].count_documents(query or {})

    def update(
        self, collection: str, doc_id: Any, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply a partial ``$set`` and return the updated document."""
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        changes = {**changes, "updated_at": utcnow()}
        return self.db[collection].find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, collection: str, doc_id: Any) -> bool:
        oid = to_object_id(doc_id)
        if oid is None:
            return False
        return self.db[collection].delete_one({"_id": oid}).deleted_count == 1

    def clear(self, collections: Iterable[str]) -> None:
        for name in collections:
            self.db[name].delete_many({})

    def ping(self) -> None:
        self.db.command("ping")

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()


def ensure_indexes(store: DocumentStore) -> None:
    db = store.db
    db[USERS].create_index("email", unique=True)
    db[PROJECTS].create_index("slug", unique=True)
    db[PROJECTS].create_index([("is_featured", ASCENDING)])
    db[PROJECTS].create_index([("type", ASCENDING)])
    db[PROJECTS].create_index([("year", ASCENDING)])
    db[PROJECTS].create_index([("tech_stack.name", ASCENDING)])
    db[EXPERIENCES].create_index([("start_date", DESCENDING)])
    db[EXPERIENCES].create_index([("is_published", ASCENDING)])
    db[SKILLS].create_index([("category", ASCENDING), ("order", ASCENDING)])
    db[SKILLS].create_index([("level", DESCENDING)])
    db[CERTIFICATIONS].create_index([("date", DESCENDING)])
    db[CERTIFICATIONS].create_index([("order", ASCENDING)])
    db[SOCIALS].create_index([("order", ASCENDING)])
    db[CONTACTS].create_index([("created_at", DESCENDING)])
    db[CONTACTS].create_index([("is_read", ASCENDING)])
