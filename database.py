"""
MongoDB access helpers.

The database handle is created once by the app factory and handed to every
service function; nothing here holds a module-level connection.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from errors import BadRequest

log = logging.getLogger(__name__)

# Collection names: lowercase model name
USERS = "user"
FARMERS = "farmer"
PRODUCTS = "product"
CARTS = "cart"
ORDERS = "order"


def connect(config) -> Database:
    client = MongoClient(config.DATABASE_URL, tz_aware=True)
    log.info("Using database %s", config.DATABASE_NAME)
    return client[config.DATABASE_NAME]


def get_db(request: Request) -> Database:
    return request.app.state.db


def ensure_indexes(db: Database):
    """Unique indexes back the one-per-owner and unique-contact invariants."""
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[USERS].create_index([("phone", ASCENDING)], unique=True)
    db[FARMERS].create_index([("user", ASCENDING)], unique=True)
    db[CARTS].create_index([("user", ASCENDING)], unique=True)
    db[PRODUCTS].create_index([("farmer", ASCENDING)])
    db[ORDERS].create_index([("user", ASCENDING)])


def now():
    return datetime.now(timezone.utc)


def create_document(db: Database, collection: str, data: dict) -> ObjectId:
    doc = dict(data)
    doc.setdefault("createdAt", now())
    doc["updatedAt"] = now()
    result = db[collection].insert_one(doc)
    return result.inserted_id


def get_documents(db: Database, collection: str, filter_dict: Optional[dict] = None,
                  projection: Optional[dict] = None) -> list:
    return list(db[collection].find(filter_dict or {}, projection))


def to_object_id(id_str: Any) -> ObjectId:
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(str(id_str).strip())
    except (InvalidId, TypeError):
        raise BadRequest("Invalid ID format")


def serialize_doc(doc):
    """Render a stored document as JSON-ready data: ``_id`` becomes ``id``."""
    if doc is None:
        return None
    if isinstance(doc, list):
        return [serialize_doc(d) for d in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    if not isinstance(doc, dict):
        return doc
    out = {}
    for key, value in doc.items():
        if key == "_id":
            out["id"] = str(value)
        else:
            out[key] = serialize_doc(value)
    return out
