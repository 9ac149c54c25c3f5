"""
MongoDB access for the StayEase API.

One client is opened per process; route handlers receive the database
through the `get_db` dependency so it can be swapped out in tests.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from config import Config

USERS = "Users"
APARTMENTS = "Apartments"
AGREEMENTS = "Agreements"
AGREEMENT_INTENTS = "AgreementIntents"
ANNOUNCEMENTS = "Announcements"
COUPONS = "Coupons"
PAYMENTS = "Payments"
REVIEWS = "Reviews"

client = MongoClient(Config.DATABASE_URL)
db = client[Config.DATABASE_NAME]


def get_db() -> Database:
    return db


def now_utc():
    return datetime.now(timezone.utc)


def to_object_id(id_str: str) -> ObjectId:
    if not ObjectId.is_valid(id_str):
        raise HTTPException(status_code=400, detail="Invalid ID format")
    return ObjectId(id_str)


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


def create_document(collection: Collection, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a model or dict and return the new id as a string"""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    else:
        data = dict(data)
    return str(collection.insert_one(data).inserted_id)


def get_documents(collection: Collection, filter_dict: Optional[Dict[str, Any]] = None,
                  sort=None, skip: int = 0, limit: int = 0):
    cursor = collection.find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize(d) for d in cursor]


def inserted(inserted_id: str) -> Dict[str, Any]:
    return {"acknowledged": True, "insertedId": inserted_id}


def updated(res) -> Dict[str, Any]:
    return {
        "acknowledged": res.acknowledged,
        "matchedCount": res.matched_count,
        "modifiedCount": res.modified_count,
    }


def deleted(res) -> Dict[str, Any]:
    return {"acknowledged": res.acknowledged, "deletedCount": res.deleted_count}
