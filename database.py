"""
MongoDB access helpers.

`db` is None when DATABASE_URL is not configured; routes report that through
/test instead of failing at import time.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union

from pydantic import BaseModel
from pymongo import MongoClient

import config

logger = logging.getLogger("minispace.database")

db = None
if config.DATABASE_URL:
    _client = MongoClient(config.DATABASE_URL)
    db = _client[config.DATABASE_NAME]


def _require_db():
    if db is None:
        raise RuntimeError("Database is not configured (set DATABASE_URL)")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    handle = _require_db()
    if isinstance(data, BaseModel):
        doc = data.model_dump(exclude={"id"})
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc["created_at"] = doc.get("created_at") or now
    doc["updated_at"] = now
    result = handle[collection_name].insert_one(doc)
    logger.debug("inserted %s into %s", result.inserted_id, collection_name)
    return str(result.inserted_id)

