"""Collection names, identifier parsing and index setup"""
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from datetime import datetime, timezone
import logging

from chatbot_backend.utils.errors import ValidationFailed

logger = logging.getLogger(__name__)

CHATBOTS = "chatbots"
USERS = "users"
MESSAGES = "messages"


def utcnow() -> datetime:
    # BSON dates keep milliseconds; truncate so returned and stored values agree
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    """
    Parse a 24-hex identifier before it reaches a query.

    Raises:
        ValidationFailed: If the value is not a well-formed ObjectId
    """
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationFailed(f"Invalid {label}", details={"value": value})
    return ObjectId(value)


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create the indexes every collection relies on (idempotent)"""
    # One visitor record per device per chatbot; the send path depends on it
    await db[USERS].create_index(
        [("deviceId", ASCENDING), ("chatbotId", ASCENDING)], unique=True
    )
    await db[USERS].create_index([("chatbotId", ASCENDING), ("lastSeen", DESCENDING)])
    await db[MESSAGES].create_index([("chatbotId", ASCENDING), ("timestamp", DESCENDING)])
    await db[CHATBOTS].create_index([("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured")
