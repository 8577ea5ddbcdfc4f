"""Visitor (user) collection access"""
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError
from typing import Any, Dict, List
import logging

from chatbot_backend.repositories.base import USERS, utcnow
from chatbot_backend.services.device_service import DeviceInfo

logger = logging.getLogger(__name__)

RECENT_LIMIT = 100


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[USERS]

    async def record_visit(
        self,
        device_id: str,
        chatbot_id: ObjectId,
        ip_address: str,
        device: DeviceInfo,
        user_agent: str,
    ) -> Dict[str, Any]:
        """
        Count one message against the visitor, creating the record on first contact.

        The upsert is a single atomic operation. Two concurrent first messages
        from the same device can still both try to insert; the unique
        (deviceId, chatbotId) index rejects the loser, which then applies its
        message as a plain update.

        Returns:
            The visitor document after the update
        """
        now = utcnow()
        query = {"deviceId": device_id, "chatbotId": chatbot_id}
        touch = {
            "$inc": {"messageCount": 1},
            "$set": {"lastSeen": now, "ipAddress": ip_address, "updatedAt": now},
        }
        first_seen = {
            "browser": device.browser,
            "os": device.os,
            "userAgent": user_agent,
            "firstSeen": now,
            "createdAt": now,
        }

        try:
            return await self.collection.find_one_and_update(
                query,
                {**touch, "$setOnInsert": first_seen},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            logger.info(f"Concurrent first visit for device {device_id}, retrying as update")
            return await self.collection.find_one_and_update(
                query, touch, return_document=ReturnDocument.AFTER
            )

    async def list_recent(self, chatbot_id: ObjectId, limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
        """Most recently seen visitors of a chatbot"""
        cursor = self.collection.find({"chatbotId": chatbot_id}).sort("lastSeen", DESCENDING).limit(limit)
        return await cursor.to_list(length=limit)

    async def count(self) -> int:
        """Visitor records, one per device and chatbot pair"""
        return await self.collection.count_documents({})

    async def count_devices(self) -> int:
        """Distinct device IDs across every chatbot"""
        return len(await self.collection.distinct("deviceId"))
