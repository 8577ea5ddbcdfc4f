"""Message collection access"""
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from typing import Any, Dict, List

from chatbot_backend.repositories.base import MESSAGES, USERS, utcnow

RECENT_LIMIT = 100

# Visitor fields joined onto each message
VISITOR_PROJECTION = {
    "deviceId": 1,
    "ipAddress": 1,
    "browser": 1,
    "os": 1,
    "userAgent": 1,
    "firstSeen": 1,
    "lastSeen": 1,
    "messageCount": 1,
}


class MessageRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[MESSAGES]
        self.users = db[USERS]

    async def create(self, chatbot_id: ObjectId, user_id: ObjectId, message_type: str, text: str) -> Dict[str, Any]:
        document = {
            "chatbotId": chatbot_id,
            "userId": user_id,
            "type": message_type,
            "text": text,
            "timestamp": utcnow(),
        }
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def list_recent_with_visitors(self, chatbot_id: ObjectId, limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
        """
        Newest messages of a chatbot, each with its visitor in place of userId.

        A message whose visitor no longer exists gets userId=None.
        """
        cursor = (
            self.collection.find({"chatbotId": chatbot_id})
            .sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        messages = await cursor.to_list(length=limit)

        user_ids = list({m["userId"] for m in messages if m.get("userId") is not None})
        visitors = {}
        if user_ids:
            users_cursor = self.users.find({"_id": {"$in": user_ids}}, VISITOR_PROJECTION)
            for visitor in await users_cursor.to_list(length=len(user_ids)):
                visitors[visitor["_id"]] = visitor

        for message in messages:
            message["userId"] = visitors.get(message.get("userId"))
        return messages

    async def count(self) -> int:
        return await self.collection.count_documents({})
