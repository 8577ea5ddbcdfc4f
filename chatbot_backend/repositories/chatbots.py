"""Chatbot collection access"""
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from typing import Any, Dict, List, Optional

from chatbot_backend.repositories.base import CHATBOTS, utcnow


class ChatbotRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[CHATBOTS]

    async def list_all(self) -> List[Dict[str, Any]]:
        """All chatbots, newest first"""
        cursor = self.collection.find().sort("createdAt", DESCENDING)
        return await cursor.to_list(length=None)

    async def get(self, chatbot_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"_id": chatbot_id})

    async def exists(self, chatbot_id: ObjectId) -> bool:
        return await self.collection.find_one({"_id": chatbot_id}, {"_id": 1}) is not None

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        document = {**data, "createdAt": now, "updatedAt": now}
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def update(self, chatbot_id: ObjectId, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply changes and return the updated document, or None if it does not exist"""
        return await self.collection.find_one_and_update(
            {"_id": chatbot_id},
            {"$set": {**changes, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, chatbot_id: ObjectId) -> bool:
        # Visitors and messages of the chatbot are left in place
        result = await self.collection.delete_one({"_id": chatbot_id})
        return result.deleted_count == 1
