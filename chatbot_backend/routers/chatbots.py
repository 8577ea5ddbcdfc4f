"""Chatbot configuration endpoints"""
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from typing import List
import logging

from chatbot_backend.database import get_database
from chatbot_backend.models.chatbot import (
    ChatbotCreate,
    ChatbotDeleteResponse,
    ChatbotResponse,
    ChatbotUpdate
)
from chatbot_backend.repositories.base import parse_object_id
from chatbot_backend.repositories.chatbots import ChatbotRepository
from chatbot_backend.utils.errors import NotFound, storage_error

logger = logging.getLogger(__name__)
router = APIRouter()

CHATBOT_NOT_FOUND = "Chatbot not found"


def get_chatbot_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> ChatbotRepository:
    return ChatbotRepository(db)


@router.get("", response_model=List[ChatbotResponse])
@router.get("/", response_model=List[ChatbotResponse], include_in_schema=False)
async def list_chatbots(repo: ChatbotRepository = Depends(get_chatbot_repository)):
    """All chatbots, newest first"""
    try:
        return await repo.list_all()
    except PyMongoError as e:
        logger.error(f"Error listing chatbots: {e}")
        raise storage_error(e)


@router.get("/{chatbot_id}", response_model=ChatbotResponse)
async def get_chatbot(chatbot_id: str, repo: ChatbotRepository = Depends(get_chatbot_repository)):
    oid = parse_object_id(chatbot_id, "chatbot ID")
    try:
        chatbot = await repo.get(oid)
    except PyMongoError as e:
        logger.error(f"Error fetching chatbot {chatbot_id}: {e}")
        raise storage_error(e)

    if not chatbot:
        raise NotFound(CHATBOT_NOT_FOUND)
    return chatbot


@router.post("", response_model=ChatbotResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=ChatbotResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_chatbot(
    chatbot: ChatbotCreate,
    repo: ChatbotRepository = Depends(get_chatbot_repository)
):
    """Create a chatbot; unspecified fields take their defaults"""
    try:
        created = await repo.create(chatbot.model_dump(by_alias=True))
    except PyMongoError as e:
        logger.error(f"Error creating chatbot: {e}")
        raise storage_error(e)

    logger.info(f"Chatbot created: {created['_id']}")
    return created


@router.put("/{chatbot_id}", response_model=ChatbotResponse)
async def update_chatbot(
    chatbot_id: str,
    changes: ChatbotUpdate,
    repo: ChatbotRepository = Depends(get_chatbot_repository)
):
    """Update the supplied fields and return the updated chatbot"""
    oid = parse_object_id(chatbot_id, "chatbot ID")
    try:
        updated = await repo.update(oid, changes.model_dump(by_alias=True, exclude_none=True))
    except PyMongoError as e:
        logger.error(f"Error updating chatbot {chatbot_id}: {e}")
        raise storage_error(e)

    if not updated:
        raise NotFound(CHATBOT_NOT_FOUND)
    return updated


@router.delete("/{chatbot_id}", response_model=ChatbotDeleteResponse)
async def delete_chatbot(chatbot_id: str, repo: ChatbotRepository = Depends(get_chatbot_repository)):
    """Delete a chatbot; its visitors and messages are kept"""
    oid = parse_object_id(chatbot_id, "chatbot ID")
    try:
        deleted = await repo.delete(oid)
    except PyMongoError as e:
        logger.error(f"Error deleting chatbot {chatbot_id}: {e}")
        raise storage_error(e)

    if not deleted:
        raise NotFound(CHATBOT_NOT_FOUND)

    logger.info(f"Chatbot deleted: {chatbot_id}")
    return {"message": "Chatbot deleted successfully"}
