"""Message endpoints - widget chat log, visitors and stats"""
from fastapi import APIRouter, Cookie, Depends, Request, Response
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from typing import List, Optional
import logging

from chatbot_backend.database import get_database
from chatbot_backend.models.message import (
    ChatbotMessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    StatsResponse,
    VisitorResponse
)
from chatbot_backend.repositories.base import parse_object_id
from chatbot_backend.repositories.chatbots import ChatbotRepository
from chatbot_backend.repositories.messages import MessageRepository
from chatbot_backend.repositories.users import UserRepository
from chatbot_backend.services.device_service import classify, client_ip, resolve_device_id
from chatbot_backend.utils.errors import NotFound, storage_error

logger = logging.getLogger(__name__)
router = APIRouter()

DEVICE_COOKIE = "deviceId"
DEVICE_COOKIE_MAX_AGE = 365 * 24 * 60 * 60  # 1 year, in seconds


@router.post("/send", response_model=SendMessageResponse)
async def send_message(
    payload: SendMessageRequest,
    request: Request,
    response: Response,
    device_cookie: Optional[str] = Cookie(None, alias=DEVICE_COOKIE),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Log a chat message from the widget (PUBLIC endpoint - no auth required)

    Creates the visitor record on the device's first message to this chatbot,
    otherwise bumps its message count, and remembers the device in a cookie.
    """
    chatbot_id = parse_object_id(payload.chatbot_id, "chatbot ID")

    try:
        if not await ChatbotRepository(db).exists(chatbot_id):
            raise NotFound("Chatbot not found")

        user_agent = request.headers.get("user-agent", "")
        device = classify(user_agent)
        device_id = resolve_device_id(device_cookie, payload.device_id)

        user = await UserRepository(db).record_visit(
            device_id=device_id,
            chatbot_id=chatbot_id,
            ip_address=client_ip(request),
            device=device,
            user_agent=user_agent,
        )
        message = await MessageRepository(db).create(
            chatbot_id=chatbot_id,
            user_id=user["_id"],
            message_type=payload.type,
            text=payload.text,
        )
    except PyMongoError as e:
        logger.error(f"Error sending message: {e}")
        raise storage_error(e)

    response.set_cookie(
        key=DEVICE_COOKIE,
        value=device_id,
        max_age=DEVICE_COOKIE_MAX_AGE,
        httponly=True
    )

    return {
        "success": True,
        "message": message,
        "user": {
            "deviceId": user["deviceId"],
            "browser": user["browser"],
            "os": user["os"],
        },
    }


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Visitor, message and device totals across all chatbots"""
    try:
        users = UserRepository(db)
        # Wire names as the admin UI reads them: users are distinct devices,
        # devices are visitor records (one per device and chatbot)
        total_users = await users.count_devices()
        total_devices = await users.count()
        total_messages = await MessageRepository(db).count()
    except PyMongoError as e:
        logger.error(f"Error getting stats: {e}")
        raise storage_error(e)

    return {
        "totalUsers": total_users,
        "totalMessages": total_messages,
        "totalDevices": total_devices,
    }


@router.get("/users/{chatbot_id}", response_model=List[VisitorResponse])
async def get_chatbot_users(chatbot_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """The 100 most recently seen visitors of a chatbot"""
    oid = parse_object_id(chatbot_id, "chatbot ID")
    try:
        return await UserRepository(db).list_recent(oid)
    except PyMongoError as e:
        logger.error(f"Error getting users: {e}")
        raise storage_error(e)


@router.get("/chatbot/{chatbot_id}", response_model=List[ChatbotMessageResponse])
async def get_chatbot_messages(chatbot_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """The 100 newest messages of a chatbot, each with its visitor's details"""
    oid = parse_object_id(chatbot_id, "chatbot ID")
    try:
        return await MessageRepository(db).list_recent_with_visitors(oid)
    except PyMongoError as e:
        logger.error(f"Error getting messages: {e}")
        raise storage_error(e)
