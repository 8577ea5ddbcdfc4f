"""Message and visitor Pydantic models"""
from pydantic import Field
from typing import Literal, Optional

from chatbot_backend.models.common import CamelModel, ObjectIdStr, UtcDatetime

MessageType = Literal["user", "bot"]


class SendMessageRequest(CamelModel):
    """Message sent from the widget"""
    chatbot_id: str = Field(..., description="Chatbot ObjectId")
    text: str = Field(..., min_length=1, description="Message text")
    type: MessageType = "user"
    device_id: Optional[str] = Field(None, description="Device ID persisted by the widget")


class MessageResponse(CamelModel):
    id: ObjectIdStr = Field(..., alias="_id")
    chatbot_id: ObjectIdStr
    user_id: ObjectIdStr
    type: str
    text: str
    timestamp: UtcDatetime


class VisitorSummary(CamelModel):
    """The only visitor fields echoed back to the widget"""
    device_id: str
    browser: str
    os: str


class SendMessageResponse(CamelModel):
    success: bool
    message: MessageResponse
    user: VisitorSummary


class VisitorProfile(CamelModel):
    """Visitor fields joined onto message listings"""
    id: ObjectIdStr = Field(..., alias="_id")
    device_id: str
    ip_address: str = ""
    browser: str = "Unknown"
    os: str = "Unknown"
    user_agent: str = ""
    first_seen: Optional[UtcDatetime] = None
    last_seen: Optional[UtcDatetime] = None
    message_count: int = 0


class VisitorResponse(VisitorProfile):
    """Visitor record as stored"""
    chatbot_id: ObjectIdStr
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class ChatbotMessageResponse(CamelModel):
    """Message with its visitor populated in place of the user reference"""
    id: ObjectIdStr = Field(..., alias="_id")
    chatbot_id: ObjectIdStr
    user_id: Optional[VisitorProfile] = None
    type: str
    text: str
    timestamp: UtcDatetime


class StatsResponse(CamelModel):
    total_users: int
    total_messages: int
    total_devices: int
