"""Chatbot-related Pydantic models"""
from pydantic import Field, StringConstraints
from typing import Annotated, List, Literal, Optional

from chatbot_backend.models.common import CamelModel, ObjectIdStr, UtcDatetime

DEFAULT_WELCOME_MESSAGE = "Hello! How can I help you today?"
DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_ICON = "💬"

Personality = Literal["Friendly", "Professional", "Funny"]
Theme = Literal["light", "dark", "custom"]
WidgetPosition = Literal["Bottom Left", "Bottom Right"]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
HexColor = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$",
    ),
]


class FAQ(CamelModel):
    """Question/answer pair shown in the widget"""
    question: str = ""
    answer: str = ""


class ChatbotCreate(CamelModel):
    """Create a chatbot; unspecified fields take their defaults"""
    property_name: RequiredText
    site_url: RequiredText
    name: RequiredText
    welcome_message: RequiredText = DEFAULT_WELCOME_MESSAGE
    personality: Personality = "Friendly"
    theme: Theme = "light"
    primary_color: HexColor = DEFAULT_PRIMARY_COLOR
    position: WidgetPosition = "Bottom Right"
    icon: str = DEFAULT_ICON
    icon_image: str = ""
    knowledge_source: str = ""
    faqs: List[FAQ] = []
    enable_mongodb_jokes: bool = Field(False, alias="enableMongoDBJokes")
    is_active: bool = True


class ChatbotUpdate(CamelModel):
    """Update a chatbot; only the supplied fields change"""
    property_name: Optional[RequiredText] = None
    site_url: Optional[RequiredText] = None
    name: Optional[RequiredText] = None
    welcome_message: Optional[RequiredText] = None
    personality: Optional[Personality] = None
    theme: Optional[Theme] = None
    primary_color: Optional[HexColor] = None
    position: Optional[WidgetPosition] = None
    icon: Optional[str] = None
    icon_image: Optional[str] = None
    knowledge_source: Optional[str] = None
    faqs: Optional[List[FAQ]] = None
    enable_mongodb_jokes: Optional[bool] = Field(None, alias="enableMongoDBJokes")
    is_active: Optional[bool] = None


class ChatbotResponse(CamelModel):
    """Chatbot as stored"""
    id: ObjectIdStr = Field(..., alias="_id")
    property_name: str = ""
    site_url: str = ""
    name: str = ""
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    personality: str = "Friendly"
    theme: str = "light"
    primary_color: str = DEFAULT_PRIMARY_COLOR
    position: str = "Bottom Right"
    icon: str = DEFAULT_ICON
    icon_image: str = ""
    knowledge_source: str = ""
    faqs: List[FAQ] = []
    enable_mongodb_jokes: bool = Field(False, alias="enableMongoDBJokes")
    is_active: bool = True
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class ChatbotDeleteResponse(CamelModel):
    message: str
