"""CORS middleware configuration"""
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import MutableHeaders
from typing import List, Optional

ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]
ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Requested-With", "Accept"]
EXPOSE_HEADERS = ["Content-Length"]


def resolve_allowed_origin(origin: Optional[str], allowed_origins: List[str]) -> Optional[str]:
    """
    Origin policy: the value for Access-Control-Allow-Origin, or None to omit it.

    Requests without an Origin get "*". With no configured list every origin
    is reflected back, which is deliberately permissive (the widget is
    embedded on arbitrary customer sites) and is not access control. With a
    list, only listed origins are reflected.
    """
    if not origin:
        return "*"
    if not allowed_origins or origin in allowed_origins:
        return origin
    return None


class ReflectOriginCORSMiddleware(CORSMiddleware):
    """Starlette's CORS handling with the origin decision delegated to resolve_allowed_origin"""

    def is_allowed_origin(self, origin: str) -> bool:
        return super().is_allowed_origin(origin) or \
            resolve_allowed_origin(origin, list(self.allow_origins)) is not None

    async def send(self, message, send, request_headers):
        if message["type"] == "http.response.start":
            if resolve_allowed_origin(request_headers.get("origin"), list(self.allow_origins)) == "*":
                message.setdefault("headers", [])
                MutableHeaders(scope=message)["Access-Control-Allow-Origin"] = "*"
        await super().send(message, send, request_headers)


def setup_cors(app, allowed_origins: List[str]):
    """
    Configure CORS middleware for the application

    Args:
        app: FastAPI application instance
        allowed_origins: Origins to reflect; empty reflects all
    """
    app.add_middleware(
        ReflectOriginCORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=ALLOW_METHODS,
        allow_headers=ALLOW_HEADERS,
        expose_headers=EXPOSE_HEADERS,
    )
