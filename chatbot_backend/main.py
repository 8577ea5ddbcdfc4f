"""Main FastAPI application"""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from typing import Optional
import logging

from chatbot_backend.config import Settings, get_settings
from chatbot_backend.database import ConnectionManager
from chatbot_backend.middleware.cors import setup_cors
from chatbot_backend.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from chatbot_backend.routers import chatbots, messages, upload
from chatbot_backend.services.storage_service import PUBLIC_PREFIX, FileStorage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    manager: ConnectionManager = app.state.connection_manager

    # Startup: a long-running server refuses to start without its database;
    # serverless instances connect lazily on their first request instead.
    if app.state.settings.serverless:
        logger.info("Serverless mode - database connection deferred to first request")
    else:
        await manager.ensure_connection()
    yield
    # Shutdown
    manager.close()


def create_app(
    settings: Optional[Settings] = None,
    connection_manager: Optional[ConnectionManager] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use instead of the environment
        connection_manager: Pre-built connection manager (e.g. bound to a test client factory)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Chatbot Admin API",
        description="Chatbot configuration, visitor tracking and icon uploads",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.connection_manager = connection_manager or ConnectionManager(settings)
    app.state.file_storage = FileStorage(settings.upload_dir)

    # Routes resolve settings through the dependency so overrides apply everywhere
    app.dependency_overrides[get_settings] = lambda: settings

    # Error handling first so CORS headers are added to error responses too
    register_exception_handlers(app, debug=settings.debug)
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)
    setup_cors(app, settings.cors_origin_list)

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "OK", "message": "Server is running"}

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Chatbot Admin API",
            "version": VERSION,
            "docs": "/docs"
        }

    app.include_router(chatbots.router, prefix="/api/chatbots", tags=["Chatbots"])
    app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])
    app.include_router(upload.router, prefix="/api/upload", tags=["Upload"])

    app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
