import logging
from fastapi import FastAPI
from chatgenius.config import get_settings
from chatgenius.api.routes import ai_chat, channels, export, search

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger("chatgenius")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(
    title=settings.app_name,
    description="Team chat with semantic search and AI personas",
    version="0.1.0",
)

# Include routers
app.include_router(search.router, prefix="/api", tags=["Search"])
app.include_router(export.router, prefix="/api", tags=["Export"])
app.include_router(ai_chat.router, prefix="/api/ai", tags=["AI Chat"])
app.include_router(channels.router, prefix="/api/channels", tags=["Channels"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to ChatGenius",
        "version": "0.1.0",
        "endpoints": {
            "search": "/api/search-messages",
            "chat_with_context": "/api/chat-with-context",
            "ai_chat": "/api/ai/chat",
            "channels": "/api/channels",
            "export": "/api/export-messages",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
