"""
Uvicorn server runner with configurable logging.

Usage:
    python run.py

Environment variables (set in .env file):
    DEBUG=true - Enable debug logging
    PORT=8000 - Server port (default: 8000)
    HOST=127.0.0.1 - Server host (default: 127.0.0.1)
"""

import uvicorn
from chatgenius.config import get_settings

if __name__ == "__main__":
    import os

    settings = get_settings()

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} server...")
    print(f"Host: {host}  Port: {port}  Log Level: {log_level}")
    print(f"Docs available at: http://{host}:{port}/docs")

    uvicorn.run(
        "chatgenius.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level=log_level,
        access_log=True,
    )
