#!/usr/bin/env python3
"""Run the sessionbridge demo application"""
import uvicorn

from sessionbridge.core.config import settings
from sessionbridge.core.logging_config import init_application_logging

if __name__ == "__main__":
    init_application_logging()
    uvicorn.run(
        "sessionbridge.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
