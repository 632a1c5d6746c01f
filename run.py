#!/usr/bin/env python3
"""
项目启动脚本
"""

import uvicorn

from taskboard.core.config import settings

def main():
    """启动FastAPI应用"""
    print("Starting server...")
    print(f"Address: http://{settings.SERVER_HOST}:{settings.SERVER_PORT}")
    print(f"API docs: http://{settings.SERVER_HOST}:{settings.SERVER_PORT}/docs")

    uvicorn.run(
        "taskboard.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_development,
        workers=None if settings.is_development else settings.SERVER_WORKERS,
        log_level=settings.LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    main()
