#!/usr/bin/env python3
"""
抢答器 - 后端主入口
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from buzzer.core.config import settings
from buzzer.core.logging_config import configure_logging
from buzzer.api import api_router
from buzzer.core.database import init_db

logger = configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    description="实时抢答比赛后端API：队伍席位、场次题库、抢答仲裁与计分",
    version=settings.VERSION
)

# CORS设置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册API路由
app.include_router(api_router, prefix="/api")

@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    logger.info("🚀 启动抢答器后端服务...")
    await init_db()

@app.get("/")
async def root():
    """根路径健康检查"""
    return {"message": f"{settings.APP_NAME} 后端运行中", "status": "healthy"}

@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {"status": "healthy", "service": "quiz-buzzer"}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
