"""
API路由模块
"""

from fastapi import APIRouter
from .team_routes import router as team_router
from .session_routes import router as session_router
from .question_routes import router as question_router
from .game_routes import router as game_router
from .websocket_routes import router as ws_router

# 创建主路由器
api_router = APIRouter()

# 注册各个功能模块的路由
api_router.include_router(team_router, prefix="/teams", tags=["队伍管理"])
api_router.include_router(session_router, prefix="/sessions", tags=["场次管理"])
api_router.include_router(question_router, prefix="/questions", tags=["题库管理"])
api_router.include_router(game_router, prefix="/game", tags=["比赛控制"])
api_router.include_router(ws_router, prefix="/ws", tags=["WebSocket"])
