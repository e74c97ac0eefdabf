"""
WebSocket API路由
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session
from typing import Optional
import json
import logging

from buzzer.core.config import settings
from buzzer.core.database import get_db
from buzzer.core.errors import TeamNotFound
from buzzer.core.utils import error_detail
from buzzer.services.buzz_service import BuzzService
from buzzer.services.game_state import build_snapshot
from buzzer.services.websocket_service import ROLES, get_websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter()

@router.websocket("/game")
async def websocket_game_endpoint(
    websocket: WebSocket,
    role: str = "display",
    team_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """比赛WebSocket连接端点（主持人、队伍、大屏共用）"""
    if role not in ROLES:
        await websocket.close(code=1008)
        return

    manager = get_websocket_manager()
    await manager.connect(websocket, role, team_id)

    try:
        # 发送欢迎消息和当前比赛状态
        await manager.send_personal_message({
            "type": "connected",
            "role": role,
            "team_id": team_id,
            "heartbeat_interval": settings.WS_HEARTBEAT_INTERVAL,
            "state": build_snapshot(db).model_dump(mode="json")
        }, websocket)

        # 监听消息
        while True:
            data = await websocket.receive_text()
            try:
                message_data = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("收到无效JSON消息: %s", data)
                continue

            message_type = message_data.get("type") if isinstance(message_data, dict) else None

            # 处理不同类型的消息
            if message_type == "ping":
                await manager.send_personal_message({
                    "type": "pong",
                    "timestamp": message_data.get("timestamp")
                }, websocket)

            elif message_type == "get_game_state":
                await manager.send_personal_message({
                    "type": "game_state",
                    "state": build_snapshot(db).model_dump(mode="json")
                }, websocket)

            elif message_type == "buzz" and role == "team" and team_id is not None:
                try:
                    result = await BuzzService(db, manager).buzz(team_id)
                    await manager.send_personal_message({
                        "type": "buzz_result",
                        **result.model_dump(mode="json")
                    }, websocket)
                except TeamNotFound as e:
                    # 队伍已被删除，客户端需要回到注册页
                    await manager.send_personal_message({
                        "type": "team_removed",
                        "team_id": team_id,
                        "message": str(e)
                    }, websocket)
                except ValueError as e:
                    await manager.send_personal_message({
                        "type": "error",
                        **error_detail(e)
                    }, websocket)

            else:
                logger.debug("忽略未知消息类型: %s", message_type)

    except WebSocketDisconnect:
        manager.disconnect(websocket, role, team_id)
    except Exception as e:
        logger.error("WebSocket错误: %s", e)
        manager.disconnect(websocket, role, team_id)
