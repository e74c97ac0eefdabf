"""
WebSocket连接管理服务
"""

from fastapi import WebSocket
from typing import Dict, List, Optional
import json
import logging

logger = logging.getLogger(__name__)

ROLES = ("admin", "team", "display")

class WebSocketManager:
    """WebSocket连接管理器"""
    
    def __init__(self):
        # 按角色分组的连接：主持人、队伍、大屏
        self.connections: Dict[str, List[WebSocket]] = {role: [] for role in ROLES}
        # 队伍专属连接，用于定向通知
        self.team_connections: Dict[int, List[WebSocket]] = {}
    
    async def connect(self, websocket: WebSocket, role: str, team_id: Optional[int] = None):
        """接受连接并登记"""
        await websocket.accept()
        self.register(websocket, role, team_id)
    
    def register(self, websocket: WebSocket, role: str, team_id: Optional[int] = None):
        """登记已建立的连接"""
        if role not in self.connections:
            raise ValueError(f"未知的连接角色: {role}")
        
        # 检查是否已存在，避免重复连接
        if websocket not in self.connections[role]:
            self.connections[role].append(websocket)
        if team_id is not None:
            team_sockets = self.team_connections.setdefault(team_id, [])
            if websocket not in team_sockets:
                team_sockets.append(websocket)
        logger.info("🔌 新连接加入 role=%s team=%s，当前连接数: %d", role, team_id, self.connection_count())
    
    def disconnect(self, websocket: WebSocket, role: str, team_id: Optional[int] = None):
        """断开连接"""
        if websocket in self.connections.get(role, []):
            self.connections[role].remove(websocket)
        if team_id is not None and team_id in self.team_connections:
            if websocket in self.team_connections[team_id]:
                self.team_connections[team_id].remove(websocket)
            if not self.team_connections[team_id]:
                del self.team_connections[team_id]
        logger.info("连接断开 role=%s team=%s，当前连接数: %d", role, team_id, self.connection_count())
    
    def connection_count(self) -> int:
        return sum(len(sockets) for sockets in self.connections.values())
    
    async def send_personal_message(self, message: dict, websocket: WebSocket) -> bool:
        """发送个人消息"""
        try:
            await websocket.send_text(json.dumps(message, ensure_ascii=False))
            return True
        except Exception as e:
            logger.warning("发送个人消息失败: %s", e)
            return False
    
    def _drop(self, websocket: WebSocket):
        for sockets in self.connections.values():
            if websocket in sockets:
                sockets.remove(websocket)
        for team_id in list(self.team_connections):
            if websocket in self.team_connections[team_id]:
                self.team_connections[team_id].remove(websocket)
            if not self.team_connections[team_id]:
                del self.team_connections[team_id]
    
    async def broadcast(self, message: dict):
        """向所有连接广播消息"""
        connections = [ws for role in ROLES for ws in self.connections[role]]
        if not connections:
            logger.debug("没有活跃连接，跳过广播: %s", message.get('type', 'unknown'))
            return
        
        logger.debug("📡 向 %d 个连接广播消息类型: %s", len(connections), message.get('type', 'unknown'))
        
        message_text = json.dumps(message, ensure_ascii=False)
        failed_connections = []
        
        for connection in connections:
            try:
                await connection.send_text(message_text)
            except Exception as e:
                logger.warning("广播消息失败: %s", e)
                failed_connections.append(connection)
        
        # 移除失败的连接
        for failed_connection in failed_connections:
            self._drop(failed_connection)
        
        if failed_connections:
            logger.info("移除 %d 个失效连接，剩余连接数: %d", len(failed_connections), self.connection_count())
    
    async def send_to_team(self, message: dict, team_id: int):
        """发送消息给指定队伍的所有连接"""
        for connection in list(self.team_connections.get(team_id, [])):
            if not await self.send_personal_message(message, connection):
                self._drop(connection)


# 使用全局WebSocket连接管理器
_manager = None

def get_websocket_manager() -> WebSocketManager:
    """获取全局WebSocket管理器实例"""
    global _manager
    if _manager is None:
        _manager = WebSocketManager()
    return _manager
