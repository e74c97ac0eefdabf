"""
获胜弹窗计时服务
"""

import asyncio
import logging
from typing import Optional

from buzzer.core.config import settings
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class WinnerAnnouncement:
    """获胜公告：展示固定时长后自动关闭，可被提前关闭"""

    def __init__(self, websocket_manager=None, display_seconds: Optional[float] = None):
        self.websocket_manager = websocket_manager or get_websocket_manager()
        self.display_seconds = settings.WINNER_DISPLAY_SECONDS if display_seconds is None else display_seconds
        self._task: Optional[asyncio.Task] = None
        self._winner_team_id: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, winner_team_id: int) -> asyncio.Task:
        """开始计时，已有的计时会被取消"""
        self.cancel()
        self._winner_team_id = winner_team_id
        self._task = asyncio.create_task(self._expire(winner_team_id))
        return self._task

    async def _expire(self, winner_team_id: int):
        await asyncio.sleep(self.display_seconds)
        logger.info("⌛ 获胜公告展示结束")
        self._task = None
        await self.websocket_manager.broadcast({
            "type": "winner_dismissed",
            "winner_team_id": winner_team_id,
            "reason": "timeout"
        })

    def cancel(self) -> bool:
        """取消计时，返回是否确实取消了一个未完成的计时"""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        # 计时所在的事件循环已关闭时无需取消
        if task.get_loop().is_closed():
            return False
        task.cancel()
        return True

    async def dismiss(self) -> bool:
        """主持人提前关闭获胜弹窗"""
        cancelled = self.cancel()
        await self.websocket_manager.broadcast({
            "type": "winner_dismissed",
            "winner_team_id": self._winner_team_id,
            "reason": "dismissed"
        })
        return cancelled


_announcement = None

def get_winner_announcement() -> WinnerAnnouncement:
    """获取全局获胜公告实例"""
    global _announcement
    if _announcement is None:
        _announcement = WinnerAnnouncement()
    return _announcement
