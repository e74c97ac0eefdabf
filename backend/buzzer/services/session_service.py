"""
场次生命周期服务
"""

import logging
from datetime import datetime, timezone
from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from buzzer.core.config import settings
from buzzer.core.errors import SessionNotFound, SessionCompleted, NoQuestions
from buzzer.models import QuizSession, Question, RoundResult
from buzzer.schemas.session_schemas import SessionResponse, SessionCompletion
from buzzer.schemas.game_schemas import GameStateResponse
from buzzer.services.game_state import (
    get_game_state, clear_question, switch_session, show_question, broadcast_game_state
)
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class SessionService:
    """场次管理服务

    状态流转: 已创建 -> 激活 <-> 未激活 -> 已完成（终态）。
    任意时刻最多只有一个激活的场次。
    """

    def __init__(self, db: Session, websocket_manager=None):
        self.db = db
        self.websocket_manager = websocket_manager or get_websocket_manager()

    def _get_session(self, session_id: int) -> QuizSession:
        session = self.db.query(QuizSession).filter(QuizSession.id == session_id).first()
        if not session:
            raise SessionNotFound(session_id)
        return session

    async def create_session(self, session_name: str) -> SessionResponse:
        """创建新场次"""
        session_name = session_name.strip()
        if not session_name:
            raise ValueError("请输入场次名称")

        last_number = self.db.query(func.max(QuizSession.session_number)).scalar() or 0
        session = QuizSession(
            session_name=session_name,
            session_number=last_number + 1,
            is_active=False,
            is_completed=False
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info("🆕 创建场次 #%d: %s", session.session_number, session.session_name)
        await self._broadcast_sessions()
        return SessionResponse.model_validate(session)

    async def list_sessions(self) -> List[SessionResponse]:
        """按序号列出场次"""
        sessions = self.db.query(QuizSession).order_by(QuizSession.session_number).all()
        return [SessionResponse.model_validate(s) for s in sessions]

    async def get_session(self, session_id: int) -> SessionResponse:
        return SessionResponse.model_validate(self._get_session(session_id))

    def _activate(self, session: QuizSession) -> None:
        """在当前事务内激活场次并停用其他场次"""
        if session.is_completed:
            raise SessionCompleted(session.id)

        self.db.query(QuizSession).filter(QuizSession.id != session.id).update(
            {"is_active": False}, synchronize_session=False
        )
        session.is_active = True

        state = get_game_state(self.db)
        if state.current_session_id != session.id:
            switch_session(self.db, state, session.id)

    async def activate_session(self, session_id: int) -> SessionResponse:
        """激活场次（同时停用其他所有场次）"""
        session = self._get_session(session_id)
        self._activate(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info("▶️ 场次已激活: %s", session.session_name)
        await self._broadcast_sessions()
        await broadcast_game_state(self.db, self.websocket_manager, "session_activated")
        return SessionResponse.model_validate(session)

    async def start_quiz(self, session_id: int) -> GameStateResponse:
        """激活场次并展示第一题"""
        session = self._get_session(session_id)
        questions = self.db.query(Question).filter(
            Question.session_id == session_id
        ).order_by(Question.order_index, Question.id).all()
        if not questions:
            raise NoQuestions(session_id)

        self._activate(session)
        state = get_game_state(self.db)
        show_question(self.db, state, questions[0], 0)
        self.db.commit()

        logger.info("🚀 比赛开始: %s，共 %d 题", session.session_name, len(questions))
        await self._broadcast_sessions()
        return await broadcast_game_state(self.db, self.websocket_manager, "quiz_started")

    async def deactivate_session(self, session_id: int) -> SessionResponse:
        """停用场次；比赛状态指向该场次时一并清空"""
        session = self._get_session(session_id)
        session.is_active = False

        state = get_game_state(self.db)
        state_changed = state.current_session_id == session_id
        if state_changed:
            clear_question(self.db, state)

        self.db.commit()
        self.db.refresh(session)

        logger.info("⏸️ 场次已停用: %s", session.session_name)
        await self._broadcast_sessions()
        if state_changed:
            await broadcast_game_state(self.db, self.websocket_manager, "session_deactivated")
        return SessionResponse.model_validate(session)

    def mark_completed(self, session: QuizSession) -> bool:
        """在当前事务内把场次标记为已完成，返回比赛状态是否被清空"""
        session.is_completed = True
        session.is_active = False
        if session.completed_at is None:
            session.completed_at = datetime.now(timezone.utc)

        state = get_game_state(self.db)
        if state.current_session_id == session.id:
            clear_question(self.db, state)
            return True
        return False

    async def complete_session(self, session_id: int) -> SessionResponse:
        """结束场次（终态，不可再激活）"""
        session = self._get_session(session_id)
        already_completed = bool(session.is_completed)
        state_changed = self.mark_completed(session)
        self.db.commit()
        self.db.refresh(session)

        if not already_completed:
            logger.info("🏁 场次已完成: %s", session.session_name)
            await self.notify_completed(session)
        if state_changed:
            await broadcast_game_state(self.db, self.websocket_manager, "session_completed")
        return SessionResponse.model_validate(session)

    async def notify_completed(self, session: QuizSession):
        await self.websocket_manager.broadcast({
            "type": "session_completed",
            "session_id": session.id,
            "session_name": session.session_name
        })
        await self._broadcast_sessions()

    async def get_completion(self, session_id: int) -> SessionCompletion:
        """查询场次是否已完成（低频轮询）"""
        session = self._get_session(session_id)
        return SessionCompletion(
            session_id=session.id,
            is_completed=bool(session.is_completed),
            poll_interval=settings.SESSION_COMPLETION_POLL_INTERVAL
        )

    async def delete_session(self, session_id: int) -> None:
        """删除场次及其全部题目，同时清除比赛状态中的引用"""
        session = self._get_session(session_id)
        session_name = session.session_name

        # 1. 清除比赛状态引用
        state = get_game_state(self.db)
        state_changed = state.current_session_id == session_id
        if state_changed:
            clear_question(self.db, state)

        # 2. 删除答题记录
        self.db.query(RoundResult).filter(RoundResult.session_id == session_id).delete(synchronize_session=False)

        # 3. 删除场次，题目随场次级联删除
        self.db.delete(session)
        self.db.commit()

        logger.info("🗑️ 场次已删除: %s", session_name)
        await self._broadcast_sessions()
        if state_changed:
            await broadcast_game_state(self.db, self.websocket_manager, "session_deleted")

    async def _broadcast_sessions(self):
        sessions = await self.list_sessions()
        await self.websocket_manager.broadcast({
            "type": "sessions_changed",
            "sessions": [s.model_dump(mode="json") for s in sessions]
        })
