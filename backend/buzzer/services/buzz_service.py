"""
抢答仲裁服务

状态机: 未锁定 -> 锁定 -> 未锁定。
抢答通过比赛状态行上的单条条件更新完成（仅当 is_locked 为假时才写入），
数据库保证同一时刻只有一个队伍能够抢到。
"""

import logging
from typing import List, Optional
from sqlalchemy import exists
from sqlalchemy.orm import Session

from buzzer.core.errors import (
    TeamNotFound, NoActiveSession, NoQuestions, QuestionIndexOutOfRange
)
from buzzer.core.utils import format_timestamp_with_timezone
from buzzer.models import GameState, GAME_STATE_ID, BuzzEvent, Team, QuizSession, Question
from buzzer.schemas.game_schemas import BuzzResult, BuzzEventInfo, GameStateResponse
from buzzer.services.game_state import (
    get_game_state, release_lock, show_question, show_custom_question, build_snapshot,
    broadcast_game_state
)
from buzzer.services.session_service import SessionService
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class BuzzService:
    """抢答仲裁与题目切换"""

    def __init__(self, db: Session, websocket_manager=None):
        self.db = db
        self.websocket_manager = websocket_manager or get_websocket_manager()

    async def buzz(self, team_id: int) -> BuzzResult:
        """队伍抢答，返回是否抢到"""
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise TeamNotFound(team_id)
        team_name = team.team_name

        state = get_game_state(self.db)
        if state.quiz_ended:
            return BuzzResult(accepted=False, reason="quiz_ended", team_id=team_id,
                              first_buzzer_team_id=state.first_buzzer_team_id)

        # 同一抢答窗口内重复按下不做任何处理
        already_buzzed = self.db.query(BuzzEvent).filter(
            BuzzEvent.team_id == team_id,
            BuzzEvent.buzz_window == state.buzz_window
        ).first()
        if already_buzzed:
            return BuzzResult(accepted=False, reason="already_buzzed", team_id=team_id,
                              first_buzzer_team_id=state.first_buzzer_team_id)

        # 条件更新：只有未锁定且队伍仍然存在时才能写入，返回受影响行数
        won = self.db.query(GameState).filter(
            GameState.id == GAME_STATE_ID,
            GameState.is_locked.is_(False),
            exists().where(Team.id == team_id)
        ).update({
            "is_locked": True,
            "first_buzzer_team_id": team_id,
            "version": GameState.version + 1
        }, synchronize_session=False)
        accepted = won == 1

        # 写事务已开始，队伍在提交前不会再被删除
        if not accepted and self.db.query(Team.id).filter(Team.id == team_id).first() is None:
            self.db.rollback()
            logger.info("🚫 %s 已被移出比赛，抢答无效", team_name)
            raise TeamNotFound(team_id)

        self.db.refresh(state)
        buzz_window = state.buzz_window
        first_buzzer_team_id = state.first_buzzer_team_id
        event = BuzzEvent(team_id=team_id, buzz_window=buzz_window, accepted=accepted)
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        position = self.db.query(BuzzEvent).filter(
            BuzzEvent.buzz_window == buzz_window,
            BuzzEvent.id <= event.id
        ).count()
        result = BuzzResult(
            accepted=accepted,
            reason=None if accepted else "already_locked",
            team_id=team_id,
            first_buzzer_team_id=first_buzzer_team_id,
            position=position
        )

        if accepted:
            logger.info("🔔 %s 抢答成功（第%d个按下）", team_name, position)
        else:
            logger.info("⏱️ %s 抢答慢了一步（第%d个按下）", team_name, position)

        await self.websocket_manager.broadcast({
            "type": "buzz",
            "team_id": team_id,
            "team_name": team_name,
            "accepted": accepted,
            "position": position,
            "timestamp": format_timestamp_with_timezone(event.created_at)
        })
        if accepted:
            await broadcast_game_state(self.db, self.websocket_manager, "buzzer_locked")
        return result

    async def unlock(self) -> GameStateResponse:
        """主持人解锁抢答器"""
        state = get_game_state(self.db)
        release_lock(state)
        self.db.commit()

        logger.info("🔓 抢答器已解锁")
        return await broadcast_game_state(self.db, self.websocket_manager, "unlocked")

    async def push_question(self, question_text: str, image_url: Optional[str] = None) -> GameStateResponse:
        """主持人直接在大屏上展示一道题目（不需要激活场次）"""
        question_text = question_text.strip()
        if not question_text:
            raise ValueError("题目内容不能为空")

        state = get_game_state(self.db)
        show_custom_question(self.db, state, question_text, image_url or None)
        self.db.commit()

        logger.info("📺 主持人推送题目，抢答器已重置")
        return await broadcast_game_state(self.db, self.websocket_manager, "question_pushed")

    def _active_session(self, state: GameState) -> QuizSession:
        session = None
        if state.current_session_id is not None:
            session = self.db.query(QuizSession).filter(QuizSession.id == state.current_session_id).first()
        if not session or not session.is_active:
            raise NoActiveSession()
        return session

    def _session_questions(self, session_id: int) -> List[Question]:
        return self.db.query(Question).filter(
            Question.session_id == session_id
        ).order_by(Question.order_index, Question.id).all()

    async def display_question(self, index: int) -> GameStateResponse:
        """展示激活场次中指定位置（从0开始）的题目"""
        state = get_game_state(self.db)
        session = self._active_session(state)
        questions = self._session_questions(session.id)
        if index < 0 or index >= len(questions):
            raise QuestionIndexOutOfRange(index, len(questions))

        show_question(self.db, state, questions[index], index)
        self.db.commit()

        logger.info("📺 展示场次 %s 第 %d/%d 题", session.session_name, index + 1, len(questions))
        return await broadcast_game_state(self.db, self.websocket_manager, "question_changed")

    async def next_question(self) -> GameStateResponse:
        """下一题；已经是最后一题时结束场次"""
        state = get_game_state(self.db)
        session = self._active_session(state)
        questions = self._session_questions(session.id)
        if not questions:
            raise NoQuestions(session.id)

        if state.current_question_id is None:
            return await self.display_question(0)

        current = state.session_question_index or 0
        if current < len(questions) - 1:
            return await self.display_question(current + 1)

        # 题目已全部展示完，场次自动完成
        session_service = SessionService(self.db, self.websocket_manager)
        session_service.mark_completed(session)
        self.db.commit()

        logger.info("🏁 场次 %s 题目已全部展示，自动完成", session.session_name)
        await session_service.notify_completed(session)
        return await broadcast_game_state(self.db, self.websocket_manager, "session_completed")

    async def previous_question(self) -> GameStateResponse:
        """上一题；已经是第一题时不做处理"""
        state = get_game_state(self.db)
        self._active_session(state)

        current = state.session_question_index or 0
        if state.current_question_id is None or current == 0:
            return build_snapshot(self.db)
        return await self.display_question(current - 1)

    async def get_game_state(self) -> GameStateResponse:
        """获取比赛状态快照"""
        return build_snapshot(self.db)

    async def list_buzz_events(self) -> List[BuzzEventInfo]:
        """按先后顺序列出本题的抢答记录"""
        return build_snapshot(self.db).buzz_events
