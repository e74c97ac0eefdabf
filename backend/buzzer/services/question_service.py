"""
题库服务：场次内题目的增删改查
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from buzzer.core.config import settings
from buzzer.core.errors import SessionFull, SessionNotFound, QuestionNotFound
from buzzer.models import Question, QuizSession, RoundResult
from buzzer.schemas.session_schemas import QuestionResponse
from buzzer.services.game_state import (
    get_game_state, refresh_question, shift_question_index, show_question,
    clear_question, broadcast_game_state
)
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class QuestionService:
    """题库服务"""

    def __init__(self, db: Session, websocket_manager=None):
        self.db = db
        self.websocket_manager = websocket_manager or get_websocket_manager()

    def _ordered(self, session_id: int) -> List[Question]:
        return self.db.query(Question).filter(
            Question.session_id == session_id
        ).order_by(Question.order_index, Question.id).all()

    def _get_question(self, question_id: int) -> Question:
        question = self.db.query(Question).filter(Question.id == question_id).first()
        if not question:
            raise QuestionNotFound(question_id)
        return question

    async def add_question(self, session_id: int, question_text: str, image_url: Optional[str] = None) -> QuestionResponse:
        """向场次追加一道题目，超过上限时拒绝"""
        session = self.db.query(QuizSession).filter(QuizSession.id == session_id).first()
        if not session:
            raise SessionNotFound(session_id)

        question_text = question_text.strip()
        if not question_text:
            raise ValueError("题目内容不能为空")

        count = self.db.query(Question).filter(Question.session_id == session_id).count()
        if count >= settings.MAX_QUESTIONS_PER_SESSION:
            raise SessionFull(settings.MAX_QUESTIONS_PER_SESSION)

        question = Question(
            session_id=session_id,
            order_index=count + 1,
            question_text=question_text,
            image_url=image_url or None
        )
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)

        logger.info("📝 场次 %d 新增第 %d 题", session_id, question.order_index)
        await self._broadcast_questions(session_id)
        return QuestionResponse.model_validate(question)

    async def update_question(self, question_id: int, question_text: str, image_url: Optional[str] = None) -> QuestionResponse:
        """修改题目内容和图片"""
        question = self._get_question(question_id)

        question_text = question_text.strip()
        if not question_text:
            raise ValueError("题目内容不能为空")

        question.question_text = question_text
        question.image_url = image_url or None

        # 正在展示的题目需要同步更新比赛状态里的冗余字段
        state = get_game_state(self.db)
        displayed = state.current_question_id == question_id
        if displayed:
            refresh_question(state, question)

        self.db.commit()
        self.db.refresh(question)

        await self._broadcast_questions(question.session_id)
        if displayed:
            await broadcast_game_state(self.db, self.websocket_manager, "question_updated")
        return QuestionResponse.model_validate(question)

    async def delete_question(self, question_id: int) -> None:
        """删除题目，重新编号，并保证比赛状态不指向已删除的题目"""
        question = self._get_question(question_id)
        session_id = question.session_id

        ordered = self._ordered(session_id)
        idx = next(i for i, q in enumerate(ordered) if q.id == question_id)
        remaining = [q for q in ordered if q.id != question_id]

        state = get_game_state(self.db)
        state_changed = False
        if state.current_question_id == question_id:
            # 优先切到下一题，其次上一题，都没有则清空
            if idx < len(remaining):
                show_question(self.db, state, remaining[idx], idx)
            elif idx > 0:
                show_question(self.db, state, remaining[idx - 1], idx - 1)
            else:
                clear_question(self.db, state, keep_session=True)
            state_changed = True
        elif state.current_session_id == session_id and state.current_question_id is not None \
                and (state.session_question_index or 0) > idx:
            # 展示的题目排在被删题目之后，位置前移一位
            shift_question_index(state, -1)
            state_changed = True

        # 答题记录保留用于统计，只解除题目引用
        self.db.query(RoundResult).filter(
            RoundResult.question_id == question_id
        ).update({"question_id": None}, synchronize_session=False)

        self.db.delete(question)
        for position, q in enumerate(remaining, start=1):
            q.order_index = position

        self.db.commit()
        logger.info("🗑️ 场次 %d 删除题目 %d，剩余 %d 题", session_id, question_id, len(remaining))

        await self._broadcast_questions(session_id)
        if state_changed:
            await broadcast_game_state(self.db, self.websocket_manager, "question_deleted")

    async def list_questions(self, session_id: int) -> List[QuestionResponse]:
        """按顺序列出场次的题目"""
        session = self.db.query(QuizSession).filter(QuizSession.id == session_id).first()
        if not session:
            raise SessionNotFound(session_id)
        return [QuestionResponse.model_validate(q) for q in self._ordered(session_id)]

    async def _broadcast_questions(self, session_id: int):
        await self.websocket_manager.broadcast({
            "type": "questions_changed",
            "session_id": session_id,
            "questions": [
                QuestionResponse.model_validate(q).model_dump(mode="json")
                for q in self._ordered(session_id)
            ]
        })
