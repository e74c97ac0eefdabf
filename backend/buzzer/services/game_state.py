"""
全局比赛状态的读取与状态迁移辅助函数

比赛状态只允许通过这里的函数修改：锁定字段（is_locked、first_buzzer_team_id）
只能由抢答的条件更新、解锁、换题和重置路径一起改变。
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from buzzer.core.config import settings
from buzzer.models import GameState, GAME_STATE_ID, BuzzEvent, Team, Question
from buzzer.schemas.game_schemas import GameStateResponse, BuzzEventInfo
from buzzer.schemas.team_schemas import TeamResponse

logger = logging.getLogger(__name__)


def get_game_state(db: Session) -> GameState:
    """获取比赛状态行，不存在时创建"""
    state = db.query(GameState).filter(GameState.id == GAME_STATE_ID).first()
    if state is None:
        state = GameState(
            id=GAME_STATE_ID,
            current_question=settings.WELCOME_TEXT,
            session_question_index=0,
            is_locked=False,
            quiz_ended=False,
            buzz_window=0,
            version=0
        )
        db.add(state)
        db.flush()
        logger.info("🆕 已创建比赛状态行")
    return state


def touch(state: GameState) -> None:
    """版本号递增"""
    state.version = (state.version or 0) + 1


def release_lock(state: GameState) -> None:
    """解锁并开启新的抢答窗口"""
    state.is_locked = False
    state.first_buzzer_team_id = None
    state.buzz_window = (state.buzz_window or 0) + 1
    touch(state)


def purge_buzz_events(db: Session) -> int:
    """清空抢答记录（换题时调用）"""
    return db.query(BuzzEvent).delete(synchronize_session=False)


def show_question(db: Session, state: GameState, question: Question, index: int) -> None:
    """切换当前展示的题目，强制解锁并清空抢答记录"""
    state.current_question_id = question.id
    state.current_question = question.question_text
    state.image_url = question.image_url
    state.current_session_id = question.session_id
    state.session_question_index = index
    release_lock(state)
    purge_buzz_events(db)


def show_custom_question(db: Session, state: GameState, question_text: str, image_url: Optional[str] = None) -> None:
    """主持人直接推送不在题库中的题目，强制解锁并清空抢答记录"""
    state.current_question_id = None
    state.current_question = question_text
    state.image_url = image_url
    state.session_question_index = 0
    release_lock(state)
    purge_buzz_events(db)


def clear_question(db: Session, state: GameState, keep_session: bool = False) -> None:
    """清空当前题目；keep_session为False时同时解除场次引用"""
    state.current_question_id = None
    state.current_question = None
    state.image_url = None
    state.session_question_index = 0
    if not keep_session:
        state.current_session_id = None
    release_lock(state)
    purge_buzz_events(db)


def switch_session(db: Session, state: GameState, session_id: int) -> None:
    """切换到另一个场次，上一个场次的题目不再展示"""
    clear_question(db, state)
    state.current_session_id = session_id


def reset_to_defaults(db: Session, state: GameState) -> None:
    """恢复比赛状态为初始值"""
    clear_question(db, state)
    state.current_question = settings.WELCOME_TEXT
    state.winner_team_id = None
    state.quiz_ended = False


def announce_winner(state: GameState, team_id: int) -> None:
    """标记比赛结束并记录获胜队伍"""
    # 结束横幅取代当前题目，之后修改或删除该题目不再影响展示
    state.current_question_id = None
    state.winner_team_id = team_id
    state.quiz_ended = True
    state.current_question = settings.QUIZ_ENDED_TEXT
    state.image_url = None
    touch(state)


def clear_winner(state: GameState) -> None:
    """获胜队伍被删除时撤销比赛结束状态"""
    state.winner_team_id = None
    state.quiz_ended = False
    touch(state)


def refresh_question(state: GameState, question: Question) -> None:
    """正在展示的题目被修改后同步文字和图片"""
    state.current_question = question.question_text
    state.image_url = question.image_url
    touch(state)


def shift_question_index(state: GameState, offset: int) -> None:
    """前面的题目被删除后调整当前题目位置"""
    state.session_question_index = (state.session_question_index or 0) + offset
    touch(state)


def _team_info(db: Session, team_id: Optional[int]) -> Optional[TeamResponse]:
    if team_id is None:
        return None
    team = db.query(Team).filter(Team.id == team_id).first()
    return TeamResponse.model_validate(team) if team else None


def build_snapshot(db: Session) -> GameStateResponse:
    """生成比赛状态快照"""
    state = get_game_state(db)
    
    question_count = 0
    if state.current_session_id is not None:
        question_count = db.query(Question).filter(
            Question.session_id == state.current_session_id
        ).count()
    
    events = db.query(BuzzEvent).order_by(BuzzEvent.id).all()
    buzz_events = [
        BuzzEventInfo(
            id=event.id,
            team_id=event.team_id,
            team_name=event.team.team_name if event.team else None,
            accepted=event.accepted,
            buzz_window=event.buzz_window,
            created_at=event.created_at
        )
        for event in events
    ]
    
    return GameStateResponse(
        current_question=state.current_question,
        image_url=state.image_url,
        current_question_id=state.current_question_id,
        current_session_id=state.current_session_id,
        session_question_index=state.session_question_index or 0,
        question_count=question_count,
        is_locked=bool(state.is_locked),
        first_buzzer=_team_info(db, state.first_buzzer_team_id),
        winner=_team_info(db, state.winner_team_id),
        quiz_ended=bool(state.quiz_ended),
        buzz_window=state.buzz_window or 0,
        version=state.version or 0,
        buzz_events=buzz_events
    )


async def broadcast_game_state(db: Session, websocket_manager, reason: str) -> GameStateResponse:
    """广播最新比赛状态"""
    snapshot = build_snapshot(db)
    await websocket_manager.broadcast({
        "type": "game_state_changed",
        "reason": reason,
        "state": snapshot.model_dump(mode="json")
    })
    return snapshot
