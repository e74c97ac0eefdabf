"""
计分与胜负判定服务
"""

import logging
from typing import List, Optional
from sqlalchemy import func, case
from sqlalchemy.orm import Session

from buzzer.core.config import settings
from buzzer.core.errors import (
    TeamNotFound, SessionNotFound, NoTeams, NoActiveQuestion
)
from buzzer.models import Team, QuizSession, Question, RoundResult, BuzzEvent
from buzzer.schemas.team_schemas import TeamResponse
from buzzer.schemas.game_schemas import LeaderboardEntry, WinnerResponse, GameStateResponse
from buzzer.services.game_state import (
    get_game_state, announce_winner, reset_to_defaults, broadcast_game_state
)
from buzzer.services.session_service import SessionService
from buzzer.services.announcement_service import get_winner_announcement
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class ScoringService:
    """计分服务：分数调整、答题判定、比赛结束、排行榜"""

    def __init__(self, db: Session, websocket_manager=None, announcement=None):
        self.db = db
        self.websocket_manager = websocket_manager or get_websocket_manager()
        self.announcement = announcement or get_winner_announcement()

    def _get_team(self, team_id: int) -> Team:
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise TeamNotFound(team_id)
        return team

    @staticmethod
    def _apply_delta(team: Team, delta: int) -> int:
        """调整分数，最低为0，返回实际变化量"""
        old_score = team.score or 0
        team.score = max(0, old_score + delta)
        return team.score - old_score

    async def adjust_score(self, team_id: int, delta: int) -> TeamResponse:
        """主持人加减分"""
        team = self._get_team(team_id)
        self._apply_delta(team, delta)
        self.db.commit()
        self.db.refresh(team)

        logger.info("🧮 %s 分数调整 %+d，当前 %d 分", team.team_name, delta, team.score)
        await self._broadcast_teams()
        return TeamResponse.model_validate(team)

    async def judge_answer(self, is_correct: bool, team_id: Optional[int] = None) -> TeamResponse:
        """判定当前题目的答题结果，记录答题并计分"""
        state = get_game_state(self.db)
        if state.current_question_id is None or state.current_session_id is None:
            raise NoActiveQuestion()

        if team_id is None:
            team_id = state.first_buzzer_team_id
            if team_id is None:
                raise ValueError("没有抢答成功的队伍，请指定答题队伍")
        team = self._get_team(team_id)

        points = settings.CORRECT_ANSWER_POINTS if is_correct else -settings.WRONG_ANSWER_PENALTY
        applied = self._apply_delta(team, points)
        self.db.add(RoundResult(
            session_id=state.current_session_id,
            question_id=state.current_question_id,
            team_id=team.id,
            is_correct=is_correct,
            points=applied
        ))
        self.db.commit()
        self.db.refresh(team)

        logger.info("%s %s 第 %d 题回答%s，当前 %d 分",
                    "✅" if is_correct else "❌", team.team_name,
                    (state.session_question_index or 0) + 1,
                    "正确" if is_correct else "错误", team.score)
        await self.websocket_manager.broadcast({
            "type": "answer_judged",
            "team_id": team.id,
            "is_correct": is_correct,
            "points": applied
        })
        await self._broadcast_teams()
        return TeamResponse.model_validate(team)

    async def end_quiz(self) -> WinnerResponse:
        """结束比赛并决出获胜者

        最高分获胜；同分时先注册的队伍（id最小）获胜。
        """
        teams = self.db.query(Team).order_by(Team.id).all()
        if not teams:
            raise NoTeams()

        top_score = max(team.score for team in teams)
        tied = [team for team in teams if team.score == top_score]
        winner = tied[0]
        if len(tied) > 1:
            logger.info("⚖️ %d 支队伍同为 %d 分，先注册的 %s 获胜", len(tied), top_score, winner.team_name)

        state = get_game_state(self.db)

        # 最后一题已经展示时，结束比赛即完成当前场次
        completed_session = None
        if state.current_session_id is not None and state.current_question_id is not None:
            session = self.db.query(QuizSession).filter(QuizSession.id == state.current_session_id).first()
            count = self.db.query(Question).filter(Question.session_id == state.current_session_id).count()
            if session and not session.is_completed and (state.session_question_index or 0) >= count - 1:
                SessionService(self.db, self.websocket_manager).mark_completed(session)
                completed_session = session

        announce_winner(state, winner.id)
        self.db.commit()
        self.db.refresh(winner)

        logger.info("🏆 比赛结束，%s 以 %d 分获胜", winner.team_name, winner.score)

        result = WinnerResponse(
            winner=TeamResponse.model_validate(winner),
            tied_team_ids=[team.id for team in tied] if len(tied) > 1 else [],
            display_seconds=self.announcement.display_seconds
        )
        if completed_session is not None:
            await SessionService(self.db, self.websocket_manager).notify_completed(completed_session)
        await self.websocket_manager.broadcast({
            "type": "quiz_ended",
            **result.model_dump(mode="json")
        })
        await broadcast_game_state(self.db, self.websocket_manager, "quiz_ended")
        self.announcement.start(winner.id)
        return result

    async def dismiss_winner(self) -> bool:
        """提前关闭获胜公告"""
        return await self.announcement.dismiss()

    async def leaderboard(self, session_id: int) -> List[LeaderboardEntry]:
        """场次排行榜：按分数降序，同分按注册先后"""
        session = self.db.query(QuizSession).filter(QuizSession.id == session_id).first()
        if not session:
            raise SessionNotFound(session_id)

        stats = {
            team_id: (answered, correct or 0)
            for team_id, answered, correct in self.db.query(
                RoundResult.team_id,
                func.count(RoundResult.id),
                func.sum(case((RoundResult.is_correct.is_(True), 1), else_=0))
            ).filter(
                RoundResult.session_id == session_id
            ).group_by(RoundResult.team_id).all()
        }

        teams = self.db.query(Team).order_by(Team.score.desc(), Team.id).all()
        entries = []
        for rank, team in enumerate(teams, start=1):
            answered, correct = stats.get(team.id, (0, 0))
            entries.append(LeaderboardEntry(
                rank=rank,
                team_id=team.id,
                team_name=team.team_name,
                team_number=team.team_number,
                score=team.score,
                questions_answered=answered,
                correct_answers=correct,
                accuracy=round(correct / answered, 4) if answered else 0.0
            ))
        return entries

    async def reset_game(self) -> GameStateResponse:
        """重置比赛：删除所有队伍和记录，比赛状态恢复初始值（场次和题目保留）"""
        self.db.query(BuzzEvent).delete(synchronize_session=False)
        self.db.query(RoundResult).delete(synchronize_session=False)

        state = get_game_state(self.db)
        reset_to_defaults(self.db, state)

        self.db.query(Team).delete(synchronize_session=False)
        self.db.commit()
        self.announcement.cancel()

        logger.info("♻️ 比赛已重置")
        await self._broadcast_teams()
        return await broadcast_game_state(self.db, self.websocket_manager, "game_reset")

    async def _broadcast_teams(self):
        teams = self.db.query(Team).order_by(Team.team_number).all()
        await self.websocket_manager.broadcast({
            "type": "teams_changed",
            "teams": [TeamResponse.model_validate(team).model_dump(mode="json") for team in teams]
        })
