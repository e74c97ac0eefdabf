"""
队伍注册服务
"""

import logging
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from buzzer.core.config import settings
from buzzer.core.errors import SlotTaken, InvalidSlot, TeamNotFound
from buzzer.models import Team, BuzzEvent, RoundResult
from buzzer.schemas.team_schemas import TeamResponse, SlotAvailability
from buzzer.services.game_state import get_game_state, clear_winner, release_lock, broadcast_game_state
from buzzer.services.websocket_service import get_websocket_manager

logger = logging.getLogger(__name__)

class TeamService:
    """队伍注册服务：席位占用、删除时的级联清理"""

    def __init__(self, db: Session, websocket_manager=None):
        self.db = db
        self.websocket_manager = websocket_manager or get_websocket_manager()

    def _get_team(self, team_id: int) -> Team:
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise TeamNotFound(team_id)
        return team

    async def register_team(self, team_number: int, team_name: str) -> TeamResponse:
        """占用一个空闲席位并注册队伍"""
        if team_number < 1 or team_number > settings.MAX_TEAMS:
            raise InvalidSlot(team_number, settings.MAX_TEAMS)

        team_name = team_name.strip()
        if not team_name:
            raise ValueError("队伍名称不能为空")

        existing = self.db.query(Team).filter(Team.team_number == team_number).first()
        if existing:
            raise SlotTaken(team_number)

        team = Team(team_number=team_number, team_name=team_name, score=0)
        self.db.add(team)
        try:
            self.db.commit()
        except IntegrityError:
            # 并发注册同一席位时由唯一约束兜底
            self.db.rollback()
            raise SlotTaken(team_number)
        self.db.refresh(team)

        logger.info("✅ 队伍注册成功: %s（%d号席位）", team.team_name, team.team_number)
        await self._broadcast_teams()
        return TeamResponse.model_validate(team)

    async def get_team(self, team_id: int) -> TeamResponse:
        """根据ID获取队伍，队伍端用来确认自己仍然存在"""
        return TeamResponse.model_validate(self._get_team(team_id))

    async def list_teams(self) -> List[TeamResponse]:
        """按席位顺序列出队伍"""
        teams = self.db.query(Team).order_by(Team.team_number).all()
        return [TeamResponse.model_validate(team) for team in teams]

    async def available_slots(self) -> SlotAvailability:
        """获取席位占用情况"""
        taken = sorted(number for (number,) in self.db.query(Team.team_number).all())
        available = [n for n in range(1, settings.MAX_TEAMS + 1) if n not in taken]
        return SlotAvailability(max_teams=settings.MAX_TEAMS, available=available, taken=taken)

    async def delete_team(self, team_id: int) -> None:
        """删除队伍，并在同一事务中清除所有对它的引用"""
        team = self._get_team(team_id)
        team_name = team.team_name

        # 1. 删除抢答记录和答题记录
        self.db.query(BuzzEvent).filter(BuzzEvent.team_id == team_id).delete(synchronize_session=False)
        self.db.query(RoundResult).filter(RoundResult.team_id == team_id).delete(synchronize_session=False)

        # 2. 清除比赛状态中的引用
        state = get_game_state(self.db)
        state_changed = False
        if state.first_buzzer_team_id == team_id:
            release_lock(state)
            state_changed = True
        if state.winner_team_id == team_id:
            clear_winner(state)
            state_changed = True

        # 3. 删除队伍
        self.db.delete(team)
        self.db.commit()

        logger.info("🗑️ 队伍已删除: %s（id=%d）", team_name, team_id)

        await self.websocket_manager.send_to_team({
            "type": "team_removed",
            "team_id": team_id,
            "message": f"{team_name} 已被移出比赛，请重新注册"
        }, team_id)
        await self._broadcast_teams()
        if state_changed:
            await broadcast_game_state(self.db, self.websocket_manager, "team_deleted")

    async def _broadcast_teams(self):
        teams = await self.list_teams()
        await self.websocket_manager.broadcast({
            "type": "teams_changed",
            "teams": [team.model_dump(mode="json") for team in teams]
        })
