"""
队伍管理API路由
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from buzzer.core.database import get_db
from buzzer.core.utils import to_http_error
from buzzer.services.team_service import TeamService
from buzzer.services.scoring_service import ScoringService
from buzzer.schemas.team_schemas import TeamCreate, TeamResponse, ScoreAdjust, SlotAvailability

router = APIRouter()

@router.post("/", response_model=TeamResponse)
async def register_team(
    team_data: TeamCreate,
    db: Session = Depends(get_db)
):
    """注册队伍（占用席位）"""
    service = TeamService(db)
    try:
        return await service.register_team(team_data.team_number, team_data.team_name)
    except ValueError as e:
        raise to_http_error(e)

@router.get("/", response_model=List[TeamResponse])
async def list_teams(db: Session = Depends(get_db)):
    """获取队伍列表"""
    service = TeamService(db)
    return await service.list_teams()

@router.get("/slots", response_model=SlotAvailability)
async def get_slots(db: Session = Depends(get_db)):
    """获取席位占用情况"""
    service = TeamService(db)
    return await service.available_slots()

@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: int,
    db: Session = Depends(get_db)
):
    """获取队伍信息"""
    service = TeamService(db)
    try:
        return await service.get_team(team_id)
    except ValueError as e:
        raise to_http_error(e)

@router.delete("/{team_id}")
async def delete_team(
    team_id: int,
    db: Session = Depends(get_db)
):
    """删除队伍"""
    service = TeamService(db)
    try:
        await service.delete_team(team_id)
        return {"message": "队伍已删除", "team_id": team_id}
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{team_id}/score", response_model=TeamResponse)
async def adjust_score(
    team_id: int,
    adjust: ScoreAdjust,
    db: Session = Depends(get_db)
):
    """调整队伍分数"""
    service = ScoringService(db)
    try:
        return await service.adjust_score(team_id, adjust.delta)
    except ValueError as e:
        raise to_http_error(e)
