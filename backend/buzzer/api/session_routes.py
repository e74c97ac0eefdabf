"""
场次管理API路由
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from buzzer.core.database import get_db
from buzzer.core.utils import to_http_error
from buzzer.services.session_service import SessionService
from buzzer.services.question_service import QuestionService
from buzzer.services.scoring_service import ScoringService
from buzzer.schemas.session_schemas import (
    SessionCreate, SessionResponse, SessionCompletion, QuestionCreate, QuestionResponse
)
from buzzer.schemas.game_schemas import GameStateResponse, LeaderboardEntry

router = APIRouter()

@router.post("/", response_model=SessionResponse)
async def create_session(
    session_data: SessionCreate,
    db: Session = Depends(get_db)
):
    """创建场次"""
    service = SessionService(db)
    try:
        return await service.create_session(session_data.session_name)
    except ValueError as e:
        raise to_http_error(e)

@router.get("/", response_model=List[SessionResponse])
async def list_sessions(db: Session = Depends(get_db)):
    """获取场次列表"""
    service = SessionService(db)
    return await service.list_sessions()

@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: int,
    db: Session = Depends(get_db)
):
    """获取场次信息"""
    service = SessionService(db)
    try:
        return await service.get_session(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{session_id}/activate", response_model=SessionResponse)
async def activate_session(
    session_id: int,
    db: Session = Depends(get_db)
):
    """激活场次"""
    service = SessionService(db)
    try:
        return await service.activate_session(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{session_id}/deactivate", response_model=SessionResponse)
async def deactivate_session(
    session_id: int,
    db: Session = Depends(get_db)
):
    """停用场次"""
    service = SessionService(db)
    try:
        return await service.deactivate_session(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{session_id}/start", response_model=GameStateResponse)
async def start_quiz(
    session_id: int,
    db: Session = Depends(get_db)
):
    """开始比赛：激活场次并展示第一题"""
    service = SessionService(db)
    try:
        return await service.start_quiz(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: int,
    db: Session = Depends(get_db)
):
    """结束场次"""
    service = SessionService(db)
    try:
        return await service.complete_session(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.get("/{session_id}/completion", response_model=SessionCompletion)
async def get_completion(
    session_id: int,
    db: Session = Depends(get_db)
):
    """查询场次是否已完成（轮询）"""
    service = SessionService(db)
    try:
        return await service.get_completion(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.delete("/{session_id}")
async def delete_session(
    session_id: int,
    db: Session = Depends(get_db)
):
    """删除场次及其全部题目"""
    service = SessionService(db)
    try:
        await service.delete_session(session_id)
        return {"message": "场次及其题目已删除", "session_id": session_id}
    except ValueError as e:
        raise to_http_error(e)

@router.post("/{session_id}/questions", response_model=QuestionResponse)
async def add_question(
    session_id: int,
    question_data: QuestionCreate,
    db: Session = Depends(get_db)
):
    """向场次添加题目"""
    service = QuestionService(db)
    try:
        return await service.add_question(session_id, question_data.question_text, question_data.image_url)
    except ValueError as e:
        raise to_http_error(e)

@router.get("/{session_id}/questions", response_model=List[QuestionResponse])
async def list_questions(
    session_id: int,
    db: Session = Depends(get_db)
):
    """获取场次的题目列表"""
    service = QuestionService(db)
    try:
        return await service.list_questions(session_id)
    except ValueError as e:
        raise to_http_error(e)

@router.get("/{session_id}/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    session_id: int,
    db: Session = Depends(get_db)
):
    """获取场次排行榜"""
    service = ScoringService(db)
    try:
        return await service.leaderboard(session_id)
    except ValueError as e:
        raise to_http_error(e)
