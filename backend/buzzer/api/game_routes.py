"""
比赛控制API路由
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from buzzer.core.database import get_db
from buzzer.core.utils import to_http_error
from buzzer.services.buzz_service import BuzzService
from buzzer.services.scoring_service import ScoringService
from buzzer.schemas.team_schemas import TeamResponse
from buzzer.schemas.game_schemas import (
    BuzzRequest, BuzzResult, BuzzEventInfo, GameStateResponse, JudgeRequest, QuestionPush,
    WinnerResponse
)

router = APIRouter()

@router.get("/state", response_model=GameStateResponse)
async def get_game_state(db: Session = Depends(get_db)):
    """获取比赛状态"""
    service = BuzzService(db)
    return await service.get_game_state()

@router.get("/buzz-events", response_model=List[BuzzEventInfo])
async def list_buzz_events(db: Session = Depends(get_db)):
    """获取本题抢答顺序"""
    service = BuzzService(db)
    return await service.list_buzz_events()

@router.post("/display/{index}", response_model=GameStateResponse)
async def display_question(
    index: int,
    db: Session = Depends(get_db)
):
    """展示指定位置的题目"""
    service = BuzzService(db)
    try:
        return await service.display_question(index)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/next", response_model=GameStateResponse)
async def next_question(db: Session = Depends(get_db)):
    """下一题"""
    service = BuzzService(db)
    try:
        return await service.next_question()
    except ValueError as e:
        raise to_http_error(e)

@router.post("/previous", response_model=GameStateResponse)
async def previous_question(db: Session = Depends(get_db)):
    """上一题"""
    service = BuzzService(db)
    try:
        return await service.previous_question()
    except ValueError as e:
        raise to_http_error(e)

@router.post("/question", response_model=GameStateResponse)
async def push_question(
    push_data: QuestionPush,
    db: Session = Depends(get_db)
):
    """直接推送题目到大屏并重置抢答器"""
    service = BuzzService(db)
    try:
        return await service.push_question(push_data.question_text, push_data.image_url)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/buzz", response_model=BuzzResult)
async def buzz(
    buzz_data: BuzzRequest,
    db: Session = Depends(get_db)
):
    """队伍抢答"""
    service = BuzzService(db)
    try:
        return await service.buzz(buzz_data.team_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/unlock", response_model=GameStateResponse)
async def unlock(db: Session = Depends(get_db)):
    """解锁抢答器"""
    service = BuzzService(db)
    return await service.unlock()

@router.post("/judge", response_model=TeamResponse)
async def judge_answer(
    judge_data: JudgeRequest,
    db: Session = Depends(get_db)
):
    """判定答题结果"""
    service = ScoringService(db)
    try:
        return await service.judge_answer(judge_data.is_correct, judge_data.team_id)
    except ValueError as e:
        raise to_http_error(e)

@router.post("/end", response_model=WinnerResponse)
async def end_quiz(db: Session = Depends(get_db)):
    """结束比赛并公布获胜者"""
    service = ScoringService(db)
    try:
        return await service.end_quiz()
    except ValueError as e:
        raise to_http_error(e)

@router.post("/dismiss-winner")
async def dismiss_winner(db: Session = Depends(get_db)):
    """提前关闭获胜公告"""
    service = ScoringService(db)
    cancelled = await service.dismiss_winner()
    return {"message": "获胜公告已关闭", "cancelled": cancelled}

@router.post("/reset", response_model=GameStateResponse)
async def reset_game(db: Session = Depends(get_db)):
    """重置比赛"""
    service = ScoringService(db)
    return await service.reset_game()
