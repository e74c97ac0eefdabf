"""
比赛状态相关的数据模式
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime

from buzzer.schemas.team_schemas import TeamResponse

class BuzzRequest(BaseModel):
    """抢答请求"""
    team_id: int

class BuzzResult(BaseModel):
    """抢答结果，被拒绝不是错误"""
    accepted: bool
    reason: Optional[str] = None           # already_locked, already_buzzed, quiz_ended
    team_id: int
    first_buzzer_team_id: Optional[int] = None
    position: Optional[int] = None         # 本轮抢答窗口中的顺序（从1开始）

class BuzzEventInfo(BaseModel):
    """抢答记录"""
    id: int
    team_id: int
    team_name: Optional[str] = None
    accepted: bool
    buzz_window: int
    created_at: Optional[datetime] = None
    
    @field_serializer('created_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        if dt is None:
            return None
        return dt.isoformat() + 'Z'
    
    class Config:
        from_attributes = True

class GameStateResponse(BaseModel):
    """比赛状态快照"""
    current_question: Optional[str] = None
    image_url: Optional[str] = None
    current_question_id: Optional[int] = None
    current_session_id: Optional[int] = None
    session_question_index: int = 0
    question_count: int = 0
    is_locked: bool = False
    first_buzzer: Optional[TeamResponse] = None
    winner: Optional[TeamResponse] = None
    quiz_ended: bool = False
    buzz_window: int = 0
    version: int = 0
    buzz_events: List[BuzzEventInfo] = []

class QuestionPush(BaseModel):
    """主持人直接推送题目的请求"""
    question_text: str = Field(..., min_length=1, description="题目内容")
    image_url: Optional[str] = Field(None, max_length=500, description="题目图片地址（可选）")

class JudgeRequest(BaseModel):
    """判定答题结果的请求"""
    team_id: Optional[int] = Field(None, description="答题队伍，默认为抢答成功的队伍")
    is_correct: bool

class LeaderboardEntry(BaseModel):
    """排行榜条目"""
    rank: int
    team_id: int
    team_name: str
    team_number: int
    score: int
    questions_answered: int
    correct_answers: int
    accuracy: float

class WinnerResponse(BaseModel):
    """比赛结束结果"""
    winner: TeamResponse
    tied_team_ids: List[int] = []
    display_seconds: float
