"""
队伍相关的数据模式
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime

class TeamCreate(BaseModel):
    """注册队伍的请求模式"""
    team_number: int = Field(..., description="席位编号")
    team_name: str = Field(..., min_length=1, max_length=50, description="队伍名称")

class TeamResponse(BaseModel):
    """队伍响应模式"""
    id: int
    team_number: int
    team_name: str
    score: int
    created_at: Optional[datetime] = None
    
    @field_serializer('created_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        if dt is None:
            return None
        return dt.isoformat() + 'Z'
    
    class Config:
        from_attributes = True

class ScoreAdjust(BaseModel):
    """分数调整请求"""
    delta: int = Field(..., description="分数变化，可以为负数")

class SlotAvailability(BaseModel):
    """席位占用情况"""
    max_teams: int
    available: List[int]
    taken: List[int]
