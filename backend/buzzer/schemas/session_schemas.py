"""
场次与题目相关的数据模式
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime

class SessionCreate(BaseModel):
    """创建场次的请求模式"""
    session_name: str = Field(..., min_length=1, max_length=100, description="场次名称")

class SessionResponse(BaseModel):
    """场次响应模式"""
    id: int
    session_name: str
    session_number: int
    is_active: bool
    is_completed: bool
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    
    @field_serializer('created_at', 'completed_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        if dt is None:
            return None
        return dt.isoformat() + 'Z'
    
    class Config:
        from_attributes = True

class SessionCompletion(BaseModel):
    """场次完成状态（轮询用）"""
    session_id: int
    is_completed: bool
    poll_interval: float

class QuestionCreate(BaseModel):
    """添加题目的请求模式"""
    question_text: str = Field(..., min_length=1, description="题目内容")
    image_url: Optional[str] = Field(None, max_length=500, description="题目图片地址（可选）")

class QuestionUpdate(BaseModel):
    """更新题目的请求模式"""
    question_text: str = Field(..., min_length=1, description="题目内容")
    image_url: Optional[str] = Field(None, max_length=500, description="题目图片地址（可选）")

class QuestionResponse(BaseModel):
    """题目响应模式"""
    id: int
    session_id: int
    order_index: int
    question_text: str
    image_url: Optional[str] = None
    
    class Config:
        from_attributes = True
