"""
场次数据模型
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from buzzer.core.database import Base

class QuizSession(Base):
    """比赛场次表"""
    __tablename__ = "sessions"
    
    id = Column(Integer, primary_key=True, index=True)
    session_name = Column(String(100), nullable=False)
    session_number = Column(Integer, nullable=False)   # 场次序号
    is_active = Column(Boolean, nullable=False, default=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    
    # 关系
    questions = relationship("Question", back_populates="session", order_by="Question.order_index",
                             cascade="all, delete-orphan")
