"""
答题判定记录数据模型
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from buzzer.core.database import Base

class RoundResult(Base):
    """答题判定表，用于场次排行榜统计"""
    __tablename__ = "round_results"
    
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=True)  # 题目删除后置空
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    is_correct = Column(Boolean, nullable=False)
    points = Column(Integer, nullable=False, default=0)  # 本次判定的分数变化
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 关系
    team = relationship("Team")
