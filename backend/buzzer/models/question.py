"""
题目数据模型
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from buzzer.core.database import Base

class Question(Base):
    """题目表"""
    __tablename__ = "questions"
    
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False)      # 场次内顺序，从1开始且连续
    question_text = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=True)     # 图片地址（由外部存储提供）
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 关系
    session = relationship("QuizSession", back_populates="questions")
