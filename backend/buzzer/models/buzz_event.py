"""
抢答记录数据模型
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from buzzer.core.database import Base

class BuzzEvent(Base):
    """抢答记录表，换题时清空"""
    __tablename__ = "buzz_events"
    
    id = Column(Integer, primary_key=True, index=True)   # 自增主键即抢答先后顺序
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    buzz_window = Column(Integer, nullable=False)        # 所属抢答窗口
    accepted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # 关系
    team = relationship("Team")
