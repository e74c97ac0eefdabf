"""
队伍数据模型
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from buzzer.core.database import Base

class Team(Base):
    """队伍表"""
    __tablename__ = "teams"
    
    id = Column(Integer, primary_key=True, index=True)          # 自增主键，同时代表注册先后顺序
    team_number = Column(Integer, nullable=False, unique=True)  # 席位编号 1..N，全局唯一
    team_name = Column(String(50), nullable=False)
    score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
