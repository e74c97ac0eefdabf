"""
全局比赛状态数据模型（单行）
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, Boolean, String
from sqlalchemy.sql import func
from buzzer.core.database import Base

GAME_STATE_ID = 1

class GameState(Base):
    """比赛状态表，全局只有一行"""
    __tablename__ = "game_state"
    
    id = Column(Integer, primary_key=True, default=GAME_STATE_ID)
    current_question = Column(Text, nullable=True)                 # 当前展示的题目文本
    image_url = Column(String(500), nullable=True)
    current_question_id = Column(Integer, ForeignKey("questions.id"), nullable=True)
    current_session_id = Column(Integer, ForeignKey("sessions.id"), nullable=True)
    session_question_index = Column(Integer, nullable=False, default=0)  # 当前题目在场次中的位置（从0开始）
    is_locked = Column(Boolean, nullable=False, default=False)
    first_buzzer_team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    winner_team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    quiz_ended = Column(Boolean, nullable=False, default=False)
    buzz_window = Column(Integer, nullable=False, default=0)       # 抢答窗口编号，每次解锁或换题递增
    version = Column(Integer, nullable=False, default=0)           # 每次修改递增
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
