"""
数据库配置
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker

from buzzer.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """根据数据库地址创建引擎"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=False  # 设置为True可以看到SQL查询日志
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind) -> None:
    """创建所有表"""
    # 导入所有模型，确保注册到Base.metadata
    from buzzer.models.team import Team
    from buzzer.models.quiz_session import QuizSession
    from buzzer.models.question import Question
    from buzzer.models.game_state import GameState
    from buzzer.models.buzz_event import BuzzEvent
    from buzzer.models.round_result import RoundResult
    
    Base.metadata.create_all(bind=bind)

async def init_db():
    """初始化数据库"""
    create_tables(engine)
    
    # 确保全局比赛状态行存在
    from buzzer.services.game_state import get_game_state
    db = SessionLocal()
    try:
        get_game_state(db)
        db.commit()
    finally:
        db.close()
    
    logger.info("✅ 数据库初始化完成: %s", settings.DATABASE_URL)
