"""
应用配置模块
"""

from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """应用设置"""
    
    # 基础设置
    APP_NAME: str = "Quiz Buzzer"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # 服务器设置
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    
    # 数据库设置
    DATABASE_URL: str = "sqlite:///./quiz_buzzer.db"
    
    # 比赛设置
    MAX_TEAMS: int = 4                      # 队伍席位数量
    MAX_QUESTIONS_PER_SESSION: int = 20     # 每个场次最多题目数
    CORRECT_ANSWER_POINTS: int = 10         # 答对加分
    WRONG_ANSWER_PENALTY: int = 0           # 答错扣分
    WELCOME_TEXT: str = "Welcome to the Quiz!"
    QUIZ_ENDED_TEXT: str = "Quiz Ended - Check Results!"
    
    # 展示设置
    WINNER_DISPLAY_SECONDS: float = 10.0            # 获胜弹窗自动关闭时间（秒）
    SESSION_COMPLETION_POLL_INTERVAL: float = 2.0   # 场次完成状态的轮询间隔（秒）
    
    # WebSocket设置
    WS_HEARTBEAT_INTERVAL: int = 30
    
    class Config:
        env_file = ".env"
        case_sensitive = True

# 全局设置实例
settings = Settings()
