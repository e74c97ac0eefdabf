# 业务逻辑服务包
from .team_service import TeamService
from .question_service import QuestionService
from .session_service import SessionService
from .buzz_service import BuzzService
from .scoring_service import ScoringService
from .announcement_service import WinnerAnnouncement
from .websocket_service import WebSocketManager

__all__ = [
    "TeamService", "QuestionService", "SessionService", "BuzzService",
    "ScoringService", "WinnerAnnouncement", "WebSocketManager"
]
