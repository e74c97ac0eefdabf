# 导入全部模型，保证关系映射可以按名称解析
from .team import Team
from .quiz_session import QuizSession
from .question import Question
from .game_state import GameState, GAME_STATE_ID
from .buzz_event import BuzzEvent
from .round_result import RoundResult

__all__ = ["Team", "QuizSession", "Question", "GameState", "GAME_STATE_ID", "BuzzEvent", "RoundResult"]
