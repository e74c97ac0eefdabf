"""
测试公共夹具：每个测试使用独立的临时SQLite数据库
"""

import asyncio
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from buzzer.core.database import build_engine, create_tables, get_db
from buzzer.services import (
    TeamService, QuestionService, SessionService, BuzzService, ScoringService,
    WinnerAnnouncement, WebSocketManager
)
from buzzer.services.game_state import get_game_state


class RecordingManager(WebSocketManager):
    """只记录广播内容的WebSocket管理器"""

    def __init__(self):
        super().__init__()
        self.messages = []
        self.team_messages = []

    async def broadcast(self, message: dict):
        self.messages.append(message)

    async def send_to_team(self, message: dict, team_id: int):
        self.team_messages.append((team_id, message))

    def types(self):
        return [message["type"] for message in self.messages]


class Services:
    """把所有服务绑定到同一个数据库会话"""

    def __init__(self, db, manager, announcement):
        self.db = db
        self.teams = TeamService(db, manager)
        self.questions = QuestionService(db, manager)
        self.sessions = SessionService(db, manager)
        self.buzz = BuzzService(db, manager)
        self.scoring = ScoringService(db, manager, announcement)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'buzzer_test.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    get_game_state(db)
    db.commit()
    db.close()
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def manager():
    return RecordingManager()


@pytest.fixture
def announcement(manager):
    return WinnerAnnouncement(manager, display_seconds=0.05)


@pytest.fixture
def services(db, manager, announcement):
    return Services(db, manager, announcement)


@pytest.fixture
def run():
    """在新的事件循环中执行协程"""
    return asyncio.run


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
