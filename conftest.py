import pytest
from fastapi.testclient import TestClient

from timelens.api.main import create_app
from timelens.config.manager import ConfigManager
from timelens.database.connection import DatabaseManager
from timelens.nlp.classifier import KeywordClassifier
from timelens.services.event_store import EventStore


@pytest.fixture
def config(monkeypatch, tmp_path):
    """Config isolated from the developer's .env and keyring"""
    for name in ('OPENAI_API_KEY', 'OPENAI_MODEL', 'OPENAI_TIMEOUT', 'DATABASE_URL', 'TIMEZONE',
                 'DEMO_USERNAME', 'ANALYTICS_DAYS', 'SESSION_SECRET', 'SESSION_MAX_AGE', 'DEBUG',
                 'GOOGLE_CLIENT_ID', 'GOOGLE_CLIENT_SECRET', 'PORT', 'HOST'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(ConfigManager, '_get_secret', lambda self, key: None)
    return ConfigManager(env_file=str(tmp_path / '.env'))


@pytest.fixture
def db_manager():
    db = DatabaseManager('sqlite://')
    yield db
    db.dispose()


@pytest.fixture
def session(db_manager):
    with db_manager.get_session() as session:
        yield session


@pytest.fixture
def store(session):
    return EventStore(session)


@pytest.fixture
def app(config, db_manager):
    return create_app(config=config, db_manager=db_manager, classifier=KeywordClassifier())


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
