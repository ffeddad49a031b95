from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Optional
import logging

from timelens.models.base import Base
# Registers the tables on Base.metadata
from timelens.database import models  # noqa: F401

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or 'sqlite://'

        engine_kwargs = {}
        if self.database_url.startswith('sqlite'):
            engine_kwargs['connect_args'] = {'check_same_thread': False}
            if self._is_memory_url(self.database_url):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs['poolclass'] = StaticPool

        self.engine = create_engine(self.database_url, **engine_kwargs)

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database tables ready at {self._safe_url()}")

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    @staticmethod
    def _is_memory_url(url: str) -> bool:
        return url in ('sqlite://', 'sqlite:///:memory:', 'sqlite+pysqlite://', 'sqlite+pysqlite:///:memory:')

    def _safe_url(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    def table_names(self):
        return inspect(self.engine).get_table_names()

    def get_session(self):
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()
