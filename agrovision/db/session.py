import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agrovision.db import models

logger = logging.getLogger(__name__)


class Database:
    """Store handle owned by the application lifespan."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        if self.engine is not None:
            return
        kwargs: dict = {}
        if self.is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite+pysqlite://"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self.engine = create_engine(self.url, **kwargs)
        self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("database connected dialect=%s", self.engine.dialect.name)

    def create_schema(self) -> None:
        models.Base.metadata.create_all(bind=self._require_engine())

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database.connect() must be called before opening sessions")
        return self._sessionmaker()

    def disconnect(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        logger.info("database disconnected")

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Database.connect() must be called first")
        return self.engine


def get_db(request: Request) -> Generator[Session, None, None]:
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
