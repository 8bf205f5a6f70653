from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import Settings


Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one application instance.

    Built once by ``create_app`` and disposed by its shutdown hook.
    """

    def __init__(self, url: str, engine: Optional[Engine] = None, pool_size: int = 5, max_overflow: int = 10):
        if engine is None:
            is_sqlite = url.startswith("sqlite")
            engine_kwargs = {"future": True, "pool_pre_ping": True}
            if is_sqlite:
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600)
            engine = create_engine(url, **engine_kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        self.engine = engine
        # IMPORTANT: do not use scoped_session with async frameworks; create a fresh Session per request
        self.session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        from .models import models  # noqa: F401  register tables

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
