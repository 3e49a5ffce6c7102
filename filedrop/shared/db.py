from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from fastapi import Request

class Base(DeclarativeBase):
    pass

def make_engine(db_url: str) -> Engine:
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        # SQLite connections are shared across the request threadpool
        return create_engine(db_url, connect_args={"check_same_thread": False})
    return create_engine(db_url, pool_pre_ping=True, pool_recycle=3600)

def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)

def ensure_sqlite_parent(db_url: str) -> None:
    """Create the directory holding a file-backed SQLite database (no-op for other backends)."""
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

def init_db(engine: Engine) -> None:
    # import models so they register with Base.metadata
    from filedrop.files import models as files_models  # noqa: F401
    Base.metadata.create_all(bind=engine)

# FastAPI dep
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
