import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.branchstock.core.config import settings
from app.branchstock.core.db_timing import add_query_time, is_timing


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, echo=False, future=True, **_engine_options(settings.DATABASE_URL))


@event.listens_for(engine, "before_cursor_execute")
def _start_query_timer(conn, cursor, statement, parameters, context, executemany):
    if is_timing():
        conn.info["query_start_time"] = time.perf_counter()


@event.listens_for(engine, "after_cursor_execute")
def _stop_query_timer(conn, cursor, statement, parameters, context, executemany):
    start = conn.info.pop("query_start_time", None)
    if start is not None:
        add_query_time((time.perf_counter() - start) * 1000)


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    """Request-scoped unit of work; services decide when to commit."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
