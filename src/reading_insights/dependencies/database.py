from collections.abc import Iterator

from sqlalchemy.orm import Session

from reading_insights.database import SessionLocal


def get_db_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
