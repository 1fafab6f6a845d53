from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from reading_insights.config import settings

engine = create_engine(settings.database_url, echo=False, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass
