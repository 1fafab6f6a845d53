from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from factories import CATALOG_URL, DataFactory
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reading_insights.database import Base
from reading_insights.dependencies.auth import get_user_id
from reading_insights.main import app
from reading_insights.services.cache import TTLCache
from reading_insights.services.catalog_client import CatalogClient


@pytest.fixture(autouse=True)
def clear_dependency_overrides() -> Iterator[None]:
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine) -> Iterator[Session]:
    connection = db_engine.connect()
    transaction = connection.begin()
    session_factory = sessionmaker(bind=connection)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def test_user_id() -> str:
    return "user_2abcDEF"


@pytest.fixture
def client(db_session: Session) -> Iterator[TestClient]:
    from reading_insights.dependencies.database import get_db_session

    def override_get_db_session() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client_with_overrides(client: TestClient, test_user_id: str) -> Iterator[TestClient]:
    def override_get_user_id() -> str:
        return test_user_id

    app.dependency_overrides[get_user_id] = override_get_user_id

    yield client


@pytest.fixture
def test_data(db_session: Session) -> DataFactory:
    return DataFactory(db_session)


async def _no_sleep(_: float) -> None:
    return None


@pytest.fixture
def make_catalog_client() -> Callable[..., CatalogClient]:
    """Build a real CatalogClient over an ``httpx.MockTransport``."""

    def factory(
        handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any
    ) -> CatalogClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        kwargs.setdefault("sleep", _no_sleep)
        kwargs.setdefault("cache", TTLCache(ttl_seconds=3600.0))
        return CatalogClient(http_client, CATALOG_URL, **kwargs)

    return factory
