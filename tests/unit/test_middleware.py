import re

from fastapi import FastAPI
from fastapi.testclient import TestClient

from reading_insights.context import request_id_var
from reading_insights.middleware import REQUEST_ID_HEADER, RequestContextMiddleware


def make_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/")
    def read_root() -> dict:
        return {"request_id": request_id_var.get()}

    return TestClient(app)


def test_request_id_is_propagated_from_header() -> None:
    client = make_client()

    response = client.get("/", headers={"X-Request-Id": "req-456"})

    assert response.status_code == 200
    assert response.json() == {"request_id": "req-456"}
    assert response.headers[REQUEST_ID_HEADER] == "req-456"


def test_request_id_is_generated_when_missing() -> None:
    client = make_client()

    response = client.get("/")

    request_id = response.json()["request_id"]
    assert re.fullmatch(r"req-[0-9a-f]{12}", request_id)
    assert response.headers[REQUEST_ID_HEADER] == request_id


def test_request_id_is_reset_after_request() -> None:
    client = make_client()

    client.get("/", headers={"X-Request-Id": "req-789"})

    assert request_id_var.get() is None
