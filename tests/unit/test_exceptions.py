"""Tests for the error taxonomy and the response envelope."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from src.lexora.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    ServiceErrorType,
    ValidationError,
    setup_exception_handlers,
    translate_integrity_error,
)

pytestmark = pytest.mark.unit


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("error", "status_code", "error_type"),
        [
            (ValidationError("x"), 400, "validation_error"),
            (AuthenticationError("x"), 401, "auth_error"),
            (ForbiddenError("x"), 403, "forbidden"),
            (NotFoundError("x"), 404, "not_found"),
            (NetworkError("x"), 503, "network_error"),
        ],
    )
    def test_error_classes(self, error, status_code, error_type):
        assert error.status_code == status_code
        assert error.error_type.value == error_type

    def test_explicit_type_overrides_class_default(self):
        error = ValidationError("x", error_type=ServiceErrorType.SERVER_ERROR)

        assert error.status_code == 500


class TestTranslateIntegrityError:
    def test_sqlite_team_name(self):
        error = integrity_error("UNIQUE constraint failed: teams.organization_id, teams.name")

        translated = translate_integrity_error(error)

        assert translated.message == "A team with this name already exists in the organization"
        assert translated.status_code == 400

    def test_postgres_constraint_name(self):
        error = integrity_error(
            'duplicate key value violates unique constraint "uq_users_email"'
        )

        assert translate_integrity_error(error).message == "A user with this email already exists"

    def test_unknown_constraint(self):
        error = integrity_error("something else entirely")

        assert translate_integrity_error(error).message == "Request conflicts with existing data"


@pytest.fixture
def app() -> FastAPI:
    application = FastAPI()
    setup_exception_handlers(application)

    @application.get("/forbidden")
    async def forbidden():
        raise ForbiddenError("No valid license found")

    @application.get("/conflict")
    async def conflict():
        raise integrity_error("UNIQUE constraint failed: users.email")

    @application.get("/boom")
    async def boom():
        raise RuntimeError("secret detail")

    @application.get("/items/{item_id}")
    async def item(item_id: int):
        return {"id": item_id}

    return application


@pytest.fixture
async def client(app: FastAPI):
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


class TestHandlers:
    async def test_app_error_envelope(self, client: AsyncClient):
        response = await client.get("/forbidden")

        assert response.status_code == 403
        body = response.json()
        assert body["status"] == "error"
        assert body["error"] == {"type": "forbidden", "message": "No valid license found"}
        assert "request_id" in body

    async def test_integrity_error(self, client: AsyncClient):
        response = await client.get("/conflict")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "A user with this email already exists"

    async def test_unhandled_error_hides_detail(self, client: AsyncClient):
        response = await client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error"] == {
            "type": "server_error",
            "message": "An unexpected error occurred",
        }

    async def test_request_validation(self, client: AsyncClient):
        response = await client.get("/items/abc")

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "validation_error"
        assert response.json()["error"]["message"].startswith("item_id:")

    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/missing")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "not_found"
