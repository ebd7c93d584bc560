"""
Tests for error responses and the request context middleware.
"""

import pytest
import uuid
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from rental_api.middleware import RequestContextMiddleware
from rental_api.services.error_handler import ErrorHandlerService
from rental_api.utils.exceptions import (
    LeaseOverlapError,
    NotFoundError,
    RateLimitExceededError,
    ResourceInUseError,
)


def make_guarded_app(**middleware_options) -> FastAPI:
    """Minimal app with a login route behind the middleware."""
    mini_app = FastAPI()
    mini_app.add_middleware(RequestContextMiddleware, **middleware_options)

    @mini_app.post("/login")
    async def login():
        return {"ok": True}

    @mini_app.post("/upload")
    async def upload():
        return {"ok": True}

    return mini_app


def guarded_client(**middleware_options) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=make_guarded_app(**middleware_options)), base_url="http://test")


def assert_error_shape(body: dict, code: str) -> dict:
    error = body["error"]
    assert error["code"] == code
    assert error["message"]
    assert error["timestamp"].endswith("Z")
    assert error["request_id"]
    return error


class TestErrorFormatting:
    """Test cases for ErrorHandlerService formatting."""

    def test_format_without_details(self):
        response = ErrorHandlerService.format_error_response("NOT_FOUND", "Missing", request_id="r1")

        assert response["error"]["code"] == "NOT_FOUND"
        assert response["error"]["request_id"] == "r1"
        assert "details" not in response["error"]

    def test_format_with_details(self):
        details = [{"field": "email", "message": "bad"}]
        response = ErrorHandlerService.format_error_response("VALIDATION_ERROR", "Invalid", details=details)

        assert response["error"]["details"] == details

    def test_api_exception_status_codes(self):
        """Domain errors carry their HTTP status."""
        assert NotFoundError("Lease", "1").status_code == 404
        assert LeaseOverlapError("p1").status_code == 409
        assert ResourceInUseError("User", "has leases").status_code == 409

    def test_rate_limit_error_has_retry_after(self):
        response = ErrorHandlerService.handle_api_exception(RateLimitExceededError(30))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"


class TestApiErrorResponses:
    """Test cases for error bodies produced by the application."""

    @pytest.mark.asyncio
    async def test_not_found_body(self, async_client):
        response = await async_client.get(f"/api/property/{uuid.uuid4()}")

        assert response.status_code == 404
        assert_error_shape(response.json(), "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_validation_error_lists_fields(self, async_client):
        response = await async_client.post("/api/user/register", json={"email": "not-an-email"})

        assert response.status_code == 422
        error = assert_error_shape(response.json(), "VALIDATION_ERROR")
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> email" in fields
        assert "body -> password" in fields

    @pytest.mark.asyncio
    async def test_malformed_uuid_is_validation_error(self, async_client):
        response = await async_client.get("/api/property/not-a-uuid")

        assert response.status_code == 422
        assert_error_shape(response.json(), "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_unknown_route(self, async_client):
        response = await async_client.get("/api/nowhere")

        assert response.status_code == 404
        assert_error_shape(response.json(), "HTTP_404")

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client):
        response = await async_client.get("/api/user/profile")

        assert response.status_code == 401
        assert_error_shape(response.json(), "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_garbage_token(self, async_client):
        response = await async_client.get(
            "/api/user/profile", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client):
        """The caller's request id is returned in the header and the error body."""
        response = await async_client.get(
            f"/api/property/{uuid.uuid4()}", headers={"X-Request-ID": "trace-42"}
        )

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["error"]["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, async_client):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert len(response.headers["X-Request-ID"]) == 8


class TestRequestContextMiddleware:
    """Test cases for size limits and login rate limiting."""

    @pytest.mark.asyncio
    async def test_rate_limit_on_listed_path(self):
        async with guarded_client(rate_limited_paths=("/login",), rate_limit_requests=2, rate_limit_window=60) as client:
            assert (await client.post("/login")).status_code == 200
            assert (await client.post("/login")).status_code == 200

            response = await client.post("/login")

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert_error_shape(response.json(), "RATE_LIMIT_EXCEEDED")

    @pytest.mark.asyncio
    async def test_rate_limit_is_per_client(self):
        async with guarded_client(rate_limited_paths=("/login",), rate_limit_requests=1) as client:
            assert (await client.post("/login", headers={"X-Forwarded-For": "10.0.0.1"})).status_code == 200
            assert (await client.post("/login", headers={"X-Forwarded-For": "10.0.0.1"})).status_code == 429
            assert (await client.post("/login", headers={"X-Forwarded-For": "10.0.0.2"})).status_code == 200

    @pytest.mark.asyncio
    async def test_other_paths_not_limited(self):
        async with guarded_client(rate_limited_paths=("/login",), rate_limit_requests=1) as client:
            for _ in range(3):
                assert (await client.post("/upload")).status_code == 200

    @pytest.mark.asyncio
    async def test_request_too_large(self):
        async with guarded_client(max_request_size=100) as client:
            response = await client.post("/upload", content=b"x" * 200)

        assert response.status_code == 400
        assert "exceeds maximum" in assert_error_shape(response.json(), "BAD_REQUEST")["message"]

    @pytest.mark.asyncio
    async def test_invalid_content_length(self):
        async with guarded_client() as client:
            response = await client.post("/upload", content=b"x", headers={"Content-Length": "abc"})

        assert response.status_code == 400
        assert "content-length" in response.json()["error"]["message"]
