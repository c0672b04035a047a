"""Unit tests for AuthClient against a mocked HTTP transport."""

import httpx
import pytest

from schoolflow.client.auth_client import (
    ADMIN_ENDPOINTS,
    TEACHER_ENDPOINTS,
    AuthClient,
    AuthState,
)


SESSION_BODY = {
    "authenticated": True,
    "session": {
        "userId": "u1",
        "email": "admin@greenfield.test",
        "role": "school_admin",
        "schoolId": "SCH-001",
    },
}


def make_auth_client(handler, endpoints=ADMIN_ENDPOINTS) -> AuthClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver")
    return AuthClient(http, endpoints)


def unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestCheckAuth:
    def test_initial_state_is_loading(self):
        client = make_auth_client(unreachable)
        assert client.state == AuthState(user=None, loading=True, authenticated=False)

    @pytest.mark.asyncio
    async def test_authenticated(self):
        client = make_auth_client(lambda request: httpx.Response(200, json=SESSION_BODY))

        state = await client.check_auth()

        assert state.authenticated is True
        assert state.loading is False
        assert state.user.role == "school_admin"
        assert state.user.schoolId == "SCH-001"

    @pytest.mark.asyncio
    async def test_unauthenticated_response(self):
        client = make_auth_client(
            lambda request: httpx.Response(401, json={"authenticated": False, "session": None})
        )

        state = await client.check_auth()

        assert state == AuthState(user=None, loading=False, authenticated=False)

    @pytest.mark.asyncio
    async def test_network_error_never_raises(self):
        client = make_auth_client(unreachable)

        state = await client.check_auth()

        assert state.authenticated is False
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = make_auth_client(lambda request: httpx.Response(200, text="<html>"))

        state = await client.check_auth()

        assert state.authenticated is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"authenticated": True, "session": {"userId": "u1", "role": "school_admin"}},
        {"authenticated": True, "session": "u1"},
        {"authenticated": True, "session": ["u1"]},
    ])
    async def test_incomplete_session_is_unauthenticated(self, body):
        client = make_auth_client(lambda request: httpx.Response(200, json=body))

        state = await client.check_auth()

        assert state == AuthState(user=None, loading=False, authenticated=False)

    @pytest.mark.asyncio
    async def test_teacher_profile_hits_teacher_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(401, json={"authenticated": False, "session": None})

        await make_auth_client(handler, TEACHER_ENDPOINTS).check_auth()

        assert seen == ["/api/teacher-auth/session"]


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_hydrates_state(self):
        def handler(request):
            if request.url.path == "/api/auth/login":
                return httpx.Response(200, json={
                    "success": True,
                    "message": "Login successful",
                    "data": {"role": "school_admin", "redirectTo": "/school-admin", "user": {}},
                })
            return httpx.Response(200, json=SESSION_BODY)

        client = make_auth_client(handler)
        result = await client.login("admin@greenfield.test", "Passw0rd123")

        assert result.success is True
        assert result.role == "school_admin"
        assert result.redirectTo == "/school-admin"
        assert client.state.authenticated is True

    @pytest.mark.asyncio
    async def test_failure_carries_server_message(self):
        client = make_auth_client(lambda request: httpx.Response(401, json={
            "success": False,
            "error": {"message": "Invalid credentials", "code": "INVALID_CREDENTIALS"},
        }))

        result = await client.login("admin@greenfield.test", "nope")

        assert result.success is False
        assert result.message == "Invalid credentials"
        assert client.state.authenticated is False

    @pytest.mark.asyncio
    async def test_network_error(self):
        result = await make_auth_client(unreachable).login("a@b.test", "x")

        assert result.success is False
        assert result.message == "Login failed. Please try again."

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        def handler(request):
            if request.url.path == "/api/auth/login":
                return httpx.Response(200, text="OK")
            return httpx.Response(200, json=SESSION_BODY)

        result = await make_auth_client(handler).login("admin@greenfield.test", "Passw0rd123")

        assert result.success is True
        assert result.message == "Login successful"
        assert result.role is None


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_resets_state_even_on_error(self):
        client = make_auth_client(unreachable, TEACHER_ENDPOINTS)
        client.state = AuthState(user=None, loading=False, authenticated=True)

        login_page = await client.logout()

        assert login_page == "/teacher/login"
        assert client.state.authenticated is False


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_success(self):
        client = make_auth_client(lambda request: httpx.Response(200, json={
            "success": True, "message": "Password changed successfully",
        }))

        result = await client.change_password("old", "NewPassw0rd")

        assert result.success is True
        assert result.message == "Password changed successfully"

    @pytest.mark.asyncio
    async def test_rejected(self):
        client = make_auth_client(lambda request: httpx.Response(400, json={
            "success": False,
            "error": {"message": "Current password is incorrect"},
        }))

        result = await client.change_password("old", "NewPassw0rd")

        assert result.success is False
        assert result.error == "Current password is incorrect"


class TestFetchStatus:
    @pytest.mark.asyncio
    async def test_status(self):
        client = make_auth_client(lambda request: httpx.Response(200, json={
            "success": True, "data": {"role": "teacher", "status": "active"},
        }))

        result = await client.fetch_status()

        assert result.role == "teacher"
        assert result.status == "active"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("handler", [
        unreachable,
        lambda request: httpx.Response(500, json={"success": False}),
        lambda request: httpx.Response(200, json={"success": True, "data": {}}),
    ])
    async def test_unreadable_status(self, handler):
        assert await make_auth_client(handler).fetch_status() is None
