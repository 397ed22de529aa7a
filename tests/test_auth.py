import httpx
import pytest

from homefin.auth import AuthService, AuthState
from homefin.errors import ApiError

PROFILE = {
    "id": "u1",
    "username": "jdoe",
    "email": "jdoe@example.com",
    "first_name": "Jane",
    "last_name": "Doe",
    "is_company": False,
}


async def test_login_stores_both_tokens(backend, client, session) -> None:
    session.clear()
    backend.add("POST", "/auth/token/", json_body={"access": "a", "refresh": "r"})

    await AuthService(client).login("jdoe", "secret")

    assert (session.access_token, session.refresh_token) == ("a", "r")
    request = backend.calls("POST", "/auth/token/")[0]
    assert backend.body(request) == {"username": "jdoe", "password": "secret"}


async def test_login_rejected_does_not_try_refresh(backend, client) -> None:
    backend.add(
        "POST",
        "/auth/token/",
        status=401,
        json_body={"detail": "No active account found with the given credentials"},
    )

    with pytest.raises(ApiError) as excinfo:
        await AuthService(client).login("jdoe", "wrong")

    assert excinfo.value.status_code == 401
    assert backend.calls("POST", "/auth/refresh/") == []


async def test_logout_always_clears_tokens(backend, client, session) -> None:
    backend.add("POST", "/auth/logout/", status=500, json_body={"detail": "boom"})

    await AuthService(client).logout()

    assert not session.is_authenticated
    assert session.refresh_token is None


async def test_refresh_token(backend, client, session) -> None:
    backend.add("POST", "/auth/refresh/", json_body={"access": "fresh"})

    access = await AuthService(client).refresh_token()

    assert access == "fresh"
    assert session.access_token == "fresh"
    assert session.refresh_token == "refresh-1"


async def test_get_profile_accepts_list_or_object(backend, client, session) -> None:
    auth = AuthService(client)

    backend.add("GET", "/profile/", json_body=[PROFILE])
    from_list = await auth.get_profile()
    backend.add("GET", "/profile/", json_body=PROFILE)
    from_object = await auth.get_profile()

    assert from_list == from_object
    assert session.profile.display_name == "Jane Doe"


async def test_update_profile_fills_id_from_current_profile(backend, client) -> None:
    backend.add("GET", "/profile/", json_body=[PROFILE])

    def update(request):
        return httpx.Response(200, json={**PROFILE, **backend.body(request)})

    backend.add("PUT", "/profile/u1/", handler=update)

    profile = await AuthService(client).update_profile({"first_name": "Janet"})

    assert profile.id == "u1"
    assert profile.first_name == "Janet"
    assert backend.body(backend.calls("PUT", "/profile/u1/")[0])["id"] == "u1"


async def test_auth_state_login_failure_sets_error(backend, client) -> None:
    backend.add(
        "POST", "/auth/token/", status=401, json_body={"detail": "Bad credentials"}
    )
    state = AuthState(AuthService(client))

    with pytest.raises(ApiError):
        await state.login("jdoe", "wrong")

    assert state.error == "Bad credentials"
    assert state.is_loading is False


async def test_auth_state_login_failure_without_detail(backend, client) -> None:
    backend.add("POST", "/auth/token/", status=401)
    state = AuthState(AuthService(client))

    with pytest.raises(ApiError):
        await state.login("jdoe", "wrong")

    assert state.error == "Login failed"


async def test_auth_state_login_loads_profile(backend, client) -> None:
    backend.add("POST", "/auth/token/", json_body={"access": "a", "refresh": "r"})
    backend.add("GET", "/profile/", json_body=PROFILE)
    state = AuthState(AuthService(client))

    await state.login("jdoe", "secret")

    assert state.is_authenticated
    assert state.user.username == "jdoe"
    assert state.error is None


async def test_load_profile_unauthorized_clears_session(
    backend, client, session
) -> None:
    session.refresh_token = None
    backend.add("GET", "/profile/", status=401)
    state = AuthState(AuthService(client))

    assert await state.load_profile() is None

    assert not state.is_authenticated


async def test_load_profile_other_error_sets_message(backend, client, session) -> None:
    backend.add("GET", "/profile/", status=500, json_body={"detail": "boom"})
    state = AuthState(AuthService(client))

    assert await state.load_profile() is None

    assert state.error == "Failed to load profile"
    assert session.is_authenticated
