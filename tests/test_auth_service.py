"""Tests for the authorization flow."""

import asyncio

import pytest

from calorie_tracker.domain.auth import AuthSession, CredentialPair
from calorie_tracker.domain.errors import AuthorizationError, NotAuthenticatedError
from calorie_tracker.services.auth import SHEETS_SCOPE, AuthorizationService
from tests.conftest import FakeOAuthClient, InMemoryCredentialStore


def _service(
    store: InMemoryCredentialStore | None = None,
    oauth: FakeOAuthClient | None = None,
) -> AuthorizationService:
    return AuthorizationService(
        oauth_client=oauth or FakeOAuthClient(),
        credential_store=store or InMemoryCredentialStore(),
    )


def test_begin_requests_spreadsheet_scope() -> None:
    url = _service().begin()

    assert SHEETS_SCOPE in url


def test_callback_persists_tokens_and_authorizes() -> None:
    store = InMemoryCredentialStore()
    service = _service(store)
    assert service.status() is False

    asyncio.run(service.callback("auth-code"))

    assert service.status() is True
    assert store.current.refresh_token == "refresh-1"


def test_callback_failure_stays_unauthenticated() -> None:
    store = InMemoryCredentialStore()
    service = _service(store, FakeOAuthClient(fail_exchange=True))

    with pytest.raises(AuthorizationError):
        asyncio.run(service.callback("bad-code"))

    assert service.status() is False
    assert store.saved == []


def test_callback_without_code_fails() -> None:
    with pytest.raises(AuthorizationError):
        asyncio.run(_service().callback(None))


def test_disconnect_clears_credentials() -> None:
    store = InMemoryCredentialStore(
        current=CredentialPair(access_token="a", refresh_token="r")
    )
    service = _service(store)

    service.disconnect()

    assert service.status() is False
    assert service.session() is None


def test_require_session_raises_when_unauthenticated() -> None:
    with pytest.raises(NotAuthenticatedError):
        _service().require_session()


def test_refresh_then_after_call_persists_merged_tokens() -> None:
    store = InMemoryCredentialStore(
        current=CredentialPair(
            access_token="access-1", refresh_token="refresh-1", expiry_date=1
        )
    )
    service = _service(store)
    session = service.require_session()

    asyncio.run(service.refresh(session))
    assert session.access_token == "access-2"
    assert session.refresh_token == "refresh-1"

    service.after_call(session)

    assert session.pending_refresh is None
    assert store.current.access_token == "access-2"
    assert store.current.refresh_token == "refresh-1"


def test_after_call_without_refresh_does_not_save() -> None:
    store = InMemoryCredentialStore()
    service = _service(store)

    service.after_call(
        AuthSession(credentials=CredentialPair(access_token="a", refresh_token="r"))
    )

    assert store.saved == []


def test_after_call_swallows_persistence_errors() -> None:
    store = InMemoryCredentialStore(fail_on_save=True)
    service = _service(store)
    session = AuthSession(credentials=CredentialPair(access_token="a"))
    session.apply_refresh(CredentialPair(access_token="b"))

    service.after_call(session)

    assert session.pending_refresh is None


def test_refresh_skips_unexpired_token() -> None:
    oauth = FakeOAuthClient()
    service = _service(
        InMemoryCredentialStore(
            current=CredentialPair(access_token="access-1", refresh_token="refresh-1")
        ),
        oauth,
    )
    session = service.require_session()

    asyncio.run(service.refresh(session))

    assert oauth.refresh_calls == 0
    assert session.access_token == "access-1"
    assert session.pending_refresh is None
