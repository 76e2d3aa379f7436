"""
Async authentication service.

Owns the session lifecycle: login with credentials, login with an
externally issued token, logout.
"""
from typing import Any, Awaitable, Callable, Optional

from .async_client import AsyncAPIClient
from .events import EventEmitter
from .request import ApiRequest, Outcome, MISSING, BODY_FORM, BODY_JSON
from ..logging import get_logger
from ..utils import require_str, require_callback


def _token_field(payload: Any) -> Any:
    if isinstance(payload, dict) and payload.get('token'):
        return str(payload['token'])
    return MISSING


class AsyncAuthService:
    """
    Asynchronous authentication service.

    Successful login() and login_token() calls are the only writers of
    the stored token; logout() is the only remover. Both login paths
    emit 'login', logout emits 'reset'.
    """

    def __init__(self, client: AsyncAPIClient, events: Optional[EventEmitter] = None):
        """
        Initialize auth service.

        Args:
            client: Async API client
            events: Emitter receiving 'login' and 'reset'
        """
        self._client = client
        self._events = events or EventEmitter()
        self._logger = get_logger('dsbase.auth')

    def authenticated(self) -> bool:
        """True if a token is stored; the server still decides if it is valid."""
        return self._client.token_store.has_token()

    def get_token(self) -> Optional[str]:
        return self._client.token_store.get_token()

    def login(
        self,
        username: str,
        password: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Login with credentials.

        Posts the form-encoded credentials to /api/login and stores the
        `token` field of the JSON answer. A 200 answer without a token
        fails with 500.

        Args:
            username: User name
            password: Password
            callback: Optional ``callback(error)``

        Returns:
            Awaitable Outcome

        Raises:
            InvalidCallError: If an argument is missing or not a string
        """
        require_str(username, 'username')
        require_str(password, 'password')
        require_callback(callback)

        request = ApiRequest(
            'POST',
            self._client.api_url('login'),
            auth=False,
            body_kind=BODY_FORM,
            body={'username': username, 'password': password},
            expect_json=True,
            extract=_token_field,
            on_success=self._store_token,
        )
        return self._client.invoke(request, callback)

    def login_token(
        self,
        token: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Login with an externally supplied token.

        The token is checked against /api/valid as bearer credential and
        persisted as-is when the server answers 200.

        Raises:
            InvalidCallError: If token is not a string
        """
        require_str(token, 'token')
        require_callback(callback)

        request = ApiRequest(
            'POST',
            self._client.api_url('valid'),
            bearer=token,
            body_kind=BODY_JSON,
            body={},
            on_success=lambda _: self._store_token(token),
        )
        return self._client.invoke(request, callback)

    def logout(self) -> None:
        """Forget the stored token and emit 'reset'."""
        self._client.token_store.clear_token()
        self._logger.info("Logged out")
        self._events.emit('reset')

    def _store_token(self, token: str) -> None:
        self._client.token_store.set_token(token)
        self._logger.info("Logged in")
        self._events.emit('login')
