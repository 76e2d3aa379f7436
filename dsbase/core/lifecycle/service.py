"""Application lifecycle service: server versions, startup URL, install, update."""
from typing import Any, Awaitable, Callable, Optional

from ..api.async_client import AsyncAPIClient
from ..api.request import ApiRequest, Outcome, MISSING, BODY_JSON
from ..utils import require_str, optional_str, require_callback


def _startup_field(payload: Any) -> Any:
    if not isinstance(payload, dict):
        return MISSING
    return payload.get('startup')


class LifecycleService:
    """Bearer-authenticated calls managing the installed application."""

    def __init__(self, client: AsyncAPIClient):
        self._client = client

    def get_server_versions(
        self,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """Versions reported by the server; ``callback(error, versions)``."""
        require_callback(callback)
        return self._client.invoke(
            ApiRequest(
                'POST',
                self._client.api_url('server_versions'),
                body_kind=BODY_JSON,
                body={},
                expect_json=True,
                returns_payload=True,
            ),
            callback
        )

    def get_startup(
        self,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """Startup URL; ``callback(error, url)``. None when the server has none."""
        require_callback(callback)
        return self._client.invoke(
            ApiRequest(
                'GET',
                self._client.api_url('startup'),
                expect_json=True,
                extract=_startup_field,
                returns_payload=True,
            ),
            callback
        )

    def set_startup(
        self,
        startup_url: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        require_str(startup_url, 'startup_url')
        require_callback(callback)
        return self._client.invoke(
            ApiRequest(
                'POST',
                self._client.api_url('startup'),
                body_kind=BODY_JSON,
                body={'startup': startup_url},
            ),
            callback
        )

    def install(
        self,
        user: Optional[str] = None,
        repo: Optional[str] = None,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """Install an application; defaults to the configured (user, repo)."""
        return self._repo_action('install', user, repo, callback)

    def update(
        self,
        user: Optional[str] = None,
        repo: Optional[str] = None,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """Update an installed application; defaults to the configured (user, repo)."""
        return self._repo_action('update', user, repo, callback)

    def _repo_action(
        self,
        name: str,
        user: Optional[str],
        repo: Optional[str],
        callback: Optional[Callable[..., Any]]
    ) -> Awaitable[Outcome]:
        optional_str(user, 'user')
        optional_str(repo, 'repo')
        require_callback(callback)
        endpoint = self._client.endpoint
        body = {
            'user': user if user is not None else endpoint.user,
            'repo': repo if repo is not None else endpoint.repo,
        }
        return self._client.invoke(
            ApiRequest(
                'POST',
                self._client.api_url(name),
                body_kind=BODY_JSON,
                body=body,
            ),
            callback
        )
