"""
DsClient - High-level async client for the administration API.

Example:
    >>> async with DsClient("admin", origin="https://apps.example.com",
    ...                     user="octocat", repo="site") as ds:
    ...     if not ds.authenticated():
    ...         await ds.login("octocat", "secret")
    ...     error, files = await ds.list()
"""
import inspect
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

import aiohttp

from .core.api import (
    AsyncAPIClient,
    AsyncAuthService,
    APIConfig,
    EndpointConfig,
    EventEmitter,
    Outcome,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
)
from .core.exceptions import ERROR_INVALID_CALL, InvalidCallError
from .core.lifecycle import LifecycleService
from .core.logging import get_logger
from .core.session import TokenStore, MemoryTokenStore, SQLiteTokenStore
from .core.transfer import TransferService


CredentialsProvider = Callable[[Any], Union[Tuple[str, str], Awaitable[Tuple[str, str]]]]


class DsClient:
    """
    Session and resource-transfer client.

    One instance holds the endpoint configuration, the token store and
    the HTTP session; several instances can run side by side.

    Operations check their arguments synchronously (InvalidCallError,
    code 400) and return an awaitable Outcome. Each also accepts an
    optional callback, invoked exactly once on completion.

    Events:
        'login': a token was stored by login() or login_token()
        'reset': logout() cleared the token; hosts reload their state

    Token storage:
        >>> DsClient()                    # in memory
        >>> DsClient("admin")             # admin.storage SQLite file
        >>> DsClient(MemoryTokenStore())  # any TokenStore
    """

    def __init__(
        self,
        store: Optional[Union[str, TokenStore]] = None,
        *,
        config: Optional[APIConfig] = None,
        base_path: Optional[Path] = None,
        origin: Optional[str] = None,
        user: Optional[str] = None,
        repo: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize client.

        Args:
            store: Storage name (creates a .storage file) or a TokenStore
            config: Optional API configuration
            base_path: Base path for storage files
            origin: API origin, same as calling set_base()
            user: Repository owner, same as calling set_repo()
            repo: Repository name
            session: Existing aiohttp session to reuse
        """
        self._logger = get_logger('dsbase.client')

        if store is None:
            self._store: TokenStore = MemoryTokenStore()
        elif isinstance(store, str):
            self._store = SQLiteTokenStore(store, base_path)
        elif isinstance(store, TokenStore):
            self._store = store
        else:
            raise InvalidCallError("store must be a storage name or a TokenStore", 'store')

        self._endpoint = EndpointConfig(origin, user, repo)
        self._events = EventEmitter()
        self._api = AsyncAPIClient(config, self._endpoint, self._store, session)
        self._auth = AsyncAuthService(self._api, self._events)
        self._transfer = TransferService(self._api)
        self._lifecycle = LifecycleService(self._api)

    @staticmethod
    def create_config(
        api_port: int = 3010,
        proxy: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: float = 300.0,
        user_agent: Optional[str] = None,
        **kwargs
    ) -> APIConfig:
        """
        Create an API configuration.

        Args:
            api_port: Port of the administration API
            proxy: Proxy URL (e.g. 'http://proxy:8080')
            verify_ssl: Verify server certificates
            timeout: Total request timeout in seconds
            user_agent: Custom User-Agent header
            **kwargs: Other APIConfig fields
        """
        config_kwargs = dict(kwargs)
        config_kwargs['api_port'] = api_port
        if proxy:
            config_kwargs['proxy'] = ProxyConfig(url=proxy)
        if not verify_ssl:
            config_kwargs['ssl'] = SSLConfig(verify=False, check_hostname=False)
        config_kwargs['timeout'] = TimeoutConfig(total=timeout)
        if user_agent:
            config_kwargs['user_agent'] = user_agent
        return APIConfig(**config_kwargs)

    # Configuration

    def set_base(self, origin: str) -> None:
        """Set the API origin; requests go to <origin>:<api_port>/api/<name>."""
        self._endpoint.set_base(origin)

    def set_repo(self, user: str, repo: str) -> None:
        """Set the (user, repo) pair resources are stored under."""
        self._endpoint.set_repo(user, repo)

    @property
    def endpoint(self) -> EndpointConfig:
        return self._endpoint

    @property
    def config(self) -> APIConfig:
        return self._api.config

    @property
    def store(self) -> TokenStore:
        return self._store

    # Events

    def on(self, event: str, handler: Callable) -> 'DsClient':
        self._events.on(event, handler)
        return self

    def off(self, event: str, handler: Optional[Callable] = None) -> 'DsClient':
        self._events.off(event, handler)
        return self

    # Session lifecycle

    def authenticated(self) -> bool:
        return self._auth.authenticated()

    def get_token(self) -> Optional[str]:
        return self._auth.get_token()

    def login(self, username: str, password: str, callback=None) -> Awaitable[Outcome]:
        return self._auth.login(username, password, callback)

    def login_token(self, token: str, callback=None) -> Awaitable[Outcome]:
        return self._auth.login_token(token, callback)

    def logout(self) -> None:
        self._auth.logout()

    def add_admin_tools(
        self,
        frame: Any,
        login_callback: Callable[[], Any],
        credentials: CredentialsProvider
    ) -> Awaitable[Outcome]:
        """
        Run the admin login flow for a host.

        If already authenticated, `login_callback` is called right away.
        Otherwise `credentials(frame)` is asked for (username, password),
        a login is performed and `login_callback` is called on success.
        `frame` is an opaque handle passed through to the provider.

        Raises:
            InvalidCallError: If frame is None or a hook is not callable
        """
        if frame is None:
            raise InvalidCallError("frame is required", 'frame')
        if not callable(login_callback):
            raise InvalidCallError("login_callback must be callable", 'login_callback')
        if not callable(credentials):
            raise InvalidCallError("credentials must be callable", 'credentials')

        async def run() -> Outcome:
            if self.authenticated():
                login_callback()
                return Outcome()

            answer = credentials(frame)
            if inspect.isawaitable(answer):
                answer = await answer
            if not isinstance(answer, (tuple, list)) or len(answer) != 2:
                answer = (None, None)
            username, password = answer
            if not isinstance(username, str) or not isinstance(password, str) \
                    or not username or not password:
                self._logger.info("Admin login skipped: no credentials given")
                return Outcome(ERROR_INVALID_CALL)

            outcome = await self.login(username, password)
            if outcome.ok:
                login_callback()
            return outcome

        return run()

    # Resource transfer

    def download_object(self, filename: str, callback=None) -> Awaitable[Outcome]:
        return self._transfer.download_object(filename, callback)

    def upload_object(self, obj: Any, filename: str, callback=None) -> Awaitable[Outcome]:
        return self._transfer.upload_object(obj, filename, callback)

    def upload_file(self, file: Any, filename: Optional[str] = None, callback=None) -> Awaitable[Outcome]:
        return self._transfer.upload_file(file, filename, callback)

    def remove(self, filename: str, callback=None) -> Awaitable[Outcome]:
        return self._transfer.remove(filename, callback)

    def list(self, callback=None) -> Awaitable[Outcome]:
        return self._transfer.list(callback)

    # Application lifecycle

    def get_server_versions(self, callback=None) -> Awaitable[Outcome]:
        return self._lifecycle.get_server_versions(callback)

    def get_startup(self, callback=None) -> Awaitable[Outcome]:
        return self._lifecycle.get_startup(callback)

    def set_startup(self, startup_url: str, callback=None) -> Awaitable[Outcome]:
        return self._lifecycle.set_startup(startup_url, callback)

    def install(self, user: Optional[str] = None, repo: Optional[str] = None, callback=None) -> Awaitable[Outcome]:
        return self._lifecycle.install(user, repo, callback)

    def update(self, user: Optional[str] = None, repo: Optional[str] = None, callback=None) -> Awaitable[Outcome]:
        return self._lifecycle.update(user, repo, callback)

    # Resources

    async def close(self) -> None:
        """Close the HTTP session and the token store."""
        await self._api.close()
        self._store.close()

    async def __aenter__(self) -> 'DsClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        state = "authenticated" if self.authenticated() else "anonymous"
        return f"DsClient({self._endpoint!r}, {state})"
