"""
Async administration API client.

Every remote call goes through AsyncAPIClient.invoke(): one request,
one completion, one Outcome. Nothing is retried, queued or batched.
"""
import asyncio
import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

import aiohttp

from .config import APIConfig, EndpointConfig
from .errors import ERROR_TRANSPORT
from .request import ApiRequest, Outcome, RequestBuilder, ResponseHandler
from ..exceptions import DsException
from ..logging import get_logger
from ..session import TokenStore, MemoryTokenStore


class AsyncAPIClient:
    """
    Asynchronous client for the administration API.

    Holds the endpoint configuration, the token store and the aiohttp
    session shared by all operations.

    Example:
        >>> endpoint = EndpointConfig('https://apps.example.com', 'octocat', 'site')
        >>> async with AsyncAPIClient(endpoint=endpoint) as client:
        ...     outcome = await client.invoke(ApiRequest('POST', client.api_url('list'),
        ...                                              body_kind='json', body={},
        ...                                              expect_json=True))
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        endpoint: Optional[EndpointConfig] = None,
        token_store: Optional[TokenStore] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
            endpoint: Endpoint identity (may be completed later)
            token_store: Where the session token lives
            session: Existing aiohttp session; it is not closed by this client
        """
        self._config = config or APIConfig.default()
        self._endpoint = endpoint or EndpointConfig()
        self._token_store = token_store if token_store is not None else MemoryTokenStore()
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._builder = RequestBuilder()
        self._closed = False

        self._logger = get_logger('dsbase.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def endpoint(self) -> EndpointConfig:
        return self._endpoint

    @property
    def token_store(self) -> TokenStore:
        return self._token_store

    def api_url(self, name: str) -> str:
        """URL of an API endpoint, e.g. api_url('login')."""
        return self._endpoint.api_url(self._config.api_port, self._config.api_prefix, name)

    def download_url(self, filename: str) -> str:
        """URL an uploaded resource is served from."""
        base = (self._config.download_base or self._endpoint.origin).rstrip('/')
        return f"{base}/upload/{self._endpoint.user}-{self._endpoint.repo}/{quote(filename)}"

    async def __aenter__(self) -> 'AsyncAPIClient':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or (self._owns_session and self._session.closed):
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close client and release resources it owns."""
        self._closed = True

        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

        if self._connector is not None and not self._connector.closed:
            await self._connector.close()
        self._connector = None

    async def invoke(
        self,
        request: ApiRequest,
        callback: Optional[Callable[..., Any]] = None
    ) -> Outcome:
        """
        Send one request and map its completion to an Outcome.

        The token (when the request is authenticated) is read from the
        store right before the request is dispatched. The optional
        callback is invoked exactly once, with the error code and, for
        operations that yield one, the payload.

        Args:
            request: Request description
            callback: Optional completion callback

        Returns:
            Outcome with error None on success
        """
        if self._closed:
            raise DsException("Client is closed")

        outcome = await self._send(request)

        if outcome.ok and request.on_success is not None:
            request.on_success(outcome.payload)

        if not request.returns_payload:
            outcome = Outcome(outcome.error)

        return ResponseHandler.deliver(outcome, callback, request.returns_payload)

    async def _send(self, request: ApiRequest) -> Outcome:
        session = await self._ensure_session()

        if request.bearer is not None:
            token = request.bearer
        elif request.auth:
            token = self._token_store.get_token()
        else:
            token = None
        headers = self._builder.build_headers(request, token)

        self._logger.debug(f"{request.method} {request.url}")

        try:
            data = await self._builder.build_data(request)
        except (OSError, ValueError) as e:
            self._logger.warning(f"Cannot read request body for {request.url}: {e}")
            return Outcome(ERROR_TRANSPORT)

        text = None
        try:
            async with session.request(
                request.method,
                request.url,
                headers=headers,
                data=data,
                proxy=self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
            ) as response:
                status = response.status
                if status == 200 and request.expect_json:
                    try:
                        text = await response.text()
                    except UnicodeDecodeError:
                        self._logger.warning(f"Undecodable response body from {request.url}")
                        return Outcome(request.parse_error_code)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            self._logger.warning(f"Transport error on {request.method} {request.url}: {e}")
            return Outcome(ERROR_TRANSPORT)

        self._logger.debug(f"{request.method} {request.url} -> {status}")

        outcome = ResponseHandler.process_response(
            status,
            text,
            expect_json=request.expect_json,
            parse_error_code=request.parse_error_code,
            extract=request.extract
        )
        if outcome.error is not None and status == 200:
            self._logger.warning(
                f"Unusable response body from {request.url} (error {outcome.error})"
            )
        return outcome
