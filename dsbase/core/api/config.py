"""
API configuration module.

Holds the transport settings of the administration API client and the
endpoint identity (origin, user, repo) every operation is scoped to.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import ssl

from ..exceptions import ConfigurationError, InvalidCallError


@dataclass
class ProxyConfig:
    """
    Proxy configuration.

    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None

        if self.username and self.password:
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"

        return self.url


@dataclass
class SSLConfig:
    """SSL/TLS configuration."""
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self):
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    These are the only time limits on a request; nothing is retried.
    """
    total: float = 300.0
    connect: float = 30.0
    sock_read: float = 60.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Attributes:
        api_port: Port the administration API listens on
        api_prefix: Path prefix of every API endpoint
        download_base: Base URL for object downloads (defaults to the origin)
        legacy_remove_filename: When set, remove() sends this fixed file name
            instead of the caller's, matching older clients
    """
    api_port: int = 3010
    api_prefix: str = '/api'
    download_base: Optional[str] = None

    user_agent: str = 'dsbase/1.0.0'

    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    extra_headers: Dict[str, str] = field(default_factory=dict)

    log_level: int = 20  # logging.INFO

    limit_per_host: int = 10
    limit: int = 100

    legacy_remove_filename: Optional[str] = None

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }


class EndpointConfig:
    """
    Endpoint identity: API origin and the (user, repo) being administered.

    Each field is write-once. Setting the same value again is accepted,
    setting a different one raises ConfigurationError. Reading a field
    that was never set raises ConfigurationError as well.

    Example:
        >>> endpoint = EndpointConfig()
        >>> endpoint.set_base('https://apps.example.com')
        >>> endpoint.set_repo('octocat', 'hello-world')
        >>> endpoint.api_url(3010, '/api', 'list')
        'https://apps.example.com:3010/api/list'
    """

    def __init__(
        self,
        origin: Optional[str] = None,
        user: Optional[str] = None,
        repo: Optional[str] = None
    ):
        self._origin: Optional[str] = None
        self._user: Optional[str] = None
        self._repo: Optional[str] = None
        if origin is not None:
            self.set_base(origin)
        if user is not None or repo is not None:
            self.set_repo(user, repo)

    def set_base(self, origin: str) -> None:
        """Set the API origin, e.g. 'https://apps.example.com'."""
        if not isinstance(origin, str):
            raise InvalidCallError("origin must be a string", 'origin')
        origin = origin.rstrip('/')
        if self._origin is not None and self._origin != origin:
            raise ConfigurationError(
                f"origin already set to {self._origin!r}", 'origin'
            )
        self._origin = origin

    def set_repo(self, user: str, repo: str) -> None:
        """Set the (user, repo) pair resources are stored under."""
        if not isinstance(user, str):
            raise InvalidCallError("user must be a string", 'user')
        if not isinstance(repo, str):
            raise InvalidCallError("repo must be a string", 'repo')
        if self._user is not None and (self._user, self._repo) != (user, repo):
            raise ConfigurationError(
                f"repo already set to {self._user}/{self._repo}", 'repo'
            )
        self._user = user
        self._repo = repo

    @property
    def has_base(self) -> bool:
        return self._origin is not None

    @property
    def has_repo(self) -> bool:
        return self._user is not None

    @property
    def origin(self) -> str:
        if self._origin is None:
            raise ConfigurationError("API origin is not configured; call set_base() first", 'origin')
        return self._origin

    @property
    def user(self) -> str:
        if self._user is None:
            raise ConfigurationError("repo is not configured; call set_repo() first", 'user')
        return self._user

    @property
    def repo(self) -> str:
        if self._repo is None:
            raise ConfigurationError("repo is not configured; call set_repo() first", 'repo')
        return self._repo

    def api_url(self, port: int, prefix: str, name: str) -> str:
        """Build '<origin>:<port><prefix>/<name>'."""
        return f"{self.origin}:{port}{prefix}/{name}"

    def __repr__(self) -> str:
        return (
            f"EndpointConfig(origin={self._origin!r}, "
            f"user={self._user!r}, repo={self._repo!r})"
        )
