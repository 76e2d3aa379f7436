"""Pytest fixtures for dsbase tests."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from dsbase import DsClient, MemoryTokenStore


ORIGIN = 'https://apps.example.com'
API = ORIGIN + ':3010/api'


def make_response(status=200, text=''):
    """Returns a mock aiohttp response."""
    response = AsyncMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    return response


def as_context(response):
    """Wraps a response the way session.request() returns it."""
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=None)
    return ctx


class MockHTTP:
    """
    Scripted aiohttp session.

    Responses are served in order; the last one is repeated. An
    exception instance in the script is raised by session.request().
    """

    def __init__(self):
        self.session = MagicMock()
        self.session.closed = False
        self.session.close = AsyncMock()
        self.session.request = MagicMock(side_effect=self._next)
        self._script = []
        self.on_request = None

    def respond(self, status=200, text=''):
        self._script.append(make_response(status, text))
        return self

    def fail(self, exc):
        self._script.append(exc)
        return self

    def _next(self, method, url, **kwargs):
        if self.on_request is not None:
            self.on_request(method, url, kwargs)
        item = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        if isinstance(item, BaseException):
            raise item
        return as_context(item)

    @property
    def count(self):
        return self.session.request.call_count

    def call(self, index=-1):
        """(method, url, kwargs) of a recorded request."""
        recorded = self.session.request.call_args_list[index]
        method, url = recorded.args
        return method, url, recorded.kwargs


@pytest.fixture
def http():
    """Scripted HTTP session."""
    return MockHTTP()


@pytest.fixture
def store():
    """Empty in-memory token store."""
    return MemoryTokenStore()


@pytest.fixture
def client(http, store):
    """Fully configured client wired to the scripted session."""
    return DsClient(store, origin=ORIGIN, user='octocat', repo='site', session=http.session)
