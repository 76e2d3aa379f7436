"""Tests for the request protocol: headers, bodies and outcome mapping."""
import asyncio
import json
import logging
import pytest
from unittest.mock import MagicMock

import aiohttp

from dsbase import Outcome, DsAPIError, APIErrorCodes, DsException
from dsbase.core.api import AsyncAPIClient, ApiRequest, EndpointConfig, MISSING
from dsbase.core.api.request import ResponseHandler, RequestBuilder, BODY_FORM, BODY_JSON
from dsbase.core.session import MemoryTokenStore


URL = 'https://apps.example.com:3010/api/test'


@pytest.fixture
def api(http, store):
    endpoint = EndpointConfig('https://apps.example.com', 'octocat', 'site')
    return AsyncAPIClient(endpoint=endpoint, token_store=store, session=http.session)


class TestResponseHandler:
    """Tests for status and body mapping."""

    def test_status_200_is_success(self):
        assert ResponseHandler.status_error(200) is None

    @pytest.mark.parametrize('status', [201, 204, 301, 400, 401, 403, 404, 502])
    def test_other_status_passed_through(self, status):
        assert ResponseHandler.status_error(status) == status

    @pytest.mark.parametrize('status', [0, None])
    def test_missing_status_is_500(self, status):
        assert ResponseHandler.status_error(status) == 500

    def test_body_ignored_when_not_expected(self):
        assert ResponseHandler.process_response(200, 'not json') == Outcome()

    def test_parse_failure_uses_given_code(self):
        outcome = ResponseHandler.process_response(200, 'not json', expect_json=True, parse_error_code=415)

        assert outcome.error == 415

    def test_extract_missing_is_500(self):
        outcome = ResponseHandler.process_response(
            200, '{}', expect_json=True, extract=lambda payload: MISSING
        )

        assert outcome == Outcome(500)

    def test_extract_result_is_payload(self):
        outcome = ResponseHandler.process_response(
            200, '{"a": 1}', expect_json=True, extract=lambda payload: payload['a']
        )

        assert outcome == Outcome(None, 1)

    def test_deliver_with_and_without_payload(self):
        calls = []
        outcome = Outcome(None, [1])

        ResponseHandler.deliver(outcome, lambda *args: calls.append(args), with_payload=True)
        ResponseHandler.deliver(outcome, lambda *args: calls.append(args))

        assert calls == [(None, [1]), (None,)]


class TestOutcome:
    """Tests for the Outcome result type."""

    def test_unpacks_as_pair(self):
        error, payload = Outcome(None, {'a': 1})

        assert error is None
        assert payload == {'a': 1}

    def test_ok(self):
        assert Outcome().ok is True
        assert Outcome(404).ok is False

    def test_raise_for_error(self):
        assert Outcome(None, 'x').raise_for_error() == 'x'

        with pytest.raises(DsAPIError) as exc_info:
            Outcome(403).raise_for_error()

        assert exc_info.value.code == 403
        assert exc_info.value.message == APIErrorCodes.get_message(403)

    def test_unknown_code_message(self):
        assert APIErrorCodes.get_message(418) == 'HTTP error 418'


class TestRequestBuilder:
    """Tests for header construction."""

    def test_bearer_from_token(self):
        headers = RequestBuilder().build_headers(ApiRequest('POST', URL), 'T')

        assert headers['Authorization'] == 'bearer T'

    def test_absent_token_sent_as_is(self):
        headers = RequestBuilder().build_headers(ApiRequest('POST', URL), None)

        assert headers['Authorization'] == 'bearer '

    def test_unauthenticated_has_no_bearer(self):
        headers = RequestBuilder().build_headers(ApiRequest('GET', URL, auth=False), 'T')

        assert 'Authorization' not in headers

    def test_content_types(self):
        builder = RequestBuilder()

        form = builder.build_headers(ApiRequest('POST', URL, auth=False, body_kind=BODY_FORM), None)
        body = builder.build_headers(ApiRequest('POST', URL, auth=False, body_kind=BODY_JSON), None)

        assert form['Content-Type'] == 'application/x-www-form-urlencoded'
        assert body['Content-Type'] == 'application/json'

    @pytest.mark.asyncio
    async def test_form_values_are_encoded(self):
        request = ApiRequest('POST', URL, body_kind=BODY_FORM, body={'username': 'a b', 'password': 'p&q'})

        assert await RequestBuilder().build_data(request) == 'username=a+b&password=p%26q'

    @pytest.mark.asyncio
    async def test_json_body(self):
        request = ApiRequest('POST', URL, body_kind=BODY_JSON, body={'startup': 'x'})

        assert json.loads(await RequestBuilder().build_data(request)) == {'startup': 'x'}


class TestInvoke:
    """Tests for AsyncAPIClient.invoke()."""

    @pytest.mark.asyncio
    async def test_success_without_body(self, api, http):
        http.respond(200, 'ignored')

        outcome = await api.invoke(ApiRequest('POST', URL))

        assert outcome == Outcome()
        method, url, kwargs = http.call()
        assert (method, url) == ('POST', URL)

    @pytest.mark.asyncio
    async def test_http_error_passed_through(self, api, http):
        http.respond(404)

        assert (await api.invoke(ApiRequest('POST', URL))).error == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize('exc', [
        aiohttp.ClientConnectionError('refused'),
        asyncio.TimeoutError(),
        OSError('unreachable'),
    ])
    async def test_transport_failure_is_500(self, api, http, exc):
        http.fail(exc)

        assert (await api.invoke(ApiRequest('POST', URL))).error == 500

    @pytest.mark.asyncio
    async def test_json_payload_dropped_unless_returned(self, api, http):
        http.respond(200, '{"a": 1}')

        hidden = await api.invoke(ApiRequest('POST', URL, expect_json=True))
        shown = await api.invoke(ApiRequest('POST', URL, expect_json=True, returns_payload=True))

        assert hidden == Outcome()
        assert shown == Outcome(None, {'a': 1})

    @pytest.mark.asyncio
    async def test_undecodable_body_uses_parse_code(self, api, http):
        response_text = MagicMock(side_effect=UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'bad'))
        http.respond(200)
        http._script[0].text = response_text

        outcome = await api.invoke(ApiRequest('GET', URL, expect_json=True, parse_error_code=415))

        assert outcome.error == 415

    @pytest.mark.asyncio
    async def test_on_success_runs_before_callback(self, api, http):
        http.respond(200, '{"v": 2}')
        order = []

        await api.invoke(
            ApiRequest('POST', URL, expect_json=True, returns_payload=True,
                       on_success=lambda payload: order.append(('success', payload))),
            lambda error, payload: order.append(('callback', error, payload))
        )

        assert order == [('success', {'v': 2}), ('callback', None, {'v': 2})]

    @pytest.mark.asyncio
    async def test_on_success_skipped_on_failure(self, api, http):
        http.respond(500)
        seen = []

        await api.invoke(ApiRequest('POST', URL, on_success=seen.append))

        assert seen == []

    @pytest.mark.asyncio
    async def test_callback_invoked_exactly_once(self, api, http):
        http.fail(aiohttp.ClientConnectionError('refused'))
        calls = []

        outcome = await api.invoke(ApiRequest('POST', URL), calls.append)

        assert calls == [500]
        assert outcome.error == 500

    @pytest.mark.asyncio
    async def test_no_retry(self, api, http):
        http.respond(503)

        await api.invoke(ApiRequest('POST', URL))

        assert http.count == 1

    @pytest.mark.asyncio
    async def test_token_read_at_dispatch(self, api, http, store):
        http.respond(200)
        store.set_token('A')
        await api.invoke(ApiRequest('POST', URL))
        store.set_token('B')
        await api.invoke(ApiRequest('POST', URL))

        assert http.call(0)[2]['headers']['Authorization'] == 'bearer A'
        assert http.call(1)[2]['headers']['Authorization'] == 'bearer B'

    @pytest.mark.asyncio
    async def test_explicit_bearer_overrides_store(self, api, http, store):
        http.respond(200)
        store.set_token('stored')

        await api.invoke(ApiRequest('POST', URL, bearer='given'))

        assert http.call()[2]['headers']['Authorization'] == 'bearer given'

    @pytest.mark.asyncio
    async def test_closed_client_refuses(self, api):
        await api.close()

        with pytest.raises(DsException):
            await api.invoke(ApiRequest('POST', URL))

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self, api, http):
        await api.close()

        http.session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_proxy_forwarded(self, http):
        from dsbase import APIConfig
        endpoint = EndpointConfig('https://apps.example.com', 'octocat', 'site')
        api = AsyncAPIClient(APIConfig.with_proxy('http://proxy:8080'), endpoint,
                             MemoryTokenStore(), session=http.session)
        http.respond(200)

        await api.invoke(ApiRequest('POST', URL))

        assert http.call()[2]['proxy'] == 'http://proxy:8080'


class TestEventHandlers:
    """Host event handlers must not interrupt completion."""

    @pytest.mark.asyncio
    async def test_failing_login_handler_still_completes(self, client, http):
        http.respond(200, json.dumps({'token': 'T'}))
        calls = []

        def handler():
            raise RuntimeError('host handler')

        client.on('login', handler)
        outcome = await client.login('octocat', 'secret', callback=calls.append)

        assert outcome.ok
        assert calls == [None]
        assert client.get_token() == 'T'

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, client, http):
        http.respond(200)
        seen = []

        def handler():
            raise RuntimeError('host handler')

        client.on('login', handler)
        client.on('login', lambda: seen.append('login'))
        await client.login_token('external')

        assert seen == ['login']

    def test_failing_reset_handler_is_logged(self, client, caplog):
        def handler():
            raise RuntimeError('host handler')

        client.on('reset', handler)
        with caplog.at_level(logging.ERROR, logger='dsbase.events'):
            client.logout()

        assert "Handler for 'reset' failed" in caplog.text
