"""
Resource transfer service.

Download and upload of JSON objects, upload of opaque files, removal
and listing of the resources stored under the configured (user, repo).
"""
import json
from typing import Any, Awaitable, Callable, Optional

from ..api.async_client import AsyncAPIClient
from ..api.errors import ERROR_UNPARSABLE_OBJECT
from ..api.request import ApiRequest, FormField, Outcome, part_filename, BODY_JSON, BODY_MULTIPART
from ..exceptions import InvalidCallError
from ..logging import get_logger
from ..utils import (
    require_str,
    optional_str,
    require_callback,
    require_json_container,
    require_upload_source,
)


class TransferService:
    """
    Transfers resources to and from the administration server.

    Every method checks its arguments and the endpoint configuration
    synchronously, then returns an awaitable Outcome. Remote failures
    never raise; they come back as ``outcome.error``.

    Example:
        >>> transfer = TransferService(api_client)
        >>> await transfer.upload_object({'title': 'Home'}, 'page.json')
        Outcome(error=None, payload=None)
        >>> error, page = await transfer.download_object('page.json')
    """

    def __init__(self, client: AsyncAPIClient):
        self._client = client
        self._logger = get_logger('dsbase.transfer')

    def download_object(
        self,
        filename: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Download a JSON object.

        Served from /upload/<user>-<repo>/<filename> without bearer
        header. A 200 answer that is not JSON fails with 415, so callers
        can tell a corrupt payload from a missing one.

        Args:
            filename: Resource name
            callback: Optional ``callback(error, obj)``
        """
        require_str(filename, 'filename')
        require_callback(callback)

        request = ApiRequest(
            'GET',
            self._client.download_url(filename),
            auth=False,
            expect_json=True,
            parse_error_code=ERROR_UNPARSABLE_OBJECT,
            returns_payload=True,
        )
        return self._client.invoke(request, callback)

    def upload_object(
        self,
        obj: Any,
        filename: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Upload a JSON-serializable dict or list as file `filename`.

        Raises:
            InvalidCallError: If obj is not a serializable dict/list or
                filename is not a string
        """
        require_json_container(obj, 'object')
        require_str(filename, 'filename')
        require_callback(callback)
        try:
            data = json.dumps(obj).encode('utf-8')
        except (TypeError, ValueError) as e:
            raise InvalidCallError(f"object is not JSON serializable: {e}", 'object')

        return self._upload(
            FormField('file', data, filename=filename, content_type='application/json'),
            None,
            callback
        )

    def upload_file(
        self,
        file: Any,
        filename: Optional[str] = None,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Upload an opaque file.

        Args:
            file: bytes, a path, or a readable binary file object
            filename: Optional name sent as a separate 'filename' field
            callback: Optional ``callback(error)``
        """
        require_upload_source(file, 'file')
        optional_str(filename, 'filename')
        require_callback(callback)

        return self._upload(
            FormField('file', file, filename=part_filename(file)),
            filename,
            callback
        )

    def _upload(
        self,
        file_field: FormField,
        filename: Optional[str],
        callback: Optional[Callable[..., Any]]
    ) -> Awaitable[Outcome]:
        endpoint = self._client.endpoint
        fields = [
            FormField('user', endpoint.user),
            FormField('repo', endpoint.repo),
            file_field,
        ]
        if filename is not None:
            fields.append(FormField('filename', filename))

        request = ApiRequest(
            'POST',
            self._client.api_url('upload'),
            body_kind=BODY_MULTIPART,
            body=fields,
        )
        return self._client.invoke(request, callback)

    def remove(
        self,
        filename: str,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """
        Remove an uploaded resource.

        When APIConfig.legacy_remove_filename is set, that fixed name is
        sent instead of `filename`.
        """
        require_str(filename, 'filename')
        require_callback(callback)

        legacy = self._client.config.legacy_remove_filename
        if legacy is not None:
            self._logger.warning(
                f"remove({filename!r}) sends legacy file name {legacy!r}"
            )
            filename = legacy

        endpoint = self._client.endpoint
        request = ApiRequest(
            'POST',
            self._client.api_url('delete'),
            body_kind=BODY_JSON,
            body={'user': endpoint.user, 'repo': endpoint.repo, 'filename': filename},
        )
        return self._client.invoke(request, callback)

    def list(
        self,
        callback: Optional[Callable[..., Any]] = None
    ) -> Awaitable[Outcome]:
        """List resources; the server's collection is passed through as-is."""
        require_callback(callback)

        request = ApiRequest(
            'POST',
            self._client.api_url('list'),
            body_kind=BODY_JSON,
            body={},
            expect_json=True,
            returns_payload=True,
        )
        return self._client.invoke(request, callback)
