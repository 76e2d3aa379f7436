"""Request builder for administration API requests."""
import asyncio
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urlencode

import aiofiles
import aiohttp


BODY_NONE = 'none'
BODY_FORM = 'form'
BODY_JSON = 'json'
BODY_MULTIPART = 'multipart'


@dataclass
class FormField:
    """
    One part of a multipart upload.

    `value` is a str for plain fields; for file parts it is bytes, a path
    (read when the request is dispatched) or a readable binary object.
    """
    name: str
    value: Any
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class ApiRequest:
    """
    Description of one remote call.

    Attributes:
        method: HTTP method
        url: Absolute request URL
        auth: Attach the stored token as bearer credential
        bearer: Explicit bearer token (overrides the stored one)
        body_kind: One of 'none', 'form', 'json', 'multipart'
        body: Dict for form/json bodies, list of FormField for multipart
        expect_json: Parse a 200 response body as JSON
        parse_error_code: Error code when that parse fails
        extract: Maps the parsed JSON to the payload; MISSING means failure
        on_success: Called with the payload before the outcome is delivered
        returns_payload: Whether the caller's callback receives the payload
    """
    method: str
    url: str
    auth: bool = True
    bearer: Optional[str] = None
    body_kind: str = BODY_NONE
    body: Any = None
    expect_json: bool = False
    parse_error_code: int = 500
    extract: Optional[Callable[[Any], Any]] = None
    on_success: Optional[Callable[[Any], None]] = None
    returns_payload: bool = False


class RequestBuilder:
    """Builds headers and bodies for API requests."""

    def __init__(self, extra_headers: Optional[Dict[str, str]] = None):
        """Initializes request builder."""
        self.extra_headers = extra_headers or {}

    def build_headers(self, request: ApiRequest, token: Optional[str]) -> Dict[str, str]:
        """
        Builds request headers.

        A missing token is sent as an empty bearer credential so the
        server, not the client, decides whether it is valid.
        """
        headers = dict(self.extra_headers)
        if request.bearer is not None or request.auth:
            headers['Authorization'] = f"bearer {token or ''}"
        if request.body_kind == BODY_FORM:
            headers['Content-Type'] = 'application/x-www-form-urlencoded'
        elif request.body_kind == BODY_JSON:
            headers['Content-Type'] = 'application/json'
        return headers

    async def build_data(self, request: ApiRequest) -> Any:
        """
        Builds request data; file parts given as paths are read here.

        Raises:
            OSError: If a path cannot be read
            ValueError: If a file object cannot be read (e.g. it is closed)
        """
        if request.body_kind == BODY_FORM:
            return urlencode(request.body or {})
        if request.body_kind == BODY_JSON:
            return json.dumps(request.body if request.body is not None else {})
        if request.body_kind == BODY_MULTIPART:
            return await self._build_form_data(request.body or [])
        return None

    async def _build_form_data(self, fields: List[FormField]) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for part in fields:
            value = part.value
            filename = part.filename
            if isinstance(value, (str, os.PathLike)) and filename is not None:
                path = Path(value)
                async with aiofiles.open(path, 'rb') as f:
                    value = await f.read()
            elif isinstance(value, bytearray):
                value = bytes(value)
            elif hasattr(value, 'read'):
                loop = asyncio.get_running_loop()
                value = await loop.run_in_executor(None, value.read)
            kwargs = {}
            if filename is not None:
                kwargs['filename'] = filename
            if part.content_type is not None:
                kwargs['content_type'] = part.content_type
            form.add_field(part.name, value, **kwargs)
        return form


def part_filename(source: Union[bytes, bytearray, str, os.PathLike, Any]) -> str:
    """File name a multipart part gets for an upload source; 'blob' for raw bytes."""
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    name = getattr(source, 'name', None)
    if isinstance(name, str) and name:
        return os.path.basename(name)
    return 'blob'
