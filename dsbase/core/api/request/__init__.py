"""Request building and response mapping."""
from .request_builder import (
    ApiRequest,
    FormField,
    RequestBuilder,
    part_filename,
    BODY_NONE,
    BODY_FORM,
    BODY_JSON,
    BODY_MULTIPART,
)
from .response_handler import ResponseHandler, Outcome, MISSING

__all__ = [
    'ApiRequest',
    'FormField',
    'RequestBuilder',
    'ResponseHandler',
    'Outcome',
    'MISSING',
    'part_filename',
    'BODY_NONE',
    'BODY_FORM',
    'BODY_JSON',
    'BODY_MULTIPART',
]
