"""Administration API error codes and exceptions."""
from typing import Dict

from ...exceptions import DsException


ERROR_UNPARSABLE_OBJECT = 415
ERROR_TRANSPORT = 500


class APIErrorCodes:
    """Error codes delivered through the async result channel."""

    ERROR_CODES: Dict[int, str] = {
        400: 'Bad request: the server rejected the request arguments.',
        401: 'Unauthorized: missing or invalid session token, please login again.',
        403: 'Forbidden: wrong credentials or insufficient rights.',
        404: 'Not found: the resource does not exist.',
        415: 'Unsupported payload: the downloaded object is not valid JSON.',
        500: 'Transport or server error, or an unparsable response.',
    }

    @classmethod
    def get_message(cls, code: int) -> str:
        """Gets error message for error code."""
        return cls.ERROR_CODES.get(code, f"HTTP error {code}")


class DsAPIError(DsException):
    """Exception form of a failed remote call, see Outcome.raise_for_error()."""

    def __init__(self, code: int):
        self.code = code
        self.message = APIErrorCodes.get_message(code)
        super().__init__(self.message, code)
