"""
Exception hierarchy for the Graph SDK
"""

from typing import Any, Dict, Optional


class GraphSDKError(Exception):
    """Base class for every error raised by the SDK"""

    def __init__(self, message: str = "", code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class ConfigurationError(GraphSDKError):
    """Raised when configuration is invalid or incomplete"""

    def __init__(self, message: str, slot: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.slot = slot
        self.value = value


class ValidationError(GraphSDKError, ValueError):
    """Raised when a builder method receives an argument of the wrong type or value"""
    pass


class InvalidAccessTokenError(ConfigurationError, ValidationError):
    """Raised when the default access token is neither a string nor an AccessToken"""

    def __init__(self, message: str, value: Any = None):
        ConfigurationError.__init__(self, message, slot='default_access_token', value=value)


class GraphTransportError(GraphSDKError):
    """Raised when the HTTP transport fails to deliver a request"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GraphResponseError(GraphSDKError):
    """
    Raised when the Graph API answers with an error envelope

    The response that produced the error is kept so callers can inspect
    the HTTP status, headers and raw body.
    """

    subtype = 'other'

    def __init__(self, response, message: str = "", code: Optional[int] = None,
                 subcode: Optional[int] = None, error_type: str = "",
                 error_data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code)
        self.response = response
        self.subcode = subcode
        self.error_type = error_type
        self.error_data = error_data or {}

    @property
    def http_status_code(self) -> Optional[int]:
        return self.response.http_status_code if self.response is not None else None

    @property
    def raw_response(self) -> Optional[str]:
        return self.response.body if self.response is not None else None


class AuthenticationError(GraphResponseError):
    """Access token missing, expired or otherwise rejected"""
    subtype = 'authentication'


class AuthorizationError(GraphResponseError):
    """Permission denied for the requested object or action"""
    subtype = 'authorization'


class ThrottleError(GraphResponseError):
    """Rate limit reached"""
    subtype = 'rate_limit'


class ServerError(GraphResponseError):
    subtype = 'server'


class ClientError(GraphResponseError):
    subtype = 'client'


class ParseError(GraphResponseError):
    """The response body could not be decoded"""
    subtype = 'parse'


class ResumableUploadError(GraphResponseError):
    """Transient failure of a resumable upload transfer"""
    subtype = 'resumable_upload'

    @property
    def start_offset(self) -> Optional[int]:
        """Corrected offset reported by the server, if any"""
        value = self.error_data.get('start_offset')
        return int(value) if value is not None else None

    @property
    def end_offset(self) -> Optional[int]:
        value = self.error_data.get('end_offset')
        return int(value) if value is not None else None


class OtherResponseError(GraphResponseError):
    subtype = 'other'


class UploadProtocolError(GraphSDKError):
    """Raised when upload-session replies violate the offset contract"""
    pass


class UploadBudgetExhaustedError(GraphSDKError):
    """Raised when the transfer budget runs out before the upload finished"""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts
