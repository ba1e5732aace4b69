"""
GraphResponse envelope, body decoding and error classification
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from .exceptions import (
    AuthenticationError, AuthorizationError, ClientError, GraphResponseError, GraphTransportError,
    OtherResponseError, ParseError, ResumableUploadError, ServerError, ThrottleError
)
from .graph_nodes import GraphNode, GraphNodeFactory


logger = logging.getLogger(__name__)

# Graph API error codes and subcodes
AUTHENTICATION_SUBCODES = {458, 459, 460, 463, 464, 467}
RESUMABLE_UPLOAD_SUBCODES = {1363030, 1363019, 1363033, 1363021, 1363041}
AUTHENTICATION_CODES = {100, 102, 190}
SERVER_CODES = {1, 2}
THROTTLE_CODES = {4, 17, 32, 341, 613}
CLIENT_CODES = {506}
AUTHORIZATION_CODE = 10
AUTHORIZATION_CODE_RANGE = range(200, 300)


class GraphResponse:
    """Decoded response of a single Graph API call"""

    def __init__(self, request, body: str = '', http_status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.request = request
        self.body = body
        self.http_status_code = http_status_code
        self.headers = headers or {}
        self.parse_failed = False
        self.decoded_body = self._decode_body()

    def _decode_body(self) -> Dict[str, Any]:
        try:
            decoded = json.loads(self.body)
        except (TypeError, ValueError):
            decoded = None
            if self.is_success_status and self.body and '=' in self.body:
                # Some endpoints (e.g. legacy token exchange) answer with a query string
                decoded = dict(parse_qsl(self.body, keep_blank_values=True)) or None

        if decoded is True:
            return {'success': True}
        if isinstance(decoded, list):
            return {'data': decoded}
        if isinstance(decoded, dict):
            return decoded

        self.parse_failed = True
        return {
            'error': {
                'message': 'Unable to parse response body.',
                'type': 'ParseError',
                'code': None
            }
        }

    @property
    def is_success_status(self) -> bool:
        """True for 2xx replies, and when the transport reported no status"""
        return self.http_status_code is None or 200 <= self.http_status_code < 300

    @property
    def is_error(self) -> bool:
        return 'error' in self.decoded_body

    @property
    def has_graph_error(self) -> bool:
        """True when the body carried a Graph error object rather than a synthesised one"""
        return not self.parse_failed and isinstance(self.decoded_body.get('error'), dict)

    def is_gateway_failure(self) -> bool:
        """A 4xx/5xx reply that did not come from the Graph API itself, e.g. a proxy error page"""
        status = self.http_status_code
        return status is not None and 400 <= status < 600 and not self.has_graph_error

    def get_etag(self) -> Optional[str]:
        return self.headers.get('ETag') or self.headers.get('etag')

    def get_graph_version(self) -> Optional[str]:
        return self.headers.get('Facebook-API-Version') or self.headers.get('facebook-api-version')

    def make_exception(self) -> GraphResponseError:
        """Build the classified error for an error envelope"""
        return create_response_error(self)

    def raise_for_error(self) -> None:
        """
        Raises:
            GraphTransportError: For a 4xx/5xx reply without a Graph error object
            GraphResponseError: For a classified Graph error envelope
        """
        if self.is_gateway_failure():
            logger.warning(f"HTTP {self.http_status_code} reply without a Graph error object")
            raise GraphTransportError(
                f"HTTP {self.http_status_code} response without a Graph error object",
                status_code=self.http_status_code,
                body=self.body
            )

        if self.is_error:
            error = self.make_exception()
            logger.warning(
                f"Graph API error ({error.subtype}) status={self.http_status_code} "
                f"code={error.code} subcode={error.subcode}: {error}"
            )
            raise error

    def get_graph_node(self, node_class=None):
        return GraphNodeFactory(self.request).make_graph_node(self.decoded_body, node_class or GraphNode)

    def get_graph_edge(self, node_class=None, parent_edge_endpoint: Optional[str] = None):
        return GraphNodeFactory(self.request).make_graph_edge(
            self.decoded_body, node_class or GraphNode, parent_edge_endpoint
        )

    def __repr__(self) -> str:
        return f"GraphResponse(http_status_code={self.http_status_code!r})"


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def create_response_error(response: GraphResponse) -> GraphResponseError:
    """
    Classify an error envelope into the matching GraphResponseError subclass

    Args:
        response: GraphResponse whose decoded body carries an 'error' object

    Returns:
        Exception instance ready to be raised
    """
    error = response.decoded_body.get('error') or {}
    if not isinstance(error, dict):
        error = {'message': str(error)}

    code = _as_int(error.get('code'))
    subcode = _as_int(error.get('error_subcode'))
    message = error.get('message') or 'Unknown error from Graph.'
    error_type = error.get('type') or ''
    error_data = error.get('error_data') if isinstance(error.get('error_data'), dict) else {}

    kwargs = dict(
        message=message, code=code, subcode=subcode,
        error_type=error_type, error_data=error_data
    )

    if response.parse_failed:
        return ParseError(response, **kwargs)

    if subcode in AUTHENTICATION_SUBCODES:
        return AuthenticationError(response, **kwargs)
    if subcode in RESUMABLE_UPLOAD_SUBCODES:
        return ResumableUploadError(response, **kwargs)

    if code in AUTHENTICATION_CODES:
        return AuthenticationError(response, **kwargs)
    if code in SERVER_CODES:
        return ServerError(response, **kwargs)
    if code in THROTTLE_CODES:
        return ThrottleError(response, **kwargs)
    if code in CLIENT_CODES:
        return ClientError(response, **kwargs)

    if code == AUTHORIZATION_CODE or code in AUTHORIZATION_CODE_RANGE:
        return AuthorizationError(response, **kwargs)

    if error_type == 'OAuthException':
        return AuthenticationError(response, **kwargs)

    return OtherResponseError(response, **kwargs)
