"""
GraphClient module for sending GraphRequests through the configured transport
"""

import logging
from typing import Dict, Optional, Tuple, Union

from .graph_response import GraphResponse
from .http_clients import HttpClientInterface

BASE_GRAPH_URL = 'https://graph.facebook.com'
BASE_GRAPH_VIDEO_URL = 'https://graph-video.facebook.com'
BASE_GRAPH_URL_BETA = 'https://graph.beta.facebook.com'
BASE_GRAPH_VIDEO_URL_BETA = 'https://graph-video.beta.facebook.com'

DEFAULT_REQUEST_TIMEOUT = 60
DEFAULT_FILE_UPLOAD_REQUEST_TIMEOUT = 3600
DEFAULT_VIDEO_UPLOAD_REQUEST_TIMEOUT = 7200


def select_base_graph_url(enable_beta_mode: bool = False, post_to_video_url: bool = False) -> str:
    if post_to_video_url:
        return BASE_GRAPH_VIDEO_URL_BETA if enable_beta_mode else BASE_GRAPH_VIDEO_URL
    return BASE_GRAPH_URL_BETA if enable_beta_mode else BASE_GRAPH_URL


class GraphClient:
    """
    Sends prepared GraphRequests and classifies error responses

    The base URL is fixed at construction. last_request and last_response are
    kept for diagnostics only; nothing in the SDK reads them to build requests
    or to decide on retries. The client never retries.
    """

    def __init__(self, http_client_handler: HttpClientInterface, enable_beta_mode: bool = False):
        self.http_client_handler = http_client_handler
        self.enable_beta_mode = enable_beta_mode
        self.last_request = None
        self.last_response: Optional[GraphResponse] = None
        self.logger = logging.getLogger(__name__)

    def get_base_graph_url(self, post_to_video_url: bool = False) -> str:
        return select_base_graph_url(self.enable_beta_mode, post_to_video_url)

    def prepare_request_message(self, request) -> Tuple[str, str, Union[str, bytes], Dict[str, str]]:
        """
        Render a GraphRequest into transport arguments

        Returns:
            Tuple of (method, url, body, headers)
        """
        base_url = request.base_graph_url or self.get_base_graph_url(request.contains_video_uploads())
        url = base_url + request.url

        body, content_headers = request.encode_body()
        headers = {**request.get_headers(), **content_headers}

        return request.method, url, body, headers

    def send_request(self, request) -> GraphResponse:
        """
        Send a GraphRequest and return its decoded response

        Args:
            request: GraphRequest to send

        Returns:
            GraphResponse for a successful call

        Raises:
            GraphTransportError: If the transport fails
            GraphResponseError: If the response body is an error envelope
        """
        method, url, body, headers = self.prepare_request_message(request)

        timeout = DEFAULT_REQUEST_TIMEOUT
        if request.contains_video_uploads():
            timeout = DEFAULT_VIDEO_UPLOAD_REQUEST_TIMEOUT
        elif request.contains_file_uploads():
            timeout = DEFAULT_FILE_UPLOAD_REQUEST_TIMEOUT

        self.last_request = request
        self.logger.debug(f"Sending {method} {request.endpoint} (graph version {request.graph_version})")

        raw_response = self.http_client_handler.send(method, url, headers, body, timeout)

        response = GraphResponse(
            request,
            raw_response.body,
            raw_response.http_status_code,
            raw_response.headers
        )
        self.last_response = response

        response.raise_for_error()
        return response
