"""
GraphAPI module, the entry point that wires configuration, handlers and engines together
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .access_token import AccessToken, App
from .config_loader import APP_ID_ENV_NAME, APP_SECRET_ENV_NAME, GraphConfig
from .exceptions import ValidationError
from .graph_client import GraphClient
from .graph_file import GraphFile, GraphVideo
from .graph_nodes import GraphEdge
from .graph_request import GraphRequest, build_request
from .graph_response import GraphResponse
from .handler_factory import HandlerFactory
from .login_helper import RedirectLoginHelper
from .resumable_upload import ResumableUploader, UploadResult


class GraphAPI:
    """
    High-level client for the Graph API

    Resolves every handler slot and the app credentials eagerly, so bad
    configuration fails here before any network call is made.
    """

    APP_ID_ENV_NAME = APP_ID_ENV_NAME
    APP_SECRET_ENV_NAME = APP_SECRET_ENV_NAME

    def __init__(self, config: Union[Mapping[str, Any], GraphConfig, None] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialise GraphAPI from a configuration mapping

        Args:
            config: Mapping of recognised options or an already resolved GraphConfig
            environ: Environment used for the app id/secret fallback, os.environ by default

        Raises:
            ConfigurationError: If credentials are missing or a handler cannot be resolved
            InvalidAccessTokenError: If default_access_token has the wrong type
        """
        if not isinstance(config, GraphConfig):
            config = GraphConfig.from_mapping(config, environ)

        self.config = config
        self.logger = logging.getLogger(__name__)

        self.app = App(config.app_id, config.app_secret)
        self.client = GraphClient(
            HandlerFactory.create_http_client(config.http_client_handler),
            config.enable_beta_mode
        )
        self.persistent_data_handler = HandlerFactory.create_persistent_data_handler(
            config.persistent_data_handler, config.persistent_data_path
        )
        self.url_detection_handler = HandlerFactory.create_url_detection_handler(
            config.url_detection_handler
        )
        self.default_access_token: Optional[AccessToken] = config.default_access_token
        self.default_graph_version = config.default_graph_version

        self.logger.debug(
            f"GraphAPI ready for app {self.app.id} on {self.client.get_base_graph_url()} "
            f"(graph version {self.default_graph_version})"
        )

    @property
    def last_response(self) -> Optional[GraphResponse]:
        """Most recent response received, for diagnostics only"""
        return self.client.last_response

    def get_redirect_login_helper(self) -> RedirectLoginHelper:
        return RedirectLoginHelper(
            self.app,
            self.client,
            self.persistent_data_handler,
            self.url_detection_handler,
            self.default_graph_version
        )

    def set_default_access_token(self, access_token: Union[str, AccessToken]) -> None:
        """
        Raises:
            ValidationError: If access_token is neither a str nor an AccessToken
        """
        self.default_access_token = AccessToken.coerce(access_token)

    def request(self, method: str, endpoint: str, params: Optional[Mapping[str, Any]] = None,
                access_token: Union[str, AccessToken, None] = None, e_tag: Optional[str] = None,
                graph_version: Optional[str] = None) -> GraphRequest:
        """Build a GraphRequest using the configured defaults"""
        request = build_request(
            self.app,
            method,
            endpoint,
            params,
            access_token=access_token,
            graph_version=graph_version,
            e_tag=e_tag,
            default_access_token=self.default_access_token,
            default_graph_version=self.default_graph_version
        )
        return replace(request, base_graph_url=self.client.get_base_graph_url(request.contains_video_uploads()))

    def send_request(self, method: str, endpoint: str, params: Optional[Mapping[str, Any]] = None,
                     access_token: Union[str, AccessToken, None] = None, e_tag: Optional[str] = None,
                     graph_version: Optional[str] = None) -> GraphResponse:
        request = self.request(method, endpoint, params, access_token, e_tag, graph_version)
        return self.client.send_request(request)

    def get(self, endpoint: str, access_token: Union[str, AccessToken, None] = None,
            e_tag: Optional[str] = None, graph_version: Optional[str] = None) -> GraphResponse:
        return self.send_request('GET', endpoint, None, access_token, e_tag, graph_version)

    def post(self, endpoint: str, params: Optional[Mapping[str, Any]] = None,
             access_token: Union[str, AccessToken, None] = None, e_tag: Optional[str] = None,
             graph_version: Optional[str] = None) -> GraphResponse:
        return self.send_request('POST', endpoint, params, access_token, e_tag, graph_version)

    def delete(self, endpoint: str, params: Optional[Mapping[str, Any]] = None,
               access_token: Union[str, AccessToken, None] = None, e_tag: Optional[str] = None,
               graph_version: Optional[str] = None) -> GraphResponse:
        return self.send_request('DELETE', endpoint, params, access_token, e_tag, graph_version)

    def next(self, graph_edge: GraphEdge) -> Optional[GraphEdge]:
        """Fetch the page after graph_edge, or None when there is none"""
        return self.get_pagination_results(graph_edge, 'next')

    def previous(self, graph_edge: GraphEdge) -> Optional[GraphEdge]:
        """Fetch the page before graph_edge, or None when there is none"""
        return self.get_pagination_results(graph_edge, 'previous')

    def get_pagination_results(self, graph_edge: GraphEdge, direction: str) -> Optional[GraphEdge]:
        """
        Fetch a neighbouring page with one request

        The new edge keeps the node class of graph_edge; graph_edge itself is
        not modified.

        Returns:
            New GraphEdge, or None when no page exists in that direction or it is empty
        """
        pagination_request = graph_edge.get_pagination_request(direction)
        if pagination_request is None:
            self.logger.debug(f"No {direction} page for edge of {graph_edge.node_class.__name__}")
            return None

        response = self.client.send_request(pagination_request)
        page = response.get_graph_edge(graph_edge.node_class, graph_edge.parent_edge_endpoint)
        return page if len(page) > 0 else None

    def file_to_upload(self, path_to_file: Union[str, Path]) -> GraphFile:
        return GraphFile.from_path(path_to_file)

    def video_to_upload(self, path_to_file: Union[str, Path]) -> GraphVideo:
        return GraphVideo.from_path(path_to_file)

    def upload_video(self, target: str, path_to_file: Union[str, Path],
                     metadata: Optional[Mapping[str, Any]] = None,
                     access_token: Union[str, AccessToken, None] = None,
                     max_transfer_tries: int = 5,
                     graph_version: Optional[str] = None) -> UploadResult:
        """
        Upload a video to /{target}/videos in resumable chunks

        Args:
            target: Id of the user, page or group receiving the video
            path_to_file: Local path of the video
            metadata: Params sent with the finish phase, such as title and description
            access_token: Token for this upload, the default token when omitted
            max_transfer_tries: Maximum number of transfer attempts for this upload
            graph_version: Graph version, the configured default when omitted
        """
        if not isinstance(target, str) or not target:
            raise ValidationError(f"Upload target must be a non-empty string, got {target!r}")

        uploader = ResumableUploader(
            self.app,
            self.client,
            access_token if access_token is not None else self.default_access_token,
            graph_version or self.default_graph_version
        )
        return uploader.upload(f"/{target}/videos", path_to_file, metadata, max_transfer_tries)
