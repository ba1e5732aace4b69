"""
Client SDK for the Graph API
Provides pluggable transports, cursor pagination over graph edges and resumable video uploads
"""

from .access_token import App, AccessToken
from .config_loader import ConfigLoader, GraphConfig
from .exceptions import (
    GraphSDKError, ConfigurationError, ValidationError, InvalidAccessTokenError,
    GraphTransportError, GraphResponseError, AuthenticationError, AuthorizationError,
    ThrottleError, ServerError, ClientError, ParseError, ResumableUploadError,
    OtherResponseError, UploadProtocolError, UploadBudgetExhaustedError
)
from .graph_api import GraphAPI
from .graph_client import GraphClient
from .graph_file import GraphFile, GraphVideo
from .graph_nodes import (
    GraphNode, GraphEdge, GraphNodeFactory, GraphUser, GraphPage, GraphAlbum,
    GraphEvent, GraphGroup, GraphLocation, GraphPicture, GraphApplication
)
from .graph_request import GraphRequest, SDK_VERSION, build_request
from .graph_response import GraphResponse
from .handler_factory import HandlerFactory
from .http_clients import HttpClientInterface, RawResponse, RequestsHttpClient, HttpxHttpClient
from .login_helper import RedirectLoginHelper
from .persistent_data import (
    PersistentDataInterface, MemoryPersistentDataHandler, DuckDBPersistentDataHandler
)
from .resumable_upload import ResumableUploader, UploadSession, UploadResult
from .url_detection import UrlDetectionInterface, UrlDetectionHandler

__version__ = SDK_VERSION

__all__ = [
    'App',
    'AccessToken',
    'ConfigLoader',
    'GraphConfig',
    'GraphSDKError',
    'ConfigurationError',
    'ValidationError',
    'InvalidAccessTokenError',
    'GraphTransportError',
    'GraphResponseError',
    'AuthenticationError',
    'AuthorizationError',
    'ThrottleError',
    'ServerError',
    'ClientError',
    'ParseError',
    'ResumableUploadError',
    'OtherResponseError',
    'UploadProtocolError',
    'UploadBudgetExhaustedError',
    'GraphAPI',
    'GraphClient',
    'GraphFile',
    'GraphVideo',
    'GraphNode',
    'GraphEdge',
    'GraphNodeFactory',
    'GraphUser',
    'GraphPage',
    'GraphAlbum',
    'GraphEvent',
    'GraphGroup',
    'GraphLocation',
    'GraphPicture',
    'GraphApplication',
    'GraphRequest',
    'build_request',
    'GraphResponse',
    'HandlerFactory',
    'HttpClientInterface',
    'RawResponse',
    'RequestsHttpClient',
    'HttpxHttpClient',
    'RedirectLoginHelper',
    'PersistentDataInterface',
    'MemoryPersistentDataHandler',
    'DuckDBPersistentDataHandler',
    'ResumableUploader',
    'UploadSession',
    'UploadResult',
    'UrlDetectionInterface',
    'UrlDetectionHandler'
]
