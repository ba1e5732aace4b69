"""
GraphRequest descriptor and the builder that applies SDK defaults
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlencode

from urllib3 import encode_multipart_formdata

from .access_token import AccessToken, App
from .exceptions import ValidationError
from .graph_file import GraphFile, GraphVideo
from .url_manipulator import (
    append_params_to_url, base_graph_url_endpoint, force_slash_prefix,
    get_params_as_dict
)

SDK_VERSION = '1.0.0'

SUPPORTED_METHODS = ('GET', 'POST', 'DELETE')

# Parameters the request adds itself; never carried over from an endpoint URL
AUTH_PARAMS = ('access_token', 'appsecret_proof')


@dataclass(frozen=True)
class GraphRequest:
    """Immutable description of a single Graph API call"""
    app: App
    method: str
    endpoint: str = ''
    params: Mapping = field(default_factory=dict)
    access_token: Optional[AccessToken] = None
    graph_version: Optional[str] = None
    base_graph_url: Optional[str] = None
    e_tag: Optional[str] = None
    headers: Mapping = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())

        params = dict(self.params)
        endpoint = self.endpoint
        access_token = self.access_token

        if endpoint:
            endpoint = base_graph_url_endpoint(endpoint)
            url_params = get_params_as_dict(endpoint)

            embedded_token = url_params.get('access_token')
            if embedded_token:
                if access_token is not None and str(access_token) != embedded_token:
                    raise ValidationError(
                        'Access token mismatch. The access token provided in the GraphRequest '
                        'and the one provided in the URL or POST params do not match.'
                    )
                access_token = access_token or AccessToken(embedded_token)

            for key in AUTH_PARAMS:
                url_params.pop(key, None)
            params = {**url_params, **params}
            endpoint = endpoint.split('?', 1)[0]

        object.__setattr__(self, 'endpoint', endpoint)
        object.__setattr__(self, 'access_token', access_token)
        object.__setattr__(self, 'params', MappingProxyType(params))
        object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

    def validate_method(self) -> None:
        if not self.method:
            raise ValidationError('HTTP method not specified.')
        if self.method not in SUPPORTED_METHODS:
            raise ValidationError(f"Invalid HTTP method specified: {self.method}")

    def get_params(self) -> Dict[str, Any]:
        """Request params plus access_token and appsecret_proof when authenticated"""
        params = dict(self.params)
        if self.access_token is not None:
            params['access_token'] = str(self.access_token)
            params['appsecret_proof'] = self.access_token.app_secret_proof(self.app.secret)
        return params

    def get_post_params(self) -> Dict[str, Any]:
        return self.get_params() if self.method == 'POST' else {}

    @property
    def url(self) -> str:
        """Relative URL including the graph version and, for GET/DELETE, the query string"""
        self.validate_method()

        version = force_slash_prefix(self.graph_version or '')
        url = version + force_slash_prefix(self.endpoint)

        if self.method != 'POST':
            params = {key: _normalise_param(value) for key, value in self.get_params().items()}
            url = append_params_to_url(url, params)

        return url

    def get_headers(self) -> Dict[str, str]:
        headers = {
            'User-Agent': f"graph-sdk-python-{SDK_VERSION}",
            'Accept-Encoding': '*'
        }
        if self.e_tag:
            headers['If-None-Match'] = self.e_tag
        headers.update(self.headers)
        return headers

    def contains_file_uploads(self) -> bool:
        return any(isinstance(value, GraphFile) for value in self.params.values())

    def contains_video_uploads(self) -> bool:
        return any(isinstance(value, GraphVideo) for value in self.params.values())

    def encode_body(self) -> Tuple[Union[str, bytes], Dict[str, str]]:
        """
        Encode POST params as the request body

        Returns:
            Tuple of body and the Content-Type header to send with it
        """
        post_params = self.get_post_params()
        if not post_params:
            return '', {}

        if self.contains_file_uploads():
            fields = {}
            for key, value in post_params.items():
                if isinstance(value, GraphFile):
                    fields[key] = value.as_multipart_field()
                else:
                    fields[key] = _normalise_param(value)
            body, content_type = encode_multipart_formdata(fields)
            return body, {'Content-Type': content_type}

        body = urlencode({key: _normalise_param(value) for key, value in post_params.items()})
        return body, {'Content-Type': 'application/x-www-form-urlencoded'}

    def with_endpoint(self, endpoint: str, params: Optional[Mapping] = None) -> 'GraphRequest':
        """Return a copy pointed at a new endpoint; the original request is untouched"""
        return replace(self, endpoint=endpoint, params=dict(params if params is not None else {}))


def _normalise_param(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    return str(value)


def build_request(
    app: App,
    method: str,
    endpoint: str,
    params: Optional[Mapping] = None,
    access_token: Union[str, AccessToken, None] = None,
    graph_version: Optional[str] = None,
    e_tag: Optional[str] = None,
    default_access_token: Optional[AccessToken] = None,
    default_graph_version: Optional[str] = None,
    base_graph_url: Optional[str] = None
) -> GraphRequest:
    """
    Build a GraphRequest, applying default token and graph version

    An explicit access_token or graph_version overrides the configured default.
    With neither token source the request is unauthenticated.

    Raises:
        ValidationError: If any argument has the wrong type
    """
    if not isinstance(app, App):
        raise ValidationError(f"app must be an App, got {type(app).__name__}")
    if not isinstance(method, str):
        raise ValidationError(f"method must be a string, got {type(method).__name__}")
    if not isinstance(endpoint, str):
        raise ValidationError(f"endpoint must be a string, got {type(endpoint).__name__}")
    if params is not None and not isinstance(params, Mapping):
        raise ValidationError(f"params must be a mapping, got {type(params).__name__}")
    if graph_version is not None and not isinstance(graph_version, str):
        raise ValidationError(f"graph_version must be a string, got {type(graph_version).__name__}")

    token = access_token if access_token is not None else default_access_token
    if token is not None:
        token = AccessToken.coerce(token)

    return GraphRequest(
        app=app,
        method=method,
        endpoint=endpoint,
        params=dict(params or {}),
        access_token=token,
        graph_version=graph_version or default_graph_version,
        base_graph_url=base_graph_url,
        e_tag=e_tag
    )
