"""
Helpers for splitting Graph URLs into endpoints and parameters
"""

import re
from typing import Any, Dict
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

GRAPH_VERSION_PATTERN = re.compile(r'^/v\d+\.\d+(?=/|$)')


def append_params_to_url(url: str, params: Dict[str, Any]) -> str:
    """Append params to the URL without overwriting parameters already present"""
    if not params:
        return url

    parts = urlsplit(url)
    existing = dict(parse_qsl(parts.query, keep_blank_values=True))
    merged = {**params, **existing}
    return urlunsplit(parts._replace(query=urlencode(merged)))


def get_params_as_dict(url: str) -> Dict[str, str]:
    query = urlsplit(url).query
    return dict(parse_qsl(query, keep_blank_values=True)) if query else {}


def force_slash_prefix(path: str) -> str:
    if not path:
        return path
    return path if path.startswith('/') else '/' + path


def base_graph_url_endpoint(url_to_trim: str) -> str:
    """
    Trim the scheme, host and graph version from a Graph URL

    'https://graph.facebook.com/v2.8/1337/photos?after=x' becomes '/1337/photos?after=x'
    """
    if not url_to_trim:
        return url_to_trim

    parts = urlsplit(url_to_trim)
    path = force_slash_prefix(parts.path)
    path = GRAPH_VERSION_PATTERN.sub('', path) or '/'
    if parts.query:
        path = f"{path}?{parts.query}"
    return path
