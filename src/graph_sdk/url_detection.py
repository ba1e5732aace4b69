"""
Detection of the URL the current web request was made to
"""

import os
from typing import Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class UrlDetectionInterface(Protocol):
    """Protocol every URL detection handler must satisfy"""

    def get_current_url(self) -> str:
        ...


class UrlDetectionHandler:
    """
    Rebuilds the current URL from CGI/WSGI style environment variables

    Forwarded headers (X-Forwarded-Proto, X-Forwarded-Host, X-Forwarded-Port)
    take precedence over the direct server variables.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = environ if environ is not None else os.environ

    def get_current_url(self) -> str:
        scheme = 'https' if self._is_behind_ssl() else 'http'
        host = self._get_host_name()
        request_uri = self.environ.get('REQUEST_URI') or self.environ.get('PATH_INFO', '')
        return f"{scheme}://{host}{request_uri}"

    def _is_behind_ssl(self) -> bool:
        forwarded_proto = self._get_forwarded('HTTP_X_FORWARDED_PROTO')
        if forwarded_proto:
            return forwarded_proto.lower() == 'https'

        https = self.environ.get('HTTPS', '')
        if https and https.lower() not in ('off', '0'):
            return True

        return self.environ.get('SERVER_PORT') == '443'

    def _get_host_name(self) -> str:
        host = self._get_forwarded('HTTP_X_FORWARDED_HOST')
        if not host:
            host = (self.environ.get('HTTP_HOST')
                    or self.environ.get('SERVER_NAME')
                    or self.environ.get('SERVER_ADDR')
                    or '')

        has_port = ':' in host.split(']')[-1]
        port = self._get_forwarded('HTTP_X_FORWARDED_PORT') or self.environ.get('SERVER_PORT')

        if not has_port and port:
            scheme = 'https' if self._is_behind_ssl() else 'http'
            default_port = '443' if scheme == 'https' else '80'
            if port != default_port:
                host = f"{host}:{port}"

        return host

    def _get_forwarded(self, name: str) -> Optional[str]:
        """Forwarded headers may list several hops; the last one is ours"""
        value = self.environ.get(name)
        if not value:
            return None
        return value.split(',')[-1].strip()
