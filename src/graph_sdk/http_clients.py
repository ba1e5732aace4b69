"""
HTTP transport handlers used by GraphClient
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Union, runtime_checkable

import httpx
import requests

from .exceptions import GraphTransportError


logger = logging.getLogger(__name__)


@dataclass
class RawResponse:
    """Undecoded HTTP response returned by a transport"""
    headers: Dict[str, str]
    body: str
    http_status_code: int = 200


@runtime_checkable
class HttpClientInterface(Protocol):
    """Protocol every transport handler must satisfy"""

    def send(self, method: str, url: str, headers: Dict[str, str],
             body: Union[str, bytes], timeout: int) -> RawResponse:
        """Send the request and return the raw response, or raise GraphTransportError"""
        ...


class RequestsHttpClient:
    """Transport backed by a requests.Session"""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session

    def send(self, method: str, url: str, headers: Dict[str, str],
             body: Union[str, bytes], timeout: int) -> RawResponse:
        if self.session is None:
            self.session = requests.Session()

        try:
            response = self.session.request(
                method,
                url,
                data=body or None,
                headers=headers,
                timeout=timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} failed at transport level: {e}")
            raise GraphTransportError(str(e)) from e

        return RawResponse(
            headers=dict(response.headers),
            body=response.text,
            http_status_code=response.status_code
        )

    def close_connection(self) -> None:
        if self.session:
            self.session.close()
            self.session = None


class HttpxHttpClient:
    """Transport backed by an httpx.Client"""

    def __init__(self, client: Optional[httpx.Client] = None):
        self.client = client

    def send(self, method: str, url: str, headers: Dict[str, str],
             body: Union[str, bytes], timeout: int) -> RawResponse:
        if self.client is None:
            self.client = httpx.Client()

        try:
            response = self.client.request(
                method,
                url,
                content=body or None,
                headers=headers,
                timeout=timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed at transport level: {e}")
            raise GraphTransportError(str(e)) from e

        return RawResponse(
            headers=dict(response.headers),
            body=response.text,
            http_status_code=response.status_code
        )

    def close_connection(self) -> None:
        if self.client:
            self.client.close()
            self.client = None
