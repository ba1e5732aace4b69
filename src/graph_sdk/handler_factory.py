"""
HandlerFactory module for resolving pluggable handlers from configuration
"""

import importlib.util
import logging
from typing import Any, Dict, Optional, Union

from .exceptions import ConfigurationError
from .http_clients import HttpClientInterface, HttpxHttpClient, RequestsHttpClient
from .persistent_data import (
    DuckDBPersistentDataHandler, MemoryPersistentDataHandler, PersistentDataInterface
)
from .url_detection import UrlDetectionHandler, UrlDetectionInterface


logger = logging.getLogger(__name__)


class HandlerFactory:
    """Factory for the transport, persistent data and URL detection slots"""

    HTTP_CLIENT_HANDLERS = {
        'requests': RequestsHttpClient,
        'httpx': HttpxHttpClient
    }

    PERSISTENT_DATA_HANDLERS = {
        'memory': MemoryPersistentDataHandler,
        'duckdb': DuckDBPersistentDataHandler
    }

    URL_DETECTION_HANDLERS = {
        'default': UrlDetectionHandler
    }

    # Preference order when no transport is configured
    DEFAULT_HTTP_CLIENT_ORDER = ('requests', 'httpx')

    @classmethod
    def create_http_client(cls, handler: Union[str, HttpClientInterface, None] = None) -> HttpClientInterface:
        """
        Resolve the http_client_handler slot

        Args:
            handler: Handler name, an object implementing HttpClientInterface, or None

        Returns:
            Transport handler instance

        Raises:
            ConfigurationError: If the name is unknown or the object lacks send()
        """
        if handler is None:
            handler = cls.detect_default_http_client()

        return cls._resolve(
            'http_client_handler', handler, cls.HTTP_CLIENT_HANDLERS, HttpClientInterface
        )

    @classmethod
    def create_persistent_data_handler(
        cls,
        handler: Union[str, PersistentDataInterface, None] = None,
        database_path: str = ':memory:'
    ) -> PersistentDataInterface:
        """
        Resolve the persistent_data_handler slot, defaulting to in-memory storage

        Raises:
            ConfigurationError: If the name is unknown or the object lacks get/set/clear
        """
        if handler is None:
            handler = 'memory'

        if handler == 'duckdb':
            return DuckDBPersistentDataHandler(database_path)

        return cls._resolve(
            'persistent_data_handler', handler, cls.PERSISTENT_DATA_HANDLERS, PersistentDataInterface
        )

    @classmethod
    def create_url_detection_handler(
        cls,
        handler: Union[str, UrlDetectionInterface, None] = None
    ) -> UrlDetectionInterface:
        """
        Resolve the url_detection_handler slot

        Raises:
            ConfigurationError: If the name is unknown or the object lacks get_current_url()
        """
        if handler is None:
            handler = 'default'

        return cls._resolve(
            'url_detection_handler', handler, cls.URL_DETECTION_HANDLERS, UrlDetectionInterface
        )

    @classmethod
    def detect_default_http_client(cls) -> str:
        """Return the name of the first transport whose library is importable"""
        for name in cls.DEFAULT_HTTP_CLIENT_ORDER:
            if importlib.util.find_spec(name) is not None:
                return name
        raise ConfigurationError(
            "No HTTP client library is available; install requests or httpx",
            slot='http_client_handler'
        )

    @staticmethod
    def _resolve(slot: str, handler: Any, registry: Dict[str, type], interface: type) -> Any:
        if isinstance(handler, str):
            if handler not in registry:
                names = ', '.join(f"'{name}'" for name in registry)
                raise ConfigurationError(
                    f"The {slot} must be one of {names} or an instance of "
                    f"{interface.__name__}; got unknown name '{handler}'",
                    slot=slot,
                    value=handler
                )
            logger.debug(f"Resolved {slot} '{handler}' to {registry[handler].__name__}")
            return registry[handler]()

        if isinstance(handler, type) or not isinstance(handler, interface):
            raise ConfigurationError(
                f"The {slot} must be an instance of {interface.__name__}; "
                f"got {type(handler).__name__}",
                slot=slot,
                value=handler
            )

        logger.debug(f"Using injected {type(handler).__name__} for {slot}")
        return handler
