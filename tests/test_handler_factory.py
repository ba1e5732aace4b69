"""
Test suite for HandlerFactory slot resolution
Following TDD approach with AAA pattern and descriptive naming
"""

from unittest.mock import patch

import pytest

from fake_graph_api import FooHttpClient, FooPersistentDataHandler, FooUrlDetectionHandler
from graph_sdk.exceptions import ConfigurationError
from graph_sdk.handler_factory import HandlerFactory
from graph_sdk.http_clients import HttpxHttpClient, RequestsHttpClient
from graph_sdk.persistent_data import DuckDBPersistentDataHandler, MemoryPersistentDataHandler
from graph_sdk.url_detection import UrlDetectionHandler


class TestHandlerFactory:
    """Test suite for the three pluggable handler slots"""

    @pytest.mark.parametrize('name, expected', [
        ('requests', RequestsHttpClient),
        ('httpx', HttpxHttpClient)
    ])
    def test_http_client_names_resolve_to_transports(self, name, expected):
        # Act & Assert
        assert isinstance(HandlerFactory.create_http_client(name), expected)

    def test_default_http_client_prefers_requests(self):
        # Act & Assert
        assert isinstance(HandlerFactory.create_http_client(), RequestsHttpClient)

    def test_default_http_client_falls_back_to_httpx(self):
        # Arrange
        def find_spec(name):
            return None if name == 'requests' else object()

        # Act
        with patch('importlib.util.find_spec', side_effect=find_spec):
            name = HandlerFactory.detect_default_http_client()

        # Assert
        assert name == 'httpx'

    def test_no_transport_library_raises_configuration_error(self):
        # Act & Assert
        with patch('importlib.util.find_spec', return_value=None):
            with pytest.raises(ConfigurationError) as exc_info:
                HandlerFactory.detect_default_http_client()

        assert exc_info.value.slot == 'http_client_handler'

    def test_unknown_name_error_lists_allowed_names(self):
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            HandlerFactory.create_http_client('foo')

        message = str(exc_info.value)
        assert "'requests'" in message
        assert "'httpx'" in message
        assert "'foo'" in message
        assert exc_info.value.slot == 'http_client_handler'
        assert exc_info.value.value == 'foo'

    def test_object_without_interface_is_rejected(self):
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            HandlerFactory.create_persistent_data_handler(object())

        assert 'PersistentDataInterface' in str(exc_info.value)

    def test_handler_class_instead_of_instance_is_rejected(self):
        # Act & Assert
        with pytest.raises(ConfigurationError):
            HandlerFactory.create_http_client(FooHttpClient)

    def test_injected_handlers_are_used_as_is(self):
        # Arrange
        http_client = FooHttpClient()
        persistent_data = FooPersistentDataHandler()
        url_detection = FooUrlDetectionHandler()

        # Act & Assert
        assert HandlerFactory.create_http_client(http_client) is http_client
        assert HandlerFactory.create_persistent_data_handler(persistent_data) is persistent_data
        assert HandlerFactory.create_url_detection_handler(url_detection) is url_detection

    def test_persistent_data_defaults_to_memory(self):
        # Act & Assert
        assert isinstance(HandlerFactory.create_persistent_data_handler(), MemoryPersistentDataHandler)

    def test_duckdb_handler_receives_database_path(self):
        # Act
        handler = HandlerFactory.create_persistent_data_handler('duckdb', 'session.duckdb')

        # Assert
        assert isinstance(handler, DuckDBPersistentDataHandler)
        assert handler.database_path == 'session.duckdb'

    def test_url_detection_defaults_to_environment_handler(self):
        # Act & Assert
        assert isinstance(HandlerFactory.create_url_detection_handler(), UrlDetectionHandler)
