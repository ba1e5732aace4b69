"""
Test suite for persistent data handlers
Following TDD approach with AAA pattern and descriptive naming
"""

import tempfile
from pathlib import Path

import pytest

from graph_sdk.persistent_data import (
    DuckDBPersistentDataHandler, MemoryPersistentDataHandler, PersistentDataInterface
)


class TestMemoryPersistentDataHandler:
    """Test suite for MemoryPersistentDataHandler"""

    def test_set_then_get_returns_value(self):
        # Arrange
        handler = MemoryPersistentDataHandler()

        # Act
        handler.set('state', 'foo_state')

        # Assert
        assert handler.get('state') == 'foo_state'

    def test_missing_key_returns_none(self):
        # Act & Assert
        assert MemoryPersistentDataHandler().get('state') is None

    def test_clear_removes_value(self):
        # Arrange
        handler = MemoryPersistentDataHandler()
        handler.set('state', 'foo_state')

        # Act
        handler.clear('state')
        handler.clear('never_set')

        # Assert
        assert handler.get('state') is None


class TestDuckDBPersistentDataHandler:
    """Test suite for DuckDBPersistentDataHandler"""

    def setup_method(self):
        self.handler = DuckDBPersistentDataHandler()

    def teardown_method(self):
        self.handler.close_connection()

    def test_set_then_get_returns_value(self):
        # Act
        self.handler.set('state', 'foo_state')

        # Assert
        assert self.handler.get('state') == 'foo_state'

    def test_set_overwrites_existing_value(self):
        # Act
        self.handler.set('state', 'first')
        self.handler.set('state', 'second')

        # Assert
        assert self.handler.get('state') == 'second'

    def test_structured_values_round_trip_as_json(self):
        # Act
        self.handler.set('session', {'user_id': '123', 'scopes': ['email']})

        # Assert
        assert self.handler.get('session') == {'user_id': '123', 'scopes': ['email']}

    def test_clear_removes_value(self):
        # Arrange
        self.handler.set('state', 'foo_state')

        # Act
        self.handler.clear('state')

        # Assert
        assert self.handler.get('state') is None

    def test_values_survive_reconnect_to_database_file(self):
        """
        Test that state written through one handler is visible to a new handler on the same file
        """
        # Arrange
        with tempfile.TemporaryDirectory() as temp_dir:
            database_path = str(Path(temp_dir) / 'session.duckdb')
            writer = DuckDBPersistentDataHandler(database_path)
            writer.set('state', 'foo_state')
            writer.close_connection()

            # Act
            reader = DuckDBPersistentDataHandler(database_path)
            value = reader.get('state')
            reader.close_connection()

        # Assert
        assert value == 'foo_state'

    @pytest.mark.parametrize('handler_class', [MemoryPersistentDataHandler, DuckDBPersistentDataHandler])
    def test_handlers_satisfy_interface(self, handler_class):
        # Act & Assert
        assert isinstance(handler_class(), PersistentDataInterface)
