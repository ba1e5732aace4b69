"""
Persistent key/value storage handlers for login session state
"""

import json
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import duckdb


@runtime_checkable
class PersistentDataInterface(Protocol):
    """Protocol every persistent data handler must satisfy"""

    def get(self, key: str) -> Any:
        """Return the stored value, or None when absent"""
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def clear(self, key: str) -> None:
        ...


class MemoryPersistentDataHandler:
    """Keeps values in a dict for the lifetime of the handler"""

    def __init__(self):
        self._session_data: Dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._session_data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._session_data[key] = value

    def clear(self, key: str) -> None:
        self._session_data.pop(key, None)


class DuckDBPersistentDataHandler:
    """Stores values as JSON in a DuckDB key/value table"""

    KEY_PREFIX = 'GRAPH_SDK_'

    def __init__(self, database_path: str = ':memory:'):
        self.database_path = database_path
        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Open the connection and create the table on first use"""
        if self._connection is None:
            self._connection = duckdb.connect(self.database_path)
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS persistent_data (
                    key VARCHAR PRIMARY KEY,
                    value VARCHAR
                )
            """)
        return self._connection

    def get(self, key: str) -> Any:
        result = self.connect().execute(
            "SELECT value FROM persistent_data WHERE key = ?",
            (self.KEY_PREFIX + key,)
        )
        row = result.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        upsert_sql = """
        INSERT INTO persistent_data (key, value) VALUES (?, ?)
        ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
        """
        self.connect().execute(upsert_sql, (self.KEY_PREFIX + key, json.dumps(value)))

    def clear(self, key: str) -> None:
        self.connect().execute(
            "DELETE FROM persistent_data WHERE key = ?",
            (self.KEY_PREFIX + key,)
        )

    def close_connection(self) -> None:
        if self._connection:
            self._connection.close()
            self._connection = None
