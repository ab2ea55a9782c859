"""
Unit tests for connection.py
"""

from unittest import mock

import pytest
from mysql.connector import Error as MySQLError
from mysql.connector import errorcode

from schema_dumper.connection import DatabaseConnection
from schema_dumper.errors import DatabaseNotFoundError


def make_connection(database="sales") -> DatabaseConnection:
    return DatabaseConnection(
        host="localhost",
        port=3306,
        user="root",
        password="secret",
        database=database
    )


class TestDatabaseConnection:
    """Tests for DatabaseConnection class."""

    def test_init(self):
        """Test connection initialization."""
        conn = make_connection()
        assert conn.host == "localhost"
        assert conn.port == 3306
        assert conn.user == "root"
        assert conn.password == "secret"
        assert conn.database == "sales"
        assert conn.connection is None

    def test_default_constants(self):
        """Test default constants."""
        assert DatabaseConnection.DEFAULT_PORT == 3306
        assert DatabaseConnection.DEFAULT_CHARSET == 'utf8mb4'

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_connect(self, mock_connect):
        """Test database connection establishment."""
        mock_connection = mock.MagicMock()
        mock_connect.return_value = mock_connection

        conn = make_connection()
        conn.connect()

        mock_connect.assert_called_once_with(
            host="localhost",
            port=3306,
            user="root",
            password="secret",
            database="sales",
            charset='utf8mb4',
            use_unicode=True
        )
        assert conn.connection == mock_connection

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_connect_unknown_database(self, mock_connect):
        """Test an unknown database raises DatabaseNotFoundError."""
        mock_connect.side_effect = MySQLError("Unknown database 'sales'", errno=errorcode.ER_BAD_DB_ERROR)

        with pytest.raises(DatabaseNotFoundError) as exc_info:
            make_connection().connect()

        assert exc_info.value.database == "sales"
        assert "localhost:3306" in str(exc_info.value)

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_connect_error(self, mock_connect):
        """Test other connection errors propagate unchanged."""
        mock_connect.side_effect = MySQLError("Access denied", errno=errorcode.ER_ACCESS_DENIED_ERROR)

        with pytest.raises(MySQLError) as exc_info:
            make_connection().connect()

        assert not isinstance(exc_info.value, DatabaseNotFoundError)

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_disconnect(self, mock_connect):
        """Test database disconnection."""
        mock_connection = mock.MagicMock()
        mock_connection.is_connected.return_value = True
        mock_connect.return_value = mock_connection

        conn = make_connection()
        conn.connect()
        conn.disconnect()

        mock_connection.close.assert_called_once()

    def test_disconnect_not_connected(self):
        """Test disconnect when not connected."""
        # Should not raise any errors
        make_connection().disconnect()

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_context_manager(self, mock_connect):
        """Test context manager usage."""
        mock_connection = mock.MagicMock()
        mock_connection.is_connected.return_value = True
        mock_connect.return_value = mock_connection

        with make_connection() as conn:
            assert conn.connection == mock_connection

        mock_connection.close.assert_called_once()

    @mock.patch('schema_dumper.connection.mysql.connector.connect')
    def test_context_manager_closes_on_error(self, mock_connect):
        """Test the connection is closed when the body raises."""
        mock_connection = mock.MagicMock()
        mock_connection.is_connected.return_value = True
        mock_connect.return_value = mock_connection

        with pytest.raises(RuntimeError):
            with make_connection():
                raise RuntimeError("boom")

        mock_connection.close.assert_called_once()


class TestQueries:
    """Tests for query helpers."""

    @pytest.fixture
    def mock_cursor(self):
        """Cursor returned by the mocked connection."""
        return mock.MagicMock()

    @pytest.fixture
    def conn(self, mock_cursor):
        """Connection wired to a mocked mysql connection."""
        conn = make_connection()
        conn.connection = mock.MagicMock()
        conn.connection.cursor.return_value = mock_cursor
        return conn

    def test_execute_query(self, conn, mock_cursor):
        """Test query execution."""
        mock_cursor.fetchall.return_value = [("row1",), ("row2",)]

        result = conn.execute_query("SELECT * FROM test")

        assert result == [("row1",), ("row2",)]
        mock_cursor.execute.assert_called_once_with("SELECT * FROM test", None)
        mock_cursor.close.assert_called_once()

    def test_execute_query_with_params(self, conn, mock_cursor):
        """Test query execution with parameters."""
        mock_cursor.fetchall.return_value = [("row1",)]

        conn.execute_query("SELECT * FROM test WHERE id = %s", (1,))

        mock_cursor.execute.assert_called_once_with("SELECT * FROM test WHERE id = %s", (1,))

    def test_execute_query_closes_cursor_on_error(self, conn, mock_cursor):
        """Test the cursor is closed when the query fails."""
        mock_cursor.execute.side_effect = MySQLError("syntax error")

        with pytest.raises(MySQLError):
            conn.execute_query("SELEC 1")

        mock_cursor.close.assert_called_once()

    def test_fetch_row(self, conn, mock_cursor):
        """Test the first row is returned as a dictionary."""
        mock_cursor.fetchall.return_value = [{"View": "v", "Create View": "CREATE VIEW v AS SELECT 1"}]

        row = conn.fetch_row("SHOW CREATE VIEW `v`")

        conn.connection.cursor.assert_called_once_with(dictionary=True)
        assert row["Create View"] == "CREATE VIEW v AS SELECT 1"
        mock_cursor.close.assert_called_once()

    def test_fetch_row_empty(self, conn, mock_cursor):
        """Test None is returned when nothing matches."""
        mock_cursor.fetchall.return_value = []
        assert conn.fetch_row("SHOW GRANTS FOR %s@%s", ("r", "%")) is None
        mock_cursor.execute.assert_called_once_with("SHOW GRANTS FOR %s@%s", ("r", "%"))
