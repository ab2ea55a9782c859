"""
Database connection management for MySQL Schema Dumper.
"""

import logging
from typing import Any, Optional

import mysql.connector
from mysql.connector import Error as MySQLError
from mysql.connector import errorcode

from .errors import DatabaseNotFoundError


class DatabaseConnection:
    """Manages MySQL database connections with context manager support."""

    DEFAULT_PORT = 3306
    DEFAULT_CHARSET = 'utf8mb4'

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection.

        Raises:
            DatabaseNotFoundError: The server does not know the database.
            mysql.connector.Error: Any other connection failure.
        """
        try:
            self.connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                charset=self.DEFAULT_CHARSET,
                use_unicode=True
            )
            logging.debug(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")
        except MySQLError as e:
            if e.errno == errorcode.ER_BAD_DB_ERROR:
                raise DatabaseNotFoundError(self.database, f"{self.host}:{self.port}") from e
            logging.error(f"Failed to connect to database: {e}")
            raise

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logging.debug("Database connection closed")

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return results."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def fetch_row(self, query: str, params: Optional[tuple] = None) -> Optional[dict[str, Any]]:
        """Execute a query and return the first row keyed by column name.

        SHOW CREATE statements return a different column layout per object
        type, so callers look values up by name.
        """
        cursor = self.connection.cursor(dictionary=True)
        try:
            cursor.execute(query, params)
            rows = cursor.fetchall()
            return rows[0] if rows else None
        finally:
            cursor.close()
