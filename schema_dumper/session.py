"""
Per-worker database sessions for MySQL Schema Dumper.

mysql-connector connections must not be shared between threads, so every
category dump opens its own session.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Iterator

from .catalog import Catalog, MySQLCatalog
from .connection import DatabaseConnection
from .scripter import MySQLScripter, Scripter


@dataclass
class DumpSession:
    """A catalog and a scripter bound to the same connection."""
    catalog: Catalog
    scripter: Scripter


SessionFactory = Callable[[], ContextManager[DumpSession]]


@contextmanager
def mysql_session(instance_settings: dict[str, Any], database: str) -> Iterator[DumpSession]:
    """Open a connection to the database and yield a session on it."""
    with DatabaseConnection(
        host=instance_settings['host'],
        port=instance_settings.get('port', DatabaseConnection.DEFAULT_PORT),
        user=instance_settings.get('user', ''),
        password=instance_settings.get('password', ''),
        database=database
    ) as conn:
        yield DumpSession(catalog=MySQLCatalog(conn, database), scripter=MySQLScripter(conn))


def mysql_session_factory(instance_settings: dict[str, Any], database: str) -> SessionFactory:
    return lambda: mysql_session(instance_settings, database)
