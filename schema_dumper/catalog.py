"""
Catalog of dumpable objects in a MySQL database.
"""

import logging
from collections import defaultdict
from typing import Protocol

from mysql.connector import Error as MySQLError
from mysql.connector import errorcode

from .connection import DatabaseConnection
from .models import CatalogObject, Category, ObjectKind


SYSTEM_SCHEMAS = frozenset({'mysql', 'sys', 'information_schema', 'performance_schema'})


class Catalog(Protocol):
    """What the enumerator needs from a catalog."""

    def database(self) -> CatalogObject: ...

    def objects(self, category: Category) -> list[CatalogObject]: ...


class MySQLCatalog:
    """Lists the objects of one database from information_schema."""

    def __init__(self, connection: DatabaseConnection, database: str):
        self.connection = connection
        self.database_name = database
        self._loaders = {
            Category.TABLES: self._tables,
            Category.VIEWS: self._views,
            Category.STORED_PROCEDURES: lambda: self._routines('PROCEDURE', ObjectKind.PROCEDURE),
            Category.USER_DEFINED_FUNCTIONS: lambda: self._routines('FUNCTION', ObjectKind.FUNCTION),
            Category.ROLES: self._roles,
            Category.SEQUENCES: self._sequences,
        }

    def database(self) -> CatalogObject:
        return CatalogObject(kind=ObjectKind.DATABASE, name=self.database_name)

    def objects(self, category: Category) -> list[CatalogObject]:
        loader = self._loaders.get(category)
        if loader is None:
            logging.debug(f"{category.value} are not supported by MySQL, nothing to enumerate")
            return []
        return loader()

    def _is_system(self, schema: str) -> bool:
        return schema.lower() in SYSTEM_SCHEMAS

    def _tables(self) -> list[CatalogObject]:
        triggers = self._triggers_by_table()
        rows = self.connection.execute_query(
            "SELECT TABLE_SCHEMA, TABLE_NAME FROM information_schema.TABLES "
            "WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'BASE TABLE' "
            "ORDER BY TABLE_NAME",
            (self.database_name,)
        )
        return [
            CatalogObject(
                kind=ObjectKind.TABLE,
                name=name,
                schema=schema,
                is_system=self._is_system(schema),
                triggers=tuple(triggers.get(name, ())),
            )
            for schema, name in rows
        ]

    def _triggers_by_table(self) -> dict[str, list[CatalogObject]]:
        rows = self.connection.execute_query(
            "SELECT TRIGGER_SCHEMA, TRIGGER_NAME, EVENT_OBJECT_TABLE FROM information_schema.TRIGGERS "
            "WHERE TRIGGER_SCHEMA = %s "
            "ORDER BY EVENT_OBJECT_TABLE, ACTION_TIMING, EVENT_MANIPULATION, ACTION_ORDER",
            (self.database_name,)
        )
        by_table: dict[str, list[CatalogObject]] = defaultdict(list)
        for schema, name, table in rows:
            by_table[table].append(
                CatalogObject(kind=ObjectKind.TRIGGER, name=name, schema=schema)
            )
        return by_table

    def _views(self) -> list[CatalogObject]:
        rows = self.connection.execute_query(
            "SELECT TABLE_SCHEMA, TABLE_NAME FROM information_schema.VIEWS "
            "WHERE TABLE_SCHEMA = %s ORDER BY TABLE_NAME",
            (self.database_name,)
        )
        return [
            CatalogObject(kind=ObjectKind.VIEW, name=name, schema=schema, is_system=self._is_system(schema))
            for schema, name in rows
        ]

    def _routines(self, routine_type: str, kind: ObjectKind) -> list[CatalogObject]:
        rows = self.connection.execute_query(
            "SELECT ROUTINE_SCHEMA, ROUTINE_NAME FROM information_schema.ROUTINES "
            "WHERE ROUTINE_SCHEMA = %s AND ROUTINE_TYPE = %s ORDER BY ROUTINE_NAME",
            (self.database_name, routine_type)
        )
        return [
            CatalogObject(kind=kind, name=name, schema=schema, is_system=self._is_system(schema))
            for schema, name in rows
        ]

    def _sequences(self) -> list[CatalogObject]:
        # MariaDB only, MySQL never reports this table type
        rows = self.connection.execute_query(
            "SELECT TABLE_SCHEMA, TABLE_NAME FROM information_schema.TABLES "
            "WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'SEQUENCE' ORDER BY TABLE_NAME",
            (self.database_name,)
        )
        return [
            CatalogObject(kind=ObjectKind.SEQUENCE, name=name, schema=schema)
            for schema, name in rows
        ]

    def _roles(self) -> list[CatalogObject]:
        """Roles are locked accounts without credentials.

        Reading mysql.user needs a privilege ordinary dump users often lack;
        in that case there is nothing to dump rather than a failed run.
        """
        try:
            rows = self.connection.execute_query(
                "SELECT User, Host FROM mysql.user "
                "WHERE account_locked = 'Y' AND password_expired = 'Y' "
                "AND authentication_string = '' ORDER BY User, Host"
            )
        except MySQLError as e:
            if e.errno in (errorcode.ER_TABLEACCESS_DENIED_ERROR, errorcode.ER_DBACCESS_DENIED_ERROR):
                logging.warning(f"Cannot read roles, skipping: {e}")
                return []
            raise

        return [
            CatalogObject(
                kind=ObjectKind.ROLE,
                name=user,
                host=host,
                is_fixed_role=user.startswith('mysql.'),
            )
            for user, host in rows
        ]
