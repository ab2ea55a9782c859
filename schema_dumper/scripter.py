"""
DDL scripting of MySQL objects for MySQL Schema Dumper.
"""

import logging
import re
from typing import Callable, Optional, Protocol

from mysql.connector import Error as MySQLError
from mysql.connector import errorcode

from .connection import DatabaseConnection
from .errors import ScriptingFailedError
from .models import CatalogObject, ObjectKind, ScriptingOptions


# Server errors that mean "this one object cannot be scripted", not "the run is broken"
NOT_SCRIPTABLE_ERRORS = frozenset({
    errorcode.ER_TABLEACCESS_DENIED_ERROR,
    errorcode.ER_COLUMNACCESS_DENIED_ERROR,
    errorcode.ER_SPECIFIC_ACCESS_DENIED_ERROR,
    errorcode.ER_DBACCESS_DENIED_ERROR,
    errorcode.ER_PROCACCESS_DENIED_ERROR,
    errorcode.ER_NONEXISTING_GRANT,
    errorcode.ER_NO_SUCH_TABLE,
    errorcode.ER_SP_DOES_NOT_EXIST,
    errorcode.ER_TRG_DOES_NOT_EXIST,
})

AUTO_INCREMENT_PATTERN = re.compile(r' AUTO_INCREMENT=\d+')
DEFINER_PATTERN = re.compile(r' ?DEFINER=`(?:[^`]|``)*`@`(?:[^`]|``)*`')


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def quote_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"


class Scripter(Protocol):
    """What the dump worker needs from a scripter."""

    def script(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]: ...


class MySQLScripter:
    """Turns catalog objects into ordered lists of DDL statements."""

    def __init__(self, connection: DatabaseConnection):
        self.connection = connection
        self._scripters: dict[ObjectKind, Callable[[CatalogObject, ScriptingOptions], list[str]]] = {
            ObjectKind.DATABASE: self._script_database,
            ObjectKind.TABLE: self._script_table,
            ObjectKind.VIEW: self._script_view,
            ObjectKind.PROCEDURE: self._script_routine,
            ObjectKind.FUNCTION: self._script_routine,
            ObjectKind.TRIGGER: self._script_trigger,
            ObjectKind.SEQUENCE: self._script_sequence,
            ObjectKind.ROLE: self._script_role,
        }

    def script(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        """Script one object.

        Raises:
            ScriptingFailedError: The object cannot be scripted by this user.
            mysql.connector.Error: Anything else went wrong on the server.
        """
        try:
            return self._scripters[handle.kind](handle, options)
        except MySQLError as e:
            if e.errno in NOT_SCRIPTABLE_ERRORS:
                raise ScriptingFailedError(self._display_name(handle), e.msg) from e
            raise

    def _display_name(self, handle: CatalogObject) -> str:
        if handle.kind is ObjectKind.ROLE:
            return f"{handle.name}@{handle.host or '%'}"
        return f"{handle.schema}.{handle.name}" if handle.schema else handle.name

    def _qualified(self, handle: CatalogObject) -> str:
        if handle.schema:
            return f"{quote_identifier(handle.schema)}.{quote_identifier(handle.name)}"
        return quote_identifier(handle.name)

    def _show_create(self, handle: CatalogObject, statement: str, column: str) -> dict:
        row = self.connection.fetch_row(statement)
        if row is None:
            raise ScriptingFailedError(self._display_name(handle), "object not found")
        if row.get(column) is None:
            # the server hides routine bodies from users without enough privileges
            raise ScriptingFailedError(self._display_name(handle), "definition is not visible to the current user")
        return row

    def _clean(self, ddl: str, options: ScriptingOptions) -> str:
        if not options.keep_auto_increment:
            ddl = AUTO_INCREMENT_PATTERN.sub('', ddl)
        if not options.keep_definer:
            ddl = DEFINER_PATTERN.sub('', ddl)
        return ddl

    def _session_context(self, row: dict) -> str:
        lines = []
        if row.get('sql_mode') is not None:
            lines.append(f"SET sql_mode = {quote_string(row['sql_mode'])};")
        if row.get('character_set_client'):
            lines.append(f"SET character_set_client = {row['character_set_client']};")
        if row.get('collation_connection'):
            lines.append(f"SET collation_connection = {row['collation_connection']};")
        return '\n'.join(lines)

    def _with_delimiter(self, body: str) -> str:
        return f"DELIMITER ;;\n{body} ;;\nDELIMITER ;"

    def _script_database(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        name = quote_identifier(handle.name)
        row = self._show_create(handle, f"SHOW CREATE DATABASE {name}", 'Create Database')
        return [f"{row['Create Database']};", f"USE {name};"]

    def _script_table(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        fragments = []
        if options.resolves_dependencies:
            fragments.extend(self._dependencies(
                handle, options,
                "SELECT DISTINCT REFERENCED_TABLE_SCHEMA, REFERENCED_TABLE_NAME "
                "FROM information_schema.KEY_COLUMN_USAGE "
                "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND REFERENCED_TABLE_NAME IS NOT NULL "
                "ORDER BY REFERENCED_TABLE_SCHEMA, REFERENCED_TABLE_NAME"
            ))

        row = self._show_create(handle, f"SHOW CREATE TABLE {self._qualified(handle)}", 'Create Table')
        if options.include_drop:
            fragments.append(f"DROP TABLE IF EXISTS {self._qualified(handle)};")
        fragments.append(f"{self._clean(row['Create Table'], options)};")
        return fragments

    def _script_view(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        fragments = []
        if options.resolves_dependencies:
            fragments.extend(self._dependencies(
                handle, options,
                "SELECT TABLE_SCHEMA, TABLE_NAME FROM information_schema.VIEW_TABLE_USAGE "
                "WHERE VIEW_SCHEMA = %s AND VIEW_NAME = %s "
                "ORDER BY TABLE_SCHEMA, TABLE_NAME"
            ))

        row = self._show_create(handle, f"SHOW CREATE VIEW {self._qualified(handle)}", 'Create View')
        if options.extended_properties and self._session_context(row):
            fragments.append(self._session_context(row))
        if options.include_drop:
            fragments.append(f"DROP VIEW IF EXISTS {self._qualified(handle)};")
        fragments.append(f"{self._clean(row['Create View'], options)};")
        return fragments

    def _script_routine(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        routine = 'PROCEDURE' if handle.kind is ObjectKind.PROCEDURE else 'FUNCTION'
        column = f"Create {routine.capitalize()}"
        row = self._show_create(handle, f"SHOW CREATE {routine} {self._qualified(handle)}", column)

        fragments = []
        if options.extended_properties and self._session_context(row):
            fragments.append(self._session_context(row))
        if options.include_drop:
            fragments.append(f"DROP {routine} IF EXISTS {self._qualified(handle)};")
        fragments.append(self._with_delimiter(self._clean(row[column], options)))
        return fragments

    def _script_trigger(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        column = 'SQL Original Statement'
        row = self._show_create(handle, f"SHOW CREATE TRIGGER {self._qualified(handle)}", column)

        fragments = []
        if options.extended_properties and self._session_context(row):
            fragments.append(self._session_context(row))
        if options.include_drop:
            fragments.append(f"DROP TRIGGER IF EXISTS {self._qualified(handle)};")
        fragments.append(self._with_delimiter(self._clean(row[column], options)))
        return fragments

    def _script_sequence(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        row = self._show_create(handle, f"SHOW CREATE SEQUENCE {self._qualified(handle)}", 'Create Table')
        fragments = []
        if options.include_drop:
            fragments.append(f"DROP SEQUENCE IF EXISTS {self._qualified(handle)};")
        fragments.append(f"{row['Create Table']};")
        return fragments

    def _script_role(self, handle: CatalogObject, options: ScriptingOptions) -> list[str]:
        account = f"{quote_string(handle.name)}@{quote_string(handle.host or '%')}"
        grants = self.connection.execute_query("SHOW GRANTS FOR %s@%s", (handle.name, handle.host or '%'))

        fragments = []
        if options.include_drop:
            fragments.append(f"DROP ROLE IF EXISTS {account};")
        fragments.append(f"CREATE ROLE IF NOT EXISTS {account};")
        fragments.extend(f"{row[0]};" for row in grants)
        return fragments

    def _dependencies(self, handle: CatalogObject, options: ScriptingOptions, query: str) -> list[str]:
        """Script the tables and views an object depends on, in name order.

        A dependency that cannot be scripted becomes a comment, the object
        itself is still scripted.
        """
        fragments = []
        try:
            rows = self.connection.execute_query(query, (handle.schema, handle.name))
        except MySQLError as e:
            logging.warning(f"Cannot resolve dependencies of {self._display_name(handle)}: {e}")
            return [f"-- Failed to resolve dependencies: {e.msg}"]

        for schema, name in rows:
            if (schema, name) == (handle.schema, handle.name):
                continue
            dependency = CatalogObject(kind=ObjectKind.TABLE, name=name, schema=schema)
            ddl = self._dependency_ddl(dependency, options)
            if ddl is None:
                fragments.append(f"-- Failed to script dependency {self._display_name(dependency)}")
            else:
                fragments.append(f"-- Dependency: {self._display_name(dependency)}\n{ddl};")
        return fragments

    def _dependency_ddl(self, dependency: CatalogObject, options: ScriptingOptions) -> Optional[str]:
        try:
            row = self.connection.fetch_row(f"SHOW CREATE TABLE {self._qualified(dependency)}")
        except MySQLError as e:
            logging.warning(f"Cannot script dependency {self._display_name(dependency)}: {e}")
            return None
        if row is None:
            return None
        # SHOW CREATE TABLE also answers for views, under a different column
        ddl = row.get('Create Table') or row.get('Create View')
        return self._clean(ddl, options) if ddl else None
