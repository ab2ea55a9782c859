"""
MySQL Schema Dumper
===================
A tool to dump every schema object of a MySQL database to its own file with:
- One file per table, trigger, view, routine, sequence and role
- Bounded parallel dumping of object categories
- Protection against overwriting existing files
- Per-object error isolation with an aggregate error report
"""

from .catalog import MySQLCatalog
from .config import ConfigLoader
from .connection import DatabaseConnection
from .database_dumper import DatabaseDumper
from .enumerator import CategoryEnumerator
from .errors import DatabaseNotFoundError, DumpError, OutputFileExistsError, ScriptingFailedError
from .main import main
from .models import (
    CatalogObject,
    Category,
    DumpConfig,
    ObjectDescriptor,
    ObjectKind,
    RunSummary,
    ScriptingOptions,
    ScriptProfile,
    WorkerState,
)
from .object_dumper import CategoryDumper
from .run_state import ErrorNameSet, RunState, SafeCounter
from .scripter import MySQLScripter
from .session import DumpSession, mysql_session, mysql_session_factory
from .utils import describe_config, format_summary, print_dry_run_info, setup_logging, write_error_report

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "CategoryDumper",
    "CategoryEnumerator",
    "ConfigLoader",
    "DatabaseConnection",
    "DatabaseDumper",
    "DumpSession",
    "MySQLCatalog",
    "MySQLScripter",
    "RunState",
    # Models
    "CatalogObject",
    "Category",
    "DumpConfig",
    "ErrorNameSet",
    "ObjectDescriptor",
    "ObjectKind",
    "RunSummary",
    "SafeCounter",
    "ScriptingOptions",
    "ScriptProfile",
    "WorkerState",
    # Errors
    "DatabaseNotFoundError",
    "DumpError",
    "OutputFileExistsError",
    "ScriptingFailedError",
    # Utilities
    "describe_config",
    "format_summary",
    "mysql_session",
    "mysql_session_factory",
    "print_dry_run_info",
    "setup_logging",
    "write_error_report",
]
