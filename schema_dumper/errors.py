"""
Exception types for MySQL Schema Dumper.

Anything derived from ScriptingFailedError is local to one object and the run
carries on. Every other exception raised while dumping aborts the whole run.
"""

from pathlib import Path
from typing import Union


class DumpError(Exception):
    """Base class for dumper errors."""


class OutputFileExistsError(DumpError):
    """The target file is already on disk and replacing was not allowed."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"File already exists: {self.path}")


class DatabaseNotFoundError(DumpError):
    """The requested database does not exist on the instance."""

    def __init__(self, database: str, instance: str = ""):
        self.database = database
        self.instance = instance
        where = f" on '{instance}'" if instance else ""
        super().__init__(f"Database '{database}' not found{where}")


class ScriptingFailedError(DumpError):
    """An object could not be scripted (permissions, hidden body, dropped mid-run)."""

    def __init__(self, object_name: str, reason: str):
        self.object_name = object_name
        self.reason = reason
        super().__init__(f"Failed to script {object_name}: {reason}")
