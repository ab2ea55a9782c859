"""
Data models and enums for MySQL Schema Dumper.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Optional


class Category(Enum):
    """Kinds of database objects dumped as one unit of work.

    Declaration order is dispatch order: heavier categories come first so a
    sequential or unevenly balanced parallel run gets through the bulk early.
    """
    TABLES = "Tables"
    VIEWS = "Views"
    STORED_PROCEDURES = "StoredProcedures"
    USER_DEFINED_FUNCTIONS = "UserDefinedFunctions"
    SCHEMAS = "Schemas"
    ROLES = "Roles"
    DATABASE_TRIGGERS = "DatabaseTriggers"
    SEQUENCES = "Sequences"
    USER_DEFINED_DATA_TYPES = "UserDefinedDataTypes"
    USER_DEFINED_TYPES = "UserDefinedTypes"
    RULES = "Rules"
    SYNONYMS = "Synonyms"

    @property
    def extension(self) -> str:
        return _CATEGORY_EXTENSIONS[self]

    @property
    def filters_system_objects(self) -> bool:
        return self not in _UNFILTERED_CATEGORIES


_CATEGORY_EXTENSIONS = {
    Category.TABLES: "TAB",
    Category.VIEWS: "VIW",
    Category.STORED_PROCEDURES: "PRC",
    Category.USER_DEFINED_FUNCTIONS: "UDF",
    Category.SCHEMAS: "SCH",
    Category.ROLES: "ROLE",
    Category.DATABASE_TRIGGERS: "TRIG",
    Category.SEQUENCES: "SEQ",
    Category.USER_DEFINED_DATA_TYPES: "UDDT",
    Category.USER_DEFINED_TYPES: "TYPE",
    Category.RULES: "RULE",
    Category.SYNONYMS: "SYNO",
}

_UNFILTERED_CATEGORIES = frozenset({
    Category.RULES,
    Category.SEQUENCES,
    Category.USER_DEFINED_DATA_TYPES,
    Category.USER_DEFINED_TYPES,
    Category.SYNONYMS,
})

TRIGGER_EXTENSION = "TRIG"


class ObjectKind(Enum):
    """Concrete object types the scripter knows how to script."""
    DATABASE = "database"
    TABLE = "table"
    TRIGGER = "trigger"
    VIEW = "view"
    PROCEDURE = "procedure"
    FUNCTION = "function"
    ROLE = "role"
    SEQUENCE = "sequence"


class ScriptProfile(Enum):
    """How much of an object's definition gets scripted."""
    MINIMAL = "minimal"
    NORMAL = "normal"
    FULL = "full"


class WorkerState(Enum):
    """Lifecycle of a single category dump."""
    IDLE = "idle"
    ENUMERATING = "enumerating"
    PROCESSING = "processing"
    ABORTED = "aborted"
    DONE = "done"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkerState.ABORTED, WorkerState.DONE)


@dataclass(frozen=True)
class CatalogObject:
    """One raw object as reported by the catalog."""
    kind: ObjectKind
    name: str
    schema: Optional[str] = None
    is_system: bool = False
    is_fixed_role: bool = False
    host: Optional[str] = None
    triggers: tuple["CatalogObject", ...] = ()


@dataclass(frozen=True)
class ObjectDescriptor:
    """An object queued for dumping and the file it is dumped to."""
    handle: Any
    name: str
    extension: str
    schema: Optional[str] = None
    override_filename: Optional[str] = None

    SETTINGS_NAME: ClassVar[str] = "database settings"

    def __post_init__(self):
        object.__setattr__(self, 'name', self.name.replace('\\', '-'))

    @property
    def full_name(self) -> str:
        if self.override_filename is not None:
            return self.override_filename
        if self.schema is not None:
            return f"{self.schema}.{self.name}.{self.extension}"
        return f"{self.name}.{self.extension}"

    @classmethod
    def for_database_settings(cls, handle: Any, database_name: str) -> "ObjectDescriptor":
        return cls(
            handle=handle,
            name=cls.SETTINGS_NAME,
            extension="",
            override_filename=f"{database_name}-Settings.TXT",
        )


@dataclass(frozen=True)
class DumpConfig:
    """Settings for one dump run, fixed before any worker starts."""
    instance: str
    database: str
    output_directory: Path
    max_parallel: int = 8
    single_thread: bool = False
    replace_existing: bool = False
    skip_errors: bool = False
    extended_properties: bool = False
    with_dependencies: bool = False
    profile: ScriptProfile = ScriptProfile.NORMAL

    MIN_PARALLEL: ClassVar[int] = 1
    MAX_PARALLEL: ClassVar[int] = 16
    DEFAULT_PARALLEL: ClassVar[int] = 8

    def __post_init__(self):
        for key in ('instance', 'database'):
            if not str(getattr(self, key) or '').strip():
                raise ValueError(f"'{key}' is required")
        if not str(self.output_directory or '').strip():
            raise ValueError("'output_directory' is required")
        if not self.MIN_PARALLEL <= self.max_parallel <= self.MAX_PARALLEL:
            raise ValueError(
                f"max_parallel must be between {self.MIN_PARALLEL} and {self.MAX_PARALLEL}, "
                f"got {self.max_parallel}"
            )
        object.__setattr__(self, 'output_directory', Path(self.output_directory))

    @property
    def runs_sequentially(self) -> bool:
        return self.single_thread or self.max_parallel == 1

    def output_path(self, filename: str) -> Path:
        return self.output_directory / filename

    @property
    def error_report_path(self) -> Path:
        return self.output_path(f"{self.database}-Errors.TXT")


@dataclass(frozen=True)
class ScriptingOptions:
    """Options forwarded to every scripting call."""
    profile: ScriptProfile = ScriptProfile.NORMAL
    extended_properties: bool = False
    with_dependencies: bool = False

    @classmethod
    def from_config(cls, config: DumpConfig) -> "ScriptingOptions":
        return cls(
            profile=config.profile,
            extended_properties=config.extended_properties,
            with_dependencies=config.with_dependencies,
        )

    @property
    def resolves_dependencies(self) -> bool:
        return self.with_dependencies and self.profile is not ScriptProfile.MINIMAL

    @property
    def include_drop(self) -> bool:
        return self.profile is ScriptProfile.FULL

    @property
    def keep_auto_increment(self) -> bool:
        return self.profile is ScriptProfile.FULL

    @property
    def keep_definer(self) -> bool:
        return self.profile is not ScriptProfile.MINIMAL


@dataclass
class RunSummary:
    """Outcome of a completed dump run."""
    found: int = 0
    written: int = 0
    errors: list[str] = field(default_factory=list)
    remaining: int = 0
    elapsed_seconds: float = 0.0
    error_report: Optional[Path] = None
    worker_states: dict[Category, WorkerState] = field(default_factory=dict)
