"""
Category enumeration for MySQL Schema Dumper.
"""

import logging

from .catalog import Catalog
from .models import TRIGGER_EXTENSION, CatalogObject, Category, ObjectDescriptor
from .run_state import RunState


class CategoryEnumerator:
    """Builds the descriptors for one category and counts them in the run state."""

    def __init__(self, catalog: Catalog, run_state: RunState, database_name: str):
        self.catalog = catalog
        self.run_state = run_state
        self.database_name = database_name

    def enumerate(self, category: Category) -> list[ObjectDescriptor]:
        """Return the descriptors to dump for a category, in dump order.

        Tables start with the database settings, and every table is followed
        by the triggers defined on it. Enumeration stops early once the run
        is cancelled.
        """
        descriptors: list[ObjectDescriptor] = []

        if category is Category.TABLES:
            self._add(descriptors, ObjectDescriptor.for_database_settings(
                self.catalog.database(), self.database_name
            ))

        for obj in self.catalog.objects(category):
            if self.run_state.cancelled:
                break

            if self._is_excluded(category, obj):
                logging.debug(f"Skipping system object {obj.name}")
                continue

            logging.info(f"Enumerating {category.value} {obj.name}")
            self._add(descriptors, ObjectDescriptor(
                handle=obj,
                schema=obj.schema,
                name=self._role_name(obj) if category is Category.ROLES else obj.name,
                extension=category.extension,
            ))

            if category is Category.TABLES:
                self._add_triggers(descriptors, obj)

        return descriptors

    def _add_triggers(self, descriptors: list[ObjectDescriptor], table: CatalogObject) -> None:
        for trigger in table.triggers:
            if self.run_state.cancelled:
                return

            logging.info(f"Enumerating trigger {trigger.name}")
            # dbo.MyTable-MyTrigger.TRIG sorts next to dbo.MyTable.TAB
            self._add(descriptors, ObjectDescriptor(
                handle=trigger,
                schema=table.schema,
                name=f"{table.name}-{trigger.name}",
                extension=TRIGGER_EXTENSION,
            ))

    def _add(self, descriptors: list[ObjectDescriptor], descriptor: ObjectDescriptor) -> None:
        self.run_state.record_enumerated()
        descriptors.append(descriptor)

    @staticmethod
    def _is_excluded(category: Category, obj: CatalogObject) -> bool:
        if not category.filters_system_objects:
            return False
        if category is Category.ROLES:
            return obj.is_fixed_role
        return obj.is_system

    @staticmethod
    def _role_name(obj: CatalogObject) -> str:
        if obj.host and obj.host != '%':
            return f"{obj.name}@{obj.host}"
        return obj.name
