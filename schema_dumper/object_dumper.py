"""
Per-category object dumping for MySQL Schema Dumper.
"""

import logging
from pathlib import Path

from .enumerator import CategoryEnumerator
from .errors import OutputFileExistsError, ScriptingFailedError
from .models import Category, DumpConfig, ObjectDescriptor, ScriptingOptions, WorkerState
from .run_state import RunState
from .scripter import Scripter
from .session import SessionFactory


class CategoryDumper:
    """Dumps every object of one category, one file per object.

    The same dumper runs on a pool thread or inline in a sequential loop;
    it only talks to other dumpers through the shared RunState.
    """

    EMPTY_SCRIPT_PLACEHOLDER = "-- No script was generated for this object"
    FAILED_SCRIPT_PLACEHOLDER = "-- Failed to script object"

    def __init__(
        self,
        config: DumpConfig,
        category: Category,
        run_state: RunState,
        session_factory: SessionFactory,
        options: ScriptingOptions
    ):
        self.config = config
        self.category = category
        self.run_state = run_state
        self.session_factory = session_factory
        self.options = options
        self.state = WorkerState.IDLE

    def run(self) -> WorkerState:
        """Dump the category and return the state the dumper ended in.

        Fatal errors are not raised from here: the first one of the run is
        recorded in the run state, which cancels every other dumper.
        """
        if self.run_state.cancelled:
            self.state = WorkerState.ABORTED
            return self.state

        try:
            self._dump_category()
        except Exception as e:
            if self.run_state.record_fatal(e):
                logging.debug(f"{self.category.value}: cancelling run after fatal error")
            self.state = WorkerState.ABORTED

        return self.state

    def _dump_category(self) -> None:
        self.state = WorkerState.ENUMERATING

        with self.session_factory() as session:
            enumerator = CategoryEnumerator(session.catalog, self.run_state, self.config.database)
            descriptors = enumerator.enumerate(self.category)
            if self.run_state.cancelled:
                self.state = WorkerState.ABORTED
                return

            logging.info(
                f"-- {self.category.value}: queue contains {self.run_state.queued.value} item(s) "
                f"out of {self.run_state.max_seen.value} --"
            )

            self.state = WorkerState.PROCESSING
            for descriptor in descriptors:
                if self.run_state.cancelled:
                    logging.debug(f"{self.category.value}: run cancelled, stopping")
                    self.state = WorkerState.ABORTED
                    return

                try:
                    self.dump_object(descriptor, session.scripter)
                except ScriptingFailedError as e:
                    self._record_failure(descriptor, e)

        self.state = WorkerState.DONE

    def dump_object(self, descriptor: ObjectDescriptor, scripter: Scripter) -> Path:
        """Script one object and write it to its file.

        Raises:
            OutputFileExistsError: The file exists and replacing is off.
            ScriptingFailedError: The object could not be scripted.
        """
        output_path = self.config.output_path(descriptor.full_name)

        logging.info(
            f"Scripting {descriptor.full_name} "
            f"({self.run_state.queued.value} of {self.run_state.max_seen.value} remaining)"
        )

        try:
            if not self.config.replace_existing and output_path.exists():
                raise OutputFileExistsError(output_path)

            fragments = scripter.script(descriptor.handle, self.options)
            self._write_fragments(output_path, fragments)
            self.run_state.record_written()
        finally:
            self.run_state.release()

        return output_path

    def _write_fragments(self, output_path: Path, fragments: list[str]) -> None:
        with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
            if not fragments:
                f.write(f"{self.EMPTY_SCRIPT_PLACEHOLDER}\n")
                return
            for fragment in fragments:
                f.write(f"{fragment}\n\n")

    def _record_failure(self, descriptor: ObjectDescriptor, error: ScriptingFailedError) -> None:
        self.run_state.error_names.add(descriptor.full_name)
        logging.warning(f"Failed to script {descriptor.full_name}: {error.reason}")

        if not self.config.skip_errors:
            output_path = self.config.output_path(descriptor.full_name)
            with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(f"{self.FAILED_SCRIPT_PLACEHOLDER}: {error.reason}\n")
