"""
Main dump orchestration for MySQL Schema Dumper.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Sequence

from .enumerator import CategoryEnumerator
from .models import Category, DumpConfig, ObjectDescriptor, RunSummary, ScriptingOptions, WorkerState
from .object_dumper import CategoryDumper
from .run_state import RunState
from .session import SessionFactory
from .utils import write_error_report


class DatabaseDumper:
    """Dumps every category of one database, sequentially or in parallel."""

    def __init__(
        self,
        config: DumpConfig,
        session_factory: SessionFactory,
        categories: Optional[Sequence[Category]] = None
    ):
        self.config = config
        self.session_factory = session_factory
        self.categories = list(categories) if categories is not None else list(Category)
        self.options = ScriptingOptions.from_config(config)
        self.run_state = RunState()
        self.worker_states: dict[Category, WorkerState] = {}

    @property
    def max_workers(self) -> int:
        return max(DumpConfig.MIN_PARALLEL, min(self.config.max_parallel, DumpConfig.MAX_PARALLEL))

    def run(self) -> RunSummary:
        """Run the dump.

        Raises:
            Exception: The first fatal error any category hit. Files written
                before it was detected are left on disk.
        """
        started = time.monotonic()

        if self.config.runs_sequentially:
            self._run_sequential()
        else:
            self._run_parallel()

        fatal_error = self.run_state.fatal_error
        if fatal_error is not None:
            raise fatal_error

        error_report = None
        error_names = self.run_state.error_names.sorted()
        if not self.config.skip_errors and error_names:
            error_report = write_error_report(self.config.error_report_path, self.config.database, error_names)
            logging.warning(f"{len(error_names)} object(s) failed, see {error_report}")

        return RunSummary(
            found=self.run_state.max_seen.value,
            written=self.run_state.written.value,
            errors=error_names,
            remaining=self.run_state.queued.value,
            elapsed_seconds=time.monotonic() - started,
            error_report=error_report,
            worker_states=dict(self.worker_states),
        )

    def preview(self) -> dict[Category, list[ObjectDescriptor]]:
        """Enumerate every category without scripting or writing anything."""
        plan: dict[Category, list[ObjectDescriptor]] = {}
        with self.session_factory() as session:
            enumerator = CategoryEnumerator(session.catalog, RunState(), self.config.database)
            for category in self.categories:
                plan[category] = enumerator.enumerate(category)
        return plan

    def _create_dumper(self, category: Category) -> CategoryDumper:
        return CategoryDumper(self.config, category, self.run_state, self.session_factory, self.options)

    def _run_category(self, category: Category) -> WorkerState:
        logging.info(f"Starting {category.value}...")
        state = self._create_dumper(category).run()
        logging.info(f"Finished {category.value} ({state.value}).")
        return state

    def _run_sequential(self) -> None:
        for category in self.categories:
            if self.run_state.cancelled:
                self.worker_states[category] = WorkerState.ABORTED
                continue
            self.worker_states[category] = self._run_category(category)

    def _run_parallel(self) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='dump') as executor:
            futures = {
                executor.submit(self._run_category, category): category
                for category in self.categories
            }
            for future in as_completed(futures):
                category = futures[future]
                try:
                    self.worker_states[category] = future.result()
                except Exception as e:
                    # dumpers record their own failures, this only catches what escapes them
                    self.run_state.record_fatal(e)
                    self.worker_states[category] = WorkerState.ABORTED
