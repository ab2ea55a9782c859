"""
Utility functions for MySQL Schema Dumper.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from .models import Category, DumpConfig, ObjectDescriptor, RunSummary


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration.

    Replaces any handlers already on the root logger. Handlers write one
    record at a time under their own lock, so lines from concurrent dump
    threads never interleave.
    """
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s',
        handlers=handlers,
        force=True
    )


def ensure_output_directory(path: Union[str, Path]) -> Path:
    """Create the output directory if needed and return it."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_error_report(
    path: Path,
    database: str,
    error_names: list[str],
    generated: Optional[datetime] = None
) -> Path:
    """Write the sorted list of objects that failed to script."""
    generated = generated or datetime.now()

    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(f"Objects with errors in {database} {generated:%Y-%m-%d %H:%M:%S}:\n")
        f.write("\n")
        for name in sorted(error_names):
            f.write(f"{name}\n")

    return path


def format_summary(summary: RunSummary) -> list[str]:
    """Format the end-of-run summary lines."""
    return [
        f"Items found: {summary.found}, files written: {summary.written}, "
        f"errors: {len(summary.errors)}, remaining: {summary.remaining}",
        f"Execution Time: {summary.elapsed_seconds:.1f} secs",
    ]


def describe_config(config: DumpConfig) -> list[str]:
    """Describe the settings a run will use."""
    lines = [f"Dumping '{config.database}' from '{config.instance}' into '{config.output_directory}'"]
    if config.runs_sequentially:
        lines.append("Single thread processing")
    else:
        lines.append(f"Parallel processing, up to {config.max_parallel} categories at once")
    if config.replace_existing:
        lines.append("Replacing existing files")
    if config.skip_errors:
        lines.append("Skipping errors without writing placeholder files")
    if config.extended_properties:
        lines.append("Including extended properties")
    if config.with_dependencies:
        lines.append("Including dependencies")
    lines.append(f"Scripting profile: {config.profile.value}")
    return lines


def print_dry_run_info(config: DumpConfig, plan: dict[Category, list[ObjectDescriptor]]) -> None:
    """Print information about what would be dumped in dry-run mode."""
    for line in describe_config(config):
        logging.info(line)

    for category, descriptors in plan.items():
        logging.info(f"{category.value}: {len(descriptors)} object(s)")
        for descriptor in descriptors:
            target = config.output_path(descriptor.full_name)
            exists = " (exists)" if target.exists() else ""
            logging.info(f"  - {descriptor.full_name}{exists}")
