#!/usr/bin/env python3
"""
MySQL Schema Dumper - CLI Entry Point
=====================================
Dumps every schema object of a database to its own file:
- One file per table, trigger, view, routine, sequence and role
- Categories dumped in parallel (up to 16 at once) or one at a time
- Refuses to overwrite existing files unless asked to
- Objects that cannot be scripted are reported without stopping the run
"""

import argparse
import logging
import os
import sys

import yaml

from .config import ConfigLoader
from .database_dumper import DatabaseDumper
from .models import DumpConfig, ScriptProfile
from .session import mysql_session_factory
from .utils import describe_config, ensure_output_directory, format_summary, print_dry_run_info, setup_logging

DEFAULT_CONFIG_PATH = 'config.yaml'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='MySQL Schema Dumper - Dump every schema object of a database to its own file'
    )
    parser.add_argument(
        '-c', '--config',
        help=f'Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)'
    )
    parser.add_argument(
        '-i', '--instance',
        help='Instance to connect to: a name under "instances" in the config, or host[:port] '
             '(or DB_INSTANCE environment variable)'
    )
    parser.add_argument(
        '-d', '--database',
        help='Database to dump (or DB_DATABASE environment variable)'
    )
    parser.add_argument(
        '-o', '--dir',
        dest='output_directory',
        help='Output directory (or DB_DIR environment variable)'
    )
    parser.add_argument(
        '-p', '--parallel',
        dest='max_parallel',
        type=int,
        help=f'Maximum parallel tasks {DumpConfig.MIN_PARALLEL}..{DumpConfig.MAX_PARALLEL} '
             f'(default: {DumpConfig.DEFAULT_PARALLEL})'
    )
    parser.add_argument(
        '-s', '--single-thread',
        action='store_true',
        default=None,
        help='Dump one category at a time'
    )
    parser.add_argument(
        '-r', '--replace',
        dest='replace_existing',
        action='store_true',
        default=None,
        help='Replace existing files (default is to stop if a file exists)'
    )
    parser.add_argument(
        '-k', '--skip-errors',
        action='store_true',
        default=None,
        help='Skip objects that cannot be scripted without writing placeholder files or an error report'
    )
    parser.add_argument(
        '-e', '--extended-properties',
        action='store_true',
        default=None,
        help='Include extended properties'
    )
    parser.add_argument(
        '-w', '--with-dependencies',
        action='store_true',
        default=None,
        help='Include dependencies'
    )
    parser.add_argument(
        '-a', '--all',
        action='store_true',
        help='Include all extras (extended properties and dependencies)'
    )
    parser.add_argument(
        '--profile',
        choices=[p.value for p in ScriptProfile],
        help='Scripting profile (default: normal)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be dumped without actually dumping'
    )
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config_path = args.config
    if config_path is None and os.path.exists(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH

    # Load configuration
    try:
        loader = ConfigLoader(config_path)
    except FileNotFoundError:
        print(f"Error: Configuration file '{config_path}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)

    # Setup logging
    log_settings = dict(loader.get_logging_settings())
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    overrides = {
        'instance': args.instance,
        'database': args.database,
        'output_directory': args.output_directory,
        'max_parallel': args.max_parallel,
        'single_thread': args.single_thread,
        'replace_existing': args.replace_existing,
        'skip_errors': args.skip_errors,
        'extended_properties': True if args.all else args.extended_properties,
        'with_dependencies': True if args.all else args.with_dependencies,
        'profile': args.profile,
    }

    try:
        config = loader.build_dump_config(overrides)
        instance_settings = loader.resolve_instance(config.instance)
    except ValueError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    dumper = DatabaseDumper(config, mysql_session_factory(instance_settings, config.database))

    # Dry run mode
    if args.dry_run:
        logging.info("DRY RUN MODE - Nothing will be written")
        try:
            print_dry_run_info(config, dumper.preview())
        except Exception as e:
            logging.error(f"Fatal error: {e}")
            sys.exit(1)
        sys.exit(0)

    for line in describe_config(config):
        logging.info(line)

    # Run dump
    try:
        ensure_output_directory(config.output_directory)
        summary = dumper.run()
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        logging.info(
            f"Items found: {dumper.run_state.max_seen.value}, "
            f"files written: {dumper.run_state.written.value}, "
            f"errors: {len(dumper.run_state.error_names)}, "
            f"remaining: {dumper.run_state.queued.value}"
        )
        sys.exit(1)

    # Print summary
    logging.info("=" * 50)
    logging.info("DUMP COMPLETE")
    for line in format_summary(summary):
        logging.info(line)

    if summary.errors:
        logging.warning(f"Errors: {len(summary.errors)}")
        for name in summary.errors:
            logging.warning(f"  - {name}")


if __name__ == '__main__':
    main()
