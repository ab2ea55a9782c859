"""
Unit tests for utils.py
"""

import logging
import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from schema_dumper.models import Category, DumpConfig, ObjectDescriptor, RunSummary, ScriptProfile
from schema_dumper.utils import (
    describe_config,
    ensure_output_directory,
    format_summary,
    print_dry_run_info,
    setup_logging,
    write_error_report,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Reset logging configuration before each test."""
        root_logger = logging.getLogger()
        # Remove all handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        # Reset level to NOTSET so basicConfig will work
        root_logger.setLevel(logging.NOTSET)
        yield
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)

    def test_default_log_level(self):
        """Test default log level is INFO."""
        setup_logging({})
        assert logging.getLogger().level == logging.INFO

    def test_custom_log_level(self):
        """Test setting custom log level."""
        setup_logging({"level": "DEBUG"})
        assert logging.getLogger().level == logging.DEBUG

    def test_log_level_case_insensitive(self):
        """Test log level is case insensitive."""
        setup_logging({"level": "warning"})
        assert logging.getLogger().level == logging.WARNING

    def test_log_to_file(self):
        """Test logging to a file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "test.log"
            setup_logging({"file": str(log_file)})

            logging.info("Scripting dbo.Orders.TAB")

            assert log_file.exists()
            assert "Scripting dbo.Orders.TAB" in log_file.read_text(encoding="utf-8")

    def test_thread_name_in_format(self):
        """Test records carry the thread that logged them."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "test.log"
            setup_logging({"file": str(log_file)})

            logging.info("hello")

            assert "[MainThread] hello" in log_file.read_text(encoding="utf-8")

    def test_replaces_existing_handlers(self):
        """Test configuration applies when the root logger already has handlers."""
        existing = logging.NullHandler()
        logging.getLogger().addHandler(existing)

        setup_logging({"level": "ERROR"})

        root_logger = logging.getLogger()
        assert root_logger.level == logging.ERROR
        assert existing not in root_logger.handlers

    def test_reconfigure(self):
        """Test a second call changes the level."""
        setup_logging({"level": "INFO"})
        setup_logging({"level": "DEBUG"})
        assert logging.getLogger().level == logging.DEBUG

    def test_creates_log_directory(self):
        """Test that log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "nested" / "dir" / "test.log"
            setup_logging({"file": str(log_file)})

            # Directory should be created
            assert log_file.parent.exists()


class TestEnsureOutputDirectory:
    """Tests for ensure_output_directory function."""

    def test_creates_nested(self, tmp_path):
        """Test missing directories are created."""
        target = tmp_path / "a" / "b"
        assert ensure_output_directory(str(target)) == target
        assert target.is_dir()

    def test_existing(self, tmp_path):
        """Test an existing directory is accepted."""
        assert ensure_output_directory(tmp_path) == tmp_path


class TestWriteErrorReport:
    """Tests for write_error_report function."""

    def test_report_contents(self, tmp_path):
        """Test header, blank line, then sorted names."""
        path = write_error_report(
            tmp_path / "Sales-Errors.TXT",
            "Sales",
            ["dbo.v2.VIW", "dbo.a.TAB", "Role.ROLE"],
            generated=datetime(2024, 3, 1, 14, 5, 9),
        )

        assert path.read_text(encoding="utf-8") == (
            "Objects with errors in Sales 2024-03-01 14:05:09:\n"
            "\n"
            "Role.ROLE\n"
            "dbo.a.TAB\n"
            "dbo.v2.VIW\n"
        )

    def test_overwrites_previous_report(self, tmp_path):
        """Test a report from an earlier run is replaced."""
        path = tmp_path / "Sales-Errors.TXT"
        path.write_text("old report\n")

        write_error_report(path, "Sales", ["dbo.a.TAB"])

        assert "old report" not in path.read_text(encoding="utf-8")


class TestFormatSummary:
    """Tests for format_summary function."""

    def test_summary_lines(self):
        """Test the counters and elapsed time."""
        summary = RunSummary(found=20, written=18, errors=["a", "b"], remaining=0, elapsed_seconds=3.14159)
        assert format_summary(summary) == [
            "Items found: 20, files written: 18, errors: 2, remaining: 0",
            "Execution Time: 3.1 secs",
        ]


class TestDescribeConfig:
    """Tests for describe_config function."""

    def test_defaults(self):
        """Test a default configuration."""
        config = DumpConfig(instance="primary", database="Sales", output_directory="/out")
        assert describe_config(config) == [
            "Dumping 'Sales' from 'primary' into '/out'",
            "Parallel processing, up to 8 categories at once",
            "Scripting profile: normal",
        ]

    def test_all_flags(self):
        """Test every option is described."""
        config = DumpConfig(
            instance="primary", database="Sales", output_directory="/out",
            single_thread=True, replace_existing=True, skip_errors=True,
            extended_properties=True, with_dependencies=True, profile=ScriptProfile.FULL
        )
        lines = describe_config(config)
        assert "Single thread processing" in lines
        assert "Replacing existing files" in lines
        assert "Skipping errors without writing placeholder files" in lines
        assert "Including extended properties" in lines
        assert "Including dependencies" in lines
        assert lines[-1] == "Scripting profile: full"


class TestPrintDryRunInfo:
    """Tests for print_dry_run_info function."""

    @pytest.fixture(autouse=True)
    def setup_logging(self):
        """Setup logging for tests."""
        logging.basicConfig(level=logging.INFO)

    def test_lists_objects(self, caplog, tmp_path):
        """Test every planned file is listed per category."""
        config = DumpConfig(instance="primary", database="Sales", output_directory=tmp_path)
        plan = {
            Category.TABLES: [ObjectDescriptor(handle=None, schema="dbo", name="Orders", extension="TAB")],
            Category.VIEWS: [],
        }

        with caplog.at_level(logging.INFO):
            print_dry_run_info(config, plan)

        assert "Dumping 'Sales' from 'primary'" in caplog.text
        assert "Tables: 1 object(s)" in caplog.text
        assert "- dbo.Orders.TAB" in caplog.text
        assert "Views: 0 object(s)" in caplog.text
        assert "(exists)" not in caplog.text

    def test_marks_existing_files(self, caplog, tmp_path):
        """Test files already on disk are flagged."""
        (tmp_path / "dbo.Orders.TAB").write_text("")
        config = DumpConfig(instance="primary", database="Sales", output_directory=tmp_path)
        plan = {Category.TABLES: [ObjectDescriptor(handle=None, schema="dbo", name="Orders", extension="TAB")]}

        with caplog.at_level(logging.INFO):
            print_dry_run_info(config, plan)

        assert "- dbo.Orders.TAB (exists)" in caplog.text
